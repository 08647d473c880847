"""HTTP tests for the admin dashboard and visitor tracking."""
from datetime import datetime


def stats(client, headers):
    response = client.get("/admin-api/stats", headers=headers)
    assert response.status_code == 200, response.text
    return response.json()


class TestAccess:
    def test_requires_login(self, client):
        assert client.get("/admin-api/stats").status_code == 401

    def test_requires_superuser(self, client, alice):
        response = client.get("/admin-api/stats", headers=alice)
        assert response.status_code == 403
        assert response.json()["detail"] == "Administrator access required"


class TestDashboard:
    def test_totals(self, client, alice, admin_headers, make_set):
        make_set(alice, title="One", cards=[("a", "1"), ("b", "2")])
        make_set(alice, title="Two", cards=[("c", "3")])
        client.post("/visitors/track", json={"session_id": "session_a"})
        client.post("/visitors/track", json={"session_id": "session_b"})
        client.post("/visitors/track", json={"session_id": "session_a"})

        assert stats(client, admin_headers) == {
            "total_users": 2,
            "total_sets": 2,
            "total_flashcards": 3,
            "recent_activity": 2,
        }

    def test_deleting_set_drops_its_cards_from_totals(self, client, alice, admin_headers, make_set):
        doomed = make_set(alice, title="Doomed", cards=[("a", "1"), ("b", "2"), ("c", "3")])
        make_set(alice, title="Stays", cards=[("d", "4")])
        before = stats(client, admin_headers)

        assert client.delete(f"/admin-api/sets/{doomed}", headers=admin_headers).status_code == 204

        after = stats(client, admin_headers)
        assert before["total_flashcards"] - after["total_flashcards"] == 3
        assert before["total_sets"] - after["total_sets"] == 1
        assert client.get(f"/sets/{doomed}").status_code == 404

    def test_delete_missing_set(self, client, admin_headers):
        assert client.delete("/admin-api/sets/999", headers=admin_headers).status_code == 404

    def test_delete_single_card(self, client, alice, admin_headers, make_set):
        set_id = make_set(alice, cards=[("a", "1"), ("b", "2")])
        card_id = client.get(f"/sets/{set_id}").json()["cards"][0]["id"]

        assert client.delete(f"/admin-api/cards/{card_id}", headers=admin_headers).status_code == 204
        assert client.delete(f"/admin-api/cards/{card_id}", headers=admin_headers).status_code == 404
        assert stats(client, admin_headers)["total_flashcards"] == 1

    def test_sets_with_cards_newest_first(self, client, alice, admin_headers, make_set):
        make_set(alice, title="Older", cards=[("a", "1")])
        make_set(alice, title="Newer", tags=["x", "y"])
        body = client.get("/admin-api/sets", headers=admin_headers).json()
        assert [s["title"] for s in body] == ["Newer", "Older"]
        assert body[1]["cards"][0]["front_text"] == "a"
        assert client.get("/admin-api/tags", headers=admin_headers).json() == ["x", "y"]


class TestVisitors:
    def test_track_creates_then_refreshes(self, client):
        first = client.post("/visitors/track", json={"session_id": "session_1"}, headers={"User-Agent": "pytest"})
        assert first.status_code == 200
        assert first.json()["created"] is True

        again = client.post("/visitors/track", json={"session_id": "session_1"})
        assert again.json()["created"] is False
        assert datetime.fromisoformat(again.json()["last_activity"]) >= datetime.fromisoformat(first.json()["last_activity"])

    def test_session_id_required(self, client):
        assert client.post("/visitors/track", json={"session_id": ""}).status_code == 422
