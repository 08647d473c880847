"""HTTP tests for study sessions."""
import pytest

CARDS = [("1+1", "2"), ("2+2", "4"), ("3+3", "6"), ("4+4", "8")]


@pytest.fixture()
def math_set(alice, make_set):
    return make_set(alice, title="Arithmetic", cards=CARDS)


def start(client, set_id, mode="flip"):
    response = client.post(f"/study/{set_id}", params={"mode": mode})
    assert response.status_code == 201, response.text
    return response.json()


def act(client, session_id, action, **kwargs):
    response = client.post(f"/study/sessions/{session_id}/{action}", **kwargs)
    assert response.status_code == 200, response.text
    return response.json()


class TestStart:
    def test_flip_session_hides_back_until_flipped(self, client, math_set):
        state = start(client, math_set)
        assert state["title"] == "Arithmetic"
        assert state["mode"] == "flip"
        assert state["state"] == "reviewing"
        assert state["total_cards"] == 4
        assert state["current_index"] == 0
        assert state["score"] == 0
        assert state["progress"] == 25
        assert state["card"]["front_text"] in {front for front, _ in CARDS}
        assert state["card"]["back_text"] is None

        flipped = act(client, state["session_id"], "flip")
        assert flipped["is_flipped"] is True
        assert dict(CARDS)[flipped["card"]["front_text"]] == flipped["card"]["back_text"]

    def test_session_covers_every_card(self, client, math_set):
        state = start(client, math_set)
        seen = {state["card"]["front_text"]}
        for _ in range(3):
            state = act(client, state["session_id"], "next")
            seen.add(state["card"]["front_text"])
        assert seen == {front for front, _ in CARDS}

    def test_empty_set_reports_no_cards(self, client, alice, make_set):
        set_id = make_set(alice, title="Empty")
        response = client.post(f"/study/{set_id}")
        assert response.status_code == 409
        assert response.json()["error"] == "No Cards"

    def test_missing_set(self, client):
        assert client.post("/study/999").status_code == 404

    def test_unknown_mode(self, client, math_set):
        assert client.post(f"/study/{math_set}", params={"mode": "exam"}).status_code == 422

    def test_sessions_survive_card_deletion(self, client, alice, math_set):
        state = start(client, math_set)
        assert client.delete(f"/sets/{math_set}", headers=alice).status_code == 204
        assert client.get(f"/study/sessions/{state['session_id']}").json()["total_cards"] == 4


class TestFlipMode:
    def test_prev_at_start_and_wrap_at_end(self, client, math_set):
        state = start(client, math_set)
        session_id = state["session_id"]
        assert act(client, session_id, "prev")["current_index"] == 0
        for expected in (1, 2, 3, 0):
            assert act(client, session_id, "next")["current_index"] == expected

    def test_answer_not_allowed(self, client, math_set):
        state = start(client, math_set)
        act(client, state["session_id"], "flip")
        response = client.post(f"/study/sessions/{state['session_id']}/answer", json={"correct": True})
        assert response.status_code == 409


class TestQuizMode:
    def test_full_quiz(self, client, math_set):
        state = start(client, math_set, mode="quiz")
        session_id = state["session_id"]
        for correct in (True, False, True, True):
            assert state["state"] == "reviewing"
            act(client, session_id, "flip")
            state = act(client, session_id, "answer", json={"correct": correct})

        assert state["state"] == "results"
        assert state["score"] == 3
        assert state["percentage"] == 75
        assert state["card"] is None

        response = client.post(f"/study/sessions/{session_id}/next")
        assert response.status_code == 409

    def test_answer_requires_flip(self, client, math_set):
        state = start(client, math_set, mode="quiz")
        response = client.post(f"/study/sessions/{state['session_id']}/answer", json={"correct": True})
        assert response.status_code == 409
        assert response.json()["error"] == "Study Session Error"

    def test_restart_from_results(self, client, math_set):
        state = start(client, math_set, mode="quiz")
        session_id = state["session_id"]
        for _ in range(4):
            act(client, session_id, "flip")
            state = act(client, session_id, "answer", json={"correct": True})
        assert state["percentage"] == 100

        state = act(client, session_id, "restart")
        assert state["state"] == "reviewing"
        assert (state["current_index"], state["score"], state["is_flipped"]) == (0, 0, False)
        assert state["mode"] == "quiz"

    def test_switch_to_review_from_results(self, client, math_set):
        state = start(client, math_set, mode="quiz")
        session_id = state["session_id"]
        for _ in range(4):
            state = act(client, session_id, "next")
        assert state["state"] == "results"
        assert state["percentage"] == 0

        state = act(client, session_id, "switch-mode")
        assert state["state"] == "reviewing"
        assert state["mode"] == "flip"
        assert state["current_index"] == 3


class TestLifecycle:
    def test_end_session(self, client, math_set):
        session_id = start(client, math_set)["session_id"]
        assert client.delete(f"/study/sessions/{session_id}").status_code == 204
        assert client.get(f"/study/sessions/{session_id}").status_code == 404
        assert client.delete(f"/study/sessions/{session_id}").status_code == 404

    def test_unknown_session(self, client):
        assert client.post("/study/sessions/nope/flip").status_code == 404
