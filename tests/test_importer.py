import pytest

from importer import CandidateCard, ImportFormatError, parse_import_file, parse_import_text


def test_parses_front_back_and_drops_short_lines():
    cards = parse_import_text("2+2;4\nbonjour;hello\nbadline")
    assert cards == [
        CandidateCard(front="2+2", back="4"),
        CandidateCard(front="bonjour", back="hello"),
    ]


def test_trims_fields_and_ignores_extra_fields():
    cards = parse_import_text("  hund ;  dog  ;noun;extra\r\n")
    assert cards == [CandidateCard(front="hund", back="dog")]


def test_skips_blank_lines_and_empty_fields():
    cards = parse_import_text("\n\n   \n;answer\nquestion;\nq;a\n")
    assert cards == [CandidateCard(front="q", back="a")]


def test_no_escape_for_semicolons():
    cards = parse_import_text(r"a\;b;c")
    assert cards == [CandidateCard(front="a\\", back="b")]


def test_file_must_be_txt():
    with pytest.raises(ImportFormatError):
        parse_import_file("cards.csv", b"q;a")


def test_file_must_contain_cards():
    with pytest.raises(ImportFormatError):
        parse_import_file("cards.txt", b"nothing here\n")


def test_file_must_be_utf8():
    with pytest.raises(ImportFormatError):
        parse_import_file("cards.txt", b"\xff\xfe\xfa;x")


def test_file_with_bom():
    cards = parse_import_file("Cards.TXT", "\ufeffcafé;coffee\n".encode("utf-8"))
    assert cards == [CandidateCard(front="café", back="coffee")]
