"""Plain-text card import.

One card per line, ``front;back``. Extra fields after the second are ignored
and there is no way to escape a literal ``;`` inside a field.
"""
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

ALLOWED_EXTENSION = ".txt"


class ImportFormatError(ValueError):
    pass


@dataclass
class CandidateCard:
    front: str
    back: str


def parse_import_text(content: str) -> list[CandidateCard]:
    cards = []
    for line in content.splitlines():
        if not line.strip():
            continue
        parts = line.split(";")
        if len(parts) < 2:
            continue
        front, back = parts[0].strip(), parts[1].strip()
        if not front or not back:
            continue
        cards.append(CandidateCard(front=front, back=back))
    return cards


def parse_import_file(filename: str, raw: bytes) -> list[CandidateCard]:
    if not filename or not filename.lower().endswith(ALLOWED_EXTENSION):
        raise ImportFormatError("Please select a .txt file.")
    try:
        content = raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise ImportFormatError("Import file must be UTF-8 text.")
    cards = parse_import_text(content)
    if not cards:
        raise ImportFormatError("No flashcards found. Use the format Question;Answer on each line.")
    logger.info(f"Parsed {len(cards)} flashcards from {filename}")
    return cards
