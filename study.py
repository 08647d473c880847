"""Study session engine.

A session walks a shuffled copy of one set's cards. In flip mode the cursor
wraps around at the end; in quiz mode each card is marked right or wrong once
revealed and the last ``next()`` ends the pass in the results state.
"""
import asyncio
import logging
import math
import random
import uuid
from collections import OrderedDict
from typing import Optional

logger = logging.getLogger(__name__)

FLIP = "flip"
QUIZ = "quiz"
MODES = (FLIP, QUIZ)

REVIEWING = "reviewing"
RESULTS = "results"


class StudySessionError(Exception):
    pass


class EmptySetError(StudySessionError):
    pass


class StudySession:
    def __init__(self, cards, mode: str = FLIP, rng: Optional[random.Random] = None,
                 answer_delay: float = 0.0, set_id: Optional[int] = None, title: str = ""):
        if mode not in MODES:
            raise StudySessionError(f"Unknown study mode: {mode}")
        self.set_id = set_id
        self.title = title
        self.mode = mode
        self.answer_delay = answer_delay
        self._rng = rng or random.Random()
        self._pass = 0
        self._source = list(cards)
        self.start(self._source)

    @property
    def total_cards(self) -> int:
        return len(self.cards)

    @property
    def current_card(self):
        return self.cards[self.current_index]

    @property
    def percentage(self) -> int:
        # Half-up rounding, so 2/8 gives 25 and 1/8 gives 13
        return math.floor(self.score / self.total_cards * 100 + 0.5)

    @property
    def progress(self) -> int:
        return math.floor((self.current_index + 1) / self.total_cards * 100 + 0.5)

    def start(self, cards):
        if not cards:
            raise EmptySetError("This set has no cards to study")
        self._source = list(cards)
        self.cards = list(self._source)
        self._rng.shuffle(self.cards)
        self.current_index = 0
        self.is_flipped = False
        self.score = 0
        self.correctness = [False] * len(self.cards)
        self.state = REVIEWING
        self._pass += 1

    def _require_reviewing(self):
        if self.state == RESULTS:
            raise StudySessionError("The quiz is finished; restart or switch mode to continue")

    def flip(self):
        self._require_reviewing()
        self.is_flipped = not self.is_flipped

    def next(self):
        self._require_reviewing()
        self.is_flipped = False
        if self.current_index < self.total_cards - 1:
            self.current_index += 1
        elif self.mode == QUIZ:
            self.state = RESULTS
            logger.info(f"Quiz finished: {self.score}/{self.total_cards} ({self.percentage}%)")
        else:
            self.current_index = 0

    def prev(self):
        self._require_reviewing()
        self.is_flipped = False
        if self.current_index > 0:
            self.current_index -= 1

    def mark_answer(self, correct: bool):
        self._require_reviewing()
        if self.mode != QUIZ:
            raise StudySessionError("Answers can only be marked in quiz mode")
        if not self.is_flipped:
            raise StudySessionError("Flip the card before marking an answer")
        self.correctness[self.current_index] = bool(correct)
        self.score = sum(self.correctness)

    async def answer(self, correct: bool):
        """Mark the current card, then move on after the answer delay.

        The advance is skipped if, while waiting, the cursor moved, the pass
        ended or a restart or mode switch began a new pass.
        """
        self.mark_answer(correct)
        index, current_pass = self.current_index, self._pass
        if self.answer_delay > 0:
            await asyncio.sleep(self.answer_delay)
        if self._pass == current_pass and self.state == REVIEWING and self.current_index == index:
            self.next()

    def restart(self):
        self.start(self._source)

    def switch_mode(self):
        self.mode = QUIZ if self.mode == FLIP else FLIP
        self.is_flipped = False
        self.state = REVIEWING
        self._pass += 1


class StudySessionStore:
    """In-process registry of live study sessions, oldest evicted first."""

    def __init__(self, limit: int = 1000):
        self.limit = limit
        self._sessions = OrderedDict()

    def __len__(self):
        return len(self._sessions)

    def add(self, session: StudySession) -> str:
        session_id = uuid.uuid4().hex
        self._sessions[session_id] = session
        while len(self._sessions) > self.limit:
            evicted, _ = self._sessions.popitem(last=False)
            logger.info(f"Evicted study session {evicted}")
        return session_id

    def get(self, session_id: str) -> Optional[StudySession]:
        session = self._sessions.get(session_id)
        if session is not None:
            self._sessions.move_to_end(session_id)
        return session

    def discard(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None
