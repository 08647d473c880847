import logging
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from repository import FlashcardRepository, get_repository
from routers.sets import get_set_or_404
from schemas import AnswerIn, CardOut, StudyCardOut, StudySessionOut
from study import RESULTS, StudySession, StudySessionStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/study", tags=["Study"])


def get_study_store(request: Request) -> StudySessionStore:
    return request.app.state.study_sessions


def session_out(session_id: str, session: StudySession) -> StudySessionOut:
    finished = session.state == RESULTS
    card = None
    if not finished:
        current = session.current_card
        card = StudyCardOut(
            id=current.id,
            front_text=current.front_text,
            front_image_url=current.front_image_url,
        )
        if session.is_flipped:
            card.back_text = current.back_text
            card.back_image_url = current.back_image_url
    return StudySessionOut(
        session_id=session_id,
        set_id=session.set_id,
        title=session.title,
        mode=session.mode,
        state=session.state,
        current_index=session.current_index,
        total_cards=session.total_cards,
        is_flipped=session.is_flipped,
        score=session.score,
        progress=session.progress,
        card=card,
        percentage=session.percentage if finished else None,
    )


def get_session_or_404(session_id: str, store: StudySessionStore) -> StudySession:
    session = store.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Study session not found")
    return session


@router.post(
    "/{set_id}",
    response_model=StudySessionOut,
    status_code=status.HTTP_201_CREATED,
    summary="Start studying a set"
)
async def start_session(
    set_id: int,
    request: Request,
    mode: Literal["flip", "quiz"] = Query("flip"),
    repo: FlashcardRepository = Depends(get_repository),
    store: StudySessionStore = Depends(get_study_store)
):
    flashcard_set = await get_set_or_404(repo, set_id, with_cards=True)
    session = StudySession(
        [CardOut.model_validate(card) for card in flashcard_set.cards],
        mode=mode,
        answer_delay=request.app.state.answer_delay,
        set_id=flashcard_set.id,
        title=flashcard_set.title,
    )
    session_id = store.add(session)
    logger.info(f"Started {mode} session {session_id} for set {set_id} ({session.total_cards} cards)")
    return session_out(session_id, session)


@router.get("/sessions/{session_id}", response_model=StudySessionOut, summary="Study session state")
async def read_session(session_id: str, store: StudySessionStore = Depends(get_study_store)):
    return session_out(session_id, get_session_or_404(session_id, store))


@router.post("/sessions/{session_id}/flip", response_model=StudySessionOut, summary="Flip the current card")
async def flip_card(session_id: str, store: StudySessionStore = Depends(get_study_store)):
    session = get_session_or_404(session_id, store)
    session.flip()
    return session_out(session_id, session)


@router.post("/sessions/{session_id}/next", response_model=StudySessionOut, summary="Next card")
async def next_card(session_id: str, store: StudySessionStore = Depends(get_study_store)):
    session = get_session_or_404(session_id, store)
    session.next()
    return session_out(session_id, session)


@router.post("/sessions/{session_id}/prev", response_model=StudySessionOut, summary="Previous card")
async def prev_card(session_id: str, store: StudySessionStore = Depends(get_study_store)):
    session = get_session_or_404(session_id, store)
    session.prev()
    return session_out(session_id, session)


@router.post(
    "/sessions/{session_id}/answer",
    response_model=StudySessionOut,
    summary="Mark the revealed card correct or incorrect"
)
async def answer_card(session_id: str, answer: AnswerIn, store: StudySessionStore = Depends(get_study_store)):
    session = get_session_or_404(session_id, store)
    await session.answer(answer.correct)
    return session_out(session_id, session)


@router.post("/sessions/{session_id}/restart", response_model=StudySessionOut, summary="Reshuffle and start over")
async def restart_session(session_id: str, store: StudySessionStore = Depends(get_study_store)):
    session = get_session_or_404(session_id, store)
    session.restart()
    return session_out(session_id, session)


@router.post("/sessions/{session_id}/switch-mode", response_model=StudySessionOut, summary="Toggle flip/quiz mode")
async def switch_mode(session_id: str, store: StudySessionStore = Depends(get_study_store)):
    session = get_session_or_404(session_id, store)
    session.switch_mode()
    return session_out(session_id, session)


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT, summary="End a study session")
async def end_session(session_id: str, store: StudySessionStore = Depends(get_study_store)):
    if not store.discard(session_id):
        raise HTTPException(status_code=404, detail="Study session not found")
