from fastapi import APIRouter, Depends, HTTPException, status

from auth import get_current_superuser
from config import RECENT_ACTIVITY_DAYS
from repository import FlashcardRepository, get_repository
from schemas import AdminStats, SetDetailOut

router = APIRouter(
    prefix="/admin-api",
    tags=["Admin"],
    dependencies=[Depends(get_current_superuser)],
)


@router.get("/stats", response_model=AdminStats, summary="Dashboard totals")
async def stats(repo: FlashcardRepository = Depends(get_repository)):
    return AdminStats(
        total_users=await repo.count_visitors(),
        total_sets=await repo.count_sets(),
        total_flashcards=await repo.count_cards(),
        recent_activity=await repo.count_visitors(since_days=RECENT_ACTIVITY_DAYS),
    )


@router.get("/sets", response_model=list[SetDetailOut], summary="All sets with their cards")
async def list_sets(repo: FlashcardRepository = Depends(get_repository)):
    return await repo.list_sets_with_cards()


@router.get("/tags", response_model=list[str], summary="All tags in use")
async def list_tags(repo: FlashcardRepository = Depends(get_repository)):
    return await repo.all_tags()


@router.delete("/sets/{set_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete any set")
async def delete_set(set_id: int, repo: FlashcardRepository = Depends(get_repository)):
    if not await repo.get_set(set_id):
        raise HTTPException(status_code=404, detail="Flashcard set not found")
    await repo.delete_set(set_id)


@router.delete("/cards/{card_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete any card")
async def delete_card(card_id: int, repo: FlashcardRepository = Depends(get_repository)):
    if not await repo.delete_card(card_id):
        raise HTTPException(status_code=404, detail="Flashcard not found")
