from fastapi import APIRouter, Depends, HTTPException, status
from schemas import CardCreate, CardUpdate, CardOut
from models import User
from auth import get_current_user, require_set_owner
from repository import FlashcardRepository, get_repository
from routers.sets import get_set_or_404

router = APIRouter(tags=["Cards"])


async def get_card_or_404(repo: FlashcardRepository, card_id: int):
    card = await repo.get_card(card_id)
    if not card:
        raise HTTPException(status_code=404, detail="Flashcard not found")
    return card


@router.post(
    "/sets/{set_id}/cards",
    response_model=CardOut,
    status_code=status.HTTP_201_CREATED,
    summary="Add a card to a set"
)
async def create_card(
    set_id: int,
    card: CardCreate,
    repo: FlashcardRepository = Depends(get_repository),
    current_user: User = Depends(get_current_user)
):
    flashcard_set = await get_set_or_404(repo, set_id)
    require_set_owner(flashcard_set, current_user)
    return await repo.add_card(set_id, **card.model_dump())


@router.get("/cards/{card_id}", response_model=CardOut, summary="Get a card")
async def read_card(card_id: int, repo: FlashcardRepository = Depends(get_repository)):
    return await get_card_or_404(repo, card_id)


@router.put("/cards/{card_id}", response_model=CardOut, summary="Update a card")
async def update_card(
    card_id: int,
    card_update: CardUpdate,
    repo: FlashcardRepository = Depends(get_repository),
    current_user: User = Depends(get_current_user)
):
    db_card = await get_card_or_404(repo, card_id)
    require_set_owner(await get_set_or_404(repo, db_card.set_id), current_user)
    changes = card_update.model_dump(exclude_unset=True)
    for key in ("front_text", "back_text"):
        if key in changes and changes[key] is None:
            del changes[key]
    return await repo.update_card(db_card, **changes)


@router.delete("/cards/{card_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a card")
async def delete_card(
    card_id: int,
    repo: FlashcardRepository = Depends(get_repository),
    current_user: User = Depends(get_current_user)
):
    db_card = await get_card_or_404(repo, card_id)
    require_set_owner(await get_set_or_404(repo, db_card.set_id), current_user)
    await repo.delete_card(card_id)
