import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from pydantic import ValidationError

from auth import get_current_user, require_set_owner
from config import MAX_IMPORT_BYTES
from importer import ImportFormatError, parse_import_file
from models import User
from repository import FlashcardRepository, RepositoryError, get_repository
from schemas import BrowseOut, SetCreate, SetCreated, SetDetailOut, SetOut, SetUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sets", tags=["Sets"])

IMPORT_WARNING = "Set created but some flashcards failed to import."


async def get_set_or_404(repo: FlashcardRepository, set_id: int, with_cards: bool = False):
    flashcard_set = await repo.get_set(set_id, with_cards=with_cards)
    if not flashcard_set:
        raise HTTPException(status_code=404, detail="Flashcard set not found")
    return flashcard_set


@router.get("", response_model=BrowseOut, summary="Browse and search sets")
async def browse_sets(
    search: Optional[str] = Query(None, description="Case-insensitive text in title or description"),
    tag: Optional[str] = Query(None, description="Exact tag"),
    repo: FlashcardRepository = Depends(get_repository)
):
    sets = await repo.list_sets(search=search, tag=tag)
    tags = await repo.all_tags()
    return BrowseOut(
        sets=[SetOut.model_validate(s) for s in sets],
        tags=tags,
        count=len(sets),
        search=search,
        tag=tag,
    )


@router.get("/tags", response_model=list[str], summary="All tags in use")
async def list_tags(repo: FlashcardRepository = Depends(get_repository)):
    return await repo.all_tags()


@router.post("", response_model=SetCreated, status_code=status.HTTP_201_CREATED, summary="Create a set")
async def create_set(
    data: SetCreate,
    repo: FlashcardRepository = Depends(get_repository),
    current_user: User = Depends(get_current_user)
):
    flashcard_set = await repo.create_set(
        title=data.title,
        description=data.description,
        tags=data.tags,
        created_by=current_user.username,
    )
    return SetCreated(set=SetOut.model_validate(flashcard_set))


@router.post(
    "/import",
    response_model=SetCreated,
    status_code=status.HTTP_201_CREATED,
    summary="Create a set from a front;back text file",
)
async def import_set(
    title: str = Form(...),
    description: Optional[str] = Form(None),
    tags: Optional[str] = Form(None, description="Comma-separated tags"),
    file: UploadFile = File(..., description="UTF-8 .txt file, one front;back pair per line"),
    repo: FlashcardRepository = Depends(get_repository),
    current_user: User = Depends(get_current_user)
):
    try:
        data = SetCreate(
            title=title,
            description=description,
            tags=tags.split(",") if tags else [],
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.errors()[0]["msg"])

    raw = await file.read(MAX_IMPORT_BYTES + 1)
    if len(raw) > MAX_IMPORT_BYTES:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Import file is larger than {MAX_IMPORT_BYTES} bytes",
        )
    try:
        cards = parse_import_file(file.filename, raw)
    except ImportFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))

    flashcard_set = await repo.create_set(
        title=data.title,
        description=data.description,
        tags=data.tags,
        created_by=current_user.username,
    )
    # a failed batch rolls back and expires flashcard_set
    set_id = flashcard_set.id

    imported, warning = 0, None
    try:
        imported = await repo.add_cards(set_id, cards)
    except RepositoryError as e:
        # The set stays; the missing cards can be added by hand
        logger.warning(f"Set {set_id} created but import failed: {e}")
        warning = IMPORT_WARNING

    flashcard_set = await get_set_or_404(repo, set_id)
    return SetCreated(set=SetOut.model_validate(flashcard_set), imported_cards=imported, warning=warning)


@router.get("/{set_id}", response_model=SetDetailOut, summary="Get a set with its cards")
async def read_set(set_id: int, repo: FlashcardRepository = Depends(get_repository)):
    return await get_set_or_404(repo, set_id, with_cards=True)


@router.put("/{set_id}", response_model=SetOut, summary="Update a set")
async def update_set(
    set_id: int,
    data: SetUpdate,
    repo: FlashcardRepository = Depends(get_repository),
    current_user: User = Depends(get_current_user)
):
    flashcard_set = await get_set_or_404(repo, set_id)
    require_set_owner(flashcard_set, current_user)
    changes = data.model_dump(exclude_unset=True)
    for key in ("title", "tags"):
        if key in changes and changes[key] is None:
            del changes[key]
    return await repo.update_set(flashcard_set, **changes)


@router.delete("/{set_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a set and its cards")
async def delete_set(
    set_id: int,
    repo: FlashcardRepository = Depends(get_repository),
    current_user: User = Depends(get_current_user)
):
    flashcard_set = await get_set_or_404(repo, set_id)
    require_set_owner(flashcard_set, current_user)
    await repo.delete_set(set_id)
