"""Data access for sets, cards and visitor sessions.

Every request gets its own :class:`FlashcardRepository` wrapping one
``AsyncSession``; handlers receive it through ``Depends(get_repository)`` so
tests can swap in another implementation.
"""
import logging
from datetime import timedelta
from functools import wraps
from typing import Optional

from fastapi import Depends
from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from database import get_db
from models import Flashcard, FlashcardSet, SetTag, UserSession, utcnow
from search import browse_query, tag_vocabulary_query

logger = logging.getLogger(__name__)


class RepositoryError(Exception):
    """A database call failed; the message is the driver's own."""


def surfaces_errors(method):
    @wraps(method)
    async def wrapper(self, *args, **kwargs):
        try:
            return await method(self, *args, **kwargs)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"{method.__name__} failed: {e}")
            raise RepositoryError(str(getattr(e, "orig", None) or e)) from e
    return wrapper


class FlashcardRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    # SETS ===================================================

    @surfaces_errors
    async def list_sets(self, search: Optional[str] = None, tag: Optional[str] = None,
                        limit: Optional[int] = None):
        result = await self.db.execute(browse_query(search, tag, limit))
        return list(result.scalars().all())

    @surfaces_errors
    async def list_sets_with_cards(self):
        result = await self.db.execute(
            select(FlashcardSet)
            .options(selectinload(FlashcardSet.cards))
            .order_by(FlashcardSet.created_at.desc(), FlashcardSet.id.desc())
        )
        return list(result.scalars().all())

    @surfaces_errors
    async def all_tags(self):
        result = await self.db.execute(tag_vocabulary_query())
        return list(result.scalars().all())

    @surfaces_errors
    async def get_set(self, set_id: int, with_cards: bool = False):
        query = (
            select(FlashcardSet)
            .where(FlashcardSet.id == set_id)
            .execution_options(populate_existing=True)
        )
        if with_cards:
            query = query.options(selectinload(FlashcardSet.cards))
        result = await self.db.execute(query)
        return result.scalars().first()

    @surfaces_errors
    async def create_set(self, title: str, description: Optional[str] = None,
                         tags: Optional[list] = None, created_by: Optional[str] = None):
        flashcard_set = FlashcardSet(title=title, description=description, created_by=created_by)
        flashcard_set.tags = tags or []
        self.db.add(flashcard_set)
        await self.db.commit()
        await self.db.refresh(flashcard_set)
        logger.info(f"Created flashcard set {flashcard_set.id}: {title!r}")
        return flashcard_set

    @surfaces_errors
    async def update_set(self, flashcard_set: FlashcardSet, **changes):
        tags = changes.pop("tags", None)
        for key, value in changes.items():
            setattr(flashcard_set, key, value)
        if tags is not None:
            flashcard_set.tags = tags
        flashcard_set.updated_at = utcnow()
        await self.db.commit()
        await self.db.refresh(flashcard_set)
        logger.info(f"Updated flashcard set {flashcard_set.id}")
        return flashcard_set

    @surfaces_errors
    async def delete_set(self, set_id: int) -> int:
        """Delete a set and its cards in one transaction; return the number of cards removed."""
        cards = await self.db.execute(delete(Flashcard).where(Flashcard.set_id == set_id))
        await self.db.execute(delete(SetTag).where(SetTag.set_id == set_id))
        await self.db.execute(delete(FlashcardSet).where(FlashcardSet.id == set_id))
        await self.db.commit()
        logger.info(f"Deleted flashcard set {set_id} with {cards.rowcount} flashcards")
        return cards.rowcount

    # CARDS ==================================================

    @surfaces_errors
    async def get_card(self, card_id: int):
        result = await self.db.execute(select(Flashcard).where(Flashcard.id == card_id))
        return result.scalars().first()

    @surfaces_errors
    async def add_card(self, set_id: int, **fields):
        card = Flashcard(set_id=set_id, **fields)
        self.db.add(card)
        await self.db.commit()
        await self.db.refresh(card)
        logger.info(f"Created flashcard {card.id} in set {set_id}")
        return card

    @surfaces_errors
    async def add_cards(self, set_id: int, cards) -> int:
        """Insert imported cards as a single batch."""
        self.db.add_all([
            Flashcard(set_id=set_id, front_text=card.front, back_text=card.back)
            for card in cards
        ])
        await self.db.commit()
        logger.info(f"Imported {len(cards)} flashcards into set {set_id}")
        return len(cards)

    @surfaces_errors
    async def update_card(self, card: Flashcard, **changes):
        for key, value in changes.items():
            setattr(card, key, value)
        await self.db.commit()
        await self.db.refresh(card)
        logger.info(f"Updated flashcard {card.id}")
        return card

    @surfaces_errors
    async def delete_card(self, card_id: int) -> bool:
        result = await self.db.execute(delete(Flashcard).where(Flashcard.id == card_id))
        await self.db.commit()
        logger.info(f"Deleted flashcard {card_id}")
        return result.rowcount > 0

    @surfaces_errors
    async def count_cards(self) -> int:
        result = await self.db.execute(select(func.count(Flashcard.id)))
        return result.scalar_one()

    @surfaces_errors
    async def count_sets(self) -> int:
        result = await self.db.execute(select(func.count(FlashcardSet.id)))
        return result.scalar_one()

    # VISITORS ===============================================

    @surfaces_errors
    async def track_visitor(self, session_id: str, ip_address: Optional[str], user_agent: Optional[str]):
        result = await self.db.execute(select(UserSession).where(UserSession.session_id == session_id))
        visitor = result.scalars().first()
        created = visitor is None
        if created:
            visitor = UserSession(session_id=session_id, ip_address=ip_address, user_agent=user_agent)
            self.db.add(visitor)
        else:
            visitor.last_activity = utcnow()
        await self.db.commit()
        await self.db.refresh(visitor)
        return visitor, created

    @surfaces_errors
    async def count_visitors(self, since_days: Optional[int] = None) -> int:
        query = select(func.count(func.distinct(UserSession.session_id)))
        if since_days is not None:
            query = query.where(UserSession.created_at >= utcnow() - timedelta(days=since_days))
        result = await self.db.execute(query)
        return result.scalar_one()


def get_repository(db: AsyncSession = Depends(get_db)) -> FlashcardRepository:
    return FlashcardRepository(db)
