"""Browse filters for flashcard sets.

``search`` is a case-insensitive substring match against the title or the
description; ``tag`` is an exact, case-sensitive match against one of the
set's tags. Both are ANDed together and a missing or blank value adds no
constraint; any other value is matched as given, surrounding spaces included.
"""
from typing import Optional

from sqlalchemy import and_, or_, select, true

from models import FlashcardSet, SetTag


def normalize_query(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value if value.strip() else None


def build_set_filter(search: Optional[str] = None, tag: Optional[str] = None):
    """Return a WHERE clause for the browse query."""
    search = normalize_query(search)
    tag = normalize_query(tag)

    conditions = []
    if search:
        conditions.append(or_(
            FlashcardSet.title.icontains(search, autoescape=True),
            FlashcardSet.description.icontains(search, autoescape=True),
        ))
    if tag:
        conditions.append(FlashcardSet.tag_rows.any(SetTag.tag == tag))

    if not conditions:
        return true()
    return and_(*conditions)


def browse_query(search: Optional[str] = None, tag: Optional[str] = None, limit: Optional[int] = None):
    query = (
        select(FlashcardSet)
        .where(build_set_filter(search, tag))
        .order_by(FlashcardSet.updated_at.desc(), FlashcardSet.id.desc())
    )
    if limit is not None:
        query = query.limit(limit)
    return query


def tag_vocabulary_query():
    return select(SetTag.tag).distinct().order_by(SetTag.tag)


def clean_tags(tags):
    """Strip tags, drop blanks and duplicates, keep first-seen order."""
    seen = []
    for tag in tags or []:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen
