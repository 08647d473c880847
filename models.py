from sqlalchemy import (
    Column, Integer, String, Text, Boolean, ForeignKey, DateTime, UniqueConstraint, select, func
)
from sqlalchemy.orm import relationship, column_property
from database import Base
from datetime import datetime, timezone


def utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, index=True)
    hashed_password = Column(String)
    is_superuser = Column(Boolean, default=False)

    def __str__(self):
        return self.username


class SetTag(Base):
    __tablename__ = "flashcard_set_tags"
    __table_args__ = (UniqueConstraint("set_id", "tag"),)
    id = Column(Integer, primary_key=True)
    set_id = Column(Integer, ForeignKey("flashcard_sets.id", ondelete="CASCADE"), nullable=False, index=True)
    tag = Column(String(50), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)


class FlashcardSet(Base):
    __tablename__ = "flashcard_sets"
    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    created_by = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    tag_rows = relationship(
        "SetTag",
        order_by=SetTag.position,
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )
    cards = relationship(
        "Flashcard",
        back_populates="flashcard_set",
        order_by="Flashcard.id",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="noload",
    )

    @property
    def tags(self):
        return [row.tag for row in self.tag_rows]

    @tags.setter
    def tags(self, values):
        existing = {row.tag: row for row in self.tag_rows}
        rows = []
        for position, tag in enumerate(values):
            row = existing.get(tag) or SetTag(tag=tag)
            row.position = position
            rows.append(row)
        self.tag_rows = rows

    def __str__(self):
        return self.title


class Flashcard(Base):
    __tablename__ = "flashcards"
    id = Column(Integer, primary_key=True, index=True)
    set_id = Column(Integer, ForeignKey("flashcard_sets.id", ondelete="CASCADE"), nullable=False, index=True)
    front_text = Column(Text, nullable=False)
    back_text = Column(Text, nullable=False)
    front_image_url = Column(String(500), nullable=True)
    back_image_url = Column(String(500), nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    flashcard_set = relationship("FlashcardSet", back_populates="cards")


class UserSession(Base):
    __tablename__ = "user_sessions"
    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(String(100), unique=True, index=True, nullable=False)
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(500), nullable=True)
    created_at = Column(DateTime, default=utcnow, index=True)
    last_activity = Column(DateTime, default=utcnow)


FlashcardSet.card_count = column_property(
    select(func.count(Flashcard.id))
    .where(Flashcard.set_id == FlashcardSet.id)
    .correlate_except(Flashcard)
    .scalar_subquery()
)
