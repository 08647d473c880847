from pydantic import AfterValidator, BaseModel, Field, field_validator
from typing import Annotated, Optional, Literal
from datetime import datetime
import re

from search import clean_tags


def _strip_required(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError('Field must not be blank')
    return v


def _strip_optional(v: str) -> Optional[str]:
    v = v.strip()
    return v or None


def _clean_tags(v: list[str]) -> list[str]:
    tags = clean_tags(v)
    if any(len(tag) > 50 for tag in tags):
        raise ValueError('Tags must be at most 50 characters')
    return tags


Title = Annotated[str, Field(min_length=1, max_length=200), AfterValidator(_strip_required)]
Description = Annotated[str, Field(max_length=2000), AfterValidator(_strip_optional)]
CardText = Annotated[str, Field(min_length=1, max_length=2000), AfterValidator(_strip_required)]
ImageUrl = Annotated[str, Field(max_length=500), AfterValidator(_strip_optional)]
Tags = Annotated[list[str], AfterValidator(_clean_tags)]


class UserCreate(BaseModel):
    username: str = Field(
        ...,
        min_length=3,
        max_length=20,
        pattern=r'^[a-zA-Z0-9_]+$',
        description="Username: 3-20 letters, digits or underscores"
    )
    password: str = Field(
        ...,
        min_length=8,
        max_length=72,
        description="Password: at least 8 characters"
    )

    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        if not re.search(r'[A-Z]', v):
            raise ValueError('Password must contain an uppercase letter')
        if not re.search(r'[a-z]', v):
            raise ValueError('Password must contain a lowercase letter')
        if not re.search(r'[0-9]', v):
            raise ValueError('Password must contain a digit')
        return v


class UserOut(BaseModel):
    id: int
    username: str
    is_superuser: bool = False

    model_config = {
        "from_attributes": True
    }


# SETS =======================================================

class SetCreate(BaseModel):
    title: Title = Field(..., description="Set title")
    description: Optional[Description] = None
    tags: Tags = Field(default_factory=list, description="Tags; blanks and duplicates are dropped")


class SetUpdate(BaseModel):
    title: Optional[Title] = None
    description: Optional[Description] = None
    tags: Optional[Tags] = None


class SetOut(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    tags: list[str]
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    card_count: int = 0

    model_config = {
        "from_attributes": True
    }


# CARDS ======================================================

class CardCreate(BaseModel):
    front_text: CardText = Field(..., description="Question or prompt")
    back_text: CardText = Field(..., description="Answer or explanation")
    front_image_url: Optional[ImageUrl] = None
    back_image_url: Optional[ImageUrl] = None


class CardUpdate(BaseModel):
    front_text: Optional[CardText] = None
    back_text: Optional[CardText] = None
    front_image_url: Optional[ImageUrl] = None
    back_image_url: Optional[ImageUrl] = None


class CardOut(BaseModel):
    id: int
    set_id: int
    front_text: str
    back_text: str
    front_image_url: Optional[str] = None
    back_image_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {
        "from_attributes": True
    }


class SetDetailOut(SetOut):
    cards: list[CardOut] = []


class SetCreated(BaseModel):
    set: SetOut
    imported_cards: int = 0
    warning: Optional[str] = None


class BrowseOut(BaseModel):
    sets: list[SetOut]
    tags: list[str]
    count: int
    search: Optional[str] = None
    tag: Optional[str] = None


class HomeOut(BaseModel):
    recent_sets: list[SetOut]
    total_cards: int
    unique_visitors: int


# STUDY ======================================================

class StudyCardOut(BaseModel):
    id: int
    front_text: str
    front_image_url: Optional[str] = None
    back_text: Optional[str] = None
    back_image_url: Optional[str] = None


class StudySessionOut(BaseModel):
    session_id: str
    set_id: int
    title: str
    mode: Literal["flip", "quiz"]
    state: Literal["reviewing", "results"]
    current_index: int
    total_cards: int
    is_flipped: bool
    score: int
    progress: int
    card: Optional[StudyCardOut] = None
    percentage: Optional[int] = None


class AnswerIn(BaseModel):
    correct: bool


# VISITORS / ADMIN ===========================================

class VisitorIn(BaseModel):
    session_id: str = Field(..., min_length=1, max_length=100)


class VisitorOut(BaseModel):
    session_id: str
    created: bool
    last_activity: datetime


class AdminStats(BaseModel):
    total_users: int
    total_sets: int
    total_flashcards: int
    recent_activity: int
