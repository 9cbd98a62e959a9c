"""SQLModel data models.

This module defines the application's database tables using SQLModel.
Lessons and sliders are seeded out of band and only read by the API.
"""

from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(SQLModel, table=True):
    """A registered user.

    Fields:
    - `username`: unique login name, enforced by a unique index
    - `password_hash`: hashed password string (never store plaintext)
    - `avatar`: public URI of the uploaded avatar, if any
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(index=True, nullable=False, unique=True, max_length=12)
    password_hash: str
    email: str
    avatar: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow, sa_column_kwargs={"onupdate": _utcnow})


class Lesson(SQLModel, table=True):
    """A purchasable lesson shown in the paginated listing.

    `order` defines the display sequence; `category` is a plain tag.
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    order: int = Field(index=True)
    title: str
    url: str
    price: float = 0.0
    category: str = Field(default="all", index=True)


class Slider(SQLModel, table=True):
    """A promotional banner image."""
    id: Optional[int] = Field(default=None, primary_key=True)
    url: str
