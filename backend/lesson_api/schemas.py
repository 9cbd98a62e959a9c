"""Pydantic request/response schemas used by the API.

Schemas keep API input/output shapes stable. Registration fields are
deliberately loose here; `utils.validators` performs the field checks so
every failure is reported in a single field -> message mapping.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class RegisterIn(BaseModel):
    """Payload for the registration endpoint."""
    username: Optional[str] = None
    password: Optional[str] = None
    confirm_password: Optional[str] = Field(default=None, alias="confirmPassword")
    email: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class LoginIn(BaseModel):
    """Payload for the login endpoint."""
    username: str = ""
    password: str = ""


class UserOut(BaseModel):
    """Public view of a user: no password hash, no timestamps."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    avatar: Optional[str] = None


class LessonOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    order: int
    title: str
    url: str
    price: float
    category: str


class SliderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    url: str


class LessonPage(BaseModel):
    """One window of the lesson listing.

    `total` counts every lesson matching the filter, independent of
    `offset` and `limit`.
    """
    items: List[LessonOut]
    total: int
    offset: int
    limit: int
    has_more: bool
