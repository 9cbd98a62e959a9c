"""FastAPI security dependencies.

This module extracts the access token from the `Authorization` header
and exposes `get_current_user`, which resolves it to the stored `User`
through `AuthService`. Failures are raised as `AppError` so the error
handlers in `main` render them like every other service error.
"""

from typing import Optional

from fastapi import Depends, Header
from sqlmodel import Session

from . import models
from .config import Settings, get_settings
from .database import get_session
from .services import AuthService

BEARER_PREFIX = "bearer "


def extract_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an `Authorization` header value.

    Both `Bearer <token>` and a bare token are accepted; `None` means no
    credential was sent at all.
    """
    if authorization is None:
        return None
    value = authorization.strip()
    if value.lower().startswith(BEARER_PREFIX):
        value = value[len(BEARER_PREFIX):].strip()
    return value


def get_token(authorization: Optional[str] = Header(default=None)) -> Optional[str]:
    return extract_token(authorization)


def get_current_user(
    token: Optional[str] = Depends(get_token),
    db: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> models.User:
    """FastAPI dependency that returns the authenticated user.

    Raises `MissingCredential`, `InvalidToken` or `UserNotFound`.
    """
    return AuthService(db, settings).current_user(token)
