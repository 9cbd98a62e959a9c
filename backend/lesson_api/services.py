"""Business logic services used by HTTP controllers.

This module holds small service classes that coordinate repositories
and auxiliary logic. Services are intentionally thin: they perform
validation, execute domain logic and persist aggregates via
repositories. Failures are raised as `AppError` and never translated to
HTTP here.
"""

from datetime import datetime, timedelta, timezone
import logging
from typing import Any, List, Optional
from passlib.context import CryptContext
import jwt
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session
from . import models, repositories
from .config import Settings
from .errors import AppError, ErrorKind, not_found, validation_failed
from .schemas import LessonOut, LessonPage, SliderOut, UserOut
from .utils.validators import validate_register_input

logger = logging.getLogger("lesson_api.services")

ALL_CATEGORIES = "all"
DEFAULT_OFFSET = 0
DEFAULT_LIMIT = 5
LOGIN_FAILED_MESSAGE = "invalid username or password"
# largest value a SQLite INTEGER column (signed 64-bit) can hold
MAX_SQL_INT = 2 ** 63 - 1


def build_password_context(settings: Settings) -> CryptContext:
    """Return the passlib context used to hash and verify passwords.

    pbkdf2_sha256 salts every hash with fresh random bytes; the round
    count is fixed per deployment through `PWD_ROUNDS`.
    """
    return CryptContext(
        schemes=["pbkdf2_sha256"],
        deprecated="auto",
        pbkdf2_sha256__default_rounds=settings.PWD_ROUNDS,
    )


def issue_token(user_id: int, settings: Settings, now: Optional[datetime] = None) -> str:
    """Sign an access token for `user_id` that expires after `JWT_EXPIRE_SECONDS`."""
    issued = now or datetime.now(timezone.utc)
    expire = issued + timedelta(seconds=settings.JWT_EXPIRE_SECONDS)
    payload = {"id": user_id, "iat": int(issued.timestamp()), "exp": int(expire.timestamp())}
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str, settings: Settings) -> int:
    """Verify `token` and return the user id it carries.

    Any structural, signature or expiry problem raises `InvalidToken`.
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AppError(ErrorKind.INVALID_TOKEN, "access token expired")
    except jwt.PyJWTError:
        raise AppError(ErrorKind.INVALID_TOKEN, "access token is invalid")
    user_id = payload.get("id")
    if not isinstance(user_id, int) or isinstance(user_id, bool) or not 0 < user_id <= MAX_SQL_INT:
        raise AppError(ErrorKind.INVALID_TOKEN, "access token payload is invalid")
    return user_id


def _parse_plain_int(value: Any) -> Optional[int]:
    """Parse plain ASCII base-10 digits into an int, or return `None`.

    Signs, underscores, non-ASCII digits and bools are rejected.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not text or not text.isascii() or not text.isdigit():
        return None
    return int(text)


def _parse_non_negative(value: Any, default: int) -> int:
    """Coerce a raw query value, falling back to `default` when unusable.

    Values past the 64-bit store range are clamped to it.
    """
    parsed = _parse_plain_int(value)
    if parsed is None or parsed < 0:
        return default
    return min(parsed, MAX_SQL_INT)


class AuthService:
    """Registration, login and bearer token resolution."""
    def __init__(self, session: Session, settings: Settings):
        self.session = session
        self.settings = settings
        self.user_repo = repositories.UserRepository(session)
        self.pwd_ctx = build_password_context(settings)

    def register(self, username: Optional[str], password: Optional[str],
                 confirm_password: Optional[str], email: Optional[str]) -> UserOut:
        """Create a new user with a hashed password.

        All field problems are reported together as `ValidationFailed`.
        The username pre-check gives a friendly error; the unique index
        still catches a concurrent registration that slips past it.
        """
        valid, errors = validate_register_input(username, password, confirm_password, email)
        if not valid:
            raise validation_failed(errors, "submitted registration data is invalid")
        if self.user_repo.get_by_username(username):
            raise AppError(ErrorKind.USERNAME_TAKEN, "username already exists", {"username": "username already exists"})
        user = models.User(
            username=username,
            password_hash=self.pwd_ctx.hash(password),
            email=email.strip(),
        )
        try:
            user = self.user_repo.create(user)
        except IntegrityError:
            self.session.rollback()
            logger.warning("register_conflict username=%s", username)
            raise AppError(ErrorKind.USERNAME_TAKEN, "username already exists", {"username": "username already exists"})
        logger.info("user_registered id=%s", user.id)
        return UserOut.model_validate(user)

    def authenticate(self, username: str, password: str) -> Optional[models.User]:
        """Return the user whose credentials match, or `None`."""
        user = self.user_repo.get_by_username(username)
        if not user:
            # hash anyway so both failure paths cost about the same
            self.pwd_ctx.dummy_verify()
            return None
        if not self.pwd_ctx.verify(password, user.password_hash):
            return None
        return user

    def login(self, username: str, password: str) -> str:
        """Verify credentials and return a signed access token.

        An unknown username and a wrong password raise the same error so
        callers cannot probe which usernames exist.
        """
        user = self.authenticate(username, password)
        if user is None:
            logger.info("login_failed")
            raise AppError(ErrorKind.AUTHENTICATION_FAILED, LOGIN_FAILED_MESSAGE)
        return issue_token(user.id, self.settings)

    def current_user(self, token: Optional[str]) -> models.User:
        """Resolve a bearer token to the stored `User` row."""
        if not token or not token.strip():
            raise AppError(ErrorKind.MISSING_CREDENTIAL, "authorization not provided")
        try:
            user_id = decode_token(token.strip(), self.settings)
        except AppError as e:
            logger.info("token_rejected reason=%s", e.message)
            raise
        user = self.user_repo.get(user_id)
        if not user:
            raise AppError(ErrorKind.USER_NOT_FOUND, "user not found")
        return user

    def validate_token(self, token: Optional[str]) -> UserOut:
        """Return the public view of the user a token belongs to."""
        return UserOut.model_validate(self.current_user(token))

    def update_avatar(self, user_id: int, uri: str) -> str:
        """Point the user's avatar at an already stored file and return the URI."""
        user = self.user_repo.get(user_id)
        if not user:
            raise AppError(ErrorKind.USER_NOT_FOUND, "user not found")
        self.user_repo.update_avatar(user, uri)
        return uri


class ListingService:
    """Read-only access to lessons and sliders."""
    def __init__(self, session: Session):
        self.session = session
        self.lesson_repo = repositories.LessonRepository(session)
        self.slider_repo = repositories.SliderRepository(session)

    def list_lessons(self, category: Optional[str] = ALL_CATEGORIES, offset: Any = None, limit: Any = None) -> LessonPage:
        """Return one page of lessons ordered by `order`.

        `category` of `None`, empty or "all" disables filtering. Offsets and
        limits that are not non-negative integers fall back to 0 and 5.
        """
        offset = _parse_non_negative(offset, DEFAULT_OFFSET)
        limit = _parse_non_negative(limit, DEFAULT_LIMIT)
        filter_category = None if not category or category == ALL_CATEGORIES else category
        total = self.lesson_repo.count(filter_category)
        rows = self.lesson_repo.list_page(filter_category, offset, limit)
        return LessonPage(
            items=[LessonOut.model_validate(r) for r in rows],
            total=total,
            offset=offset,
            limit=limit,
            has_more=total > offset + limit,
        )

    def get_lesson(self, lesson_id: Any) -> LessonOut:
        """Fetch one lesson; unknown or malformed ids raise `NotFoundResource`."""
        key = _parse_plain_int(lesson_id)
        if key is None or not 0 < key <= MAX_SQL_INT:
            raise not_found("lesson not found")
        lesson = self.lesson_repo.get(key)
        if not lesson:
            raise not_found("lesson not found")
        return LessonOut.model_validate(lesson)

    def list_sliders(self) -> List[SliderOut]:
        return [SliderOut.model_validate(s) for s in self.slider_repo.list_all()]


DEMO_SLIDER_URLS = [
    "https://yanxuan.nosdn.127.net/f129bf4309cbe8878f39982203214629.jpg",
    "https://yanxuan.nosdn.127.net/a16ac18c02bb26755dbcac1911631aa0.jpg",
    "https://yanxuan.nosdn.127.net/84d82137e854e58bf26791db3ba203b8.jpg",
    "https://yanxuan.nosdn.127.net/ee856ce5b451dbdeab78abffce195957.jpg",
]
DEMO_LESSON_IMAGE = "https://yanxuan.nosdn.127.net/efe5bb71fd6787d9c5f5b051eb607666.jpg"


class SeedService:
    """Insert demo content into empty lesson/slider tables."""
    def __init__(self, session: Session):
        self.session = session
        self.lesson_repo = repositories.LessonRepository(session)
        self.slider_repo = repositories.SliderRepository(session)

    def seed(self, lesson_count: int = 7) -> dict:
        """Seed sliders and lessons when their tables are empty.

        Returns the number of rows created per table; tables that already
        hold data are left untouched.
        """
        created = {"sliders": 0, "lessons": 0}
        if self.slider_repo.count() == 0:
            created["sliders"] = self.slider_repo.create_many([models.Slider(url=u) for u in DEMO_SLIDER_URLS])
        if self.lesson_repo.count() == 0:
            lessons = [
                models.Lesson(order=i, title=f"{i}. Lesson", url=DEMO_LESSON_IMAGE, price=100.0, category="product")
                for i in range(1, lesson_count + 1)
            ]
            created["lessons"] = self.lesson_repo.create_many(lessons)
        return created
