"""Repository classes encapsulating database operations.

Each repository is small and focused on a single aggregate (users,
lessons, sliders). Repositories return SQLModel objects and perform
commits/refreshes where appropriate.
"""

from typing import List, Optional
from sqlmodel import Session, select
from sqlalchemy import func
from . import models


class UserRepository:
    """CRUD operations for `User` objects."""
    def __init__(self, session: Session):
        self.session = session

    def create(self, user: models.User) -> models.User:
        """Persist a new user and return the managed instance.

        Raises `sqlalchemy.exc.IntegrityError` when the unique username
        index rejects the row; the caller decides how to report it.
        """
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user

    def get_by_username(self, username: str) -> Optional[models.User]:
        """Return a `User` by username or `None` if not found."""
        stmt = select(models.User).where(models.User.username == username)
        return self.session.exec(stmt).first()

    def get(self, user_id: int) -> Optional[models.User]:
        """Get a `User` by primary key."""
        return self.session.get(models.User, user_id)

    def update_avatar(self, user: models.User, avatar: str) -> models.User:
        user.avatar = avatar
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user


class LessonRepository:
    """Read access to `Lesson` rows."""
    def __init__(self, session: Session):
        self.session = session

    def count(self, category: Optional[str] = None) -> int:
        """Count lessons, optionally restricted to an exact `category`."""
        stmt = select(func.count()).select_from(models.Lesson)
        if category is not None:
            stmt = stmt.where(models.Lesson.category == category)
        return self.session.exec(stmt).one()

    def list_page(self, category: Optional[str], offset: int, limit: int) -> List[models.Lesson]:
        """Return a window of lessons ordered by `order`, then `id`.

        The `id` tie-break keeps pages stable when several lessons share
        the same `order` value.
        """
        stmt = select(models.Lesson)
        if category is not None:
            stmt = stmt.where(models.Lesson.category == category)
        stmt = stmt.order_by(models.Lesson.order, models.Lesson.id).offset(offset).limit(limit)
        return self.session.exec(stmt).all()

    def get(self, lesson_id: int) -> Optional[models.Lesson]:
        """Fetch a lesson by id."""
        return self.session.get(models.Lesson, lesson_id)

    def create_many(self, lessons: List[models.Lesson]) -> int:
        for lesson in lessons:
            self.session.add(lesson)
        self.session.commit()
        return len(lessons)


class SliderRepository:
    """Read access to `Slider` rows."""
    def __init__(self, session: Session):
        self.session = session

    def list_all(self) -> List[models.Slider]:
        """List every slider in insertion order."""
        stmt = select(models.Slider).order_by(models.Slider.id)
        return self.session.exec(stmt).all()

    def count(self) -> int:
        return self.session.exec(select(func.count()).select_from(models.Slider)).one()

    def create_many(self, sliders: List[models.Slider]) -> int:
        for slider in sliders:
            self.session.add(slider)
        self.session.commit()
        return len(sliders)
