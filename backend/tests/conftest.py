from pathlib import Path
import os
import shutil
import tempfile
import pytest

# Point the app at a throwaway database and upload folder before it is imported
_TMP = Path(tempfile.mkdtemp(prefix="lesson_api_tests_"))
os.environ["ENV"] = "dev"
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP / 'test.db'}"
os.environ["UPLOAD_DIR"] = str(_TMP / "uploads")
os.environ["JWT_SECRET"] = "test-secret-for-lesson-api-suite-0123456789"
os.environ.setdefault("PWD_ROUNDS", "1000")

from sqlmodel import SQLModel, Session  # noqa: E402
from lesson_api.database import engine  # noqa: E402
from lesson_api.config import settings as app_settings  # noqa: E402
from lesson_api import models  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def cleanup_tmp():
    yield
    shutil.rmtree(_TMP, ignore_errors=True)


@pytest.fixture(autouse=True)
def reset_db():
    """Recreate every table so each test starts from an empty database."""
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    yield


@pytest.fixture
def session():
    with Session(engine) as s:
        yield s


@pytest.fixture
def settings():
    return app_settings


@pytest.fixture
def add_lessons(session):
    """Insert lessons for the given `order` values and return their rows."""
    def _add(orders, category="product"):
        rows = [
            models.Lesson(order=o, title=f"{o}. Lesson", url=f"https://img.example.com/{o}.jpg", price=100.0, category=category)
            for o in orders
        ]
        for r in rows:
            session.add(r)
        session.commit()
        for r in rows:
            session.refresh(r)
        return rows
    return _add
