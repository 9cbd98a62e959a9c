"""CLI script to seed demo sliders and lessons into the backend DB.
Usage: python scripts/seed_content.py [--lessons N]
"""
import sys
import argparse
import pathlib
# Ensure `backend/` is on sys.path so `lesson_api` package imports work when running this script directly
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
from sqlmodel import Session
from lesson_api.database import engine, create_db_and_tables
from lesson_api import services


def main(lessons: int = 7):
    """Create tables if needed and seed empty lesson/slider tables.

    Tables that already contain rows are left as they are, so the script
    can be re-run safely.
    """
    create_db_and_tables()
    with Session(engine) as session:
        created = services.SeedService(session).seed(lesson_count=lessons)
    print(f"Seeded sliders: {created['sliders']}, lessons: {created['lessons']}")


if __name__ == '__main__':
    parser = argparse.ArgumentParser()
    parser.add_argument('--lessons', type=int, default=7, help='Number of demo lessons to create')
    args = parser.parse_args()
    main(lessons=args.lessons)
