"""Run a quick smoke check against the app in-process.

Calls the health, slider and lesson listing endpoints through FastAPI's
TestClient and prints each status and body. Seed data first with
`scripts/seed_content.py` to see non-empty lists.
Usage: python scripts/smoke_request.py [--category CATEGORY]
"""

import argparse
import sys
import os

# Ensure backend folder is on sys.path so `lesson_api` package can be imported
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from fastapi.testclient import TestClient  # noqa: E402
from lesson_api.main import app  # noqa: E402


def main(category: str = 'all'):
    client = TestClient(app)
    for path, params in (('/health', None), ('/slider/list', None), ('/lesson/list', {'category': category})):
        resp = client.get(path, params=params)
        print(path, 'STATUS:', resp.status_code)
        print('JSON:', resp.json())


if __name__ == '__main__':
    parser = argparse.ArgumentParser()
    parser.add_argument('--category', default='all', help='Lesson category to list')
    args = parser.parse_args()
    main(category=args.category)
