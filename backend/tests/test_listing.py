import pytest
from fastapi.testclient import TestClient

from lesson_api.errors import AppError, ErrorKind
from lesson_api.main import app
from lesson_api import models
from lesson_api.services import ListingService, SeedService

client = TestClient(app)


def test_first_page_of_seven(session, add_lessons):
    add_lessons(range(1, 8))
    page = ListingService(session).list_lessons(limit=5, offset=0)
    assert [l.order for l in page.items] == [1, 2, 3, 4, 5]
    assert page.total == 7
    assert page.has_more is True


def test_second_page_of_seven(session, add_lessons):
    add_lessons(range(1, 8))
    page = ListingService(session).list_lessons(limit=5, offset=5)
    assert [l.order for l in page.items] == [6, 7]
    assert page.has_more is False


def test_category_filter_with_default_limit(session, add_lessons):
    add_lessons([1, 2, 3], category="product")
    add_lessons([4, 5, 6, 7], category="course")
    page = ListingService(session).list_lessons(category="product")
    assert [l.order for l in page.items] == [1, 2, 3]
    assert all(l.category == "product" for l in page.items)
    assert page.total == 3
    assert page.has_more is False


@pytest.mark.parametrize("category", [None, "", "all"])
def test_all_category_means_no_filter(session, add_lessons, category):
    add_lessons([1, 2], category="product")
    add_lessons([3], category="course")
    assert ListingService(session).list_lessons(category=category).total == 3


def test_unknown_category_is_empty(session, add_lessons):
    add_lessons([1, 2])
    page = ListingService(session).list_lessons(category="missing")
    assert page.items == []
    assert page.has_more is False


def test_pages_cover_full_set_without_duplicates(session, add_lessons):
    # repeated order values exercise the id tie-break
    rows = add_lessons([3, 1, 2, 2, 5, 4, 4, 4, 6])
    expected = [r.id for r in sorted(rows, key=lambda r: (r.order, r.id))]
    svc = ListingService(session)
    for limit in range(1, len(rows) + 2):
        seen = []
        offset = 0
        while True:
            page = svc.list_lessons(offset=offset, limit=limit)
            seen.extend(l.id for l in page.items)
            assert page.has_more == (offset + limit < page.total)
            if not page.has_more:
                break
            offset += limit
        assert seen == expected


def test_has_more_for_every_window(session, add_lessons):
    add_lessons(range(1, 8))
    svc = ListingService(session)
    for offset in range(0, 10):
        for limit in range(0, 10):
            page = svc.list_lessons(offset=offset, limit=limit)
            assert page.has_more == (offset + limit < 7)
            assert len(page.items) == max(0, min(limit, 7 - offset))


@pytest.mark.parametrize("offset,limit", [
    (None, None),
    ("abc", "xyz"),
    ("-1", "-5"),
    ("1.5", ""),
    (-2, -1),
    ("1_0", "+5"),
    ("\u0663", "\uff15"),
])
def test_invalid_window_falls_back_to_defaults(session, add_lessons, offset, limit):
    add_lessons(range(1, 8))
    page = ListingService(session).list_lessons(offset=offset, limit=limit)
    assert page.offset == 0
    assert page.limit == 5
    assert [l.order for l in page.items] == [1, 2, 3, 4, 5]


def test_numeric_strings_are_accepted(session, add_lessons):
    add_lessons(range(1, 8))
    page = ListingService(session).list_lessons(offset="2", limit=" 3 ")
    assert [l.order for l in page.items] == [3, 4, 5]


def test_get_lesson(session, add_lessons):
    row = add_lessons([1])[0]
    lesson = ListingService(session).get_lesson(row.id)
    assert lesson.title == "1. Lesson"
    assert lesson.id == row.id


@pytest.mark.parametrize("lesson_id", [999, "999", "abc", "", "-1", "+1", "1_0", "99999999999999999999999", 2 ** 64])
def test_get_missing_lesson_is_not_found(session, lesson_id):
    with pytest.raises(AppError) as exc:
        ListingService(session).get_lesson(lesson_id)
    assert exc.value.kind is ErrorKind.NOT_FOUND_RESOURCE


def test_sliders_in_insertion_order(session):
    for url in ["https://img.example.com/b.jpg", "https://img.example.com/a.jpg"]:
        session.add(models.Slider(url=url))
        session.commit()
    urls = [s.url for s in ListingService(session).list_sliders()]
    assert urls == ["https://img.example.com/b.jpg", "https://img.example.com/a.jpg"]


def test_seed_only_fills_empty_tables(session):
    svc = SeedService(session)
    assert svc.seed() == {"sliders": 4, "lessons": 7}
    assert svc.seed() == {"sliders": 0, "lessons": 0}
    page = ListingService(session).list_lessons(category="product")
    assert page.total == 7
    assert page.has_more is True


def test_lesson_list_endpoint(add_lessons):
    add_lessons(range(1, 8))
    r = client.get('/lesson/list', params={'offset': 5, 'limit': 5})
    assert r.status_code == 200
    body = r.json()
    assert body['success'] is True
    assert [l['order'] for l in body['data']['list']] == [6, 7]
    assert body['data']['hasMore'] is False


def test_lesson_list_endpoint_defaults(add_lessons):
    add_lessons(range(1, 8))
    r = client.get('/lesson/list', params={'offset': 'x', 'category': 'all'})
    data = r.json()['data']
    assert len(data['list']) == 5
    assert data['hasMore'] is True
    assert set(data['list'][0]) == {'id', 'order', 'title', 'url', 'price', 'category'}


def test_lesson_detail_endpoint(add_lessons):
    row = add_lessons([1])[0]
    r = client.get(f'/lesson/{row.id}')
    assert r.status_code == 200
    assert r.json()['data']['id'] == row.id
    r404 = client.get('/lesson/12345')
    assert r404.status_code == 404
    assert r404.json()['kind'] == 'NotFoundResource'
    assert r404.json()['success'] is False


def test_slider_list_endpoint(session):
    SeedService(session).seed()
    r = client.get('/slider/list')
    assert r.status_code == 200
    assert len(r.json()['data']) == 4


def test_huge_window_values_are_clamped(session, add_lessons):
    add_lessons(range(1, 8))
    svc = ListingService(session)
    page = svc.list_lessons(offset="99999999999999999999999")
    assert page.items == []
    assert page.has_more is False
    everything = svc.list_lessons(limit="99999999999999999999999")
    assert [l.order for l in everything.items] == list(range(1, 8))
    assert everything.has_more is False


def test_lesson_endpoints_with_huge_numbers(add_lessons):
    add_lessons([1])
    r = client.get('/lesson/99999999999999999999999')
    assert r.status_code == 404
    assert r.json()['kind'] == 'NotFoundResource'
    r2 = client.get('/lesson/list', params={'offset': '99999999999999999999999'})
    assert r2.status_code == 200
    assert r2.json()['data'] == {'list': [], 'hasMore': False}
