from fastapi.testclient import TestClient

from lesson_api.config import Settings
from lesson_api.errors import ErrorKind
from lesson_api.main import STATUS_BY_KIND, app

client = TestClient(app)


def test_home_and_health():
    assert client.get('/').json() == {'success': True, 'data': 'hello world'}
    assert client.get('/health').json() == {'status': 'ok'}


def test_unmatched_route_is_not_found():
    r = client.get('/no/such/route')
    assert r.status_code == 404
    body = r.json()
    assert body['success'] is False
    assert body['kind'] == 'NotFoundResource'
    assert body['message']


def test_every_kind_has_a_status():
    assert set(STATUS_BY_KIND) == set(ErrorKind)


def test_request_id_and_security_headers():
    r = client.get('/health', headers={'X-Request-ID': 'abc123'})
    assert r.headers['X-Request-ID'] == 'abc123'
    assert r.headers['X-Content-Type-Options'] == 'nosniff'
    assert client.get('/health').headers['X-Request-ID']


def test_unexpected_errors_do_not_leak_details(monkeypatch):
    def boom(self):
        raise RuntimeError("connection to postgres://admin:hunter2@db failed")

    monkeypatch.setattr("lesson_api.services.ListingService.list_sliders", boom)
    quiet = TestClient(app, raise_server_exceptions=False)
    r = quiet.get('/slider/list', headers={'X-Request-ID': 'req-500'})
    assert r.status_code == 500
    assert r.headers['X-Request-ID'] == 'req-500'
    assert r.headers['X-Content-Type-Options'] == 'nosniff'
    assert r.json()['kind'] == 'Internal'
    assert 'hunter2' not in r.text


def test_default_secret_refused_outside_dev(monkeypatch):
    monkeypatch.setenv('ENV', 'production')
    monkeypatch.delenv('JWT_SECRET', raising=False)
    monkeypatch.delenv('ALLOW_INSECURE_JWT', raising=False)
    try:
        Settings()
    except RuntimeError as e:
        assert 'JWT_SECRET' in str(e)
    else:
        raise AssertionError('expected RuntimeError')


def test_settings_defaults(monkeypatch):
    monkeypatch.delenv('JWT_EXPIRE_SECONDS', raising=False)
    s = Settings()
    assert s.JWT_EXPIRE_SECONDS == 3600
    assert s.JWT_ALGORITHM == 'HS256'
