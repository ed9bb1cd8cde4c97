import logging

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from sqlmodel import create_engine


def test_list_is_empty_before_any_registration(client):
    r = client.get('/api/users')
    assert r.status_code == 200
    assert r.json() == []


def test_register_returns_payload_with_new_id(client):
    r = client.post('/api/users', json={'name': 'Alice', 'email': 'alice@example.com', 'course': 'Physics'})
    assert r.status_code == 200
    body = r.json()
    assert body['id'] == 1
    assert body['name'] == 'Alice'
    assert body['email'] == 'alice@example.com'
    assert body['course'] == 'Physics'


def test_alice_and_bob_scenario(client):
    a = client.post('/api/users', json={'name': 'Alice'}).json()
    b = client.post('/api/users', json={'name': 'Bob'}).json()
    assert (a['id'], a['name']) == (1, 'Alice')
    assert (b['id'], b['name']) == (2, 'Bob')
    listed = client.get('/api/users').json()
    assert {(s['id'], s['name']) for s in listed} == {(1, 'Alice'), (2, 'Bob')}


def test_list_returns_exactly_the_registered_records(client):
    payloads = [
        {'name': 'Ada', 'email': 'ada@example.com', 'course': 'Maths'},
        {'name': 'Grace', 'email': None, 'course': 'Computing'},
        {'name': 'Linus', 'email': 'linus@example.com', 'course': None},
    ]
    ids = set()
    for p in payloads:
        ids.add(client.post('/api/users', json=p).json()['id'])
    assert len(ids) == len(payloads)

    listed = client.get('/api/users').json()
    assert len(listed) == len(payloads)
    assert {s['id'] for s in listed} == ids
    as_content = sorted((s['name'], s['email'], s['course']) for s in listed)
    assert as_content == sorted((p['name'], p['email'], p['course']) for p in payloads)


def test_register_is_not_idempotent(client):
    first = client.post('/api/users', json={'name': 'Same', 'course': 'Art'}).json()
    second = client.post('/api/users', json={'name': 'Same', 'course': 'Art'}).json()
    assert first['id'] != second['id']
    assert len(client.get('/api/users').json()) == 2


def test_client_supplied_id_is_ignored(client):
    r = client.post('/api/users', json={'id': 99, 'name': 'Eve'})
    assert r.status_code == 200
    assert r.json()['id'] == 1


def test_contents_are_not_validated(client):
    r = client.post('/api/users', json={'name': '', 'email': 'not-an-email'})
    assert r.status_code == 200
    assert r.json()['name'] == ''
    assert r.json()['email'] == 'not-an-email'


def test_missing_name_is_rejected_by_request_parsing(client):
    r = client.post('/api/users', json={'email': 'x@example.com'})
    assert r.status_code == 422


def test_failed_insert_returns_500_and_rolls_back(client, monkeypatch):
    def boom(self, student):
        self.session.add(student)
        self.session.flush()
        raise OperationalError("INSERT INTO users", {}, Exception("connection refused"))

    monkeypatch.setattr("app.repositories.StudentRepository.create", boom)
    r = client.post('/api/users', json={'name': 'Lost'})
    assert r.status_code == 500
    assert r.json() == {'detail': 'database error'}

    monkeypatch.undo()
    assert client.get('/api/users').json() == []


def test_register_while_database_unreachable_returns_500_and_persists_nothing(api_app, client, tmp_path):
    working = api_app.state.engine
    api_app.state.engine = create_engine(f"sqlite:///{tmp_path / 'missing' / 'app.db'}")
    r = client.post('/api/users', json={'name': 'Lost'})
    assert r.status_code == 500
    assert r.json() == {'detail': 'database error'}

    api_app.state.engine = working
    assert client.get('/api/users').json() == []


def test_unreachable_database_returns_500(api_app, client, tmp_path):
    api_app.state.engine = create_engine(f"sqlite:///{tmp_path / 'missing' / 'app.db'}")
    r = client.get('/api/users')
    assert r.status_code == 500
    assert r.json() == {'detail': 'database error'}


def test_request_id_header_exists(client):
    r = client.get('/health')
    assert r.status_code == 200
    assert r.json() == {'status': 'ok'}
    assert 'X-Request-ID' in r.headers


def test_request_id_is_propagated(client):
    r = client.get('/api/users', headers={'X-Request-ID': 'abc123'})
    assert r.headers['X-Request-ID'] == 'abc123'


def test_home_page_links_to_docs(client):
    r = client.get('/')
    assert r.status_code == 200
    assert '/docs' in r.text


def test_request_failed_is_logged_only_for_api_paths(api_app, caplog):
    def explode():
        raise RuntimeError("unexpected")

    api_app.add_api_route('/api/explode', explode, methods=['GET'])
    api_app.add_api_route('/explode', explode, methods=['GET'])
    client = TestClient(api_app, raise_server_exceptions=False)

    with caplog.at_level(logging.ERROR, logger='app.api'):
        assert client.get('/explode').status_code == 500
        assert not [r for r in caplog.records if r.getMessage().startswith('request_failed')]
        assert client.get('/api/explode').status_code == 500
    failed = [r for r in caplog.records if r.getMessage().startswith('request_failed')]
    assert len(failed) == 1
    assert '"/api/explode"' in failed[0].getMessage()
