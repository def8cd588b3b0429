from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from pastebin import create_app
from pastebin.constants import ADMIN
from pastebin.utils.passwords import hash_password

PASSWORD = "secret123"


class FakeClock:
    """A clock that only moves when told to."""

    def __init__(self, start=datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC)):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


def memory_db():
    return f"file:pastebin-{uuid4().hex}?mode=memory&cache=shared"


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def app(clock):
    app = create_app("testing", clock=clock, DATABASE_URI=memory_db())
    yield app
    app.extensions["pastebin"]["glue"].close()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def services(app):
    return app.extensions["pastebin"]


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def signup(client, username, password=PASSWORD):
    resp = client.post("/api/auth/signup", json={"username": username, "password": password})
    assert resp.status_code == 201, resp.get_json()
    body = resp.get_json()
    return body["token"], body["user"]


@pytest.fixture()
def alice(client):
    return signup(client, "alice")


@pytest.fixture()
def bob(client):
    return signup(client, "bob")


@pytest.fixture()
def admin(client, services):
    user = services["users"].create_user("root", hash_password(PASSWORD, 4), ADMIN)
    resp = client.post("/api/auth/signin", json={"username": "root", "password": PASSWORD})
    assert resp.status_code == 200
    return resp.get_json()["token"], user.to_json()


def create_paste(client, token, **body):
    body.setdefault("content", "hello")
    resp = client.post("/api/pastes", json=body, headers=bearer(token))
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()["paste"]
