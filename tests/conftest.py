import json
from datetime import datetime, timedelta, timezone

import pytest

from session.credentials import CredentialStore, MemoryStorage
from session.observer import SessionObserver


class FakeResponse:
    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        if body is None:
            self.content = b""
        elif isinstance(body, (bytes, str)):
            self.content = body.encode() if isinstance(body, str) else body
        else:
            self.content = json.dumps(body).encode()

    @property
    def text(self):
        return self.content.decode()

    def json(self):
        return json.loads(self.content.decode())


class FakeSession:
    """Stands in for requests.Session; replies are queued per test."""

    def __init__(self, *replies):
        self.headers = {}
        self.replies = list(replies)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


class FakeClient:
    """
    Stands in for DropCarsClient. Routes map (METHOD, path) to a payload,
    an exception to raise, or a callable taking the request kwargs.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []

    def request(self, method, path, **kwargs):
        self.calls.append((method, path, kwargs))
        try:
            reply = self.routes[(method, path)]
        except KeyError:
            raise AssertionError(f"Unexpected call {method} {path}")
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(**kwargs)
        return reply

    def get(self, path, **kwargs):
        return self.request("GET", path, **kwargs)

    def post(self, path, **kwargs):
        return self.request("POST", path, **kwargs)

    def put(self, path, **kwargs):
        return self.request("PUT", path, **kwargs)

    def patch(self, path, **kwargs):
        return self.request("PATCH", path, **kwargs)

    def count(self, method, path):
        return sum(1 for m, p, _ in self.calls if (m, p) == (method, path))


class Clock:
    def __init__(self, now=None):
        self.now = now or datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def credential_store():
    return CredentialStore(MemoryStorage())


@pytest.fixture
def observer():
    return SessionObserver()


@pytest.fixture
def clock():
    return Clock()
