from unittest.mock import Mock

import pytest
from flask import g

from config import TestConfig
from mobytranscript import create_app
from mobytranscript.extensions import db

USERS = {
    "tok-alice": {"id": "alice", "email": "alice@example.com"},
    "tok-bob": {"id": "bob", "email": "bob@example.com"},
}


@pytest.fixture
def app(tmp_path, monkeypatch):
    class _Config(TestConfig):
        LOCAL_STORAGE_DIR = str(tmp_path / "storage")

    # session cookies resolve against a fixed user table instead of the hosted service
    monkeypatch.setattr(
        "mobytranscript.services.users_service.get_current_user",
        lambda token: USERS.get(token),
    )

    app = create_app(_Config)

    # the test app context outlives each request, so g (and Flask-Login's
    # cached user in it) would otherwise carry over between clients
    @app.before_request
    def _reset_login_cache():
        g.pop("_login_user", None)

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    c = app.test_client()
    c.set_cookie(app.config["USERS_SESSION_COOKIE"], "tok-alice")
    return c


@pytest.fixture
def other_client(app):
    c = app.test_client()
    c.set_cookie(app.config["USERS_SESSION_COOKIE"], "tok-bob")
    return c


@pytest.fixture
def anon_client(app):
    return app.test_client()


@pytest.fixture
def make_response():
    """Factory for objects shaped like requests.Response."""

    def _make(status=200, json=None, text="", content=b"", headers=None):
        resp = Mock()
        resp.status_code = status
        resp.ok = status < 400
        resp.text = text
        resp.content = content
        resp.headers = headers or {}
        if json is None:
            resp.json = Mock(side_effect=ValueError("no json"))
        else:
            resp.json = Mock(return_value=json)
        return resp

    return _make


class FakeProvider:
    def __init__(self, name, configured=True, result=None, error=None):
        self.name = name
        self.configured = configured
        self.result = result
        self.error = error
        self.calls = []

    def is_configured(self):
        return self.configured

    def transcribe(self, audio, content_type):
        self.calls.append((audio, content_type))
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def fake_provider():
    return FakeProvider
