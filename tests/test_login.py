"""
Tests for sign in, sign out and configuration loading.
"""
from types import SimpleNamespace

import pytest

from app.config import Config
from app.routes import login


class FakeAuth:
    def __init__(self, session=None, error=None):
        self.session = session
        self.error = error
        self.attempts = []

    def sign_in_with_password(self, credentials):
        self.attempts.append(credentials["email"])
        if self.error:
            raise self.error
        return SimpleNamespace(session=self.session)


@pytest.fixture
def fake_auth(monkeypatch):
    auth = FakeAuth()
    monkeypatch.setattr(login, "get_auth_client", lambda: SimpleNamespace(auth=auth))
    return auth


class TestLogin:
    def test_login_page(self, anonymous_client):
        response = anonymous_client.get("/login")
        assert response.status_code == 200

    def test_bad_credentials(self, anonymous_client, fake_auth):
        fake_auth.error = RuntimeError("Invalid login credentials")
        response = anonymous_client.post("/login", data={"email": "owner@example.com", "password": "nope"})
        assert response.status_code == 401
        assert "Login failed" in response.text
        assert "sb_access_token" not in response.cookies

    def test_successful_login_sets_cookies(self, anonymous_client, fake_auth):
        fake_auth.session = SimpleNamespace(access_token="access", refresh_token="refresh")
        response = anonymous_client.post(
            "/login",
            data={"email": "owner@example.com", "password": "secret", "next": "/menu"},
            follow_redirects=False,
        )
        assert response.status_code == 303
        assert response.headers["location"] == "/menu"
        assert response.cookies.get("sb_access_token") == "access"
        assert response.cookies.get("sb_refresh_token") == "refresh"

    def test_next_must_be_local(self, anonymous_client, fake_auth):
        fake_auth.session = SimpleNamespace(access_token="access", refresh_token="refresh")
        response = anonymous_client.post(
            "/login",
            data={"email": "owner@example.com", "password": "secret", "next": "//evil.example"},
            follow_redirects=False,
        )
        assert response.headers["location"] == "/"

    def test_logout_clears_session(self, client):
        response = client.post("/logout", follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == "/login"
        cleared = response.headers.get_list("set-cookie")
        assert any(h.startswith("sb_access_token=") and "Max-Age=0" in h for h in cleared)


class TestConfig:
    def test_missing_supabase_url(self, monkeypatch):
        monkeypatch.delenv("SUPABASE_URL", raising=False)
        with pytest.raises(ValueError):
            Config()

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("IMAGE_UPLOAD_TIMEOUT", raising=False)
        monkeypatch.delenv("MAX_IMAGE_BYTES", raising=False)
        config = Config()
        assert config.IMAGE_UPLOAD_TIMEOUT == 60
        assert config.MAX_IMAGE_BYTES == 5 * 1024 * 1024
        assert config.FREEIMAGE_UPLOAD_URL == "https://freeimage.host/api/1/upload"
