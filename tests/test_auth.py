"""Tests for token creation, validation, and the read/write auth dependencies."""

import pytest

from tests.conftest import make_token
from wireframe_vc.core.config import settings
from wireframe_vc.core.token_factory import create_token, decode_token

WF = "wf-landing"


class TestTokenFactory:

    def test_create_and_decode(self):
        token = create_token("alice", "editor", "test-secret")
        payload = decode_token(token, "test-secret")
        assert payload is not None
        assert payload.sub == "alice"
        assert payload.role == "editor"

    def test_wrong_secret_returns_none(self):
        token = create_token("alice", "editor", "correct-secret")
        assert decode_token(token, "wrong-secret") is None

    def test_expired_token_returns_none(self):
        token = create_token("alice", "editor", "secret", expires_hours=-1)
        assert decode_token(token, "secret") is None

    def test_malformed_token_returns_none(self):
        assert decode_token("not.a.token", "secret") is None
        assert decode_token("", "secret") is None

    def test_unknown_role_rejected_at_creation(self):
        with pytest.raises(ValueError):
            create_token("alice", "superuser", "secret")

    def test_unsupported_algorithm(self):
        with pytest.raises(ValueError):
            create_token("alice", "editor", "secret", algorithm="RS256")


class TestAuthDisabledMode:
    """When AUTH_ENABLED=false (default), writes succeed without a token."""

    def test_create_without_token_succeeds(self, client):
        resp = client.post(f"/api/wireframes/{WF}/versions", json={"data": {"title": "A"}})
        assert resp.status_code == 201
        assert resp.json()["created_by"] == "anonymous"


@pytest.fixture()
def auth_on(monkeypatch):
    monkeypatch.setattr(settings, "auth_enabled", True)
    monkeypatch.setattr(settings, "public_read", False)


class TestAuthEnabledMode:

    def test_write_without_token_is_401(self, client, auth_on):
        resp = client.post(f"/api/wireframes/{WF}/versions", json={"data": {"title": "A"}})
        assert resp.status_code == 401
        assert resp.json()["error"] == "UNAUTHORIZED"

    def test_write_with_editor_token_records_author(self, client, auth_on, auth_headers):
        resp = client.post(
            f"/api/wireframes/{WF}/versions", json={"data": {"title": "A"}}, headers=auth_headers
        )
        assert resp.status_code == 201
        assert resp.json()["created_by"] == "test-user"

    def test_viewer_cannot_write(self, client, auth_on):
        headers = {"Authorization": f"Bearer {make_token('val', 'viewer')}"}
        resp = client.post(f"/api/wireframes/{WF}/versions", json={"data": {"title": "A"}}, headers=headers)
        assert resp.status_code == 403
        assert resp.json()["error"] == "FORBIDDEN"

    def test_invalid_token_is_401(self, client, auth_on):
        headers = {"Authorization": "Bearer not-a-real-token"}
        resp = client.get(f"/api/wireframes/{WF}/versions", headers=headers)
        assert resp.status_code == 401

    def test_read_requires_token(self, client, auth_on):
        assert client.get(f"/api/wireframes/{WF}/versions").status_code == 401

    def test_viewer_can_read(self, client, auth_on):
        headers = {"Authorization": f"Bearer {make_token('val', 'viewer')}"}
        assert client.get(f"/api/wireframes/{WF}/versions", headers=headers).status_code == 200

    def test_public_read_allows_anonymous_reads_only(self, client, auth_on, monkeypatch):
        monkeypatch.setattr(settings, "public_read", True)
        assert client.get(f"/api/wireframes/{WF}/versions").status_code == 200
        resp = client.post(f"/api/wireframes/{WF}/versions", json={"data": {"title": "A"}})
        assert resp.status_code == 401
