import asyncio

import pytest
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from shop_finance.config import settings
from shop_finance.models.audit_log import AuditLog
from shop_finance.models.profile import Profile
from shop_finance.models.role import Role
from shop_finance.repositories.profile_repository import ProfileRepository
from tests.conftest import create_test_token, headers_for

INVITE_URL = "/functions/v1/invite"


def invite_body(**overrides):
    body = {"email": "user@shop.com", "fullName": "Juan Dela Cruz"}
    body.update(overrides)
    return body


class TestAuthenticationGate:
    """Bearer token checks happen before any call to the identity provider"""

    def test_missing_header_rejected(self, client, identity):
        response = client.post(INVITE_URL, json=invite_body())

        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}
        assert identity.token_exchanges == []
        assert identity.invites == []

    @pytest.mark.parametrize(
        "header",
        [
            "Bearer",
            "Basic dXNlcjpwYXNz",
            "bearer abc.def.ghi",
            "Bearer not-a-valid-jwt-token",
            "Bearer aaa.bbb.ccc",
        ],
    )
    def test_malformed_header_rejected(self, client, identity, header):
        response = client.post(INVITE_URL, headers={"Authorization": header}, json=invite_body())

        assert response.status_code == 401
        assert response.json()["error"] == "Unauthorized"
        assert identity.token_exchanges == []
        assert identity.invites == []

    def test_token_without_subject_rejected_locally(self, client, identity):
        token = create_test_token(user_id="")
        response = client.post(
            INVITE_URL, headers={"Authorization": f"Bearer {token}"}, json=invite_body()
        )

        assert response.status_code == 401
        assert identity.token_exchanges == []

    def test_token_rejected_by_identity_provider(self, client, identity):
        token = create_test_token(user_id="nobody-knows-me")
        response = client.post(
            INVITE_URL, headers={"Authorization": f"Bearer {token}"}, json=invite_body()
        )

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid token"}
        assert len(identity.token_exchanges) == 1
        assert identity.invites == []


class TestAuthorizationGate:
    """Only a caller whose stored profile says admin may provision"""

    @pytest.mark.parametrize("caller", ["editor_user", "viewer_user"])
    def test_non_admin_forbidden(self, request, client, db_session, identity, caller):
        principal = request.getfixturevalue(caller)

        response = client.post(INVITE_URL, headers=headers_for(principal), json=invite_body())

        assert response.status_code == 403
        assert response.json() == {"error": "Forbidden (admin only)"}
        assert identity.invites == []
        assert db_session.query(Profile).count() == 1

    def test_body_claiming_admin_does_not_help(self, client, identity, editor_headers):
        response = client.post(
            INVITE_URL, headers=editor_headers, json=invite_body(role="admin", callerRole="admin")
        )

        assert response.status_code == 403
        assert identity.invites == []

    def test_token_claims_do_not_help(self, client, identity, viewer_user):
        headers = headers_for(viewer_user, role="admin", app_metadata={"role": "admin"})

        response = client.post(INVITE_URL, headers=headers, json=invite_body())

        assert response.status_code == 403
        assert identity.invites == []

    def test_unprovisioned_caller_forbidden(self, client, identity, unprovisioned_headers):
        response = client.post(INVITE_URL, headers=unprovisioned_headers, json=invite_body())

        assert response.status_code == 403
        assert identity.invites == []

    def test_authorization_checked_before_input(self, client, viewer_headers):
        """A non-admin learns nothing about input validation"""
        response = client.post(INVITE_URL, headers=viewer_headers, json={})
        assert response.status_code == 403


class TestInputValidation:
    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"email": "user@shop.com"},
            {"fullName": "Juan Dela Cruz"},
            {"email": "   ", "fullName": "Juan Dela Cruz"},
            {"email": "user@shop.com", "fullName": ""},
            {"email": None, "fullName": "Juan Dela Cruz"},
        ],
    )
    def test_missing_fields(self, client, identity, admin_headers, body):
        response = client.post(INVITE_URL, headers=admin_headers, json=body)

        assert response.status_code == 400
        assert response.json() == {"error": "Missing fields"}
        assert identity.invites == []

    def test_non_json_body(self, client, identity, admin_headers):
        response = client.post(
            INVITE_URL,
            headers={**admin_headers, "Content-Type": "application/json"},
            content=b"{not json",
        )

        assert response.status_code == 400
        assert identity.invites == []

    def test_json_array_body(self, client, identity, admin_headers):
        response = client.post(INVITE_URL, headers=admin_headers, json=["user@shop.com"])

        assert response.status_code == 400
        assert identity.invites == []


class TestProvisioning:
    def test_default_role_is_viewer(self, client, db_session, identity, admin_headers):
        response = client.post(INVITE_URL, headers=admin_headers, json=invite_body())

        assert response.status_code == 200
        data = response.json()
        assert data["ok"] is True
        profile = db_session.query(Profile).filter_by(id=data["user_id"]).one()
        assert profile.role == Role.VIEWER
        assert profile.full_name == "Juan Dela Cruz"
        assert identity.invites == [("user@shop.com", {"full_name": "Juan Dela Cruz"})]

    def test_admin_invites_editor(self, client, db_session, identity, admin_headers):
        response = client.post(
            INVITE_URL,
            headers=admin_headers,
            json={"email": "newuser@shop.com", "fullName": "New User", "role": "editor"},
        )

        assert response.status_code == 200
        data = response.json()
        assert set(data) == {"ok", "user_id"}
        assert identity.users[data["user_id"]].email == "newuser@shop.com"

        db_session.expire_all()
        profile = ProfileRepository(db_session).get_by_id(data["user_id"])
        assert profile.role == Role.EDITOR

    @pytest.mark.parametrize("role", ["viewer", "editor", "admin"])
    def test_requested_role_kept_exactly(self, client, db_session, admin_headers, role):
        response = client.post(INVITE_URL, headers=admin_headers, json=invite_body(role=role))

        assert response.status_code == 200
        profile = db_session.query(Profile).filter_by(id=response.json()["user_id"]).one()
        assert profile.role == Role(role)

    @pytest.mark.parametrize("role", ["owner", "superadmin", 7, None])
    def test_invalid_role_falls_back_to_viewer(self, client, db_session, admin_headers, role):
        response = client.post(INVITE_URL, headers=admin_headers, json=invite_body(role=role))

        assert response.status_code == 200
        profile = db_session.query(Profile).filter_by(id=response.json()["user_id"]).one()
        assert profile.role == Role.VIEWER

    def test_password_is_ignored(self, client, db_session, identity, admin_headers):
        response = client.post(
            INVITE_URL, headers=admin_headers, json=invite_body(password="hunter2")
        )

        assert response.status_code == 200
        assert "hunter2" not in str(identity.invites)
        assert "hunter2" not in response.text

    def test_reinvite_unconfirmed_syncs_role(self, client, db_session, identity, admin_headers):
        first = client.post(INVITE_URL, headers=admin_headers, json=invite_body(role="viewer"))
        second = client.post(INVITE_URL, headers=admin_headers, json=invite_body(role="editor"))

        assert first.status_code == 200
        assert second.status_code == 200
        assert first.json()["user_id"] == second.json()["user_id"]
        db_session.expire_all()
        profiles = db_session.query(Profile).filter_by(id=first.json()["user_id"]).all()
        assert len(profiles) == 1
        assert profiles[0].role == Role.EDITOR

    def test_confirmed_email_fails_with_provider_message(
        self, client, db_session, identity, admin_headers, editor_user
    ):
        response = client.post(
            INVITE_URL, headers=admin_headers, json=invite_body(email="editor@shop.com", role="admin")
        )

        assert response.status_code == 400
        assert response.json() == {
            "error": "A user with this email address has already been registered"
        }
        # Role untouched
        db_session.expire_all()
        assert db_session.query(Profile).filter_by(id=editor_user.id).one().role == Role.EDITOR

    def test_provisioning_is_audited(self, client, db_session, admin_headers):
        response = client.post(INVITE_URL, headers=admin_headers, json=invite_body(role="editor"))

        entry = db_session.query(AuditLog).filter_by(table_name="profiles").one()
        assert entry.row_id == response.json()["user_id"]
        assert entry.actor_email == "owner@shop.com"
        assert entry.changes["role"] == {"new": "editor"}

    def test_profile_sync_failure_reports_invited_user(
        self, client, db_session, identity, admin_headers, monkeypatch
    ):
        def broken_upsert(self, *args, **kwargs):
            raise SQLAlchemyError("connection lost")

        monkeypatch.setattr(ProfileRepository, "upsert", broken_upsert)

        response = client.post(INVITE_URL, headers=admin_headers, json=invite_body())

        assert response.status_code == 500
        data = response.json()
        assert "user_id" in data
        assert data["user_id"] in identity.users
        assert "resubmit" in data["error"]


class TestHttpSurface:
    def test_preflight(self, client):
        response = client.options(INVITE_URL)

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.text == "ok"
        assert "POST" in response.headers["access-control-allow-methods"]
        assert "authorization" in response.headers["access-control-allow-headers"]

    @pytest.mark.parametrize("method", ["get", "put", "patch", "delete"])
    def test_other_methods_not_allowed(self, client, method):
        response = getattr(client, method)(INVITE_URL)

        assert response.status_code == 405
        assert response.json() == {"error": "Method not allowed"}

    def test_error_responses_carry_cors_headers(self, client):
        response = client.post(INVITE_URL, json=invite_body())
        assert response.headers["access-control-allow-origin"] == "*"

    @pytest.mark.parametrize("missing", ["PLATFORM_URL", "SERVICE_ROLE_KEY"])
    def test_misconfigured_server(self, client, identity, admin_headers, monkeypatch, missing):
        from shop_finance.dependencies import get_identity_client_factory
        from shop_finance.main import app

        # Use the real factory so configuration is checked
        app.dependency_overrides.pop(get_identity_client_factory)
        monkeypatch.setattr(settings, missing, "")

        response = client.post(INVITE_URL, headers=admin_headers, json=invite_body())

        assert response.status_code == 500
        assert response.json() == {"error": "Server misconfigured"}
        assert identity.invites == []


def _on_event_loop() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


class TestProfileStore:
    def test_caller_lookup_failure_is_reported(self, client, identity, admin_headers, monkeypatch):
        def broken_lookup(self, profile_id):
            raise OperationalError("SELECT profiles", {}, Exception("server closed the connection"))

        monkeypatch.setattr(ProfileRepository, "get_by_id", broken_lookup)

        response = client.post(INVITE_URL, headers=admin_headers, json=invite_body())

        assert response.status_code == 503
        assert "server closed the connection" in response.json()["error"]
        assert response.headers["access-control-allow-origin"] == "*"
        assert identity.invites == []

    def test_store_calls_run_off_the_event_loop(self, client, admin_headers, monkeypatch):
        seen = []
        original_get = ProfileRepository.get_by_id
        original_upsert = ProfileRepository.upsert

        def tracking_get(self, *args, **kwargs):
            seen.append(("get_by_id", _on_event_loop()))
            return original_get(self, *args, **kwargs)

        def tracking_upsert(self, *args, **kwargs):
            seen.append(("upsert", _on_event_loop()))
            return original_upsert(self, *args, **kwargs)

        monkeypatch.setattr(ProfileRepository, "get_by_id", tracking_get)
        monkeypatch.setattr(ProfileRepository, "upsert", tracking_upsert)

        response = client.post(INVITE_URL, headers=admin_headers, json=invite_body())

        assert response.status_code == 200
        assert ("get_by_id", False) in seen
        assert ("upsert", False) in seen
        assert all(on_loop is False for _, on_loop in seen)

    def test_session_lookup_runs_off_the_event_loop(self, client, admin_headers, monkeypatch):
        seen = []
        original_get = ProfileRepository.get_by_id

        def tracking_get(self, *args, **kwargs):
            seen.append(_on_event_loop())
            return original_get(self, *args, **kwargs)

        monkeypatch.setattr(ProfileRepository, "get_by_id", tracking_get)

        response = client.get("/api/session", headers=admin_headers)

        assert response.status_code == 200
        assert seen == [False]


class TestCrossOrigin:
    """CORS_ORIGINS is set to https://app.shop.com for the test app"""

    def preflight(self, client, path, origin):
        return client.options(
            path,
            headers={
                "Origin": origin,
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "authorization, content-type",
            },
        )

    def test_invite_preflight_from_any_origin(self, client):
        response = self.preflight(client, INVITE_URL, "https://other.site")

        assert response.status_code == 200
        assert response.text == "ok"
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["access-control-allow-methods"] == "POST, OPTIONS"

    def test_invite_post_from_any_origin(self, client, admin_headers):
        response = client.post(
            INVITE_URL,
            headers={**admin_headers, "Origin": "https://other.site"},
            json=invite_body(),
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"

    def test_data_api_still_restricted(self, client):
        response = self.preflight(client, "/api/transactions", "https://other.site")
        assert response.status_code == 400

    def test_data_api_allows_configured_origin(self, client):
        response = self.preflight(client, "/api/transactions", "https://app.shop.com")

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "https://app.shop.com"
