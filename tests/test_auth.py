"""Tests for login gating, tokens, and password setup."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timedelta, timezone

import pytest
from sqlmodel import select

from conftest import DEFAULT_PASSWORD, TEST_SECRET, auth_headers
from salvus.errors import ConflictError, ForbiddenError, UnauthorizedError, ValidationError
from salvus.models import User
from salvus.models.base import as_utc, utcnow
from salvus.services.auth import (
    authenticate,
    create_user,
    issue_admin_invite,
    issue_token,
    issue_verification_token,
    login,
    resolve_token,
    set_password,
    signup,
    verify_email,
)


# ---------------------------------------------------------------------------
# Service level
# ---------------------------------------------------------------------------


def test_create_user_normalizes_email_and_role(session_factory):
    user = create_user(
        name=" Dana ", email=" Dana@Example.org ", role="admin", password="hunter22",
        session_factory=session_factory,
    )

    assert user.email == "dana@example.org"
    assert user.role == "Admin"
    assert user.is_verified is True
    assert user.password_hash != "hunter22"


def test_create_user_without_password_awaits_setup(session_factory):
    user = create_user(
        name="Ravi", email="ravi@example.org", role="Vendor", session_factory=session_factory
    )

    assert user.requires_password_setup is True
    assert user.is_verified is False


def test_create_user_rejects_duplicates_and_unknown_roles(session_factory):
    create_user(name="A", email="a@example.org", role="Donor", session_factory=session_factory)

    with pytest.raises(ConflictError):
        create_user(name="B", email="A@example.org", role="Donor", session_factory=session_factory)
    with pytest.raises(ValidationError):
        create_user(name="C", email="c@example.org", role="Root", session_factory=session_factory)


def test_authenticate_checks_password(session_factory, factories):
    user = factories.user(role="Donor")

    assert authenticate(email=user.email, password="wrong", session_factory=session_factory) is None
    found = authenticate(email=user.email.upper(), password=DEFAULT_PASSWORD, session_factory=session_factory)
    assert found is not None
    assert found.last_login is not None


def test_login_requires_fields(session_factory):
    with pytest.raises(ValidationError, match="Please provide all fields"):
        login(email="", password="x", session_factory=session_factory)


def test_login_rejects_bad_credentials(session_factory, factories):
    user = factories.user(role="Donor")

    with pytest.raises(ValidationError, match="Invalid credentials"):
        login(email=user.email, password="nope", session_factory=session_factory)


def test_login_rejects_unverified_users(session_factory, factories):
    user = factories.user(role="Donor", is_verified=False)

    with pytest.raises(UnauthorizedError):
        login(email=user.email, password=DEFAULT_PASSWORD, session_factory=session_factory)


@pytest.mark.parametrize(
    "status,message",
    [("Pending", "pending approval"), ("Suspended", "temporarily on hold")],
)
def test_login_blocks_inactive_beneficiaries(session_factory, factories, status, message):
    admin = factories.user(role="Admin")
    campaign = factories.campaign(admin)
    user = factories.user(role="Beneficiary")
    factories.beneficiary(campaign, user=user, status=status)

    with pytest.raises(ForbiddenError, match=message):
        login(email=user.email, password=DEFAULT_PASSWORD, session_factory=session_factory)


def test_login_admits_approved_beneficiary(session_factory, factories):
    admin = factories.user(role="Admin")
    campaign = factories.campaign(admin)
    user = factories.user(role="Beneficiary")
    factories.beneficiary(campaign, user=user)

    assert login(email=user.email, password=DEFAULT_PASSWORD, session_factory=session_factory).id == user.id


def test_token_round_trip(factories):
    user = factories.user(role="Vendor")

    principal = resolve_token(issue_token(user, secret_key="k1"), secret_key="k1", max_age=60)

    assert principal is not None
    assert (principal.user_id, principal.email, principal.role) == (user.id, user.email, "Vendor")


def test_token_signed_with_other_key_is_rejected(factories):
    token = issue_token(factories.user(), secret_key="k1")

    assert resolve_token(token, secret_key="k2", max_age=60) is None
    assert resolve_token(None, secret_key="k1", max_age=60) is None


def test_expired_token_is_rejected(factories, monkeypatch):
    token = issue_token(factories.user(), secret_key="k1")
    real_time = time.time
    monkeypatch.setattr(time, "time", lambda: real_time() + 120)

    assert resolve_token(token, secret_key="k1", max_age=60) is None


def test_set_password_activates_account(session_factory, factories):
    user = factories.user(role="Vendor", password=None, is_verified=False)
    token = issue_verification_token(user.id, session_factory)
    assert token
    # A second call keeps the outstanding token.
    assert issue_verification_token(user.id, session_factory) is None

    updated = set_password(token=token, password="fresh-pass", session_factory=session_factory)

    assert updated.is_verified is True
    assert updated.requires_password_setup is False
    assert updated.verification_token is None
    assert login(email=user.email, password="fresh-pass", session_factory=session_factory)


@pytest.mark.parametrize("token,password", [("bogus", "long-enough"), ("", "long-enough")])
def test_set_password_rejects_unknown_tokens(session_factory, token, password):
    with pytest.raises(ValidationError, match="activation link"):
        set_password(token=token, password=password, session_factory=session_factory)


def test_set_password_enforces_minimum_length(session_factory):
    with pytest.raises(ValidationError, match="min 6"):
        set_password(token="anything", password="short", session_factory=session_factory)


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


def test_login_route_sets_cookie_used_by_later_requests(client, app_factories):
    user = app_factories.user(role="Donor")

    response = client.post("/api/auth/login", json={"email": user.email, "password": DEFAULT_PASSWORD})

    assert response.status_code == 200
    assert response.get_json()["user"]["email"] == user.email
    cookie = response.headers["Set-Cookie"]
    assert cookie.startswith("token=")
    assert "HttpOnly" in cookie

    me = client.get("/api/auth/login")
    assert me.status_code == 200
    assert me.get_json()["user"]["id"] == user.id


def test_login_route_reports_gating_status(client, app_factories):
    user = app_factories.user(role="Donor", is_verified=False)

    response = client.post("/api/auth/login", json={"email": user.email, "password": DEFAULT_PASSWORD})

    assert response.status_code == 401
    assert response.get_json() == {"message": "Please verify your email to login"}


def test_login_route_rejects_non_json_body(client):
    response = client.post("/api/auth/login", data="email=x", content_type="text/plain")

    assert response.status_code == 400


def test_logout_clears_cookie(client, app_factories):
    user = app_factories.user(role="Donor")
    client.post("/api/auth/login", json={"email": user.email, "password": DEFAULT_PASSWORD})

    response = client.post("/api/auth/logout")

    assert response.status_code == 200
    assert client.get("/api/auth/login").status_code == 401


def test_bearer_header_is_accepted(client, app_factories):
    user = app_factories.user(role="Donor")

    response = client.get("/api/auth/login", headers=auth_headers(user))

    assert response.status_code == 200


def test_set_password_route(client, app_factories, app_session_factory):
    user = app_factories.user(role="Beneficiary", password=None, is_verified=False)
    token = issue_verification_token(user.id, app_session_factory)

    response = client.post("/api/auth/set-password", json={"token": token, "password": "brand-new"})

    assert response.status_code == 200
    with app_session_factory() as session:
        stored = session.exec(select(User).where(User.id == user.id)).one()
        assert stored.is_verified is True


def test_tokens_are_signed_with_configured_secret(app):
    assert app.config["SECRET_KEY"] == TEST_SECRET


# ---------------------------------------------------------------------------
# Timestamps
# ---------------------------------------------------------------------------


def test_column_defaults_are_timezone_aware():
    assert utcnow().tzinfo is timezone.utc


def test_writes_store_utc_timestamps(session_factory):
    before = datetime.now(timezone.utc) - timedelta(seconds=5)
    create_user(
        name="A", email="a@example.org", role="Admin", password="secret1",
        session_factory=session_factory,
    )

    user = authenticate(email="a@example.org", password="secret1", session_factory=session_factory)

    assert user is not None
    assert as_utc(user.created_at) >= before
    assert as_utc(user.last_login) >= as_utc(user.created_at)


def test_as_utc_attaches_zone_to_naive_values():
    naive = datetime(2024, 5, 1, 9, 0)

    assert as_utc(naive) == datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)
    assert as_utc(None) is None


# ---------------------------------------------------------------------------
# Signup and email verification
# ---------------------------------------------------------------------------


def _signup(session_factory, **overrides):
    fields = {
        "name": "Dana",
        "email": "Dana@Example.org",
        "password": "hunter22",
        "secret_key": TEST_SECRET,
        "session_factory": session_factory,
    }
    fields.update(overrides)
    return signup(**fields)


def test_signup_creates_unverified_donor(session_factory, caplog):
    with caplog.at_level(logging.INFO, logger="salvus"):
        user = _signup(session_factory)

    assert user.role == "Donor"
    assert user.email == "dana@example.org"
    assert user.is_verified is False
    assert user.verification_token
    event = next(r for r in caplog.records if r.getMessage() == "Verification email due")
    assert event.verification_token == user.verification_token
    with pytest.raises(UnauthorizedError):
        login(email="dana@example.org", password="hunter22", session_factory=session_factory)


def test_signup_with_matching_invite_grants_admin(session_factory):
    invite = issue_admin_invite("dana@example.org", secret_key=TEST_SECRET)

    assert _signup(session_factory, invite_token=invite).role == "Admin"


@pytest.mark.parametrize(
    "invite",
    [
        "garbage",
        issue_admin_invite("someone.else@example.org", secret_key=TEST_SECRET),
        issue_admin_invite("dana@example.org", secret_key="other-secret"),
    ],
)
def test_signup_with_unusable_invite_falls_back_to_donor(session_factory, invite):
    assert _signup(session_factory, invite_token=invite).role == "Donor"


def test_signup_validates_input(session_factory):
    with pytest.raises(ValidationError, match="provide all fields"):
        _signup(session_factory, name="")
    with pytest.raises(ValidationError, match="min 6"):
        _signup(session_factory, password="abc")
    _signup(session_factory)
    with pytest.raises(ConflictError):
        _signup(session_factory, email="dana@example.org")


def test_verify_email_enables_login(session_factory):
    user = _signup(session_factory)

    verified = verify_email(token=user.verification_token, session_factory=session_factory)

    assert verified.is_verified is True
    assert verified.verification_token is None
    assert login(email="dana@example.org", password="hunter22", session_factory=session_factory)
    with pytest.raises(ValidationError):
        verify_email(token=user.verification_token, session_factory=session_factory)


def test_verify_email_refuses_activation_tokens(session_factory, factories):
    user = factories.user(role="Beneficiary", password=None, is_verified=False)
    token = issue_verification_token(user.id, session_factory)

    with pytest.raises(ValidationError):
        verify_email(token=token, session_factory=session_factory)


def test_signup_and_verify_routes(client, app_session_factory):
    created = client.post(
        "/api/auth/signup",
        json={"name": "Dana", "email": "dana@example.org", "password": "hunter22"},
    )
    assert created.status_code == 201

    with app_session_factory() as session:
        token = session.exec(select(User).where(User.email == "dana@example.org")).one().verification_token

    assert client.post("/api/auth/login", json={"email": "dana@example.org", "password": "hunter22"}).status_code == 401
    assert client.get(f"/api/auth/verify?token={token}").status_code == 200
    assert client.post("/api/auth/login", json={"email": "dana@example.org", "password": "hunter22"}).status_code == 200


def test_signup_route_reports_duplicates_and_bad_tokens(client, app_factories):
    existing = app_factories.user(role="Donor")

    duplicate = client.post(
        "/api/auth/signup",
        json={"name": "X", "email": existing.email, "password": "hunter22"},
    )
    bad_verify = client.post("/api/auth/verify", json={"token": "nope"})

    assert duplicate.status_code == 409
    assert bad_verify.status_code == 400
    assert bad_verify.get_json()["message"] == "Invalid or expired token"
