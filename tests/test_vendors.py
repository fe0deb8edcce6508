"""Tests for vendor onboarding and review."""

from __future__ import annotations

import pytest
from sqlmodel import select

from conftest import auth_headers, principal_for
from salvus.errors import ConflictError, NotFoundError
from salvus.models import User
from salvus.services.vendors import (
    approved_store_names,
    find_vendor,
    onboard_vendor,
    set_vendor_status,
)


@pytest.fixture
def admin_campaign(factories):
    admin = factories.user(role="Admin")
    return admin, factories.campaign(admin)


def _fields(campaign, **overrides):
    fields = {
        "campaign_id": campaign.id,
        "name": "Corner Grocer",
        "email": "Grocer@Example.org",
        "contact_person": "Meera",
        "authorized_categories": [" Food", "food", "Medicine "],
    }
    fields.update(overrides)
    return fields


def test_onboard_vendor_creates_pending_store_and_login(session_factory, admin_campaign):
    admin, campaign = admin_campaign

    vendor = onboard_vendor(_fields(campaign), actor=principal_for(admin), session_factory=session_factory)

    assert vendor.store_code.startswith("STR-")
    assert vendor.status == "Pending"
    assert vendor.authorized_categories == ["food", "medicine"]
    assert vendor.email == "grocer@example.org"
    with session_factory() as session:
        login = session.exec(select(User).where(User.id == vendor.user_id)).one()
        assert login.role == "Vendor"
        assert login.name == "Meera"
        assert login.requires_password_setup is True


def test_onboard_vendor_rejects_taken_email(session_factory, factories, admin_campaign):
    admin, campaign = admin_campaign
    factories.user(role="Donor", email="grocer@example.org")

    with pytest.raises(ConflictError):
        onboard_vendor(_fields(campaign), actor=principal_for(admin), session_factory=session_factory)


def test_onboard_vendor_into_missing_campaign(session_factory, admin_campaign):
    admin, campaign = admin_campaign

    with pytest.raises(NotFoundError):
        onboard_vendor(
            _fields(campaign, campaign_id=9999), actor=principal_for(admin), session_factory=session_factory
        )


def test_approval_lists_store_and_issues_activation(session_factory, admin_campaign):
    admin, campaign = admin_campaign
    actor = principal_for(admin)
    vendor = onboard_vendor(_fields(campaign), actor=actor, session_factory=session_factory)
    assert approved_store_names(campaign.id, session_factory=session_factory) == []

    approved = set_vendor_status(vendor.store_code, "Approved", actor=actor, session_factory=session_factory)

    assert approved.status == "Approved"
    assert approved_store_names(campaign.id, session_factory=session_factory) == ["Corner Grocer"]
    with session_factory() as session:
        login = session.exec(select(User).where(User.id == vendor.user_id)).one()
        assert login.verification_token


def test_find_vendor_is_scoped_to_creating_admin(session_factory, factories, admin_campaign):
    _, campaign = admin_campaign
    vendor = factories.vendor(campaign)
    outsider = factories.user(role="Admin")

    with pytest.raises(NotFoundError):
        find_vendor(str(vendor.id), actor=principal_for(outsider), session_factory=session_factory)


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


def test_vendor_routes_round_trip(client, app_factories):
    admin = app_factories.user(role="Admin")
    campaign = app_factories.campaign(admin)
    headers = auth_headers(admin)

    created = client.post(
        "/api/vendors",
        json={
            "campaignId": campaign.id,
            "name": "Pharma Plus",
            "email": "pharma@example.org",
            "authorizedCategories": ["Medicine"],
        },
        headers=headers,
    )
    assert created.status_code == 201
    store_id = created.get_json()["vendor"]["storeId"]

    patched = client.patch(
        f"/api/vendors/{store_id}", json={"status": "Approved", "phone": "555-0199"}, headers=headers
    )
    fetched = client.get(f"/api/vendors/{store_id}", headers=headers)

    assert patched.status_code == 200
    body = fetched.get_json()["vendor"]
    assert body["status"] == "Approved"
    assert body["phone"] == "555-0199"
    assert body["authorizedCategories"] == ["medicine"]


def test_approved_vendor_receives_activation_token_and_can_log_in(client, app_factories):
    admin = app_factories.user(role="Admin")
    campaign = app_factories.campaign(admin)
    headers = auth_headers(admin)
    created = client.post(
        "/api/vendors",
        json={"campaignId": campaign.id, "name": "Pharma Plus", "email": "pharma@example.org"},
        headers=headers,
    ).get_json()["vendor"]
    assert "activationToken" not in created

    approved = client.patch(
        f"/api/vendors/{created['storeId']}", json={"status": "Approved"}, headers=headers
    ).get_json()["vendor"]

    activated = client.post(
        "/api/auth/set-password",
        json={"token": approved["activationToken"], "password": "store-pass"},
    )
    login = client.post(
        "/api/auth/login", json={"email": "pharma@example.org", "password": "store-pass"}
    )

    assert activated.status_code == 200
    assert login.status_code == 200
    assert login.get_json()["user"]["role"] == "Vendor"


def test_vendor_route_validates_payload(client, app_factories):
    admin = app_factories.user(role="Admin")
    campaign = app_factories.campaign(admin)

    response = client.post(
        "/api/vendors",
        json={"campaignId": campaign.id, "name": "X", "authorizedCategories": "food"},
        headers=auth_headers(admin),
    )

    assert response.status_code == 400
    assert set(response.get_json()["errors"]) == {"email", "authorizedCategories"}


def test_vendor_patch_rejects_unknown_status(client, app_factories):
    admin = app_factories.user(role="Admin")
    vendor = app_factories.vendor(app_factories.campaign(admin))

    response = client.patch(
        f"/api/vendors/{vendor.id}", json={"status": "Gone"}, headers=auth_headers(admin)
    )

    assert response.status_code == 400
