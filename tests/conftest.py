"""Pytest configuration and shared fixtures for Salvus tests.

Provides an isolated SQLite database per test, entity factories for the
relief-fund records, and an application/client pair for route tests.
"""

from __future__ import annotations

import tempfile
from datetime import datetime
from itertools import count
from pathlib import Path
from typing import Any, Optional

import pytest
from sqlmodel import SQLModel, create_engine

# Import all models to ensure they're registered with SQLModel metadata
from salvus.models import (
    Beneficiary,
    BeneficiaryActivity,
    Campaign,
    Organisation,
    Transaction,
    User,
    Vendor,
)
from salvus.infra.database import create_session_factory
from salvus.services.auth import Principal, hash_password, issue_token

TEST_SECRET = "test-secret-key"
DEFAULT_PASSWORD = "secret-pass"


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test."""

    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Commit-on-exit session factory matching the repositories' expectations."""

    return create_session_factory(db_engine)


def _persist(session_factory, obj):
    with session_factory() as session:
        session.add(obj)
        session.commit()
        session.refresh(obj)
        session.expunge(obj)
    return obj


# =============================================================================
# Application Fixtures
# =============================================================================


@pytest.fixture()
def app(tmp_path, monkeypatch: pytest.MonkeyPatch):
    db_path = tmp_path / "salvus.db"
    monkeypatch.setenv("SALVUS_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("SALVUS_DATABASE_URL", f"sqlite:///{db_path}")
    monkeypatch.setenv("SALVUS_SECRET_KEY", TEST_SECRET)

    from salvus import create_app

    return create_app("testing")


@pytest.fixture()
def client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture()
def app_session_factory(app):
    return app.extensions["salvus"]["session_factory"]


def auth_headers(user: User) -> dict[str, str]:
    """Bearer header carrying a token for ``user`` signed with the test key."""

    return {"Authorization": f"Bearer {issue_token(user, secret_key=TEST_SECRET)}"}


def principal_for(user: User) -> Principal:
    return Principal(user_id=user.id, email=user.email, role=user.role)  # type: ignore[arg-type]


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def factories(session_factory):
    """Entity factories bound to the per-test database."""

    return EntityFactory(session_factory)


@pytest.fixture
def app_factories(app_session_factory):
    """Entity factories bound to the application's database."""

    return EntityFactory(app_session_factory)


class EntityFactory:
    """Creates persisted records with sensible defaults."""

    def __init__(self, session_factory) -> None:
        self.session_factory = session_factory
        self._seq = count(1)

    def user(
        self,
        *,
        role: str = "Admin",
        email: Optional[str] = None,
        password: Optional[str] = DEFAULT_PASSWORD,
        is_verified: bool = True,
        **overrides: Any,
    ) -> User:
        n = next(self._seq)
        user = User(
            name=overrides.pop("name", f"{role} {n}"),
            email=email or f"{role.lower()}{n}@example.org",
            role=role,
            password_hash=hash_password(password) if password else "",
            is_verified=is_verified,
            requires_password_setup=password is None,
            **overrides,
        )
        return _persist(self.session_factory, user)

    def organisation(self, admin: User, name: str = "Helping Hands") -> Organisation:
        return _persist(self.session_factory, Organisation(created_by=admin.id, name=name))

    def campaign(self, admin: User, **overrides: Any) -> Campaign:
        n = next(self._seq)
        fields: dict[str, Any] = {
            "created_by": admin.id,
            "name": f"Campaign {n}",
            "slug": f"campaign-{n}",
            "location": "Riverside",
            "state_region": "North Province",
            "disaster_type": "Flood",
            "total_funds_allocated": 100000.0,
            "beneficiary_cap": 1500.0,
            "categories": ["food", "medicine"],
            "category_max_limits": {"food": 1000, "medicine": 500},
        }
        fields.update(overrides)
        return _persist(self.session_factory, Campaign(**fields))

    def beneficiary(
        self,
        campaign: Campaign,
        *,
        user: Optional[User] = None,
        status: str = "Approved",
        **overrides: Any,
    ) -> Beneficiary:
        n = next(self._seq)
        if user is None:
            user = self.user(role="Beneficiary")
        beneficiary = Beneficiary(
            beneficiary_code=overrides.pop("beneficiary_code", f"BEN-{1000 + n}"),
            campaign_id=campaign.id,
            user_id=user.id,
            created_by=campaign.created_by,
            full_name=overrides.pop("full_name", user.name),
            email=user.email,
            status=status,
            **overrides,
        )
        return _persist(self.session_factory, beneficiary)

    def activity(
        self, beneficiary: Beneficiary, action: str, timestamp: datetime
    ) -> BeneficiaryActivity:
        return _persist(
            self.session_factory,
            BeneficiaryActivity(beneficiary_id=beneficiary.id, action=action, timestamp=timestamp),
        )

    def vendor(
        self,
        campaign: Campaign,
        *,
        user: Optional[User] = None,
        status: str = "Approved",
        **overrides: Any,
    ) -> Vendor:
        n = next(self._seq)
        if user is None:
            user = self.user(role="Vendor")
        vendor = Vendor(
            store_code=overrides.pop("store_code", f"STR-{1000 + n}"),
            campaign_id=campaign.id,
            user_id=user.id,
            created_by=campaign.created_by,
            name=overrides.pop("name", f"Store {n}"),
            email=user.email,
            status=status,
            **overrides,
        )
        return _persist(self.session_factory, vendor)

    def transaction(
        self,
        beneficiary: Beneficiary,
        vendor: Vendor,
        *,
        amount: float,
        category: str = "food",
        timestamp: Optional[datetime] = None,
        status: Optional[str] = "Completed",
    ) -> Transaction:
        txn = Transaction(
            campaign_id=beneficiary.campaign_id,
            beneficiary_id=beneficiary.id,
            vendor_id=vendor.id,
            amount=amount,
            category=category,
            status=status,
        )
        if timestamp is not None:
            txn.timestamp = timestamp
        return _persist(self.session_factory, txn)

