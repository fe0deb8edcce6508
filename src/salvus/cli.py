"""Flask CLI commands for Salvus."""

from __future__ import annotations

from datetime import date, timedelta

import click

from .errors import SalvusError


def init_app(app) -> None:
    """Register CLI commands on the Flask app."""

    @app.cli.command("salvus-create-user")
    @click.option("--email", required=True, help="Login email")
    @click.option("--name", required=True, help="Display name")
    @click.option(
        "--role",
        type=click.Choice(["Admin", "Beneficiary", "Vendor", "Donor"], case_sensitive=False),
        default="Admin",
        show_default=True,
    )
    @click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
    def salvus_create_user(email: str, name: str, role: str, password: str) -> None:
        """Create a verified user who can log in immediately."""

        # Import here to avoid circular imports at module import time
        from .extensions import get_session_factory
        from .services.auth import create_user

        try:
            user = create_user(
                name=name,
                email=email,
                role=role,
                password=password,
                session_factory=get_session_factory(),
            )
        except SalvusError as exc:
            raise click.ClickException(exc.message) from exc
        click.echo(f"Created {user.role} user {user.email} (id={user.id})")

    @app.cli.command("salvus-invite-admin")
    @click.option("--email", required=True, help="Email the invite is bound to")
    def salvus_invite_admin(email: str) -> None:
        """Print a signup invite token that grants the Admin role."""

        from flask import current_app

        from .services.auth import issue_admin_invite

        config = current_app.config["SALVUS_CONFIG"]
        click.echo(issue_admin_invite(email, secret_key=config.SECRET_KEY))

    @app.cli.command("salvus-seed-demo")
    @click.option("--password", default="demo-pass", show_default=True)
    def salvus_seed_demo(password: str) -> None:
        """Seed an admin, an active campaign, an approved store and beneficiary."""

        from .extensions import get_session_factory

        try:
            summary = seed_demo(get_session_factory(), password=password)
        except SalvusError as exc:
            raise click.ClickException(exc.message) from exc
        for key, value in summary.items():
            click.echo(f"{key}: {value}")


def seed_demo(session_factory, *, password: str) -> dict[str, str]:
    """Populate a fresh database with one of everything the dashboards show."""

    from sqlmodel import select

    from .models.user import User
    from .services.auth import Principal, create_user, set_password
    from .services.beneficiaries import onboard_beneficiary, set_beneficiary_status
    from .services.campaigns import create_campaign
    from .services.context import RequestContext
    from .services.organisations import save_organisation
    from .services.purchases import record_purchase
    from .services.vendors import onboard_vendor, set_vendor_status

    admin = create_user(
        name="Demo Admin",
        email="admin@salvus.test",
        role="Admin",
        password=password,
        session_factory=session_factory,
    )
    actor = Principal(user_id=admin.id, email=admin.email, role=admin.role)  # type: ignore[arg-type]
    save_organisation(
        {"name": "Demo Relief Trust", "type": "Trust", "official_email": "office@salvus.test"},
        actor=actor,
        session_factory=session_factory,
    )

    today = date.today()
    campaign = create_campaign(
        {
            "name": "Flood Relief Demo",
            "location": "Riverside",
            "state_region": "North Province",
            "disaster_type": "Flood",
            "description": "Essentials for displaced households.",
            "total_funds_allocated": 100000.0,
            "beneficiary_cap": 1500.0,
            "start_date": today,
            "end_date": today + timedelta(days=90),
            "category_max_limits": {"Food": 1000, "Medicine": 500},
        },
        actor=actor,
        session_factory=session_factory,
    )

    vendor = onboard_vendor(
        {
            "campaign_id": campaign.id,
            "name": "Corner Grocer",
            "email": "store@salvus.test",
            "authorized_categories": ["food"],
        },
        actor=actor,
        session_factory=session_factory,
    )
    vendor = set_vendor_status(
        vendor.store_code, "Approved", actor=actor, session_factory=session_factory
    )

    beneficiary = onboard_beneficiary(
        {"campaign_id": campaign.id, "full_name": "Demo Beneficiary", "email": "ben@salvus.test"},
        actor=actor,
        session_factory=session_factory,
    )
    beneficiary = set_beneficiary_status(
        beneficiary.beneficiary_code, "Approved", actor=actor, session_factory=session_factory
    )

    # Activate both logins with the verification tokens issued on approval.
    with session_factory() as session:
        tokens = session.exec(
            select(User.verification_token).where(
                User.id.in_([vendor.user_id, beneficiary.user_id])  # type: ignore[union-attr]
            )
        ).all()
    for token in tokens:
        if token:
            set_password(token=token, password=password, session_factory=session_factory)

    store_login = Principal(user_id=vendor.user_id, email=vendor.email, role="Vendor")  # type: ignore[arg-type]
    ctx = RequestContext(principal=store_login, session_factory=session_factory)
    for amount in (120.0, 45.5):
        record_purchase(
            ctx, beneficiary_code=beneficiary.beneficiary_code, category="food", amount=amount
        )

    return {
        "admin": admin.email,
        "campaign": campaign.slug,
        "store": vendor.store_code,
        "beneficiary": beneficiary.beneficiary_code,
        "password": password,
    }
