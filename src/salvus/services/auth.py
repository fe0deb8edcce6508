"""Authentication, tokens and user management services."""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import Any, Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError
from itsdangerous import BadData, BadSignature, SignatureExpired, URLSafeTimedSerializer
from sqlmodel import select

from ..errors import ConflictError, ForbiddenError, UnauthorizedError, ValidationError
from ..infra.database import SessionFactory
from ..logging_config import get_logger
from ..models.base import utcnow
from ..models.beneficiary import Beneficiary
from ..models.user import ROLES, User

logger = get_logger(__name__)

_hasher = PasswordHasher()
_TOKEN_SALT = "salvus-auth"
_INVITE_SALT = "salvus-admin-invite"
INVITE_MAX_AGE = 7 * 24 * 3600
MIN_PASSWORD_LENGTH = 6

_BLOCKED_BENEFICIARY_MESSAGES = {
    "Pending": "Your account is pending approval. Please wait for admin approval.",
    "Suspended": "Your beneficiary access is temporarily on hold due to an administrative review.",
}


@dataclass(slots=True, frozen=True)
class Principal:
    """Identity resolved from a request token."""

    user_id: int
    email: str
    role: str

    def to_claims(self) -> dict[str, Any]:
        return {"user_id": self.user_id, "email": self.email, "role": self.role}


def _normalize_role(role: str) -> str:
    for allowed in ROLES:
        if (role or "").strip().lower() == allowed.lower():
            return allowed
    raise ValidationError(f"Invalid role: {role}")


def hash_password(password: str) -> str:
    return _hasher.hash(password)


def create_user(
    *,
    name: str,
    email: str,
    role: str,
    password: Optional[str] = None,
    session_factory: SessionFactory,
) -> User:
    """Create a user; without a password the account awaits password setup."""

    normalized_role = _normalize_role(role)
    email = email.strip().lower()
    with session_factory() as session:
        if session.exec(select(User).where(User.email == email)).first():
            raise ConflictError("Email already registered in system")
        user = User(
            name=name.strip(),
            email=email,
            role=normalized_role,
            password_hash=hash_password(password) if password else "",
            is_verified=bool(password),
            requires_password_setup=not password,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        session.expunge(user)
        return user


def get_user(user_id: int, session_factory: SessionFactory) -> Optional[User]:
    with session_factory() as session:
        user = session.get(User, user_id)
        if user:
            session.expunge(user)
        return user


def authenticate(*, email: str, password: str, session_factory: SessionFactory) -> Optional[User]:
    """Validate credentials and return the user when correct."""

    email = (email or "").strip().lower()
    if not email or not password:
        return None
    with session_factory() as session:
        user = session.exec(select(User).where(User.email == email)).first()
        if user is None or not user.password_hash:
            return None
        try:
            _hasher.verify(user.password_hash, password)
        except (VerifyMismatchError, InvalidHash, VerificationError):
            return None

        user.last_login = utcnow()
        session.add(user)
        session.commit()
        session.refresh(user)
        session.expunge(user)
        return user


def login(*, email: str, password: str, session_factory: SessionFactory) -> User:
    """Authenticate and apply account gating; raise on any refusal."""

    if not email or not password:
        raise ValidationError("Please provide all fields")
    user = authenticate(email=email, password=password, session_factory=session_factory)
    if user is None:
        raise ValidationError("Invalid credentials")
    if not user.is_verified:
        raise UnauthorizedError("Please verify your email to login")

    if user.role == "Beneficiary":
        with session_factory() as session:
            beneficiary = session.exec(
                select(Beneficiary).where(Beneficiary.user_id == user.id)
            ).first()
            status = beneficiary.status if beneficiary else None
        if status in _BLOCKED_BENEFICIARY_MESSAGES:
            logger.info("Blocked beneficiary login", extra={"user_id": user.id, "status": status})
            raise ForbiddenError(_BLOCKED_BENEFICIARY_MESSAGES[status])

    logger.info("User logged in", extra={"user_id": user.id, "role": user.role})
    return user


def _serializer(secret_key: str) -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(secret_key, salt=_TOKEN_SALT)


def issue_token(user: User, *, secret_key: str) -> str:
    """Sign the user's identity claims into an opaque token."""

    claims = Principal(user_id=int(user.id or 0), email=user.email, role=user.role).to_claims()
    return _serializer(secret_key).dumps(claims)


def resolve_token(token: Optional[str], *, secret_key: str, max_age: int) -> Optional[Principal]:
    """Return the principal carried by a token, or ``None`` if it is unusable."""

    if not token:
        return None
    try:
        claims = _serializer(secret_key).loads(token, max_age=max_age)
    except SignatureExpired:
        logger.info("Rejected expired token")
        return None
    except BadSignature:
        logger.warning("Rejected token with bad signature")
        return None
    try:
        return Principal(
            user_id=int(claims["user_id"]), email=str(claims["email"]), role=str(claims["role"])
        )
    except (KeyError, TypeError, ValueError):
        return None


def issue_verification_token(user_id: int, session_factory: SessionFactory) -> Optional[str]:
    """Give a user awaiting password setup a one-time activation token.

    Returns ``None`` when the user needs no token or already holds one.
    """

    with session_factory() as session:
        user = session.get(User, user_id)
        if user is None or not user.requires_password_setup or user.verification_token:
            return None
        user.verification_token = secrets.token_hex(32)
        session.add(user)
        session.commit()
        return user.verification_token


def issue_admin_invite(email: str, *, secret_key: str) -> str:
    """Signed invite that lets ``email`` sign up with the Admin role."""

    return URLSafeTimedSerializer(secret_key, salt=_INVITE_SALT).dumps(
        {"email": email.strip().lower()}
    )


def _invited_admin(
    invite_token: Optional[str], email: str, *, secret_key: str, max_age: int
) -> bool:
    if not invite_token:
        return False
    try:
        claims = URLSafeTimedSerializer(secret_key, salt=_INVITE_SALT).loads(
            invite_token, max_age=max_age
        )
    except BadData:
        # Expired, tampered or foreign invites sign the user up as a donor.
        logger.info("Ignored unusable admin invite", extra={"email": email})
        return False
    return isinstance(claims, dict) and claims.get("email") == email


def signup(
    *,
    name: str,
    email: str,
    password: str,
    session_factory: SessionFactory,
    secret_key: str,
    invite_token: Optional[str] = None,
    invite_max_age: int = INVITE_MAX_AGE,
) -> User:
    """Self-service registration; the account stays unverified until email confirmation."""

    name = (name or "").strip()
    email = (email or "").strip().lower()
    if not name or not email or not password:
        raise ValidationError("Please provide all fields")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Invalid password (min {MIN_PASSWORD_LENGTH} chars)")

    role = "Donor"
    if _invited_admin(invite_token, email, secret_key=secret_key, max_age=invite_max_age):
        role = "Admin"

    with session_factory() as session:
        if session.exec(select(User.id).where(User.email == email)).first() is not None:
            raise ConflictError("User already exists")
        user = User(
            name=name,
            email=email,
            role=role,
            password_hash=hash_password(password),
            is_verified=False,
            verification_token=secrets.token_hex(32),
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        session.expunge(user)

    # Mail delivery picks the token up from this event.
    logger.info(
        "Verification email due",
        extra={"user_id": user.id, "email": user.email, "verification_token": user.verification_token},
    )
    return user


def verify_email(*, token: str, session_factory: SessionFactory) -> User:
    """Confirm a self-registered account from its emailed token."""

    if not token:
        raise ValidationError("Invalid token")
    with session_factory() as session:
        user = session.exec(select(User).where(User.verification_token == token)).first()
        # Activation tokens for onboarded accounts go through set_password instead.
        if user is None or user.requires_password_setup:
            raise ValidationError("Invalid or expired token")
        user.is_verified = True
        user.verification_token = None
        session.add(user)
        session.commit()
        session.refresh(user)
        session.expunge(user)
    logger.info("Email verified", extra={"user_id": user.id})
    return user


def pending_activation_token(
    user_id: Optional[int], session_factory: SessionFactory
) -> Optional[str]:
    """The activation token an admin hands on, while the account still awaits setup."""

    if user_id is None:
        return None
    with session_factory() as session:
        user = session.get(User, user_id)
        if user is None or not user.requires_password_setup:
            return None
        return user.verification_token


def set_password(*, token: str, password: str, session_factory: SessionFactory) -> User:
    """Complete account activation using a verification token."""

    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Invalid password (min {MIN_PASSWORD_LENGTH} chars)")
    if not token:
        raise ValidationError("Invalid or expired activation link")
    with session_factory() as session:
        user = session.exec(select(User).where(User.verification_token == token)).first()
        if user is None:
            raise ValidationError("Invalid or expired activation link")
        user.password_hash = hash_password(password)
        user.requires_password_setup = False
        user.is_verified = True
        user.verification_token = None
        session.add(user)
        session.commit()
        session.refresh(user)
        session.expunge(user)
    logger.info("Password set", extra={"user_id": user.id})
    return user


def serialize_user(user: User) -> dict[str, Any]:
    return {"id": user.id, "name": user.name, "email": user.email, "role": user.role}
