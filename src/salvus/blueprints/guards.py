"""Request identity and payload helpers shared by the API blueprints."""

from __future__ import annotations

from typing import Any, Optional

from flask import current_app, request

from ..config import BaseConfig
from ..errors import ForbiddenError, UnauthorizedError, ValidationError
from ..extensions import get_session_factory
from ..services.auth import Principal, resolve_token
from ..services.context import RequestContext


def _config() -> BaseConfig:
    return current_app.config["SALVUS_CONFIG"]


def request_token() -> Optional[str]:
    """Token from the auth cookie, else from an ``Authorization: Bearer`` header."""

    token = request.cookies.get(_config().TOKEN_COOKIE)
    if token:
        return token
    header = request.headers.get("Authorization", "")
    scheme, _, credentials = header.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return None


def current_principal() -> Optional[Principal]:
    config = _config()
    return resolve_token(
        request_token(), secret_key=config.SECRET_KEY, max_age=config.TOKEN_MAX_AGE
    )


def require_principal(*roles: str) -> Principal:
    """Return the caller's principal, enforcing ``roles`` when given."""

    principal = current_principal()
    if principal is None:
        raise UnauthorizedError()
    if roles and principal.role not in roles:
        raise ForbiddenError()
    return principal


def request_context(principal: Principal) -> RequestContext:
    return RequestContext(
        principal=principal,
        session_factory=get_session_factory(),
        history_limit=_config().HISTORY_LIMIT,
    )


def json_body() -> dict[str, Any]:
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload
