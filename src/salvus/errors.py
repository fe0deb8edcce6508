"""Error kinds raised by services and their HTTP mapping."""

from __future__ import annotations

from enum import Enum

from flask import Flask, jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from .logging_config import get_logger

logger = get_logger(__name__)

GENERIC_MESSAGE = "Internal Server Error"


class ErrorKind(str, Enum):
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    CONFLICT = "conflict"
    INFRASTRUCTURE = "infrastructure"

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self]


_STATUS_CODES = {
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.VALIDATION: 400,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INFRASTRUCTURE: 500,
}


class SalvusError(Exception):
    """Base class for failures the HTTP boundary knows how to report."""

    kind: ErrorKind = ErrorKind.INFRASTRUCTURE
    default_message = GENERIC_MESSAGE

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return self.kind.status_code

    def to_dict(self) -> dict[str, str]:
        return {"message": self.message}


class UnauthorizedError(SalvusError):
    kind = ErrorKind.UNAUTHORIZED
    default_message = "Unauthorized"


class ForbiddenError(SalvusError):
    kind = ErrorKind.FORBIDDEN
    default_message = "Forbidden"


class NotFoundError(SalvusError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Not found"


class ValidationError(SalvusError):
    """Input rejected by a service; ``errors`` holds per-field messages."""

    kind = ErrorKind.VALIDATION
    default_message = "Invalid request"

    def __init__(self, message: str | None = None, errors: dict[str, list[str]] | None = None):
        super().__init__(message)
        self.errors = errors or {}

    def to_dict(self) -> dict:
        payload: dict = {"message": self.message}
        if self.errors:
            payload["errors"] = self.errors
        return payload


class ConflictError(SalvusError):
    kind = ErrorKind.CONFLICT
    default_message = "Conflict"


class InfrastructureError(SalvusError):
    kind = ErrorKind.INFRASTRUCTURE


def register_error_handlers(app: Flask) -> None:
    """Translate exceptions escaping a view into JSON responses."""

    @app.errorhandler(SalvusError)
    def _handle_salvus_error(error: SalvusError):
        if error.kind is ErrorKind.INFRASTRUCTURE:
            logger.error("Infrastructure failure: %s", error.message, exc_info=error)
            return jsonify({"message": GENERIC_MESSAGE}), 500
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def _handle_http_error(error: HTTPException):
        return jsonify({"message": error.name}), error.code or 500

    @app.errorhandler(SQLAlchemyError)
    def _handle_database_error(error: SQLAlchemyError):
        logger.exception("Database failure", exc_info=error)
        return jsonify({"message": GENERIC_MESSAGE}), 500

    @app.errorhandler(Exception)
    def _handle_unexpected(error: Exception):
        logger.exception("Unhandled error", exc_info=error)
        return jsonify({"message": GENERIC_MESSAGE}), 500
