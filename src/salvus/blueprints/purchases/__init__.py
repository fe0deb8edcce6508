"""Purchases blueprint package."""

from __future__ import annotations

from flask import Blueprint

bp = Blueprint("purchases", __name__, url_prefix="/api/purchases")

from . import routes  # noqa: E402,F401 - ensure routes get registered

__all__ = ["bp"]
