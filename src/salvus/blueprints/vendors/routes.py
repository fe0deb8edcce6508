"""Vendor administration routes."""

from __future__ import annotations

from typing import Any

from flask import jsonify

from ...extensions import get_session_factory
from ...models.vendor import Vendor
from ...services.auth import pending_activation_token
from ...services.vendors import find_vendor, onboard_vendor, serialize_vendor, update_vendor
from ..guards import json_body, require_principal
from . import bp
from .forms import VendorForm


def _admin_view(vendor: Vendor) -> dict[str, Any]:
    payload = serialize_vendor(vendor)
    token = pending_activation_token(vendor.user_id, get_session_factory())
    if token:
        payload["activationToken"] = token
    return payload


@bp.post("")
def onboard():
    principal = require_principal("Admin")
    fields = VendorForm.from_mapping(json_body()).validated_data()
    vendor = onboard_vendor(fields, actor=principal, session_factory=get_session_factory())
    return jsonify({"message": "Vendor onboarded", "vendor": _admin_view(vendor)}), 201


@bp.get("/<identifier>")
def detail(identifier: str):
    principal = require_principal("Admin")
    vendor = find_vendor(identifier, actor=principal, session_factory=get_session_factory())
    return jsonify({"vendor": _admin_view(vendor)})


@bp.patch("/<identifier>")
def review(identifier: str):
    principal = require_principal("Admin")
    fields = VendorForm.from_mapping(json_body(), partial=True).validated_data()
    vendor = update_vendor(
        identifier, fields, actor=principal, session_factory=get_session_factory()
    )
    return jsonify({"message": "Vendor updated", "vendor": _admin_view(vendor)})
