"""Beneficiary routes: the beneficiary's own dashboard and admin review."""

from __future__ import annotations

from typing import Any

from flask import jsonify

from ...extensions import get_session_factory
from ...models.beneficiary import Beneficiary
from ...services.auth import pending_activation_token
from ...services.beneficiaries import (
    find_beneficiary,
    onboard_beneficiary,
    serialize_beneficiary,
    update_beneficiary,
)
from ...services.dashboard import load_beneficiary_dashboard
from ..guards import json_body, request_context, require_principal
from . import bp
from .forms import BeneficiaryForm, BeneficiaryReviewForm


def _admin_view(beneficiary: Beneficiary) -> dict[str, Any]:
    """Admin payload; carries the activation token until the login is set up."""

    payload = serialize_beneficiary(beneficiary, include_activity=True)
    token = pending_activation_token(beneficiary.user_id, get_session_factory())
    if token:
        payload["activationToken"] = token
    return payload


@bp.get("")
def dashboard():
    principal = require_principal()
    return jsonify(load_beneficiary_dashboard(request_context(principal)).to_dict())


@bp.post("")
def onboard():
    principal = require_principal("Admin")
    fields = BeneficiaryForm.from_mapping(json_body()).validated_data()
    beneficiary = onboard_beneficiary(
        fields, actor=principal, session_factory=get_session_factory()
    )
    return (
        jsonify({"message": "Beneficiary onboarded", "beneficiary": _admin_view(beneficiary)}),
        201,
    )


@bp.get("/<identifier>")
def detail(identifier: str):
    principal = require_principal("Admin")
    beneficiary = find_beneficiary(
        identifier, actor=principal, session_factory=get_session_factory()
    )
    return jsonify({"beneficiary": _admin_view(beneficiary)})


@bp.patch("/<identifier>")
def review(identifier: str):
    principal = require_principal("Admin")
    fields = BeneficiaryReviewForm.from_mapping(json_body(), partial=True).validated_data()
    details = fields.pop("details", None)
    beneficiary = update_beneficiary(
        identifier,
        fields,
        actor=principal,
        session_factory=get_session_factory(),
        details=details,
    )
    return jsonify({"message": "Beneficiary updated", "beneficiary": _admin_view(beneficiary)})
