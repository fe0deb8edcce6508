"""Vendor purchase routes."""

from __future__ import annotations

from flask import jsonify

from ...services.purchases import record_purchase, serialize_transaction
from ..guards import json_body, request_context, require_principal
from . import bp


@bp.post("")
def create():
    principal = require_principal("Vendor")
    payload = json_body()
    transaction = record_purchase(
        request_context(principal),
        beneficiary_code=str(payload.get("beneficiaryId") or ""),
        category=str(payload.get("category") or ""),
        amount=payload.get("amount"),
    )
    return (
        jsonify({"message": "Purchase recorded", "transaction": serialize_transaction(transaction)}),
        201,
    )
