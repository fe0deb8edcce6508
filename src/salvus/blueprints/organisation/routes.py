"""Routes for the calling admin's organisation."""

from __future__ import annotations

from flask import jsonify

from ...extensions import get_session_factory
from ...services.organisations import get_organisation, save_organisation, serialize_organisation
from ..guards import json_body, require_principal
from . import bp
from .forms import OrganisationForm


@bp.get("")
def detail():
    principal = require_principal("Admin")
    organisation = get_organisation(actor=principal, session_factory=get_session_factory())
    return jsonify({"organisation": serialize_organisation(organisation)})


@bp.post("")
def save():
    principal = require_principal("Admin")
    fields = OrganisationForm.from_mapping(json_body()).validated_data()
    organisation = save_organisation(
        fields, actor=principal, session_factory=get_session_factory()
    )
    return jsonify({"organisation": serialize_organisation(organisation)})
