"""Campaign administration routes."""

from __future__ import annotations

from flask import jsonify

from ...extensions import get_session_factory
from ...services.campaigns import (
    campaign_detail,
    change_campaign_status,
    create_campaign,
    list_campaigns,
    serialize_campaign,
    update_campaign,
)
from ..guards import json_body, require_principal
from . import bp
from .forms import CampaignForm, CampaignStatusForm


@bp.get("")
def index():
    principal = require_principal()
    campaigns = list_campaigns(principal, session_factory=get_session_factory())
    return jsonify({"campaigns": [serialize_campaign(item) for item in campaigns]})


@bp.post("")
def create():
    principal = require_principal("Admin")
    fields = CampaignForm.from_mapping(json_body()).validated_data()
    campaign = create_campaign(fields, actor=principal, session_factory=get_session_factory())
    return jsonify({"message": "Campaign created", "campaign": serialize_campaign(campaign)}), 201


@bp.get("/<int:campaign_id>")
def detail(campaign_id: int):
    require_principal()
    return jsonify(campaign_detail(campaign_id, session_factory=get_session_factory()))


@bp.put("/<int:campaign_id>")
def update(campaign_id: int):
    principal = require_principal("Admin")
    fields = CampaignForm.from_mapping(json_body(), partial=True).validated_data()
    campaign = update_campaign(
        campaign_id, fields, actor=principal, session_factory=get_session_factory()
    )
    return jsonify({"message": "Campaign updated", "campaign": serialize_campaign(campaign)})


@bp.post("/<int:campaign_id>/status")
def status(campaign_id: int):
    principal = require_principal("Admin")
    fields = CampaignStatusForm.from_mapping(json_body()).validated_data()
    campaign = change_campaign_status(
        campaign_id, fields["status"], actor=principal, session_factory=get_session_factory()
    )
    return jsonify({"message": "Campaign status updated", "campaign": serialize_campaign(campaign)})
