"""Integrations API (email inboxes, cloud storage, voice assistants):
- GET    /api/integrations
- POST   /api/integrations
- PUT    /api/integrations/<id>
- DELETE /api/integrations/<id>
- POST   /api/integrations/<id>/sync
- POST   /api/integrations/smart-assistant
"""
from __future__ import annotations
from flask import Blueprint, jsonify
from flask_jwt_extended import jwt_required

from ..schemas import (
    IntegrationCreateSchema,
    IntegrationSyncSchema,
    IntegrationUpdateSchema,
    SmartAssistantSchema,
)
from ..services import IntegrationService
from ..utils.helpers import api_error
from ..utils.security import current_user_id

bp = Blueprint("integrations", __name__)


@bp.route("/api/integrations")
@jwt_required()
@api_error("fetching integrations")
def list_integrations():
    service = IntegrationService(current_user_id())
    return jsonify({"integrations": [i.to_dict() for i in service.integrations.list_ordered()]})


@bp.route("/api/integrations", methods=["POST"])
@jwt_required()
@api_error("creating the integration")
def create_integration():
    data = IntegrationCreateSchema.from_request()
    integration = IntegrationService(current_user_id()).create(data.model_dump())
    return jsonify({"message": "Integration created successfully", "integration": integration.to_dict()})


@bp.route("/api/integrations/smart-assistant", methods=["POST"])
@jwt_required()
@api_error("connecting to smart assistant")
def connect_smart_assistant():
    data = SmartAssistantSchema.from_request()
    integration, created = IntegrationService(current_user_id()).connect_smart_assistant(
        data.assistant_type, data.device_name
    )
    message = "Smart assistant connected successfully" if created else "Smart assistant connection updated"
    return jsonify({"message": message, "integration": integration.to_dict()})


@bp.route("/api/integrations/<integration_id>", methods=["PUT"])
@jwt_required()
@api_error("updating the integration")
def update_integration(integration_id: str):
    data = IntegrationUpdateSchema.from_request()
    changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
    integration = IntegrationService(current_user_id()).update(integration_id, changes)
    return jsonify({"message": "Integration updated successfully", "integration": integration.to_dict()})


@bp.route("/api/integrations/<integration_id>", methods=["DELETE"])
@jwt_required()
@api_error("deleting the integration")
def delete_integration(integration_id: str):
    IntegrationService(current_user_id()).delete(integration_id)
    return jsonify({"message": "Integration deleted successfully"})


@bp.route("/api/integrations/<integration_id>/sync", methods=["POST"])
@jwt_required()
@api_error("syncing the integration")
def sync_integration(integration_id: str):
    data = IntegrationSyncSchema.from_request()
    results = IntegrationService(current_user_id()).sync(integration_id, data.import_bills)
    return jsonify({"message": "Integration synced successfully", "results": results})
