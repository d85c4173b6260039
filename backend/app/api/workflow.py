"""REST API endpoints for storing and retrieving workflows."""

from __future__ import annotations

import json
from http import HTTPStatus
from typing import Any

from flask import Blueprint, current_app, jsonify, request

from ..extensions import db
from ..models.workflow import Workflow
from ..workflow.capabilities import CapabilityHost
from ..workflow.errors import CapabilityQueryFailure, MalformedDocument, StoreInsertFailure
from ..workflow.graph import find_trigger_node, parse_json
from ..workflow.permissions import resolve_permissions
from ..workflow.store import WorkflowStore, apply_record
from ..workflow.triggers import TriggerRegistrar

bp = Blueprint("workflows", __name__)

_TEXT_FIELDS = ("name", "icon", "description", "globalData")


def _summary(workflow: Workflow) -> dict[str, Any]:
    return {
        "id": workflow.id,
        "name": workflow.name,
        "icon": workflow.icon,
        "description": workflow.description,
        "createdAt": workflow.created_at,
        "isProtected": bool(workflow.is_protected),
    }


def _normalize_drawflow(value: Any) -> tuple[Any, list[str]]:
    """Validate the drawflow payload, returning errors if present."""

    if isinstance(value, str):
        try:
            value = parse_json(value)
        except MalformedDocument:
            return None, ["drawflow must be valid JSON"]

    if not isinstance(value, dict):
        return None, ["drawflow must be an object"]

    size = len(json.dumps(value).encode("utf-8"))
    if size > current_app.config["MAX_DOCUMENT_BYTES"]:
        return None, ["drawflow exceeds the maximum size"]

    return value, []


def _validate_workflow_payload(
    payload: dict[str, Any], *, partial: bool = False
) -> tuple[dict[str, Any], list[str]]:
    """Validate and normalize incoming workflow payloads."""

    errors: list[str] = []
    record: dict[str, Any] = {}

    for key in _TEXT_FIELDS:
        value = payload.get(key)
        if value is None:
            continue
        if not isinstance(value, str):
            errors.append(f"{key} must be a string")
            continue
        record[key] = value.strip() if key == "name" else value

    if not partial and not record.get("name"):
        errors.append("name is required")
    elif "name" in record and not record["name"]:
        errors.append("name must not be empty")

    if "drawflow" in payload:
        drawflow, drawflow_errors = _normalize_drawflow(payload["drawflow"])
        errors.extend(drawflow_errors)
        record["drawflow"] = drawflow

    table = payload.get("table", payload.get("dataColumns"))
    if table is not None:
        if isinstance(table, list):
            record["table"] = table
        else:
            errors.append("table must be a list")

    settings = payload.get("settings")
    if settings is not None:
        if isinstance(settings, dict):
            record["settings"] = settings
        else:
            errors.append("settings must be an object")

    if payload.get("isProtected") is not None:
        record["isProtected"] = bool(payload["isProtected"])

    return record, errors


def _sync_trigger(record: dict[str, Any]) -> None:
    node = find_trigger_node(record.get("drawflow"))
    if node is not None:
        TriggerRegistrar().register_trigger(record["id"], node)


@bp.post("/workflows")
def create_workflow() -> tuple[object, int]:
    payload = request.get_json(silent=True, force=True) or {}
    record, errors = _validate_workflow_payload(payload)
    if errors:
        return jsonify({"errors": errors}), HTTPStatus.BAD_REQUEST

    record.setdefault("version", current_app.config["EXT_VERSION"])
    try:
        inserted = WorkflowStore().insert(record)
    except StoreInsertFailure as exc:
        current_app.logger.warning("Workflow could not be created: %s", exc)
        return jsonify({"error": str(exc)}), HTTPStatus.CONFLICT

    created = next(iter(inserted.values()))
    _sync_trigger(created)
    return jsonify(created), HTTPStatus.CREATED


@bp.get("/workflows")
def list_workflows() -> tuple[object, int]:
    workflows = Workflow.query.order_by(Workflow.created_at.desc()).all()
    return jsonify([_summary(wf) for wf in workflows]), HTTPStatus.OK


@bp.get("/workflows/<workflow_id>")
def get_workflow(workflow_id: str) -> tuple[object, int]:
    workflow = db.get_or_404(Workflow, workflow_id)
    return jsonify(workflow.to_record()), HTTPStatus.OK


@bp.put("/workflows/<workflow_id>")
def update_workflow(workflow_id: str) -> tuple[object, int]:
    workflow = db.get_or_404(Workflow, workflow_id)
    payload = request.get_json(silent=True, force=True) or {}

    record, errors = _validate_workflow_payload(payload, partial=True)
    if errors:
        return jsonify({"errors": errors}), HTTPStatus.BAD_REQUEST

    apply_record(workflow, record)
    db.session.commit()

    updated = workflow.to_record()
    _sync_trigger(updated)
    return jsonify(updated), HTTPStatus.OK


@bp.delete("/workflows/<workflow_id>")
def delete_workflow(workflow_id: str) -> tuple[object, int]:
    workflow = db.get_or_404(Workflow, workflow_id)
    db.session.delete(workflow)
    db.session.commit()
    return "", HTTPStatus.NO_CONTENT


@bp.get("/workflows/<workflow_id>/permissions")
def get_workflow_permissions(workflow_id: str) -> tuple[object, int]:
    """Return the capabilities the workflow needs but the host has not granted."""

    workflow = db.get_or_404(Workflow, workflow_id)
    try:
        missing = resolve_permissions(
            workflow.to_record()["drawflow"],
            CapabilityHost(),
            current_app.config["BROWSER_TYPE"],
        )
    except MalformedDocument as exc:
        return jsonify({"error": str(exc)}), HTTPStatus.BAD_REQUEST
    except CapabilityQueryFailure as exc:
        current_app.logger.error("Capability query failed for %s: %s", workflow_id, exc)
        return jsonify({"error": str(exc)}), HTTPStatus.SERVICE_UNAVAILABLE

    return jsonify({"permissions": missing}), HTTPStatus.OK


@bp.get("/workflows/<workflow_id>/trigger")
def get_workflow_trigger(workflow_id: str) -> tuple[object, int]:
    db.get_or_404(Workflow, workflow_id)
    trigger = TriggerRegistrar().get(workflow_id)
    if trigger is None:
        return jsonify({"error": "workflow has no trigger"}), HTTPStatus.NOT_FOUND
    return jsonify(trigger), HTTPStatus.OK
