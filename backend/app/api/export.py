"""API endpoints for exporting and importing workflow documents."""
from __future__ import annotations

from collections.abc import Callable
from http import HTTPStatus
from typing import Any

from flask import Blueprint, Response, current_app, jsonify, request

from ..extensions import db, limiter
from ..models.workflow import Workflow
from ..workflow.errors import MalformedDocument, StoreInsertFailure
from ..workflow.files import RequestFiles
from ..workflow.store import WorkflowStore
from ..workflow.transfer import (
    DOCUMENT_MIMETYPE,
    export_workflow,
    import_document,
    import_files,
    reset_workflows,
)
from ..workflow.triggers import TriggerRegistrar

bp = Blueprint("export", __name__)


def _import_rate_limit() -> str:
    return current_app.config["IMPORT_RATE_LIMIT"]


def _run_import(operation: Callable[[], Any]) -> tuple[object, int]:
    """Run an import operation and translate its failures into responses."""

    try:
        result = operation()
    except MalformedDocument as exc:
        return jsonify({"error": str(exc)}), HTTPStatus.BAD_REQUEST
    except StoreInsertFailure as exc:
        current_app.logger.error("Workflow import failed: %s", exc)
        return jsonify({"error": str(exc)}), HTTPStatus.CONFLICT

    if isinstance(result, dict):
        result = list(result.values())
    return jsonify({"workflows": result}), HTTPStatus.CREATED


@bp.get("/workflows/<workflow_id>/export")
def export_workflow_document(workflow_id: str) -> Response | tuple[object, int]:
    """Download the workflow and its sub-workflows as a portable document."""

    workflow = db.get_or_404(Workflow, workflow_id)
    files = RequestFiles()
    content = export_workflow(
        workflow.to_record(),
        WorkflowStore(),
        files,
        max_depth=current_app.config["MAX_INCLUSION_DEPTH"],
    )
    if content is None:
        return "", HTTPStatus.NO_CONTENT

    return files.download_response()


@bp.post("/workflows/import")
@limiter.limit(_import_rate_limit)
def import_workflows() -> tuple[object, int]:
    """Import workflow documents sent as JSON body or as uploaded files."""

    store = WorkflowStore()
    registrar = TriggerRegistrar()

    if request.files:
        files = RequestFiles(request.files.getlist("file") or request.files.values())
        if not files.pick_files([DOCUMENT_MIMETYPE]):
            return jsonify({"error": "no JSON document uploaded"}), HTTPStatus.BAD_REQUEST
        return _run_import(lambda: import_files(files, store, registrar))

    raw = request.get_data(cache=False)
    if not raw:
        return jsonify({"error": "payload must be a workflow document"}), HTTPStatus.BAD_REQUEST
    return _run_import(lambda: import_document(raw, store, registrar))


@bp.post("/workflows/reset")
@limiter.limit(_import_rate_limit)
def reset_workflow_store() -> tuple[object, int]:
    """Replace every stored workflow with the posted list."""

    raw = request.get_data(cache=False)
    return _run_import(lambda: reset_workflows(raw, WorkflowStore()))
