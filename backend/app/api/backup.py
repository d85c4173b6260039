"""API endpoints for full backups of the stored workflows."""

from __future__ import annotations

import json
from http import HTTPStatus

from flask import Blueprint, Response, current_app, jsonify, request

from ..extensions import limiter
from ..workflow.backup import export_backup, import_backup
from ..workflow.errors import MalformedDocument, StoreInsertFailure

bp = Blueprint("backup", __name__)


@bp.get("/backup")
def download_backup() -> Response:
    response = Response(json.dumps(export_backup()), mimetype="application/json")
    response.headers.set("Content-Disposition", "attachment", filename="automa-backup.json")
    return response


@bp.post("/backup")
@limiter.limit(lambda: current_app.config["IMPORT_RATE_LIMIT"])
def restore_backup() -> tuple[object, int]:
    try:
        summary = import_backup(request.get_data(cache=False))
    except MalformedDocument as exc:
        return jsonify({"error": str(exc)}), HTTPStatus.BAD_REQUEST
    except StoreInsertFailure as exc:
        current_app.logger.exception("Backup restore failed")
        return jsonify({"error": str(exc)}), HTTPStatus.CONFLICT
    return jsonify(summary), HTTPStatus.OK
