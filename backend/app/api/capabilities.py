"""API endpoints for granting and revoking host capabilities."""

from __future__ import annotations

import re
from http import HTTPStatus

from flask import Blueprint, jsonify

from ..workflow.capabilities import CapabilityHost

bp = Blueprint("capabilities", __name__)

_NAME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9._-]{0,63}$")


@bp.get("/capabilities")
def list_capabilities() -> tuple[object, int]:
    return jsonify({"capabilities": CapabilityHost().granted()}), HTTPStatus.OK


@bp.put("/capabilities/<name>")
def grant_capability(name: str) -> tuple[object, int]:
    if not _NAME_PATTERN.match(name):
        return jsonify({"error": "invalid capability name"}), HTTPStatus.BAD_REQUEST

    created = CapabilityHost().grant(name)
    status = HTTPStatus.CREATED if created else HTTPStatus.OK
    return jsonify({"name": name, "granted": True}), status


@bp.delete("/capabilities/<name>")
def revoke_capability(name: str) -> tuple[object, int]:
    if not CapabilityHost().revoke(name):
        return jsonify({"error": "capability is not granted"}), HTTPStatus.NOT_FOUND
    return "", HTTPStatus.NO_CONTENT
