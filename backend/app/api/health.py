"""Health check endpoint."""

from flask import Blueprint, current_app, jsonify

bp = Blueprint("health", __name__)


@bp.get("/health")
def health() -> tuple[dict[str, str], int]:
    """Return the service health status and the exporter version."""
    return jsonify({"status": "ok", "version": current_app.config["EXT_VERSION"]}), 200
