"""Workflow and trigger model definitions."""

from __future__ import annotations

import json
from typing import Any

from ..extensions import db


def _load(text: str | None, default: Any) -> Any:
    if text is None:
        return default
    try:
        return json.loads(text)
    except (TypeError, ValueError):
        return default


class Workflow(db.Model):
    """Represents a stored automation workflow."""

    __tablename__ = "workflows"

    id = db.Column(db.String(64), primary_key=True)
    name = db.Column(db.String(255), nullable=False, default="")
    icon = db.Column(db.String(255), nullable=False, default="")
    description = db.Column(db.Text, nullable=False, default="")
    table_json = db.Column(db.Text, nullable=False, default="[]")
    settings_json = db.Column(db.Text, nullable=False, default="{}")
    global_data = db.Column(db.Text, nullable=False, default="")
    drawflow = db.Column(db.Text, nullable=False, default="")
    version = db.Column(db.String(32), nullable=False, default="")
    is_protected = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.BigInteger, nullable=False)

    trigger = db.relationship(
        "WorkflowTrigger",
        uselist=False,
        cascade="all, delete-orphan",
        back_populates="workflow",
    )

    def to_record(self) -> dict[str, Any]:
        """Return the workflow as a camelCase record."""

        return {
            "id": self.id,
            "name": self.name,
            "icon": self.icon,
            "table": _load(self.table_json, []),
            "settings": _load(self.settings_json, {}),
            "globalData": self.global_data,
            "description": self.description,
            "drawflow": _load(self.drawflow, self.drawflow),
            "version": self.version,
            "createdAt": self.created_at,
            "isProtected": bool(self.is_protected),
        }

    def __repr__(self) -> str:  # pragma: no cover - repr not critical for tests
        return f"<Workflow {self.id} {self.name!r}>"


class WorkflowTrigger(db.Model):
    """Trigger node registered for a workflow."""

    __tablename__ = "workflow_triggers"

    workflow_id = db.Column(
        db.String(64), db.ForeignKey("workflows.id", ondelete="CASCADE"), primary_key=True
    )
    node_id = db.Column(db.String(64), nullable=True)
    trigger_types = db.Column(db.String(255), nullable=False, default="manual")
    data_json = db.Column(db.Text, nullable=False, default="{}")

    workflow = db.relationship("Workflow", back_populates="trigger")

    def to_dict(self) -> dict[str, Any]:
        return {
            "workflowId": self.workflow_id,
            "nodeId": self.node_id,
            "types": [item for item in self.trigger_types.split(",") if item],
            "data": _load(self.data_json, {}),
        }

    def __repr__(self) -> str:  # pragma: no cover - repr not critical for tests
        return f"<WorkflowTrigger {self.workflow_id} {self.trigger_types}>"
