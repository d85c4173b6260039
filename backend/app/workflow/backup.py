"""Full snapshots of stored workflows, triggers and granted capabilities."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models.capability import GrantedCapability
from ..models.workflow import Workflow, WorkflowTrigger
from .converter import current_version
from .errors import MalformedDocument, StoreInsertFailure
from .graph import parse_json
from .store import build_workflow

logger = logging.getLogger(__name__)

_SECTIONS = ("workflows", "triggers", "capabilities")


def export_backup() -> dict[str, Any]:
    """Return a snapshot of everything the backend stores."""

    workflows = Workflow.query.order_by(Workflow.created_at.asc()).all()
    triggers = WorkflowTrigger.query.order_by(WorkflowTrigger.workflow_id.asc()).all()
    capabilities = GrantedCapability.query.order_by(GrantedCapability.name.asc()).all()
    return {
        "extVersion": current_version(),
        "workflows": [workflow.to_record() for workflow in workflows],
        "triggers": [trigger.to_dict() for trigger in triggers],
        "capabilities": [capability.name for capability in capabilities],
    }


def _validate_snapshot(snapshot: Any) -> dict[str, list[Any]]:
    data = parse_json(snapshot)
    if not isinstance(data, Mapping):
        raise MalformedDocument("backup must be an object")

    sections: dict[str, list[Any]] = {}
    for name in _SECTIONS:
        value = data.get(name)
        if not isinstance(value, list):
            raise MalformedDocument(f"backup section {name} must be a list")
        sections[name] = value

    for record in (*sections["workflows"], *sections["triggers"]):
        if not isinstance(record, Mapping):
            raise MalformedDocument("backup entries must be objects")
    for record in sections["triggers"]:
        if not record.get("workflowId"):
            raise MalformedDocument("backup trigger is missing workflowId")
        types = record.get("types")
        if types is not None and (
            not isinstance(types, list) or not all(isinstance(item, str) for item in types)
        ):
            raise MalformedDocument("backup trigger types must be a list of strings")
    for name in sections["capabilities"]:
        if not isinstance(name, str) or not name:
            raise MalformedDocument("backup capabilities must be non-empty strings")
    return sections


def import_backup(snapshot: Any) -> dict[str, int]:
    """Replace all stored data with ``snapshot`` in a single transaction."""

    sections = _validate_snapshot(snapshot)

    try:
        WorkflowTrigger.query.delete()
        Workflow.query.delete()
        GrantedCapability.query.delete()

        db.session.add_all(
            build_workflow(record, duplicate_id=True) for record in sections["workflows"]
        )
        db.session.add_all(
            WorkflowTrigger(
                workflow_id=str(record["workflowId"]),
                node_id=record.get("nodeId"),
                trigger_types=",".join(record.get("types") or ["manual"]),
                data_json=json.dumps(record.get("data") or {}),
            )
            for record in sections["triggers"]
        )
        db.session.add_all(
            GrantedCapability(name=name) for name in dict.fromkeys(sections["capabilities"])
        )
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StoreInsertFailure(f"backup could not be restored: {exc}") from exc

    summary = {name: len(sections[name]) for name in _SECTIONS}
    logger.info("restored backup: %s", summary)
    return summary
