"""SQLAlchemy backed workflow store."""

from __future__ import annotations

import json
import secrets
from collections.abc import Iterable, Mapping
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models.workflow import Workflow, WorkflowTrigger
from .converter import now_ms
from .errors import StoreInsertFailure

_COLUMN_FIELDS = {
    "name": "name",
    "icon": "icon",
    "description": "description",
    "globalData": "global_data",
    "version": "version",
}


def generate_workflow_id() -> str:
    return secrets.token_urlsafe(16)


def _dump_drawflow(value: Any) -> str:
    if value is None:
        return json.dumps({"nodes": [], "edges": []})
    if isinstance(value, str):
        return value
    return json.dumps(value)


def apply_record(workflow: Workflow, record: Mapping[str, Any]) -> Workflow:
    """Copy the known fields of ``record`` onto ``workflow``."""

    for key, column in _COLUMN_FIELDS.items():
        value = record.get(key)
        if value is not None:
            setattr(workflow, column, str(value))

    if record.get("table") is not None:
        workflow.table_json = json.dumps(record["table"])
    if record.get("settings") is not None:
        workflow.settings_json = json.dumps(record["settings"])
    if "drawflow" in record or workflow.drawflow is None:
        workflow.drawflow = _dump_drawflow(record.get("drawflow"))
    if record.get("isProtected") is not None:
        workflow.is_protected = bool(record["isProtected"])
    return workflow


def build_workflow(record: Mapping[str, Any], *, duplicate_id: bool = False) -> Workflow:
    """Create an unsaved :class:`Workflow` from a record.

    The record's ``id`` is kept only when ``duplicate_id`` is set; otherwise a
    fresh id is generated.
    """

    workflow_id = record.get("id") if duplicate_id else None
    created_at = record.get("createdAt")
    workflow = Workflow(
        id=str(workflow_id) if workflow_id else generate_workflow_id(),
        created_at=int(created_at) if created_at is not None else now_ms(),
    )
    return apply_record(workflow, record)


class WorkflowStore:
    """Workflow persistence used by the import and export operations."""

    def get_by_id(self, workflow_id: str) -> dict[str, Any] | None:
        workflow = db.session.get(Workflow, workflow_id)
        return workflow.to_record() if workflow is not None else None

    def exists(self, workflow_id: str) -> bool:
        query = Workflow.query.filter(Workflow.id == workflow_id)
        return bool(db.session.query(query.exists()).scalar())

    def all(self) -> list[dict[str, Any]]:
        workflows = Workflow.query.order_by(Workflow.created_at.desc()).all()
        return [workflow.to_record() for workflow in workflows]

    def insert(
        self, record: Mapping[str, Any], *, duplicate_id: bool = False
    ) -> dict[str, dict[str, Any]]:
        """Persist ``record`` and return the inserted records keyed by id."""

        workflow = build_workflow(record, duplicate_id=duplicate_id)
        try:
            db.session.add(workflow)
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise StoreInsertFailure(f"workflow {workflow.id} could not be stored: {exc}") from exc
        return {workflow.id: workflow.to_record()}

    def replace_all(self, records: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
        """Replace every stored workflow with ``records`` in one transaction."""

        try:
            WorkflowTrigger.query.delete()
            Workflow.query.delete()
            workflows = [build_workflow(record, duplicate_id=True) for record in records]
            db.session.add_all(workflows)
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise StoreInsertFailure(f"workflows could not be replaced: {exc}") from exc
        return [workflow.to_record() for workflow in workflows]
