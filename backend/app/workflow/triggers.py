"""Registration of workflow trigger nodes."""

from __future__ import annotations

import json
import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models.workflow import WorkflowTrigger
from .graph import NodeDescriptor

logger = logging.getLogger(__name__)


def trigger_types(data: dict[str, Any]) -> list[str]:
    """Return the trigger types configured on a trigger node."""

    triggers = data.get("triggers")
    if isinstance(triggers, list) and triggers:
        return [
            str(item["type"])
            for item in triggers
            if isinstance(item, dict) and item.get("type")
        ]
    return [str(data.get("type") or "manual")]


class TriggerRegistrar:
    """Stores the trigger node of each workflow."""

    def register_trigger(self, workflow_id: str, node: NodeDescriptor) -> WorkflowTrigger:
        trigger = db.session.get(WorkflowTrigger, workflow_id)
        if trigger is None:
            trigger = WorkflowTrigger(workflow_id=workflow_id)
            db.session.add(trigger)

        trigger.node_id = None if node.id is None else str(node.id)
        trigger.trigger_types = ",".join(trigger_types(node.data))
        trigger.data_json = json.dumps(node.data)

        try:
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception("Failed to register trigger for workflow %s", workflow_id)
            raise

        logger.info("registered %s trigger for workflow %s", trigger.trigger_types, workflow_id)
        return trigger

    def get(self, workflow_id: str) -> dict[str, Any] | None:
        trigger = db.session.get(WorkflowTrigger, workflow_id)
        return trigger.to_dict() if trigger is not None else None

    def all(self) -> list[dict[str, Any]]:
        return [trigger.to_dict() for trigger in WorkflowTrigger.query.all()]
