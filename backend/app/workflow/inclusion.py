"""Discovery of the sub-workflows a workflow executes."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Protocol

from .converter import to_document
from .graph import normalize_graph

logger = logging.getLogger(__name__)

EXECUTE_WORKFLOW_NODE = "execute-workflow"
DEFAULT_MAX_DEPTH = 3


class WorkflowLookup(Protocol):
    def get_by_id(self, workflow_id: str) -> dict[str, Any] | None:
        ...


def resolve_included(
    workflow: Mapping[str, Any],
    store: WorkflowLookup,
    max_depth: int = DEFAULT_MAX_DEPTH,
    accumulator: dict[str, dict[str, Any]] | None = None,
) -> dict[str, dict[str, Any]]:
    """Collect portable documents of every workflow reachable from ``workflow``.

    The result is a flat mapping of workflow id to document. ``accumulator`` is
    shared across the whole recursion, so a workflow referenced from several
    branches is resolved once. ``max_depth`` counts ``workflow`` itself as the
    first level: with the default of 3 a chain A -> B -> C -> D resolves B and C.
    """

    if accumulator is None:
        accumulator = {}

    depth = max_depth - 1
    if depth <= 0:
        return accumulator

    drawflow = workflow.get("drawflow")
    for node in normalize_graph(drawflow, default=drawflow):
        if node.type != EXECUTE_WORKFLOW_NODE:
            continue

        workflow_id = node.data.get("workflowId")
        if not isinstance(workflow_id, str) or not workflow_id or workflow_id in accumulator:
            continue

        included = store.get_by_id(workflow_id)
        if included is None:
            logger.debug("skipping missing sub-workflow %s", workflow_id)
            continue

        accumulator[workflow_id] = to_document(included)
        resolve_included(included, store, depth, accumulator)

    return accumulator
