"""Export and import of workflows as portable documents."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from .converter import from_document, now_ms, to_document
from .errors import MalformedDocument
from .graph import NodeDescriptor, find_trigger_node, parse_json
from .inclusion import DEFAULT_MAX_DEPTH, WorkflowLookup, resolve_included

logger = logging.getLogger(__name__)

DOCUMENT_MIMETYPE = "application/json"
DOCUMENT_SUFFIX = ".automa.json"


class WorkflowWriter(WorkflowLookup, Protocol):
    def exists(self, workflow_id: str) -> bool:
        ...

    def insert(
        self, record: Mapping[str, Any], *, duplicate_id: bool = False
    ) -> dict[str, dict[str, Any]]:
        ...

    def replace_all(self, records: Sequence[Mapping[str, Any]]) -> list[dict[str, Any]]:
        ...


class Registrar(Protocol):
    def register_trigger(self, workflow_id: str, node: NodeDescriptor) -> Any:
        ...


class FileCollaborator(Protocol):
    def pick_files(self, mime_types: Sequence[str], options: Mapping[str, Any] | None = None) -> list[Any]:
        ...

    def read_file_as_text(self, handle: Any) -> str:
        ...

    def save_bytes(self, filename: str, payload: bytes) -> None:
        ...


def export_filename(workflow: Mapping[str, Any]) -> str:
    return f"{workflow.get('name') or ''}{DOCUMENT_SUFFIX}"


def export_workflow(
    workflow: Mapping[str, Any] | None,
    store: WorkflowLookup,
    files: FileCollaborator,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> dict[str, Any] | None:
    """Serialise ``workflow`` with its sub-workflows and hand it to ``files``.

    Protected and missing workflows are not exported and ``None`` is returned.
    """

    if workflow is None or workflow.get("isProtected"):
        return None

    included = resolve_included(workflow, store, max_depth)
    included.pop(workflow.get("id"), None)

    content = to_document(workflow)
    content["includedWorkflows"] = included

    payload = json.dumps(content).encode("utf-8")
    files.save_bytes(export_filename(workflow), payload)
    logger.info(
        "exported workflow %s with %d included workflows", workflow.get("id"), len(included)
    )
    return content


def load_document(raw: Any) -> dict[str, Any]:
    """Parse and validate a workflow document without touching any store."""

    document = parse_json(raw)
    if not isinstance(document, Mapping):
        raise MalformedDocument("workflow document must be an object")

    included = document.get("includedWorkflows")
    if included is not None:
        if not isinstance(included, Mapping):
            raise MalformedDocument("includedWorkflows must be an object")
        for workflow_id, entry in included.items():
            if not isinstance(entry, Mapping):
                raise MalformedDocument(f"includedWorkflows[{workflow_id}] must be an object")

    return dict(document)


def _register_triggers(inserted: Mapping[str, Mapping[str, Any]], registrar: Registrar) -> None:
    for workflow_id, record in inserted.items():
        node = find_trigger_node(record.get("drawflow"))
        if node is not None:
            registrar.register_trigger(workflow_id, node)


def import_document(
    raw: Any,
    store: WorkflowWriter,
    registrar: Registrar,
) -> dict[str, dict[str, Any]]:
    """Store the workflows of a document and register their triggers.

    Included workflows keep their embedded ids and are skipped when the store
    already knows them; the root workflow always gets a new id. Returns the
    newly inserted records keyed by id, included workflows first.
    """

    document = load_document(raw)
    included = document.pop("includedWorkflows", None) or {}

    pending: list[tuple[dict[str, Any], bool]] = []
    for workflow_id, entry in included.items():
        record = from_document(entry)
        record["id"] = workflow_id
        pending.append((record, True))

    root = from_document(document)
    root.pop("id", None)
    pending.append((root, False))

    inserted: dict[str, dict[str, Any]] = {}
    for record, duplicate_id in pending:
        if duplicate_id and store.exists(record["id"]):
            logger.debug("workflow %s already exists, skipping", record["id"])
            continue
        record["createdAt"] = now_ms()
        inserted.update(store.insert(record, duplicate_id=duplicate_id))

    _register_triggers(inserted, registrar)
    logger.info("imported %d workflows", len(inserted))
    return inserted


def import_files(
    files: FileCollaborator,
    store: WorkflowWriter,
    registrar: Registrar,
    options: Mapping[str, Any] | None = None,
) -> dict[str, dict[str, Any]]:
    """Import every JSON document picked through ``files``."""

    inserted: dict[str, dict[str, Any]] = {}
    for handle in files.pick_files([DOCUMENT_MIMETYPE], options):
        inserted.update(import_document(files.read_file_as_text(handle), store, registrar))
    return inserted


def reset_workflows(initial_state: Any, store: WorkflowWriter) -> list[dict[str, Any]]:
    """Replace all stored workflows with ``initial_state``."""

    workflows = parse_json(initial_state)
    if not isinstance(workflows, list) or not all(isinstance(item, Mapping) for item in workflows):
        raise MalformedDocument("initial state must be a list of workflow objects")

    return store.replace_all([from_document(item) for item in workflows])
