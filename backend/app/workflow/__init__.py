"""Workflow document conversion, inclusion and permission handling."""

from .converter import from_document, to_document
from .errors import (
    CapabilityQueryFailure,
    MalformedDocument,
    StoreInsertFailure,
    WorkflowTransferError,
)
from .graph import NodeDescriptor, find_trigger_node, normalize_graph
from .inclusion import resolve_included
from .permissions import resolve_permissions
from .transfer import export_workflow, import_document, import_files, reset_workflows

__all__ = [
    "CapabilityQueryFailure",
    "MalformedDocument",
    "NodeDescriptor",
    "StoreInsertFailure",
    "WorkflowTransferError",
    "export_workflow",
    "find_trigger_node",
    "from_document",
    "import_document",
    "import_files",
    "normalize_graph",
    "reset_workflows",
    "resolve_included",
    "resolve_permissions",
    "to_document",
]
