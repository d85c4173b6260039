"""Exceptions raised while converting, importing or exporting workflows."""

from __future__ import annotations


class WorkflowTransferError(Exception):
    """Base class for workflow transfer failures."""


class MalformedDocument(WorkflowTransferError):
    """Raised when a workflow document or graph cannot be parsed."""


class CapabilityQueryFailure(WorkflowTransferError):
    """Raised when the capability host cannot answer a permission query."""


class StoreInsertFailure(WorkflowTransferError):
    """Raised when the workflow store rejects an insert."""
