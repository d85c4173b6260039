"""Database models for the workflow transfer backend."""

from .capability import GrantedCapability
from .workflow import Workflow, WorkflowTrigger

__all__ = ["GrantedCapability", "Workflow", "WorkflowTrigger"]
