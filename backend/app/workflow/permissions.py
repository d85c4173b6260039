"""Derive the host capabilities a workflow graph needs before it can run."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from .errors import CapabilityQueryFailure
from .graph import normalize_graph

logger = logging.getLogger(__name__)


class CapabilityChecker(Protocol):
    def has_capability(self, names: Sequence[str]) -> bool:
        """Return whether every capability in ``names`` is granted."""


@dataclass(frozen=True)
class PermissionRule:
    """Capability requirement of a node type."""

    name: str
    derive: Callable[[dict[str, Any], str], list[str]]
    firefox_name: str | None = None

    def capability(self, browser_type: str) -> str:
        if browser_type == "firefox" and self.firefox_name:
            return self.firefox_name
        return self.name


def _fixed(name: str) -> PermissionRule:
    return PermissionRule(name=name, derive=lambda _data, _browser: [name])


def _trigger_permissions(data: dict[str, Any], browser_type: str) -> list[str]:
    permission = "menus" if browser_type == "firefox" else "contextMenus"
    triggers = data.get("triggers")
    if isinstance(triggers, list):
        return [
            permission
            for trigger in triggers
            if isinstance(trigger, dict) and trigger.get("type") == "context-menu"
        ]
    if data.get("type") == "context-menu":
        return [permission]
    return []


def _clipboard_permissions(_data: dict[str, Any], browser_type: str) -> list[str]:
    permissions = ["clipboardRead"]
    if browser_type == "firefox":
        permissions.append("clipboardWrite")
    return permissions


PERMISSION_RULES: dict[str, PermissionRule] = {
    "trigger": PermissionRule(
        name="contextMenus", firefox_name="menus", derive=_trigger_permissions
    ),
    "clipboard": PermissionRule(name="clipboardRead", derive=_clipboard_permissions),
    "notification": _fixed("notifications"),
    "handle-download": _fixed("downloads"),
    "save-assets": _fixed("downloads"),
    "cookie": _fixed("cookies"),
}

CAPABILITY_NODE_TYPES = frozenset(PERMISSION_RULES)


def _query_host(host: CapabilityChecker, names: list[str]) -> bool:
    try:
        return bool(host.has_capability(names))
    except CapabilityQueryFailure:
        raise
    except Exception as exc:
        raise CapabilityQueryFailure(f"capability query for {names} failed: {exc}") from exc


def resolve_permissions(
    graph: Any,
    host: CapabilityChecker,
    browser_type: str = "chrome",
) -> list[str]:
    """Return the capabilities required by ``graph`` that are not yet granted.

    Each missing capability is listed once, in the order of the first node
    requiring it.
    """

    missing: list[str] = []

    for node in normalize_graph(graph):
        rule = PERMISSION_RULES.get(node.type) if isinstance(node.type, str) else None
        if rule is None:
            continue

        name = rule.capability(browser_type)
        if name in missing:
            continue

        required = rule.derive(node.data, browser_type)
        if not required:
            continue

        if not _query_host(host, required):
            logger.debug("node %s of type %s needs %s", node.id, node.type, name)
            missing.append(name)

    return missing
