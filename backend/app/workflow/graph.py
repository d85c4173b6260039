"""Normalisation of the two drawflow graph shapes into node descriptors."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .errors import MalformedDocument

TRIGGER_NODE_TYPES = frozenset({"trigger"})

_MISSING: Any = object()


@dataclass(frozen=True)
class NodeDescriptor:
    """A single graph node reduced to its id, type and data payload."""

    id: Any
    type: str | None
    data: dict[str, Any] = field(default_factory=dict)


def parse_json(value: Any, default: Any = _MISSING) -> Any:
    """Parse ``value`` when it is JSON text, otherwise return it unchanged.

    On a parse failure ``default`` is returned when given; without a default
    the failure is raised as :class:`MalformedDocument`.
    """

    if not isinstance(value, (str, bytes, bytearray)):
        return value

    try:
        return json.loads(value)
    except ValueError as exc:
        if default is not _MISSING:
            return default
        raise MalformedDocument(f"invalid JSON: {exc}") from exc


def _node_data(node: Mapping[str, Any]) -> dict[str, Any]:
    data = node.get("data")
    return data if isinstance(data, dict) else {}


def normalize_graph(graph: Any, default: Any = _MISSING) -> list[NodeDescriptor]:
    """Return the nodes of ``graph`` as an ordered list of descriptors.

    Both the current ``{"nodes": [...]}`` shape and the legacy
    ``{"drawflow": {"Home": {"data": {...}}}}`` shape are accepted. A graph
    matching neither shape yields an empty list.
    """

    flow = parse_json(graph, default)
    if not isinstance(flow, Mapping):
        return []

    nodes = flow.get("nodes")
    if isinstance(nodes, list):
        return [
            NodeDescriptor(id=node.get("id"), type=node.get("label"), data=_node_data(node))
            for node in nodes
            if isinstance(node, Mapping)
        ]

    legacy = flow.get("drawflow")
    home = legacy.get("Home") if isinstance(legacy, Mapping) else None
    blocks = home.get("data") if isinstance(home, Mapping) else None
    if not isinstance(blocks, Mapping):
        return []

    return [
        NodeDescriptor(id=block.get("id", key), type=block.get("name"), data=_node_data(block))
        for key, block in blocks.items()
        if isinstance(block, Mapping)
    ]


def find_trigger_node(graph: Any) -> NodeDescriptor | None:
    """Return the first trigger node of ``graph`` or ``None`` if it has none."""

    for node in normalize_graph(graph, default=None):
        if isinstance(node.type, str) and node.type in TRIGGER_NODE_TYPES:
            return node
    return None
