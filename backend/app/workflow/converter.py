"""Conversion between stored workflow records and portable documents."""

from __future__ import annotations

import time
from collections.abc import Iterable, Mapping
from copy import deepcopy
from typing import Any

from flask import current_app, has_app_context

from .graph import parse_json

DOCUMENT_FIELDS = (
    "name",
    "icon",
    "table",
    "version",
    "drawflow",
    "settings",
    "globalData",
    "description",
)

DEFAULT_VALUES: dict[str, Any] = {
    "name": "",
    "icon": "",
    "table": [],
    "settings": {},
    "globalData": "",
    "dataColumns": [],
    "description": "",
    "drawflow": {"nodes": [], "edges": []},
}


def now_ms() -> int:
    """Return the current time in epoch milliseconds."""

    return int(time.time() * 1000)


def empty_graph() -> dict[str, list[Any]]:
    return {"nodes": [], "edges": []}


def current_version() -> str:
    """Return the version string of the running host application."""

    if has_app_context():
        configured = current_app.config.get("EXT_VERSION")
        if configured:
            return str(configured)

    from .. import __version__

    return __version__


def _default_for(key: str, version: str) -> Any:
    if key == "version":
        return version
    return deepcopy(DEFAULT_VALUES.get(key))


def to_document(
    record: Mapping[str, Any] | None,
    extra_fields: Iterable[str] = (),
    *,
    ext_version: str | None = None,
) -> dict[str, Any] | None:
    """Build the portable document for ``record``.

    Missing fields are filled from :data:`DEFAULT_VALUES`; ``extVersion`` is
    always stamped with the host version. ``None`` is returned for a missing
    record.
    """

    if record is None:
        return None

    version = ext_version or current_version()
    document: dict[str, Any] = {"extVersion": version}

    for key in (*DOCUMENT_FIELDS, *extra_fields):
        value = record.get(key)
        document[key] = deepcopy(value) if value is not None else _default_for(key, version)

    return document


def from_document(document: Mapping[str, Any]) -> dict[str, Any]:
    """Return the storable fields of a portable document.

    ``table`` falls back to the legacy ``dataColumns`` field, which is never
    carried over. A ``drawflow`` given as JSON text is parsed, falling back to
    an empty graph.
    """

    fields = dict(document)

    table = fields.pop("dataColumns", None)
    if fields.get("table") is None:
        fields["table"] = table if table is not None else []

    if isinstance(fields.get("drawflow"), str):
        fields["drawflow"] = parse_json(fields["drawflow"], empty_graph())

    return fields
