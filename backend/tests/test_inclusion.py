"""Tests for resolving the sub-workflows embedded in an export."""
from __future__ import annotations

import json
import pathlib
import sys

ROOT = pathlib.Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.app.workflow.inclusion import resolve_included  # noqa: E402


def _workflow(workflow_id: str, *calls: str, legacy: bool = False) -> dict[str, object]:
    if legacy:
        drawflow: dict[str, object] = {
            "drawflow": {
                "Home": {
                    "data": {
                        str(index): {
                            "id": str(index),
                            "name": "execute-workflow",
                            "data": {"workflowId": target},
                        }
                        for index, target in enumerate(calls)
                    }
                }
            }
        }
    else:
        drawflow = {
            "nodes": [
                {"id": "t", "label": "trigger", "data": {}},
                *(
                    {"id": str(index), "label": "execute-workflow", "data": {"workflowId": target}}
                    for index, target in enumerate(calls)
                ),
            ],
            "edges": [],
        }
    return {"id": workflow_id, "name": f"Workflow {workflow_id}", "drawflow": drawflow}


def test_shared_sub_workflow_is_resolved_once(make_store):
    store = make_store([_workflow("B"), _workflow("C", "B")])
    root = _workflow("A", "B", "C")

    included = resolve_included(root, store)

    assert sorted(included) == ["B", "C"]
    assert store.lookups.count("B") == 1


def test_depth_bound_stops_long_chains(make_store):
    store = make_store(
        [_workflow("B", "C"), _workflow("C", "D"), _workflow("D", "E"), _workflow("E")]
    )

    included = resolve_included(_workflow("A", "B"), store, max_depth=3)

    assert sorted(included) == ["B", "C"]
    assert "D" not in store.lookups


def test_cycles_terminate(make_store):
    store = make_store([_workflow("A", "B"), _workflow("B", "A")])

    included = resolve_included(store.get_by_id("A"), store, max_depth=10)

    assert sorted(included) == ["A", "B"]


def test_dangling_reference_is_skipped(make_store):
    store = make_store([_workflow("B")])

    included = resolve_included(_workflow("A", "missing", "B"), store)

    assert list(included) == ["B"]


def test_included_entries_are_documents(make_store, app):
    store = make_store([_workflow("B", "C"), _workflow("C")])

    included = resolve_included(_workflow("A", "B"), store)

    assert included["B"]["name"] == "Workflow B"
    assert included["B"]["extVersion"] == "9.9.9"
    assert "id" not in included["B"]
    assert "includedWorkflows" not in included["C"]


def test_legacy_and_text_graphs(make_store):
    store = make_store([_workflow("B", legacy=True), _workflow("C")])
    root = _workflow("A", "B", legacy=True)
    root["drawflow"] = json.dumps(root["drawflow"])
    store.workflows["B"]["drawflow"]["drawflow"]["Home"]["data"]["0"] = {
        "id": "0",
        "name": "execute-workflow",
        "data": {"workflowId": "C"},
    }

    assert sorted(resolve_included(root, store)) == ["B", "C"]


def test_unparseable_graph_has_no_inclusions(make_store):
    store = make_store([_workflow("B")])

    assert resolve_included({"id": "A", "drawflow": "{broken"}, store) == {}
    assert resolve_included({"id": "A"}, store) == {}


def test_accumulator_is_shared(make_store):
    store = make_store([_workflow("B")])
    accumulator = {"B": {"name": "already resolved"}}

    result = resolve_included(_workflow("A", "B"), store, accumulator=accumulator)

    assert result is accumulator
    assert result["B"] == {"name": "already resolved"}
    assert store.lookups == []


def test_zero_depth_resolves_nothing(make_store):
    store = make_store([_workflow("B")])

    assert resolve_included(_workflow("A", "B"), store, max_depth=0) == {}
    assert resolve_included(_workflow("A", "B"), store, max_depth=1) == {}
    assert store.lookups == []
