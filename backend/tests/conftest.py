from __future__ import annotations

import pathlib
import sys
from collections.abc import Mapping, Sequence
from copy import deepcopy
from typing import Any

import pytest
from sqlalchemy.pool import StaticPool

ROOT = pathlib.Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def _load_dependencies():
    from app import Config, create_app
    from backend.app.extensions import db

    return Config, create_app, db


ConfigBase, create_app, db = _load_dependencies()


class TestConfig(ConfigBase):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite+pysqlite:///:memory:"
    SQLALCHEMY_ENGINE_OPTIONS = {
        "poolclass": StaticPool,
        "connect_args": {"check_same_thread": False},
    }
    CORS_ALLOWED_ORIGINS = "http://localhost"
    RATELIMIT_ENABLED = False
    EXT_VERSION = "9.9.9"
    BROWSER_TYPE = "chrome"


@pytest.fixture(scope="module")
def app():
    app = create_app(TestConfig)
    ctx = app.app_context()
    ctx.push()
    yield app
    db.session.remove()
    ctx.pop()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def clean_database(app):
    from backend.app.models import GrantedCapability, Workflow, WorkflowTrigger

    def _clear() -> None:
        db.session.query(WorkflowTrigger).delete()
        db.session.query(Workflow).delete()
        db.session.query(GrantedCapability).delete()
        db.session.commit()

    _clear()
    yield
    _clear()


class InMemoryStore:
    """Workflow store keeping records in a dictionary."""

    def __init__(self, records: Sequence[Mapping[str, Any]] = ()) -> None:
        self.workflows: dict[str, dict[str, Any]] = {
            record["id"]: deepcopy(dict(record)) for record in records
        }
        self.inserts: list[tuple[dict[str, Any], bool]] = []
        self.lookups: list[str] = []
        self.fail_insert: Exception | None = None
        self._counter = 0

    def get_by_id(self, workflow_id: str) -> dict[str, Any] | None:
        self.lookups.append(workflow_id)
        record = self.workflows.get(workflow_id)
        return deepcopy(record) if record is not None else None

    def exists(self, workflow_id: str) -> bool:
        return workflow_id in self.workflows

    def insert(
        self, record: Mapping[str, Any], *, duplicate_id: bool = False
    ) -> dict[str, dict[str, Any]]:
        if self.fail_insert is not None:
            raise self.fail_insert
        self.inserts.append((deepcopy(dict(record)), duplicate_id))

        stored = deepcopy(dict(record))
        if not duplicate_id or not stored.get("id"):
            self._counter += 1
            stored["id"] = f"generated-{self._counter}"
        self.workflows[stored["id"]] = stored
        return {stored["id"]: deepcopy(stored)}

    def replace_all(self, records: Sequence[Mapping[str, Any]]) -> list[dict[str, Any]]:
        self.workflows = {}
        for record in records:
            stored = deepcopy(dict(record))
            if not stored.get("id"):
                self._counter += 1
                stored["id"] = f"generated-{self._counter}"
            self.workflows[stored["id"]] = stored
        return list(self.workflows.values())


class RecordingRegistrar:
    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []

    def register_trigger(self, workflow_id: str, node: Any) -> None:
        self.calls.append((workflow_id, node))


class FakeCapabilityHost:
    def __init__(self, granted: Sequence[str] = ()) -> None:
        self.granted = set(granted)
        self.queries: list[list[str]] = []

    def has_capability(self, names: Sequence[str]) -> bool:
        self.queries.append(list(names))
        return set(names) <= self.granted


class FakeFiles:
    """File collaborator serving in-memory documents."""

    def __init__(self, documents: Sequence[tuple[str, str]] = ()) -> None:
        self.documents = list(documents)
        self.saved: list[tuple[str, bytes]] = []
        self.picked_with: list[tuple[list[str], Any]] = []

    def pick_files(self, mime_types: Sequence[str], options: Mapping[str, Any] | None = None):
        self.picked_with.append((list(mime_types), options))
        return [text for mimetype, text in self.documents if mimetype in mime_types]

    def read_file_as_text(self, handle: str) -> str:
        return handle

    def save_bytes(self, filename: str, payload: bytes) -> None:
        self.saved.append((filename, payload))


@pytest.fixture()
def registrar() -> RecordingRegistrar:
    return RecordingRegistrar()


@pytest.fixture()
def files() -> FakeFiles:
    return FakeFiles()


@pytest.fixture()
def make_store():
    return InMemoryStore


@pytest.fixture()
def make_host():
    return FakeCapabilityHost


@pytest.fixture()
def make_files():
    return FakeFiles
