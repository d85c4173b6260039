"""File collaborator backed by uploaded request files and download responses."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from flask import Response
from werkzeug.datastructures import FileStorage

from .errors import MalformedDocument
from .transfer import DOCUMENT_MIMETYPE


class RequestFiles:
    """Serves uploaded files to imports and collects exported payloads."""

    def __init__(self, uploads: Iterable[FileStorage] = ()) -> None:
        self.uploads = list(uploads)
        self.saved: list[tuple[str, bytes]] = []

    def pick_files(
        self, mime_types: Sequence[str], options: Mapping[str, Any] | None = None
    ) -> list[FileStorage]:
        options = options or {}
        picked = [
            upload
            for upload in self.uploads
            if upload.mimetype in mime_types
            or (upload.filename or "").lower().endswith(".json")
        ]
        if not options.get("multiple", True):
            return picked[:1]
        return picked

    def read_file_as_text(self, handle: FileStorage) -> str:
        try:
            return handle.read().decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedDocument(f"{handle.filename} is not UTF-8 text") from exc

    def save_bytes(self, filename: str, payload: bytes) -> None:
        self.saved.append((filename, payload))

    def download_response(self) -> Response | None:
        """Return the last saved payload as an attachment response."""

        if not self.saved:
            return None
        filename, payload = self.saved[-1]
        response = Response(payload, mimetype=DOCUMENT_MIMETYPE)
        response.headers.set("Content-Disposition", "attachment", filename=filename)
        return response
