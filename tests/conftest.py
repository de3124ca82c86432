"""Pytest configuration — adds src/ to sys.path and provides an in-memory Drive."""

import os
import re
import sys
import threading
from typing import Any

import pytest

# Add src/ to Python path so tests can import from gdocs_source
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from gdocs_source.drive.client import DriveApiError  # noqa: E402
from gdocs_source.drive.models import MIME_TYPE_DOCUMENT, MIME_TYPE_FOLDER  # noqa: E402

_PARENT_ID = re.compile(r"'([^']+)' in parents")


def folder_node(id: str, name: str, parent: str = "root") -> dict[str, Any]:
    return {"id": id, "name": name, "mimeType": MIME_TYPE_FOLDER, "parents": [parent]}


def doc_node(id: str, name: str, parent: str = "root", **extra: Any) -> dict[str, Any]:
    return {
        "id": id,
        "name": name,
        "mimeType": MIME_TYPE_DOCUMENT,
        "parents": [parent],
        "createdTime": "2024-01-01T00:00:00.000Z",
        "modifiedTime": "2024-02-01T00:00:00.000Z",
        "starred": False,
        **extra,
    }


class FakeDrive:
    """Stand-in for DriveClient.list_files backed by a list of nodes.

    A query without a parent predicate lists the children of "root". Page
    tokens are offsets into the matching nodes.
    """

    def __init__(
        self,
        nodes: list[dict[str, Any]],
        page_size: int = 1000,
        fail_on: str | None = None,
    ) -> None:
        self.nodes = nodes
        self.page_size = page_size
        self.fail_on = fail_on
        self.calls: list[dict[str, Any]] = []
        self._lock = threading.Lock()

    def list_files(
        self, query: str, fields: str, page_token: str | None = None
    ) -> dict[str, Any]:
        parent_ids = _PARENT_ID.findall(query)
        with self._lock:
            self.calls.append(
                {"query": query, "fields": fields, "page_token": page_token, "parents": parent_ids}
            )
        if self.fail_on is not None and self.fail_on in parent_ids:
            raise DriveApiError(500, "Backend Error")

        wanted = set(parent_ids) or {"root"}
        matches = [node for node in self.nodes if wanted & set(node.get("parents", []))]
        start = int(page_token or 0)
        page: dict[str, Any] = {"files": matches[start : start + self.page_size]}
        if start + self.page_size < len(matches):
            page["nextPageToken"] = str(start + self.page_size)
        return page


@pytest.fixture
def fake_drive() -> type[FakeDrive]:
    return FakeDrive


@pytest.fixture
def folder() -> Any:
    return folder_node


@pytest.fixture
def doc() -> Any:
    return doc_node
