"""Builders for Drive ``files.list`` query strings and field masks."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from gdocs_source.drive.models import (
    BASE_FILE_FIELDS,
    FIELD_FILES,
    FIELD_NEXT_PAGE_TOKEN,
    MIME_TYPE_DOCUMENT,
    MIME_TYPE_FOLDER,
    FolderReference,
)


def is_virtual_root(parents: Sequence[FolderReference]) -> bool:
    """True when the batch is exactly one root without a folder ID."""
    return len(parents) == 1 and parents[0].id is None


def parent_predicate(parents: Sequence[FolderReference]) -> str | None:
    """OR-join ``'<id>' in parents`` conditions, None for the virtual root."""
    if is_virtual_root(parents):
        return None
    return " or ".join(f"'{parent.id}' in parents" for parent in parents)


def build_query(parents: Sequence[FolderReference]) -> str:
    """Build the ``q`` parameter listing folders and docs under ``parents``.

    Args:
        parents: Folders whose children should be listed.

    Returns:
        Drive search query; trashed files are always excluded.
    """
    mime_filter = f"(mimeType='{MIME_TYPE_FOLDER}' or mimeType='{MIME_TYPE_DOCUMENT}')"
    predicate = parent_predicate(parents)
    prefix = f"({predicate}) and " if predicate else ""
    return f"{prefix}{mime_filter} and trashed = false"


def build_fields(extra: Iterable[str] = ()) -> str:
    """Build the partial-response ``fields`` mask for a listing call."""
    file_fields = ", ".join([*BASE_FILE_FIELDS, *extra])
    return f"{FIELD_NEXT_PAGE_TOKEN},{FIELD_FILES}({file_fields})"
