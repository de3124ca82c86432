"""Recursive, paginated, rate-limited crawl of a Drive folder tree."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator, Iterable, Sequence
from typing import Any, Protocol

from gdocs_source.crawl.batching import evenly_chunk
from gdocs_source.crawl.paths import child_path
from gdocs_source.crawl.ratelimit import RateLimiter
from gdocs_source.drive.models import (
    FIELD_FILES,
    FIELD_ID,
    FIELD_MIME_TYPE,
    FIELD_NAME,
    FIELD_NEXT_PAGE_TOKEN,
    FIELD_PARENTS,
    MIME_TYPE_DOCUMENT,
    MIME_TYPE_FOLDER,
    RECORD_PATH,
    FolderReference,
)
from gdocs_source.drive.query import build_fields, build_query

logger = logging.getLogger(__name__)

# Maximum parents OR-ed into one listing query.
BATCH_SIZE = 100
DRAFTS_FOLDER_NAME = "drafts"

Record = dict[str, Any]


class FileLister(Protocol):
    def list_files(
        self, query: str, fields: str, page_token: str | None = None
    ) -> dict[str, Any]: ...


@contextlib.asynccontextmanager
async def _child_tasks() -> AsyncIterator[asyncio.TaskGroup]:
    """TaskGroup that re-raises the first child failure instead of an ExceptionGroup."""
    try:
        async with asyncio.TaskGroup() as group:
            yield group
    except BaseExceptionGroup as exc_group:
        raise exc_group.exceptions[0] from None


class TraversalEngine:
    """Crawls folders breadth-first in batches, collecting Google Docs.

    Sibling batches, pagination and folder descent run as concurrent child
    tasks of the call that discovered them; the shared RateLimiter is the
    only state they have in common.
    """

    def __init__(
        self,
        client: FileLister,
        rate_limiter: RateLimiter,
        fields: Iterable[str] = (),
        ignored_folders: Iterable[str] = (),
        debug: bool = False,
        batch_size: int = BATCH_SIZE,
    ) -> None:
        """Initialise the engine.

        Args:
            client: Drive client used for ``files.list`` calls. Its blocking
                ``list_files`` runs in a worker thread.
            rate_limiter: Limiter shared by every listing call of the crawl.
            fields: Extra file fields to request.
            ignored_folders: Folder names or IDs to prune.
            debug: Log progress before each listing call.
            batch_size: Maximum parents per listing query.
        """
        self._client = client
        self._rate_limiter = rate_limiter
        self._fields = build_fields(fields)
        self._ignored_folders = frozenset(ignored_folders)
        self._debug = debug
        self._batch_size = batch_size

    async def crawl(self, parents: Sequence[FolderReference]) -> list[Record]:
        """Collect every document below ``parents``.

        Args:
            parents: Folders to list; a single ``FolderReference(None)`` lists
                the whole drive without a parent filter.

        Returns:
            Raw document records with a ``path`` key, in no particular order.

        Raises:
            DriveApiError: Propagated unchanged from the first failing call.
        """
        if not parents:
            return []

        if len(parents) > self._batch_size:
            async with _child_tasks() as group:
                tasks = [
                    group.create_task(self.crawl(batch))
                    for batch in evenly_chunk(parents, self._batch_size)
                ]
            return [record for task in tasks for record in task.result()]

        query = build_query(parents)
        page = await self._list_page(parents, query)
        documents = self._collect_documents(page, parents)
        pending = self._collect_folders(page, parents)
        page_token = page.get(FIELD_NEXT_PAGE_TOKEN)

        if not page_token:
            if not pending:
                return documents
            return documents + await self.crawl(pending)

        descents: list[asyncio.Task[list[Record]]] = []
        async with _child_tasks() as group:
            while page_token:
                if len(pending) >= self._batch_size:
                    # Descend into one full batch while the remaining pages load.
                    batch = pending[: self._batch_size]
                    pending = pending[self._batch_size :]
                    descents.append(group.create_task(self.crawl(batch)))
                page = await self._list_page(parents, query, page_token)
                documents.extend(self._collect_documents(page, parents))
                pending.extend(self._collect_folders(page, parents))
                page_token = page.get(FIELD_NEXT_PAGE_TOKEN)
            if pending:
                descents.append(group.create_task(self.crawl(pending)))

        for task in descents:
            documents.extend(task.result())
        return documents

    async def _list_page(
        self,
        parents: Sequence[FolderReference],
        query: str,
        page_token: str | None = None,
    ) -> dict[str, Any]:
        waited = await self._rate_limiter.acquire()
        if self._debug:
            logger.info(
                "[crawl] fetching children; folder_count:%d;depth:%d;waited:%.1fs",
                len(parents),
                parents[0].depth,
                waited,
            )
        return await asyncio.to_thread(self._client.list_files, query, self._fields, page_token)

    @staticmethod
    def _resolve_parent(
        node: dict[str, Any], parents: Sequence[FolderReference]
    ) -> FolderReference | None:
        parent_ids = set(node.get(FIELD_PARENTS) or ())
        return next((parent for parent in parents if parent.id in parent_ids), None)

    def _is_ignored(self, folder: dict[str, Any]) -> bool:
        name = folder.get(FIELD_NAME, "")
        return (
            name.lower() == DRAFTS_FOLDER_NAME
            or name in self._ignored_folders
            or folder.get(FIELD_ID) in self._ignored_folders
        )

    def _collect_documents(
        self, page: dict[str, Any], parents: Sequence[FolderReference]
    ) -> list[Record]:
        documents: list[Record] = []
        for node in page.get(FIELD_FILES) or ():
            if node.get(FIELD_MIME_TYPE) != MIME_TYPE_DOCUMENT:
                continue
            parent = self._resolve_parent(node, parents)
            parent_path = parent.path if parent else ""
            documents.append({**node, RECORD_PATH: child_path(parent_path, node[FIELD_NAME])})
        return documents

    def _collect_folders(
        self, page: dict[str, Any], parents: Sequence[FolderReference]
    ) -> list[FolderReference]:
        folders: list[FolderReference] = []
        for node in page.get(FIELD_FILES) or ():
            if node.get(FIELD_MIME_TYPE) != MIME_TYPE_FOLDER:
                continue
            if self._is_ignored(node):
                logger.debug(
                    "[crawl] pruned folder; id:%s;name:%s", node.get(FIELD_ID), node.get(FIELD_NAME)
                )
                continue
            parent = self._resolve_parent(node, parents)
            breadcrumb = parent.breadcrumb if parent else ()
            parent_path = parent.path if parent else ""
            folders.append(
                FolderReference(
                    id=node[FIELD_ID],
                    breadcrumb=(*breadcrumb, node[FIELD_NAME]),
                    path=child_path(parent_path, node[FIELD_NAME]),
                )
            )
        return folders
