"""Document fetcher — wires roots, crawl, projection and the caller's mutator."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from gdocs_source.config import CrawlOptions
from gdocs_source.crawl.projection import RecordProjector
from gdocs_source.crawl.ratelimit import RateLimiter
from gdocs_source.crawl.traversal import FileLister, TraversalEngine
from gdocs_source.drive.client import drive_client_from_config
from gdocs_source.drive.models import FolderReference

if TYPE_CHECKING:
    from gdocs_source.config import AppConfig

logger = logging.getLogger(__name__)

Record = dict[str, Any]
MetadataUpdater = Callable[[Record], Record]


class DocumentFetcher:
    """Runs a full crawl and returns projected document records."""

    def __init__(
        self,
        drive_client: FileLister,
        options: CrawlOptions,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        """Initialise the fetcher.

        Args:
            drive_client: Authenticated client for ``files.list`` calls.
            options: Roots, requested fields and record shaping options.
            rate_limiter: Limiter shared by the whole crawl. A default
                10 calls / 1.5 s limiter is created when omitted.
        """
        self._options = options
        self._engine = TraversalEngine(
            drive_client,
            rate_limiter or RateLimiter(),
            fields=options.fields,
            ignored_folders=options.ignored_folders,
            debug=options.debug,
        )
        self._projector = RecordProjector(options.fields_default, options.fields_mapper)

    def roots(self) -> list[FolderReference]:
        folders = self._options.folders or (None,)
        return [FolderReference(id=folder_id) for folder_id in folders]

    async def fetch(self, update_metadata: MetadataUpdater | None = None) -> list[Record]:
        """Crawl the configured roots and project every document found.

        Args:
            update_metadata: Optional callable applied to each projected
                record as a final pass. Ignored when not callable.

        Returns:
            Output records in no particular order.
        """
        roots = self.roots()
        logger.info("[fetch] starting crawl; root_count:%d", len(roots))
        raw_documents = await self._engine.crawl(roots)

        updater = update_metadata if callable(update_metadata) else None
        records: list[Record] = []
        for raw in raw_documents:
            record = self._projector.project(raw)
            if updater is not None:
                record = updater(record)
            records.append(record)

        logger.info("[fetch] crawl complete; document_count:%d", len(records))
        return records


def document_fetcher_from_config(config: AppConfig) -> DocumentFetcher:
    """Construct a DocumentFetcher from application configuration.

    Args:
        config: Application configuration instance.

    Returns:
        Configured DocumentFetcher instance.
    """
    client = drive_client_from_config(config)
    rate_limiter = RateLimiter(calls=config.rate_limit_calls, period=config.rate_limit_period)
    return DocumentFetcher(client, config.options, rate_limiter=rate_limiter)


def fetch_documents(
    config: AppConfig, update_metadata: MetadataUpdater | None = None
) -> list[Record]:
    """Blocking convenience wrapper: build a fetcher from config and run it."""
    fetcher = document_fetcher_from_config(config)
    return asyncio.run(fetcher.fetch(update_metadata))
