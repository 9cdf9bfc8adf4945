"""Sync orchestration - fetch, normalize, filter and persist per source."""

import asyncio
import time
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import List, Optional, Iterable

import structlog

from ..config.settings import settings
from ..errors import SourceNotFoundError, UnsupportedSourceTypeError
from ..ingestion.filters import passes
from ..ingestion.interfaces import Source, StorageInterface, SyncStatus, utcnow
from ..ingestion.registry import AdapterRegistry, build_default_registry

logger = structlog.get_logger()


@dataclass
class SyncResult:
    """Counts from one sync cycle of one source."""
    source_id: Optional[int]
    fetched: int = 0
    saved: int = 0
    filtered: int = 0
    duplicates: int = 0
    failed: int = 0
    fetch_error: Optional[str] = None
    elapsed_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.fetch_error is None

    def to_dict(self) -> dict:
        return asdict(self)


class SyncOrchestrator:
    """Runs sync cycles: fetch -> transform -> filter -> persist.

    One item failing to normalize, filter or persist never aborts the rest of the
    batch. The only errors raised to the caller are an unknown source and
    an unsupported source type.
    """

    def __init__(
        self,
        registry: AdapterRegistry = None,
        storage: StorageInterface = None,
        max_concurrency: int = None,
    ):
        if storage is None:
            from ..storage.factory import get_storage
            storage = get_storage()
        self.registry = registry or build_default_registry()
        self.storage = storage
        self.max_concurrency = max_concurrency or settings.sync_max_concurrency

    async def sync(self, source: Source) -> SyncResult:
        """Run one sync cycle for a source."""
        adapter = self.registry.get(source.type)
        if adapter is None:
            logger.error("sync_unsupported_type", source_id=source.id, type=source.type)
            raise UnsupportedSourceTypeError(source.type)

        start_time = time.monotonic()
        self._set_state(source, SyncStatus.IN_PROGRESS)
        status = SyncStatus.FAILED

        try:
            fetch = await adapter.fetch_result(source.config)
            result = SyncResult(
                source_id=source.id,
                fetched=len(fetch.items),
                fetch_error=fetch.error,
            )

            for raw in fetch.items:
                try:
                    content = adapter.transform(raw, source.id, adapter.content_type)
                except Exception as e:
                    result.failed += 1
                    logger.warning("content_transform_failed", source_id=source.id, title=(raw.title or "")[:50], error=str(e))
                    continue

                try:
                    accepted = passes(content, source.filter_rules)
                except Exception as e:
                    result.failed += 1
                    logger.warning("content_filter_failed", source_id=source.id, title=content.title[:50], error=str(e))
                    continue

                if not accepted:
                    result.filtered += 1
                    continue

                try:
                    saved = self.storage.create_content(content)
                except Exception as e:
                    result.failed += 1
                    logger.warning("content_save_failed", source_id=source.id, url=content.url[:50], error=str(e))
                    continue

                if saved is None:
                    result.duplicates += 1
                else:
                    result.saved += 1

            if fetch.ok:
                status = SyncStatus.SUCCESS
        finally:
            # Never leave the source in_progress.
            self._set_state(source, status, synced_at=utcnow())

        result.elapsed_ms = int((time.monotonic() - start_time) * 1000)
        logger.info(
            "sync_completed",
            source_id=source.id,
            type=source.type,
            status=status.value,
            fetched=result.fetched,
            saved=result.saved,
            filtered=result.filtered,
            duplicates=result.duplicates,
            failed=result.failed,
            time_ms=result.elapsed_ms,
        )
        return result

    async def sync_by_id(self, source_id: int) -> SyncResult:
        """Load a source and sync it."""
        source = self.storage.get_source(source_id)
        if source is None:
            raise SourceNotFoundError(source_id)
        return await self.sync(source)

    async def sync_all(self, sources: Iterable[Source]) -> List[SyncResult]:
        """Sync sources concurrently, at most max_concurrency at a time.

        A failure in one source is reported in its result and does not
        cancel the others.
        """
        sources = list(sources)
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _bounded(source: Source) -> SyncResult:
            async with semaphore:
                return await self.sync(source)

        tasks = [_bounded(source) for source in sources]
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)

        results = []
        for source, outcome in zip(sources, outcomes):
            if isinstance(outcome, Exception):
                logger.warning("sync_exception", source_id=source.id, type=source.type, error=str(outcome))
                results.append(SyncResult(source_id=source.id, fetch_error=str(outcome)))
                continue
            results.append(outcome)

        logger.info(
            "sync_all_completed",
            sources=len(sources),
            fetched=sum(r.fetched for r in results),
            saved=sum(r.saved for r in results),
            failed_sources=sum(1 for r in results if not r.ok),
        )
        return results

    async def sync_due(self, user_id: int = None, now: datetime = None) -> List[SyncResult]:
        """Sync every active source whose interval has elapsed."""
        user_id = user_id if user_id is not None else settings.default_user_id
        due = self.storage.get_due_sources(now=now, user_id=user_id)
        logger.info("sync_due_sources", user_id=user_id, due=len(due))
        if not due:
            return []
        return await self.sync_all(due)

    def _set_state(self, source: Source, status: SyncStatus, synced_at: datetime = None) -> None:
        if source.id is None:
            return
        try:
            self.storage.update_sync_state(source.id, status, synced_at=synced_at)
        except Exception as e:
            logger.error("sync_state_update_failed", source_id=source.id, status=status.value, error=str(e))
            return
        source.last_sync_status = status
        if synced_at is not None:
            source.last_sync_at = synced_at


async def run_sync(
    source_id: int = None,
    user_id: int = None,
    orchestrator: SyncOrchestrator = None,
) -> List[SyncResult]:
    """Sync one source, or every active source of a user.

    Args:
        source_id: Sync only this source
        user_id: Owner whose active sources are synced (default from settings)
        orchestrator: Orchestrator to use (default storage and adapters if omitted)

    Returns:
        List of SyncResult, one per source
    """
    orchestrator = orchestrator or SyncOrchestrator()
    if source_id is not None:
        return [await orchestrator.sync_by_id(source_id)]

    user_id = user_id if user_id is not None else settings.default_user_id
    sources = [s for s in orchestrator.storage.get_sources(user_id) if s.is_active]
    return await orchestrator.sync_all(sources)
