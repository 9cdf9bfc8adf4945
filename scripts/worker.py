"""Worker that keeps sources synced on their configured intervals.

Every poll interval the worker syncs each active source whose
sync_interval has elapsed since its last sync, then checks how many
sources are stuck in a failed state.

Usage:
    python scripts/worker.py

Environment Variables:
    RM_DATABASE_URL: SQLAlchemy database URL
    RM_WORKER_POLL_INTERVAL_SECONDS: How often to look for due sources
    RM_SLACK_WEBHOOK_URL: Optional, for alerts
"""

import os
import sys
import asyncio
import signal
from datetime import datetime

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from readmaster.config.settings import settings
from readmaster.ingestion.registry import build_default_registry
from readmaster.pipeline.sync import SyncOrchestrator
from readmaster.storage.factory import get_storage

logger = structlog.get_logger()


class SyncWorker:
    """Manages scheduled sync tasks."""

    def __init__(self):
        self.storage = get_storage()
        self.orchestrator = SyncOrchestrator(
            registry=build_default_registry(),
            storage=self.storage,
        )
        self.scheduler = AsyncIOScheduler()
        self.running = True

    def setup_jobs(self):
        """Configure scheduled jobs."""
        self.scheduler.add_job(
            self.sync_due_sources,
            IntervalTrigger(seconds=settings.worker_poll_interval_seconds),
            id='sync_due_sources',
            name='Sync sources whose interval elapsed',
            replace_existing=True,
            max_instances=1,
            misfire_grace_time=settings.worker_poll_interval_seconds
        )

        self.scheduler.add_job(
            self.health_check,
            IntervalTrigger(hours=1),
            id='health_check',
            name='Sync health check',
            replace_existing=True
        )

        logger.info("jobs_configured", count=len(self.scheduler.get_jobs()))

    async def sync_due_sources(self):
        """Sync every source that is due."""
        logger.info("job_started", job="sync_due_sources")
        start_time = datetime.now()

        try:
            results = await self.orchestrator.sync_due()
        except Exception as e:
            logger.error("job_failed", job="sync_due_sources", error=str(e))
            await self.send_alert(f"Sync failed: {e}", level="error")
            return {"error": str(e)}

        failed = [r for r in results if not r.ok]
        elapsed = (datetime.now() - start_time).total_seconds()
        logger.info("job_completed", job="sync_due_sources",
                    sources=len(results),
                    fetched=sum(r.fetched for r in results),
                    saved=sum(r.saved for r in results),
                    failed_sources=len(failed),
                    elapsed_seconds=elapsed)

        return {
            "sources": len(results),
            "saved": sum(r.saved for r in results),
            "failed_sources": len(failed),
        }

    async def health_check(self):
        """Alert when many sources are failing."""
        try:
            stats = self.storage.get_stats()
            failed = stats.get('failed_sources', 0)
            active = stats.get('active_sources', 0)
            if active and failed > active // 2:
                await self.send_alert(
                    f"{failed} of {active} active sources failed their last sync",
                    level="warning"
                )

            logger.debug("health_check", stats=stats)
            return {"status": "healthy", "stats": stats}

        except Exception as e:
            logger.error("health_check_failed", error=str(e))
            await self.send_alert(f"Health check failed: {e}", level="error")
            return {"status": "unhealthy", "error": str(e)}

    async def send_alert(self, message: str, level: str = "warning"):
        """Send alert via Slack webhook (if configured)."""
        webhook_url = settings.slack_webhook_url
        if not webhook_url:
            return

        try:
            import httpx

            async with httpx.AsyncClient(timeout=10) as client:
                await client.post(webhook_url, json={
                    "text": f"[{level.upper()}] *ReadMaster*\n{message}"
                })
        except Exception as e:
            logger.error("alert_failed", error=str(e))

    def start(self):
        """Start the worker."""
        self.setup_jobs()
        self.scheduler.start()
        logger.info("worker_started", jobs=len(self.scheduler.get_jobs()))

    def stop(self):
        """Stop the worker gracefully."""
        self.running = False
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
        logger.info("worker_stopped")


async def main():
    """Main entry point."""
    worker = SyncWorker()

    # Handle graceful shutdown
    def signal_handler(signum, frame):
        logger.info("shutdown_signal_received", signal=signum)
        worker.running = False

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    worker.start()

    # Run immediately on startup
    logger.info("running_initial_tasks")
    await worker.sync_due_sources()

    while worker.running:
        await asyncio.sleep(1)

    worker.stop()


if __name__ == "__main__":
    asyncio.run(main())
