"""
Background Job Scheduler.

WHAT: Configures APScheduler for the periodic overdue-invoice sweep.

WHY: Invoices move from ``sent`` to ``overdue`` when their due date passes,
without anyone having to open them.

HOW: AsyncIOScheduler with a memory job store; the job opens its own
session and commits. Enabled with SCHEDULER_ENABLED.

Example:
    # In the app lifespan:
    await start_scheduler()
    ...
    await shutdown_scheduler()
"""

import logging
from typing import Optional

from apscheduler.executors.asyncio import AsyncIOExecutor
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from receiptdesk.core.config import settings
from receiptdesk.db.session import get_session_factory
from receiptdesk.services.invoice_service import InvoiceService

logger = logging.getLogger(__name__)

OVERDUE_JOB_ID = "invoice_overdue_sweep"

# Global scheduler instance
_scheduler: Optional[AsyncIOScheduler] = None


def get_scheduler() -> Optional[AsyncIOScheduler]:
    return _scheduler


async def run_overdue_sweep() -> int:
    """
    Mark overdue invoices in a dedicated session.

    Returns:
        Number of invoices moved to ``overdue``
    """
    async with get_session_factory()() as session:
        try:
            count = await InvoiceService(session).mark_overdue()
            await session.commit()
        except Exception:
            await session.rollback()
            logger.exception("Overdue invoice sweep failed")
            raise
    return count


async def start_scheduler() -> None:
    """
    Start the scheduler and register the overdue sweep.

    Note: Call this from the FastAPI lifespan.
    """
    global _scheduler

    if _scheduler is not None and _scheduler.running:
        logger.warning("Scheduler already running")
        return

    _scheduler = AsyncIOScheduler(
        jobstores={"default": MemoryJobStore()},
        executors={"default": AsyncIOExecutor()},
        job_defaults={
            "coalesce": True,  # Combine missed runs into one
            "max_instances": 1,
            "misfire_grace_time": 60,
        },
        timezone="UTC",
    )

    _scheduler.add_job(
        func=run_overdue_sweep,
        trigger=IntervalTrigger(minutes=settings.OVERDUE_SWEEP_INTERVAL_MINUTES),
        id=OVERDUE_JOB_ID,
        name="Overdue Invoice Sweep",
        replace_existing=True,
    )

    _scheduler.start()
    logger.info(
        f"Scheduler started with overdue sweep every {settings.OVERDUE_SWEEP_INTERVAL_MINUTES} minutes"
    )


async def shutdown_scheduler() -> None:
    global _scheduler

    if _scheduler is None or not _scheduler.running:
        logger.info("Scheduler not running")
        _scheduler = None
        return

    logger.info("Shutting down scheduler...")
    _scheduler.shutdown(wait=True)
    _scheduler = None
    logger.info("Scheduler shut down successfully")


def get_scheduler_status() -> dict:
    """Scheduler state and job details for the health endpoint."""
    if _scheduler is None:
        return {"running": False, "jobs": [], "message": "Scheduler not initialized"}

    jobs = [
        {
            "id": job.id,
            "name": job.name,
            "next_run_time": str(job.next_run_time) if job.next_run_time else None,
            "trigger": str(job.trigger),
        }
        for job in _scheduler.get_jobs()
    ]
    return {
        "running": _scheduler.running,
        "jobs": jobs,
        "message": "Scheduler is running" if _scheduler.running else "Scheduler is paused",
    }
