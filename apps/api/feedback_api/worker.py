"""
Background worker for processing scheduled jobs.

Usage:
    python -m feedback_api.worker

The worker polls the jobs table (the webhook outbox) and delivers pending
jobs. For production, run this as a separate process next to the API.
"""

import asyncio
import logging
import os

import httpx
from sqlalchemy.orm import Session

from feedback_api.db.session import SessionLocal
from feedback_api.jobs.registry import resolve_job_handler
from feedback_api.services import job_service

logger = logging.getLogger(__name__)

# Worker configuration
POLL_INTERVAL_SECONDS = int(os.getenv("WORKER_POLL_INTERVAL", "10"))
BATCH_SIZE = int(os.getenv("WORKER_BATCH_SIZE", "10"))


async def process_job(
    db: Session, job, *, transport: httpx.AsyncBaseTransport | None = None
) -> None:
    """Process a single job based on its type."""
    logger.info(
        "Processing job %s (type=%s, attempt=%s)", job.id, job.job_type, job.attempts
    )
    handler = resolve_job_handler(job.job_type)
    await handler(db, job, transport=transport)


async def run_pending_jobs(
    db: Session,
    *,
    limit: int = BATCH_SIZE,
    transport: httpx.AsyncBaseTransport | None = None,
) -> int:
    """Process one batch of due jobs. Returns how many jobs were attempted."""
    jobs = job_service.get_pending_jobs(db, limit=limit)
    if jobs:
        logger.info("Found %s pending jobs", len(jobs))

    for job in jobs:
        try:
            job_service.mark_job_running(db, job)
            await process_job(db, job, transport=transport)
            job_service.mark_job_completed(db, job)
            logger.info("Job %s completed successfully", job.id)
        except Exception as e:
            db.rollback()
            job_service.mark_job_failed(db, job, f"{type(e).__name__}: {e}")
            logger.error("Job %s failed: %s", job.id, type(e).__name__)

    return len(jobs)


async def worker_loop() -> None:
    """Main worker loop - polls for and processes pending jobs."""
    logger.info(
        "Worker starting (poll interval: %ss, batch size: %s)",
        POLL_INTERVAL_SECONDS,
        BATCH_SIZE,
    )

    while True:
        with SessionLocal() as db:
            try:
                await run_pending_jobs(db)
            except Exception as e:
                logger.error("Error in worker loop: %s", e)

        await asyncio.sleep(POLL_INTERVAL_SECONDS)


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    asyncio.run(worker_loop())


if __name__ == "__main__":
    main()
