"""
Talent Trust - Bulk Recalculation Job

Runs the same recalculation the API exposes, outside a request: as an arq
job on the worker, or by hand from the command line.

Run manually:
    python -m talent_trust.workers.recalculate <admin_id>

Queue from code:
    await enqueue_recalculation(admin_id)
"""
import asyncio
import sys
from typing import Optional

import structlog
from arq import create_pool
from arq.connections import RedisSettings

from talent_trust.config import get_settings
from talent_trust.dependencies import build_trust_service
from talent_trust.errors import TrustError
from talent_trust.trust.guard import ADMIN_ROLE
from talent_trust.trust.service import BatchResult, TrustScoreService

logger = structlog.get_logger()

JOB_NAME = "recalculate_all_trust_scores"


def run_recalculation(requester_id: str, service: Optional[TrustScoreService] = None) -> BatchResult:
    """
    Recalculate every talent as `requester_id`.

    Job and CLI callers are operators, not web users; they run with the
    admin role and are recorded in the audit log under their own id.
    """
    service = service or build_trust_service()
    return service.recalculate_all(requester_id, ADMIN_ROLE)


async def recalculate_all_trust_scores(ctx, requester_id: Optional[str] = None) -> dict:
    """arq job function. Returns a summary stored as the job result."""
    requester_id = requester_id or get_settings().TRUST_SYSTEM_ADMIN_ID
    logger.info("recalculation_job_start", admin_id=requester_id, job_id=ctx.get("job_id"))

    service = ctx.get("trust_service")
    batch = await asyncio.to_thread(run_recalculation, requester_id, service)

    summary = {
        "processed": batch.processed,
        "succeeded": batch.succeeded,
        "failed": batch.failed,
        "failed_talents": [r.talent_id for r in batch.results if not r.success],
        "needs_improvement_plan": batch.needing_improvement,
        "audited": batch.audited,
    }
    logger.info("recalculation_job_complete", **summary)
    return summary


async def enqueue_recalculation(requester_id: str) -> str:
    """Queue a recalculation job. Returns the arq job id."""
    redis_pool = await create_pool(RedisSettings.from_dsn(get_settings().REDIS_URL))
    try:
        job = await redis_pool.enqueue_job(JOB_NAME, requester_id)
    finally:
        await redis_pool.close()
    logger.info("recalculation_job_queued", admin_id=requester_id, job_id=job.job_id)
    return job.job_id


# ── CLI Entry Point ───────────────────────────────

def main(argv=None, service: Optional[TrustScoreService] = None) -> int:
    from talent_trust.log import configure_logging

    argv = sys.argv[1:] if argv is None else argv
    if len(argv) != 1:
        print("Usage: python -m talent_trust.workers.recalculate <admin_id>")
        return 1

    configure_logging()
    try:
        batch = run_recalculation(argv[0], service)
    except TrustError as e:
        print(f"Recalculation aborted: {e}")
        return 1

    print(f"Recalculated {batch.succeeded}/{batch.processed} trust scores")
    if batch.needing_improvement:
        print(f"Below improvement-plan threshold: {len(batch.needing_improvement)}")
    for r in batch.results:
        if not r.success:
            print(f"  failed: {r.talent_id} ({r.error})")
    if not batch.audited:
        print("Warning: audit entry was not written")
    return 0 if batch.failed == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
