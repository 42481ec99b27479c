"""
Talent Trust - Worker Settings

arq worker configuration. Start with:
    arq talent_trust.workers.worker_settings.WorkerSettings

Jobs:
    recalculate_all_trust_scores   queued by the API (?background=true) or enqueue_recalculation
    nightly recalculation          cron at TRUST_RECALC_CRON_HOUR (UTC), if set
"""
from arq import cron
from arq.connections import RedisSettings

from talent_trust.config import get_settings
from talent_trust.log import configure_logging
from talent_trust.workers.recalculate import recalculate_all_trust_scores

settings = get_settings()


async def startup(ctx):
    configure_logging()


def _cron_jobs():
    if settings.TRUST_RECALC_CRON_HOUR is None:
        return []
    return [
        cron(
            recalculate_all_trust_scores,
            hour={settings.TRUST_RECALC_CRON_HOUR},
            minute={0},
            unique=True,  # Prevent duplicate runs
        ),
    ]


class WorkerSettings:
    functions = [recalculate_all_trust_scores]
    cron_jobs = _cron_jobs()
    on_startup = startup

    redis_settings = RedisSettings.from_dsn(settings.REDIS_URL)
    max_jobs = 1
    job_timeout = 3600  # bulk recalculation walks every talent
