"""
Tests for the bulk recalculation entry points: arq job, enqueue helper,
CLI and worker cron wiring.
"""
import asyncio

from talent_trust.workers import recalculate, worker_settings
from talent_trust.trust.store import ACTION_RECALCULATE_ALL


class TestJob:

    def test_job_returns_summary(self, service, store, audit):
        summary = asyncio.run(
            recalculate.recalculate_all_trust_scores({"trust_service": service}, "admin-1")
        )
        assert summary == {
            "processed": 2,
            "succeeded": 2,
            "failed": 0,
            "failed_talents": [],
            "needs_improvement_plan": ["talent-2"],
            "audited": True,
        }
        assert set(store.scores) == {"talent-1", "talent-2"}
        assert audit.entries[0].admin_id == "admin-1"

    def test_job_defaults_to_system_admin(self, service, audit):
        asyncio.run(recalculate.recalculate_all_trust_scores({"trust_service": service}))
        assert audit.entries[0].admin_id == "system"
        assert audit.entries[0].action == ACTION_RECALCULATE_ALL

    def test_job_reports_failed_talents(self, service, store):
        store.failing.add("save_trust_score")
        summary = asyncio.run(
            recalculate.recalculate_all_trust_scores({"trust_service": service}, "admin-1")
        )
        assert summary["failed"] == 2
        assert summary["failed_talents"] == ["talent-1", "talent-2"]
        assert summary["needs_improvement_plan"] == []


class FakeJob:
    job_id = "job-42"


class FakePool:

    def __init__(self):
        self.enqueued = []
        self.closed = False

    async def enqueue_job(self, name, *args):
        self.enqueued.append((name, args))
        return FakeJob()

    async def close(self):
        self.closed = True


class TestEnqueue:

    def test_enqueue_returns_job_id(self, monkeypatch):
        pool = FakePool()

        async def fake_create_pool(settings):
            return pool

        monkeypatch.setattr(recalculate, "create_pool", fake_create_pool)
        job_id = asyncio.run(recalculate.enqueue_recalculation("admin-1"))
        assert job_id == "job-42"
        assert pool.enqueued == [(recalculate.JOB_NAME, ("admin-1",))]
        assert pool.closed


class TestCli:

    def test_success(self, service, capsys):
        assert recalculate.main(["admin-1"], service=service) == 0
        out = capsys.readouterr().out
        assert "Recalculated 2/2 trust scores" in out
        assert "Below improvement-plan threshold: 1" in out

    def test_usage(self, capsys):
        assert recalculate.main([]) == 1
        assert "Usage" in capsys.readouterr().out

    def test_partial_failure_exit_code(self, service, store, capsys):
        store.failing.add("save_trust_score")
        assert recalculate.main(["admin-1"], service=service) == 1
        out = capsys.readouterr().out
        assert "Recalculated 0/2 trust scores" in out
        assert "failed: talent-1" in out

    def test_enumeration_failure_aborts(self, service, store, capsys):
        store.failing.add("list_talent_ids")
        assert recalculate.main(["admin-1"], service=service) == 1
        assert "Recalculation aborted" in capsys.readouterr().out

    def test_unaudited_run_warns(self, service, audit, capsys):
        audit.fail = True
        assert recalculate.main(["admin-1"], service=service) == 0
        assert "audit entry was not written" in capsys.readouterr().out


class TestWorkerSettings:

    def test_job_is_registered(self):
        assert recalculate.recalculate_all_trust_scores in worker_settings.WorkerSettings.functions

    def test_no_cron_by_default(self, monkeypatch):
        monkeypatch.setattr(worker_settings.settings, "TRUST_RECALC_CRON_HOUR", None)
        assert worker_settings._cron_jobs() == []

    def test_cron_at_configured_hour(self, monkeypatch):
        monkeypatch.setattr(worker_settings.settings, "TRUST_RECALC_CRON_HOUR", 3)
        jobs = worker_settings._cron_jobs()
        assert len(jobs) == 1
        assert jobs[0].hour == {3}
        assert jobs[0].minute == {0}
