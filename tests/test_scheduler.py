"""Tests for the expiry sweep scheduler."""

from datetime import timedelta

from app.core import scheduler as scheduler_module
from app.core.scheduler import EXPIRY_JOB_ID, get_scheduler_status, run_expiry_sweep, setup_jobs
from app.repositories.base import Collection
from app.utils.helpers import utcnow


async def test_run_expiry_sweep_uses_the_workflow(marketplace, workflow, store):
    job = await marketplace.approved_job()
    await store.update(Collection.JOBS, job["id"], {"last_date": utcnow() - timedelta(hours=1)})

    assert await run_expiry_sweep(workflow) == 1
    assert (await store.get(Collection.JOBS, job["id"]))["status"] == "expired"


def test_setup_jobs_registers_the_sweep(workflow):
    try:
        setup_jobs(workflow, interval_hours=6)

        status = get_scheduler_status()
        assert status["running"] is False
        assert [job["id"] for job in status["jobs"]] == [EXPIRY_JOB_ID]
        assert "6:00:00" in status["jobs"][0]["trigger"]
        assert status["jobs"][0]["next_run_time"] is None
    finally:
        scheduler_module.scheduler.remove_all_jobs()
