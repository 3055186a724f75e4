"""
Tests unitarios para SyncScheduler.

Verifica el wrapper de los jobs (nunca propaga), el aislamiento entre
entidades y que no haya dos corridas en vuelo de la misma entidad.
"""
import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from warehouse_sync.application.sync.entities import ENTITIES
from warehouse_sync.application.sync.scheduler import JobOutcome, JobStatus, SyncScheduler
from warehouse_sync.shared.exceptions.sync import UnknownEntityError, WarehouseQueryError


@pytest.fixture
def service():
    mock = MagicMock()
    mock.entity_names = list(ENTITIES)
    mock.sync = AsyncMock(return_value=[])
    return mock


class TestRunJob:

    @pytest.mark.asyncio
    async def test_success_records_count(self, service, log_messages):
        service.sync.return_value = [{"payment_amount": 1}, {"payment_amount": 2}]
        scheduler = SyncScheduler(service)

        state = await scheduler.run_job("payments")

        assert state.last_outcome is JobOutcome.SUCCESS
        assert state.last_record_count == 2
        assert state.status is JobStatus.IDLE
        assert any("sync_payments completado: 2 registros" in m for m in log_messages)

    @pytest.mark.asyncio
    async def test_failure_is_logged_and_not_raised(self, service, log_messages):
        service.sync.side_effect = WarehouseQueryError("fetch_leases", RuntimeError("timeout"))
        scheduler = SyncScheduler(service)

        state = await scheduler.run_job("leases")

        assert state.last_outcome is JobOutcome.FAILURE
        assert "fetch_leases" in state.last_error
        assert state.status is JobStatus.IDLE
        assert any(m.startswith("Job sync_leases fallo") for m in log_messages)
        assert "Detalle del error:" in log_messages

    @pytest.mark.asyncio
    async def test_leases_failure_does_not_affect_payments(self, service):
        async def fake_sync(name):
            if name == "leases":
                raise WarehouseQueryError("fetch_leases", RuntimeError("boom"))
            return [{"id": 1}]

        service.sync.side_effect = fake_sync
        scheduler = SyncScheduler(service)

        leases, payments = await asyncio.gather(
            scheduler.run_job("leases"),
            scheduler.run_job("payments"),
        )

        assert leases.last_outcome is JobOutcome.FAILURE
        assert payments.last_outcome is JobOutcome.SUCCESS
        assert payments.last_record_count == 1

    @pytest.mark.asyncio
    async def test_overlapping_run_is_skipped(self, service, log_messages):
        release = asyncio.Event()

        async def slow_sync(name):
            await release.wait()
            return []

        service.sync.side_effect = slow_sync
        scheduler = SyncScheduler(service)

        first = asyncio.create_task(scheduler.run_job("units"))
        await asyncio.sleep(0)

        skipped = await scheduler.run_job("units")
        assert skipped.last_outcome is JobOutcome.SKIPPED
        assert skipped.status is JobStatus.RUNNING

        release.set()
        state = await first

        assert state.last_outcome is JobOutcome.SUCCESS
        assert service.sync.await_count == 1
        assert any("ya esta en ejecucion" in m for m in log_messages)

    @pytest.mark.asyncio
    async def test_unknown_entity_raises(self, service):
        scheduler = SyncScheduler(service)

        with pytest.raises(UnknownEntityError):
            await scheduler.run_job("invoices")


class TestSetupSchedules:

    def test_one_cron_job_per_entity(self, service):
        aps = AsyncIOScheduler(timezone="UTC")
        scheduler = SyncScheduler(service, scheduler=aps)

        scheduler.setup_schedules()

        jobs = {job.id: job for job in aps.get_jobs()}
        assert set(jobs) == {f"sync_{name}" for name in ENTITIES}
        assert all(job.max_instances == 1 for job in jobs.values())
        assert all(job.coalesce for job in jobs.values())

    def test_overrides_replace_default_cron(self, service):
        scheduler = SyncScheduler(
            service,
            schedules={"units": "*/5 * * * *"},
            scheduler=AsyncIOScheduler(timezone="UTC"),
        )

        scheduler.setup_schedules()
        states = {state.entity: state for state in scheduler.get_job_states()}

        assert states["units"].cron == "*/5 * * * *"
        assert states["payments"].cron == ENTITIES["payments"].default_cron
        assert states["units"].next_run_at is None

    def test_unknown_override_is_warned(self, service, log_messages):
        SyncScheduler(service, schedules={"invoices": "0 * * * *"}, scheduler=AsyncIOScheduler())

        assert any("entidad desconocida: invoices" in m for m in log_messages)

    def test_invalid_cron_keeps_sibling_jobs(self, service, log_messages):
        backend = AsyncIOScheduler()
        scheduler = SyncScheduler(service, schedules={"units": "every hour"}, scheduler=backend)

        scheduler.setup_schedules()

        job_ids = {job.id for job in backend.get_jobs()}
        assert "sync_units" not in job_ids
        assert job_ids == {d.job_id for name, d in ENTITIES.items() if name != "units"}
        units = next(s for s in scheduler.get_job_states() if s.entity == "units")
        assert "every hour" in units.schedule_error
        assert any("sync_units no programado" in m for m in log_messages)

    @pytest.mark.asyncio
    async def test_unscheduled_entity_still_runs_manually(self, service):
        scheduler = SyncScheduler(service, schedules={"units": "every hour"}, scheduler=AsyncIOScheduler())
        scheduler.setup_schedules()

        state = await scheduler.run_job("units")

        assert state.last_outcome is JobOutcome.SUCCESS
        assert state.schedule_error is not None
