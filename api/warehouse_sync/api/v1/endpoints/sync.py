"""
Endpoints de estado y disparo manual de los jobs de sincronizacion.
"""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Request, status
from pydantic import BaseModel

from warehouse_sync.application.sync.entities import get_entity
from warehouse_sync.application.sync.scheduler import JobState
from warehouse_sync.shared.exceptions.sync import SyncConfigError


router = APIRouter(prefix="/sync", tags=["Sync"])


class JobStateDTO(BaseModel):
    """Estado de un job de sincronizacion."""
    entity: str
    job_id: str
    cron: str
    status: str
    last_started_at: Optional[datetime] = None
    last_finished_at: Optional[datetime] = None
    last_outcome: Optional[str] = None
    last_error: Optional[str] = None
    last_record_count: Optional[int] = None
    next_run_at: Optional[datetime] = None
    schedule_error: Optional[str] = None

    @classmethod
    def from_state(cls, state: JobState) -> "JobStateDTO":
        return cls(
            entity=state.entity,
            job_id=state.job_id,
            cron=state.cron,
            status=state.status.value,
            last_started_at=state.last_started_at,
            last_finished_at=state.last_finished_at,
            last_outcome=state.last_outcome.value if state.last_outcome else None,
            last_error=state.last_error,
            last_record_count=state.last_record_count,
            next_run_at=state.next_run_at,
            schedule_error=state.schedule_error,
        )


@router.get(
    "/jobs",
    response_model=List[JobStateDTO],
    summary="Estado de los jobs de sincronizacion"
)
async def list_jobs(request: Request) -> List[JobStateDTO]:
    """Lista los jobs programados. Vacio si la sincronizacion esta deshabilitada."""
    scheduler = request.app.state.scheduler
    if scheduler is None:
        return []
    return [JobStateDTO.from_state(state) for state in scheduler.get_job_states()]


@router.post(
    "/jobs/{entity}/run",
    response_model=JobStateDTO,
    status_code=status.HTTP_200_OK,
    summary="Ejecutar ahora la sincronizacion de una entidad"
)
async def run_job(entity: str, request: Request) -> JobStateDTO:
    """
    Ejecuta una corrida inmediata con el mismo wrapper que el cron.

    Si ya hay una corrida en vuelo para la entidad, se omite
    (last_outcome = "skipped").
    """
    get_entity(entity)

    scheduler = request.app.state.scheduler
    if scheduler is None:
        raise SyncConfigError("Sincronizacion deshabilitada: falta configuracion de BigQuery")

    state = await scheduler.run_job(entity)
    return JobStateDTO.from_state(state)
