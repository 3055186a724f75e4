"""
Scheduler de sincronizacion por entidad.

Cada entidad tiene su propio job cron (APScheduler AsyncIOScheduler) y su
propio estado. Los jobs son independientes: el fallo de una entidad no
afecta a las demas.

Caracteristicas:
- A lo sumo una corrida en vuelo por entidad (max_instances=1 + flag en
  proceso para disparos manuales que se solapan con el cron)
- Wrapper uniforme: loguea exito o fallo y siempre retorna normalmente
- Sin reintentos: la siguiente oportunidad es el proximo tick del cron
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, List, Mapping, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from loguru import logger

from warehouse_sync.application.sync.entities import get_entity, resolve_cron
from warehouse_sync.application.sync.orchestrator import WarehouseSyncService
from warehouse_sync.shared.utils.datetime_utils import utc_now


class JobStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


class JobOutcome(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    SKIPPED = "skipped"


@dataclass
class JobState:
    """Estado en memoria del job de una entidad."""

    entity: str
    job_id: str
    cron: str
    status: JobStatus = JobStatus.IDLE
    last_started_at: Optional[datetime] = None
    last_finished_at: Optional[datetime] = None
    last_outcome: Optional[JobOutcome] = None
    last_error: Optional[str] = None
    last_record_count: Optional[int] = None
    next_run_at: Optional[datetime] = None
    schedule_error: Optional[str] = None


class SyncScheduler:
    """
    Registra un job cron por entidad y ejecuta las corridas con el wrapper.
    """

    def __init__(
        self,
        service: WarehouseSyncService,
        *,
        timezone: str = "UTC",
        schedules: Optional[Mapping[str, str]] = None,
        scheduler: Optional[AsyncIOScheduler] = None,
    ) -> None:
        self._service = service
        self._timezone = timezone
        self._overrides = dict(schedules or {})
        self._scheduler = scheduler or AsyncIOScheduler(timezone=timezone)
        self._states: Dict[str, JobState] = {}
        self._in_flight: set[str] = set()

        unknown = set(self._overrides) - set(service.entity_names)
        for name in sorted(unknown):
            logger.warning(f"SYNC_SCHEDULES contiene una entidad desconocida: {name}")

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def _state_for(self, entity_name: str) -> JobState:
        state = self._states.get(entity_name)
        if state is None:
            definition = get_entity(entity_name)
            state = JobState(
                entity=definition.name,
                job_id=definition.job_id,
                cron=resolve_cron(definition, self._overrides),
            )
            self._states[entity_name] = state
        return state

    def setup_schedules(self) -> None:
        """
        Agrega (o reemplaza) un job cron por cada entidad del servicio.

        Un cron invalido deja solo esa entidad sin job (queda en
        `schedule_error`); el resto se programa igual.
        """
        for name in self._service.entity_names:
            state = self._state_for(name)
            try:
                trigger = CronTrigger.from_crontab(state.cron, timezone=self._timezone)
            except ValueError as e:
                # Solo esta entidad queda sin programar; sigue disponible para corridas manuales
                state.schedule_error = f"Cron invalido '{state.cron}': {e}"
                logger.error(f"Job {state.job_id} no programado: {state.schedule_error}")
                continue

            state.schedule_error = None
            self._scheduler.add_job(
                self.run_job,
                trigger=trigger,
                args=[name],
                id=state.job_id,
                name=f"Sync {name}",
                max_instances=1,
                coalesce=True,
                replace_existing=True,
            )
            logger.info(f"Job {state.job_id} programado con cron '{state.cron}'")

    def start(self) -> None:
        if not self._scheduler.running:
            self._scheduler.start()
            logger.success(f"Scheduler de sincronizacion iniciado ({len(self._states)} jobs)")

    def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("Scheduler de sincronizacion detenido")

    async def run_job(self, entity_name: str) -> JobState:
        """
        Ejecuta una corrida de la entidad con el wrapper de logging.

        Nunca propaga errores del pipeline: el fallo queda en el log y en el
        estado del job.

        Raises:
            UnknownEntityError: Si la entidad no esta registrada
        """
        state = self._state_for(entity_name)

        if entity_name in self._in_flight:
            logger.warning(f"Job {state.job_id} ya esta en ejecucion, se omite esta corrida")
            state.last_outcome = JobOutcome.SKIPPED
            return state

        self._in_flight.add(entity_name)
        state.status = JobStatus.RUNNING
        state.last_started_at = utc_now()
        try:
            records = await self._service.sync(entity_name)
        except Exception as e:
            state.last_outcome = JobOutcome.FAILURE
            state.last_error = str(e)
            state.last_record_count = None
            logger.error(f"Job {state.job_id} fallo: {e}")
            logger.exception("Detalle del error:")
        else:
            state.last_outcome = JobOutcome.SUCCESS
            state.last_error = None
            state.last_record_count = len(records)
            logger.info(f"Job {state.job_id} completado: {len(records)} registros sincronizados")
        finally:
            state.status = JobStatus.IDLE
            state.last_finished_at = utc_now()
            self._in_flight.discard(entity_name)

        return state

    def get_job_states(self) -> List[JobState]:
        """Estado de todos los jobs, con el proximo disparo si el scheduler corre."""
        for state in self._states.values():
            job = self._scheduler.get_job(state.job_id)
            # Los jobs pendientes (scheduler sin iniciar) no tienen next_run_time
            state.next_run_at = getattr(job, "next_run_time", None) if job else None
        return list(self._states.values())
