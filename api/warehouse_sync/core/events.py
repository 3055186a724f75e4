"""
Manejadores de inicio y cierre de la aplicacion.
"""
from fastapi import FastAPI
from loguru import logger

from warehouse_sync.application.sync.orchestrator import build_sync_service
from warehouse_sync.application.sync.scheduler import SyncScheduler
from warehouse_sync.core.config import Settings
from warehouse_sync.infrastructure.database.session import (
    close_db,
    create_database,
    init_db,
)
from warehouse_sync.infrastructure.warehouse.client import build_warehouse_from_settings
from warehouse_sync.shared.exceptions.sync import SyncConfigError


def configure_logging(settings: Settings) -> None:
    """Agrega el sink de archivo con rotacion."""
    logger.add(
        settings.LOG_FILE,
        rotation="500 MB",
        retention="10 days",
        level=settings.LOG_LEVEL
    )


async def startup(app: FastAPI, settings: Settings) -> None:
    """
    Inicializa recursos al inicio de la aplicacion.

    Deja en `app.state`: database, warehouse, sync_service y scheduler. Si
    faltan las credenciales de BigQuery el proceso sigue sirviendo con la
    sincronizacion deshabilitada (warehouse, sync_service y scheduler en None).
    """
    app.state.warehouse = None
    app.state.sync_service = None
    app.state.scheduler = None

    try:
        logger.info(f"Iniciando {settings.APP_NAME} v{settings.APP_VERSION}")
        logger.info(f"Entorno: {settings.ENVIRONMENT}")

        configure_logging(settings)

        # Inicializar base de datos (crea tablas si no existen)
        database = create_database(settings)
        app.state.database = database
        await init_db(database)
        logger.info("Base de datos inicializada")

    except Exception as e:
        logger.error(f"Error durante startup: {e}")
        logger.exception("Detalle del error:")
        raise

    try:
        warehouse = build_warehouse_from_settings(settings)
    except SyncConfigError as e:
        logger.error(f"Sincronizacion deshabilitada: {e.message}")
        return

    app.state.warehouse = warehouse
    service = build_sync_service(settings, database, warehouse)
    app.state.sync_service = service
    scheduler = SyncScheduler(
        service,
        timezone=settings.SYNC_TIMEZONE,
        schedules=settings.SYNC_SCHEDULES,
    )
    app.state.scheduler = scheduler

    if settings.SYNC_SCHEDULER_ENABLED:
        scheduler.setup_schedules()
        scheduler.start()
    else:
        logger.warning("SYNC_SCHEDULER_ENABLED=false: solo se permiten corridas manuales")

    logger.success("Aplicacion iniciada correctamente")


async def shutdown(app: FastAPI) -> None:
    """Libera recursos al cerrar la aplicacion."""
    logger.info("Cerrando aplicacion...")

    scheduler = getattr(app.state, "scheduler", None)
    if scheduler is not None:
        scheduler.shutdown()

    warehouse = getattr(app.state, "warehouse", None)
    if warehouse is not None:
        warehouse.close()
        logger.info("Cliente de BigQuery cerrado")

    database = getattr(app.state, "database", None)
    if database is not None:
        await close_db(database)
        logger.info("Conexiones de base de datos cerradas")

    logger.success("Aplicacion cerrada correctamente")
