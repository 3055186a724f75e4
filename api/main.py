"""
Punto de entrada principal de la aplicacion FastAPI.
Hospeda el scheduler de sincronizacion y expone health/estado de jobs.
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from warehouse_sync.api.v1.router import api_router
from warehouse_sync.core.config import Settings, settings
from warehouse_sync.core.events import shutdown, startup
from warehouse_sync.shared.exceptions.base import AppException


def create_application(app_settings: Settings = settings) -> FastAPI:
    """
    Factory para crear y configurar la aplicacion FastAPI.

    Returns:
        FastAPI: Instancia configurada de la aplicacion
    """

    @asynccontextmanager
    async def lifespan(application: FastAPI):
        await startup(application, app_settings)
        yield
        await shutdown(application)

    application = FastAPI(
        title=app_settings.APP_NAME,
        version=app_settings.APP_VERSION,
        description="Sincronizacion periodica BigQuery -> base de datos transaccional",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    application.state.warehouse = None
    application.state.sync_service = None
    application.state.scheduler = None

    # Incluir routers de la API
    application.include_router(api_router, prefix="/api")

    # Manejador global de excepciones personalizadas
    @application.exception_handler(AppException)
    async def app_exception_handler(request, exc: AppException):
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.error_code,
                "message": exc.message,
                "details": exc.details
            }
        )

    # Health check endpoint
    @application.get("/health", tags=["Health"])
    async def health_check():
        """Endpoint para verificar el estado de la aplicacion."""
        scheduler = application.state.scheduler
        return {
            "status": "healthy",
            "app_name": app_settings.APP_NAME,
            "version": app_settings.APP_VERSION,
            "environment": app_settings.ENVIRONMENT,
            "sync_enabled": application.state.sync_service is not None,
            "scheduler_running": bool(scheduler and scheduler.running),
        }

    return application


# Crear instancia de la aplicacion
app = create_application()


if __name__ == "__main__":
    import uvicorn
    from loguru import logger

    # Determinar la URL base de acceso
    if settings.HOST == "0.0.0.0":
        access_host = "localhost"
    else:
        access_host = settings.HOST

    base_url = f"http://{access_host}:{settings.PORT}"

    logger.info("=" * 70)
    logger.info(f"  Health:      {base_url}/health")
    logger.info(f"  Jobs:        {base_url}/api/v1/sync/jobs")
    logger.info("=" * 70)

    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
