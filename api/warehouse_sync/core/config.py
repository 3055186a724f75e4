"""
Configuracion central del servicio de sincronizacion.
Gestiona variables de entorno y configuraciones globales.

Soporta configuracion para desarrollo (ENVIRONMENT=development)
y produccion (ENVIRONMENT=production).
"""
from typing import Dict, Optional

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Clase de configuracion de la aplicacion.
    Lee variables de entorno y proporciona valores por defecto.

    Warehouse (BigQuery):
    - BIGQUERY_PROJECT y BIGQUERY_APPLICATION_CREDENTIALS son obligatorias
      para el motor de sync (no para el proceso completo).
    - BIGQUERY_DATASET es el namespace logico donde viven las vistas origen.

    Destino:
    - DATABASE_URL se puede especificar completa o por componentes.
    """

    # Configuracion de la aplicacion
    APP_NAME: str = Field(default="Warehouse Sync Service")
    APP_VERSION: str = Field(default="1.0.0")
    DEBUG: bool = Field(default=False)
    ENVIRONMENT: str = Field(default="production")

    # Configuracion del servidor
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=5000)

    # Base de datos - Componentes separados
    DATABASE_HOST: str = Field(default="localhost")
    DATABASE_PORT: int = Field(default=5432)
    DATABASE_USER: str = Field(default="sync_user")
    DATABASE_PASSWORD: str = Field(default="sync_pass")
    DATABASE_NAME: str = Field(default="storage_db")

    # Base de datos - URL completa (override de componentes si se proporciona)
    DATABASE_URL: str = Field(default="")
    DB_POOL_SIZE: int = Field(default=5)
    DB_MAX_OVERFLOW: int = Field(default=10)

    # BigQuery
    BIGQUERY_PROJECT: Optional[str] = Field(default=None)
    BIGQUERY_APPLICATION_CREDENTIALS: Optional[str] = Field(default=None)
    BIGQUERY_DATASET: str = Field(default="authorized_views")
    BIGQUERY_SYNC_BATCH_SIZE: int = Field(default=1000)

    # Scheduler
    SYNC_SCHEDULER_ENABLED: bool = Field(default=True)
    SYNC_TIMEZONE: str = Field(default="UTC")
    # Mapa JSON entidad -> crontab, p.ej. {"units": "*/30 * * * *"}
    SYNC_SCHEDULES: Dict[str, str] = Field(default_factory=dict)

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FILE: str = Field(default="logs/sync.log")

    @computed_field
    @property
    def effective_database_url(self) -> str:
        """
        Retorna la URL de base de datos efectiva.
        Si DATABASE_URL esta definida, la usa directamente.
        Si no, construye la URL desde los componentes individuales.
        """
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{self.DATABASE_USER}:{self.DATABASE_PASSWORD}"
            f"@{self.DATABASE_HOST}:{self.DATABASE_PORT}/{self.DATABASE_NAME}"
        )

    @computed_field
    @property
    def is_development(self) -> bool:
        """Indica si el entorno es de desarrollo."""
        return self.ENVIRONMENT.lower() == "development"

    class Config:
        """Configuracion de Pydantic."""
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignorar campos extra del .env


# Instancia global de configuracion
settings = Settings()
