"""
Gestion del engine y de las sesiones de base de datos destino.

El engine no vive como global de modulo: se construye una sola vez al
arrancar el proceso (ver `create_database`) y se pasa explicitamente a los
repositorios y al orquestador.
"""
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from warehouse_sync.core.config import Settings


# Base para modelos de SQLAlchemy
Base = declarative_base()


@dataclass(frozen=True)
class Database:
    """Engine + session factory del destino, compartidos por todos los loaders."""

    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name


def _create_engine_args(settings: Settings, url: str) -> dict:
    """
    Construye los argumentos del engine segun el tipo de base de datos.
    PostgreSQL usa pool de conexiones, SQLite no lo soporta.
    """
    args = {
        "echo": settings.DEBUG,
        "future": True,
    }

    # Configuracion de pool solo para PostgreSQL
    if "postgresql" in url:
        args.update({
            "pool_size": settings.DB_POOL_SIZE,
            "max_overflow": settings.DB_MAX_OVERFLOW,
            "pool_pre_ping": True,  # Verifica conexion antes de usar
        })

    return args


def create_database(settings: Settings, url: str | None = None) -> Database:
    """
    Crea el engine y la session factory del destino.

    Args:
        settings: Configuracion del proceso
        url: Override de la URL (tests); por defecto effective_database_url
    """
    url = url or settings.effective_database_url
    engine = create_async_engine(url, **_create_engine_args(settings, url))
    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False
    )
    return Database(engine=engine, session_factory=session_factory)


async def init_db(database: Database) -> None:
    """Inicializa la base de datos creando todas las tablas."""
    # Registrar los modelos en Base.metadata antes de create_all
    from warehouse_sync.infrastructure.database import models  # noqa: F401

    async with database.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db(database: Database) -> None:
    """Cierra las conexiones de la base de datos."""
    await database.engine.dispose()
