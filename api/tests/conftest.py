"""
Configuracion de fixtures para pytest.
"""
from typing import AsyncGenerator, List

import pytest
import pytest_asyncio
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from warehouse_sync.infrastructure.database import models  # noqa: F401
from warehouse_sync.infrastructure.database.session import Base, Database


# URL de base de datos de prueba
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[Database, None]:
    """
    Destino en memoria para cada test.
    StaticPool comparte una sola conexion entre sesiones (misma base en memoria).
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    yield Database(engine=engine, session_factory=session_factory)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def log_messages() -> List[str]:
    """Captura los mensajes de loguru (nivel DEBUG en adelante)."""
    messages: List[str] = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)
