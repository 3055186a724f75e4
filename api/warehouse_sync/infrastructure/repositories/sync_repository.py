"""
Repositorio generico de entidades sincronizadas y loader masivo.

EntityRepository opera sobre una sesion ya abierta (el caller controla la
transaccion). BulkLoader abre las sesiones y aplica la estrategia de carga
de cada entidad:
- SKIP_DUPLICATES: una transaccion, INSERT ... ON CONFLICT DO NOTHING por lotes,
  deduplicando por `natural_key_hash`
- UPDATE_IN_PLACE: registro a registro, buscar por llave natural -> update o create
"""
import hashlib
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from loguru import logger
from sqlalchemy import and_, func, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from warehouse_sync.application.sync.entities import EntityDefinition, LoadStrategy
from warehouse_sync.infrastructure.database.session import Database
from warehouse_sync.shared.exceptions.sync import LoadError, SyncConfigError
from warehouse_sync.shared.utils.datetime_utils import ensure_utc, utc_now

_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _chunks(rows: Sequence[Dict[str, Any]], size: int):
    for start in range(0, len(rows), size):
        yield rows[start:start + size]


def natural_key_hash(natural_key: Sequence[str], record: Dict[str, Any]) -> str:
    """
    Hash estable de la llave natural de un registro.

    Un valor ausente cuenta como un valor mas: dos registros con las mismas
    partes (incluidos los NULL) producen el mismo hash.
    """
    parts = []
    for column in natural_key:
        value = record.get(column)
        if value is None:
            parts.append("\\N")
        elif isinstance(value, datetime):
            parts.append("=" + ensure_utc(value).isoformat())
        else:
            parts.append("=" + str(value))
    return hashlib.sha256("\x1f".join(parts).encode("utf-8")).hexdigest()


class EntityRepository:
    """Operaciones de base de datos para la tabla de una entidad."""

    def __init__(self, db: AsyncSession, model, dialect_name: str):
        self.db = db
        self.model = model
        self.dialect_name = dialect_name

    async def insert_skip_duplicates(
        self, rows: Sequence[Dict[str, Any]], batch_size: int = 1000
    ) -> None:
        """
        Inserta filas ignorando las que violan el UNIQUE de la llave natural.

        Raises:
            SyncConfigError: Si el dialecto de la base no soporta ON CONFLICT
        """
        try:
            dialect_insert = _DIALECT_INSERTS[self.dialect_name]
        except KeyError:
            raise SyncConfigError(
                f"Dialecto no soportado para insert sin duplicados: {self.dialect_name}"
            ) from None

        stmt = dialect_insert(self.model).on_conflict_do_nothing()
        for chunk in _chunks(rows, batch_size):
            await self.db.execute(stmt, list(chunk))

    async def find_by_natural_key(
        self, natural_key: Sequence[str], record: Dict[str, Any]
    ) -> Optional[Any]:
        """
        Obtiene la fila que coincide con la llave natural del registro.
        """
        conditions = [getattr(self.model, column) == record.get(column) for column in natural_key]
        result = await self.db.execute(select(self.model).where(and_(*conditions)))
        return result.scalars().first()

    async def update_by_id(self, row_id: int, values: Dict[str, Any]) -> None:
        """
        Actualiza una fila por id, refrescando updated_at.
        """
        values = {key: value for key, value in values.items() if key not in ("id", "created_at")}
        values["updated_at"] = utc_now()
        await self.db.execute(
            update(self.model).where(self.model.id == row_id).values(**values)
        )

    async def create(self, values: Dict[str, Any]):
        """
        Crea una fila nueva.
        """
        instance = self.model(**values)
        self.db.add(instance)
        await self.db.flush()
        return instance

    async def count(self) -> int:
        result = await self.db.execute(select(func.count()).select_from(self.model))
        return result.scalar_one()


class BulkLoader:
    """Persiste registros canonicos en el destino segun la estrategia de cada entidad."""

    def __init__(self, database: Database, batch_size: int = 1000):
        self.database = database
        self.batch_size = batch_size

    def _repository(self, session: AsyncSession, definition: EntityDefinition) -> EntityRepository:
        return EntityRepository(session, definition.model, self.database.dialect_name)

    @staticmethod
    def _prepare_rows(
        definition: EntityDefinition, records: List[Dict[str, Any]]
    ) -> List[Dict[str, Any]]:
        now = utc_now()
        rows = []
        for record in records:
            row = dict(record)
            # El hash se calcula antes de completar created_at con la hora de carga
            if definition.strategy is LoadStrategy.SKIP_DUPLICATES:
                row["natural_key_hash"] = natural_key_hash(definition.natural_key, row)
            if row.get("created_at") is None:
                row["created_at"] = now
            row["updated_at"] = now
            rows.append(row)
        return rows

    async def save(self, definition: EntityDefinition, records: List[Dict[str, Any]]) -> None:
        """
        Guarda los registros de una entidad.

        Raises:
            LoadError: Si la escritura falla (entidad + cantidad de registros)
        """
        if not records:
            logger.debug(f"No hay registros de {definition.label} para guardar")
            return

        rows = self._prepare_rows(definition, records)
        logger.debug(f"Guardando {len(rows)} registros de {definition.label}")
        try:
            if definition.strategy is LoadStrategy.UPDATE_IN_PLACE:
                await self._upsert_each(definition, rows)
            else:
                await self._insert_skip_duplicates(definition, rows)
        except Exception as e:
            logger.error(f"Error guardando {len(rows)} registros de {definition.label}: {e}")
            raise LoadError(definition.label, len(rows), e) from e

        logger.info(f"Guardados {len(rows)} registros de {definition.label}")

    async def _insert_skip_duplicates(
        self, definition: EntityDefinition, rows: List[Dict[str, Any]]
    ) -> None:
        async with self.database.session_factory() as session:
            async with session.begin():
                await self._repository(session, definition).insert_skip_duplicates(
                    rows, self.batch_size
                )

    async def _upsert_each(self, definition: EntityDefinition, rows: List[Dict[str, Any]]) -> None:
        # Secuencial: el primer fallo corta el resto de registros
        for row in rows:
            async with self.database.session_factory() as session:
                async with session.begin():
                    repository = self._repository(session, definition)
                    existing = await repository.find_by_natural_key(definition.natural_key, row)
                    if existing:
                        await repository.update_by_id(existing.id, row)
                    else:
                        await repository.create(row)

    async def count(self, definition: EntityDefinition) -> int:
        """Cantidad de filas en la tabla destino de la entidad."""
        async with self.database.session_factory() as session:
            return await self._repository(session, definition).count()
