"""
Servicio de sincronizacion warehouse -> destino.

Diseno (resumen):
- Lee la vista origen completa de la entidad (EntityExtractor)
- Mapea cada fila cruda a un registro canonico (mappers)
- Persiste con la estrategia de la entidad (BulkLoader)
- Retorna los registros mapeados

No captura sus propios errores: los fallos de extraccion y de carga se
propagan al caller (scheduler, endpoint o CLI).
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from loguru import logger

from warehouse_sync.application.sync.entities import ENTITIES, EntityDefinition
from warehouse_sync.core.config import Settings
from warehouse_sync.infrastructure.database.session import Database
from warehouse_sync.infrastructure.repositories.sync_repository import BulkLoader
from warehouse_sync.infrastructure.warehouse.client import build_warehouse_from_settings
from warehouse_sync.infrastructure.warehouse.extractor import EntityExtractor, Warehouse
from warehouse_sync.shared.exceptions.sync import UnknownEntityError

Record = Dict[str, Any]


class WarehouseSyncService:
    """
    Orquestador del pipeline: una operacion por entidad.
    """

    def __init__(
        self,
        *,
        extractor: EntityExtractor,
        loader: BulkLoader,
        entities: Dict[str, EntityDefinition] = ENTITIES,
    ) -> None:
        self._extractor = extractor
        self._loader = loader
        self._entities = entities

    @property
    def entity_names(self) -> List[str]:
        return list(self._entities)

    async def sync(self, entity_name: str) -> List[Record]:
        """
        Ejecuta extract -> map -> load para una entidad.

        Raises:
            UnknownEntityError: Si el nombre no esta registrado
            WarehouseQueryError: Si falla la extraccion
            LoadError: Si falla la escritura en destino
        """
        definition = self._entities.get(entity_name)
        if definition is None:
            raise UnknownEntityError(entity_name)
        return await self._run(definition)

    async def _run(self, definition: EntityDefinition) -> List[Record]:
        logger.info(f"Sincronizando {definition.label} desde `{definition.source_view}`")
        rows = await self._extractor.fetch(definition)
        records = [definition.mapper(row) for row in rows]
        await self._loader.save(definition, records)
        return records

    async def sync_units(self) -> List[Record]:
        return await self.sync("units")

    async def sync_payments(self) -> List[Record]:
        return await self.sync("payments")

    async def sync_leases(self) -> List[Record]:
        return await self.sync("leases")

    async def sync_leads(self) -> List[Record]:
        return await self.sync("leads")

    async def sync_contacts(self) -> List[Record]:
        return await self.sync("contacts")

    async def sync_managers(self) -> List[Record]:
        return await self.sync("managers")

    async def sync_pricing_groups(self) -> List[Record]:
        return await self.sync("pricing_groups")

    async def sync_spaces_historical(self) -> List[Record]:
        return await self.sync("spaces_historical")

    async def sync_unit_turnovers(self) -> List[Record]:
        return await self.sync("unit_turnovers")

    async def sync_book_entries(self) -> List[Record]:
        return await self.sync("book_entries")

    async def sync_customer_touches(self) -> List[Record]:
        return await self.sync("customer_touches")

    async def sync_ga_events(self) -> List[Record]:
        return await self.sync("ga_events")


def build_sync_service(
    settings: Settings,
    database: Database,
    warehouse: Optional[Warehouse] = None,
) -> WarehouseSyncService:
    """
    Constructor del pipeline a partir de Settings y del destino ya creado.

    Si no se pasa `warehouse` se construye desde Settings.

    Raises:
        SyncConfigError: Si faltan las credenciales de BigQuery
    """
    if warehouse is None:
        warehouse = build_warehouse_from_settings(settings)
    extractor = EntityExtractor(warehouse, settings.BIGQUERY_DATASET)
    loader = BulkLoader(database, batch_size=settings.BIGQUERY_SYNC_BATCH_SIZE)
    return WarehouseSyncService(extractor=extractor, loader=loader)
