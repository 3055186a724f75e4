"""
Extraccion de filas crudas por entidad desde el warehouse.
"""

from __future__ import annotations

import time
from typing import Any, Mapping, Optional, Protocol

from loguru import logger

from warehouse_sync.application.sync.entities import EntityDefinition
from warehouse_sync.shared.exceptions.sync import WarehouseQueryError


class Warehouse(Protocol):
    async def query(
        self, sql: str, params: Optional[Mapping[str, Any]] = None
    ) -> list[dict[str, Any]]:
        ...


def build_select(
    dataset: str,
    view: str,
    *,
    conditions: Optional[Mapping[str, Any]] = None,
    order_by: Optional[str] = None,
) -> str:
    """
    Construye el SELECT * sobre la vista `dataset.view`.

    Cada condicion nombrada se agrega como `columna = @columna`; el valor
    viaja como parametro, nunca interpolado.
    """
    sql = f"SELECT * FROM `{dataset}.{view}`"
    if conditions:
        sql += " WHERE " + " AND ".join(f"{column} = @{column}" for column in conditions)
    if order_by:
        sql += f" ORDER BY {order_by}"
    return sql


class EntityExtractor:
    """Lee las vistas origen del warehouse para cada entidad."""

    def __init__(self, warehouse: Warehouse, dataset: str):
        self.warehouse = warehouse
        self.dataset = dataset

    async def execute_query(
        self,
        operation_name: str,
        query: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> list[dict[str, Any]]:
        """
        Ejecuta una consulta con logs de duracion.

        Raises:
            WarehouseQueryError: Si la consulta falla (envuelve el error original)
        """
        start = time.perf_counter()
        logger.debug(f"[{operation_name}] Ejecutando consulta")

        try:
            rows = await self.warehouse.query(query, params)
        except Exception as e:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.error(
                f"[{operation_name}] Consulta fallida tras {duration_ms:.0f}ms: {e} | query={query}"
            )
            raise WarehouseQueryError(operation_name, e, query=query) from e

        duration_ms = (time.perf_counter() - start) * 1000
        logger.debug(f"[{operation_name}] {len(rows)} filas en {duration_ms:.0f}ms")
        return rows

    async def fetch(
        self,
        definition: EntityDefinition,
        conditions: Optional[Mapping[str, Any]] = None,
    ) -> list[dict[str, Any]]:
        """Trae todas las filas de la vista origen de una entidad."""
        query = build_select(
            self.dataset,
            definition.source_view,
            conditions=conditions,
            order_by=definition.order_by,
        )
        return await self.execute_query(f"fetch_{definition.name}", query, conditions)
