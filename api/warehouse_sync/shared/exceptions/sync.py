"""
Excepciones del motor de sincronizacion warehouse -> destino.

Taxonomia:
- SyncConfigError: falta configuracion obligatoria (credenciales BigQuery).
- WarehouseQueryError: fallo de extraccion (red/consulta), envuelto con el
  nombre de la operacion.
- LoadError: fallo de escritura en destino, envuelto con entidad y cantidad.
- UnknownEntityError: nombre de entidad no registrado.
"""
from typing import Optional

from warehouse_sync.shared.exceptions.base import AppException


class SyncConfigError(AppException):
    """Error de configuracion del pipeline."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            status_code=503,
            error_code="SYNC_CONFIG_ERROR",
        )


class WarehouseQueryError(AppException):
    """Fallo ejecutando una consulta contra el warehouse."""

    def __init__(self, operation_name: str, cause: Exception, query: Optional[str] = None):
        self.operation_name = operation_name
        self.query = query
        super().__init__(
            message=f"Query execution failed ({operation_name}): {cause}",
            error_code="WAREHOUSE_QUERY_FAILED",
            details={"operation": operation_name},
        )


class LoadError(AppException):
    """Fallo guardando registros canonicos en el destino."""

    def __init__(self, entity_label: str, count: int, cause: Exception):
        self.entity_label = entity_label
        self.count = count
        super().__init__(
            message=f"Database save failed ({entity_label}, {count} registros): {cause}",
            error_code="DATABASE_SAVE_FAILED",
            details={"entity": entity_label, "count": count},
        )


class UnknownEntityError(AppException):
    """Excepcion cuando se solicita una entidad que no esta registrada."""

    def __init__(self, entity_name: str):
        self.entity_name = entity_name
        super().__init__(
            message=f"Entidad '{entity_name}' no registrada para sincronizacion",
            status_code=404,
            error_code="ENTITY_NOT_FOUND",
            details={"entity": entity_name},
        )
