"""
Cliente minimo del warehouse (BigQuery).

Requisitos cubiertos:
- google-cloud-bigquery con service account (archivo JSON) + project id
- parametros nombrados (@param) convertidos a ScalarQueryParameter
- la llamada bloqueante del SDK corre en un thread para no bloquear el loop
"""

from __future__ import annotations

import asyncio
import threading
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Mapping, Optional

from google.cloud import bigquery

from warehouse_sync.core.config import Settings
from warehouse_sync.shared.exceptions.sync import SyncConfigError


@dataclass(frozen=True)
class BigQueryCredentials:
    project: str
    credentials_path: str


def _parameter_type(value: Any) -> str:
    # bool antes que int: bool es subclase de int
    if isinstance(value, bool):
        return "BOOL"
    if isinstance(value, int):
        return "INT64"
    if isinstance(value, float):
        return "FLOAT64"
    if isinstance(value, Decimal):
        return "NUMERIC"
    if isinstance(value, datetime):
        return "TIMESTAMP"
    if isinstance(value, date):
        return "DATE"
    return "STRING"


def build_query_parameters(params: Optional[Mapping[str, Any]]) -> list[bigquery.ScalarQueryParameter]:
    """Convierte un dict de parametros nombrados a parametros de BigQuery."""
    if not params:
        return []
    return [
        bigquery.ScalarQueryParameter(name, _parameter_type(value), value)
        for name, value in params.items()
    ]


class BigQueryWarehouse:
    """
    Cliente del warehouse. Expone `query` que devuelve filas como dicts.

    Importante:
    - No hace cast de tipos: eso se decide en el normalizador/mapper.
    - El cliente del SDK se crea la primera vez que se usa (una sola vez,
      aunque varias entidades consulten en paralelo desde sus threads).
    """

    def __init__(
        self,
        credentials: BigQueryCredentials,
        *,
        client: Optional[bigquery.Client] = None,
    ) -> None:
        self._creds = credentials
        self._client = client
        self._client_lock = threading.Lock()

    @property
    def project(self) -> str:
        return self._creds.project

    def _get_client(self) -> bigquery.Client:
        if self._client is None:
            with self._client_lock:
                if self._client is None:
                    self._client = bigquery.Client.from_service_account_json(
                        self._creds.credentials_path,
                        project=self._creds.project,
                    )
        return self._client

    def _run_query(self, sql: str, params: Optional[Mapping[str, Any]]) -> list[dict[str, Any]]:
        job_config = bigquery.QueryJobConfig(query_parameters=build_query_parameters(params))
        job = self._get_client().query(sql, job_config=job_config)
        return [dict(row.items()) for row in job.result()]

    async def query(
        self, sql: str, params: Optional[Mapping[str, Any]] = None
    ) -> list[dict[str, Any]]:
        """Ejecuta una consulta y retorna todas las filas."""
        return await asyncio.to_thread(self._run_query, sql, params)

    def close(self) -> None:
        with self._client_lock:
            if self._client is not None:
                self._client.close()
                self._client = None


def build_warehouse_from_settings(settings: Settings) -> BigQueryWarehouse:
    """
    Construye el cliente del warehouse desde Settings.

    Raises:
        SyncConfigError: Si falta BIGQUERY_PROJECT o BIGQUERY_APPLICATION_CREDENTIALS
    """
    missing = [
        name
        for name, value in (
            ("BIGQUERY_PROJECT", settings.BIGQUERY_PROJECT),
            ("BIGQUERY_APPLICATION_CREDENTIALS", settings.BIGQUERY_APPLICATION_CREDENTIALS),
        )
        if not value
    ]
    if missing:
        raise SyncConfigError(
            f"Faltan variables de configuracion de BigQuery: {', '.join(missing)}"
        )

    return BigQueryWarehouse(
        BigQueryCredentials(
            project=settings.BIGQUERY_PROJECT,
            credentials_path=settings.BIGQUERY_APPLICATION_CREDENTIALS,
        )
    )
