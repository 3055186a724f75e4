"""
Tests unitarios para EntityExtractor y el cliente del warehouse.
"""
import asyncio
import time
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from warehouse_sync.application.sync.entities import ENTITIES
from warehouse_sync.core.config import Settings
from warehouse_sync.infrastructure.warehouse.client import (
    BigQueryCredentials,
    BigQueryWarehouse,
    build_query_parameters,
    build_warehouse_from_settings,
)
from warehouse_sync.infrastructure.warehouse.extractor import EntityExtractor, build_select
from warehouse_sync.shared.exceptions.sync import SyncConfigError, WarehouseQueryError


class TestBuildSelect:

    def test_plain_view(self):
        assert build_select("authorized_views", "units") == "SELECT * FROM `authorized_views.units`"

    def test_conditions_and_order(self):
        sql = build_select(
            "ds", "book_entries",
            conditions={"org_id": "O1", "facility": "F1"},
            order_by="entry_date_time DESC",
        )
        assert sql == (
            "SELECT * FROM `ds.book_entries` WHERE org_id = @org_id AND facility = @facility "
            "ORDER BY entry_date_time DESC"
        )


class TestEntityExtractor:

    @pytest.mark.asyncio
    async def test_fetch_uses_source_view_and_order(self):
        warehouse = MagicMock()
        warehouse.query = AsyncMock(return_value=[{"txn_id": "T1"}])
        extractor = EntityExtractor(warehouse, "authorized_views")

        rows = await extractor.fetch(ENTITIES["book_entries"])

        assert rows == [{"txn_id": "T1"}]
        warehouse.query.assert_awaited_once_with(
            "SELECT * FROM `authorized_views.book_entries` ORDER BY entry_date_time DESC",
            None,
        )

    @pytest.mark.asyncio
    async def test_contacts_read_from_contact_view(self):
        warehouse = MagicMock()
        warehouse.query = AsyncMock(return_value=[])
        extractor = EntityExtractor(warehouse, "authorized_views")

        await extractor.fetch(ENTITIES["contacts"])

        sql = warehouse.query.await_args.args[0]
        assert sql == "SELECT * FROM `authorized_views.contact`"

    @pytest.mark.asyncio
    async def test_failure_is_wrapped_with_operation_name(self, log_messages):
        warehouse = MagicMock()
        warehouse.query = AsyncMock(side_effect=RuntimeError("network down"))
        extractor = EntityExtractor(warehouse, "authorized_views")

        with pytest.raises(WarehouseQueryError) as exc_info:
            await extractor.fetch(ENTITIES["leases"])

        error = exc_info.value
        assert error.operation_name == "fetch_leases"
        assert error.message == "Query execution failed (fetch_leases): network down"
        assert isinstance(error.__cause__, RuntimeError)
        assert any("authorized_views.leases" in m for m in log_messages)

    @pytest.mark.asyncio
    async def test_logs_duration(self, log_messages):
        warehouse = MagicMock()
        warehouse.query = AsyncMock(return_value=[{}, {}])
        extractor = EntityExtractor(warehouse, "ds")

        await extractor.execute_query("fetch_units", "SELECT 1")

        assert any(m.startswith("[fetch_units] 2 filas en") for m in log_messages)


class TestBigQueryClient:

    def test_query_parameters_by_type(self):
        params = build_query_parameters({
            "flag": True,
            "count": 3,
            "ratio": 0.5,
            "amount": Decimal("1.20"),
            "day": date(2024, 1, 1),
            "org_id": "O1",
        })
        types = {p.name: p.type_ for p in params}

        assert types == {
            "flag": "BOOL",
            "count": "INT64",
            "ratio": "FLOAT64",
            "amount": "NUMERIC",
            "day": "DATE",
            "org_id": "STRING",
        }

    def test_no_params(self):
        assert build_query_parameters(None) == []

    def test_missing_credentials_raise_config_error(self):
        settings = Settings(_env_file=None, BIGQUERY_PROJECT="proj", BIGQUERY_APPLICATION_CREDENTIALS=None)

        with pytest.raises(SyncConfigError) as exc_info:
            build_warehouse_from_settings(settings)

        assert "BIGQUERY_APPLICATION_CREDENTIALS" in exc_info.value.message
        assert exc_info.value.status_code == 503

    def test_builds_lazily_without_connecting(self):
        settings = Settings(
            _env_file=None,
            BIGQUERY_PROJECT="proj",
            BIGQUERY_APPLICATION_CREDENTIALS="/secrets/key.json",
        )

        warehouse = build_warehouse_from_settings(settings)

        assert isinstance(warehouse, BigQueryWarehouse)
        assert warehouse.project == "proj"

    @pytest.mark.asyncio
    async def test_query_returns_rows_as_dicts(self):
        row = MagicMock()
        row.items.return_value = [("unit_id", "U1")]
        client = MagicMock()
        client.query.return_value.result.return_value = [row]
        warehouse = BigQueryWarehouse(MagicMock(), client=client)

        rows = await warehouse.query("SELECT 1", {"org_id": "O1"})

        assert rows == [{"unit_id": "U1"}]
        job_config = client.query.call_args.kwargs["job_config"]
        assert [p.name for p in job_config.query_parameters] == ["org_id"]

    @pytest.mark.asyncio
    async def test_client_is_created_once_for_parallel_queries(self):
        def slow_client(*args, **kwargs):
            time.sleep(0.05)
            client = MagicMock()
            client.query.return_value.result.return_value = []
            return client

        warehouse = BigQueryWarehouse(BigQueryCredentials("proj", "/secrets/key.json"))
        with patch(
            "warehouse_sync.infrastructure.warehouse.client.bigquery.Client.from_service_account_json",
            side_effect=slow_client,
        ) as factory:
            await asyncio.gather(*(warehouse.query("SELECT 1") for _ in range(4)))

        factory.assert_called_once_with("/secrets/key.json", project="proj")

    def test_close_releases_client(self):
        client = MagicMock()
        warehouse = BigQueryWarehouse(MagicMock(), client=client)

        warehouse.close()
        warehouse.close()

        client.close.assert_called_once()
