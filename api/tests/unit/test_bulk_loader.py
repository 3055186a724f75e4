"""
Tests unitarios para BulkLoader y EntityRepository sobre SQLite en memoria.

Verifica la idempotencia de cada estrategia de carga:
- skip-duplicates: cargar el mismo lote dos veces no agrega filas
- update-in-place: la misma unidad dos veces deja una fila con el ultimo valor
"""
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from sqlalchemy import select

from warehouse_sync.application.sync import mappers
from warehouse_sync.application.sync.entities import ENTITIES
from warehouse_sync.infrastructure.database.models import BookEntryModel, CustomerTouchModel, UnitModel
from warehouse_sync.infrastructure.repositories.sync_repository import (
    BulkLoader,
    EntityRepository,
    natural_key_hash,
)
from warehouse_sync.shared.exceptions.sync import LoadError, SyncConfigError


def _book_entries():
    return [
        mappers.map_book_entry({
            "txn_id": "T1",
            "entry_num": str(n),
            "amount": "10.005",
            "entry_date_time": "2024-05-01T10:00:00Z",
        })
        for n in range(3)
    ]


class TestSkipDuplicates:

    @pytest.mark.asyncio
    async def test_same_batch_twice_keeps_row_count(self, database):
        loader = BulkLoader(database)
        definition = ENTITIES["book_entries"]

        await loader.save(definition, _book_entries())
        await loader.save(definition, _book_entries())

        assert await loader.count(definition) == 3

    @pytest.mark.asyncio
    async def test_batches_are_chunked(self, database):
        """Verifica que un batch_size menor al lote igual inserta todo."""
        loader = BulkLoader(database, batch_size=2)
        definition = ENTITIES["book_entries"]

        await loader.save(definition, _book_entries())

        assert await loader.count(definition) == 3

    @pytest.mark.asyncio
    async def test_audit_fields_are_set(self, database):
        loader = BulkLoader(database)
        await loader.save(ENTITIES["book_entries"], _book_entries()[:1])

        async with database.session_factory() as session:
            row = (await session.execute(select(BookEntryModel))).scalars().one()

        assert row.created_at is not None
        assert row.updated_at is not None
        assert row.amount == Decimal("10.01")

    @pytest.mark.asyncio
    async def test_does_not_mutate_input_records(self, database):
        records = [mappers.map_manager({"manager_id": "M1"})]
        await BulkLoader(database).save(ENTITIES["managers"], records)

        assert "updated_at" not in records[0]

    @pytest.mark.asyncio
    async def test_attempted_count_is_logged_before_write(self, database, log_messages):
        await BulkLoader(database).save(ENTITIES["book_entries"], _book_entries())

        assert "Guardando 3 registros de book entries" in log_messages


class TestNullNaturalKeyParts:
    """Cargar dos veces registros con partes NULL en la llave natural deja una fila."""

    async def _load_twice(self, database, name, row):
        loader = BulkLoader(database)
        definition = ENTITIES[name]
        await loader.save(definition, [definition.mapper(row)])
        await loader.save(definition, [definition.mapper(row)])
        return await loader.count(definition)

    @pytest.mark.asyncio
    async def test_touch_without_contact_or_session(self, database):
        row = {"source": "Web", "action": "Click", "created_at": "2024-05-01T10:00:00Z"}
        assert await self._load_twice(database, "customer_touches", row) == 1

    @pytest.mark.asyncio
    async def test_touch_without_created_at(self, database):
        row = {"ga_session": "GA.1", "action": "Click", "contact_id": "C1"}
        assert await self._load_twice(database, "customer_touches", row) == 1

    @pytest.mark.asyncio
    async def test_payment_without_contact(self, database):
        row = {
            "facility_id": "F1",
            "payment_datetime": "2024-05-01T10:00:00Z",
            "payment_amount": "5",
        }
        assert await self._load_twice(database, "payments", row) == 1

    @pytest.mark.asyncio
    async def test_book_entry_without_entry_num(self, database):
        row = {"txn_id": "T1", "amount": "1", "entry_date_time": "2024-05-01T10:00:00Z"}
        assert await self._load_twice(database, "book_entries", row) == 1

    @pytest.mark.asyncio
    async def test_ga_event_without_timestamp(self, database):
        row = {"ga_session_id": "S1", "event_name": "page_view", "event_date": "2024-05-01"}
        assert await self._load_twice(database, "ga_events", row) == 1

    @pytest.mark.asyncio
    async def test_turnover_without_lease(self, database):
        row = {"unit_id": "U1", "move_type": "move_in", "move_date": "2024-05-01"}
        assert await self._load_twice(database, "unit_turnovers", row) == 1

    @pytest.mark.asyncio
    async def test_lease_without_lease_id(self, database):
        assert await self._load_twice(database, "leases", {"unit_id": "U1"}) == 1

    @pytest.mark.asyncio
    async def test_different_key_values_are_kept(self, database):
        loader = BulkLoader(database)
        definition = ENTITIES["payments"]
        records = [
            mappers.map_payment({"facility_id": "F1", "payment_amount": "5"}),
            mappers.map_payment({"facility_id": "F1", "payment_amount": "6"}),
        ]

        await loader.save(definition, records)

        assert await loader.count(definition) == 2


class TestNaturalKeyHash:

    def test_null_parts_hash_equal(self):
        key = ("txn_id", "entry_num")
        assert natural_key_hash(key, {"txn_id": "T1"}) == natural_key_hash(key, {"txn_id": "T1", "entry_num": None})

    def test_null_differs_from_literal_text(self):
        key = ("entry_num",)
        assert natural_key_hash(key, {"entry_num": None}) != natural_key_hash(key, {"entry_num": "None"})

    def test_datetimes_compare_in_utc(self):
        key = ("created_at",)
        naive = {"created_at": datetime(2024, 5, 1, 10, 0)}
        aware = {"created_at": datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)}
        assert natural_key_hash(key, naive) == natural_key_hash(key, aware)

    @pytest.mark.asyncio
    async def test_load_time_created_at_does_not_enter_hash(self, database):
        records = [mappers.map_customer_touch({"ga_session": "GA.1", "action": "Click"})]
        await BulkLoader(database).save(ENTITIES["customer_touches"], records)

        expected = natural_key_hash(ENTITIES["customer_touches"].natural_key, records[0])
        async with database.session_factory() as session:
            row = (await session.execute(select(CustomerTouchModel))).scalars().one()
        assert row.natural_key_hash == expected
        assert row.created_at is not None


class TestUpdateInPlace:

    @pytest.mark.asyncio
    async def test_same_unit_twice_keeps_latest_values(self, database):
        loader = BulkLoader(database)
        definition = ENTITIES["units"]

        await loader.save(definition, [mappers.map_unit({"unit_id": "U1", "rate_managed": "10", "is_leased": "0"})])
        await loader.save(definition, [mappers.map_unit({"unit_id": "U1", "rate_managed": "20", "is_leased": "1"})])

        async with database.session_factory() as session:
            rows = (await session.execute(select(UnitModel))).scalars().all()

        assert len(rows) == 1
        assert rows[0].rate_managed == Decimal("20.00")
        assert rows[0].is_leased == 1

    @pytest.mark.asyncio
    async def test_first_failure_aborts_remaining_records(self, database):
        """Una unidad sin unit_id viola NOT NULL: el resto no se procesa."""
        loader = BulkLoader(database)
        records = [
            mappers.map_unit({"facility_id": "F1"}),
            mappers.map_unit({"unit_id": "U2"}),
        ]

        with pytest.raises(LoadError) as exc_info:
            await loader.save(ENTITIES["units"], records)

        assert exc_info.value.entity_label == "units"
        assert exc_info.value.count == 2
        assert "Database save failed (units, 2 registros)" in exc_info.value.message
        assert await loader.count(ENTITIES["units"]) == 0


class TestEmptyInput:

    @pytest.mark.asyncio
    async def test_zero_records_does_not_touch_destination(self, log_messages):
        database = MagicMock()
        loader = BulkLoader(database)

        await loader.save(ENTITIES["payments"], [])

        database.session_factory.assert_not_called()
        assert any("No hay registros de payments para guardar" in m for m in log_messages)


class TestEntityRepository:

    @pytest.mark.asyncio
    async def test_find_update_and_create(self, database):
        now = datetime(2024, 1, 1, tzinfo=timezone.utc)
        async with database.session_factory() as session:
            async with session.begin():
                repo = EntityRepository(session, UnitModel, database.dialect_name)
                created = await repo.create({"unit_id": "U9", "unit_name": "A-1", "created_at": now, "updated_at": now})
                await repo.update_by_id(created.id, {"unit_id": "U9", "unit_name": "A-2"})

            found = await repo.find_by_natural_key(("unit_id",), {"unit_id": "U9"})
            assert found is not None
            assert await repo.count() == 1

        async with database.session_factory() as session:
            row = (await session.execute(select(UnitModel))).scalars().one()
        assert row.unit_name == "A-2"

    @pytest.mark.asyncio
    async def test_unsupported_dialect(self):
        repo = EntityRepository(MagicMock(), UnitModel, "mysql")
        with pytest.raises(SyncConfigError) as exc_info:
            await repo.insert_skip_duplicates([{"unit_id": "U1"}])
        assert "mysql" in exc_info.value.message
