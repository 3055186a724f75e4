"""
Registro de entidades sincronizadas (warehouse -> destino).

Aqui se declara, para cada una de las 12 entidades:
- vista origen en el warehouse (y orden opcional)
- funcion de mapeo fila cruda -> registro canonico
- modelo ORM destino y su llave natural
- estrategia de carga
- cron por defecto

Este modulo no realiza I/O: solo define configuracion.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional

from warehouse_sync.application.sync import mappers
from warehouse_sync.infrastructure.database import models
from warehouse_sync.shared.exceptions.sync import UnknownEntityError

Mapper = Callable[[Mapping[str, Any]], Dict[str, Any]]


class LoadStrategy(str, Enum):
    """Como se escriben los registros en el destino."""

    SKIP_DUPLICATES = "skip_duplicates"
    UPDATE_IN_PLACE = "update_in_place"


@dataclass(frozen=True)
class EntityDefinition:
    """
    Config de una entidad: una vista del warehouse -> una tabla destino.

    - name: identificador estable (clave en SYNC_SCHEDULES, endpoints, CLI)
    - label: nombre legible para logs y errores
    - natural_key: columnas que identifican el registro de negocio. En las
      entidades append-only el loader las reduce a `natural_key_hash` (UNIQUE);
      los valores se toman del origen, antes de completar campos de auditoria
    """

    name: str
    label: str
    source_view: str
    mapper: Mapper
    model: Any
    natural_key: tuple[str, ...]
    default_cron: str
    strategy: LoadStrategy = LoadStrategy.SKIP_DUPLICATES
    order_by: Optional[str] = None

    @property
    def job_id(self) -> str:
        return f"sync_{self.name}"


ENTITIES: Dict[str, EntityDefinition] = {
    definition.name: definition
    for definition in (
        EntityDefinition(
            name="units",
            label="units",
            source_view="units",
            mapper=mappers.map_unit,
            model=models.UnitModel,
            natural_key=("unit_id",),
            default_cron="0 * * * *",
            strategy=LoadStrategy.UPDATE_IN_PLACE,
        ),
        EntityDefinition(
            name="payments",
            label="payments",
            source_view="payments",
            mapper=mappers.map_payment,
            model=models.PaymentModel,
            natural_key=("facility_id", "contact_id", "payment_datetime", "payment_amount"),
            default_cron="15 * * * *",
        ),
        EntityDefinition(
            name="leases",
            label="leases",
            source_view="leases",
            mapper=mappers.map_lease,
            model=models.LeaseModel,
            natural_key=("lease_id",),
            default_cron="30 */2 * * *",
        ),
        EntityDefinition(
            name="leads",
            label="leads",
            source_view="leads",
            mapper=mappers.map_lead,
            model=models.LeadModel,
            natural_key=("lead_id",),
            default_cron="45 * * * *",
        ),
        EntityDefinition(
            name="contacts",
            label="contacts",
            source_view="contact",
            mapper=mappers.map_contact,
            model=models.ContactModel,
            natural_key=("contact_id",),
            default_cron="0 */6 * * *",
        ),
        EntityDefinition(
            name="managers",
            label="managers",
            source_view="managers",
            mapper=mappers.map_manager,
            model=models.ManagerModel,
            natural_key=("manager_id",),
            default_cron="0 3 * * *",
        ),
        EntityDefinition(
            name="pricing_groups",
            label="pricing groups",
            source_view="pricing_group",
            mapper=mappers.map_pricing_group,
            model=models.PricingGroupModel,
            natural_key=("pg_id",),
            default_cron="0 4 * * *",
        ),
        EntityDefinition(
            name="spaces_historical",
            label="spaces historical",
            source_view="spaces_historical",
            mapper=mappers.map_spaces_historical,
            model=models.SpacesHistoricalModel,
            natural_key=("date", "unit_id"),
            default_cron="30 2 * * *",
        ),
        EntityDefinition(
            name="unit_turnovers",
            label="unit turnovers",
            source_view="unit_turnover",
            mapper=mappers.map_unit_turnover,
            model=models.UnitTurnoverModel,
            natural_key=("unit_id", "lease_id", "move_type", "move_date"),
            default_cron="0 5 * * *",
        ),
        EntityDefinition(
            name="book_entries",
            label="book entries",
            source_view="book_entries",
            mapper=mappers.map_book_entry,
            model=models.BookEntryModel,
            natural_key=("txn_id", "entry_num"),
            default_cron="0 */3 * * *",
            order_by="entry_date_time DESC",
        ),
        EntityDefinition(
            name="customer_touches",
            label="customer touches",
            source_view="customer_touches",
            mapper=mappers.map_customer_touch,
            model=models.CustomerTouchModel,
            natural_key=("ga_session", "action", "created_at", "contact_id"),
            default_cron="20 * * * *",
            order_by="created_at DESC",
        ),
        EntityDefinition(
            name="ga_events",
            label="GA events",
            source_view="ga_events",
            mapper=mappers.map_ga_event,
            model=models.GaEventModel,
            natural_key=("ga_session_id", "event_name", "event_timestamp"),
            default_cron="40 */2 * * *",
        ),
    )
}


def get_entity(name: str) -> EntityDefinition:
    """Busca una entidad por nombre; UnknownEntityError si no existe."""
    try:
        return ENTITIES[name]
    except KeyError:
        raise UnknownEntityError(name) from None


def resolve_cron(definition: EntityDefinition, overrides: Mapping[str, str]) -> str:
    """Cron efectivo: override de SYNC_SCHEDULES si existe, si no el por defecto."""
    return overrides.get(definition.name) or definition.default_cron
