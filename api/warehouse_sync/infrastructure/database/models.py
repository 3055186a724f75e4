"""
Modelos de base de datos destino (ORM).

Una tabla por entidad sincronizada. Cada tabla tiene:
- `id` surrogate (generado por el destino)
- las columnas de negocio, con los mismos nombres (snake_case) que el warehouse
- en las tablas append-only, `natural_key_hash` UNIQUE: hash de la llave
  natural calculado por el loader, con NULL como valor propio. Un UNIQUE
  compuesto trata los NULL como distintos y no dispararia el
  INSERT ... ON CONFLICT DO NOTHING
- `created_at` / `updated_at` asignados al cargar
"""
from sqlalchemy import Column, DateTime, Index, Integer, Numeric, String, Text
from sqlalchemy.sql import func

from warehouse_sync.infrastructure.database.session import Base


def _money() -> Numeric:
    return Numeric(14, 2)


class UnitModel(Base):
    """Estado actual de una unidad (se actualiza in-place por unit_id)."""

    __tablename__ = "units"

    id = Column(Integer, primary_key=True, index=True)
    facility_id = Column(String(255), nullable=True, index=True)
    facility_name = Column(String(255), nullable=True)
    unit_id = Column(String(255), nullable=False, unique=True, index=True)
    unit_name = Column(String(255), nullable=True)
    unit_type = Column(String(255), nullable=True)
    unit_features = Column(Text, nullable=True)
    pg_id = Column(String(255), nullable=True)
    pricing_group = Column(String(255), nullable=True)
    rate_managed = Column(_money(), nullable=True)
    unit_floor_num = Column(Integer, nullable=True)
    unit_building_name = Column(String(255), nullable=True)
    unit_width = Column(_money(), nullable=True)
    unit_depth = Column(_money(), nullable=True)
    unit_height = Column(_money(), nullable=True)
    is_leased = Column(Integer, nullable=True)
    is_insurable = Column(Integer, nullable=True)
    is_rentable = Column(Integer, nullable=True)
    is_overlocked = Column(Integer, nullable=True)
    unit_unrentable_reason = Column(String(255), nullable=True)
    unit_unrentable_note = Column(Text, nullable=True)
    unit_keypad_zone = Column(Integer, nullable=True)
    unit_time_zone = Column(Integer, nullable=True)
    web_rate_override = Column(Integer, nullable=True)
    strikethrough_price_override = Column(Integer, nullable=True)
    walk_in_rate_override = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<Unit(id={self.id}, unit_id={self.unit_id}, facility_id={self.facility_id})>"


class PaymentModel(Base):
    """Pago registrado (append-only)."""

    __tablename__ = "payments"
    __table_args__ = (
        Index("ix_payments_natural_key", "facility_id", "contact_id", "payment_datetime", "payment_amount"),
    )

    id = Column(Integer, primary_key=True, index=True)
    natural_key_hash = Column(String(64), nullable=False, unique=True)
    facility_id = Column(String(255), nullable=True, index=True)
    facility_name = Column(String(255), nullable=True)
    org_id = Column(String(255), nullable=True)
    contact_id = Column(String(255), nullable=True, index=True)
    contact_name = Column(String(255), nullable=True)
    payment_date = Column(DateTime(timezone=True), nullable=True)
    payment_datetime = Column(DateTime(timezone=True), nullable=True)
    payment_amount = Column(_money(), nullable=True)
    payment_type = Column(String(100), nullable=True)
    payment_status = Column(String(100), nullable=True)
    payment_method = Column(String(100), nullable=True)
    payment_card_brand = Column(String(100), nullable=True)
    payment_card_last_four = Column(String(10), nullable=True)
    payment_check_number = Column(String(100), nullable=True)
    payment_channel = Column(String(100), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<Payment(id={self.id}, contact_id={self.contact_id}, amount={self.payment_amount})>"


class LeaseModel(Base):
    """Contrato de arriendo de una unidad."""

    __tablename__ = "leases"

    id = Column(Integer, primary_key=True, index=True)
    natural_key_hash = Column(String(64), nullable=False, unique=True)
    facility_id = Column(String(255), nullable=True, index=True)
    facility_name = Column(String(255), nullable=True)
    org_id = Column(String(255), nullable=True)
    lease_id = Column(String(255), nullable=True, unique=True, index=True)
    unit_name = Column(String(255), nullable=True)
    unit_id = Column(String(255), nullable=True, index=True)
    is_active = Column(String(20), nullable=True)
    lease_created_by = Column(String(255), nullable=True)
    lease_started = Column(DateTime(timezone=True), nullable=True)
    lease_ended = Column(DateTime(timezone=True), nullable=True)
    lease_rent_original = Column(_money(), nullable=True)
    lease_rent_current = Column(_money(), nullable=True)
    lease_rent_next = Column(_money(), nullable=True)
    lease_rent_next_chg_date = Column(DateTime(timezone=True), nullable=True)
    lease_rent_last_chg_date = Column(DateTime(timezone=True), nullable=True)
    lease_all_discounts = Column(Text, nullable=True)
    is_lease_paid = Column(String(20), nullable=True)
    status_late_since_date = Column(DateTime(timezone=True), nullable=True)
    status_paid_through_date = Column(DateTime(timezone=True), nullable=True)
    status_paid_on_date = Column(DateTime(timezone=True), nullable=True)
    is_needs_overlock = Column(String(20), nullable=True)
    is_in_auction = Column(String(20), nullable=True)
    is_autopay_enabled = Column(String(20), nullable=True)
    ins_premium = Column(_money(), nullable=True)
    ins_coverage_level = Column(_money(), nullable=True)
    access_code = Column(String(100), nullable=True)
    is_access_code_enabled = Column(String(20), nullable=True)
    contact_id = Column(String(255), nullable=True, index=True)
    contact_pinned_note = Column(Text, nullable=True)
    is_military = Column(String(20), nullable=True)
    contact_name = Column(String(255), nullable=True)
    contact_company_name = Column(String(255), nullable=True)
    contact_email = Column(String(255), nullable=True)
    contact_phone = Column(String(100), nullable=True)
    contact_address_1 = Column(String(255), nullable=True)
    contact_address_2 = Column(String(255), nullable=True)
    contact_city = Column(String(255), nullable=True)
    contact_state = Column(String(100), nullable=True)
    contact_zip = Column(String(20), nullable=True)
    lease_lifetime_payments = Column(_money(), nullable=True)
    balance_ar = Column(_money(), nullable=True)
    balance_deposit = Column(_money(), nullable=True)
    balance_prepaid = Column(_money(), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<Lease(id={self.id}, lease_id={self.lease_id}, unit_id={self.unit_id})>"


class LeadModel(Base):
    """Lead comercial."""

    __tablename__ = "leads"

    id = Column(Integer, primary_key=True, index=True)
    natural_key_hash = Column(String(64), nullable=False, unique=True)
    lead_id = Column(String(255), nullable=True, unique=True, index=True)
    age_of_lead_minutes = Column(Integer, nullable=True)
    status = Column(String(100), nullable=True)
    contact_id = Column(String(255), nullable=True, index=True)
    contact_name = Column(String(255), nullable=True)
    facility_id = Column(String(255), nullable=True)
    facility_name = Column(String(255), nullable=True)
    pg_id = Column(String(255), nullable=True)
    pg_name = Column(String(255), nullable=True)
    pg_features = Column(Text, nullable=True)
    created_by = Column(String(255), nullable=True)
    org_id = Column(String(255), nullable=True)
    converted_by = Column(String(255), nullable=True)
    converted_datetime = Column(DateTime(timezone=True), nullable=True)
    time_to_convert = Column(Integer, nullable=True)
    time_to_unqualified = Column(Integer, nullable=True)
    converted_lease_id = Column(String(255), nullable=True)
    lead_source = Column(String(255), nullable=True)
    first_touch_source = Column(String(255), nullable=True)
    ga_source = Column(String(255), nullable=True)
    source = Column(String(255), nullable=True)
    first_touch_action = Column(String(255), nullable=True)
    ga_session = Column(String(255), nullable=True)
    ga_session_id = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<Lead(id={self.id}, lead_id={self.lead_id}, status={self.status})>"


class ContactModel(Base):
    """Contacto (cliente)."""

    __tablename__ = "contacts"

    id = Column(Integer, primary_key=True, index=True)
    natural_key_hash = Column(String(64), nullable=False, unique=True)
    contact_id = Column(String(255), nullable=True, unique=True, index=True)
    org_id = Column(String(255), nullable=True)
    name = Column(String(255), nullable=True)
    address = Column(String(255), nullable=True)
    address2 = Column(String(255), nullable=True)
    company_name = Column(String(255), nullable=True)
    city = Column(String(255), nullable=True)
    state = Column(String(100), nullable=True)
    country = Column(String(100), nullable=True)
    zip = Column(String(20), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(100), nullable=True)
    date_of_birth = Column(DateTime(timezone=True), nullable=True)
    lead_id = Column(String(255), nullable=True)
    lead_source = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<Contact(id={self.id}, contact_id={self.contact_id}, name={self.name})>"


class ManagerModel(Base):
    """Usuario administrador de instalaciones en el sistema origen."""

    __tablename__ = "managers"

    id = Column(Integer, primary_key=True, index=True)
    natural_key_hash = Column(String(64), nullable=False, unique=True)
    manager_id = Column(String(255), nullable=True, unique=True, index=True)
    manager_name = Column(String(255), nullable=True)
    manager_username = Column(String(255), nullable=True)
    manager_email = Column(String(255), nullable=True)
    manager_phone = Column(String(100), nullable=True)
    manager_permissions = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<Manager(id={self.id}, manager_id={self.manager_id})>"


class PricingGroupModel(Base):
    """Grupo de precios (tipo de unidad con tarifa)."""

    __tablename__ = "pricing_groups"

    id = Column(Integer, primary_key=True, index=True)
    natural_key_hash = Column(String(64), nullable=False, unique=True)
    pg_id = Column(String(255), nullable=True, unique=True, index=True)
    name = Column(String(255), nullable=True)
    price = Column(_money(), nullable=True)
    facility_id = Column(String(255), nullable=True)
    width = Column(_money(), nullable=True)
    height = Column(_money(), nullable=True)
    depth = Column(_money(), nullable=True)
    features = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<PricingGroup(id={self.id}, pg_id={self.pg_id}, name={self.name})>"


class SpacesHistoricalModel(Base):
    """Foto diaria de ocupacion de una unidad."""

    __tablename__ = "spaces_historical"
    __table_args__ = (
        Index("ix_spaces_historical_natural_key", "date", "unit_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    natural_key_hash = Column(String(64), nullable=False, unique=True)
    date = Column(DateTime(timezone=True), nullable=False, index=True)
    org_id = Column(String(255), nullable=True)
    unit_id = Column(String(255), nullable=True, index=True)
    unit_name = Column(String(255), nullable=True)
    unit_description = Column(Text, nullable=True)
    facility_name = Column(String(255), nullable=True)
    facility_id = Column(String(255), nullable=True)
    facility_address = Column(String(255), nullable=True)
    building_name = Column(String(255), nullable=True)
    is_occupied = Column(Integer, nullable=True)
    is_unrentable = Column(String(20), nullable=True)
    unrentable_reason = Column(String(255), nullable=True)
    unrentable_reason_note = Column(Text, nullable=True)
    width = Column(_money(), nullable=True)
    height = Column(_money(), nullable=True)
    depth = Column(_money(), nullable=True)
    is_overlocked = Column(String(20), nullable=True)
    pricing_group_name = Column(String(255), nullable=True)
    street_rate = Column(_money(), nullable=True)
    pg_id = Column(String(255), nullable=True)
    lease_id = Column(String(255), nullable=True)
    occ_rate = Column(_money(), nullable=True)
    occ_start_dt = Column(DateTime(timezone=True), nullable=True)
    occ_tenant_id = Column(String(255), nullable=True)
    occ_tenant_name = Column(String(255), nullable=True)
    is_autopay_enabled = Column(String(20), nullable=True)
    is_insurance_active = Column(String(20), nullable=True)
    contact_id = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<SpacesHistorical(id={self.id}, date={self.date}, unit_id={self.unit_id})>"


class UnitTurnoverModel(Base):
    """Movimiento de entrada/salida de una unidad."""

    __tablename__ = "unit_turnovers"
    __table_args__ = (
        Index("ix_unit_turnovers_natural_key", "unit_id", "lease_id", "move_type", "move_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    natural_key_hash = Column(String(64), nullable=False, unique=True)
    move_type = Column(String(50), nullable=True)
    move_date = Column(DateTime(timezone=True), nullable=False)
    facility_id = Column(String(255), nullable=True)
    facility_name = Column(String(255), nullable=True)
    unit_id = Column(String(255), nullable=True, index=True)
    unit_name = Column(String(255), nullable=True)
    unit_type = Column(String(255), nullable=True)
    unit_features = Column(Text, nullable=True)
    unit_floor_num = Column(Integer, nullable=True)
    unit_building_name = Column(String(255), nullable=True)
    unit_width = Column(_money(), nullable=True)
    unit_depth = Column(_money(), nullable=True)
    unit_height = Column(_money(), nullable=True)
    lease_id = Column(String(255), nullable=True)
    lease_created_by = Column(String(255), nullable=True)
    lease_rent = Column(_money(), nullable=True)
    lease_start_date = Column(DateTime(timezone=True), nullable=True)
    lease_end_date = Column(DateTime(timezone=True), nullable=True)
    lease_created_by_transfer = Column(String(20), nullable=True)
    lease_terminated_by_transfer = Column(String(20), nullable=True)
    lease_days_rented = Column(Integer, nullable=True)
    lease_discounts_applied = Column(Text, nullable=True)
    ins_premium = Column(_money(), nullable=True)
    ins_coverage_level = Column(_money(), nullable=True)
    contact_id = Column(String(255), nullable=True)
    contact_name = Column(String(255), nullable=True)
    contact_email = Column(String(255), nullable=True)
    contact_phone = Column(String(100), nullable=True)
    pg_id = Column(String(255), nullable=True)
    pg_name = Column(String(255), nullable=True)
    pg_standard_rate = Column(_money(), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<UnitTurnover(id={self.id}, unit_id={self.unit_id}, move_type={self.move_type})>"


class BookEntryModel(Base):
    """Asiento contable."""

    __tablename__ = "book_entries"
    __table_args__ = (
        Index("ix_book_entries_natural_key", "txn_id", "entry_num"),
    )

    id = Column(Integer, primary_key=True, index=True)
    natural_key_hash = Column(String(64), nullable=False, unique=True)
    facility = Column(String(255), nullable=True)
    org_id = Column(String(255), nullable=True)
    entry_date_time = Column(DateTime(timezone=True), nullable=False, index=True)
    txn_id = Column(String(255), nullable=True, index=True)
    type = Column(String(100), nullable=True)
    amount = Column(_money(), nullable=True)
    book = Column(String(100), nullable=True)
    lease_id = Column(String(255), nullable=True)
    unit = Column(String(255), nullable=True)
    unit_id = Column(String(255), nullable=True)
    contact_id = Column(String(255), nullable=True)
    contact_name = Column(String(255), nullable=True)
    accrual_start = Column(DateTime(timezone=True), nullable=True)
    explanation_text = Column(Text, nullable=True)
    entry_num = Column(String(100), nullable=True)
    applies_to = Column(String(255), nullable=True)
    ar_entry_category = Column(String(255), nullable=True)
    explanation = Column(Text, nullable=True)
    tax_category = Column(String(255), nullable=True)
    tax_exempt = Column(String(20), nullable=True)
    amt_revenue = Column(_money(), nullable=True)
    amt_payment = Column(_money(), nullable=True)
    amt_asset = Column(_money(), nullable=True)
    amt_liability = Column(_money(), nullable=True)
    amt_transfer = Column(_money(), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<BookEntry(id={self.id}, txn_id={self.txn_id}, amount={self.amount})>"


class CustomerTouchModel(Base):
    """Punto de contacto del cliente (evento de marketing)."""

    __tablename__ = "customer_touches"
    __table_args__ = (
        Index("ix_customer_touches_natural_key", "ga_session", "action", "created_at", "contact_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    natural_key_hash = Column(String(64), nullable=False, unique=True)
    ga_session = Column(String(255), nullable=False, index=True)
    source = Column(String(255), nullable=True)
    gclid = Column(String(255), nullable=True)
    action = Column(String(255), nullable=True)
    contact_id = Column(String(255), nullable=True)
    lease_id = Column(String(255), nullable=True)
    lead_id = Column(String(255), nullable=True)
    org_id = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<CustomerTouch(id={self.id}, ga_session={self.ga_session}, action={self.action})>"


class GaEventModel(Base):
    """Evento de analitica web."""

    __tablename__ = "ga_events"
    __table_args__ = (
        Index("ix_ga_events_natural_key", "ga_session_id", "event_name", "event_timestamp"),
    )

    id = Column(Integer, primary_key=True, index=True)
    natural_key_hash = Column(String(64), nullable=False, unique=True)
    org_id = Column(String(255), nullable=True)
    ga_session_id = Column(String(255), nullable=True, index=True)
    event_date = Column(DateTime(timezone=True), nullable=False)
    event_name = Column(String(255), nullable=True)
    event_timestamp = Column(String(50), nullable=True)
    hostname = Column(String(255), nullable=True)
    device_category = Column(String(100), nullable=True)
    geo_city = Column(String(255), nullable=True)
    geo_country = Column(String(255), nullable=True)
    geo_continent = Column(String(255), nullable=True)
    geo_region = Column(String(255), nullable=True)
    geo_metro = Column(String(255), nullable=True)
    traffic_source_name = Column(String(255), nullable=True)
    traffic_source_source = Column(String(255), nullable=True)
    traffic_source_medium = Column(String(255), nullable=True)
    ecommerce_transaction_id = Column(String(255), nullable=True)
    ecommerce_purchase_revenue = Column(_money(), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<GaEvent(id={self.id}, event_name={self.event_name}, ga_session_id={self.ga_session_id})>"
