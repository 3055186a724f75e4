"""
Proyecciones fila cruda del warehouse -> registro canonico por entidad.

Cada funcion es pura y total: un campo ausente nunca hace fallar el mapeo,
solo produce None. Las fechas/decimales/enteros pasan siempre por el
normalizador; los strings e identificadores se copian tal cual.

Los registros resultantes usan como claves los nombres de columna destino
(ver `infrastructure/database/models.py`). No llevan `id` ni `updated_at`:
esos los asigna el destino/loader.
"""
from __future__ import annotations

from typing import Any, Dict

from warehouse_sync.application.sync.normalizer import (
    Row,
    to_date,
    to_decimal,
    to_integer,
    to_text,
)
from warehouse_sync.shared.utils.datetime_utils import utc_now

Record = Dict[str, Any]


def _date_or_now(row: Row, field: str):
    """Fecha normalizada, o la hora actual si el warehouse no la trae."""
    return to_date(row, field) or utc_now()


def _touch_session(row: Row) -> str:
    """
    Identificador de sesion para un customer touch.

    Si el warehouse no trae `ga_session` se sintetiza uno a partir del
    source y la accion (p.ej. "manual_web_click").
    """
    session = to_text(row, "ga_session")
    if session:
        return session
    source = to_text(row, "source") or "unknown"
    action = to_text(row, "action") or "unknown"
    return f"manual_{source}_{action}".lower()


def map_unit(row: Row) -> Record:
    return {
        "facility_id": to_text(row, "facility_id"),
        "facility_name": to_text(row, "facility_name"),
        "unit_id": to_text(row, "unit_id"),
        "unit_name": to_text(row, "unit_name"),
        "unit_type": to_text(row, "unit_type"),
        "unit_features": to_text(row, "unit_features"),
        "pg_id": to_text(row, "pg_id"),
        "pricing_group": to_text(row, "pricing_group"),
        "rate_managed": to_decimal(row, "rate_managed"),
        "unit_floor_num": to_integer(row, "unit_floor_num"),
        "unit_building_name": to_text(row, "unit_building_name"),
        "unit_width": to_decimal(row, "unit_width"),
        "unit_depth": to_decimal(row, "unit_depth"),
        "unit_height": to_decimal(row, "unit_height"),
        "is_leased": to_integer(row, "is_leased"),
        "is_insurable": to_integer(row, "is_insurable"),
        "is_rentable": to_integer(row, "is_rentable"),
        "is_overlocked": to_integer(row, "is_overlocked"),
        "unit_unrentable_reason": to_text(row, "unit_unrentable_reason"),
        "unit_unrentable_note": to_text(row, "unit_unrentable_note"),
        "unit_keypad_zone": to_integer(row, "unit_keypad_zone"),
        "unit_time_zone": to_integer(row, "unit_time_zone"),
        "web_rate_override": to_integer(row, "web_rate_override"),
        "strikethrough_price_override": to_integer(row, "strikethrough_price_override"),
        "walk_in_rate_override": to_integer(row, "walk_in_rate_override"),
    }


def map_payment(row: Row) -> Record:
    return {
        "facility_id": to_text(row, "facility_id"),
        "facility_name": to_text(row, "facility_name"),
        "org_id": to_text(row, "org_id"),
        "contact_id": to_text(row, "contact_id"),
        "contact_name": to_text(row, "contact_name"),
        "payment_date": to_date(row, "payment_date"),
        "payment_datetime": to_date(row, "payment_datetime"),
        "payment_amount": to_decimal(row, "payment_amount"),
        "payment_type": to_text(row, "payment_type"),
        "payment_status": to_text(row, "payment_status"),
        "payment_method": to_text(row, "payment_method"),
        "payment_card_brand": to_text(row, "payment_card_brand"),
        "payment_card_last_four": to_text(row, "payment_card_last_four"),
        "payment_check_number": to_text(row, "payment_check_number"),
        "payment_channel": to_text(row, "payment_channel"),
    }


def map_lease(row: Row) -> Record:
    return {
        "facility_id": to_text(row, "facility_id"),
        "facility_name": to_text(row, "facility_name"),
        "org_id": to_text(row, "org_id"),
        "lease_id": to_text(row, "lease_id"),
        "unit_name": to_text(row, "unit_name"),
        "unit_id": to_text(row, "unit_id"),
        "is_active": to_text(row, "is_active"),
        "lease_created_by": to_text(row, "lease_created_by"),
        "lease_started": to_date(row, "lease_started"),
        "lease_ended": to_date(row, "lease_ended"),
        "lease_rent_original": to_decimal(row, "lease_rent_original"),
        "lease_rent_current": to_decimal(row, "lease_rent_current"),
        "lease_rent_next": to_decimal(row, "lease_rent_next"),
        "lease_rent_next_chg_date": to_date(row, "lease_rent_next_chg_date"),
        "lease_rent_last_chg_date": to_date(row, "lease_rent_last_chg_date"),
        "lease_all_discounts": to_text(row, "lease_all_discounts"),
        "is_lease_paid": to_text(row, "is_lease_paid"),
        "status_late_since_date": to_date(row, "status_late_since_date"),
        "status_paid_through_date": to_date(row, "status_paid_through_date"),
        "status_paid_on_date": to_date(row, "status_paid_on_date"),
        "is_needs_overlock": to_text(row, "is_needs_overlock"),
        "is_in_auction": to_text(row, "is_in_auction"),
        "is_autopay_enabled": to_text(row, "is_autopay_enabled"),
        "ins_premium": to_decimal(row, "ins_premium"),
        "ins_coverage_level": to_decimal(row, "ins_coverage_level"),
        "access_code": to_text(row, "access_code"),
        "is_access_code_enabled": to_text(row, "is_access_code_enabled"),
        "contact_id": to_text(row, "contact_id"),
        "contact_pinned_note": to_text(row, "contact_pinned_note"),
        "is_military": to_text(row, "is_military"),
        "contact_name": to_text(row, "contact_name"),
        "contact_company_name": to_text(row, "contact_company_name"),
        "contact_email": to_text(row, "contact_email"),
        "contact_phone": to_text(row, "contact_phone"),
        "contact_address_1": to_text(row, "contact_address_1"),
        "contact_address_2": to_text(row, "contact_address_2"),
        "contact_city": to_text(row, "contact_city"),
        "contact_state": to_text(row, "contact_state"),
        "contact_zip": to_text(row, "contact_zip"),
        "lease_lifetime_payments": to_decimal(row, "lease_lifetime_payments"),
        "balance_ar": to_decimal(row, "balance_ar"),
        "balance_deposit": to_decimal(row, "balance_deposit"),
        "balance_prepaid": to_decimal(row, "balance_prepaid"),
    }


def map_lead(row: Row) -> Record:
    return {
        "lead_id": to_text(row, "lead_id"),
        "age_of_lead_minutes": to_integer(row, "age_of_lead_minutes"),
        "status": to_text(row, "status"),
        "contact_id": to_text(row, "contact_id"),
        "contact_name": to_text(row, "contact_name"),
        "facility_id": to_text(row, "facility_id"),
        "facility_name": to_text(row, "facility_name"),
        "pg_id": to_text(row, "pg_id"),
        "pg_name": to_text(row, "pg_name"),
        "pg_features": to_text(row, "pg_features"),
        "created_by": to_text(row, "created_by"),
        "org_id": to_text(row, "org_id"),
        "converted_by": to_text(row, "converted_by"),
        "converted_datetime": to_date(row, "converted_datetime"),
        "time_to_convert": to_integer(row, "time_to_convert"),
        "time_to_unqualified": to_integer(row, "time_to_unqualified"),
        "converted_lease_id": to_text(row, "converted_lease_id"),
        "lead_source": to_text(row, "lead_source"),
        "first_touch_source": to_text(row, "first_touch_source"),
        "ga_source": to_text(row, "ga_source"),
        "source": to_text(row, "source"),
        "first_touch_action": to_text(row, "first_touch_action"),
        "ga_session": to_text(row, "ga_session"),
        "ga_session_id": to_text(row, "ga_session_id"),
    }


def map_contact(row: Row) -> Record:
    return {
        "contact_id": to_text(row, "contact_id"),
        "org_id": to_text(row, "org_id"),
        "name": to_text(row, "name"),
        "address": to_text(row, "address"),
        "address2": to_text(row, "address2"),
        "company_name": to_text(row, "company_name"),
        "city": to_text(row, "city"),
        "state": to_text(row, "state"),
        "country": to_text(row, "country"),
        "zip": to_text(row, "zip"),
        "email": to_text(row, "email"),
        "phone": to_text(row, "phone"),
        "created_at": _date_or_now(row, "created_at"),
        "date_of_birth": to_date(row, "date_of_birth"),
        "lead_id": to_text(row, "lead_id"),
        "lead_source": to_text(row, "lead_source"),
    }


def map_manager(row: Row) -> Record:
    return {
        "manager_id": to_text(row, "manager_id"),
        "manager_name": to_text(row, "manager_name"),
        "manager_username": to_text(row, "manager_username"),
        "manager_email": to_text(row, "manager_email"),
        "manager_phone": to_text(row, "manager_phone"),
        "manager_permissions": to_text(row, "manager_permissions"),
    }


def map_pricing_group(row: Row) -> Record:
    return {
        "pg_id": to_text(row, "pg_id"),
        "name": to_text(row, "name"),
        "price": to_decimal(row, "price"),
        "facility_id": to_text(row, "facility_id"),
        "width": to_decimal(row, "width"),
        "height": to_decimal(row, "height"),
        "depth": to_decimal(row, "depth"),
        "features": to_text(row, "features"),
    }


def map_spaces_historical(row: Row) -> Record:
    return {
        "date": _date_or_now(row, "date"),
        "org_id": to_text(row, "org_id"),
        "unit_id": to_text(row, "unit_id"),
        "unit_name": to_text(row, "unit_name"),
        "unit_description": to_text(row, "unit_description"),
        "facility_name": to_text(row, "facility_name"),
        "facility_id": to_text(row, "facility_id"),
        "facility_address": to_text(row, "facility_address"),
        "building_name": to_text(row, "building_name"),
        "is_occupied": to_integer(row, "is_occupied"),
        "is_unrentable": to_text(row, "is_unrentable"),
        "unrentable_reason": to_text(row, "unrentable_reason"),
        "unrentable_reason_note": to_text(row, "unrentable_reason_note"),
        "width": to_decimal(row, "width"),
        "height": to_decimal(row, "height"),
        "depth": to_decimal(row, "depth"),
        "is_overlocked": to_text(row, "is_overlocked"),
        "pricing_group_name": to_text(row, "pricing_group_name"),
        "street_rate": to_decimal(row, "street_rate"),
        "pg_id": to_text(row, "pg_id"),
        "lease_id": to_text(row, "lease_id"),
        "occ_rate": to_decimal(row, "occ_rate"),
        "occ_start_dt": to_date(row, "occ_start_dt"),
        "occ_tenant_id": to_text(row, "occ_tenant_id"),
        "occ_tenant_name": to_text(row, "occ_tenant_name"),
        "is_autopay_enabled": to_text(row, "is_autopay_enabled"),
        "is_insurance_active": to_text(row, "is_insurance_active"),
        "contact_id": to_text(row, "contact_id"),
    }


def map_unit_turnover(row: Row) -> Record:
    return {
        "move_type": to_text(row, "move_type"),
        "move_date": _date_or_now(row, "move_date"),
        "facility_id": to_text(row, "facility_id"),
        "facility_name": to_text(row, "facility_name"),
        "unit_id": to_text(row, "unit_id"),
        "unit_name": to_text(row, "unit_name"),
        "unit_type": to_text(row, "unit_type"),
        "unit_features": to_text(row, "unit_features"),
        "unit_floor_num": to_integer(row, "unit_floor_num"),
        "unit_building_name": to_text(row, "unit_building_name"),
        "unit_width": to_decimal(row, "unit_width"),
        "unit_depth": to_decimal(row, "unit_depth"),
        "unit_height": to_decimal(row, "unit_height"),
        "lease_id": to_text(row, "lease_id"),
        "lease_created_by": to_text(row, "lease_created_by"),
        "lease_rent": to_decimal(row, "lease_rent"),
        "lease_start_date": to_date(row, "lease_start_date"),
        "lease_end_date": to_date(row, "lease_end_date"),
        "lease_created_by_transfer": to_text(row, "lease_created_by_transfer"),
        "lease_terminated_by_transfer": to_text(row, "lease_terminated_by_transfer"),
        "lease_days_rented": to_integer(row, "lease_days_rented"),
        "lease_discounts_applied": to_text(row, "lease_discounts_applied"),
        "ins_premium": to_decimal(row, "ins_premium"),
        "ins_coverage_level": to_decimal(row, "ins_coverage_level"),
        "contact_id": to_text(row, "contact_id"),
        "contact_name": to_text(row, "contact_name"),
        "contact_email": to_text(row, "contact_email"),
        "contact_phone": to_text(row, "contact_phone"),
        "pg_id": to_text(row, "pg_id"),
        "pg_name": to_text(row, "pg_name"),
        "pg_standard_rate": to_decimal(row, "pg_standard_rate"),
    }


def map_book_entry(row: Row) -> Record:
    return {
        "facility": to_text(row, "facility"),
        "org_id": to_text(row, "org_id"),
        "entry_date_time": _date_or_now(row, "entry_date_time"),
        "txn_id": to_text(row, "txn_id"),
        "type": to_text(row, "type"),
        "amount": to_decimal(row, "amount"),
        "book": to_text(row, "book"),
        "lease_id": to_text(row, "lease_id"),
        "unit": to_text(row, "unit"),
        "unit_id": to_text(row, "unit_id"),
        "contact_id": to_text(row, "contact_id"),
        "contact_name": to_text(row, "contact_name"),
        "accrual_start": to_date(row, "accrual_start"),
        "explanation_text": to_text(row, "explanation_text"),
        "entry_num": to_text(row, "entry_num"),
        "applies_to": to_text(row, "applies_to"),
        "ar_entry_category": to_text(row, "ar_entry_category"),
        "explanation": to_text(row, "explanation"),
        "tax_category": to_text(row, "tax_category"),
        "tax_exempt": to_text(row, "tax_exempt"),
        "amt_revenue": to_decimal(row, "amt_revenue"),
        "amt_payment": to_decimal(row, "amt_payment"),
        "amt_asset": to_decimal(row, "amt_asset"),
        "amt_liability": to_decimal(row, "amt_liability"),
        "amt_transfer": to_decimal(row, "amt_transfer"),
        "created_at": _date_or_now(row, "created_at"),
    }


def map_customer_touch(row: Row) -> Record:
    return {
        "ga_session": _touch_session(row),
        "source": to_text(row, "source"),
        "gclid": to_text(row, "gclid"),
        "action": to_text(row, "action"),
        "created_at": to_date(row, "created_at"),
        "contact_id": to_text(row, "contact_id"),
        "lease_id": to_text(row, "lease_id"),
        "lead_id": to_text(row, "lead_id"),
        "org_id": to_text(row, "org_id"),
    }


def map_ga_event(row: Row) -> Record:
    return {
        "org_id": to_text(row, "org_id"),
        "ga_session_id": to_text(row, "ga_session_id"),
        "event_date": _date_or_now(row, "event_date"),
        "event_name": to_text(row, "event_name"),
        "event_timestamp": to_text(row, "event_timestamp"),
        "hostname": to_text(row, "host_name"),
        "device_category": to_text(row, "device_category"),
        "geo_city": to_text(row, "geo_city"),
        "geo_country": to_text(row, "geo_country"),
        "geo_continent": to_text(row, "geo_continent"),
        "geo_region": to_text(row, "geo_region"),
        "geo_metro": to_text(row, "geo_metro"),
        "traffic_source_name": to_text(row, "traffic_source_name"),
        "traffic_source_source": to_text(row, "traffic_source_source"),
        "traffic_source_medium": to_text(row, "traffic_source_medium"),
        "ecommerce_transaction_id": to_text(row, "ecommerce_transaction_id"),
        "ecommerce_purchase_revenue": to_decimal(row, "ecommerce_purchase_revenue"),
    }
