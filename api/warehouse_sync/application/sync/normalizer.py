"""
Normalizador de campos crudos del warehouse.

BigQuery (y sus clientes) puede devolver un mismo tipo logico de varias
formas: escalares planos, valores "boxed" (`{"value": ...}` u objetos con
atributo `.value`), decimales como strings ambiguos segun locale, flags
booleanos como enteros o strings, etc.

Estas funciones convierten esa representacion cruda en valores tipados
canonicos (datetime, Decimal, int, str). Todas son totales: nunca lanzan
por una forma inesperada. Un valor corrupto se registra como warning y se
sustituye por None.
"""
from __future__ import annotations

import math
import re
from collections.abc import Mapping
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional

from loguru import logger

from warehouse_sync.shared.utils.datetime_utils import (
    date_to_datetime,
    ensure_utc,
    parse_iso_datetime,
)

Row = Mapping[str, Any]

_MISSING = object()
_TWO_PLACES = Decimal("0.01")
# Prefijo entero al estilo parseInt: "12abc" -> 12, " -3" -> -3
_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")


def unwrap(value: Any) -> Any:
    """
    Retorna el escalar interno de un valor boxed.

    No asume una clase concreta de wrapper: solo revisa si existe un
    `value` anidado (clave de mapping o atributo).
    """
    if isinstance(value, Mapping):
        return value["value"] if "value" in value else value
    if isinstance(value, (str, bytes, int, float, Decimal, date)):
        return value
    inner = getattr(value, "value", _MISSING)
    return value if inner is _MISSING else inner


def to_date(row: Row, field: str) -> Optional[datetime]:
    """
    Convierte un campo de fecha/fecha-hora a datetime aware (UTC).

    - `datetime` -> normalizado a UTC
    - `date` -> medianoche UTC
    - string ISO 8601 -> parseado
    - ausente / vacio -> None
    """
    raw = row.get(field)
    if raw is None:
        return None

    value = unwrap(raw)
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, date):
        return date_to_datetime(value)

    parsed = parse_iso_datetime(str(value))
    if parsed is None:
        logger.warning(f"Fecha invalida para el campo {field}: {value!r}")
    return parsed


def _to_number(value: Any) -> Optional[Decimal]:
    if isinstance(value, bool):
        return Decimal(int(value))
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        # repr() da la representacion mas corta: 12.345 -> "12.345"
        return Decimal(repr(value))
    text = str(value).strip()
    if not text:
        return None
    try:
        return Decimal(text)
    except InvalidOperation:
        return None


def to_decimal(row: Row, field: str) -> Optional[Decimal]:
    """
    Convierte un campo numerico a Decimal con exactamente 2 decimales.

    El valor se redondea (half-up) y se formatea con '.' como separador y sin
    agrupacion de miles antes de construir el Decimal, asi el resultado no
    depende del locale del host ni arrastra ruido de punto flotante.
    """
    raw = row.get(field)
    if raw is None:
        return None

    value = unwrap(raw)
    if value is None:
        return None

    number = _to_number(value)
    if number is None or not number.is_finite():
        logger.warning(f"Valor numerico invalido para el campo {field}: {value!r}")
        return None

    try:
        rounded = number.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        logger.warning(f"No se pudo redondear el campo {field}: {value!r}")
        return None

    formatted = f"{rounded:.2f}"
    return Decimal(formatted)


def to_integer(row: Row, field: str) -> Optional[int]:
    """
    Convierte un campo a entero base 10 (flags 0/1, contadores, pisos...).

    Strings se parsean por prefijo entero ("12abc" -> 12); floats y Decimal
    se truncan; booleanos pasan a 0/1. Un valor sin prefijo numerico se
    registra como warning y queda en None.
    """
    raw = row.get(field)
    if raw is None:
        return None

    value = unwrap(raw)
    if value is None:
        return None
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, (float, Decimal)):
        finite = value.is_finite() if isinstance(value, Decimal) else math.isfinite(value)
        if not finite:
            logger.warning(f"Valor entero invalido para el campo {field}: {value!r}")
            return None
        return int(value)

    match = _INT_PREFIX.match(str(value))
    if not match:
        logger.warning(f"Valor entero invalido para el campo {field}: {value!r}")
        return None
    return int(match.group(1))


def to_text(row: Row, field: str) -> Optional[str]:
    """
    Pass-through para campos string/identificadores.

    Valores boxed se desempaquetan. Vacio o ausente -> None. Booleanos ->
    "true"/"false"; otros escalares se convierten con str() para que el
    destino reciba siempre texto.
    """
    value = unwrap(row.get(field))
    if value is None or value == "":
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
