"""
Utilidades puras para manejo de fechas y horas.

Se mantienen libres de I/O para poder testearlas facilmente.
"""
from datetime import date, datetime, time, timezone
from typing import Optional


def utc_now() -> datetime:
    """Retorna la hora actual en UTC, como datetime aware."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """
    Normaliza datetime a UTC (aware).

    BigQuery devuelve TIMESTAMP con zona pero DATETIME/DATE sin ella;
    se asume UTC para los naive.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def date_to_datetime(value: date) -> datetime:
    """Convierte un `date` a medianoche UTC."""
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def parse_iso_datetime(raw: str) -> Optional[datetime]:
    """
    Parsea un string ISO 8601 (acepta sufijo 'Z').

    Returns:
        datetime en UTC, o None si el string no es parseable
    """
    text = raw.strip().removesuffix(" UTC")
    if not text:
        return None
    try:
        return ensure_utc(datetime.fromisoformat(text.replace("Z", "+00:00")))
    except ValueError:
        return None
