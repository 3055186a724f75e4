"""
CLI: BigQuery -> base de datos destino (corrida unica).

Uso recomendado:
  - Backfill o corrida manual fuera del scheduler del API.
  - El exit code es 1 si alguna entidad fallo (apto para cron/systemd timer).

Variables de entorno requeridas:
  - BIGQUERY_PROJECT
  - BIGQUERY_APPLICATION_CREDENTIALS
  - DATABASE_URL (o DATABASE_* por componentes)

Ejecucion:
  python scripts/run_warehouse_sync.py --list
  python scripts/run_warehouse_sync.py --entity units --entity payments
  python scripts/run_warehouse_sync.py --all --init-db
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger

# Permite ejecutar este script desde cualquier cwd sin instalar el paquete.
# La carpeta "api" contiene el paquete raiz `warehouse_sync/`.
_API_ROOT = Path(__file__).resolve().parents[1]
if str(_API_ROOT) not in sys.path:
    sys.path.insert(0, str(_API_ROOT))

load_dotenv(_API_ROOT / ".env", override=False)
load_dotenv(_API_ROOT.parent / ".env", override=False)

from warehouse_sync.application.sync.entities import ENTITIES, resolve_cron
from warehouse_sync.application.sync.orchestrator import build_sync_service
from warehouse_sync.core.config import Settings
from warehouse_sync.infrastructure.database.session import close_db, create_database, init_db
from warehouse_sync.infrastructure.warehouse.client import build_warehouse_from_settings
from warehouse_sync.shared.exceptions.sync import SyncConfigError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Sincroniza entidades del warehouse al destino.")
    parser.add_argument(
        "--entity",
        action="append",
        choices=sorted(ENTITIES),
        help="Entidad a sincronizar (se puede repetir).",
    )
    parser.add_argument(
        "--all",
        action="store_true",
        help="Sincroniza todas las entidades en orden de registro.",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="Lista las entidades con su cron efectivo y sale.",
    )
    parser.add_argument(
        "--init-db",
        action="store_true",
        help="Crea las tablas destino antes de sincronizar.",
    )
    return parser


def list_entities(settings: Settings) -> None:
    for definition in ENTITIES.values():
        cron = resolve_cron(definition, settings.SYNC_SCHEDULES)
        print(f"{definition.name:<20} {definition.source_view:<20} {cron}")


async def run(entity_names: list[str], settings: Settings, init_tables: bool) -> int:
    """Corre las entidades pedidas una vez; retorna la cantidad de fallos."""
    database = create_database(settings)
    warehouse = None
    failures = 0
    try:
        if init_tables:
            await init_db(database)
            logger.info("Tablas destino verificadas")

        warehouse = build_warehouse_from_settings(settings)
        service = build_sync_service(settings, database, warehouse)

        for name in entity_names:
            try:
                records = await service.sync(name)
            except Exception as e:
                failures += 1
                logger.error(f"Sync {name} fallo: {e}")
                logger.exception("Detalle del error:")
                continue
            logger.success(f"Sync {name} OK: {len(records)} registros")
    finally:
        if warehouse is not None:
            warehouse.close()
        await close_db(database)

    return failures


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings()

    if args.list:
        list_entities(settings)
        return 0

    entity_names = list(ENTITIES) if args.all else (args.entity or [])
    if not entity_names:
        logger.error("Indica --entity <nombre> (repetible) o --all")
        return 2

    try:
        failures = asyncio.run(run(entity_names, settings, args.init_db))
    except SyncConfigError as e:
        logger.error(e.message)
        return 1

    if failures:
        logger.error(f"{failures} de {len(entity_names)} entidades fallaron")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
