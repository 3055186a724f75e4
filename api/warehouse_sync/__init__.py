"""Servicio de sincronizacion periodica BigQuery -> base de datos transaccional."""
