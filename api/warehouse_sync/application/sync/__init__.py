"""
Pipeline de sincronizacion one-way: BigQuery (vistas autorizadas) -> destino.

Objetivos de diseno:
- Idempotencia: se puede ejecutar N veces sin duplicar datos.
- Una entidad por job: cada una con su cron y su propio manejo de errores.
- Esquema explicito y tipado en el destino (sin blobs JSON).
"""
