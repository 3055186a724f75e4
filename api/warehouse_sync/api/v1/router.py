"""
Router principal de la API v1.
"""
from fastapi import APIRouter

from warehouse_sync.api.v1.endpoints import sync


# Router principal de la API v1
api_router = APIRouter(prefix="/v1")

api_router.include_router(sync.router)
