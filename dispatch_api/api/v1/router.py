# dispatch_api/api/v1/router.py
from fastapi import APIRouter
from dispatch_api.modules.orders.router import router as orders_router

# Crear router principal de la API
api_router = APIRouter()

# Incluir routers de módulos
api_router.include_router(orders_router, tags=["Orders"])
