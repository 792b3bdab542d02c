# dispatch_api/modules/orders/__init__.py
"""
Módulo Orders - Órdenes de entrega

Este módulo implementa el ciclo de vida de una orden:
- POST /order: calcular distancia y registrar la orden
- PUT /order/{id}: tomar la orden (un solo corredor la obtiene)
- GET /orders: listar órdenes paginadas

Arquitectura:
- router.py: Endpoints de órdenes
- service.py: Lógica de negocio y validaciones
- repository.py: Acceso a datos (UPDATE condicional atómico)
- schemas.py: Modelos de request/response
"""

from .router import router
from .service import OrdersService
from .repository import OrdersRepository, ClaimResult

__all__ = [
    "router",
    "OrdersService",
    "OrdersRepository",
    "ClaimResult"
]
