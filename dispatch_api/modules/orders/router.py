# dispatch_api/modules/orders/router.py
from typing import List

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from dispatch_api.config.database import get_db
from dispatch_api.shared.services.distance_client import DistanceResolver, get_distance_resolver
from .service import OrdersService
from .schemas import (
    PlaceOrderRequest, TakeOrderRequest, OrderResponse, StatusResponse, ErrorResponse
)

router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Bad Request"},
    500: {"model": ErrorResponse, "description": "Internal Server Error / Database Error"},
}


def get_orders_service(
    db: Session = Depends(get_db),
    resolver: DistanceResolver = Depends(get_distance_resolver)
) -> OrdersService:
    return OrdersService(db, resolver)


@router.post("/order", response_model=OrderResponse, responses=ERROR_RESPONSES)
async def place_order(
    location: PlaceOrderRequest,
    service: OrdersService = Depends(get_orders_service)
):
    """
    Crear una orden de entrega

    **Funcionalidad:**
    - Calcula la distancia origen -> destino con el servicio de mapas
    - Registra la orden sin asignar (status UNASSIGN)

    **Validaciones:**
    - origin y destination deben ser [lat, lng] como strings
    """
    return await service.place_order(location)


@router.put(
    "/order/{order_id}",
    response_model=StatusResponse,
    responses={
        **ERROR_RESPONSES,
        404: {"model": ErrorResponse, "description": "Not Found"},
        409: {"model": ErrorResponse, "description": "ORDER_ALREADY_BEEN_TAKEN"},
    }
)
async def take_order(
    body: TakeOrderRequest,
    order_id: int = Path(..., description="ID de la orden"),
    service: OrdersService = Depends(get_orders_service)
):
    """
    Tomar una orden

    **Concurrencia:**
    - Solo un reclamo por orden tiene éxito
    - Los siguientes reciben 409 ORDER_ALREADY_BEEN_TAKEN
    """
    return await service.take_order(order_id, body.status)


@router.get("/orders", response_model=List[OrderResponse], responses=ERROR_RESPONSES)
async def list_orders(
    page: int = Query(..., description="Página, desde 0"),
    limit: int = Query(..., description="Tamaño de página, 1 a 1000"),
    service: OrdersService = Depends(get_orders_service)
):
    """Listar órdenes paginadas, ordenadas por id ascendente"""
    return await service.list_orders(page, limit)
