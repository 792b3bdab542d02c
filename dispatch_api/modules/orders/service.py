# dispatch_api/modules/orders/service.py
from typing import List
import logging

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from dispatch_api.core.exceptions import (
    InvalidRequestError, OrderNotFoundError, OrderAlreadyTakenError
)
from dispatch_api.shared.database.models import DeliveryOrder
from dispatch_api.shared.services.distance_client import DistanceResolver
from .repository import OrdersRepository, ClaimResult
from .schemas import (
    PlaceOrderRequest, OrderResponse, StatusResponse,
    UNASSIGNED_STATUS, TAKEN_STATUS, CLAIM_SUCCESS_STATUS
)

logger = logging.getLogger(__name__)

MIN_PAGE_LIMIT = 1
MAX_PAGE_LIMIT = 1000

# Rango de la columna Integer de delivery_order.id (int4 en PostgreSQL)
MAX_ORDER_ID = 2 ** 31 - 1


def to_order_response(order: DeliveryOrder) -> OrderResponse:
    """Proyección única de una orden al contrato {id, distance, status}"""
    return OrderResponse(
        id=order.id,
        distance=order.distance,
        status=TAKEN_STATUS if order.is_taken else UNASSIGNED_STATUS
    )


class OrdersService:
    """
    Ciclo de vida de una orden: creación, asignación única y listado.

    El repositorio es síncrono (SQLAlchemy); sus llamadas se ejecutan en el
    threadpool para no bloquear el event loop mientras se atienden otras
    peticiones.
    """

    def __init__(self, db: Session, resolver: DistanceResolver):
        self.db = db
        self.resolver = resolver
        self.repository = OrdersRepository(db)

    async def place_order(self, location: PlaceOrderRequest) -> OrderResponse:
        """Resolver distancia y registrar la orden"""
        distance = await self.resolver.resolve(location.origin, location.destination)

        order = await run_in_threadpool(self.repository.create, distance)
        logger.info(f"📦 Orden {order.id} creada - distancia {order.distance}m")

        return to_order_response(order)

    async def take_order(self, order_id: int, requested_status: str) -> StatusResponse:
        """Tomar una orden; solo el primer reclamo tiene éxito"""
        if order_id <= 0:
            raise InvalidRequestError(f"ID de orden inválido: {order_id}")
        if requested_status != TAKEN_STATUS:
            raise InvalidRequestError(f"Estado solicitado inválido: {requested_status!r}")
        if order_id > MAX_ORDER_ID:
            raise OrderNotFoundError(f"Orden {order_id} fuera del rango de ids")

        result = await run_in_threadpool(self.repository.claim_atomic, order_id)

        if result == ClaimResult.NOT_FOUND:
            raise OrderNotFoundError(f"Orden {order_id} no existe")
        if result == ClaimResult.ALREADY_TAKEN:
            logger.info(f"🔒 Orden {order_id} ya había sido tomada")
            raise OrderAlreadyTakenError(f"Orden {order_id} ya tomada")

        logger.info(f"✅ Orden {order_id} tomada")
        return StatusResponse(status=CLAIM_SUCCESS_STATUS)

    async def list_orders(self, page: int, limit: int) -> List[OrderResponse]:
        """Listar una página de órdenes ordenada por id"""
        if page < 0:
            raise InvalidRequestError(f"Página inválida: {page}")
        if not MIN_PAGE_LIMIT <= limit <= MAX_PAGE_LIMIT:
            raise InvalidRequestError(f"Límite inválido: {limit}")

        offset = page * limit
        if offset > MAX_ORDER_ID:
            # Ninguna fila puede estar tan lejos; no se consulta la base
            return []

        orders = await run_in_threadpool(self.repository.list, limit, offset)

        responses = [to_order_response(order) for order in orders]
        responses.sort(key=lambda o: o.id)
        return responses
