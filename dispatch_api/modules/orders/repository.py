# dispatch_api/modules/orders/repository.py
from enum import Enum
from typing import List

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dispatch_api.core.exceptions import StorageError
from dispatch_api.shared.database.models import DeliveryOrder
import logging

logger = logging.getLogger(__name__)


class ClaimResult(str, Enum):
    CLAIMED = "claimed"
    ALREADY_TAKEN = "already_taken"
    NOT_FOUND = "not_found"


class OrdersRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(self, distance: float) -> DeliveryOrder:
        """Insertar una orden nueva sin asignar"""
        try:
            order = DeliveryOrder(distance=distance, is_taken=False)
            self.db.add(order)
            self.db.commit()
            self.db.refresh(order)
            return order
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error creando orden (distance={distance}): {e}")
            raise StorageError(f"Error creando orden: {e}")

    def claim_atomic(self, order_id: int) -> ClaimResult:
        """
        Tomar una orden con un único UPDATE condicional.

        ``UPDATE ... SET is_taken = true WHERE id = :id AND is_taken = false``
        solo afecta una fila para el primer reclamo; los concurrentes ven 0
        filas. Con 0 filas se consulta si la orden existe para distinguir
        ALREADY_TAKEN de NOT_FOUND (is_taken nunca vuelve a False y no hay
        borrados, así que la consulta posterior no introduce carrera).
        """
        try:
            result = self.db.execute(
                update(DeliveryOrder)
                .where(
                    DeliveryOrder.id == order_id,
                    DeliveryOrder.is_taken.is_(False)
                )
                .values(is_taken=True)
                .execution_options(synchronize_session=False)
            )
            self.db.commit()

            if result.rowcount == 1:
                return ClaimResult.CLAIMED

            exists = self.db.query(DeliveryOrder.id).filter(
                DeliveryOrder.id == order_id
            ).first()

            return ClaimResult.ALREADY_TAKEN if exists else ClaimResult.NOT_FOUND

        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error tomando orden {order_id}: {e}")
            raise StorageError(f"Error tomando orden {order_id}: {e}")

    def list(self, limit: int, offset: int) -> List[DeliveryOrder]:
        """Página de órdenes ordenada por id ascendente"""
        try:
            orders = self.db.query(DeliveryOrder).order_by(
                DeliveryOrder.id.asc()
            ).limit(limit).offset(offset).all()
            return orders
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error listando órdenes (limit={limit}, offset={offset}): {e}")
            raise StorageError(f"Error listando órdenes: {e}")

