# dispatch_api/shared/database/models.py
from sqlalchemy import Column, Integer, Float, Boolean, DateTime, CheckConstraint, func, text

from dispatch_api.config.database import Base

# =====================================================
# MIXIN PARA TIMESTAMPS
# =====================================================
class TimestampMixin:
    """Mixin que agrega campos created_at y updated_at"""
    created_at = Column(DateTime, nullable=False, server_default=func.current_timestamp())
    updated_at = Column(DateTime, nullable=False, server_default=func.current_timestamp(), onupdate=func.current_timestamp())


# =====================================================
# ÓRDENES DE ENTREGA
# =====================================================

class DeliveryOrder(Base, TimestampMixin):
    """
    Orden de entrega.

    ``distance`` se calcula una única vez al crear la orden. ``is_taken``
    solo pasa de False a True (ver ``OrdersRepository.claim_atomic``).
    """
    __tablename__ = "delivery_order"

    id = Column(Integer, primary_key=True, index=True)
    distance = Column(Float, nullable=False)
    is_taken = Column(Boolean, nullable=False, default=False, server_default=text("false"))

    __table_args__ = (
        CheckConstraint('distance >= 0', name='ck_delivery_order_distance_non_negative'),
    )

    def __repr__(self) -> str:
        return f"<DeliveryOrder id={self.id} distance={self.distance} is_taken={self.is_taken}>"
