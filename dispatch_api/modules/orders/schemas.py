# dispatch_api/modules/orders/schemas.py
from pydantic import BaseModel, Field, field_validator
from typing import List

from dispatch_api.shared.schemas.common import StatusResponse, ErrorResponse

UNASSIGNED_STATUS = "UNASSIGN"
# En minúscula a diferencia de UNASSIGN: es el token que ya esperan los clientes
TAKEN_STATUS = "taken"
CLAIM_SUCCESS_STATUS = "SUCCESS"

LATITUDE_RANGE = (-90.0, 90.0)
LONGITUDE_RANGE = (-180.0, 180.0)


def parse_coordinate(value: List[str]) -> List[str]:
    """Validar un par [lat, lng] de strings en grados decimales"""
    if len(value) != 2:
        raise ValueError('La coordenada debe tener exactamente [lat, lng]')

    parsed = []
    for component in value:
        if not component or not component.strip():
            raise ValueError('Componente de coordenada vacío')
        try:
            parsed.append(float(component))
        except ValueError:
            raise ValueError(f'Componente de coordenada inválido: {component!r}')

    lat, lng = parsed
    if not LATITUDE_RANGE[0] <= lat <= LATITUDE_RANGE[1]:
        raise ValueError(f'Latitud fuera de rango: {lat}')
    if not LONGITUDE_RANGE[0] <= lng <= LONGITUDE_RANGE[1]:
        raise ValueError(f'Longitud fuera de rango: {lng}')
    return [component.strip() for component in value]


class PlaceOrderRequest(BaseModel):
    origin: List[str] = Field(..., description="Origen [lat, lng]")
    destination: List[str] = Field(..., description="Destino [lat, lng]")

    @field_validator('origin', 'destination')
    @classmethod
    def validate_coordinate(cls, v: List[str]) -> List[str]:
        return parse_coordinate(v)

    class Config:
        json_schema_extra = {
            "example": {
                "origin": ["22.33", "114.14"],
                "destination": ["22.32", "114.14"]
            }
        }


class TakeOrderRequest(BaseModel):
    status: str = Field(..., description="Debe ser 'taken'")

    class Config:
        json_schema_extra = {"example": {"status": TAKEN_STATUS}}


class OrderResponse(BaseModel):
    id: int
    distance: float
    status: str


__all__ = [
    "PlaceOrderRequest", "TakeOrderRequest", "OrderResponse",
    "StatusResponse", "ErrorResponse",
    "UNASSIGNED_STATUS", "TAKEN_STATUS", "CLAIM_SUCCESS_STATUS",
]
