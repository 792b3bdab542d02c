# dispatch_api/shared/services/distance_client.py
import asyncio
import logging
from typing import Any, Dict, Optional, Protocol, Sequence

import httpx

from dispatch_api.config.settings import settings
from dispatch_api.core.exceptions import DistanceUnavailableError, UpstreamError

logger = logging.getLogger(__name__)

Coordinate = Sequence[str]


class DistanceResolver(Protocol):
    """Capacidad: dos coordenadas [lat, lng] -> distancia en metros"""

    async def resolve(self, origin: Coordinate, destination: Coordinate) -> float:
        ...


def format_coordinate(point: Coordinate) -> str:
    return f"{point[0]},{point[1]}"


class GoogleDistanceMatrixClient:
    """Cliente para el API Distance Matrix de Google Maps"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        travel_mode: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        retry_backoff: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = settings.maps_api_key if api_key is None else api_key
        self.base_url = base_url or settings.maps_base_url
        self.travel_mode = travel_mode or settings.maps_travel_mode
        self.timeout = settings.maps_timeout if timeout is None else timeout
        self.max_retries = settings.maps_max_retries if max_retries is None else max_retries
        self.retry_backoff = settings.maps_retry_backoff if retry_backoff is None else retry_backoff
        self.transport = transport

    def _build_params(self, origin: Coordinate, destination: Coordinate) -> Dict[str, str]:
        return {
            "origins": format_coordinate(origin),
            "destinations": format_coordinate(destination),
            "mode": self.travel_mode,
            "departure_time": "now",
            "key": self.api_key,
        }

    async def resolve(self, origin: Coordinate, destination: Coordinate) -> float:
        """
        Resolver la distancia de conducción entre dos puntos.

        Errores de transporte y respuestas 5xx se reintentan hasta
        ``max_retries`` veces con backoff exponencial. Una respuesta sin ruta
        utilizable no se reintenta.

        Raises:
            UpstreamError: timeout, error de conexión, no-2xx o JSON inválido
            DistanceUnavailableError: sin ruta o distancia 0
        """
        params = self._build_params(origin, destination)
        attempt = 0

        while True:
            try:
                payload = await self._request(params)
                break
            except _RetryableUpstreamError as e:
                if attempt >= self.max_retries:
                    logger.error(f"❌ Servicio de distancias no disponible tras {attempt + 1} intentos: {e}")
                    raise UpstreamError(str(e))
                delay = self.retry_backoff * (2 ** attempt)
                attempt += 1
                logger.warning(f"⚠️ {e} - reintento {attempt}/{self.max_retries} en {delay:.2f}s")
                await asyncio.sleep(delay)

        distance = self._extract_distance(payload)
        logger.info(
            f"📏 Distancia {format_coordinate(origin)} -> {format_coordinate(destination)}: {distance}m"
        )
        return distance

    async def _request(self, params: Dict[str, str]) -> Dict[str, Any]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(self.base_url, params=params)
        except httpx.TimeoutException as e:
            raise _RetryableUpstreamError(f"Timeout consultando servicio de distancias: {e!r}")
        except httpx.TransportError as e:
            raise _RetryableUpstreamError(f"Error de conexión con servicio de distancias: {e!r}")

        if response.status_code >= 500:
            raise _RetryableUpstreamError(
                f"Error del servicio de distancias: {response.status_code} - {response.text}"
            )
        if not response.is_success:
            raise UpstreamError(
                f"Error del servicio de distancias: {response.status_code} - {response.text}"
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamError(f"Respuesta no es JSON válido: {e}")
        if not isinstance(payload, dict):
            raise UpstreamError(f"Respuesta inesperada del servicio de distancias: {payload!r}")
        return payload

    @staticmethod
    def _extract_distance(payload: Dict[str, Any]) -> float:
        """Tomar la distancia del primer elemento de la primera fila"""
        api_status = payload.get("status")
        if api_status != "OK":
            raise DistanceUnavailableError(
                f"Servicio de distancias respondió {api_status}: {payload.get('error_message', '')}"
            )

        try:
            element = payload["rows"][0]["elements"][0]
        except (KeyError, IndexError, TypeError):
            raise DistanceUnavailableError("Respuesta sin filas/elementos de distancia")

        if element.get("status") != "OK":
            raise DistanceUnavailableError(f"Elemento de distancia con estado {element.get('status')}")

        try:
            meters = float(element["distance"]["value"])
        except (KeyError, TypeError, ValueError):
            raise DistanceUnavailableError(f"Elemento sin distancia utilizable: {element!r}")

        # 0m casi siempre indica origen/destino idénticos o mal formados
        if meters <= 0:
            raise DistanceUnavailableError(f"Distancia no utilizable: {meters}")
        return meters


class _RetryableUpstreamError(Exception):
    pass


def get_distance_resolver() -> DistanceResolver:
    """Dependency de FastAPI; los tests la sustituyen con dependency_overrides"""
    return GoogleDistanceMatrixClient()
