# dispatch_api/core/exceptions.py
"""
Errores de dominio y su traducción al contrato de la API.

Todas las respuestas de error tienen la forma ``{"error": "<mensaje>"}``.
El mensaje es fijo por tipo de error; el detalle interno (``reason``) solo
se escribe en el log del servidor.
"""
import logging
from typing import Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError, ResponseValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

BAD_REQUEST = "Bad Request"
INTERNAL_SERVER_ERROR = "Internal Server Error"
DATABASE_ERROR = "Database Error"
JSON_MARSHALLING_ERROR = "JSON Marshalling Error"
NOT_FOUND = "Not Found"
ORDER_ALREADY_BEEN_TAKEN = "ORDER_ALREADY_BEEN_TAKEN"


class DispatchError(HTTPException):
    """Base de los errores de la API"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = INTERNAL_SERVER_ERROR

    def __init__(self, reason: Optional[str] = None):
        super().__init__(status_code=self.status_code, detail=self.message)
        self.reason = reason or self.message


class InvalidRequestError(DispatchError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = BAD_REQUEST


class UpstreamError(DispatchError):
    """Fallo del servicio externo de distancias (timeout, no-2xx, JSON inválido)"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = INTERNAL_SERVER_ERROR


class DistanceUnavailableError(UpstreamError):
    """El servicio respondió pero sin una ruta utilizable (o distancia 0)"""


class OrderNotFoundError(DispatchError):
    status_code = status.HTTP_404_NOT_FOUND
    message = NOT_FOUND


class OrderAlreadyTakenError(DispatchError):
    status_code = status.HTTP_409_CONFLICT
    message = ORDER_ALREADY_BEEN_TAKEN


class StorageError(DispatchError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = DATABASE_ERROR


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def dispatch_error_handler(request: Request, exc: DispatchError) -> JSONResponse:
    log = logger.warning if exc.status_code < 500 else logger.error
    log(f"{request.method} {request.url.path} -> {exc.status_code} {exc.detail}: {exc.reason}")
    return error_response(exc.status_code, exc.detail)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    logger.info(f"{request.method} {request.url.path} -> {exc.status_code} {exc.detail}")
    return error_response(exc.status_code, str(exc.detail))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning(f"{request.method} {request.url.path} -> 400 petición inválida: {exc.errors()}")
    return error_response(status.HTTP_400_BAD_REQUEST, BAD_REQUEST)


async def response_validation_handler(request: Request, exc: ResponseValidationError) -> JSONResponse:
    logger.error(f"{request.method} {request.url.path} -> 500 respuesta no serializable: {exc.errors()}")
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, JSON_MARSHALLING_ERROR)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    request_id = getattr(request.state, "request_id", "-")
    logger.exception(f"[{request_id}] {request.method} {request.url.path} -> 500 error no controlado: {exc}")
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_SERVER_ERROR)


def setup_exception_handlers(app: FastAPI):
    """Registrar los handlers que producen el cuerpo {"error": ...}"""
    app.add_exception_handler(DispatchError, dispatch_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ResponseValidationError, response_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
