from __future__ import annotations
import logging
from typing import Awaitable, Callable

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from ...config import Settings
from ...domain.dispatch import ProviderKind
from ...domain.schemas.otp import ErrorOut
from ...services.dispatcher import OtpDispatchHandler, decode_body
from ...services.errors import DispatchError, InternalFault

log = logging.getLogger(__name__)

Endpoint = Callable[[Request], Awaitable[Response]]


def _cors_headers(settings: Settings, handler: OtpDispatchHandler) -> dict[str, str]:
    headers = {"Access-Control-Allow-Origin": settings.CORS_ALLOW_ORIGIN}
    if handler.variant.provider_kind is ProviderKind.IDENTITY:
        headers["Access-Control-Allow-Headers"] = settings.CORS_ALLOW_HEADERS
    return headers


def _error_response(exc: DispatchError, headers: dict[str, str]) -> JSONResponse:
    return JSONResponse(ErrorOut(error=exc.message).model_dump(), status_code=exc.status_code, headers=headers)


def _preflight_endpoint(settings: Settings) -> Endpoint:
    headers = {
        "Access-Control-Allow-Origin": settings.CORS_ALLOW_ORIGIN,
        "Access-Control-Allow-Headers": settings.CORS_ALLOW_HEADERS,
    }

    async def _preflight(_: Request) -> Response:
        return PlainTextResponse("ok", headers=headers)
    return _preflight


def _dispatch_endpoint(settings: Settings, handler: OtpDispatchHandler) -> Endpoint:
    headers = _cors_headers(settings, handler)
    name = handler.variant.name

    async def _dispatch(request: Request) -> Response:
        try:
            body = decode_body(await request.body())
            result = await handler.dispatch(body)
        except DispatchError as exc:
            return _error_response(exc, headers)
        except Exception as exc:
            log.exception("%s failed unexpectedly", name)
            return _error_response(InternalFault(str(exc) or exc.__class__.__name__), headers)
        return JSONResponse(handler.success_body(result), headers=headers)
    return _dispatch


def build_router(settings: Settings, handlers: dict[str, OtpDispatchHandler]) -> APIRouter:
    """One POST (dispatch) and one OPTIONS (preflight) route per variant."""
    router = APIRouter(tags=["otp"])
    preflight = _preflight_endpoint(settings)
    for name, handler in handlers.items():
        path = handler.variant.path
        router.add_api_route(path, preflight, methods=["OPTIONS"], name=f"{name}_preflight", include_in_schema=False)
        router.add_api_route(path, _dispatch_endpoint(settings, handler), methods=["POST"], name=name)
    return router
