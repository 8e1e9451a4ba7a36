from typing import Optional

import httpx
from fastapi import FastAPI
from .config import Settings, get_settings
from .api.routers import health as health_router
from .api.routers import metrics as metrics_router
from .api.routers.otp import build_router as build_otp_router
from .observability.logging import setup_logging
from .middleware.request_context import RequestContextMiddleware
from .observability.metrics import MetricsHTTPMiddleware
from .services.factory import build_handlers
import uvicorn


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title=settings.APP_NAME, debug=settings.DEBUG)

    # handlers are built once and shared by every request
    handlers = build_handlers(settings, transport)
    app.state.settings = settings
    app.state.dispatch_handlers = handlers

    app.add_middleware(RequestContextMiddleware, header=settings.REQUEST_ID_HEADER)
    app.add_middleware(MetricsHTTPMiddleware)

    app.include_router(health_router.router)
    app.include_router(metrics_router.router)
    app.include_router(build_otp_router(settings, handlers))

    return app


settings = get_settings()
setup_logging(settings.LOG_LEVEL)
app = create_app(settings)


if __name__ == "__main__":
    uvicorn.run("otp_relay.main:app", host=settings.APP_HOST, port=settings.APP_PORT, reload=settings.DEBUG)
