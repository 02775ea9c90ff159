import logging
import time
import uuid
from collections.abc import Callable
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException
from starlette.responses import JSONResponse, Response

from coin_api.api.routes import flips, health, metrics
from coin_api.core.config import Settings, get_settings
from coin_api.core.context import build_context
from coin_api.core.logging import client_ip_ctx, configure_logging, request_id_ctx
from coin_api.services.coin import RandomOutcomeGenerator
from coin_api.services.health import always_healthy

logger = logging.getLogger("coin_api")


def create_app(
    settings: Settings | None = None,
    generator: RandomOutcomeGenerator | None = None,
    is_healthy: Callable[[], bool] = always_healthy,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.app_name)

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        logger.info(
            f"Server started. Listening on port {settings.port}.",
            extra={"event": {"host": settings.host, "port": settings.port, "env": settings.env}},
        )
        yield

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.context = build_context(settings, generator=generator, is_healthy=is_healthy)

    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        request_id_ctx.set(request_id)
        if request.client:
            client_ip_ctx.set(request.client.host)
        start = time.monotonic()
        response: Response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        duration_ms = int((time.monotonic() - start) * 1000)
        logging.getLogger("access").info(
            "request",
            extra={
                "event": {
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": duration_ms,
                }
            },
        )
        return response

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response: Response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        return response

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.exception(
            "Unhandled exception",
            extra={
                "event": {
                    "method": request.method,
                    "path": request.url.path,
                    "request_id": getattr(request.state, "request_id", None),
                }
            },
        )
        message = "Internal server error"
        details = None
        if settings.env.lower() != "production":
            message = f"{exc.__class__.__name__}: {exc}"
            details = [{"type": exc.__class__.__name__}]
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": "internal_server_error",
                    "message": message,
                    "request_id": getattr(request.state, "request_id", None),
                    "details": details,
                }
            },
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=422,
            content={
                "error": {
                    "code": "validation_error",
                    "message": "Validation error",
                    "details": jsonable_encoder(exc.errors()),
                    "request_id": getattr(request.state, "request_id", None),
                }
            },
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": {
                    "code": f"http_{exc.status_code}",
                    "message": exc.detail,
                    "request_id": getattr(request.state, "request_id", None),
                }
            },
        )

    app.include_router(flips.router)
    app.include_router(health.router)
    app.include_router(metrics.router)
    return app


def run() -> None:
    settings = get_settings()
    uvicorn.run(
        "coin_api.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
