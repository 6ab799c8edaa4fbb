from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from .composition import register_in_memory_clients
from .config import Settings
from .logging_config import get_logger

logger = get_logger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create a routed FastAPI app with in-process clients.

    Runtime wiring (Redis, SendGrid, the sweep task) is done by
    ``composition.wire_app`` at startup; tests can use this app as-is.
    """
    if settings is None:
        settings = Settings()

    app = FastAPI(title="BUNGU SQUAD verification")
    register_in_memory_clients(app, settings)

    from .metrics import metrics_response
    from .middleware.metrics_middleware import MetricsMiddleware
    from .routers import health, verification, version

    app.include_router(health.router)
    app.include_router(verification.router)
    app.include_router(version.router)

    app.add_middleware(MetricsMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.get("/metrics")
    async def _metrics():
        data, content_type = metrics_response()
        return Response(content=data, media_type=content_type)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(request: Request, exc: RequestValidationError):
        logger.debug("request_validation_failed", path=request.url.path, errors=str(exc.errors()))
        return JSONResponse(status_code=400, content={"error": "Invalid request body"})

    return app


__all__ = ["create_app"]
