"""FastAPI server for the Kiosk Ledger.

Main entry point for the API server:

    uvicorn api.server:app
"""

import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routes import (
    health,
    catalog,
    orders,
    recycle,
    metrics,
)
from api.services.kiosk import KioskService, build_kiosk
from core import __version__
from core.config import KioskSettings
from core.errors import KioskError, ValidationError
from core.observability import configure_logging, get_logger, with_correlation
from models.api_responses import ErrorResponse


logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def _lifespan(settings: Optional[KioskSettings], kiosk: Optional[KioskService]):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan handler: opens and closes the store."""
        # Startup
        resolved = settings or KioskSettings.from_env()
        configure_logging(level=resolved.log_level, json_format=resolved.log_json, force=True)
        owned = kiosk is None
        app.state.kiosk = kiosk or build_kiosk(resolved)
        logger.info("Kiosk API starting up", extra_fields={"db_path": app.state.kiosk.store.db_path})

        yield

        # Shutdown
        logger.info("Kiosk API shutting down")
        if owned:
            app.state.kiosk.close()

    return lifespan


async def bind_request_id(request: Request, call_next):
    """Tag every log line of a request with its id (client supplied or new)."""
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
    with with_correlation(request_id=request_id):
        response = await call_next(request)
    response.headers[REQUEST_ID_HEADER] = request_id
    return response


async def kiosk_error_handler(request: Request, exc: KioskError) -> JSONResponse:
    """Render any KioskError as {"error", "code", "details"} with its status."""
    body = ErrorResponse(error=exc.message, code=exc.code, details=exc.details)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(mode="json"))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies use the same envelope as ValidationError."""
    error = ValidationError(
        "request body invalid",
        {"errors": [
            {"loc": list(e.get("loc", ())), "msg": e.get("msg", "")}
            for e in exc.errors()
        ]},
    )
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


def create_app(
    settings: Optional[KioskSettings] = None,
    kiosk: Optional[KioskService] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Settings used to build the kiosk (default: from the environment)
        kiosk: An already-assembled KioskService; the app will not close it
    """
    app = FastAPI(
        title="Kiosk Ledger API",
        description="Vending kiosk orders, payments, deposit returns and dashboard metrics",
        version=__version__,
        lifespan=_lifespan(settings, kiosk),
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Kiosk front end is served from another origin
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.middleware("http")(bind_request_id)

    app.add_exception_handler(KioskError, kiosk_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    # Include routers
    app.include_router(health.router, prefix="/api", tags=["Health"])
    app.include_router(catalog.router, prefix="/api", tags=["Catalog"])
    app.include_router(orders.router, prefix="/api", tags=["Orders"])
    app.include_router(recycle.router, prefix="/api/recycle", tags=["Recycling"])
    app.include_router(metrics.router, prefix="/api/metrics", tags=["Metrics"])

    return app


# Default app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("api.server:app", host="0.0.0.0", port=8000, reload=True)
