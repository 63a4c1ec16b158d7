"""Application configuration and router setup."""

import fastapi
from fastapi import Request
from fastapi.middleware import cors
from fastapi.responses import JSONResponse

from ledger.core import init_db
from ledger.core.config import get_settings
from ledger.core.errors import DecodeError, LedgerError, NotFoundError, StorageError, ValidationError
from ledger.core.logging import configure_logging, get_logger
from restapi.endpoints import health_check, sync

logger = get_logger(__name__)

ERROR_STATUS = [
    (ValidationError, 422),
    (NotFoundError, 404),
    (DecodeError, 500),
    (StorageError, 500),
]


async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    """Translate ledger failures into JSON error responses."""
    status_code = next((code for kind, code in ERROR_STATUS if isinstance(exc, kind)), 500)
    if status_code >= 500:
        logger.error("request_failed", path=request.url.path, error=str(exc))
        detail = "Internal ledger error"
    else:
        detail = str(exc)
    return JSONResponse(status_code=status_code, content={"detail": detail})


def create_app(lifespan=init_db.lifespan) -> fastapi.FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL, settings.LOG_JSON)

    app = fastapi.FastAPI(
        title="Personal Ledger",
        description="Sync endpoint for the personal finance ledger",
        version="1.0.0",
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    # Add CORS middleware
    app.add_middleware(
        cors.CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(LedgerError, ledger_error_handler)

    # Include routers
    app.include_router(health_check.router)
    app.include_router(sync.router)

    return app
