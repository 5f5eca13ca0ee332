import socket
from contextlib import asynccontextmanager
from typing import Final

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from .application.catalog_service import ensure_catalog
from .config import settings
from .domain.exceptions import DomainError, PersistenceError
from .infrastructure.database.database import get_main_engine, init_db
from .logging_config import get_logger, setup_logging
from .logging_utils import log_startup
from .middleware import log_requests_middleware
from .presentation.api_routes import api_router
from .presentation.error_handlers import (
    handle_domain_error,
    handle_request_validation_error,
    handle_server_error,
)
from .telemetry import setup_telemetry


@asynccontextmanager
async def lifespan(_app: FastAPI):
    setup_logging()
    logger = get_logger(__name__)

    engine = get_main_engine()
    init_db(engine)
    logger.info("Database initialized", dialect=engine.dialect.name)

    if settings.seed_on_startup:
        with Session(engine) as session:
            if ensure_catalog(session):
                logger.info("Empty catalog seeded at startup")

    hostname = socket.gethostname()
    try:
        ip_addr = socket.gethostbyname(hostname)
    except OSError:
        ip_addr = "unknown"
    log_startup(hostname, ip_addr, engine.dialect.name, settings.seed_on_startup)

    yield

    logger.info("Application shutdown completed")


app: Final = FastAPI(
    title=settings.app_name,
    version=settings.version,
    debug=settings.debug,
    lifespan=lifespan,
    description="""
**Custom Car Configurator** - build a car from a fixed catalog of features.

## Catalog

Each feature (Exterior, Roof, Wheels, Interior) offers mutually exclusive
options with a price delta. A car holds at most one option per feature.

## Rules

Selections are validated on every create and replace. Convertible-only
options (Panoramic Sunroof, Convertible Soft Top) require `isConvertible`.
`POST /api/selections/check` runs the same rules without saving.

## Pricing

Prices are stored and summed as integer cents. `total_price` is the display
value with two decimals.
    """.strip(),
    license_info={
        "name": "MIT License",
        "url": "https://opensource.org/licenses/MIT",
    },
    openapi_tags=[
        {"name": "catalog", "description": "Features and their options"},
        {"name": "cars", "description": "Create, replace and delete custom cars"},
    ],
)

setup_telemetry(app)

app.middleware("http")(log_requests_middleware)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    """Global handler for domain-specific errors."""
    logger = get_logger(__name__)
    log = logger.error if isinstance(exc, PersistenceError) else logger.warning
    log(
        "Domain error occurred",
        error_type=type(exc).__name__,
        error_message=str(exc),
        path=request.url.path,
        method=request.method,
    )
    return handle_domain_error(exc, request)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Global handler for Pydantic validation errors."""
    logger = get_logger(__name__)
    logger.warning(
        "Request validation error occurred",
        errors=exc.errors(),
        path=request.url.path,
        method=request.method,
    )
    return handle_request_validation_error(exc, request)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    """Global handler for database errors raised outside a repository transaction."""
    logger = get_logger(__name__)
    logger.error(
        "Database error occurred",
        error_type=type(exc).__name__,
        error_message=str(exc),
        path=request.url.path,
        method=request.method,
        exc_info=True,
    )
    return handle_server_error(request)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Global handler for unexpected errors."""
    logger = get_logger(__name__)
    logger.error(
        "Unexpected error occurred",
        error_type=type(exc).__name__,
        error_message=str(exc),
        path=request.url.path,
        method=request.method,
        exc_info=True,
    )
    return handle_server_error(request)


@app.get("/health", tags=["catalog"], include_in_schema=False)
async def health() -> dict[str, str]:
    return {"status": "ok"}


app.include_router(api_router)
