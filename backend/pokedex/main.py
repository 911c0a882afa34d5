"""
Pokedex Backend — FastAPI Application Factory
==============================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes middleware registration, route mounting, error mapping
       and the record store lifecycle in one place.
How:   create_app() returns a configured FastAPI instance.
Who:   uvicorn (uvicorn pokedex.main:app) and the test suite.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware:  Request ID → Logging → CORS           │
    │                                                     │
    │  Routes:      /pokemons  /assets/{path}  /health    │
    │                                                     │
    │  Exception Handlers:                                │
    │  Validation→400 │ NotFound→404 │ Database→500       │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → Database (engine + tables) → asset directory
    Shutdown: dispose engine (close pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pokedex import __version__
from pokedex.config import settings
from pokedex.database import Database
from pokedex.exceptions import DatabaseError, NotFoundError, PokedexError, ValidationError
from pokedex.middleware.logging import RequestLoggingMiddleware
from pokedex.middleware.request_id import RequestIDMiddleware, request_id_var
from pokedex.routes import assets, health, pokemons
from pokedex.services.image_resolver import ImageResolver
from pokedex.services.pokemon_service import PokemonService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: 2024-01-15T12:00:00 [INFO] pokedex.services.pokemon_service: ...
    Called once during startup, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries log every query / connection at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Connect the record store on startup and release it on shutdown.

    A store that cannot be reached at startup aborts the boot: serving
    requests without persistence would turn every call into a 500.
    """
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("Pokedex Backend starting up...")

    database = Database(app.state.database_url)
    try:
        await database.create_schema()
    except Exception as e:
        logger.error("Record store connection failed: %s", str(e))
        await database.dispose()
        raise
    app.state.database = database

    service: PokemonService = app.state.pokemon_service
    service.image_resolver.ensure_asset_dir()
    logger.info("Asset directory: %s", service.image_resolver.asset_dir)
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Pokedex Backend shutting down...")
    await database.dispose()
    app.state.database = None
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to status codes and the ErrorResponse body.

        ValidationError / RequestValidationError → 400
        NotFoundError                           → 404
        DatabaseError                           → 500 (generic message)
        PokedexError / Exception                → 500 (generic message)

    Internal details (driver errors, stack traces) are logged, never returned.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s", rid, exc.message)
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": exc.message,
                "details": exc.context,
                "request_id": rid,
            },
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        errors = [
            {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": "Invalid request",
                "details": {"errors": errors},
                "request_id": rid,
            },
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        rid = request_id_var.get("")
        return JSONResponse(
            status_code=404,
            content={
                "error": "not_found",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": "Internal Server Error",
                "request_id": rid,
            },
        )

    @app.exception_handler(PokedexError)
    async def handle_application_error(request: Request, exc: PokedexError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": "Internal Server Error",
                "request_id": rid,
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "Internal Server Error",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    database_url: Optional[str] = None,
    assets_root: Optional[str] = None,
    public_base_url: Optional[str] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        database_url: Record store URL (default settings.database_url)
        assets_root: Directory for image assets (default settings.assets_root)
        public_base_url: Base of stored image URIs (default settings.public_base_url)

    The store itself is opened by the lifespan handler, not here, so
    creating an app never touches the network.
    """
    app = FastAPI(
        title="Pokedex API",
        description="Paginated CRUD over pokemon records with image asset handling.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    resolver = ImageResolver(assets_root=assets_root, public_base_url=public_base_url)
    app.state.database_url = database_url or settings.database_url
    app.state.database = None
    app.state.assets_root = resolver.assets_root
    app.state.pokemon_service = PokemonService(image_resolver=resolver)

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(pokemons.router)
    app.include_router(assets.router)
    app.include_router(health.router)

    return app


# uvicorn expects `pokedex.main:app` to be importable
app = create_app()
