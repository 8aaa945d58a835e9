"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from poolkeeper.api.deps import get_context, get_registry
from poolkeeper.api.routers import faucet_router, liquidity_router, pools_router, tx_router
from poolkeeper.app_context import AppContext, get_app_context
from poolkeeper.config.logging_config import setup_logging
from poolkeeper.config.settings import get_settings
from poolkeeper.core.exceptions import AppError
from poolkeeper.repositories.sqlalchemy.database import get_session, init_db
from poolkeeper.services import PoolRegistryService

logger = logging.getLogger(__name__)


def load_registry_on_startup(context: AppContext) -> None:
    """Load the pool registry file named in settings, if any."""
    if not context.settings.registry_path:
        return
    session = get_session()
    try:
        context.registry(session).load_registry(context.settings.registry_path)
    finally:
        session.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    setup_logging()
    init_db()
    context = get_app_context()
    load_registry_on_startup(context)
    logger.info("PoolKeeper started on %s", context.settings.network)
    yield
    # Shutdown
    context.close()


settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    description="Off-chain control plane for constant-product liquidity pools",
    version=settings.app_version,
    lifespan=lifespan,
)

# Include routers
app.include_router(pools_router)
app.include_router(tx_router)
app.include_router(liquidity_router)
app.include_router(faucet_router)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Global handler for application errors."""
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "message": exc.message, **exc.details},
    )


@app.get("/health")
def health_check(
    context: AppContext = Depends(get_context),
    registry: PoolRegistryService = Depends(get_registry),
) -> dict:
    """Health check endpoint."""
    return {
        "status": "healthy",
        "network": context.settings.network,
        "pools": len(registry.list_pools()),
    }


@app.get("/")
def root() -> dict[str, str]:
    """Root endpoint with API info."""
    return {
        "app": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
    }
