"""
FastAPI application entry point
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from vaultdao import __version__
from vaultdao.core.common.errors import DomainError
from vaultdao.infrastructure.settings import get_settings
from vaultdao.infrastructure.logging_config import setup_logging
from vaultdao.api.exceptions import (
    domain_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    general_exception_handler,
)
from vaultdao.api.public.health import router as health_router
from vaultdao.api.public.metrics import router as metrics_router
from vaultdao.api.v1 import router as api_v1_router
from vaultdao.api.admin import router as admin_router
from vaultdao.utils.trace_id import TraceIDMiddleware
from vaultdao.utils.request_logging import RequestLoggingMiddleware

# Register every model before the first mapper use
import vaultdao.models  # noqa: F401

# Get settings
settings = get_settings()

# Setup logging
setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="VaultDAO Core API",
    description="Vault lifecycle, asset ledger and governance API",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

if settings.CORS_ENABLED:
    cors_origins = settings.cors_allow_origins_list
    cors_methods = settings.cors_allow_methods_list or ["*"]
    cors_headers = settings.cors_allow_headers_list or ["*"]

    if not cors_origins:
        logger.warning(
            "CORS_ENABLED=True but CORS_ALLOW_ORIGINS is empty or not set. "
            "Set CORS_ALLOW_ORIGINS (comma-separated, e.g., 'http://localhost:3000')."
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_methods=cors_methods,
        allow_headers=cors_headers,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    )

# Add custom middlewares (order matters - last added is outermost)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(TraceIDMiddleware)

# Register exception handlers
app.add_exception_handler(DomainError, domain_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

# Register routers
app.include_router(health_router)
app.include_router(metrics_router)
app.include_router(api_v1_router)
app.include_router(admin_router)


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "name": "VaultDAO Core API",
        "version": __version__,
        "status": "running",
    }
