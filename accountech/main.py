"""
AccounTech Voucher Service
Main Application Entry Point
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .config import config
from .utils.constants import APP_NAME, APP_VERSION
from .utils.exceptions import AccounTechError
from .utils.logger import setup_logger, logger
from .services.database_service import database_service
from .services.draft_session_service import draft_session_service
from .views.json_view import JsonView
from .controllers import (
    audit_router,
    config_router,
    draft_router,
    health_router,
    master_router,
    voucher_router,
)


# Setup logging
setup_logger(
    level=config.logging.level,
    log_file=config.logging.file,
    max_size=config.logging.max_size,
    backup_count=config.logging.backup_count,
    console=config.logging.console,
    colorize=config.logging.colorize
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info(f"{APP_NAME} starting...")
    await database_service.connect()
    await database_service.create_tables()
    logger.info(f"API running on http://{config.api.host}:{config.api.port}")
    yield
    draft_session_service.close_all()
    await database_service.disconnect()
    logger.info(f"{APP_NAME} shutting down...")


# Create FastAPI application
app = FastAPI(
    title=APP_NAME,
    description="Voucher entry and balancing for AccounTech",
    version=APP_VERSION,
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.api.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AccounTechError)
async def accountech_error_handler(request: Request, exc: AccounTechError):
    logger.warning(f"{request.method} {request.url.path} -> {exc.code}: {exc.message}")
    return JsonView.exception(exc)


# Include routers
app.include_router(draft_router, prefix="/api/drafts", tags=["Drafts"])
app.include_router(voucher_router, prefix="/api/vouchers", tags=["Vouchers"])
app.include_router(master_router, prefix="/api/masters", tags=["Masters"])
app.include_router(config_router, prefix="/api/config", tags=["Config"])
app.include_router(health_router, prefix="/api/health", tags=["Health"])
app.include_router(audit_router, prefix="/api/audit", tags=["Audit Trail"])


@app.get("/")
async def root():
    return {
        "name": APP_NAME,
        "version": APP_VERSION,
        "status": "running",
        "docs": "/docs"
    }


@app.get("/api/info")
async def info():
    """System information"""
    return {
        "name": APP_NAME,
        "version": APP_VERSION,
        "database": {
            "path": config.database.path
        },
        "voucher": config.voucher.model_dump(),
        "tax": config.tax.model_dump()
    }
