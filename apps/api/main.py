"""
IG Boost - FastAPI Backend
Main application entry point: Instagram account management and automation.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import settings, validate_security_settings
from database import build_engine
import models  # noqa: F401
from routers import (
    health,
    auth,
    instagram,
    activity,
    automation,
    admin,
)
from services.automation import ActionRegistry, AutomationOrchestrator
from services.entity_store import EntityStore
from services.instagram import InstagramClient, build_http_client
from services.users import seed_admin_user

logging.basicConfig(
    level=getattr(logging, str(settings.LOG_LEVEL).upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    # Startup
    logger.info("🚀 Starting IG Boost API...")
    validate_security_settings()

    store = EntityStore(build_engine(settings.DATABASE_URL))
    if settings.AUTO_CREATE_DB_SCHEMA:
        await store.create_schema()
        logger.info("🗄️ Database schema verified.")
    await seed_admin_user(store)

    http_client = build_http_client()
    instagram_client = InstagramClient(http_client)
    registry = ActionRegistry(instagram_client)

    app.state.store = store
    app.state.instagram_client = instagram_client
    app.state.orchestrator = AutomationOrchestrator(store, registry)
    try:
        yield
    finally:
        # Shutdown
        await http_client.aclose()
        await store.dispose()
        logger.info("👋 Shutting down API...")


app = FastAPI(
    title="IG Boost API",
    description="Manage Instagram accounts and session cookies, and run audited automation actions",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(instagram.router, prefix="/instagram", tags=["Instagram"])
app.include_router(activity.router, prefix="/activity-logs", tags=["Activity"])
app.include_router(automation.router, prefix="/automation", tags=["Automation"])
app.include_router(admin.router, prefix="/admin", tags=["Admin"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "IG Boost API",
        "version": "0.1.0",
        "status": "running"
    }
