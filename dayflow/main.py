"""
DAYFLOW Planner API - Main Application

Daily schedule generation and task orchestration. Identity lives
elsewhere: every endpoint trusts the bearer token's `sub` claim.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dayflow.config import settings
from dayflow.database import database
from dayflow.tasks.router import router as tasks_router
from dayflow.scheduling.router import router as schedules_router
from dayflow.generation.router import router as generation_router
from dayflow.preferences.router import router as preferences_router
from dayflow.xp.router import router as xp_router
from dayflow.insights.router import router as insights_router
from dayflow.security import validate_security_config

import logging

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    validate_security_config()
    await database.connect()

    yield

    await database.disconnect()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Energy-aware daily schedules and AI-assisted task planning",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)


@app.get("/health", tags=["Health"])
async def health_check() -> dict:
    """
    Health check endpoint.

    Used by container health checks and load balancers.
    """
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
    }


@app.get("/", tags=["Root"])
async def root() -> dict:
    """Root endpoint with service information."""
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs" if settings.DEBUG else "disabled",
    }


app.include_router(tasks_router)
app.include_router(schedules_router)
app.include_router(generation_router)
app.include_router(preferences_router)
app.include_router(xp_router)
app.include_router(insights_router)
