"""
Cooking Assistant API - Application Entry Point

The FastAPI backend shares its database, services and settings with the
Streamlit app; it exists for API clients and for the batch Kyutai TTS
route the Streamlit TTS service falls back to.

Architecture Overview:
=====================
- Models (app/models/): Pydantic schemas for request/response validation
- Controllers (app/controllers/): Request handlers
  - auth.py: sign up, sign in, sign out, password reset
  - conversations.py: direct messaging
  - followers.py: follow / unfollow and listings
  - notifications.py: notification list and read state
  - kyutai.py: batch text-to-speech and cached audio
  - example.py: smoke-test route
- Services (services/): Business logic shared with the Streamlit app

Request Flow:
============
1. Request arrives at a Controller endpoint
2. The bearer token (if any) is resolved to a user (app/dependencies.py)
3. Controller validates input using Pydantic Schemas
4. Controller calls Services; AppErrors become HTTP errors
5. Response is serialized using Pydantic Schemas
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.controllers import (
    auth_router,
    conversations_router,
    example_router,
    followers_router,
    kyutai_router,
    notifications_router,
)
from config.database import engine, init_db
from config.logging_config import configure_logging
from config.settings import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    init_db()
    logger.info("Cooking Assistant API started")
    yield


# Create FastAPI application
app = FastAPI(
    title="Cooking Assistant API",
    description="""
    Backend for the Cooking Assistant.

    ## Features
    - Email/password accounts with bearer tokens
    - Direct messaging, followers and notifications
    - Batch Kyutai text-to-speech with cached audio
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS middleware configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify exact origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register controllers (routers)
app.include_router(auth_router)            # /auth endpoints
app.include_router(conversations_router)   # /conversations endpoints
app.include_router(followers_router)       # /followers, /users endpoints
app.include_router(notifications_router)   # /notifications endpoints
app.include_router(kyutai_router)          # /kyutai endpoints
app.include_router(example_router)         # /example endpoints


# ============================================
# Health Check Endpoints
# ============================================

@app.get("/", tags=["health"])
def root():
    """
    Basic health check endpoint.

    Returns a simple status indicating the API is running.
    """
    return {
        "status": "healthy",
        "service": "Cooking Assistant API",
        "version": "1.0.0"
    }


@app.get("/health", tags=["health"])
def health_check():
    """
    Detailed health check endpoint.

    Pings the database and reports whether Claude is configured.
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        database = "error"

    return {
        "status": "healthy" if database == "ok" else "degraded",
        "database": database,
        "claude": "configured" if get_settings().anthropic_api_key else "not_configured",
    }
