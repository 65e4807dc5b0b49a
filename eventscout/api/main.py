"""
FastAPI application for Event Scout.

Serve with: uvicorn eventscout.api.main:run --factory
"""

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()

from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from eventscout import __version__
from eventscout.config import get_search_settings
from eventscout.db import close_db, init_db
from eventscout.search import SearchOrchestrator
from eventscout.services import PostgresContentRepository, PostgresInteractionTracker
from .routers import search_router

logger = logging.getLogger(__name__)


def create_app(orchestrator: Optional[SearchOrchestrator] = None) -> FastAPI:
    """
    Build the API application.

    Args:
        orchestrator: Pre-wired orchestrator; when omitted one is built from
            settings on startup, backed by PostgreSQL

    Returns:
        FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown events"""
        logger.info("Starting Event Scout API...")
        owns_db = orchestrator is None

        if owns_db:
            settings = get_search_settings()
            pool = await init_db(settings.database)
            app.state.orchestrator = SearchOrchestrator.from_settings(
                repository=PostgresContentRepository(pool, event_limit=settings.database.event_limit),
                settings=settings,
                tracker=PostgresInteractionTracker(pool)
            )
            logger.info("Database initialized")
        else:
            app.state.orchestrator = orchestrator

        yield

        logger.info("Shutting down Event Scout API...")
        await app.state.orchestrator.aclose()
        if owns_db:
            await close_db()

    app = FastAPI(
        title="Event Scout API",
        description="Natural-language search over local events and community listings",
        version=__version__,
        lifespan=lifespan
    )

    # CORS middleware - allow all origins for development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "version": __version__
        }

    app.include_router(search_router)
    return app


def run() -> FastAPI:
    """Application factory with logging configured, for ASGI servers."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    return create_app()
