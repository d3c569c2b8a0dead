"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api import inventory, recipes
from src.api.errors import register_exception_handlers
from src.config import get_settings
from src.database import create_db_engine, create_session_factory

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown events."""
    # Startup: the engine and session factory live for the process
    engine = create_db_engine(settings.database_url)
    app.state.session_factory = create_session_factory(engine)
    logger.info(f"Pantry API starting ({settings.environment})")
    yield
    # Shutdown: release pooled connections
    engine.dispose()


app = FastAPI(
    title="Pantry Tracker API",
    description="Household pantry tracking with receipt scanning and recipe suggestions",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware for development
if settings.is_development:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

register_exception_handlers(app)

# Register routers
app.include_router(inventory.router)
app.include_router(recipes.router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "environment": settings.environment}
