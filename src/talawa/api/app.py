"""
Main FastAPI application for the Talawa API
"""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config import settings
from ..database import init_database
from ..database.connection import test_database_connection
from ..logging import configure_logging, get_logger
from ..middleware import LoggingContextMiddleware

# Configure logging before creating logger
configure_logging(debug=settings.debug)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger.info("Starting Talawa API...", environment=settings.environment)
    init_database()

    connected, error = await test_database_connection()
    if not connected:
        # The API still starts; requests fail until the database is reachable
        logger.error("Database connection check failed", error=error)
    else:
        logger.info("Database initialized")

    yield

    # Shutdown
    logger.info("Shutting down Talawa API...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="Talawa API",
        description="GraphQL API for community and organization management",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )

    # Add logging context middleware
    app.add_middleware(LoggingContextMiddleware)

    # CORS configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health check endpoint
    @app.get("/health")
    async def health_check():  # pyright: ignore [reportUnusedFunction]
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    # GraphQL endpoint (allow disabling for tests)
    if not os.getenv("TALAWA_DISABLE_GRAPHQL"):
        from ..graphql.schema import create_graphql_router

        graphql_ide = None if settings.environment == "production" else "graphiql"
        app.include_router(create_graphql_router(graphql_ide=graphql_ide))
        logger.info("GraphQL endpoint mounted", endpoint="/graphql", ide=graphql_ide)

    return app


# Create the main application instance
app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "talawa.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_level=settings.log_level.lower(),
    )
