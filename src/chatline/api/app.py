"""
Main FastAPI application for Chatline backend
"""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..config import settings
from ..database import init_database
from ..database.connection import check_database_connection, dispose_database
from ..events.bus import close_event_bus, get_event_bus
from ..logging import configure_logging, get_logger
from ..middleware import LoggingContextMiddleware
from ..redis_pool import check_redis_health

configure_logging(debug=settings.debug)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting Chatline API...")
    init_database()
    logger.info("Database initialized")

    get_event_bus()

    yield

    logger.info("Shutting down Chatline API...")
    await close_event_bus()
    await dispose_database()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="Chatline API",
        description="Conversations with participant-filtered real-time events",
        version="0.1.0",
        lifespan=lifespan,
        debug=settings.debug,
    )

    app.add_middleware(LoggingContextMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health_check():  # pyright: ignore [reportUnusedFunction]
        """Report database reachability, and Redis when it carries the event bus."""
        checks: dict[str, str] = {}

        db_ok, db_error = await check_database_connection()
        checks["database"] = "ok" if db_ok else "unavailable"
        if not db_ok:
            logger.warning("Health check: database unavailable", error=db_error)

        if settings.event_bus_backend == "redis":
            checks["redis"] = "ok" if await check_redis_health() else "unavailable"

        healthy = all(status == "ok" for status in checks.values())
        return JSONResponse(
            status_code=200 if healthy else 503,
            content={
                "status": "healthy" if healthy else "unhealthy",
                "version": "0.1.0",
                "checks": checks,
            },
        )

    # GraphQL endpoint (allow disabling for tests)
    if not os.getenv("CHATLINE_DISABLE_GRAPHQL"):
        try:
            from ..graphql.schema import create_graphql_router, validate_schema

            logger.info("Validating GraphQL schema...")
            validate_schema()

            app.include_router(create_graphql_router(), prefix="")
            logger.info("GraphQL endpoint initialized successfully", endpoint="/graphql")
        except Exception as e:  # pragma: no cover
            logger.error("Failed to initialize GraphQL endpoint", error=str(e))
            raise

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "chatline.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_level=settings.log_level.lower(),
    )
