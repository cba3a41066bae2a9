"""
FastAPI application entry point for the cookbook assistant.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cookbook.api.routes import router as api_router
from cookbook.config import get_settings
from cookbook.services import Services, build_services

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for an entry point."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def create_app(services: Optional[Services] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        services: Pre-built components (tests); built from settings
            at startup when omitted

    Returns:
        FastAPI app
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler for startup/shutdown."""
        owned = services is None
        if owned:
            settings = get_settings()
            configure_logging(settings.log_level)
            logger.info("Starting cookbook assistant")
            app.state.services = build_services(settings)
        else:
            app.state.services = services

        stats = app.state.services.parent_store.get_stats()
        logger.info(
            f"Parent store ready with {stats.get('total_parent_chunks', 0)} parent chunks, "
            f"vector store with {app.state.services.vector_store.count()} child chunks"
        )

        yield

        # Shutdown
        logger.info("Shutting down cookbook assistant")
        if owned:
            app.state.services.close()

    app = FastAPI(
        title="Cookbook Assistant",
        description="A RAG-powered assistant for recipes and company guides",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    return app


app = create_app()


def main():
    """Run the application with uvicorn."""
    import uvicorn
    settings = get_settings()
    configure_logging(settings.log_level)

    uvicorn.run(
        "cookbook.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
