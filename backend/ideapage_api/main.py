"""FastAPI application entry point"""

import logging
import os
import sys
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ideapage_api.api import content, generator, pages
from ideapage_api.core.config import Settings, settings as default_settings
from ideapage_api.core.services import Services, build_services


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once, overriding any earlier configuration"""
    logging.basicConfig(
        level=level.upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        force=True,
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )
    for name in ("uvicorn", "uvicorn.access", "uvicorn.error"):
        logging.getLogger(name).setLevel(level.upper())


logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, services: Optional[Services] = None) -> FastAPI:
    """Build the application; services are resolved once here and shared by all requests"""
    settings = settings or default_settings

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.services = services or build_services(settings)

    @app.on_event("startup")
    async def startup_event():
        """Log startup diagnostic information"""
        store_config = app.state.services.store_config
        logger.info("=" * 60)
        logger.info("IDEA PAGE SERVICE STARTING")
        logger.info("=" * 60)
        logger.info(f"PID: {os.getpid()}")
        logger.info(f"Store backend: {store_config.backend} (persistent={store_config.persistent})")
        logger.info(f"Model: {settings.openai_model}")
        logger.info("=" * 60)

    @app.on_event("shutdown")
    async def shutdown_event():
        """Close backends and clients"""
        logger.info("Shutting down idea page service...")
        await app.state.services.close()
        logger.info("Shutdown complete")

    @app.get("/")
    async def root():
        """Health check endpoint"""
        return {"status": "healthy", "version": settings.api_version}

    @app.get("/health")
    async def health():
        """Health check for monitoring"""
        return {"status": "healthy", "store": app.state.services.store_config.backend}

    # Register routes
    app.include_router(generator.router, prefix="/api", tags=["generator"])
    app.include_router(content.router, prefix="/api", tags=["content"])
    app.include_router(pages.router, tags=["pages"])

    return app


configure_logging(default_settings.log_level)
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "ideapage_api.main:app",
        host="0.0.0.0",
        port=8000,
        log_level=default_settings.log_level.lower(),
    )
