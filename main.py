"""
FastAPI application entry point for the batch layout sync service.
"""

# Load .env before anything reads settings
from dotenv import load_dotenv
load_dotenv()

import logging
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from layout_sync.api.layout import router as layout_router
from layout_sync.config import get_settings
from layout_sync.logging_config import setup_logging

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""

    settings = get_settings()
    setup_logging()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description=(
            "Groups batch images whose detected text blocks share a layout and "
            "propagates one image's block positions and styles to the rest of its group."
        ),
        version=settings.VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # CORS middleware
    cors_origins = [o.strip() for o in settings.BACKEND_CORS_ORIGINS.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins if cors_origins else ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(layout_router)

    logger.info(
        f"{settings.PROJECT_NAME} {settings.VERSION} ready "
        f"(threshold={settings.LAYOUT_GROUP_THRESHOLD}, max batch={settings.MAX_BATCH_IMAGES})"
    )
    return app


# Application instance
app = create_app()


def run():
    """Run the application with uvicorn."""
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )


if __name__ == "__main__":
    run()
