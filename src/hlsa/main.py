"""HLSA FastAPI Application.

Main entry point for the Human-Likeness Scoring Assistant API.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hlsa.config import get_settings
from hlsa.api.routes import router
from hlsa.utils.text import ensure_vader_lexicon


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger.info("Starting HLSA server...")
    settings = get_settings()
    logger.info(f"LLM server: {settings.llm_base_url} (model {settings.llm_model})")
    if not settings.llm_api_key:
        logger.warning("LLM_API_KEY not set; LLM-backed judges will return fallback scores")
    logger.info(f"Storage: {'enabled' if settings.storage_enabled else 'memory only'} at {settings.data_path}")

    # Sentiment scoring needs the VADER lexicon
    ensure_vader_lexicon()

    yield

    # Shutdown
    logger.info("Shutting down HLSA server...")


def create_app() -> FastAPI:
    """Create and configure FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    get_settings()  # This validates the LLM endpoint settings

    app = FastAPI(
        title="HLSA - Human-Likeness Scoring Assistant",
        description="Scores free-text answers and typing cadence for human-likeness",
        version="0.1.0",
        lifespan=lifespan,
    )

    # CORS for local development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Restrict in production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8080)
