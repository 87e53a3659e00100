"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api.routes import api_router
from app.domain.services.classification_service import LLMClassifier
from app.domain.services.outbound_dispatcher import OutboundDispatcher
from app.infrastructure.redis import redis_client
from app.infrastructure.telephony.factory import get_messaging_provider
from app.llm.factory import get_llm_client
from app.logging_config import setup_logging
from app.settings import settings

# Setup logging
setup_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager.

    Builds the process-wide collaborators once: the classifier around the
    LLM client and the dispatcher around the messaging provider.
    """
    # Startup
    await redis_client.connect()

    llm_client = get_llm_client(config=settings)
    provider = get_messaging_provider(settings)
    app.state.classifier = LLMClassifier(llm_client, timeout_seconds=settings.classification_timeout_seconds)
    app.state.dispatcher = OutboundDispatcher.from_settings(provider, settings)
    logger.info(
        "Intake pipeline ready",
        extra={"environment": settings.environment, "messaging_enabled": provider is not None},
    )

    yield

    # Shutdown
    if provider is not None:
        await provider.aclose()
    await llm_client.aclose()
    await redis_client.disconnect()


# Create FastAPI app
app = FastAPI(
    title="Condo Intake API",
    description="Inbound resident message intake and routing for condominium buildings",
    version="0.1.0",
    lifespan=lifespan,
)

# Include API routes
app.include_router(api_router, prefix=settings.api_v1_prefix)


@app.get("/health")
async def health_check():
    """Health check endpoint for Cloud Run."""
    return {"status": "healthy"}
