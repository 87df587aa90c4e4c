"""FastAPI application entry point."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from pickleai.api.chat import router as chat_router
from pickleai.api.deps import SessionRegistryDep
from pickleai.api.exceptions import register_exception_handlers
from pickleai.api.models import HealthResponse
from pickleai.configs.config import get_app_config
from pickleai.core.chat.registry import SessionRegistry
from pickleai.core.chat.session import ChatSession
from pickleai.core.llm import ChatModelClient, get_llm
from pickleai.core.metrics import setup_metrics
from pickleai.core.security import SecurityGate, build_rate_limit_store
from pickleai.infra.logging import setup_logging
from pickleai.infra.redis import build_redis

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Wire the policy gate, the language model and the session registry."""
    config = get_app_config()
    setup_logging(config.logging)
    logger.info("Starting PickleAI application...")

    async with build_redis(config) as redis:
        gate = SecurityGate(build_rate_limit_store(redis), config.security)
        llm_client = ChatModelClient(
            get_llm(config.llm), config.llm, config.chat.max_history_messages
        )

        def new_session() -> ChatSession:
            return ChatSession(llm_client, gate, config.chat)

        registry = SessionRegistry(
            new_session,
            config.api.max_sessions,
            config.api.session_idle_timeout,
        )
        app.state.gate = gate
        app.state.registry = registry
        try:
            yield
        finally:
            logger.info("Shutting down PickleAI application...")
            registry.clear()
            await gate.aclose()


def get_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="PickleAI",
        description="Pickleball assistant with intent routing and a policy gate",
        version="0.1.0",
        lifespan=lifespan,
    )

    register_exception_handlers(app)
    app.include_router(chat_router)

    @app.get("/health", response_model=HealthResponse)
    async def health(registry: SessionRegistryDep) -> HealthResponse:
        return HealthResponse(sessions=len(registry))

    setup_metrics(app)
    return app


app = get_app()
