"""FastAPI application factory and server startup."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from telegram import Bot
from telegram.error import TelegramError

from chatrelay.ai_gateway import AIGateway
from chatrelay.config import Config
from chatrelay.delivery import MessageDelivery
from chatrelay.router import CommandRouter
from chatrelay.store import ConversationStore, InMemoryStore

logger = logging.getLogger(__name__)


def _build_bot(config: Config) -> Bot | None:
    if not config.has_token:
        logger.error("BOT_TOKEN is not set! Replies will not be delivered.")
        return None
    return Bot(config.bot_token)


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    delivery: MessageDelivery = app.state.delivery
    bot = delivery.bot
    if bot is not None:
        try:
            await bot.initialize()
        except TelegramError:
            logger.error("Failed to initialize Telegram bot", exc_info=True)
    logger.info("Relay ready, webhook at %s", app.state.config.webhook_path)
    try:
        yield
    finally:
        await app.state.gateway.aclose()
        if bot is not None:
            await bot.shutdown()


def create_app(
    config: Config | None = None,
    *,
    bot: Bot | None = None,
    gateway: AIGateway | None = None,
    store: ConversationStore | None = None,
) -> FastAPI:
    """Create the webhook app with its shared state.

    ``bot``, ``gateway`` and ``store`` default to instances built from
    ``config``; pass them in to substitute fakes.
    """
    if config is None:
        config = Config.from_env()

    logger.info(
        "Starting relay (env=%s, token set=%s)", config.app_env, config.has_token
    )
    registry = config.model_registry()

    if bot is None:
        bot = _build_bot(config)
    delivery = MessageDelivery(
        bot,
        chunk_size=config.chunk_size,
        typing_interval=config.typing_interval,
    )
    if gateway is None:
        gateway = AIGateway(
            registry,
            timeout=config.ai_timeout,
            history_window=config.history_window,
        )
    if store is None:
        store = ConversationStore(
            InMemoryStore(),
            default_model=config.default_model,
            max_turns=config.max_session_turns,
            keep_turns=config.keep_session_turns,
        )

    app = FastAPI(
        title="chatrelay",
        docs_url=None,
        redoc_url=None,
        lifespan=_lifespan,
    )

    # Store shared references on app.state
    app.state.config = config
    app.state.store = store
    app.state.delivery = delivery
    app.state.gateway = gateway
    app.state.router = CommandRouter(store, registry, gateway, delivery)

    from chatrelay.api.routes import webhook

    app.include_router(webhook.router, prefix=config.webhook_path)
    return app


def run_server(app: FastAPI, host: str = "0.0.0.0", port: int = 8000) -> None:
    """Serve the app with uvicorn (blocking)."""
    import uvicorn

    uvicorn.run(app, host=host, port=port, log_level="info", access_log=False)
