"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from unittest.mock import AsyncMock

import httpx
import pytest

from chatrelay.ai_gateway import AIGateway
from chatrelay.delivery import MessageDelivery
from chatrelay.models import ModelRegistry
from chatrelay.router import CommandRouter
from chatrelay.store import ConversationStore, InMemoryStore

AI_BASE_URL = "https://ai.test"


def make_gateway(
    handler: Callable[[httpx.Request], httpx.Response],
    registry: ModelRegistry | None = None,
    **kwargs,
) -> AIGateway:
    """Build an AIGateway whose HTTP calls are answered by ``handler``."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return AIGateway(
        registry or ModelRegistry.from_base_url(AI_BASE_URL), client=client, **kwargs
    )


def sent_texts(bot: AsyncMock) -> list[str]:
    """Texts of every send_message call made on a mock bot, in order."""
    return [c.kwargs["text"] for c in bot.send_message.call_args_list]


@pytest.fixture
def registry() -> ModelRegistry:
    return ModelRegistry.from_base_url(AI_BASE_URL)


@pytest.fixture
def store() -> ConversationStore:
    """Provide a fresh in-memory ConversationStore."""
    return ConversationStore(InMemoryStore())


@pytest.fixture
def bot() -> AsyncMock:
    """Mock telegram.Bot recording every API call."""
    return AsyncMock()


@pytest.fixture
def delivery(bot: AsyncMock) -> MessageDelivery:
    return MessageDelivery(bot, typing_interval=0.01)


@pytest.fixture
def ai_replies() -> list:
    """Queue of AI answers; each item is a JSON body, an httpx.Response or an exception."""
    return []


@pytest.fixture
def ai_requests() -> list[httpx.Request]:
    """Every request the mock AI endpoint received."""
    return []


@pytest.fixture
def gateway(registry, ai_replies, ai_requests) -> AIGateway:
    """AIGateway backed by the ``ai_replies`` queue."""

    def handler(request: httpx.Request) -> httpx.Response:
        ai_requests.append(request)
        item = ai_replies.pop(0) if ai_replies else {"response": "ok"}
        if isinstance(item, Exception):
            raise item
        if isinstance(item, httpx.Response):
            return item
        return httpx.Response(200, json=item)

    return make_gateway(handler, registry)


@pytest.fixture
def router(store, registry, gateway, delivery) -> CommandRouter:
    return CommandRouter(store, registry, gateway, delivery)
