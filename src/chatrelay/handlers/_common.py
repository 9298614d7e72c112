"""Shared per-request context passed to every handler."""

from __future__ import annotations

from dataclasses import dataclass

from chatrelay.ai_gateway import AIGateway
from chatrelay.delivery import MessageDelivery
from chatrelay.formatting import TelegramMarkdownFormatter
from chatrelay.models import ModelRegistry
from chatrelay.store import ConversationConfig, ConversationId, ConversationStore, Turn


@dataclass
class ChatContext:
    """Everything a handler needs for one inbound message.

    Handlers receive a ChatContext and never touch the webhook payload.
    """

    chat_id: ConversationId
    text: str
    args: str
    store: ConversationStore
    registry: ModelRegistry
    gateway: AIGateway
    delivery: MessageDelivery

    @property
    def config(self) -> ConversationConfig:
        return self.store.get_config(self.chat_id)

    @property
    def session(self) -> list[Turn]:
        return self.store.get_session(self.chat_id)

    @property
    def formatter(self) -> TelegramMarkdownFormatter:
        return self.delivery.fmt

    async def reply(self, text: str, *, formatted: bool = False) -> None:
        """Send bot-authored text back to the chat."""
        await self.delivery.send(self.chat_id, text, formatted=formatted)
