"""Routes an inbound chat message to a command handler or the AI chat flow."""

from __future__ import annotations

import logging
from collections.abc import Callable, Coroutine

from chatrelay.ai_gateway import AIGateway
from chatrelay.delivery import MessageDelivery
from chatrelay.handlers import (
    ChatContext,
    cmd_help,
    cmd_model,
    cmd_reset,
    cmd_start,
    cmd_system,
    cmd_unknown,
    handle_message,
)
from chatrelay.models import ModelRegistry
from chatrelay.store import ConversationId, ConversationStore, KeyedLocks

logger = logging.getLogger(__name__)

Handler = Callable[[ChatContext], Coroutine[None, None, None]]

COMMANDS: dict[str, Handler] = {
    "/start": cmd_start,
    "/help": cmd_help,
    "/model": cmd_model,
    "/system": cmd_system,
    "/reset": cmd_reset,
}


def parse_command(text: str) -> tuple[str, str] | None:
    """Split ``/name@bot rest`` into ``("/name", "rest")``.

    Returns None when ``text`` is not a slash-command. The command name keeps
    its case; the argument is trimmed at both ends.
    """
    if not text.startswith("/"):
        return None
    parts = text.split(maxsplit=1)
    name = parts[0].split("@", 1)[0]
    args = parts[1].strip() if len(parts) > 1 else ""
    return name, args


class CommandRouter:
    """Dispatches messages, one at a time per conversation."""

    def __init__(
        self,
        store: ConversationStore,
        registry: ModelRegistry,
        gateway: AIGateway,
        delivery: MessageDelivery,
    ) -> None:
        self.store = store
        self.registry = registry
        self.gateway = gateway
        self.delivery = delivery
        self._locks = KeyedLocks()

    def resolve(self, text: str) -> tuple[Handler, str]:
        """Return the handler for ``text`` and the argument it receives."""
        parsed = parse_command(text)
        if parsed is None:
            return handle_message, ""
        name, args = parsed
        return COMMANDS.get(name, cmd_unknown), args

    async def dispatch(self, chat_id: ConversationId, text: str) -> None:
        """Handle one message. Exceptions from handlers propagate."""
        handler, args = self.resolve(text)
        async with self._locks.hold(chat_id):
            # First message from a chat creates its state with defaults.
            self.store.get_config(chat_id)
            self.store.get_session(chat_id)
            ctx = ChatContext(
                chat_id=chat_id,
                text=text,
                args=args,
                store=self.store,
                registry=self.registry,
                gateway=self.gateway,
                delivery=self.delivery,
            )
            logger.debug("Chat %s -> %s", chat_id, handler.__name__)
            await handler(ctx)
