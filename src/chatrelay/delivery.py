"""Outbound Telegram delivery: chunking, markup sanitizing, typing indicator."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from telegram import Bot, LinkPreviewOptions
from telegram.constants import ChatAction, ParseMode
from telegram.error import BadRequest, TelegramError

from chatrelay.config import DEFAULT_CHUNK_SIZE
from chatrelay.formatting import TelegramMarkdownFormatter
from chatrelay.markdown_v2 import markdown_to_v2
from chatrelay.message_utils import rebalance_fences, split_message

logger = logging.getLogger(__name__)

_NO_PREVIEW = LinkPreviewOptions(is_disabled=True)


async def _send_typing_periodically(bot: Bot, chat_id: int | str, interval: float) -> None:
    try:
        while True:
            try:
                await bot.send_chat_action(chat_id=chat_id, action=ChatAction.TYPING)
            except TelegramError:
                logger.debug("Failed to send typing action", exc_info=True)
            await asyncio.sleep(interval)
    except asyncio.CancelledError:
        pass


class MessageDelivery:
    """Sends replies to a chat through a ``telegram.Bot``.

    Long texts are sliced into chunks of at most ``chunk_size`` characters and
    sent one after another, each send awaited before the next, so Telegram
    keeps them in order. Without a bot (no token configured) every send is
    logged and dropped.
    """

    def __init__(
        self,
        bot: Bot | None,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        typing_interval: float = 4.0,
    ) -> None:
        self._bot = bot
        self.chunk_size = chunk_size
        self.typing_interval = typing_interval
        self.fmt = TelegramMarkdownFormatter()

    @property
    def bot(self) -> Bot | None:
        return self._bot

    async def send(
        self, chat_id: int | str, text: str, *, formatted: bool = False
    ) -> int:
        """Send bot-authored text. Returns the number of messages sent.

        ``formatted=True`` means ``text`` was built with ``self.fmt`` and is
        already valid for its parse mode.
        """
        if self._bot is None:
            logger.error("BOT_TOKEN is not set; dropping message to chat %s", chat_id)
            return 0
        kwargs: dict[str, Any] = {}
        if formatted:
            kwargs["parse_mode"] = self.fmt.parse_mode
        sent = 0
        for chunk in split_message(text, self.chunk_size):
            await self._bot.send_message(
                chat_id=chat_id,
                text=chunk,
                link_preview_options=_NO_PREVIEW,
                **kwargs,
            )
            sent += 1
        return sent

    async def send_markdown(self, chat_id: int | str, text: str) -> int:
        """Send untrusted Markdown (an AI reply) as MarkdownV2.

        Each chunk is sanitized on its own. A chunk Telegram refuses to parse
        is resent as plain text. Returns the number of messages sent.
        """
        if self._bot is None:
            logger.error("BOT_TOKEN is not set; dropping reply to chat %s", chat_id)
            return 0
        chunks = rebalance_fences(split_message(text, self.chunk_size))
        for chunk in chunks:
            try:
                await self._bot.send_message(
                    chat_id=chat_id,
                    text=markdown_to_v2(chunk),
                    parse_mode=ParseMode.MARKDOWN_V2,
                    link_preview_options=_NO_PREVIEW,
                )
            except BadRequest as e:
                logger.warning(
                    "Telegram rejected formatted chunk for chat %s (%s); "
                    "resending as plain text",
                    chat_id,
                    e.message,
                )
                await self._bot.send_message(
                    chat_id=chat_id,
                    text=chunk,
                    link_preview_options=_NO_PREVIEW,
                )
        return len(chunks)

    @asynccontextmanager
    async def typing(self, chat_id: int | str) -> AsyncIterator[None]:
        """Keep the typing indicator alive for the duration of the block."""
        if self._bot is None:
            yield
            return
        typing_task = asyncio.create_task(
            _send_typing_periodically(self._bot, chat_id, self.typing_interval)
        )
        try:
            # Let the first indicator start before the caller's work does.
            await asyncio.sleep(0)
            yield
        finally:
            typing_task.cancel()
            try:
                await typing_task
            except asyncio.CancelledError:
                pass
