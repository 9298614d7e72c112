"""Free-text messages: ask the active AI model and relay its answer."""

from __future__ import annotations

import logging

from ._common import ChatContext

logger = logging.getLogger(__name__)


async def handle_message(ctx: ChatContext) -> None:
    """Send the user's text to the AI and deliver the reply."""
    logger.info(
        "[%s] User: %s",
        ctx.chat_id,
        ctx.text[:200] + ("..." if len(ctx.text) > 200 else ""),
    )

    async with ctx.delivery.typing(ctx.chat_id):
        answer = await ctx.gateway.reply(ctx.store, ctx.chat_id, ctx.text)

    await ctx.delivery.send_markdown(ctx.chat_id, answer)
