"""Slash-command handlers: /start, /help, /model, /system, /reset."""

from __future__ import annotations

import logging

from chatrelay.message_utils import format_help, format_model_list, format_start

from ._common import ChatContext

logger = logging.getLogger(__name__)


async def cmd_start(ctx: ChatContext) -> None:
    """Handle /start: welcome text with the active model."""
    fmt = ctx.formatter
    await ctx.reply(format_start(ctx.config.model, fmt), formatted=True)


async def cmd_help(ctx: ChatContext) -> None:
    """Handle /help command to display help text."""
    await ctx.reply(format_help(ctx.formatter), formatted=True)


async def cmd_model(ctx: ChatContext) -> None:
    """Handle /model: list models, or switch the chat to another one."""
    fmt = ctx.formatter
    config = ctx.config

    if not ctx.args:
        await ctx.reply(
            format_model_list(ctx.registry.keys(), config.model, fmt),
            formatted=True,
        )
        return

    requested = ctx.args.split()[0]
    model = ctx.registry.resolve(requested)
    if model is None:
        await ctx.reply(
            f"{fmt.escape('❌ Model not available.')}\n\n"
            f"{format_model_list(ctx.registry.keys(), config.model, fmt)}",
            formatted=True,
        )
        return

    ctx.store.set_model(ctx.chat_id, model)
    logger.info("Chat %s switched model to %s", ctx.chat_id, model)
    await ctx.reply(f"{fmt.escape('✅ Model switched to')} {fmt.code(model)}", formatted=True)


async def cmd_system(ctx: ChatContext) -> None:
    """Handle /system: set, or reset, the chat's system prompt.

    The argument is trimmed at both ends and otherwise stored verbatim.
    ``reset`` in any letter case restores the default prompt.
    """
    prompt = ctx.args
    if not prompt:
        await ctx.reply(
            "❌ System prompt must not be empty.\n"
            "Usage: /system <prompt> or /system reset"
        )
        return

    if prompt.lower() == "reset":
        ctx.store.reset_system_prompt(ctx.chat_id)
        await ctx.reply("✅ System prompt restored to the default.")
        return

    ctx.store.set_system_prompt(ctx.chat_id, prompt)
    logger.info("Chat %s updated its system prompt (%d chars)", ctx.chat_id, len(prompt))
    await ctx.reply("✅ System prompt updated.")


async def cmd_reset(ctx: ChatContext) -> None:
    """Handle /reset: clear the conversation history."""
    ctx.store.reset_session(ctx.chat_id)
    await ctx.reply("🗑️ Conversation history cleared.")


async def cmd_unknown(ctx: ChatContext) -> None:
    """Reply to any unrecognized slash-command."""
    await ctx.reply("❌ Unknown command. Use /help to see what I understand.")
