"""Markup helpers for bot-authored replies."""

from __future__ import annotations

from telegram.constants import ParseMode
from telegram.helpers import escape_markdown


class TelegramMarkdownFormatter:
    """Builds trusted Telegram MarkdownV2 for the bot's own texts.

    ``bold`` and ``italic`` expect already-escaped text; ``code`` escapes its
    argument itself. Any text not wrapped by a helper goes through
    ``escape()`` so it renders literally.
    """

    parse_mode = ParseMode.MARKDOWN_V2

    def bold(self, text: str) -> str:
        return f"*{text}*"

    def italic(self, text: str) -> str:
        return f"_{text}_"

    def code(self, text: str) -> str:
        """Inline monospace."""
        return f"`{escape_markdown(text, version=2, entity_type='code')}`"

    def escape(self, text: str) -> str:
        return escape_markdown(text, version=2)
