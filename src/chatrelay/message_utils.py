"""Message chunking and canned reply texts."""

from __future__ import annotations

from collections.abc import Iterable

from chatrelay.config import DEFAULT_CHUNK_SIZE
from chatrelay.formatting import TelegramMarkdownFormatter
from chatrelay.markdown_v2 import FENCE


def split_message(text: str, max_length: int = DEFAULT_CHUNK_SIZE) -> list[str]:
    """Split a message into consecutive fixed-width chunks of at most max_length.

    Joining the chunks in order gives back the original text.
    """
    if max_length <= 0:
        raise ValueError("max_length must be positive")
    if not text:
        return ["(empty response)"]
    return [text[i:i + max_length] for i in range(0, len(text), max_length)]


def rebalance_fences(chunks: Iterable[str]) -> list[str]:
    """Close a code fence left open at a chunk boundary and reopen it in the next chunk."""
    result: list[str] = []
    inside_block = False
    for chunk in chunks:
        if inside_block:
            chunk = f"{FENCE}\n{chunk}"
        inside_block = chunk.count(FENCE) % 2 == 1
        if inside_block:
            chunk = chunk if chunk.endswith("\n") else chunk + "\n"
            chunk += FENCE
        result.append(chunk)
    return result


def format_model_list(
    models: Iterable[str], active: str, fmt: TelegramMarkdownFormatter
) -> str:
    """Format available model keys with the active one marked."""
    lines = [fmt.bold("Available models:")]
    for key in models:
        if key == active:
            lines.append(f"▸ {fmt.code(key)} {fmt.escape('(active)')}")
        else:
            lines.append(f"• {fmt.code(key)}")
    lines.append("")
    lines.append(fmt.escape("Switch with /model <key>."))
    return "\n".join(lines)


def _command_lines(fmt: TelegramMarkdownFormatter) -> list[str]:
    cmds = [
        ("/start", "Show the welcome message"),
        (f"/model {fmt.code('[key]')}", "List models or switch the active one"),
        (f"/system {fmt.code('<prompt>')}", "Set the system prompt"),
        (f"/system {fmt.code('reset')}", "Restore the default system prompt"),
        ("/reset", "Clear the conversation history"),
        ("/help", "Show this message"),
    ]
    return [f"{cmd} {fmt.escape('- ' + desc)}" for cmd, desc in cmds]


def format_help(fmt: TelegramMarkdownFormatter) -> str:
    """Format the help text listing all available commands."""
    lines = [fmt.bold("Available commands:"), ""]
    lines += _command_lines(fmt)
    lines += [
        "",
        fmt.escape("Any other message is answered by the active AI model."),
    ]
    return "\n".join(lines)


def format_start(active_model: str, fmt: TelegramMarkdownFormatter) -> str:
    """Format the /start welcome message."""
    lines = [
        fmt.bold(fmt.escape("🤖 AI Telegram Bot")),
        "",
        fmt.escape("Welcome! Send any message and the AI will answer it."),
        "",
        f"{fmt.bold('Active model:')} {fmt.code(active_model)}",
        "",
    ]
    lines += _command_lines(fmt)
    lines += [
        "",
        fmt.italic(fmt.escape(
            "Code in replies is shown in code blocks so it is easy to copy. "
            "If the bot does not answer, the AI service may be slow or down."
        )),
    ]
    return "\n".join(lines)
