"""Convert untrusted Markdown (AI replies) to Telegram MarkdownV2.

AI replies are written in loose CommonMark-ish Markdown and frequently carry
stray or unbalanced markers. Telegram rejects a MarkdownV2 message outright
if any reserved character is left unescaped, so the conversion works on an
explicit grammar:

Reserved characters
    ``_ * [ ] ( ) ~ ` > # + - = | { } . !`` and backslash. Outside of the
    constructs below every one of them is escaped with a backslash.

Recognized constructs (matched pairs only)
  - ```` ```lang\\n...``` ````  fenced code   -> kept, body escaped as ``pre``
  - `` `code` ``                inline code   -> kept, body escaped as ``code``
  - ``[text](url)``             link          -> kept
  - ``# heading`` (1-6 ``#``)   heading       -> ``*heading*`` (a bold
                                wrapper around the whole text is dropped)
  - ``**bold**`` / ``__bold__`` bold          -> ``*bold*``
  - ``~~strike~~``              strikethrough -> ``~strike~``
  - ``*italic*`` / ``_italic_`` italic        -> ``_italic_``

Markers do not nest: emphasis inside emphasis is escaped literally. Code
spans and links may appear inside emphasis. An unmatched marker is plain
text and gets escaped. If the text holds an odd number of ```` ``` ````
delimiters a closing fence is appended before anything else, so an
unterminated block still renders as code.
"""

from __future__ import annotations

import re

from telegram.helpers import escape_markdown

FENCE = "```"


def close_unterminated_fences(text: str) -> str:
    """Append a closing fence if ``text`` has an odd number of fences."""
    if text.count(FENCE) % 2 == 0:
        return text
    if not text.endswith("\n"):
        text += "\n"
    return text + FENCE


def markdown_to_v2(text: str) -> str:
    """Convert Markdown to Telegram-safe MarkdownV2.

    Returns a string suitable for ``parse_mode='MarkdownV2'``.
    """
    if not text:
        return text

    text = close_unterminated_fences(text)
    result_parts: list[str] = []
    for is_code, content in _split_code_blocks(text):
        result_parts.append(content if is_code else _convert_inline(content))
    return "".join(result_parts)


def _escape(text: str) -> str:
    return escape_markdown(text, version=2)


# ---------------------------------------------------------------------------
# Fenced code blocks
# ---------------------------------------------------------------------------

# Language tag only counts when it sits alone on the opening fence line.
_CODE_BLOCK_RE = re.compile(r"```(?:([\w+#.-]+)\n)?(.*?)```", re.DOTALL)


def _split_code_blocks(text: str) -> list[tuple[bool, str]]:
    """Split text into (is_code_block, content) segments."""
    parts: list[tuple[bool, str]] = []
    last_end = 0

    for m in _CODE_BLOCK_RE.finditer(text):
        if m.start() > last_end:
            parts.append((False, text[last_end:m.start()]))
        lang = m.group(1) or ""
        code = m.group(2)
        if code.startswith("\n"):
            code = code[1:]
        if code.endswith("\n"):
            code = code[:-1]
        body = escape_markdown(code, version=2, entity_type="pre")
        parts.append((True, f"{FENCE}{lang}\n{body}\n{FENCE}"))
        last_end = m.end()

    if last_end < len(text):
        parts.append((False, text[last_end:]))

    return parts


# ---------------------------------------------------------------------------
# Inline conversion (applied to non-code-block segments)
# ---------------------------------------------------------------------------

_INLINE_CODE_RE = re.compile(r"`([^`\n]+)`")

_LINK_RE = re.compile(r"\[([^\]\n]+)]\(([^)\s]+)\)")

_HEADING_RE = re.compile(r"^#{1,6}[ \t]+(.+?)[ \t]*#*[ \t]*$", re.MULTILINE)

# A single bold wrapper around the whole heading text is dropped.
_HEADING_BOLD_RE = re.compile(r"^(\*\*|__)(?!\s)(.+?)(?<!\s)\1$")


def _strip_heading_bold(text: str) -> str:
    m = _HEADING_BOLD_RE.match(text)
    if m and m.group(1) not in m.group(2):
        return m.group(2)
    return text


_BOLD_RE = re.compile(r"\*\*(?!\s)(.+?)(?<!\s)\*\*|__(?!\s)(.+?)(?<!\s)__")

_STRIKE_RE = re.compile(r"~~(?!\s)(.+?)(?<!\s)~~")

# Single markers must hug their text; `_` additionally must not touch a word
# character so snake_case identifiers stay literal.
_ITALIC_RE = re.compile(
    r"(?<![\w*])\*(?![\s*])(.+?)(?<![\s*])\*(?![\w*])"
    r"|(?<![\w_])_(?![\s_])(.+?)(?<![\s_])_(?![\w_])"
)

_PLACEHOLDER_RE = re.compile(r"\x00PH(\d+)\x00")


def _convert_inline(text: str) -> str:
    """Escape a prose segment, keeping recognized marker pairs."""
    # ---- Phase 1: pull out constructs, each rendered to final MarkdownV2 ----
    # Placeholder tokens contain no reserved characters, so they pass
    # through escaping untouched and can sit inside emphasis.
    placeholders: list[str] = []
    text = text.replace("\x00", "")

    def _placeholder(rendered: str) -> str:
        placeholders.append(rendered)
        return f"\x00PH{len(placeholders) - 1}\x00"

    text = _INLINE_CODE_RE.sub(
        lambda m: _placeholder(
            f"`{escape_markdown(m.group(1), version=2, entity_type='code')}`"
        ),
        text,
    )

    text = _LINK_RE.sub(
        lambda m: _placeholder(
            f"[{_escape(m.group(1))}]"
            f"({escape_markdown(m.group(2), version=2, entity_type='text_link')})"
        ),
        text,
    )

    text = _HEADING_RE.sub(
        lambda m: _placeholder(f"*{_escape(_strip_heading_bold(m.group(1)))}*"),
        text,
    )

    text = _BOLD_RE.sub(
        lambda m: _placeholder(
            f"*{_escape(m.group(1) or m.group(2))}*"
        ),
        text,
    )

    text = _STRIKE_RE.sub(
        lambda m: _placeholder(f"~{_escape(m.group(1))}~"),
        text,
    )

    text = _ITALIC_RE.sub(
        lambda m: _placeholder(
            f"_{_escape(m.group(1) or m.group(2))}_"
        ),
        text,
    )

    # ---- Phase 2: escape everything else ----
    text = _escape(text)

    # ---- Phase 3: restore placeholders (they may nest) ----
    while True:
        restored = _PLACEHOLDER_RE.sub(lambda m: placeholders[int(m.group(1))], text)
        if restored == text:
            return restored
        text = restored
