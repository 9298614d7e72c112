"""Client for the remote AI completion endpoints."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import httpx

from chatrelay.models import ModelRegistry
from chatrelay.store import ConversationId, ConversationStore, Turn

logger = logging.getLogger(__name__)

INVALID_REPLY_MESSAGE = "AI did not respond validly."
TIMEOUT_MESSAGE = "⏱️ The AI took too long to answer. Please try again in a moment."
FAILURE_MESSAGE = "⚠️ The AI service is unavailable right now. Please try again later."

# The prompt rides in the query string. Percent-encoding at most triples its
# UTF-8 size, which keeps the URL under httpx's 65536-character limit.
PROMPT_BYTE_BUDGET = 16_000


def build_prompt(
    system_prompt: str,
    turns: Sequence[Turn],
    window: int = 10,
    max_bytes: int = PROMPT_BYTE_BUDGET,
) -> str:
    """Flatten the system prompt and the last ``window`` turns into one string.

    Oldest turns are dropped while the UTF-8 size exceeds ``max_bytes``. The
    newest turn is always kept.
    """
    recent = turns[-window:] if window > 0 else []
    header = f"system: {system_prompt}"
    lines = [f"{turn.role}: {turn.content}" for turn in recent]
    size = len(header.encode()) + sum(len(line.encode()) + 1 for line in lines)
    while len(lines) > 1 and size > max_bytes:
        size -= len(lines.pop(0).encode()) + 1
    return "\n".join([header, *lines])


def extract_reply(data: Any) -> str:
    """Pull the reply text out of an AI response body.

    The endpoints answer either ``{"result": {"response": ...}}`` or
    ``{"response": ...}``. Anything else yields ``INVALID_REPLY_MESSAGE``.
    """
    if not isinstance(data, dict):
        return INVALID_REPLY_MESSAGE
    result = data.get("result")
    candidates = [
        result.get("response") if isinstance(result, dict) else None,
        data.get("response"),
    ]
    for candidate in candidates:
        if isinstance(candidate, str) and candidate.strip():
            return candidate
    return INVALID_REPLY_MESSAGE


class AIGateway:
    """Turns a chat message plus conversation state into an AI reply.

    Args:
        registry: Model keys to endpoint URLs.
        timeout: Seconds allowed for one AI request. Must stay below the
            hosting platform's request deadline.
        history_window: Number of most recent turns included in the prompt.
        client: Optional pre-built ``httpx.AsyncClient``. A client passed in
            is not closed by ``aclose``.
    """

    def __init__(
        self,
        registry: ModelRegistry,
        *,
        timeout: float = 25.0,
        history_window: int = 10,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.registry = registry
        self.timeout = timeout
        self.history_window = history_window
        self._owns_client = client is None
        self._client = client if client is not None else httpx.AsyncClient()

    async def complete(self, url: str, prompt: str) -> str:
        """Issue one GET to ``url`` and return the reply text.

        Raises httpx errors on timeout, transport failure, non-2xx status or
        a URL httpx refuses to build.
        """
        response = await self._client.get(
            url, params={"prompt": prompt}, timeout=self.timeout
        )
        response.raise_for_status()
        try:
            data = response.json()
        except ValueError:
            logger.warning("AI endpoint %s returned a non-JSON body", url)
            return INVALID_REPLY_MESSAGE
        return extract_reply(data)

    async def reply(
        self,
        store: ConversationStore,
        conversation_id: ConversationId,
        text: str,
    ) -> str:
        """Record ``text``, ask the active model, record and return its answer.

        HTTP failures never escape: they come back as ``TIMEOUT_MESSAGE`` or
        ``FAILURE_MESSAGE`` and no assistant turn is recorded.
        """
        config = store.get_config(conversation_id)
        session = store.append_turn(conversation_id, "user", text)
        prompt = build_prompt(config.system_prompt, session, self.history_window)
        url = self.registry.url_for(config.model)

        try:
            answer = await self.complete(url, prompt)
        except httpx.TimeoutException:
            logger.warning(
                "AI model '%s' timed out after %.0fs for chat %s",
                config.model,
                self.timeout,
                conversation_id,
            )
            return TIMEOUT_MESSAGE
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(
                "AI model '%s' failed for chat %s: %s", config.model, conversation_id, e
            )
            return FAILURE_MESSAGE

        store.append_turn(conversation_id, "assistant", answer)
        return answer

    async def aclose(self) -> None:
        """Close the HTTP client if this gateway created it."""
        if self._owns_client:
            await self._client.aclose()
