"""Per-conversation state: active model, system prompt, and bounded history."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Hashable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, Literal

from chatrelay.models import DEFAULT_MODEL_KEY

logger = logging.getLogger(__name__)

Role = Literal["user", "assistant"]
ConversationId = int | str

DEFAULT_SYSTEM_PROMPT = "You are a helpful AI assistant. Use simple Markdown."


@dataclass
class ConversationConfig:
    """Settings for a single chat."""

    model: str = DEFAULT_MODEL_KEY
    system_prompt: str = DEFAULT_SYSTEM_PROMPT


@dataclass
class Turn:
    """One message in a dialogue."""

    role: Role
    content: str


class KeyValueStore(ABC):
    """Minimal key-value backend behind ``ConversationStore``.

    Swap the in-memory implementation for a persistent one without
    touching call sites.
    """

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """Return the stored value, or None if absent."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store a value under ``key``."""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove ``key``. Returns True if it existed."""

    @abstractmethod
    def __contains__(self, key: object) -> bool: ...


class InMemoryStore(KeyValueStore):
    """Process-local dict backend. Contents are lost on restart."""

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}

    def get(self, key: str) -> Any | None:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)


class ConversationStore:
    """Config and session lookups keyed by conversation id, created on first use."""

    def __init__(
        self,
        backend: KeyValueStore | None = None,
        *,
        default_model: str = DEFAULT_MODEL_KEY,
        default_prompt: str = DEFAULT_SYSTEM_PROMPT,
        max_turns: int = 20,
        keep_turns: int = 10,
    ) -> None:
        if keep_turns > max_turns:
            raise ValueError("keep_turns must not exceed max_turns")
        self._backend = backend if backend is not None else InMemoryStore()
        self.default_model = default_model
        self.default_prompt = default_prompt
        self.max_turns = max_turns
        self.keep_turns = keep_turns

    # -- config --

    def get_config(self, conversation_id: ConversationId) -> ConversationConfig:
        """Return the chat's config, creating it with defaults if absent."""
        key = f"config:{conversation_id}"
        config = self._backend.get(key)
        if config is None:
            config = ConversationConfig(
                model=self.default_model, system_prompt=self.default_prompt
            )
            self._backend.set(key, config)
        return config

    def set_model(self, conversation_id: ConversationId, model: str) -> None:
        config = self.get_config(conversation_id)
        config.model = model
        self._backend.set(f"config:{conversation_id}", config)

    def set_system_prompt(self, conversation_id: ConversationId, prompt: str) -> None:
        config = self.get_config(conversation_id)
        config.system_prompt = prompt
        self._backend.set(f"config:{conversation_id}", config)

    def reset_system_prompt(self, conversation_id: ConversationId) -> None:
        self.set_system_prompt(conversation_id, self.default_prompt)

    # -- session --

    def get_session(self, conversation_id: ConversationId) -> list[Turn]:
        """Return the chat's history, creating an empty one if absent."""
        key = f"session:{conversation_id}"
        session = self._backend.get(key)
        if session is None:
            session = []
            self._backend.set(key, session)
        return session

    def append_turn(
        self, conversation_id: ConversationId, role: Role, content: str
    ) -> list[Turn]:
        """Append a turn and enforce the history cap. Returns the session."""
        session = self.get_session(conversation_id)
        session.append(Turn(role=role, content=content))
        if len(session) > self.max_turns:
            dropped = len(session) - self.keep_turns
            del session[:dropped]
            logger.debug(
                "Trimmed %d old turn(s) from conversation %s", dropped, conversation_id
            )
        self._backend.set(f"session:{conversation_id}", session)
        return session

    def reset_session(self, conversation_id: ConversationId) -> None:
        """Empty the chat's history in place."""
        session = self.get_session(conversation_id)
        session.clear()
        self._backend.set(f"session:{conversation_id}", session)


@dataclass
class KeyedLocks:
    """One ``asyncio.Lock`` per key, so work for a key runs one at a time.

    A key's lock is dropped once no task holds or waits for it.
    """

    _locks: dict[Hashable, asyncio.Lock] = field(default_factory=dict)
    _users: dict[Hashable, int] = field(default_factory=dict)

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if not self._users[key]:
                del self._users[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)
