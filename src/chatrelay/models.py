"""Registry of AI model keys and the endpoints that serve them."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType

DEFAULT_AI_BASE_URL = "https://magma-api.biz.id/ai"

DEFAULT_MODEL_KEY = "gpt5"

# Short model keys -> endpoint path under the AI base URL
MODEL_PATHS: dict[str, str] = {
    "gpt5": "gpt5",
    "copilot": "copilot",
    "think": "copilot-think",
    "muslim": "muslim",
}


class ModelRegistry(Mapping[str, str]):
    """Immutable mapping of model keys to endpoint URLs.

    Keys are stored lower-case; ``resolve`` looks them up case-insensitively.
    """

    def __init__(self, models: Mapping[str, str]) -> None:
        self._models = MappingProxyType(
            {key.lower(): url for key, url in models.items()}
        )

    @classmethod
    def from_base_url(cls, base_url: str = DEFAULT_AI_BASE_URL) -> ModelRegistry:
        """Build the default registry with every endpoint under ``base_url``."""
        base = base_url.rstrip("/")
        return cls({key: f"{base}/{path}" for key, path in MODEL_PATHS.items()})

    def __getitem__(self, key: str) -> str:
        return self._models[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._models)

    def __len__(self) -> int:
        return len(self._models)

    def resolve(self, key: str) -> str | None:
        """Return the canonical key for ``key``, or None if it is not registered."""
        normalized = key.strip().lower()
        return normalized if normalized in self._models else None

    def url_for(self, key: str) -> str:
        """Return the endpoint URL for a model key. Raises KeyError if unknown."""
        resolved = self.resolve(key)
        if resolved is None:
            raise KeyError(key)
        return self._models[resolved]
