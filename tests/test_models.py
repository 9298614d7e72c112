"""Tests for the model registry."""

from __future__ import annotations

import pytest

from chatrelay.models import DEFAULT_AI_BASE_URL, ModelRegistry


class TestModelRegistry:
    def test_default_keys(self):
        registry = ModelRegistry.from_base_url()
        assert list(registry) == ["gpt5", "copilot", "think", "muslim"]
        assert registry["gpt5"] == f"{DEFAULT_AI_BASE_URL}/gpt5"
        assert registry["think"] == f"{DEFAULT_AI_BASE_URL}/copilot-think"

    def test_resolve_case_insensitive(self, registry):
        assert registry.resolve("GPT5") == "gpt5"
        assert registry.resolve(" Copilot ") == "copilot"

    def test_resolve_unknown(self, registry):
        assert registry.resolve("bogus") is None

    def test_url_for(self, registry):
        assert registry.url_for("MUSLIM") == "https://ai.test/muslim"

    def test_url_for_unknown(self, registry):
        with pytest.raises(KeyError):
            registry.url_for("bogus")

    def test_immutable(self, registry):
        with pytest.raises(TypeError):
            registry["new"] = "https://x"  # type: ignore[index]

    def test_custom_mapping_lowercases_keys(self):
        registry = ModelRegistry({"Fast": "https://fast"})
        assert registry.resolve("fast") == "fast"
        assert len(registry) == 1
