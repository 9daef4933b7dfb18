"""Tests for model_policy.py."""

import pytest

from antigravity_adapter.model_policy import (
    detect_family,
    is_thinking_enabled,
    map_model_name,
    resolve_policy,
)
from antigravity_adapter.models import ModelFamily, TranslatorConfig


class TestMapModelName:
    @pytest.mark.parametrize(
        "model_id, expected",
        [
            ("claude-sonnet-4-5-thinking", "claude-sonnet-4-5"),
            ("claude-opus-4-5", "claude-opus-4-5-thinking"),
            ("gemini-2.5-flash-thinking", "gemini-2.5-flash"),
            ("gemini-2.5-pro", "gemini-2.5-pro"),
        ],
    )
    def test_aliases(self, model_id, expected):
        assert map_model_name(model_id) == expected

    def test_exact_match_only(self):
        """Names that merely share a prefix with an alias are left alone."""
        assert map_model_name("claude-opus-4-5-20251101") == "claude-opus-4-5-20251101"
        assert map_model_name("claude-sonnet-4-5-thinking-high") == "claude-sonnet-4-5-thinking-high"

    def test_custom_alias_table(self):
        config = TranslatorConfig(model_aliases={"fast": "gemini-2.5-flash"})
        assert map_model_name("fast", config) == "gemini-2.5-flash"
        assert map_model_name("claude-opus-4-5", config) == "claude-opus-4-5"


class TestThinkingDetection:
    @pytest.mark.parametrize(
        "model_id",
        [
            "claude-sonnet-4-5-thinking",
            "anything-thinking",
            "gemini-2.5-pro",
            "gemini-3-pro-high",
            "rev19-uic3-1p",
            "gpt-oss-120b-medium",
        ],
    )
    def test_thinking_models(self, model_id):
        assert is_thinking_enabled(model_id) is True

    @pytest.mark.parametrize(
        "model_id",
        ["gemini-2.5-flash", "claude-opus-4-5", "gemini-2.5-pro-latest", "gpt-4o", ""],
    )
    def test_non_thinking_models(self, model_id):
        assert is_thinking_enabled(model_id) is False

    def test_configured_prefixes(self):
        config = TranslatorConfig(thinking_models=[], thinking_model_prefixes=["o3-"])
        assert is_thinking_enabled("o3-mini", config) is True
        assert is_thinking_enabled("gemini-2.5-pro", config) is False


class TestDetectFamily:
    def test_families(self):
        assert detect_family("gemini-2.5-flash") == ModelFamily.GEMINI
        assert detect_family("claude-sonnet-4-5") == ModelFamily.CLAUDE
        assert detect_family("gpt-oss-120b-medium") == ModelFamily.OTHER
        assert detect_family("rev19-uic3-1p") == ModelFamily.OTHER


class TestResolvePolicy:
    def test_gemini_thinking_marks_thoughts(self):
        policy = resolve_policy("gemini-3-pro-low")
        assert policy.canonical_name == "gemini-3-pro-low"
        assert policy.family == ModelFamily.GEMINI
        assert policy.thinking_enabled is True
        assert policy.mark_thoughts is True

    def test_claude_thinking_suppresses_marker(self):
        policy = resolve_policy("claude-sonnet-4-5-thinking")
        assert policy.canonical_name == "claude-sonnet-4-5"
        assert policy.family == ModelFamily.CLAUDE
        assert policy.thinking_enabled is True
        assert policy.mark_thoughts is False

    def test_thinking_decided_on_raw_identifier(self):
        """The alias target carries the suffix, but the request did not ask for it."""
        policy = resolve_policy("claude-opus-4-5")
        assert policy.canonical_name == "claude-opus-4-5-thinking"
        assert policy.thinking_enabled is False

    def test_flash_thinking_alias(self):
        policy = resolve_policy("gemini-2.5-flash-thinking")
        assert policy.canonical_name == "gemini-2.5-flash"
        assert policy.thinking_enabled is True
        assert policy.mark_thoughts is True

    def test_other_family_never_marks(self):
        policy = resolve_policy("gpt-oss-120b-medium")
        assert policy.thinking_enabled is True
        assert policy.mark_thoughts is False

    def test_unknown_model_passthrough(self):
        policy = resolve_policy("my-custom-model")
        assert policy.canonical_name == "my-custom-model"
        assert policy.family == ModelFamily.OTHER
        assert policy.thinking_enabled is False
        assert policy.mark_thoughts is False

    def test_empty_identifier(self):
        policy = resolve_policy(None)
        assert policy.canonical_name == ""
        assert policy.thinking_enabled is False
