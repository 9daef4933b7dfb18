"""Shared fixtures."""

import pytest

from antigravity_adapter.format_converter import AntigravityConverter
from antigravity_adapter.model_policy import resolve_policy


@pytest.fixture
def gemini_thinking():
    """Native reasoning family: thinking on, thought markers on."""
    return resolve_policy("gemini-2.5-pro")


@pytest.fixture
def claude_thinking():
    """Alternate reasoning family: thinking on, no thought markers."""
    return resolve_policy("claude-sonnet-4-5-thinking")


@pytest.fixture
def plain_policy():
    return resolve_policy("gemini-2.5-flash")


@pytest.fixture
def converter():
    return AntigravityConverter()


@pytest.fixture
def token():
    return {"projectId": "proj-123", "sessionId": "sess-456"}
