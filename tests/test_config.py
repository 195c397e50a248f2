"""Tests for environment-driven configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from vyb.config import ContextSettings, load_settings

if TYPE_CHECKING:
    import pytest


def test_context_settings_defaults() -> None:
    settings = ContextSettings()
    assert settings.max_immediate_items == 50
    assert settings.max_short_term_items == 200
    assert settings.compression_ratio == 0.3
    assert settings.relevance_threshold == 0.1


def test_load_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in (
        "VYB_LOG_LEVEL",
        "VYB_LOG_SERVICE",
        "VYB_CONTEXT_MAX_IMMEDIATE",
        "VYB_CONTEXT_MAX_SHORT_TERM",
        "VYB_CONTEXT_COMPRESSION_RATIO",
        "VYB_CONTEXT_RELEVANCE_THRESHOLD",
    ):
        monkeypatch.delenv(var, raising=False)
    settings = load_settings()
    assert settings.log_level == "info"
    assert settings.log_service == "vyb"
    assert settings.context == ContextSettings()


def test_load_settings_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VYB_LOG_LEVEL", "debug")
    monkeypatch.setenv("VYB_CONTEXT_MAX_IMMEDIATE", "10")
    monkeypatch.setenv("VYB_CONTEXT_MAX_SHORT_TERM", "40")
    monkeypatch.setenv("VYB_CONTEXT_RELEVANCE_THRESHOLD", "0.25")
    settings = load_settings()
    assert settings.log_level == "debug"
    assert settings.context.max_immediate_items == 10
    assert settings.context.max_short_term_items == 40
    assert settings.context.relevance_threshold == 0.25
