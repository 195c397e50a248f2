"""Tests for context memory models."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from vyb.contextmanager.models import CompressedContext, ContextItem, ContextStats, ContextTier


def test_context_tier_values() -> None:
    assert ContextTier.IMMEDIATE == "immediate"
    assert ContextTier.SHORT_TERM == "short_term"
    assert ContextTier.MEDIUM_TERM == "medium_term"
    assert ContextTier.LONG_TERM == "long_term"
    assert list(ContextTier) == [
        ContextTier.IMMEDIATE,
        ContextTier.SHORT_TERM,
        ContextTier.MEDIUM_TERM,
        ContextTier.LONG_TERM,
    ]


def test_context_item_defaults() -> None:
    item = ContextItem()
    assert item.id == ""
    assert item.tier is ContextTier.IMMEDIATE
    assert item.metadata == {}
    assert item.importance == 0.0
    assert item.access_count == 0
    assert item.timestamp is None


def test_context_item_from_json() -> None:
    raw = '{"id": "c1", "tier": "long_term", "content": "tabs", "metadata": {"file": "a.go"}, "importance": 0.4}'
    item = ContextItem.model_validate_json(raw)
    assert item.tier is ContextTier.LONG_TERM
    assert item.metadata == {"file": "a.go"}
    assert item.importance == 0.4


@pytest.mark.parametrize("value", [-0.1, 1.5])
def test_context_item_importance_bounds(value: float) -> None:
    with pytest.raises(ValidationError):
        ContextItem(importance=value)


def test_compressed_context_dump() -> None:
    when = datetime(2025, 1, 6, tzinfo=UTC)
    artifact = CompressedContext(summary="s", key_points=["k"], compressed_at=when, original_size=10, compressed_size=2)
    data = artifact.model_dump()
    assert data["summary"] == "s"
    assert data["key_points"] == ["k"]
    assert data["important_files"] == []
    assert data["compressed_at"] == when
    assert data["original_size"] == 10


def test_context_stats_defaults() -> None:
    stats = ContextStats()
    assert stats.total_items == 0
    assert stats.last_compression_at is None
    assert stats.total_memory_saved == 0
