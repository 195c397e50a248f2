"""Pydantic models for the tiered context memory."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003 - Pydantic needs at runtime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class ContextTier(StrEnum):
    """Memory tier an item lives in, ordered from most to least recent."""

    IMMEDIATE = "immediate"
    SHORT_TERM = "short_term"
    MEDIUM_TERM = "medium_term"
    LONG_TERM = "long_term"


class ContextItem(BaseModel):
    """A single unit of context memory.

    ``importance`` is assigned once on insertion; ``relevance`` is transient
    and overwritten by every query.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: str = ""
    tier: ContextTier = ContextTier.IMMEDIATE
    content: str = ""
    metadata: dict[str, str] = Field(default_factory=dict)
    importance: float = Field(default=0.0, ge=0.0, le=1.0)
    relevance: float = Field(default=0.0, ge=0.0, le=1.0)
    access_count: int = 0
    timestamp: datetime | None = None
    last_access: datetime | None = None


class CompressedContext(BaseModel):
    """Artifact produced by compacting a batch of short-term items."""

    summary: str = ""
    key_points: list[str] = Field(default_factory=list)
    important_files: list[str] = Field(default_factory=list)
    recent_decisions: list[str] = Field(default_factory=list)
    metadata: dict[str, str] = Field(default_factory=dict)
    compressed_at: datetime
    original_size: int = 0
    compressed_size: int = 0


class ContextStats(BaseModel):
    """Point-in-time snapshot of the context memory."""

    total_items: int = 0
    immediate_items: int = 0
    short_term_items: int = 0
    medium_term_items: int = 0
    long_term_items: int = 0
    total_memory_usage: int = 0
    compression_ratio: float = 0.0
    last_compression_at: datetime | None = None
    average_relevance: float = 0.0
    compression_history: int = 0
    total_compressed: int = 0
    total_memory_saved: int = 0
