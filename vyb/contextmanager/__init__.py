"""Tiered context memory with scored retrieval and lossy compaction."""

from vyb.contextmanager.errors import CompressionError, ContextError, InvalidTierError
from vyb.contextmanager.manager import SmartContextManager
from vyb.contextmanager.models import CompressedContext, ContextItem, ContextStats, ContextTier

__all__ = [
    "CompressedContext",
    "CompressionError",
    "ContextError",
    "ContextItem",
    "ContextStats",
    "ContextTier",
    "InvalidTierError",
    "SmartContextManager",
]
