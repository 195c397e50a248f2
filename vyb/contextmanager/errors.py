"""Exceptions raised by the context memory."""

from __future__ import annotations


class ContextError(Exception):
    """Base class for context memory failures."""


class InvalidTierError(ContextError):
    """Raised when an operation names a tier the store does not have."""

    def __init__(self, tier: object) -> None:
        self.tier = tier
        super().__init__(f"invalid context tier: {tier!r}")


class CompressionError(ContextError):
    """Raised when compacting short-term context fails."""
