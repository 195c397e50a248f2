"""SmartContextManager: tiered context cache with scored retrieval and compaction.

Items enter one of four tiers. Immediate overflow promotes the oldest item
to short-term; short-term overflow attempts a compaction that folds aged
items into one medium-term summary. Queries rank every item in every tier
by relevance and return the best ones above a threshold.

All state is guarded by one reader-writer lock. Every operation runs
synchronously on the caller's thread.
"""

from __future__ import annotations

import time
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import structlog

from vyb import constants
from vyb.config import ContextSettings
from vyb.contextmanager import compactor, scorer
from vyb.contextmanager._rwlock import ReadWriteLock
from vyb.contextmanager.errors import CompressionError, InvalidTierError
from vyb.contextmanager.models import CompressedContext, ContextItem, ContextStats, ContextTier

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

logger = structlog.get_logger()

_COOLDOWN = timedelta(seconds=constants.COMPRESSION_COOLDOWN_SECONDS)
_AGE_CUTOFF = timedelta(seconds=constants.COMPRESSION_AGE_CUTOFF_SECONDS)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _item_size(item: ContextItem) -> int:
    size = len(item.content.encode("utf-8"))
    for key, value in item.metadata.items():
        size += len(key.encode("utf-8")) + len(value.encode("utf-8"))
    return size


class SmartContextManager:
    """Concurrency-safe facade over the four context tiers."""

    def __init__(
        self,
        settings: ContextSettings | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.settings = settings or ContextSettings()
        self._clock = clock or _utcnow
        self._lock = ReadWriteLock()

        self._tiers: dict[ContextTier, list[ContextItem]] = {tier: [] for tier in ContextTier}
        self._history: list[CompressedContext] = []

        self._total_compressed = 0
        self._total_memory_saved = 0
        self._last_compression_at = self._clock()
        self._last_id_ns = 0

    # -- Mutations ---------------------------------------------------------

    def add(self, item: ContextItem) -> None:
        """Store *item* in the tier it names.

        Raises CompressionError if short-term overflow triggered a compaction
        that failed. The item itself has been stored by then.
        """
        with self._lock.write():
            # Resolve the tier first so a rejected item is left untouched.
            tier = self._resolve_tier(item.tier)
            bucket = self._tiers[tier]

            now = self._clock()
            if not item.id:
                item.id = self._next_id("ctx")
            item.tier = tier
            item.timestamp = now
            item.last_access = now

            if item.importance == 0:
                item.importance = scorer.calculate_importance(item)

            bucket.append(item)
            logger.debug("context added", item_id=item.id, tier=str(tier), importance=item.importance)

            if tier is ContextTier.IMMEDIATE:
                if len(bucket) > self.settings.max_immediate_items:
                    self._promote_oldest_immediate()
            elif tier is ContextTier.SHORT_TERM:
                if len(bucket) > self.settings.max_short_term_items:
                    try:
                        self._compress_locked(force=False)
                    except CompressionError as exc:
                        raise CompressionError(f"short-term overflow compaction failed: {exc}") from exc

    def compress(self, force: bool = False) -> CompressedContext | None:
        """Compact aged short-term items into one medium-term summary.

        Returns None when there is nothing to do: the cooldown has not
        elapsed, short-term is below capacity, or no item qualifies. Forcing
        skips the cooldown and capacity gates.
        """
        with self._lock.write():
            return self._compress_locked(force=force)

    def clear(self, tier: ContextTier | str) -> None:
        """Empty one tier in place. History and counters are untouched."""
        with self._lock.write():
            self._bucket(tier).clear()

    # -- Reads -------------------------------------------------------------

    def query(self, query: str, max_items: int) -> list[ContextItem]:
        """Return up to *max_items* items ranked by relevance to *query*.

        Every candidate gets its ``relevance`` recomputed and its access
        counters bumped, so this holds the write lock. Items scoring below
        the relevance threshold are left out even if nothing else matches.
        """
        with self._lock.write():
            now = self._clock()
            candidates = list(self._all_items())
            for item in candidates:
                item.relevance = scorer.calculate_relevance(item, query, now)
                item.access_count += 1
                item.last_access = now

            candidates.sort(key=lambda it: (it.relevance, it.importance), reverse=True)

            results: list[ContextItem] = []
            for item in candidates:
                if len(results) >= max_items:
                    break
                if item.relevance >= self.settings.relevance_threshold:
                    results.append(item)
            return results

    def calculate_relevance(self, item: ContextItem, query: str) -> float:
        """Score *item* against *query* without touching it."""
        return scorer.calculate_relevance(item, query, self._clock())

    def get_memory_usage(self) -> int:
        """Bytes held by item contents and metadata across all tiers."""
        with self._lock.read():
            return self._memory_usage()

    def get_stats(self) -> ContextStats:
        with self._lock.read():
            items = list(self._all_items())
            average = sum(item.relevance for item in items) / len(items) if items else 0.0
            return ContextStats(
                total_items=len(items),
                immediate_items=len(self._tiers[ContextTier.IMMEDIATE]),
                short_term_items=len(self._tiers[ContextTier.SHORT_TERM]),
                medium_term_items=len(self._tiers[ContextTier.MEDIUM_TERM]),
                long_term_items=len(self._tiers[ContextTier.LONG_TERM]),
                total_memory_usage=self._memory_usage(),
                compression_ratio=self.settings.compression_ratio,
                last_compression_at=self._last_compression_at,
                average_relevance=average,
                compression_history=len(self._history),
                total_compressed=self._total_compressed,
                total_memory_saved=self._total_memory_saved,
            )

    def items(self, tier: ContextTier | str) -> list[ContextItem]:
        """Return a shallow copy of one tier, oldest first."""
        with self._lock.read():
            return list(self._bucket(tier))

    def compression_history(self) -> list[CompressedContext]:
        """Return past compaction artifacts, oldest first."""
        with self._lock.read():
            return list(self._history)

    # -- Internals (caller holds the lock) ---------------------------------

    @staticmethod
    def _resolve_tier(tier: ContextTier | str) -> ContextTier:
        try:
            return ContextTier(tier)
        except ValueError:
            raise InvalidTierError(tier) from None

    def _bucket(self, tier: ContextTier | str) -> list[ContextItem]:
        return self._tiers[self._resolve_tier(tier)]

    def _all_items(self) -> Iterator[ContextItem]:
        for tier in ContextTier:
            yield from self._tiers[tier]

    def _memory_usage(self) -> int:
        return sum(_item_size(item) for item in self._all_items())

    def _next_id(self, prefix: str) -> str:
        # Strictly increasing even when the clock does not advance between calls.
        ns = max(time.time_ns(), self._last_id_ns + 1)
        self._last_id_ns = ns
        return f"{prefix}_{ns}"

    def _promote_oldest_immediate(self) -> None:
        oldest = self._tiers[ContextTier.IMMEDIATE].pop(0)
        oldest.tier = ContextTier.SHORT_TERM
        self._tiers[ContextTier.SHORT_TERM].append(oldest)
        logger.debug("context promoted", item_id=oldest.id, tier=str(ContextTier.SHORT_TERM))

    def _select_targets(self, now: datetime, force: bool) -> tuple[list[ContextItem], list[ContextItem]]:
        """Split short-term into (targets, keep), both in original order.

        Items older than the age cutoff are always targets. Forcing tops the
        selection up with newer items, and caps the whole selection at half
        of short-term so recent context survives.
        """
        short_term = self._tiers[ContextTier.SHORT_TERM]
        cutoff = now - _AGE_CUTOFF
        aged = {id(item) for item in short_term if item.timestamp is not None and item.timestamp < cutoff}

        if force:
            limit = len(short_term) // 2
            chosen = [item for item in short_term if id(item) in aged][:limit]
            for item in short_term:
                if len(chosen) >= limit:
                    break
                if id(item) not in aged:
                    chosen.append(item)
            selected = {id(item) for item in chosen}
        else:
            selected = aged

        targets = [item for item in short_term if id(item) in selected]
        keep = [item for item in short_term if id(item) not in selected]
        return targets, keep

    def _compress_locked(self, force: bool) -> CompressedContext | None:
        now = self._clock()

        if not force:
            if now - self._last_compression_at < _COOLDOWN:
                return None
            if len(self._tiers[ContextTier.SHORT_TERM]) < self.settings.max_short_term_items:
                return None

        targets, keep = self._select_targets(now, force)
        if not targets:
            return None

        try:
            compressed = compactor.build_compressed_context(
                targets,
                compression_type="forced" if force else "automatic",
                now=now,
            )
        except CompressionError:
            raise
        except Exception as exc:
            raise CompressionError(f"compaction failed: {exc}") from exc

        summary_item = ContextItem(
            id=self._next_id("compressed"),
            tier=ContextTier.MEDIUM_TERM,
            content=compressed.summary,
            metadata={"type": "compressed_context", "original_items": str(len(targets))},
            importance=constants.COMPRESSED_ITEM_IMPORTANCE,
            access_count=0,
            timestamp=now,
            last_access=now,
        )
        self._tiers[ContextTier.MEDIUM_TERM].append(summary_item)
        self._tiers[ContextTier.SHORT_TERM] = keep

        self._total_compressed += len(targets)
        self._total_memory_saved += compressed.original_size - compressed.compressed_size
        self._last_compression_at = now

        self._history.append(compressed)
        if len(self._history) > constants.MAX_COMPRESSION_HISTORY:
            self._history = self._history[-constants.MAX_COMPRESSION_HISTORY :]

        logger.info(
            "context compressed",
            items=len(targets),
            original_size=compressed.original_size,
            compressed_size=compressed.compressed_size,
            forced=force,
        )
        return compressed
