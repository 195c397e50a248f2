"""Centralized constants for the vyb context memory.

All magic numbers of the tiered context cache are collected here for easy
discovery and consistent usage.
"""

from __future__ import annotations

# -- Tier capacities ---------------------------------------------------------
MAX_IMMEDIATE_ITEMS = 50  # Overflow promotes the oldest item to short-term.
MAX_SHORT_TERM_ITEMS = 200  # Overflow attempts a non-forced compaction.

# -- Retrieval ---------------------------------------------------------------
RELEVANCE_THRESHOLD = 0.1  # Items scoring below this are dropped from queries.
COMPRESSION_RATIO = 0.3  # Target ratio, reported in stats only.

# -- Compaction timing -------------------------------------------------------
COMPRESSION_COOLDOWN_SECONDS = 3600  # Non-forced compaction at most once per hour.
COMPRESSION_AGE_CUTOFF_SECONDS = 7200  # Short-term items older than 2h are compacted.
MAX_COMPRESSION_HISTORY = 100  # Most recent artifacts retained.
COMPRESSED_ITEM_IMPORTANCE = 0.8

# -- Summaries ---------------------------------------------------------------
KEY_POINT_IMPORTANCE = 0.7  # Only items above this contribute key points.
KEY_POINT_MAX_CHARS = 100
SUMMARY_MAX_LINES = 10
SUMMARY_FALLBACK_LINES = 5
SUMMARY_VERBATIM_LINES = 3  # Content this short is kept as-is.

# -- Token estimation --------------------------------------------------------
CHARS_PER_TOKEN = 4  # Rough heuristic: 1 token ~ 4 characters.
