"""Lossy compaction of short-term context into a single summary artifact.

The summary is extractive: lines mentioning a fixed keyword set are kept
verbatim, otherwise the first few lines stand in for the whole batch.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from vyb import constants
from vyb.contextmanager.errors import CompressionError
from vyb.contextmanager.models import CompressedContext

if TYPE_CHECKING:
    from collections.abc import Sequence

    from vyb.contextmanager.models import ContextItem

SUMMARY_KEYWORDS = ("function", "class", "error", "todo", "important", "fix", "bug")


def _byte_len(text: str) -> int:
    return len(text.encode("utf-8"))


def extract_key_point(content: str) -> str:
    """Return the first non-empty line, truncated with an ellipsis."""
    for line in content.split("\n"):
        point = line.strip()
        if point:
            if len(point) > constants.KEY_POINT_MAX_CHARS:
                point = point[: constants.KEY_POINT_MAX_CHARS] + "..."
            return point
    return ""


def generate_summary(content: str) -> str:
    """Build an extractive summary of *content*.

    Short content (up to three lines) is returned unchanged. Otherwise the
    first ten lines containing a summary keyword are kept; if none match,
    the first five lines are used.
    """
    if not content:
        return ""

    lines = content.split("\n")
    if len(lines) <= constants.SUMMARY_VERBATIM_LINES:
        return content

    important: list[str] = []
    for line in lines:
        lowered = line.lower()
        if any(keyword in lowered for keyword in SUMMARY_KEYWORDS):
            important.append(line.strip())
            if len(important) >= constants.SUMMARY_MAX_LINES:
                break

    if important:
        return "\n".join(important)

    return "\n".join(lines[: constants.SUMMARY_FALLBACK_LINES])


def _append_unique(values: list[str], value: str) -> None:
    if value not in values:
        values.append(value)


def build_compressed_context(
    items: Sequence[ContextItem],
    *,
    compression_type: str = "automatic",
    now: datetime | None = None,
) -> CompressedContext:
    """Compact *items* into one artifact.

    Raises CompressionError if *items* is empty.
    """
    if not items:
        raise CompressionError("no items to compress")

    parts: list[str] = []
    key_points: list[str] = []
    important_files: list[str] = []
    recent_decisions: list[str] = []
    original_size = 0

    for item in items:
        parts.append(item.content)
        original_size += _byte_len(item.content)

        if "file" in item.metadata:
            _append_unique(important_files, item.metadata["file"])
        if "decision" in item.metadata:
            _append_unique(recent_decisions, item.metadata["decision"])

        if item.importance > constants.KEY_POINT_IMPORTANCE:
            point = extract_key_point(item.content)
            if point:
                _append_unique(key_points, point)

    # Each item is newline-terminated, as if streamed into one buffer.
    all_content = "".join(part + "\n" for part in parts)
    summary = generate_summary(all_content)

    return CompressedContext(
        summary=summary,
        key_points=key_points,
        important_files=important_files,
        recent_decisions=recent_decisions,
        metadata={
            "compressed_items": str(len(items)),
            "compression_type": compression_type,
        },
        compressed_at=now or datetime.now(UTC),
        original_size=original_size,
        compressed_size=_byte_len(summary) + _byte_len("".join(key_points)),
    )
