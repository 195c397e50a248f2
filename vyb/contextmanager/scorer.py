"""Heuristic scoring for context items: importance and relevance.

Importance is intrinsic and assigned once at insertion:

    importance = 0.1 + 0.3 * complexity + 0.2 * semantic_density
                 + sum(weight * min(2, occurrences)) over keyword table
                 + file-type bonus
    clamped to [0, 1]

Relevance is recomputed on every query:

    relevance = overlap / len(query_tokens)
                * (0.5 + 0.5 * importance)
                * (0.8 + 0.2 * min(1, access_count / 10))
                * exp(-hours_since_creation / 24)
    clamped to [0, 1]

An empty query yields a baseline standing value instead:
``0.3 + 0.4 * complexity + 0.3 * importance``.

All functions here are pure and safe to call without holding any lock.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from vyb.contextmanager.models import ContextItem

# Saturation points for content complexity.
_LINE_SATURATION = 100.0
_WORD_SATURATION = 500.0
_CHAR_SATURATION = 2000.0

_TECHNICAL_TERMS = (
    "function",
    "class",
    "interface",
    "struct",
    "method",
    "variable",
    "algorithm",
    "database",
    "api",
    "server",
    "client",
    "framework",
    "library",
    "module",
    "package",
    "dependency",
    "version",
    "config",
)

_STRUCTURAL_CHARS = "{}()[]"

KEYWORD_WEIGHTS: dict[str, float] = {
    # high priority
    "error": 0.15,
    "エラー": 0.15,
    "bug": 0.15,
    "バグ": 0.15,
    "security": 0.15,
    "セキュリティ": 0.15,
    "vulnerability": 0.15,
    "脆弱性": 0.15,
    # mid priority
    "performance": 0.12,
    "パフォーマンス": 0.12,
    "optimization": 0.12,
    "最適化": 0.12,
    "fix": 0.10,
    "修正": 0.10,
    "todo": 0.10,
    "やること": 0.10,
    "important": 0.10,
    "重要": 0.10,
    # low priority
    "function": 0.05,
    "関数": 0.05,
    "class": 0.05,
    "クラス": 0.05,
    "interface": 0.05,
    "インターフェース": 0.05,
}

_MAX_KEYWORD_MULTIPLIER = 2

_SOURCE_TYPES = ("go", "py", "js", "ts")
_DOC_TYPES = ("md", "txt")
_CONFIG_TYPES = ("json", "yaml", "toml")

# file_type -> (base bonus, complexity weight)
FILE_TYPE_BONUS: dict[str, tuple[float, float]] = {
    **{t: (0.1, 0.2) for t in _SOURCE_TYPES},
    **{t: (0.05, 0.1) for t in _DOC_TYPES},
    **{t: (0.08, 0.12) for t in _CONFIG_TYPES},
}


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def content_complexity(content: str) -> float:
    """Weighted mix of line, word and character counts, each saturating at 1."""
    if not content:
        return 0.0

    lines = content.count("\n") + 1
    words = len(content.split())
    chars = len(content)

    line_score = min(1.0, lines / _LINE_SATURATION)
    word_score = min(1.0, words / _WORD_SATURATION)
    char_score = min(1.0, chars / _CHAR_SATURATION)

    return line_score * 0.3 + word_score * 0.4 + char_score * 0.3


def semantic_density(content: str) -> float:
    """Share of technical vocabulary plus scaled bracket density, capped at 1."""
    if not content:
        return 0.0

    words = content.lower().split()
    if not words:
        return 0.0

    technical = sum(1 for word in words if any(term in word for term in _TECHNICAL_TERMS))
    structural = sum(content.count(ch) for ch in _STRUCTURAL_CHARS)

    technical_density = technical / len(words)
    structural_density = structural / len(content)

    return min(1.0, technical_density * 0.7 + structural_density * 10.0 * 0.3)


def _go_tokens(content: str) -> float:
    return (content.count("func ") + content.count("type ") + content.count("interface{")) / 20.0


def _py_tokens(content: str) -> float:
    return (content.count("class ") + content.count("def ") + content.count("@")) / 15.0


def _js_tokens(content: str) -> float:
    funcs = content.count("function ") + content.count("=> ")
    classes = content.count("class ")
    modules = content.count("import ") + content.count("export ")
    return (funcs + classes + modules) / 25.0


def _config_tokens(content: str) -> float:
    nesting = content.count("{") + content.count("[")
    lines = content.count("\n") + 1
    return (nesting + lines) / 50.0


_FILE_TYPE_TOKENS: dict[str, Callable[[str], float]] = {
    "go": _go_tokens,
    "py": _py_tokens,
    "js": _js_tokens,
    "ts": _js_tokens,
    "json": _config_tokens,
    "yaml": _config_tokens,
    "toml": _config_tokens,
}


def file_type_complexity(content: str, file_type: str) -> float:
    """Content complexity plus language-specific declaration density."""
    base = content_complexity(content)
    counter = _FILE_TYPE_TOKENS.get(file_type)
    if counter is None:
        return base
    return min(1.0, base + counter(content))


def calculate_importance(item: ContextItem) -> float:
    """Compute the intrinsic importance of *item* from its content and metadata."""
    content = item.content.lower()

    importance = 0.1 + content_complexity(content) * 0.3 + semantic_density(content) * 0.2

    for keyword, weight in KEYWORD_WEIGHTS.items():
        occurrences = content.count(keyword)
        if occurrences:
            importance += weight * min(_MAX_KEYWORD_MULTIPLIER, occurrences)

    file_type = item.metadata.get("file_type")
    if file_type in FILE_TYPE_BONUS:
        base, weight = FILE_TYPE_BONUS[file_type]
        importance += base + file_type_complexity(content, file_type) * weight

    return _clamp(importance)


def time_decay(created_at: datetime | None, now: datetime | None = None) -> float:
    """Exponential decay with a 24h time constant (~37% left after a day)."""
    if created_at is None:
        return 1.0
    now = now or datetime.now(UTC)
    hours_since = max(0.0, (now - created_at).total_seconds() / 3600)
    return math.exp(-hours_since / 24.0)


def calculate_relevance(item: ContextItem, query: str, now: datetime | None = None) -> float:
    """Score *item* against *query*. Pure: does not touch the item."""
    if query == "":
        return _clamp(0.3 + content_complexity(item.content) * 0.4 + item.importance * 0.3)

    query_tokens = query.lower().split()
    content_tokens = item.content.lower().split()
    if not query_tokens or not content_tokens:
        return 0.0

    matches = 0
    for q in query_tokens:
        for c in content_tokens:
            if q in c or c in q:
                matches += 1

    relevance = matches / len(query_tokens)
    relevance *= 0.5 + 0.5 * item.importance

    access_weight = min(1.0, item.access_count / 10.0)
    relevance *= 0.8 + 0.2 * access_weight

    relevance *= time_decay(item.timestamp, now)

    return _clamp(relevance)
