"""Conversation history assembly for model prompts.

Assembles system prompt + retrieved context + conversation history within a
token budget, using a head-and-tail strategy to preserve the most relevant
turns.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from vyb.constants import CHARS_PER_TOKEN

if TYPE_CHECKING:
    from vyb.contextmanager.models import ContextItem
    from vyb.session import EnhancedChatMessage

logger = structlog.get_logger()

# Maximum characters for tool result output before truncation.
DEFAULT_TOOL_OUTPUT_MAX_CHARS = 10_000

_TIER_LABELS = {
    "immediate": "Immediate",
    "short_term": "Short-term",
    "medium_term": "Summary",
    "long_term": "Long-term",
}


def estimate_tokens(text: str) -> int:
    """Fast token estimate using 4-chars-per-token heuristic."""
    return max(1, len(text) // CHARS_PER_TOKEN)


def truncate_tool_result(text: str, max_chars: int = DEFAULT_TOOL_OUTPUT_MAX_CHARS) -> str:
    """Truncate long tool results, keeping head + tail."""
    if len(text) <= max_chars:
        return text
    half = max_chars // 2
    omitted = len(text) - max_chars
    return f"{text[:half]}\n\n... ({omitted} characters omitted) ...\n\n{text[-half:]}"


@dataclass
class HistoryConfig:
    """Configuration for history assembly."""

    max_context_tokens: int = 32_000
    tool_output_max_chars: int = DEFAULT_TOOL_OUTPUT_MAX_CHARS
    # Minimum number of recent messages to always include.
    min_recent_messages: int = 10


class ConversationHistoryManager:
    """Builds the messages array for model calls within a token budget.

    1. System prompt is always included first.
    2. Retrieved context items are appended to the system prompt, best first.
    3. The most recent ``min_recent_messages`` messages are always included.
    4. Older messages are included from the beginning until the budget runs out.
    5. Long tool results are truncated.
    """

    def __init__(self, config: HistoryConfig | None = None) -> None:
        self._config = config or HistoryConfig()

    def build_messages(
        self,
        system_prompt: str,
        history: list[EnhancedChatMessage],
        context_items: list[ContextItem] | None = None,
    ) -> list[dict[str, str]]:
        """Assemble the final messages list as ``[{"role": ..., "content": ...}]``."""
        system_content = self._build_system_content(system_prompt, context_items)
        system_msg = {"role": "system", "content": system_content}
        system_tokens = estimate_tokens(system_content)

        budget = self._config.max_context_tokens - system_tokens
        if budget <= 0:
            logger.warning("system prompt alone exceeds token budget", tokens=system_tokens)
            return [system_msg]

        all_msgs = [self._to_msg_dict(m) for m in history]

        min_recent = min(self._config.min_recent_messages, len(all_msgs))
        tail = all_msgs[-min_recent:] if min_recent > 0 else []
        head = all_msgs[: len(all_msgs) - min_recent]

        tail_tokens = sum(estimate_tokens(m["content"]) for m in tail)
        remaining = budget - tail_tokens

        included_head: list[dict[str, str]] = []
        for msg in head:
            msg_tokens = estimate_tokens(msg["content"])
            if msg_tokens > remaining:
                break
            included_head.append(msg)
            remaining -= msg_tokens

        result = [system_msg, *included_head, *tail]
        logger.debug(
            "history assembled",
            messages=len(result),
            dropped=len(head) - len(included_head),
            budget=self._config.max_context_tokens,
        )
        return result

    def _build_system_content(self, base_prompt: str, context_items: list[ContextItem] | None) -> str:
        if not context_items:
            return base_prompt

        sections: list[str] = [base_prompt, "\n\n## Relevant Context"]
        for item in context_items:
            if item.content:
                label = _TIER_LABELS.get(str(item.tier), "Context")
                sections.append(f"\n\n### {label}\n{item.content}")
        return "".join(sections)

    def _to_msg_dict(self, msg: EnhancedChatMessage) -> dict[str, str]:
        content = msg.summary if msg.compressed and msg.summary else msg.content
        if msg.role == "tool":
            content = truncate_tool_result(content, self._config.tool_output_max_chars)
        return {"role": msg.role, "content": content}
