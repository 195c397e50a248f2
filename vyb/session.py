"""Session-side adapter onto the context memory.

The interactive session driver records each turn here and asks for ranked
context before building a model prompt. The driver never touches the tiers
directly.
"""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import PurePath
from typing import TYPE_CHECKING

import structlog
from pydantic import BaseModel, Field

from vyb.contextmanager.errors import ContextError
from vyb.contextmanager.models import ContextItem, ContextTier
from vyb.history import ConversationHistoryManager

if TYPE_CHECKING:
    from vyb.contextmanager.manager import SmartContextManager

logger = structlog.get_logger()

NO_CONTEXT = "(no context)"

_USER_INPUT_IMPORTANCE = 0.8
_ASSISTANT_RESPONSE_IMPORTANCE = 0.6


def _utcnow() -> datetime:
    return datetime.now(UTC)


class EnhancedChatMessage(BaseModel):
    """A conversation turn annotated with the context it was answered from."""

    role: str
    content: str = ""
    context_items: list[ContextItem] = Field(default_factory=list)
    compressed: bool = False
    summary: str = ""


class InteractiveSession(BaseModel):
    """What the user is working on right now."""

    session_id: str
    current_file: str = ""
    current_function: str = ""
    working_context: list[ContextItem] = Field(default_factory=list)
    recent_changes: list[str] = Field(default_factory=list)
    user_intent: str = ""
    session_metadata: dict[str, str] = Field(default_factory=dict)
    start_time: datetime = Field(default_factory=_utcnow)
    last_activity: datetime = Field(default_factory=_utcnow)


class SessionContext:
    """Records session turns into a SmartContextManager and reads them back."""

    def __init__(
        self,
        manager: SmartContextManager,
        session_id: str,
        history_manager: ConversationHistoryManager | None = None,
    ) -> None:
        self.manager = manager
        self.state = InteractiveSession(session_id=session_id)
        self._history = history_manager or ConversationHistoryManager()
        self._log = logger.bind(session_id=session_id)

    @property
    def session_id(self) -> str:
        return self.state.session_id

    def record_user_input(self, text: str) -> ContextItem:
        return self._record(text, "user_input", _USER_INPUT_IMPORTANCE)

    def record_assistant_response(self, text: str) -> ContextItem:
        return self._record(text, "assistant_response", _ASSISTANT_RESPONSE_IMPORTANCE)

    def record_file_change(self, path: str, summary: str, decision: str | None = None) -> ContextItem:
        """Remember an edit to *path*; its extension drives importance scoring."""
        metadata = {"type": "file_change", "session_id": self.session_id, "file": path}
        file_type = PurePath(path).suffix.lstrip(".").lower()
        if file_type:
            metadata["file_type"] = file_type
        if decision:
            metadata["decision"] = decision

        item = ContextItem(tier=ContextTier.SHORT_TERM, content=summary, metadata=metadata)
        self._add(item)
        self.state.current_file = path
        self.state.recent_changes.append(path)
        self.state.last_activity = _utcnow()
        return item

    def update_working_context(self, items: list[ContextItem]) -> None:
        """Store *items* and make them the session's working set.

        The first add failure propagates and leaves the working set as it was.
        """
        for item in items:
            self.manager.add(item)
        self.state.working_context = list(items)
        self.state.last_activity = _utcnow()

    def relevant_context(self, query: str, max_items: int = 10) -> list[ContextItem]:
        return self.manager.query(query, max_items)

    def optimized_context(self, query: str, max_items: int = 10) -> str:
        """Render retrieved context as prompt text, compacted when possible."""
        items = self.manager.query(query, max_items)
        if not items:
            return NO_CONTEXT

        try:
            compressed = self.manager.compress(force=True)
        except ContextError:
            self._log.warning("context compaction failed, using raw context", exc_info=True)
            compressed = None

        if compressed is None:
            contents = [item.content for item in items if item.content]
            return "\n".join(contents) if contents else NO_CONTEXT

        lines: list[str] = []
        if compressed.summary:
            lines.append(compressed.summary)
        points = [point for point in compressed.key_points if point]
        if points:
            lines.append("Key points:")
            lines.extend(f"- {point}" for point in points)
        return "\n".join(lines) if lines else NO_CONTEXT

    def build_messages(
        self,
        system_prompt: str,
        history: list[EnhancedChatMessage],
        query: str,
        max_items: int = 10,
    ) -> list[dict[str, str]]:
        """Build a model prompt with context retrieved for *query*."""
        items = self.manager.query(query, max_items)
        return self._history.build_messages(system_prompt, history, context_items=items)

    def _record(self, text: str, kind: str, importance: float) -> ContextItem:
        item = ContextItem(
            tier=ContextTier.IMMEDIATE,
            content=text,
            metadata={"type": kind, "session_id": self.session_id},
            importance=importance,
        )
        self._add(item)
        self.state.last_activity = _utcnow()
        return item

    def _add(self, item: ContextItem) -> None:
        try:
            self.manager.add(item)
        except ContextError:
            # The item is stored even when overflow compaction fails.
            self._log.warning("context add reported an error", item_id=item.id, exc_info=True)
