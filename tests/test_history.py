"""Tests for the conversation history manager."""

from __future__ import annotations

from vyb.contextmanager.models import ContextItem, ContextTier
from vyb.history import ConversationHistoryManager, HistoryConfig, estimate_tokens, truncate_tool_result
from vyb.session import EnhancedChatMessage


def test_estimate_tokens_basic() -> None:
    assert estimate_tokens("hello") == 1  # 5 chars / 4 = 1
    assert estimate_tokens("a" * 100) == 25
    assert estimate_tokens("") == 1  # min 1


def test_truncate_tool_result_short() -> None:
    assert truncate_tool_result("short output", 100) == "short output"


def test_truncate_tool_result_long() -> None:
    result = truncate_tool_result("A" * 200, 100)
    assert len(result) < 200
    assert "characters omitted" in result
    assert result.startswith("A" * 50)
    assert result.endswith("A" * 50)


def test_build_messages_basic() -> None:
    mgr = ConversationHistoryManager()
    history = [
        EnhancedChatMessage(role="user", content="Hello"),
        EnhancedChatMessage(role="assistant", content="Hi there!"),
    ]
    msgs = mgr.build_messages("You are a helpful assistant.", history)

    assert len(msgs) == 3
    assert msgs[0] == {"role": "system", "content": "You are a helpful assistant."}
    assert msgs[1]["role"] == "user"
    assert msgs[2]["role"] == "assistant"


def test_build_messages_with_context_items() -> None:
    mgr = ConversationHistoryManager()
    items = [
        ContextItem(tier=ContextTier.MEDIUM_TERM, content="fix parser bug"),
        ContextItem(tier=ContextTier.IMMEDIATE, content=""),
    ]
    msgs = mgr.build_messages("Base prompt.", [], context_items=items)

    assert len(msgs) == 1
    content = msgs[0]["content"]
    assert content.startswith("Base prompt.")
    assert "## Relevant Context" in content
    assert "### Summary\nfix parser bug" in content
    assert "Immediate" not in content


def test_build_messages_truncates_tool_results() -> None:
    mgr = ConversationHistoryManager(HistoryConfig(tool_output_max_chars=50))
    msgs = mgr.build_messages("system", [EnhancedChatMessage(role="tool", content="X" * 200)])
    assert len(msgs[1]["content"]) < 200
    assert "characters omitted" in msgs[1]["content"]


def test_build_messages_budget_drops_old() -> None:
    mgr = ConversationHistoryManager(HistoryConfig(max_context_tokens=20, min_recent_messages=2))
    history = [
        EnhancedChatMessage(role="user", content="A" * 100),
        EnhancedChatMessage(role="assistant", content="B" * 100),
        EnhancedChatMessage(role="user", content="C" * 10),
        EnhancedChatMessage(role="assistant", content="D" * 10),
    ]
    msgs = mgr.build_messages("sys", history)

    assert msgs[0]["role"] == "system"
    assert [m["content"] for m in msgs[1:]] == ["C" * 10, "D" * 10]


def test_build_messages_system_over_budget() -> None:
    mgr = ConversationHistoryManager(HistoryConfig(max_context_tokens=5))
    msgs = mgr.build_messages("S" * 100, [EnhancedChatMessage(role="user", content="hi")])
    assert len(msgs) == 1


def test_build_messages_empty_history() -> None:
    msgs = ConversationHistoryManager().build_messages("prompt", [])
    assert msgs == [{"role": "system", "content": "prompt"}]
