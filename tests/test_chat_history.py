"""Unit tests for ChatHistoryStore."""
import sys
import threading
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

import pytest
from services.chat_history import ChatHistoryStore


class TestChatHistoryStore:
    """Test suite for ChatHistoryStore."""

    @pytest.fixture
    def history(self):
        return ChatHistoryStore()

    def test_unknown_document_has_no_messages(self, history):
        assert history.get_messages("doc_unknown") == []

    def test_add_turn_records_question_and_answer(self, history):
        snapshot = history.add_turn("doc_1", "What is ATP?", "An energy carrier.", [2, 0])

        assert snapshot.document_id == "doc_1"
        user, assistant = snapshot.messages
        assert (user.role, user.content, user.relevant_chunks) == ("user", "What is ATP?", [])
        assert (assistant.role, assistant.content, assistant.relevant_chunks) == (
            "assistant", "An energy carrier.", [2, 0]
        )
        assert assistant.timestamp >= snapshot.created_at

    def test_turns_are_kept_in_order(self, history):
        history.add_turn("doc_1", "first", "one", [0])
        history.add_turn("doc_1", "second", "two", [1])

        assert [m.content for m in history.get_messages("doc_1")] == ["first", "one", "second", "two"]

    def test_histories_are_separate_per_document(self, history):
        history.add_turn("doc_1", "first", "one", [])
        history.add_turn("doc_2", "other", "two", [])

        assert len(history.get_messages("doc_1")) == 2
        assert history.get_messages("doc_2")[0].content == "other"

    def test_returned_messages_are_copies(self, history):
        history.add_turn("doc_1", "first", "one", [3])

        messages = history.get_messages("doc_1")
        messages[1].relevant_chunks.append(99)
        messages.clear()

        assert history.get_messages("doc_1")[1].relevant_chunks == [3]

    def test_clear(self, history):
        history.add_turn("doc_1", "first", "one", [])

        assert history.clear("doc_1") is True
        assert history.clear("doc_1") is False
        assert history.get_messages("doc_1") == []

    def test_concurrent_turns_are_all_recorded(self, history):
        threads = [
            threading.Thread(target=history.add_turn, args=("doc_1", f"q{i}", f"a{i}", [i]))
            for i in range(20)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(history.get_messages("doc_1")) == 40
