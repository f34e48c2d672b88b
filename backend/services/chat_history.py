"""In-memory chat history for multi-turn conversations about a document."""
import logging
import threading
from dataclasses import replace
from datetime import datetime
from typing import Dict, List, Sequence

from models.conversation import ASSISTANT_ROLE, USER_ROLE, ChatHistory, ChatMessage

logger = logging.getLogger(__name__)


class ChatHistoryStore:
    """Keeps one ChatHistory per document id."""

    def __init__(self):
        self._histories: Dict[str, ChatHistory] = {}
        self._lock = threading.Lock()

    def add_turn(
        self,
        document_id: str,
        question: str,
        answer: str,
        relevant_chunks: Sequence[int]
    ) -> ChatHistory:
        """
        Record a question and its answer, creating the history on first use.

        Args:
            document_id: Document the conversation is about
            question: User question
            answer: Generated answer
            relevant_chunks: Chunk indexes the answer was grounded on

        Returns:
            Copy of the updated history
        """
        timestamp = datetime.now()
        user_message = ChatMessage(role=USER_ROLE, content=question, timestamp=timestamp)
        assistant_message = ChatMessage(
            role=ASSISTANT_ROLE,
            content=answer,
            timestamp=timestamp,
            relevant_chunks=list(relevant_chunks)
        )

        with self._lock:
            history = self._histories.get(document_id)
            if history is None:
                history = ChatHistory(document_id=document_id, messages=[], created_at=timestamp)
                self._histories[document_id] = history
                logger.info(f"Created chat history for document {document_id}")
            history.messages.extend([user_message, assistant_message])
            snapshot = self._copy(history)

        logger.debug(f"Added turn to chat history of {document_id} ({len(snapshot.messages)} messages)")
        return snapshot

    def get_messages(self, document_id: str) -> List[ChatMessage]:
        """Return the messages recorded for a document, or [] when there are none."""
        with self._lock:
            history = self._histories.get(document_id)
            return self._copy(history).messages if history else []

    def clear(self, document_id: str) -> bool:
        with self._lock:
            removed = self._histories.pop(document_id, None)
        if removed:
            logger.info(f"Cleared chat history for document {document_id}")
        return removed is not None

    @staticmethod
    def _copy(history: ChatHistory) -> ChatHistory:
        return replace(
            history,
            messages=[replace(message, relevant_chunks=list(message.relevant_chunks)) for message in history.messages]
        )
