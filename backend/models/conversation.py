"""Chat history data models."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List

USER_ROLE = "user"
ASSISTANT_ROLE = "assistant"


@dataclass
class ChatMessage:
    """A single message in a document chat."""
    role: str  # "user" or "assistant"
    content: str
    timestamp: datetime
    relevant_chunks: List[int] = field(default_factory=list)


@dataclass
class ChatHistory:
    """All messages exchanged about one document, oldest first."""
    document_id: str
    messages: List[ChatMessage]
    created_at: datetime
