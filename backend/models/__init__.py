"""Data models for the StudyDocs RAG engine."""
from .chunk import Chunk, RelevantChunk, PAGE_NUMBER_PLACEHOLDER
from .document import DocumentStatus, ExtractedDocument, StoredDocument
from .conversation import ChatMessage, ChatHistory
from .study_material import Flashcard, QuizQuestion, DocumentSummary

__all__ = [
    "Chunk",
    "RelevantChunk",
    "PAGE_NUMBER_PLACEHOLDER",
    "DocumentStatus",
    "ExtractedDocument",
    "StoredDocument",
    "ChatMessage",
    "ChatHistory",
    "Flashcard",
    "QuizQuestion",
    "DocumentSummary",
]
