"""Services for the StudyDocs RAG engine."""
from .chunking_engine import ChunkingEngine
from .retrieval_engine import RetrievalEngine, InvalidChunkError
from .document_loader import DocumentLoader, DocumentLoadError
from .document_store import DocumentStore, DocumentNotFoundError
from .document_processor import DocumentProcessor
from .chat_history import ChatHistoryStore
from .llm_client import LLMClient, LLMResponse, LLMError, LLMClientError
from .study_assistant import StudyAssistant, ChatAnswer, ConceptExplanation

__all__ = ['ChunkingEngine', 'RetrievalEngine', 'InvalidChunkError', 'DocumentLoader', 'DocumentLoadError', 'DocumentStore', 'DocumentNotFoundError', 'DocumentProcessor', 'ChatHistoryStore', 'LLMClient', 'LLMResponse', 'LLMError', 'LLMClientError', 'StudyAssistant', 'ChatAnswer', 'ConceptExplanation']
