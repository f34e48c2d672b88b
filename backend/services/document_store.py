"""In-memory document store keyed by document id and chunk index."""
import logging
import threading
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from models.chunk import Chunk
from models.document import DocumentStatus, StoredDocument

logger = logging.getLogger(__name__)


class DocumentNotFoundError(LookupError):
    """Raised when a document is unknown or not ready for retrieval."""


class DocumentStore:
    """Keeps processed documents and their chunk sequences in memory."""

    def __init__(self):
        self._documents: Dict[str, StoredDocument] = {}
        self._lock = threading.Lock()

    def create(self, filename: str) -> StoredDocument:
        """
        Register a new document in the PROCESSING state.

        Args:
            filename: Original name of the uploaded file

        Returns:
            The new StoredDocument
        """
        document = StoredDocument(document_id=self._generate_document_id(), filename=filename)
        with self._lock:
            self._documents[document.document_id] = document
        logger.info(f"Created document {document.document_id} for {filename}")
        return self._copy(document)

    def get(self, document_id: str) -> Optional[StoredDocument]:
        with self._lock:
            document = self._documents.get(document_id)
        return self._copy(document) if document else None

    def get_ready(self, document_id: str) -> StoredDocument:
        """Return a document that finished processing, or raise DocumentNotFoundError."""
        document = self.get(document_id)
        if document is None or document.status != DocumentStatus.READY:
            raise DocumentNotFoundError(f"Document not found or not ready: {document_id}")
        return document

    def mark_ready(self, document_id: str, extracted_text: str, chunks: Sequence[Chunk]) -> StoredDocument:
        """
        Attach extracted text and chunks to a document and mark it ready.

        Args:
            document_id: Document to update
            extracted_text: Full text the chunks were built from
            chunks: Chunker output, stored as copies

        Returns:
            The updated StoredDocument
        """
        return self._update(
            document_id,
            status=DocumentStatus.READY,
            extracted_text=extracted_text,
            chunks=[replace(chunk) for chunk in chunks],
            processing_error=None,
        )

    def mark_failed(self, document_id: str, error: str) -> StoredDocument:
        logger.warning(f"Document {document_id} failed processing: {error}")
        return self._update(
            document_id,
            status=DocumentStatus.FAILED,
            extracted_text="",
            chunks=[],
            processing_error=error,
        )

    def get_chunks(self, document_id: str) -> List[Chunk]:
        """Return the ordered chunk sequence of a ready document."""
        return self.get_ready(document_id).chunks

    def get_chunk(self, document_id: str, chunk_index: int) -> Optional[Chunk]:
        for chunk in self.get_chunks(document_id):
            if chunk.chunk_index == chunk_index:
                return chunk
        return None

    def delete(self, document_id: str) -> bool:
        with self._lock:
            removed = self._documents.pop(document_id, None)
        if removed:
            logger.info(f"Deleted document {document_id}")
        return removed is not None

    def count(self) -> int:
        with self._lock:
            return len(self._documents)

    def _update(self, document_id: str, **changes) -> StoredDocument:
        with self._lock:
            document = self._documents.get(document_id)
            if document is None:
                raise DocumentNotFoundError(f"Document not found: {document_id}")
            document = replace(document, processed_at=datetime.now(), **changes)
            self._documents[document_id] = document
        return self._copy(document)

    @staticmethod
    def _copy(document: StoredDocument) -> StoredDocument:
        return replace(document, chunks=[replace(chunk) for chunk in document.chunks])

    @staticmethod
    def _generate_document_id() -> str:
        return f"doc_{uuid.uuid4().hex[:12]}"
