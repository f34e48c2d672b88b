"""Document processing pipeline: extract text, chunk it, store the result."""
import logging
import os
from typing import Optional

from models.document import StoredDocument
from services.chunking_engine import ChunkingEngine
from services.document_loader import DocumentLoader, DocumentLoadError
from services.document_store import DocumentStore

logger = logging.getLogger(__name__)

EMPTY_TEXT_ERROR = "No text extracted from document (empty result)."


class DocumentProcessor:
    """Turns uploaded files into ready, chunked documents in the store."""

    def __init__(
        self,
        document_store: DocumentStore,
        document_loader: Optional[DocumentLoader] = None,
        chunking_engine: Optional[ChunkingEngine] = None
    ):
        """
        Initialize the processor.

        Args:
            document_store: Store receiving the processed documents
            document_loader: Text extractor (defaults to DocumentLoader())
            chunking_engine: Chunker (defaults to the configured chunk size and overlap)
        """
        self.document_store = document_store
        self.document_loader = document_loader or DocumentLoader()
        self.chunking_engine = chunking_engine or ChunkingEngine()

    def process(self, filepath: str) -> StoredDocument:
        """
        Extract, chunk and store a file.

        Load failures do not propagate; they leave the document in the FAILED
        state with the error message attached.

        Args:
            filepath: Path of the uploaded file

        Returns:
            The stored document, READY or FAILED
        """
        document = self.document_store.create(os.path.basename(filepath))

        try:
            extracted = self.document_loader.load(filepath)
        except DocumentLoadError as e:
            logger.error(f"Error processing document {document.document_id}: {e}")
            return self.document_store.mark_failed(document.document_id, str(e))

        return self._chunk_and_store(document.document_id, extracted.text)

    def process_text(self, filename: str, text: str) -> StoredDocument:
        """Chunk and store text that was already extracted upstream."""
        document = self.document_store.create(filename)
        return self._chunk_and_store(document.document_id, text)

    def _chunk_and_store(self, document_id: str, text: str) -> StoredDocument:
        if not text or not text.strip():
            return self.document_store.mark_failed(document_id, EMPTY_TEXT_ERROR)

        chunks = self.chunking_engine.chunk_text(text)
        stored = self.document_store.mark_ready(document_id, text, chunks)
        logger.info(f"Document {document_id} processed successfully: {len(chunks)} chunks")
        return stored
