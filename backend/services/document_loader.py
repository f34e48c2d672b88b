"""Document loading service for extracting full text from uploaded files."""
import logging
import os
import fitz  # PyMuPDF

from models.document import ExtractedDocument

logger = logging.getLogger(__name__)

TEXT_EXTENSIONS = (".txt", ".md")


class DocumentLoadError(Exception):
    """Raised when a file cannot be turned into text."""


class DocumentLoader:
    """Loads PDF and plain-text files as a single text string per document."""

    def load(self, filepath: str) -> ExtractedDocument:
        """
        Extract the full text of a file.

        Args:
            filepath: Path to a .pdf, .txt or .md file

        Returns:
            ExtractedDocument with the complete text and page count

        Raises:
            DocumentLoadError: If the file is missing, empty, unsupported or unreadable
        """
        filename = os.path.basename(filepath)

        if not os.path.isfile(filepath):
            raise DocumentLoadError(f"File not found: {filepath}")
        if os.path.getsize(filepath) == 0:
            raise DocumentLoadError("Uploaded file is empty (0 bytes).")

        extension = os.path.splitext(filename)[1].lower()
        if extension == ".pdf":
            document = self._load_pdf(filepath, filename)
        elif extension in TEXT_EXTENSIONS:
            document = self._load_text(filepath, filename)
        else:
            raise DocumentLoadError(f"Unsupported file type: {extension or filename}")

        logger.info(f"Loaded {filename}: {document.total_pages} pages, {len(document.text.split())} words")
        return document

    def _load_pdf(self, filepath: str, filename: str) -> ExtractedDocument:
        """
        Load a PDF file and join the text of all pages.

        Args:
            filepath: Full path to PDF file
            filename: Name of the file

        Returns:
            ExtractedDocument with extracted text
        """
        try:
            pdf_document = fitz.open(filepath)
            try:
                page_texts = [page.get_text() for page in pdf_document]
            finally:
                pdf_document.close()
        except Exception as e:
            logger.error(f"Failed to load PDF {filename}: {str(e)}", exc_info=True)
            raise DocumentLoadError(f"Failed to extract text from PDF: {str(e)}") from e

        return ExtractedDocument(
            filename=filename,
            text="\n".join(page_texts),
            total_pages=len(page_texts)
        )

    def _load_text(self, filepath: str, filename: str) -> ExtractedDocument:
        try:
            with open(filepath, encoding="utf-8") as handle:
                text = handle.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read {filename}: {str(e)}")
            raise DocumentLoadError(f"Failed to read text file: {str(e)}") from e

        return ExtractedDocument(filename=filename, text=text, total_pages=1)
