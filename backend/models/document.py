"""Document data models."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from .chunk import Chunk


class DocumentStatus(str, Enum):
    """Processing state of a stored document."""
    PROCESSING = "processing"
    READY = "ready"
    FAILED = "failed"


@dataclass
class ExtractedDocument:
    """Full text extracted from an uploaded file."""
    filename: str
    text: str
    total_pages: int


@dataclass
class StoredDocument:
    """A document record together with its chunk sequence."""
    document_id: str
    filename: str
    status: DocumentStatus = DocumentStatus.PROCESSING
    extracted_text: str = ""
    chunks: List[Chunk] = field(default_factory=list)
    processing_error: Optional[str] = None
    processed_at: Optional[datetime] = None
