"""Chunk data models."""
from dataclasses import dataclass

# No page tracking is done; every chunk carries this value.
PAGE_NUMBER_PLACEHOLDER = 0


@dataclass
class Chunk:
    """Represents a contiguous fragment of a document used for retrieval."""
    content: str
    chunk_index: int  # unique within a document, contiguous from 0
    page_number: int = PAGE_NUMBER_PLACEHOLDER


@dataclass
class RelevantChunk:
    """Chunk annotated with ranking metadata for a single query."""
    content: str
    chunk_index: int
    page_number: int
    score: float  # length-normalized score used for ordering
    raw_score: float
    matched_words: int  # distinct query tokens found in the chunk
