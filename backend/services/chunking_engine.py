"""Chunking engine with paragraph-preserving, overlap-linked splitting."""
import logging
import re
from dataclasses import dataclass, field, replace
from functools import reduce
from typing import Any, List, Sequence, Tuple, Union

from models.chunk import Chunk, PAGE_NUMBER_PLACEHOLDER
from config import CHUNK_SIZE, CHUNK_OVERLAP
from services.coercion import coerce_int

logger = logging.getLogger(__name__)

# Fallbacks for missing or non-numeric parameters follow the configured sizes
DEFAULT_CHUNK_SIZE = CHUNK_SIZE
DEFAULT_CHUNK_OVERLAP = CHUNK_OVERLAP
PARAGRAPH_SEPARATOR = "\n\n"

_LINE_BREAKS = re.compile(r"\n+")


def normalize_chunk_params(chunk_size: Any, chunk_overlap: Any) -> Tuple[int, int]:
    """Clamp chunk size to >= 1 and overlap to [0, chunk_size - 1]."""
    size = max(1, coerce_int(chunk_size, DEFAULT_CHUNK_SIZE))
    overlap = max(0, coerce_int(chunk_overlap, DEFAULT_CHUNK_OVERLAP))
    if overlap >= size:
        overlap = size - 1
    return size, overlap


def normalize_text(text: str) -> str:
    """Unify line endings, turn tabs into spaces and trim."""
    return text.replace("\r\n", "\n").replace("\r", "\n").replace("\t", " ").strip()


def split_paragraphs(text: str) -> List[str]:
    """Split normalized text on runs of newlines, dropping empty pieces."""
    return [piece.strip() for piece in _LINE_BREAKS.split(text) if piece.strip()]


def sliding_windows(words: Sequence[str], size: int, overlap: int) -> List[List[str]]:
    """
    Split a word list into windows of ``size`` words advancing by ``size - overlap``.

    Stops at the first window that reaches the end of the list, so the final
    window may be shorter than ``size``.
    """
    step = max(1, size - overlap)
    windows = []
    for start in range(0, len(words), step):
        windows.append(list(words[start:start + size]))
        if start + size >= len(words):
            break
    return windows


def _tail(words: Sequence[str], count: int) -> Tuple[str, ...]:
    if count <= 0:
        return ()
    return tuple(words[-count:])


@dataclass(frozen=True)
class Paragraphs:
    """Pending paragraph group, emitted joined by blank lines."""
    items: Tuple[str, ...] = ()

    @property
    def words(self) -> List[str]:
        return [word for paragraph in self.items for word in paragraph.split()]

    @property
    def has_new_content(self) -> bool:
        return bool(self.items)

    def render(self) -> str:
        return PARAGRAPH_SEPARATOR.join(self.items)


@dataclass(frozen=True)
class Words:
    """Pending raw words; the first ``carried`` were already emitted as overlap."""
    items: Tuple[str, ...] = ()
    carried: int = 0

    @property
    def words(self) -> List[str]:
        return list(self.items)

    @property
    def has_new_content(self) -> bool:
        return len(self.items) > self.carried

    def render(self) -> str:
        return " ".join(self.items)


Pending = Union[Paragraphs, Words]


@dataclass(frozen=True)
class FoldState:
    """Accumulator threaded through the paragraph fold."""
    pending: Pending = field(default_factory=Paragraphs)
    next_index: int = 0
    chunks: Tuple[Chunk, ...] = ()


def emit(state: FoldState, content: str) -> FoldState:
    """Append a chunk with the next sequential index."""
    chunk = Chunk(
        content=content,
        chunk_index=state.next_index,
        page_number=PAGE_NUMBER_PLACEHOLDER
    )
    return replace(state, next_index=state.next_index + 1, chunks=state.chunks + (chunk,))


class ChunkingEngine:
    """Segments document text into bounded, overlapping chunks."""

    def __init__(self, chunk_size: Any = CHUNK_SIZE, chunk_overlap: Any = CHUNK_OVERLAP):
        """
        Initialize ChunkingEngine.

        Args:
            chunk_size: Target chunk size in words (coerced, never rejected)
            chunk_overlap: Words repeated at the start of the following chunk
        """
        self.chunk_size, self.chunk_overlap = normalize_chunk_params(chunk_size, chunk_overlap)
        logger.debug(f"ChunkingEngine configured: size={self.chunk_size}, overlap={self.chunk_overlap}")

    def chunk_text(self, text: str) -> List[Chunk]:
        """
        Split text into an ordered chunk sequence, preserving paragraphs where possible.

        Paragraphs are packed together until the next one would overflow the
        chunk size. Paragraphs longer than the chunk size are split with a
        sliding window over their words.

        Args:
            text: Full document text

        Returns:
            List of chunks with contiguous indexes starting at 0, empty for blank text
        """
        if not isinstance(text, str) or not text.strip():
            return []

        cleaned = normalize_text(text)
        paragraphs = split_paragraphs(cleaned)

        state = reduce(self.consume_paragraph, paragraphs, FoldState())
        chunks = list(self.flush(state).chunks)

        if not chunks and cleaned:
            logger.warning("Paragraph chunking produced no chunks, falling back to a plain sliding window")
            windows = sliding_windows(cleaned.split(), self.chunk_size, self.chunk_overlap)
            chunks = [
                Chunk(content=" ".join(window), chunk_index=index, page_number=PAGE_NUMBER_PLACEHOLDER)
                for index, window in enumerate(windows)
            ]

        logger.info(f"Created {len(chunks)} chunks from {len(paragraphs)} paragraphs")
        return chunks

    def consume_paragraph(self, state: FoldState, paragraph: str) -> FoldState:
        """Fold step: add one paragraph to the accumulator, emitting chunks as they fill."""
        paragraph_words = paragraph.split()
        if len(paragraph_words) > self.chunk_size:
            return self.split_oversized(state, paragraph_words)

        pending_words = state.pending.words
        if len(pending_words) + len(paragraph_words) > self.chunk_size:
            state = self.flush(state)
            if self.chunk_overlap == 0:
                pending: Pending = Paragraphs((paragraph,))
            else:
                seed = _tail(pending_words, self.chunk_overlap)
                pending = Words(seed + tuple(paragraph_words), carried=len(seed))
        else:
            pending = self._append(state.pending, paragraph)

        return self.settle(replace(state, pending=pending))

    def split_oversized(self, state: FoldState, paragraph_words: Sequence[str]) -> FoldState:
        """Flush pending content, then window an oversized paragraph on its own."""
        state = self.flush(state)
        for window in sliding_windows(paragraph_words, self.chunk_size, self.chunk_overlap):
            state = emit(state, " ".join(window))
        return state

    def settle(self, state: FoldState) -> FoldState:
        """Emit pending content once it reaches the chunk size, carrying the overlap forward."""
        pending = state.pending
        words = pending.words
        if len(words) < self.chunk_size or not pending.has_new_content:
            return state

        if len(words) == self.chunk_size:
            state = emit(state, pending.render())
            seed = _tail(words, self.chunk_overlap)
            carry: Pending = Words(seed, carried=len(seed)) if seed else Paragraphs()
            return replace(state, pending=carry)

        # Over the limit: only reachable through an overlap-seeded restart.
        items = tuple(words)
        carried = pending.carried if isinstance(pending, Words) else 0
        while len(items) > self.chunk_size:
            head = items[:self.chunk_size]
            state = emit(state, " ".join(head))
            seed = _tail(head, self.chunk_overlap)
            items = seed + items[self.chunk_size:]
            carried = len(seed)
        return self.settle(replace(state, pending=Words(items, carried=carried)))

    def flush(self, state: FoldState) -> FoldState:
        """Emit whatever new content is pending and clear the accumulator."""
        if state.pending.has_new_content:
            state = emit(state, state.pending.render())
        return replace(state, pending=Paragraphs())

    @staticmethod
    def _append(pending: Pending, paragraph: str) -> Paragraphs:
        if isinstance(pending, Paragraphs):
            return Paragraphs(pending.items + (paragraph,))
        # Carried words lead the group as their own paragraph.
        if pending.items:
            return Paragraphs((pending.render(), paragraph))
        return Paragraphs((paragraph,))
