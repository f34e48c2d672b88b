"""Retrieval engine for ranking chunks against a query by lexical relevance."""
import logging
import math
import re
from collections import Counter
from typing import Any, List, Sequence, Tuple

from models.chunk import Chunk, RelevantChunk, PAGE_NUMBER_PLACEHOLDER
from config import MAX_RELEVANT_CHUNKS
from services.coercion import coerce_int

logger = logging.getLogger(__name__)

STOP_WORDS = frozenset({
    "the", "is", "at", "which", "on", "a", "an", "and", "or", "but",
    "in", "with", "to", "for", "of", "as", "by", "this", "that", "it",
})

MIN_TOKEN_LENGTH = 3
EXACT_MATCH_WEIGHT = 3
PARTIAL_MATCH_WEIGHT = 1
MULTI_TERM_BONUS = 2
POSITION_BONUS = 0.05
DEFAULT_MAX_RESULTS = MAX_RELEVANT_CHUNKS

_WORD = re.compile(r"\w+")
_NON_WORD = re.compile(r"\W+")


class InvalidChunkError(ValueError):
    """Raised when a chunk sequence contains entries that cannot be scored."""


def tokenize_query(query: str) -> List[str]:
    """
    Turn a free-text query into search tokens.

    Tokens are lowercased, stripped of everything but letters, digits and
    underscores, and dropped when shorter than three characters or a stop word.
    Duplicates are kept; each occurrence contributes to the score.
    """
    tokens = []
    for raw in query.lower().split():
        token = _NON_WORD.sub("", raw)
        if len(token) >= MIN_TOKEN_LENGTH and token not in STOP_WORDS:
            tokens.append(token)
    return tokens


def term_frequencies(text: str) -> Counter:
    """Count every maximal run of word characters in lowercased text."""
    return Counter(_WORD.findall(text.lower()))


def rank_key(result: RelevantChunk) -> Tuple[float, int, int]:
    """Sort key: score desc, then matched words desc, then chunk index asc."""
    return (-result.score, -result.matched_words, result.chunk_index)


def _validate(chunks: Sequence[Any]) -> None:
    for position, chunk in enumerate(chunks):
        content = getattr(chunk, "content", None)
        chunk_index = getattr(chunk, "chunk_index", None)
        if not isinstance(content, str):
            raise InvalidChunkError(
                f"Chunk at position {position} has no text content (got {type(content).__name__})"
            )
        if not isinstance(chunk_index, int) or isinstance(chunk_index, bool):
            raise InvalidChunkError(
                f"Chunk at position {position} has an invalid chunk_index: {chunk_index!r}"
            )


class RetrievalEngine:
    """Rank stored chunks by weighted keyword matches against a query."""

    def find_relevant(
        self,
        chunks: Sequence[Chunk],
        query: str,
        max_results: Any = MAX_RELEVANT_CHUNKS
    ) -> List[RelevantChunk]:
        """
        Score chunks against a query and return the best matches.

        Scoring per chunk:
        1. Whole-word hits of each query token weigh 3
        2. Substring-only hits (inside longer words) weigh 1
        3. More than one distinct token matched adds 2 per matched token
        4. The raw score is divided by sqrt(word count) to favour dense chunks
        5. Matching chunks get a small bonus for appearing earlier

        Args:
            chunks: Ordered chunk sequence of one document (not modified)
            query: User question, concept name, or other free text
            max_results: Maximum number of chunks to return

        Returns:
            Relevant chunks sorted by score, then matched words, then chunk index

        Raises:
            InvalidChunkError: If a chunk lacks string content or an integer index
        """
        if not chunks:
            return []
        if not isinstance(query, str) or not query.strip():
            logger.debug("Empty query string provided, returning empty results")
            return []

        _validate(chunks)

        tokens = tokenize_query(query)
        if not tokens:
            logger.info(f"No searchable tokens in query: {query[:100]!r}")
            return []

        limit = max(0, coerce_int(max_results, DEFAULT_MAX_RESULTS))
        total = len(chunks)

        results = [
            self.score_chunk(chunk, tokens, position, total)
            for position, chunk in enumerate(chunks)
        ]
        ranked = sorted(
            (result for result in results if result.score > 0),
            key=rank_key
        )

        logger.info(
            f"Retrieved {min(len(ranked), limit)} of {len(ranked)} matching chunks "
            f"(tokens: {tokens}, candidates: {total})"
        )
        return ranked[:limit]

    def score_chunk(self, chunk: Chunk, tokens: Sequence[str], position: int, total: int) -> RelevantChunk:
        """
        Score one chunk against pre-tokenized query terms.

        Args:
            chunk: Chunk to score
            tokens: Output of ``tokenize_query``
            position: Position of the chunk in the sequence being ranked
            total: Length of that sequence

        Returns:
            RelevantChunk with score 0 when no token matched
        """
        frequencies = term_frequencies(chunk.content)
        word_count = max(1, len(chunk.content.split()))

        raw_score = 0
        matched = set()
        for token in tokens:
            exact = frequencies.get(token, 0)
            occurrences = sum(
                count * term.count(token)
                for term, count in frequencies.items()
                if token in term
            )
            raw_score += exact * EXACT_MATCH_WEIGHT
            raw_score += max(0, occurrences - exact) * PARTIAL_MATCH_WEIGHT
            if occurrences > 0:
                matched.add(token)

        if len(matched) > 1:
            raw_score += len(matched) * MULTI_TERM_BONUS

        score = 0.0
        if raw_score > 0:
            position_bonus = (1 - position / max(1, total)) * POSITION_BONUS
            score = raw_score / math.sqrt(word_count) + position_bonus

        return RelevantChunk(
            content=chunk.content,
            chunk_index=chunk.chunk_index,
            page_number=getattr(chunk, "page_number", PAGE_NUMBER_PLACEHOLDER),
            score=score,
            raw_score=float(raw_score),
            matched_words=len(matched)
        )
