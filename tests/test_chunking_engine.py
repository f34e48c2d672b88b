"""Unit tests for ChunkingEngine."""
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

import config
import pytest
from models.chunk import Chunk
from services.chunking_engine import (
    ChunkingEngine,
    FoldState,
    Paragraphs,
    Words,
    normalize_chunk_params,
    normalize_text,
    split_paragraphs,
    sliding_windows,
)


def make_words(count, prefix="w"):
    """Build a paragraph of distinct, numbered words."""
    return " ".join(f"{prefix}{i}" for i in range(count))


def word_list(chunk):
    return chunk.content.split()


class TestParameterNormalization:
    """Numeric parameters are coerced and clamped, never rejected."""

    def test_defaults_when_missing(self):
        assert normalize_chunk_params(None, None) == (500, 50)

    def test_non_numeric_values_use_defaults(self):
        assert normalize_chunk_params("abc", "xyz") == (500, 50)
        assert normalize_chunk_params(float("nan"), 5) == (500, 5)

    def test_values_are_rounded_down(self):
        assert normalize_chunk_params("300", "20.7") == (300, 20)
        assert normalize_chunk_params(12.9, 3.2) == (12, 3)

    def test_chunk_size_at_least_one(self):
        assert normalize_chunk_params(0, 0) == (1, 0)
        assert normalize_chunk_params(-5, 3) == (1, 0)

    def test_overlap_clamped_below_chunk_size(self):
        assert normalize_chunk_params(10, 10) == (10, 9)
        assert normalize_chunk_params(10, 25) == (10, 9)
        assert normalize_chunk_params(10, -4) == (10, 0)

    def test_engine_applies_normalization(self):
        engine = ChunkingEngine(chunk_size="8", chunk_overlap=100)
        assert engine.chunk_size == 8
        assert engine.chunk_overlap == 7

    def test_engine_defaults_match_missing_params(self):
        engine = ChunkingEngine()
        assert (engine.chunk_size, engine.chunk_overlap) == normalize_chunk_params(None, None)
        assert (engine.chunk_size, engine.chunk_overlap) == normalize_chunk_params(
            config.CHUNK_SIZE, config.CHUNK_OVERLAP
        )


class TestTextHelpers:
    """Tests for normalization, paragraph extraction and windowing."""

    def test_normalize_text(self):
        assert normalize_text("  a\r\nb\rc\td  ") == "a\nb\nc d"

    def test_split_paragraphs_drops_empty_pieces(self):
        assert split_paragraphs("one\n\n\n  two  \n \nthree") == ["one", "two", "three"]

    def test_sliding_windows(self):
        windows = sliding_windows(list("abcdefg"), 3, 1)
        assert windows == [["a", "b", "c"], ["c", "d", "e"], ["e", "f", "g"]]

    def test_sliding_windows_final_window_may_be_shorter(self):
        windows = sliding_windows(list("abcdefgh"), 3, 1)
        assert windows[-1] == ["g", "h"]

    def test_sliding_windows_empty(self):
        assert sliding_windows([], 3, 1) == []


class TestChunkText:
    """Behavioural tests for ChunkingEngine.chunk_text."""

    @pytest.mark.parametrize("text", ["", "   ", "\n\t\r\n", None])
    def test_blank_text_yields_no_chunks(self, text):
        assert ChunkingEngine(500, 50).chunk_text(text) == []

    def test_short_text_is_single_chunk(self):
        chunks = ChunkingEngine(500, 50).chunk_text("Cells are the basic unit of life.")
        assert chunks == [Chunk(content="Cells are the basic unit of life.", chunk_index=0, page_number=0)]

    def test_paragraphs_joined_with_blank_line(self):
        text = "First paragraph here.\r\n\r\nSecond\tparagraph here."
        chunks = ChunkingEngine(500, 50).chunk_text(text)

        assert len(chunks) == 1
        assert chunks[0].content == "First paragraph here.\n\nSecond paragraph here."

    def test_long_single_paragraph_uses_sliding_window(self):
        text = make_words(1200)
        chunks = ChunkingEngine(500, 50).chunk_text(text)

        assert len(chunks) == 3
        assert [len(word_list(c)) for c in chunks] == [500, 500, 300]
        for earlier, later in zip(chunks, chunks[1:]):
            assert word_list(earlier)[-50:] == word_list(later)[:50]
        assert word_list(chunks[-1])[-1] == "w1199"

    def test_overflow_restarts_with_overlap_seed(self):
        text = make_words(6, "a") + "\n\n" + make_words(6, "b")
        chunks = ChunkingEngine(10, 2).chunk_text(text)

        assert [c.content for c in chunks] == [
            "a0 a1 a2 a3 a4 a5",
            "a4 a5 b0 b1 b2 b3 b4 b5",
        ]

    def test_overflow_without_overlap_restarts_paragraph_group(self):
        text = "\n\n".join([make_words(6, "a"), make_words(6, "b"), make_words(3, "c")])
        chunks = ChunkingEngine(10, 0).chunk_text(text)

        assert [c.content for c in chunks] == [
            "a0 a1 a2 a3 a4 a5",
            "b0 b1 b2 b3 b4 b5\n\nc0 c1 c2",
        ]

    def test_exact_fill_flushes_without_duplicate_tail(self):
        text = make_words(4, "a") + "\n\n" + make_words(6, "b")
        chunks = ChunkingEngine(10, 3).chunk_text(text)

        assert len(chunks) == 1
        assert chunks[0].content == "a0 a1 a2 a3\n\nb0 b1 b2 b3 b4 b5"

    def test_exact_fill_carries_overlap_into_next_paragraph(self):
        text = "\n\n".join([make_words(4, "a"), make_words(6, "b"), make_words(2, "c")])
        chunks = ChunkingEngine(10, 3).chunk_text(text)

        assert [c.content for c in chunks] == [
            "a0 a1 a2 a3\n\nb0 b1 b2 b3 b4 b5",
            "b3 b4 b5\n\nc0 c1",
        ]

    def test_oversized_paragraph_flushes_pending_first(self):
        text = "\n\n".join([make_words(3, "a"), make_words(25, "b"), make_words(2, "c")])
        chunks = ChunkingEngine(10, 2).chunk_text(text)

        assert [c.chunk_index for c in chunks] == [0, 1, 2, 3, 4]
        assert chunks[0].content == "a0 a1 a2"
        assert [len(word_list(c)) for c in chunks[1:4]] == [10, 10, 9]
        assert word_list(chunks[1])[0] == "b0"
        assert word_list(chunks[3])[-1] == "b24"
        assert chunks[4].content == "c0 c1"

    def test_seeded_restart_beyond_chunk_size_is_windowed(self):
        text = make_words(10, "a") + "\n\n" + make_words(10, "b")
        chunks = ChunkingEngine(10, 9).chunk_text(text)

        assert len(chunks) == 11
        assert all(len(word_list(c)) <= 10 for c in chunks)
        for earlier, later in zip(chunks, chunks[1:]):
            assert word_list(earlier)[-9:] == word_list(later)[:9]
        assert chunks[-1].content == make_words(10, "b")

    def test_mixed_document_properties(self):
        sizes = [12, 40, 3, 7, 120, 1, 18, 18, 18, 55, 9]
        text = "\n\n".join(make_words(n, f"p{i}_") for i, n in enumerate(sizes))
        chunks = ChunkingEngine(30, 5).chunk_text(text)

        assert [c.chunk_index for c in chunks] == list(range(len(chunks)))
        assert all(len(word_list(c)) <= 30 for c in chunks)
        assert all(c.page_number == 0 for c in chunks)
        assert all(c.content.strip() for c in chunks)

        # Every source word survives chunking.
        emitted = {word for c in chunks for word in word_list(c)}
        assert emitted == set(text.split())

    def test_deterministic(self):
        text = "\n".join(make_words(n, f"x{n}_") for n in (5, 60, 8, 33, 2))
        engine = ChunkingEngine(20, 4)
        assert engine.chunk_text(text) == engine.chunk_text(text)


class TestFoldTransitions:
    """The paragraph fold can be stepped one paragraph at a time."""

    @pytest.fixture
    def engine(self):
        return ChunkingEngine(chunk_size=5, chunk_overlap=2)

    def test_small_paragraph_is_held_pending(self, engine):
        state = engine.consume_paragraph(FoldState(), "a b c")

        assert state.pending == Paragraphs(("a b c",))
        assert state.chunks == ()
        assert state.next_index == 0

    def test_filling_chunk_emits_and_carries_overlap(self, engine):
        state = engine.consume_paragraph(FoldState(), "a b c")
        state = engine.consume_paragraph(state, "d e")

        assert [c.content for c in state.chunks] == ["a b c\n\nd e"]
        assert state.pending == Words(("d", "e"), carried=2)
        assert state.next_index == 1

    def test_flush_ignores_carried_words(self, engine):
        state = FoldState(pending=Words(("d", "e"), carried=2), next_index=1)
        flushed = engine.flush(state)

        assert flushed.chunks == ()
        assert flushed.pending == Paragraphs()
        assert flushed.next_index == 1

    def test_flush_emits_new_words(self, engine):
        state = FoldState(pending=Words(("d", "e", "f"), carried=2), next_index=4)
        flushed = engine.flush(state)

        assert flushed.chunks == (Chunk(content="d e f", chunk_index=4, page_number=0),)
        assert flushed.next_index == 5
