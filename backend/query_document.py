"""
Document query script for the StudyDocs RAG engine.

This script:
1. Extracts the text of a PDF or text file
2. Splits it into overlapping chunks
3. Ranks the chunks against a query
4. Prints the most relevant chunks

Usage:
    python query_document.py notes.pdf "photosynthesis light reactions" --top-k 5
"""
import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import List, Optional

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent))

from services.chunking_engine import ChunkingEngine
from services.document_loader import DocumentLoader, DocumentLoadError
from services.retrieval_engine import RetrievalEngine
from config import CHUNK_SIZE, CHUNK_OVERLAP, MAX_RELEVANT_CHUNKS, LOG_LEVEL
from logger import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Rank the chunks of a document against a query.")
    parser.add_argument("file", help="PDF, .txt or .md file to search")
    parser.add_argument("query", help="Question or keywords to look for")
    parser.add_argument("--chunk-size", type=int, default=CHUNK_SIZE, help="Chunk size in words")
    parser.add_argument("--overlap", type=int, default=CHUNK_OVERLAP, help="Words shared by adjacent chunks")
    parser.add_argument("--top-k", type=int, default=MAX_RELEVANT_CHUNKS, help="Number of chunks to print")
    parser.add_argument("--json", action="store_true", help="Print results as JSON")
    parser.add_argument("--json-logs", action="store_true", help="Emit structured JSON logs")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Run the query pipeline and return a process exit code."""
    args = build_parser().parse_args(argv)
    if args.json_logs:
        setup_logging(LOG_LEVEL)

    try:
        document = DocumentLoader().load(args.file)
    except DocumentLoadError as e:
        logger.error(f"Could not load {args.file}: {e}")
        return 1

    chunks = ChunkingEngine(args.chunk_size, args.overlap).chunk_text(document.text)
    logger.info(f"Chunked {document.filename} into {len(chunks)} chunks")

    results = RetrievalEngine().find_relevant(chunks, args.query, args.top_k)

    if args.json:
        print(json.dumps([asdict(result) for result in results], indent=2, ensure_ascii=False))
        return 0

    if not results:
        print("No relevant chunks found.")
        return 0

    for rank, result in enumerate(results, start=1):
        print("=" * 60)
        print(
            f"#{rank} chunk {result.chunk_index} "
            f"(score {result.score:.3f}, raw {result.raw_score:g}, matched {result.matched_words})"
        )
        print("-" * 60)
        print(result.content)
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
