"""Configuration management for the StudyDocs RAG engine."""
import os
import logging
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _int_env(name: str, default: int) -> int:
    """Read an integer environment variable, falling back to the default."""
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


# API Keys
GROQ_API_KEY = os.getenv("GROQ_API_KEY")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Model Configuration
CHAT_MODEL = os.getenv("CHAT_MODEL", "llama-3.1-8b-instant")
LLM_MAX_TOKENS = _int_env("LLM_MAX_TOKENS", 1024)

# Chunking Configuration
CHUNK_SIZE = _int_env("CHUNK_SIZE", 500)  # words
CHUNK_OVERLAP = _int_env("CHUNK_OVERLAP", 50)  # words

# Retrieval Configuration
MAX_RELEVANT_CHUNKS = _int_env("MAX_RELEVANT_CHUNKS", 3)
CONTEXT_CHAR_LIMIT = _int_env("CONTEXT_CHAR_LIMIT", 10000)

# Study Material Configuration
FLASHCARD_TEXT_LIMIT = _int_env("FLASHCARD_TEXT_LIMIT", 15000)  # characters
QUIZ_TEXT_LIMIT = _int_env("QUIZ_TEXT_LIMIT", 15000)
SUMMARY_TEXT_LIMIT = _int_env("SUMMARY_TEXT_LIMIT", 20000)
DEFAULT_FLASHCARD_COUNT = 10
DEFAULT_QUIZ_QUESTIONS = 5

# Logging Configuration
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
