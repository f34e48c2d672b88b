"""Study assistant: assembles retrieved chunks and document text into prompts for the LLM."""
import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

from models.chunk import RelevantChunk
from models.conversation import ChatMessage
from models.study_material import DocumentSummary, Flashcard, QuizQuestion
from config import (
    CONTEXT_CHAR_LIMIT,
    DEFAULT_FLASHCARD_COUNT,
    DEFAULT_QUIZ_QUESTIONS,
    FLASHCARD_TEXT_LIMIT,
    MAX_RELEVANT_CHUNKS,
    QUIZ_TEXT_LIMIT,
    SUMMARY_TEXT_LIMIT,
)
from services.chat_history import ChatHistoryStore
from services.coercion import coerce_int
from services.document_store import DocumentStore
from services.llm_client import LLMClient
from services.retrieval_engine import RetrievalEngine

logger = logging.getLogger(__name__)

BLOCK_SEPARATOR = "---"
DIFFICULTIES = ("easy", "medium", "hard")
DEFAULT_DIFFICULTY = "medium"
QUIZ_OPTION_COUNT = 4

_QUIZ_OPTION = re.compile(r"^0\d:")


@dataclass
class ChatAnswer:
    """Answer to a question about one document."""
    question: str
    answer: str
    relevant_chunks: List[int]  # chunk indexes used as context


@dataclass
class ConceptExplanation:
    """Explanation of a concept grounded in one document."""
    concept: str
    explanation: str
    relevant_chunks: List[int]


def build_chat_prompt(question: str, chunks: Sequence[RelevantChunk]) -> str:
    """
    Build a question-answering prompt from ranked chunks.

    Args:
        question: User question
        chunks: Chunks returned by the retrieval engine, best first

    Returns:
        Complete prompt string
    """
    context = "\n\n".join(
        f"[Chunk {position}]\n{chunk.content}"
        for position, chunk in enumerate(chunks, start=1)
    )

    return f"""Based on the following document context, answer the user's question.
If the answer is not present in the context, say so clearly.

Context:
{context}

Question:
{question}

Answer:"""


def build_concept_prompt(concept: str, context: str, char_limit: int = CONTEXT_CHAR_LIMIT) -> str:
    """Build a concept-explanation prompt, truncating the context to ``char_limit`` characters."""
    return f"""Explain the concept of "{concept}" using the following context.
Provide a clear, educational explanation and examples if relevant.

Context:
{context[:char_limit]}"""


def build_flashcards_prompt(text: str, count: int, char_limit: int = FLASHCARD_TEXT_LIMIT) -> str:
    """
    Build a flashcard-generation prompt over the start of a document.

    Args:
        text: Extracted document text
        count: Number of flashcards to ask for
        char_limit: Maximum number of document characters included

    Returns:
        Complete prompt string
    """
    return f"""Generate exactly {count} educational flashcards from the following text.

Format each flashcard as:
Q: [Clear, specific question]
A: [Concise, accurate answer]
D: [Difficulty level: easy, medium, or hard]

Separate each flashcard with "{BLOCK_SEPARATOR}"

Text:
{text[:char_limit]}"""


def build_quiz_prompt(text: str, num_questions: int, char_limit: int = QUIZ_TEXT_LIMIT) -> str:
    """Build a multiple-choice quiz prompt; options are labelled 01: to 04:."""
    return f"""Generate exactly {num_questions} multiple choice questions from the following text.

Format each question as:
Q: [Question]
01: [Option 1]
02: [Option 2]
03: [Option 3]
04: [Option 4]
C: [Correct option exactly as written above]
E: [Brief explanation]
D: [Difficulty: easy, medium, or hard]

Separate each question with "{BLOCK_SEPARATOR}"

Text:
{text[:char_limit]}"""


def build_summary_prompt(text: str, char_limit: int = SUMMARY_TEXT_LIMIT) -> str:
    return f"""Provide a concise and well-structured summary of the following text.
Highlight the key concepts and main ideas.

Text:
{text[:char_limit]}"""


def _blocks(generated: str) -> List[List[str]]:
    """Split model output on the block separator into stripped, non-empty line lists."""
    blocks = []
    for block in generated.split(BLOCK_SEPARATOR):
        lines = [line.strip() for line in block.splitlines() if line.strip()]
        if lines:
            blocks.append(lines)
    return blocks


def _value(line: str, prefix_length: int = 2) -> str:
    return line[prefix_length:].strip()


def _difficulty(value: str, current: str) -> str:
    value = value.lower()
    return value if value in DIFFICULTIES else current


def parse_flashcards(generated: str, count: int) -> List[Flashcard]:
    """
    Parse ``Q:``/``A:``/``D:`` blocks into flashcards.

    Blocks without both a question and an answer are dropped. Unknown
    difficulties fall back to medium. At most ``count`` cards are returned.
    """
    flashcards = []
    for lines in _blocks(generated):
        question = answer = ""
        difficulty = DEFAULT_DIFFICULTY
        for line in lines:
            if line.startswith("Q:"):
                question = _value(line)
            elif line.startswith("A:"):
                answer = _value(line)
            elif line.startswith("D:"):
                difficulty = _difficulty(_value(line), difficulty)
        if question and answer:
            flashcards.append(Flashcard(question=question, answer=answer, difficulty=difficulty))
    return flashcards[:max(0, count)]


def parse_quiz(generated: str, num_questions: int) -> List[QuizQuestion]:
    """
    Parse quiz blocks into multiple-choice questions.

    A block is kept only with a question, exactly four options and a
    correct answer.
    """
    questions = []
    for lines in _blocks(generated):
        question = correct_answer = explanation = ""
        options = []
        difficulty = DEFAULT_DIFFICULTY
        for line in lines:
            if line.startswith("Q:"):
                question = _value(line)
            elif _QUIZ_OPTION.match(line):
                options.append(_value(line, 3))
            elif line.startswith("C:"):
                correct_answer = _value(line)
            elif line.startswith("E:"):
                explanation = _value(line)
            elif line.startswith("D:"):
                difficulty = _difficulty(_value(line), difficulty)
        if question and len(options) == QUIZ_OPTION_COUNT and correct_answer:
            questions.append(QuizQuestion(
                question=question,
                options=options,
                correct_answer=correct_answer,
                explanation=explanation,
                difficulty=difficulty
            ))
    return questions[:max(0, num_questions)]


class StudyAssistant:
    """Answers questions, explains concepts and generates study material from a processed document."""

    def __init__(
        self,
        document_store: DocumentStore,
        llm_client: LLMClient,
        retrieval_engine: Optional[RetrievalEngine] = None,
        max_chunks: int = MAX_RELEVANT_CHUNKS,
        chat_history: Optional[ChatHistoryStore] = None
    ):
        """
        Initialize the assistant.

        Args:
            document_store: Source of chunk sequences and extracted text
            llm_client: Client used for generation
            retrieval_engine: Chunk ranker (defaults to RetrievalEngine())
            max_chunks: Number of chunks placed in each prompt
            chat_history: Per-document message log (defaults to a new ChatHistoryStore)
        """
        self.document_store = document_store
        self.llm_client = llm_client
        self.retrieval_engine = retrieval_engine or RetrievalEngine()
        self.max_chunks = max_chunks
        self.chat_history = chat_history or ChatHistoryStore()

    def chat(self, document_id: str, question: str) -> ChatAnswer:
        """
        Answer a question using the most relevant chunks of a document.

        The question and the answer are appended to the document's chat history.

        Raises:
            ValueError: If the question is blank
            DocumentNotFoundError: If the document is missing or not ready
            LLMClientError: If generation fails
        """
        if not question or not question.strip():
            raise ValueError("question is required")

        relevant = self._retrieve(document_id, question)
        response = self.llm_client.generate(build_chat_prompt(question, relevant))
        chunk_indexes = [chunk.chunk_index for chunk in relevant]

        self.chat_history.add_turn(document_id, question, response.text, chunk_indexes)

        return ChatAnswer(
            question=question,
            answer=response.text,
            relevant_chunks=chunk_indexes
        )

    def get_chat_history(self, document_id: str) -> List[ChatMessage]:
        """Return the chat messages of a document, oldest first ([] when none)."""
        return self.chat_history.get_messages(document_id)

    def explain_concept(self, document_id: str, concept: str) -> ConceptExplanation:
        """Explain a concept using the document chunks that mention it."""
        if not concept or not concept.strip():
            raise ValueError("concept is required")

        relevant = self._retrieve(document_id, concept)
        context = "\n\n".join(chunk.content for chunk in relevant)
        response = self.llm_client.generate(build_concept_prompt(concept, context))

        return ConceptExplanation(
            concept=concept,
            explanation=response.text,
            relevant_chunks=[chunk.chunk_index for chunk in relevant]
        )

    def generate_flashcards(self, document_id: str, count: int = DEFAULT_FLASHCARD_COUNT) -> List[Flashcard]:
        """
        Generate flashcards from the extracted text of a ready document.

        Args:
            document_id: Ready document to read
            count: Number of flashcards requested (at least 1)

        Returns:
            Parsed flashcards, at most ``count``

        Raises:
            DocumentNotFoundError: If the document is missing or not ready
            LLMClientError: If generation fails
        """
        count = max(1, coerce_int(count, DEFAULT_FLASHCARD_COUNT))
        text = self.document_store.get_ready(document_id).extracted_text
        response = self.llm_client.generate(build_flashcards_prompt(text, count))

        flashcards = parse_flashcards(response.text, count)
        if len(flashcards) < count:
            logger.warning(f"Parsed {len(flashcards)} of {count} requested flashcards for {document_id}")
        return flashcards

    def generate_quiz(self, document_id: str, num_questions: int = DEFAULT_QUIZ_QUESTIONS) -> List[QuizQuestion]:
        """Generate multiple-choice questions from the extracted text of a ready document."""
        num_questions = max(1, coerce_int(num_questions, DEFAULT_QUIZ_QUESTIONS))
        text = self.document_store.get_ready(document_id).extracted_text
        response = self.llm_client.generate(build_quiz_prompt(text, num_questions))

        questions = parse_quiz(response.text, num_questions)
        if len(questions) < num_questions:
            logger.warning(f"Parsed {len(questions)} of {num_questions} requested quiz questions for {document_id}")
        return questions

    def generate_summary(self, document_id: str) -> DocumentSummary:
        text = self.document_store.get_ready(document_id).extracted_text
        response = self.llm_client.generate(build_summary_prompt(text))
        return DocumentSummary(document_id=document_id, summary=response.text)

    def _retrieve(self, document_id: str, query: str) -> List[RelevantChunk]:
        chunks = self.document_store.get_chunks(document_id)
        relevant = self.retrieval_engine.find_relevant(chunks, query, self.max_chunks)
        if not relevant:
            logger.info(f"No relevant chunks in {document_id} for query {query[:100]!r}")
        return relevant
