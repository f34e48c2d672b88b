"""Study material generated from a whole document."""
from dataclasses import dataclass
from typing import List


@dataclass
class Flashcard:
    """A question/answer card."""
    question: str
    answer: str
    difficulty: str = "medium"


@dataclass
class QuizQuestion:
    """A multiple-choice question with four options."""
    question: str
    options: List[str]
    correct_answer: str
    explanation: str = ""
    difficulty: str = "medium"


@dataclass
class DocumentSummary:
    """Summary of one document."""
    document_id: str
    summary: str
