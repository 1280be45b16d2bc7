"""
Data Models
===========
Pydantic models for extracted exam questions.
All models are serializable to JSON for downstream consumers.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal, Optional, get_args

from pydantic import BaseModel, Field, computed_field

ChoiceLabel = Literal["A", "B", "C", "D"]

# Labels a choice line may carry, in display order.
CHOICE_LABELS: tuple[str, ...] = get_args(ChoiceLabel)


# ─── Question Model ──────────────────────────────────────────────────────────


class Question(BaseModel):
    """
    A finalized multiple-choice question.

    Built by the state machine once the question's boundary is reached.
    """
    number: str = Field(
        pattern=r"^[1-9]\d*$",
        description="Sequence number in document order, as text",
    )
    text: str = ""
    choices: dict[ChoiceLabel, str] = Field(default_factory=dict)
    correct_answer: Optional[str] = None

    @property
    def has_text(self) -> bool:
        return bool(self.text.strip())

    @property
    def has_choices(self) -> bool:
        return bool(self.choices)

    @property
    def missing_labels(self) -> list[str]:
        return [label for label in CHOICE_LABELS if label not in self.choices]


# ─── Exam / Parse Result Models ──────────────────────────────────────────────


class ExamMetadata(BaseModel):
    """Metadata about the source document."""
    name: str = ""
    source_pdf: str = ""
    source_url: Optional[str] = None
    total_pages: int = 0
    file_hash: str = ""
    file_size_bytes: int = 0


class ParseVersion(BaseModel):
    """Version tracking for a parse run."""
    parser_version: str = "1.0.0"
    parse_timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    page_count: int = 0
    question_count: int = 0
    continuous_numbering: bool = False


class ValidationReport(BaseModel):
    """Structural report over a list of extracted questions."""
    total_questions: int = 0
    structured_successfully: int = 0
    duplicate_question_numbers: list[str] = Field(default_factory=list)
    questions_without_text: list[str] = Field(default_factory=list)
    questions_without_choices: list[str] = Field(default_factory=list)
    questions_with_partial_choices: list[str] = Field(default_factory=list)
    choice_count_breakdown: dict[int, int] = Field(default_factory=dict)

    @computed_field
    @property
    def success_rate(self) -> float:
        if self.total_questions == 0:
            return 0.0
        return round(
            self.structured_successfully / self.total_questions * 100,
            2
        )


class ParseResult(BaseModel):
    """
    Complete output of an extraction run.
    Only `questions` is persisted as the main output file.
    """
    exam: ExamMetadata
    parse_version: ParseVersion
    questions: list[Question] = Field(default_factory=list)
    validation: ValidationReport = Field(
        default_factory=ValidationReport
    )
