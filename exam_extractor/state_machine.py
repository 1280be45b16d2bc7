"""
State Machine Parser
====================
Deterministic line-oriented state machine that turns extracted exam text
into Question records.

A line starting with "<digits>." opens a new question, a line starting with
"A." to "D." sets a choice on the open question, and any other line is
appended to the open question's text. Lines seen before the first question
are dropped.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

from .models import Question
from .normalizer import clean_text

logger = logging.getLogger(__name__)

# ─── Anchor Patterns ──────────────────────────────────────────────────────────

# "1.", "12." at start of line
QUESTION_PATTERN = re.compile(r"^\d+\.")

# "A." through "D." at start of line, uppercase only
CHOICE_PATTERN = re.compile(r"^[A-D]\.")

# Length of the "A." prefix split off a choice line
_CHOICE_PREFIX_LEN = 2


class ParserState(Enum):
    """Where the fold currently is."""
    SEEKING_QUESTION = "SEEKING_QUESTION"
    QUESTION_BODY = "QUESTION_BODY"


class LineKind(str, Enum):
    """Classification of a single normalized line."""
    EMPTY = "empty"
    QUESTION_START = "question_start"
    CHOICE = "choice"
    CONTINUATION = "continuation"
    ORPHAN = "orphan"


def classify_line(line: str, in_question: bool) -> LineKind:
    """
    Classify a normalized line.

    Question starts win over choices, which win over continuation text.
    Choice and continuation lines only count while a question is open.
    """
    if not line:
        return LineKind.EMPTY
    if QUESTION_PATTERN.match(line):
        return LineKind.QUESTION_START
    if not in_question:
        return LineKind.ORPHAN
    if CHOICE_PATTERN.match(line):
        return LineKind.CHOICE
    return LineKind.CONTINUATION


# ─── Fold State ───────────────────────────────────────────────────────────────


@dataclass
class _QuestionDraft:
    """In-progress question; only the fold that created it touches it."""
    number: int
    text_parts: list[str] = field(default_factory=list)
    choices: dict[str, str] = field(default_factory=dict)

    def finalize(self) -> Question:
        return Question(
            number=str(self.number),
            text="".join(self.text_parts),
            choices=dict(self.choices),
        )


@dataclass
class _FoldState:
    next_number: int
    current: Optional[_QuestionDraft] = None
    output: list[Question] = field(default_factory=list)

    @property
    def phase(self) -> ParserState:
        if self.current is None:
            return ParserState.SEEKING_QUESTION
        return ParserState.QUESTION_BODY

    def finalize_current(self):
        if self.current is not None:
            self.output.append(self.current.finalize())
            self.current = None


def _step(state: _FoldState, raw_line: str, include_marker_text: bool):
    """Advance the fold by one raw line."""
    line = clean_text(raw_line)
    kind = classify_line(line, state.phase == ParserState.QUESTION_BODY)

    if kind == LineKind.QUESTION_START:
        state.finalize_current()
        state.current = _QuestionDraft(number=state.next_number)
        state.next_number += 1
        if include_marker_text:
            remainder = line[QUESTION_PATTERN.match(line).end():].strip()
            if remainder:
                state.current.text_parts.append(remainder)

    elif kind == LineKind.CHOICE:
        label = line[:_CHOICE_PREFIX_LEN].strip()[0]
        state.current.choices[label] = line[_CHOICE_PREFIX_LEN:].strip()

    elif kind == LineKind.CONTINUATION:
        state.current.text_parts.append(line)

    elif kind == LineKind.ORPHAN:
        logger.debug(f"Skipping orphan line before first question: {line!r}")


# ─── Public API ───────────────────────────────────────────────────────────────


def parse_questions(
    lines: Iterable[str],
    start_number: int = 1,
    include_marker_text: bool = False,
) -> list[Question]:
    """
    Parse lines of extracted text into questions.

    Args:
        lines: Raw text lines in document order.
        start_number: Number given to the first question found. Every call
            starts from this value; callers parsing several pages thread
            their own running counter through it.
        include_marker_text: Keep the text following "<digits>." on a
            question start line as the beginning of the question text.
            When False the start line contributes nothing but the boundary.

    Returns:
        Finalized questions in document order.

    Raises:
        ValueError: If start_number is below 1.
    """
    if start_number < 1:
        raise ValueError(f"start_number must be >= 1, got {start_number}")

    state = _FoldState(next_number=start_number)
    for raw_line in lines:
        _step(state, raw_line, include_marker_text)
    state.finalize_current()

    return state.output


def parse_text(
    text: str,
    start_number: int = 1,
    include_marker_text: bool = False,
) -> list[Question]:
    """Parse a block of text (one page, typically) split on newlines."""
    return parse_questions(
        text.split("\n"),
        start_number=start_number,
        include_marker_text=include_marker_text,
    )


class QuestionParser:
    """
    Reusable parser bound to its options.

    Holds configuration only; every call to parse() is independent.
    """

    def __init__(self, start_number: int = 1, include_marker_text: bool = False):
        if start_number < 1:
            raise ValueError(f"start_number must be >= 1, got {start_number}")
        self.start_number = start_number
        self.include_marker_text = include_marker_text

    def parse(self, lines: Iterable[str]) -> list[Question]:
        """Parse lines into questions."""
        return parse_questions(
            lines,
            start_number=self.start_number,
            include_marker_text=self.include_marker_text,
        )

    def parse_text(self, text: str) -> list[Question]:
        """Parse a newline-separated text block into questions."""
        return parse_text(
            text,
            start_number=self.start_number,
            include_marker_text=self.include_marker_text,
        )
