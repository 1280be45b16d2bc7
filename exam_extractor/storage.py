"""
JSON Storage
============
Reads and writes extracted questions and validation reports.

Output layout (defaults):
    json/
    ├── questions.json              # JSON array of questions
    └── questions_validation.json   # structural report
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from .models import Question, ValidationReport

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_PATH = "json/questions.json"


class OutputError(RuntimeError):
    """Raised when output files cannot be written or read back."""


def report_path_for(output_path: str | Path) -> Path:
    """Validation report path that sits next to a questions file."""
    output_path = Path(output_path)
    return output_path.with_name(f"{output_path.stem}_validation.json")


def save_questions(questions: list[Question], output_path: str | Path) -> Path:
    """Write questions as a pretty-printed JSON array."""
    data = [q.model_dump() for q in questions]
    path = _write_json(data, output_path)
    logger.info(f"Saved {len(questions)} questions to: {path}")
    return path


def save_report(report: ValidationReport, output_path: str | Path) -> Path:
    """Write a validation report."""
    path = _write_json(report.model_dump(), output_path)
    logger.info(f"Saved validation report: {path}")
    return path


def load_questions(path: str | Path) -> list[Question]:
    """Read questions previously written by save_questions()."""
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise OutputError(f"Failed to read {path}: {e}") from e

    if not isinstance(data, list):
        raise OutputError(f"Expected a JSON array of questions in {path}")

    try:
        return [Question.model_validate(item) for item in data]
    except ValidationError as e:
        raise OutputError(f"Invalid question record in {path}: {e}") from e


# ─── Helpers ──────────────────────────────────────────────────────────────────


def _write_json(data, output_path: str | Path) -> Path:
    path = Path(output_path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False, default=str)
    except (OSError, TypeError, ValueError) as e:
        raise OutputError(f"Failed to save JSON to {path}: {e}") from e
    return path
