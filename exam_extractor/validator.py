"""
Validation Engine
=================
Post-parse structural validation and reporting.

After parsing a document, reports:
    - Total Questions
    - Structured Successfully (text and at least one choice)
    - Duplicate Question Numbers
    - Questions Without Text / Without Choices
    - Questions With A Partial A-D Choice Set
    - Choice count breakdown

Only looks at shape. Never decides which choice is correct and never
modifies the questions it is given.
"""

from __future__ import annotations

import logging
from collections import Counter

from .models import Question, ValidationReport

logger = logging.getLogger(__name__)


class ValidationEngine:
    """
    Validates extracted questions and produces a structural report.
    """

    def validate(
        self,
        questions: list[Question],
    ) -> ValidationReport:
        """
        Run structural validation on extracted questions.

        Args:
            questions: Questions to validate.

        Returns:
            ValidationReport with all detected issues.
        """
        report = ValidationReport()

        if not questions:
            logger.warning("No questions to validate")
            return report

        report.total_questions = len(questions)

        number_counts = Counter(q.number for q in questions)
        report.duplicate_question_numbers = sorted(
            (num for num, count in number_counts.items() if count > 1),
            key=int,
        )

        structured_count = 0
        choice_counts: Counter[int] = Counter()

        for q in questions:
            if q.has_text and q.has_choices:
                structured_count += 1

            if not q.has_text:
                report.questions_without_text.append(q.number)

            if not q.has_choices:
                report.questions_without_choices.append(q.number)
            elif q.missing_labels:
                report.questions_with_partial_choices.append(q.number)

            choice_counts[len(q.choices)] += 1

        report.structured_successfully = structured_count
        report.choice_count_breakdown = dict(sorted(choice_counts.items()))

        self._log_summary(report)
        return report

    def _log_summary(self, report: ValidationReport):
        logger.info("=" * 60)
        logger.info("VALIDATION REPORT")
        logger.info("=" * 60)
        logger.info(f"Total Questions: {report.total_questions}")
        logger.info(
            f"Structured Successfully: {report.structured_successfully} "
            f"({report.success_rate}%)"
        )
        logger.info(
            f"Duplicate Question Numbers: "
            f"{len(report.duplicate_question_numbers)}"
        )
        logger.info(
            f"Questions Without Text: {len(report.questions_without_text)}"
        )
        logger.info(
            f"Questions Without Choices: "
            f"{len(report.questions_without_choices)}"
        )
        logger.info(
            f"Questions With Partial Choices: "
            f"{len(report.questions_with_partial_choices)}"
        )
        if report.choice_count_breakdown:
            logger.info("Choice Count Breakdown:")
            for count, n in report.choice_count_breakdown.items():
                logger.info(f"  • {count} choices: {n}")
        logger.info("=" * 60)
