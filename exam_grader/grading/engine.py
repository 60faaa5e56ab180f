"""
Grading engine - the core of the exam grader.

Grades every question of an attempt independently and aggregates the
result. Grading is deterministic and idempotent: it performs no I/O,
uses no clock or randomness, and never raises for student data.
"""

import logging
from collections.abc import Callable
from decimal import Decimal
from typing import Any

from exam_grader.config import Settings, get_settings
from exam_grader.grading.comparators import (
    match_multi_choice,
    match_numeric,
    match_short_text,
    match_single_choice,
    match_true_false,
)
from exam_grader.models import (
    AttemptGradingInput,
    GradedAnswer,
    GradingInput,
    GradingResult,
    QuestionType,
)

logger = logging.getLogger(__name__)

# Question types that always wait for a human grader
MANUAL_TYPES = frozenset([QuestionType.ESSAY, QuestionType.CANVAS])


class GradingEngine:
    """
    Grades attempts question by question.

    Auto-gradable types are scored all-or-nothing. Essays, drawings and
    any type the engine does not recognise are left for manual grading.
    """

    def __init__(self, settings: Settings | None = None):
        """
        Initialize the grading engine.

        Args:
            settings: Configuration settings. Uses global settings if not provided.
        """
        self._settings = settings or get_settings()
        self._comparators: dict[QuestionType, Callable[[GradingInput], bool]] = {
            QuestionType.MCQ_SINGLE: self._match_single_choice,
            QuestionType.MCQ_MULTI: self._match_multi_choice,
            QuestionType.TRUE_FALSE: self._match_true_false,
            QuestionType.NUMERIC: self._match_numeric,
            QuestionType.SHORT_TEXT: self._match_short_text,
        }

    def grade_attempt(self, attempt: AttemptGradingInput) -> GradingResult:
        """
        Grade all answers of an attempt.

        Args:
            attempt: The assembled grading input, one entry per exam question.

        Returns:
            GradingResult with graded answers in input order.
        """
        graded = tuple(self.grade_answer(item) for item in attempt.answers)
        result = GradingResult(graded_answers=graded)

        logger.info(
            "Graded %d questions: %s/%s%s",
            len(graded),
            result.total_score,
            result.max_score,
            " (manual grading pending)" if result.has_manual_grading else "",
        )
        return result

    def grade_answer(self, item: GradingInput) -> GradedAnswer:
        """
        Grade a single question.

        Args:
            item: The question's grading input.

        Returns:
            GradedAnswer for the question.
        """
        comparator = self._comparators.get(item.known_type)  # type: ignore[arg-type]

        if comparator is None:
            if item.known_type not in MANUAL_TYPES:
                logger.warning(
                    "Unrecognised question type '%s' for question %s, routing to manual grading",
                    item.question_type,
                    item.question_id,
                )
            return GradedAnswer(
                question_id=item.question_id,
                is_correct=None,
                points_awarded=Decimal(0),
                max_points=item.points,
                needs_manual_grading=True,
            )

        is_correct = item.student_answer is not None and comparator(item)
        logger.debug("Question %s (%s): correct=%s", item.question_id, item.question_type, is_correct)

        return GradedAnswer(
            question_id=item.question_id,
            is_correct=is_correct,
            points_awarded=item.points if is_correct else Decimal(0),
            max_points=item.points,
            needs_manual_grading=False,
        )

    # ==========================================================================
    # Per-type comparison
    # ==========================================================================

    def _match_single_choice(self, item: GradingInput) -> bool:
        return match_single_choice(item.correct_answer, item.student_answer)

    def _match_multi_choice(self, item: GradingInput) -> bool:
        return match_multi_choice(item.correct_answer, item.student_answer)

    def _match_true_false(self, item: GradingInput) -> bool:
        return match_true_false(item.correct_answer, item.student_answer)

    def _match_numeric(self, item: GradingInput) -> bool:
        tolerance = item.numeric_tolerance
        if tolerance is None:
            tolerance = self._settings.default_numeric_tolerance
        return match_numeric(item.correct_answer, item.student_answer, tolerance)

    def _match_short_text(self, item: GradingInput) -> bool:
        return match_short_text(
            item.correct_answer,
            item.student_answer,
            case_sensitive=self._settings.short_text_case_sensitive,
            collapse_whitespace=self._settings.short_text_collapse_whitespace,
            allow_regex=self._settings.short_text_allow_regex,
        )


def grade_answer(item: GradingInput, settings: Settings | None = None) -> GradedAnswer:
    """Grade a single question with a fresh engine."""
    return GradingEngine(settings).grade_answer(item)


def grade_attempt(
    attempt: AttemptGradingInput | dict[str, Any], settings: Settings | None = None
) -> GradingResult:
    """
    Grade an attempt with a fresh engine.

    Accepts either an AttemptGradingInput or a plain mapping with an
    "answers" list of grading input records.
    """
    if not isinstance(attempt, AttemptGradingInput):
        attempt = AttemptGradingInput.model_validate(attempt)
    return GradingEngine(settings).grade_attempt(attempt)
