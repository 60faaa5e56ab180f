"""
Attempt validation module.

Checks the input contract of the grading engine before an attempt is
graded. The engine itself assumes well-formed input; student answers are
never validated here, only the exam side of the input.
"""

from decimal import Decimal
from typing import Any, Sequence

from exam_grader.grading.comparators import as_number
from exam_grader.models import AttemptGradingInput, GradingInput, QuestionType


class AttemptValidationError(Exception):
    """Raised when attempt validation fails."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        message = "Attempt validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        super().__init__(message)


class AttemptValidator:
    """
    Validates grading input for completeness and consistency.

    Checks:
    1. The attempt has at least one question
    2. Question ids are unique
    3. Points are within a sane range
    4. Auto-gradable questions carry a usable reference answer
    """

    # Maximum allowed points per question (sanity check)
    MAX_POINTS_PER_QUESTION = Decimal("1000")

    def validate(self, attempt: AttemptGradingInput) -> tuple[bool, list[str]]:
        """
        Validate an attempt and return any issues found.

        Args:
            attempt: The assembled grading input.

        Returns:
            Tuple of (is_valid, list of issues).
        """
        issues: list[str] = []

        if not attempt.answers:
            issues.append("Attempt has no questions")

        issues.extend(self._check_duplicates(attempt.answers))

        for i, item in enumerate(attempt.answers, start=1):
            issues.extend(self._validate_question(item, i))

        return len(issues) == 0, issues

    def validate_or_raise(self, attempt: AttemptGradingInput) -> None:
        """
        Validate an attempt and raise if invalid.

        Raises:
            AttemptValidationError: If validation fails.
        """
        is_valid, issues = self.validate(attempt)
        if not is_valid:
            raise AttemptValidationError(issues)

    def _check_duplicates(self, items: Sequence[GradingInput]) -> list[str]:
        """Check for duplicate question ids."""
        issues: list[str] = []
        seen_ids: dict[str, int] = {}

        for i, item in enumerate(items, start=1):
            if item.question_id in seen_ids:
                issues.append(
                    f"Duplicate question id: '{item.question_id}' "
                    f"(appears at positions {seen_ids[item.question_id]} and {i})"
                )
            else:
                seen_ids[item.question_id] = i

        return issues

    def _validate_question(self, item: GradingInput, index: int) -> list[str]:
        """Validate a single question."""
        issues: list[str] = []
        prefix = f"Question {index} ({item.question_id})"

        if item.points > self.MAX_POINTS_PER_QUESTION:
            issues.append(
                f"{prefix}: Points ({item.points}) exceed maximum "
                f"allowed ({self.MAX_POINTS_PER_QUESTION})"
            )

        problem = self._check_reference(item.known_type, item.correct_answer)
        if problem:
            issues.append(f"{prefix}: {problem}")

        return issues

    def _check_reference(self, question_type: QuestionType | None, correct: Any) -> str | None:
        """Describe what is wrong with a reference answer, if anything."""
        if question_type is QuestionType.MCQ_SINGLE:
            if isinstance(correct, bool) or not isinstance(correct, (str, int)) or correct == "":
                return "Correct answer must be a single option id"

        elif question_type is QuestionType.MCQ_MULTI:
            if not isinstance(correct, (list, tuple, set, frozenset)) or not correct:
                return "Correct answer must be a non-empty list of option ids"
            if any(isinstance(c, bool) or not isinstance(c, (str, int)) for c in correct):
                return "Correct answer contains an invalid option id"

        elif question_type is QuestionType.TRUE_FALSE:
            is_text_bool = isinstance(correct, str) and correct.strip().lower() in ("true", "false")
            if not isinstance(correct, bool) and not is_text_bool:
                return "Correct answer must be true or false"

        elif question_type is QuestionType.NUMERIC:
            if as_number(correct) is None:
                return "Correct answer must be a finite number"

        elif question_type is QuestionType.SHORT_TEXT:
            references = correct if isinstance(correct, (list, tuple)) else [correct]
            if not any(isinstance(r, str) and r.strip() for r in references):
                return "Correct answer must contain at least one non-empty string"

        return None
