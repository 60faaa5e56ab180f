"""
Unit tests for attempt submission.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from exam_grader.config import Settings
from exam_grader.grading import GradingEngine
from exam_grader.models import AttemptGradingInput, AttemptStatus, GradingInput
from exam_grader.submission import SubmissionError, submit_attempt

STARTED_AT = datetime(2024, 5, 1, 9, 0, 0, tzinfo=timezone.utc)


class TestSubmitAttempt:
    """Tests for submit_attempt."""

    def test_manual_grading_leaves_attempt_submitted(
        self, test_settings: Settings, mcq_single_input: GradingInput, essay_input: GradingInput
    ) -> None:
        """Test pending essays keep the attempt in the submitted state."""
        result = GradingEngine(test_settings).grade_attempt(
            AttemptGradingInput(answers=(mcq_single_input, essay_input))
        )
        outcome = submit_attempt(
            "att-1", AttemptStatus.IN_PROGRESS, STARTED_AT, result,
            now=STARTED_AT + timedelta(minutes=25, seconds=30.9),
        )

        assert outcome.status is AttemptStatus.SUBMITTED
        assert outcome.score == Decimal("4")
        assert outcome.max_score == Decimal("10")
        assert outcome.time_taken_seconds == 25 * 60 + 30
        assert len(outcome.graded_answers) == 2

    def test_auto_graded_attempt_is_graded(self, test_settings: Settings, mcq_single_input: GradingInput) -> None:
        """Test a fully auto-graded attempt becomes graded."""
        result = GradingEngine(test_settings).grade_attempt(AttemptGradingInput(answers=(mcq_single_input,)))
        outcome = submit_attempt("att-2", AttemptStatus.IN_PROGRESS, STARTED_AT, result, now=STARTED_AT)

        assert outcome.status is AttemptStatus.GRADED
        assert outcome.time_taken_seconds == 0

    def test_already_submitted(self, test_settings: Settings, mcq_single_input: GradingInput) -> None:
        """Test a submitted attempt cannot be submitted again."""
        result = GradingEngine(test_settings).grade_attempt(AttemptGradingInput(answers=(mcq_single_input,)))

        with pytest.raises(SubmissionError, match="already submitted") as exc_info:
            submit_attempt("att-3", AttemptStatus.GRADED, STARTED_AT, result)

        assert exc_info.value.attempt_id == "att-3"

    def test_clock_skew_never_negative(self, test_settings: Settings, mcq_single_input: GradingInput) -> None:
        """Test a start time in the future yields zero time taken."""
        result = GradingEngine(test_settings).grade_attempt(AttemptGradingInput(answers=(mcq_single_input,)))
        outcome = submit_attempt(
            "att-4", AttemptStatus.IN_PROGRESS, STARTED_AT, result, now=STARTED_AT - timedelta(seconds=5)
        )

        assert outcome.time_taken_seconds == 0

    def test_naive_datetimes_treated_as_utc(self, test_settings: Settings, mcq_single_input: GradingInput) -> None:
        """Test naive and aware datetimes can be mixed."""
        result = GradingEngine(test_settings).grade_attempt(AttemptGradingInput(answers=(mcq_single_input,)))
        outcome = submit_attempt(
            "att-5", AttemptStatus.IN_PROGRESS, datetime(2024, 5, 1, 9, 0, 0), result,
            now=STARTED_AT + timedelta(seconds=90),
        )

        assert outcome.time_taken_seconds == 90
