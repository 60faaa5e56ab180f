"""
Attempt submission.

Turns a grading result into the values the platform stores when a
student submits: the new attempt status, the score and the time taken.
Persistence itself is left to the caller.
"""

import logging
import math
from datetime import datetime, timezone

from exam_grader.models import AttemptStatus, GradingResult, SubmissionOutcome

logger = logging.getLogger(__name__)


class SubmissionError(Exception):
    """Raised when an attempt cannot be submitted."""

    def __init__(self, message: str, attempt_id: str | None = None):
        self.attempt_id = attempt_id
        super().__init__(message)


def _as_utc(moment: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare with aware ones."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def submit_attempt(
    attempt_id: str,
    status: AttemptStatus,
    started_at: datetime,
    result: GradingResult,
    now: datetime | None = None,
) -> SubmissionOutcome:
    """
    Build the submission outcome of a graded attempt.

    Args:
        attempt_id: Identifier of the attempt.
        status: Current status of the attempt; must be in progress.
        started_at: When the student started the attempt.
        result: The grading result of the attempt.
        now: Submission time. Defaults to the current UTC time.

    Returns:
        SubmissionOutcome with status "submitted" when manual grading is
        pending, otherwise "graded".

    Raises:
        SubmissionError: If the attempt was already submitted.
    """
    if status is not AttemptStatus.IN_PROGRESS:
        raise SubmissionError(
            f"Attempt '{attempt_id}' was already submitted (status: {status.value})",
            attempt_id=attempt_id,
        )

    submitted_at = _as_utc(now or datetime.now(timezone.utc))
    elapsed = (submitted_at - _as_utc(started_at)).total_seconds()
    time_taken = max(0, math.floor(elapsed))

    outcome = SubmissionOutcome(
        attempt_id=attempt_id,
        status=result.status,
        score=result.total_score,
        max_score=result.max_score,
        submitted_at=submitted_at,
        time_taken_seconds=time_taken,
        graded_answers=result.graded_answers,
    )

    logger.info(
        "Attempt %s submitted: %s/%s, status %s, %ds",
        attempt_id,
        outcome.score,
        outcome.max_score,
        outcome.status.value,
        time_taken,
    )
    return outcome
