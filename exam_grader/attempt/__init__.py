"""
Attempt Processing Module.

Provides assembly and validation of grading input for an attempt.
"""

from exam_grader.attempt.parser import AttemptParseError, AttemptParser
from exam_grader.attempt.validator import AttemptValidationError, AttemptValidator

__all__ = [
    "AttemptParser",
    "AttemptParseError",
    "AttemptValidator",
    "AttemptValidationError",
]
