"""
Grading Engine Module.

Deterministic, all-or-nothing grading of exam attempts.
"""

from exam_grader.grading.engine import GradingEngine, grade_answer, grade_attempt
from exam_grader.grading.shuffle import shuffle

__all__ = [
    "GradingEngine",
    "grade_answer",
    "grade_attempt",
    "shuffle",
]
