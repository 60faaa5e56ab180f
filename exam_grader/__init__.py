"""
Exam Grader - deterministic grading of exam attempts.

This package grades a student's submitted answers against each question's
reference answer, handling multiple choice, multi-select, true/false,
numeric, short text and manually graded question types.
"""

__version__ = "1.0.0"
