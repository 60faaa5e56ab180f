"""
Exam File Loading Module.

Provides a unified interface for reading exam files in multiple formats:
- JSON exports (.json)
- Answer sheets (.xlsx, .xls, .csv)
"""

from exam_grader.loaders.base import ExamLoader, LoaderError
from exam_grader.loaders.factory import create_loader, load_exam
from exam_grader.loaders.json_loader import JsonLoader

__all__ = [
    "ExamLoader",
    "JsonLoader",
    "LoaderError",
    "create_loader",
    "load_exam",
]
