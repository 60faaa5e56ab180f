"""
Output Module.

Grading reports and Word export of question banks.
"""

from exam_grader.output.docx_export import ExportError, QuestionExporter
from exam_grader.output.report import ReportFormat, ReportGenerator

__all__ = [
    "ExportError",
    "QuestionExporter",
    "ReportFormat",
    "ReportGenerator",
]
