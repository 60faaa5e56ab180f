"""
Unit tests for report generation and question bank export.
"""

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest
from docx import Document

from exam_grader.config import Settings
from exam_grader.grading import GradingEngine
from exam_grader.loaders import JsonLoader
from exam_grader.models import AttemptGradingInput, AttemptStatus, GradingInput, GradingResult, Question
from exam_grader.output import ExportError, QuestionExporter, ReportFormat, ReportGenerator
from exam_grader.output.docx_export import default_filename, latex_to_text
from exam_grader.submission import submit_attempt


@pytest.fixture
def mixed_result(
    test_settings: Settings, mcq_single_input: GradingInput, essay_input: GradingInput
) -> GradingResult:
    return GradingEngine(test_settings).grade_attempt(
        AttemptGradingInput(answers=(mcq_single_input, essay_input))
    )


class TestReportGenerator:
    """Tests for ReportGenerator."""

    def test_json_report(self, mixed_result: GradingResult) -> None:
        """Test the JSON report carries answers and totals."""
        data = json.loads(ReportGenerator().generate(mixed_result, ReportFormat.JSON))

        assert data["total_score"] == "4"
        assert data["max_score"] == "10"
        assert data["has_manual_grading"] is True
        assert data["status"] == "submitted"
        assert data["graded_answers"][1]["is_correct"] is None

    def test_json_report_with_submission(self, mixed_result: GradingResult) -> None:
        """Test the submission outcome is included without repeating answers."""
        started = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)
        outcome = submit_attempt("att-1", AttemptStatus.IN_PROGRESS, started, mixed_result, now=started)

        data = json.loads(ReportGenerator().generate(mixed_result, outcome=outcome))

        assert data["submission"]["attempt_id"] == "att-1"
        assert data["submission"]["status"] == "submitted"
        assert "graded_answers" not in data["submission"]

    def test_markdown_report(self, mixed_result: GradingResult) -> None:
        """Test the Markdown report lists every question."""
        report = ReportGenerator().generate(mixed_result, ReportFormat.MARKDOWN)

        assert "# Grading Report" in report
        assert "4 / 10" in report
        assert "| 1 | q1 | Correct | 4/4 |" in report
        assert "| 2 | q2 | Manual grading | 0/6 |" in report
        assert "provisional" in report

    def test_save_adds_extension(self, mixed_result: GradingResult, temp_dir: Path) -> None:
        """Test saving fills in the file extension from the format."""
        saved = ReportGenerator().save(mixed_result, temp_dir / "reports" / "attempt", ReportFormat.MARKDOWN)

        assert saved.suffix == ".md"
        assert saved.exists()
        assert "Grading Report" in saved.read_text(encoding="utf-8")


class TestQuestionExporter:
    """Tests for QuestionExporter."""

    def test_export_question_bank(self, question_bank_file: Path, temp_dir: Path) -> None:
        """Test exported documents contain numbered questions and options."""
        questions = JsonLoader().load_question_bank(question_bank_file)
        output = QuestionExporter().export(questions, temp_dir / "bank.docx", title="Science Quiz")

        text = "\n".join(p.text for p in Document(str(output)).paragraphs)
        assert "Science Quiz" in text
        assert "1. Which planet is known as the Red Planet?" in text
        assert "b. Mars" in text
        assert "π × 2" in text
        assert "True / False" not in text
        assert "Answer Key" not in text

    def test_export_with_answer_key(self, question_bank_file: Path, temp_dir: Path) -> None:
        """Test the answer key uses option letters."""
        questions = JsonLoader().load_question_bank(question_bank_file)
        output = QuestionExporter().export(questions, temp_dir / "key.docx", include_answers=True)

        text = "\n".join(p.text for p in Document(str(output)).paragraphs)
        assert "Answer Key" in text
        assert "1. b" in text
        assert "2. 6.28 (± 0.01)" in text
        assert "3. Manually graded" in text

    def test_export_to_directory(self, temp_dir: Path) -> None:
        """Test a directory target gets a file named after the title."""
        questions = [Question(id="t1", type="true_false", prompt_md="The sky is blue.", correct_answer=True)]
        output = QuestionExporter().export(questions, temp_dir, title="Quick Check #1")

        assert output == temp_dir / "quick_check__1.docx"
        text = "\n".join(p.text for p in Document(str(output)).paragraphs)
        assert "True / False" in text

    def test_export_nothing(self, temp_dir: Path) -> None:
        """Test exporting an empty bank raises."""
        with pytest.raises(ExportError, match="No questions"):
            QuestionExporter().export([], temp_dir / "empty.docx")


class TestLatexToText:
    """Tests for LaTeX approximation."""

    def test_symbols_and_superscripts(self) -> None:
        """Test common commands become Unicode."""
        assert latex_to_text(r"\alpha + \beta") == "α + β"
        assert latex_to_text("x^2") == "x²"
        assert latex_to_text(r"90^{\circ}") == "90°"

    def test_wrappers_and_prefix_commands(self) -> None:
        """Test wrappers are unwrapped and longer commands win."""
        assert latex_to_text(r"\text{speed} \leq 5") == "speed ≤ 5"
        assert latex_to_text(r"\infty") == "∞"
        assert latex_to_text(r"x \in A") == "x ∈ A"

    def test_default_filename(self) -> None:
        """Test titles are turned into safe file names."""
        assert default_filename("Unit 3: Forces") == "unit_3__forces.docx"
