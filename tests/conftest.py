"""
Pytest configuration and fixtures.

Provides common test fixtures for all test modules.
"""

import json
import tempfile
from decimal import Decimal
from pathlib import Path
from typing import Any, Generator

import pytest
from openpyxl import Workbook

from exam_grader.config import Settings
from exam_grader.models import AttemptGradingInput, GradingInput


# ==============================================================================
# Directory Fixtures
# ==============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# ==============================================================================
# Settings Fixtures
# ==============================================================================


@pytest.fixture
def test_settings(temp_dir: Path) -> Settings:
    """Create test settings independent of the environment."""
    return Settings(
        _env_file=None,
        default_numeric_tolerance=Decimal("0"),
        short_text_case_sensitive=False,
        short_text_collapse_whitespace=False,
        short_text_allow_regex=True,
        output_directory=temp_dir / "output",
    )


# ==============================================================================
# Grading Input Fixtures
# ==============================================================================


@pytest.fixture
def mcq_single_input() -> GradingInput:
    """A correctly answered single choice question worth 4 points."""
    return GradingInput(
        question_id="q1",
        question_type="mcq_single",
        correct_answer="B",
        student_answer="B",
        points=Decimal("4"),
    )


@pytest.fixture
def essay_input() -> GradingInput:
    """An answered essay question worth 6 points."""
    return GradingInput(
        question_id="q2",
        question_type="essay",
        correct_answer=None,
        student_answer="Photosynthesis converts light energy into chemical energy.",
        points=Decimal("6"),
    )


@pytest.fixture
def full_attempt() -> AttemptGradingInput:
    """An attempt covering every auto-gradable type, half of them correct."""
    return AttemptGradingInput(
        answers=(
            GradingInput(
                question_id="single", question_type="mcq_single",
                correct_answer="B", student_answer="B", points=2,
            ),
            GradingInput(
                question_id="multi", question_type="mcq_multi",
                correct_answer=["A", "C"], student_answer=["A"], points=3,
            ),
            GradingInput(
                question_id="tf", question_type="true_false",
                correct_answer=True, student_answer=True, points=1,
            ),
            GradingInput(
                question_id="num", question_type="numeric",
                correct_answer=10, student_answer=10.6, points=2,
                numeric_tolerance="0.5",
            ),
            GradingInput(
                question_id="text", question_type="short_text",
                correct_answer="Paris", student_answer="  paris ", points=2,
            ),
            GradingInput(
                question_id="blank", question_type="numeric",
                correct_answer=3, student_answer=None, points=5,
            ),
        )
    )


# ==============================================================================
# Exam Record Fixtures
# ==============================================================================


@pytest.fixture
def exam_payload() -> dict[str, Any]:
    """An exam export in the platform's own record layout."""
    return {
        "attempt_id": "att-1",
        "status": "in_progress",
        "started_at": "2024-05-01T09:00:00+00:00",
        "questions": [
            {
                "question_id": "q1",
                "points": 4,
                "question": {
                    "id": "q1",
                    "type": "mcq_single",
                    "correct_answer_json": "B",
                    "points": 1,
                },
            },
            {
                "question_id": "q2",
                "points": 6,
                "question": {"id": "q2", "type": "essay", "correct_answer_json": None},
            },
            {
                "question_id": "q3",
                "points": 2,
                "question": {
                    "id": "q3",
                    "type": "numeric",
                    "correct_answer_json": 9.81,
                    "numeric_tolerance": 0.05,
                },
            },
        ],
        "answers": [
            {"question_id": "q1", "answer_json": "B"},
            {"question_id": "q2", "answer_json": "Gravity pulls objects together."},
        ],
    }


@pytest.fixture
def exam_json_file(temp_dir: Path, exam_payload: dict[str, Any]) -> Path:
    """Write the exam payload to a JSON file."""
    file_path = temp_dir / "attempt.json"
    file_path.write_text(json.dumps(exam_payload), encoding="utf-8")
    return file_path


@pytest.fixture
def exam_csv_file(temp_dir: Path) -> Path:
    """An answer sheet in CSV format."""
    file_path = temp_dir / "attempt.csv"
    file_path.write_text(
        "question_id,type,points,correct_answer,student_answer,numeric_tolerance\n"
        "q1,mcq_single,4,B,B,\n"
        "q2,mcq_multi,3,A|C,C|A,\n"
        "q3,true_false,1,true,False,\n"
        "q4,numeric,2,10,10.4,0.5\n"
        'q5,short_text,2,"[""colour"", ""color""]",Color,\n'
        "q6,essay,6,,An essay answer,\n",
        encoding="utf-8",
    )
    return file_path


@pytest.fixture
def exam_xlsx_file(temp_dir: Path) -> Path:
    """An answer sheet in Excel format."""
    workbook = Workbook()
    sheet = workbook.active
    sheet.append(["Question ID", "Type", "Points", "Correct Answer", "Student Answer", "Numeric Tolerance"])
    sheet.append(["q1", "mcq_single", 4, "B", "A", None])
    sheet.append(["q2", "numeric", 2, 3.5, 3.5, None])
    sheet.append([None, None, None, None, None, None])
    sheet.append(["q3", "true_false", 1, True, True, None])

    file_path = temp_dir / "attempt.xlsx"
    workbook.save(file_path)
    return file_path


@pytest.fixture
def question_bank() -> list[dict[str, Any]]:
    """Question bank records as exported by the platform."""
    return [
        {
            "id": "b1",
            "type": "mcq_single",
            "prompt_md": "Which planet is known as the **Red Planet**?",
            "options_json": [
                {"id": "o1", "text_md": "Venus"},
                {"id": "o2", "text_md": "Mars"},
            ],
            "correct_answer_json": "o2",
            "points": 2,
            "difficulty": "easy",
            "tags": ["astronomy"],
        },
        {
            "id": "b2",
            "type": "numeric",
            "prompt_md": "Compute $\\pi \\times 2$ to two decimals.",
            "correct_answer_json": 6.28,
            "numeric_tolerance": 0.01,
            "points": 3,
        },
        {
            "id": "b3",
            "type": "essay",
            "prompt_md": "# Reflection\nDescribe the water cycle.\n- Mention evaporation",
            "points": 5,
        },
    ]


@pytest.fixture
def question_bank_file(temp_dir: Path, question_bank: list[dict[str, Any]]) -> Path:
    """Write the question bank to a JSON file."""
    file_path = temp_dir / "bank.json"
    file_path.write_text(json.dumps(question_bank), encoding="utf-8")
    return file_path
