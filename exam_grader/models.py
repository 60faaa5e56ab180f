"""
Pydantic models for the exam grader.

These models define the schemas for:
- Per-question grading input and the assembled attempt
- Graded answers and the aggregate grading result
- Question bank entries and submission outcomes

All models are frozen; they are built fresh for every grading call.
"""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)


def to_decimal(v: Any) -> Decimal:
    """Convert a numeric value to Decimal, rejecting booleans and non-numbers."""
    if isinstance(v, Decimal):
        return v
    if isinstance(v, bool):
        raise ValueError(f"Expected a number, got boolean {v}")
    try:
        return Decimal(str(v).strip())
    except InvalidOperation as e:
        raise ValueError(f"Expected a number, got {v!r}") from e


# ==============================================================================
# Enumerations
# ==============================================================================


class QuestionType(str, Enum):
    """Question types known to the exam platform."""

    MCQ_SINGLE = "mcq_single"
    MCQ_MULTI = "mcq_multi"
    TRUE_FALSE = "true_false"
    NUMERIC = "numeric"
    SHORT_TEXT = "short_text"
    ESSAY = "essay"
    CANVAS = "canvas"  # Free-hand drawing, graded by hand

    @classmethod
    def lookup(cls, value: str) -> "QuestionType | None":
        """Return the matching member, or None for an unrecognised type."""
        try:
            return cls(value)
        except ValueError:
            return None


class AttemptStatus(str, Enum):
    """Lifecycle status of a student's attempt."""

    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"  # Waiting for manual grading
    GRADED = "graded"


class Difficulty(str, Enum):
    """Difficulty label of a question bank entry."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


# ==============================================================================
# Grading Input Models
# ==============================================================================


class GradingInput(BaseModel):
    """
    Everything needed to grade a single question of an attempt.

    `correct_answer` and `student_answer` are left untyped: their shape
    depends on `question_type` and is checked when the answer is compared.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    question_id: str = Field(
        ...,
        min_length=1,
        description="Identifier of the question, unique within the attempt",
    )

    question_type: str = Field(
        ...,
        min_length=1,
        description="Question type (see QuestionType); unknown types are graded manually",
    )

    correct_answer: Any = Field(
        default=None,
        description="Reference answer, shape depends on the question type",
    )

    student_answer: Any = Field(
        default=None,
        description="Submitted answer, or None when the question was left unanswered",
    )

    points: Decimal = Field(
        ...,
        gt=0,
        description="Maximum points obtainable for this question",
    )

    numeric_tolerance: Decimal | None = Field(
        default=None,
        ge=0,
        description="Absolute tolerance for numeric questions",
    )

    @field_validator("points", mode="before")
    @classmethod
    def convert_points(cls, v: Any) -> Decimal:
        """Convert numeric values to Decimal for precision."""
        return to_decimal(v)

    @field_validator("numeric_tolerance", mode="before")
    @classmethod
    def convert_tolerance(cls, v: Any) -> Decimal | None:
        """Convert tolerance to Decimal, keeping None."""
        if v is None:
            return None
        return to_decimal(v)

    @property
    def known_type(self) -> QuestionType | None:
        """The question type as an enum member, or None if unrecognised."""
        return QuestionType.lookup(self.question_type)


class AttemptGradingInput(BaseModel):
    """The ordered list of questions of one attempt, ready for grading."""

    model_config = ConfigDict(frozen=True)

    answers: tuple[GradingInput, ...] = Field(
        default=(),
        description="One entry per exam question, in exam order",
    )


# ==============================================================================
# Grading Result Models
# ==============================================================================


class GradedAnswer(BaseModel):
    """The grading outcome of a single question."""

    model_config = ConfigDict(frozen=True, strict=True)

    question_id: str = Field(
        ...,
        description="Identifier of the graded question",
    )

    is_correct: bool | None = Field(
        ...,
        description="Correctness, or None when it cannot be determined automatically",
    )

    points_awarded: Decimal = Field(
        ...,
        ge=0,
        description="Points awarded (0 to max_points)",
    )

    max_points: Decimal = Field(
        ...,
        gt=0,
        description="Maximum possible points for this question",
    )

    needs_manual_grading: bool = Field(
        default=False,
        description="Whether a human grader must score this question",
    )

    @field_validator("points_awarded", "max_points", mode="before")
    @classmethod
    def convert_to_decimal(cls, v: Any) -> Decimal:
        """Convert numeric values to Decimal for precision."""
        return to_decimal(v)

    @model_validator(mode="after")
    def validate_points_range(self) -> "GradedAnswer":
        """Ensure awarded points don't exceed max points."""
        if self.points_awarded > self.max_points:
            raise ValueError(
                f"Awarded points ({self.points_awarded}) cannot exceed "
                f"max points ({self.max_points})"
            )
        return self


class GradingResult(BaseModel):
    """
    Complete grading result for one attempt.

    Totals are derived from the graded answers, so they always agree
    with the per-question values.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    graded_answers: tuple[GradedAnswer, ...] = Field(
        default=(),
        description="Graded answers in the same order as the grading input",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_score(self) -> Decimal:
        """Sum of awarded points."""
        return sum((a.points_awarded for a in self.graded_answers), Decimal(0))

    @computed_field  # type: ignore[prop-decorator]
    @property
    def max_score(self) -> Decimal:
        """Sum of the maximum points of every question, essays included."""
        return sum((a.max_points for a in self.graded_answers), Decimal(0))

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_manual_grading(self) -> bool:
        """Whether at least one question waits for a human grader."""
        return any(a.needs_manual_grading for a in self.graded_answers)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def percentage_score(self) -> float:
        """Calculate overall percentage score."""
        if self.max_score == 0:
            return 0.0
        return float(self.total_score / self.max_score * 100)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def status(self) -> AttemptStatus:
        """Attempt status implied by this result."""
        if self.has_manual_grading:
            return AttemptStatus.SUBMITTED
        return AttemptStatus.GRADED


# ==============================================================================
# Question Bank Models
# ==============================================================================


class QuestionOption(BaseModel):
    """A selectable option of a multiple choice question."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    text_md: str = Field(default="")


class Question(BaseModel):
    """A question bank entry as stored by the exam platform."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)

    type: str = Field(..., min_length=1)

    prompt_md: str = Field(default="")

    options: tuple[QuestionOption, ...] = Field(default=())

    correct_answer: Any = Field(default=None)

    points: Decimal = Field(default=Decimal("1"), gt=0)

    numeric_tolerance: Decimal | None = Field(default=None, ge=0)

    difficulty: Difficulty = Field(default=Difficulty.MEDIUM)

    tags: tuple[str, ...] = Field(default=())

    explanation_md: str | None = Field(default=None)

    @field_validator("points", mode="before")
    @classmethod
    def convert_points(cls, v: Any) -> Decimal:
        """Convert numeric values to Decimal for precision."""
        return to_decimal(v)

    @field_validator("numeric_tolerance", mode="before")
    @classmethod
    def convert_tolerance(cls, v: Any) -> Decimal | None:
        """Convert tolerance to Decimal, keeping None."""
        if v is None:
            return None
        return to_decimal(v)


# ==============================================================================
# Submission Models
# ==============================================================================


class SubmissionOutcome(BaseModel):
    """What the caller persists after an attempt is submitted and graded."""

    model_config = ConfigDict(frozen=True, strict=True)

    attempt_id: str = Field(..., min_length=1)

    status: AttemptStatus

    score: Decimal = Field(..., ge=0)

    max_score: Decimal = Field(..., ge=0)

    submitted_at: datetime

    time_taken_seconds: int = Field(..., ge=0)

    graded_answers: tuple[GradedAnswer, ...] = Field(default=())


# ==============================================================================
# Exam File Models
# ==============================================================================


class ExamDocument(BaseModel):
    """
    Raw records read from an exam file.

    Holds question and answer records untouched; AttemptParser turns
    them into grading input.
    """

    model_config = ConfigDict(frozen=True)

    source_path: str = Field(
        ...,
        description="Path to the source file",
    )

    file_extension: str = Field(
        ...,
        description="File extension of the source file",
    )

    questions: tuple[dict[str, Any], ...] = Field(
        default=(),
        description="Question records in exam order",
    )

    answers: list[dict[str, Any]] | dict[str, Any] | None = Field(
        default=None,
        description="Answer records, a mapping of question id to answer, or None",
    )

    tabular: bool = Field(
        default=False,
        description="Whether records came from a spreadsheet and hold string cells",
    )

    attempt_id: str | None = Field(default=None)

    status: AttemptStatus | None = Field(default=None)

    started_at: datetime | None = Field(default=None)

    loaded_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the file was read",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def question_count(self) -> int:
        """Return the number of question records."""
        return len(self.questions)
