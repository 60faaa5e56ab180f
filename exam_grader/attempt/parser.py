"""
Attempt parser module.

Assembles the grading input of an attempt from raw question and answer
records, the way the exam platform stores them: exam questions (optionally
wrapping the question bank entry under "question") and the student's
answers keyed by question id.
"""

import json
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from exam_grader.models import AttemptGradingInput, ExamDocument, GradingInput, QuestionType

_MISSING = object()

# Alternative column names accepted for each field, in order of preference
ID_KEYS = ("question_id", "id")
TYPE_KEYS = ("type", "question_type")
CORRECT_KEYS = ("correct_answer_json", "correct_answer")
ANSWER_KEYS = ("answer_json", "answer", "student_answer")
TOLERANCE_KEYS = ("numeric_tolerance", "tolerance")


class AttemptParseError(Exception):
    """Raised when question or answer records cannot be assembled."""

    def __init__(self, message: str, index: int | None = None):
        self.index = index
        if index is not None:
            message = f"Question {index + 1}: {message}"
        super().__init__(message)


def _first(record: Mapping[str, Any], keys: Sequence[str], default: Any = _MISSING) -> Any:
    for key in keys:
        if key in record:
            return record[key]
    return default


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class AttemptParser:
    """
    Builds an AttemptGradingInput from raw records.

    Supports:
    1. Exam question records with the bank entry nested under "question",
       where the exam's own "points" override the bank's.
    2. Flat records carrying every field directly.
    3. Tabular rows (CSV/Excel) whose cells are all strings.
    """

    def parse(
        self,
        questions: Sequence[Mapping[str, Any]],
        answers: Sequence[Mapping[str, Any]] | Mapping[str, Any] | None = None,
    ) -> AttemptGradingInput:
        """
        Join question records with the student's answers.

        Args:
            questions: Exam question records, in exam order.
            answers: Answer records with a question id, or a mapping of
                question id to answer. When omitted, each question record's
                own answer field is used.

        Returns:
            AttemptGradingInput with one entry per question.

        Raises:
            AttemptParseError: If a record is structurally invalid.
        """
        answer_lookup = self._index_answers(answers) if answers is not None else None

        items: list[GradingInput] = []
        for index, record in enumerate(questions):
            if not isinstance(record, Mapping):
                raise AttemptParseError("Question record must be an object", index)
            items.append(self._parse_question(record, index, answer_lookup))

        return AttemptGradingInput(answers=tuple(items))

    def parse_payload(self, payload: Mapping[str, Any]) -> AttemptGradingInput:
        """
        Parse a document with "questions" and optional "answers" keys.

        Raises:
            AttemptParseError: If the payload has no question list.
        """
        questions = payload.get("questions")
        if not isinstance(questions, list):
            raise AttemptParseError("Payload must contain a 'questions' list")
        return self.parse(questions, payload.get("answers"))

    def parse_document(self, document: ExamDocument) -> AttemptGradingInput:
        """Parse the records of a loaded exam file."""
        if document.tabular:
            return self.parse_rows(document.questions)
        return self.parse(document.questions, document.answers)

    def parse_rows(self, rows: Sequence[Mapping[str, Any]]) -> AttemptGradingInput:
        """
        Parse tabular rows, one per question, with the answer in the same row.

        String cells are decoded according to the question type: blank cells
        become None and multi-select cells are split on "|" or read as JSON.
        """
        decoded = [self._decode_row(row) for row in rows]
        return self.parse(decoded)

    def _index_answers(
        self, answers: Sequence[Mapping[str, Any]] | Mapping[str, Any]
    ) -> dict[str, Any]:
        """Build a lookup of question id to submitted answer."""
        if isinstance(answers, Mapping):
            return {str(k): v for k, v in answers.items()}

        lookup: dict[str, Any] = {}
        for i, record in enumerate(answers):
            if not isinstance(record, Mapping):
                raise AttemptParseError(f"Answer record {i + 1} must be an object")
            question_id = _first(record, ("question_id",), None)
            if _is_blank(question_id):
                raise AttemptParseError(f"Answer record {i + 1} is missing 'question_id'")
            lookup[str(question_id)] = _first(record, ANSWER_KEYS, None)
        return lookup

    def _parse_question(
        self,
        record: Mapping[str, Any],
        index: int,
        answer_lookup: dict[str, Any] | None,
    ) -> GradingInput:
        """Parse one question record into a GradingInput."""
        bank = record.get("question")
        if isinstance(bank, Mapping):
            # Exam-level fields take precedence over the bank entry
            merged: dict[str, Any] = {**bank, **{k: v for k, v in record.items() if k != "question"}}
        else:
            merged = dict(record)

        question_id = _first(merged, ID_KEYS, None)
        if _is_blank(question_id):
            raise AttemptParseError("Missing question id", index)
        question_id = str(question_id).strip()

        question_type = _first(merged, TYPE_KEYS, None)
        if _is_blank(question_type):
            raise AttemptParseError(f"Missing question type for '{question_id}'", index)

        if answer_lookup is not None:
            student_answer = answer_lookup.get(question_id)
        else:
            student_answer = _first(merged, ANSWER_KEYS, None)

        points = _first(merged, ("points",), None)
        if _is_blank(points):
            points = 1

        try:
            return GradingInput(
                question_id=question_id,
                question_type=str(question_type).strip(),
                correct_answer=_first(merged, CORRECT_KEYS, None),
                student_answer=student_answer,
                points=points,
                numeric_tolerance=_first(merged, TOLERANCE_KEYS, None),
            )
        except ValidationError as e:
            details = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise AttemptParseError(f"Invalid question '{question_id}': {details}", index) from e

    def _decode_row(self, row: Mapping[str, Any]) -> dict[str, Any]:
        """Decode the string cells of a tabular row."""
        decoded = {k: (None if _is_blank(v) else v) for k, v in row.items()}
        question_type = QuestionType.lookup(str(decoded.get("type") or "").strip())

        for keys in (CORRECT_KEYS, ANSWER_KEYS):
            for key in keys:
                value = decoded.get(key)
                if isinstance(value, str):
                    decoded[key] = self._decode_cell(value, question_type)

        return decoded

    def _decode_cell(self, value: str, question_type: QuestionType | None) -> Any:
        """Decode a list-valued string cell."""
        stripped = value.strip()
        if question_type not in (QuestionType.MCQ_MULTI, QuestionType.SHORT_TEXT):
            return value

        if stripped.startswith("["):
            try:
                parsed = json.loads(stripped)
            except json.JSONDecodeError:
                return value
            return parsed if isinstance(parsed, list) else value

        if question_type is QuestionType.MCQ_MULTI:
            return [part.strip() for part in stripped.split("|") if part.strip()]
        return value
