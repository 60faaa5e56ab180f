"""
JSON exam file loader.

Reads an exam export holding the attempt's questions and the student's
answers, plus optional attempt metadata.
"""

import json
from pathlib import Path
from typing import Any, ClassVar

from pydantic import ValidationError

from exam_grader.loaders.base import ExamLoader, LoaderError
from exam_grader.models import ExamDocument, Question


class JsonLoader(ExamLoader):
    """
    Loads exam files in JSON format.

    Accepted layouts:
    - {"questions": [...], "answers": [...] or {...}, "attempt_id": ..., ...}
    - [...] a bare list of question records carrying their own answers
    """

    SUPPORTED_EXTENSIONS: ClassVar[tuple[str, ...]] = (".json",)

    METADATA_KEYS: ClassVar[tuple[str, ...]] = ("attempt_id", "status", "started_at")

    def load(self, file_path: Path) -> ExamDocument:
        """
        Load an exam from a JSON file.

        Raises:
            LoaderError: If the file is not valid JSON or has the wrong layout.
        """
        data = self._read_json(file_path)

        if isinstance(data, list):
            return self._create_result(file_path, questions=tuple(self._records(data, file_path)))

        if not isinstance(data, dict):
            raise LoaderError("Top-level JSON value must be an object or a list", file_path)

        questions = data.get("questions")
        if not isinstance(questions, list):
            raise LoaderError("Missing 'questions' list", file_path)

        answers = data.get("answers")
        if answers is not None and not isinstance(answers, (list, dict)):
            raise LoaderError("'answers' must be a list or an object", file_path)

        metadata = {k: data[k] for k in self.METADATA_KEYS if data.get(k) is not None}
        if "attempt_id" in metadata:
            metadata["attempt_id"] = str(metadata["attempt_id"])

        try:
            return self._create_result(
                file_path,
                questions=tuple(self._records(questions, file_path)),
                answers=answers,
                **metadata,
            )
        except ValidationError as e:
            raise LoaderError(f"Invalid attempt metadata: {e}", file_path, cause=e) from e

    def load_question_bank(self, file_path: Path) -> list[Question]:
        """
        Load question bank entries from a JSON list (or {"questions": [...]}).

        Raises:
            LoaderError: If a record is not a valid question.
        """
        data = self._read_json(file_path)
        if isinstance(data, dict):
            data = data.get("questions")
        if not isinstance(data, list):
            raise LoaderError("Question bank must be a list of questions", file_path)

        questions: list[Question] = []
        for i, record in enumerate(self._records(data, file_path), start=1):
            # Platform exports use *_json column names
            record = dict(record)
            if "options_json" in record and "options" not in record:
                record["options"] = record.pop("options_json") or ()
            if "correct_answer_json" in record and "correct_answer" not in record:
                record["correct_answer"] = record.pop("correct_answer_json")
            try:
                questions.append(Question.model_validate(record))
            except ValidationError as e:
                raise LoaderError(f"Question {i} is invalid: {e}", file_path, cause=e) from e

        return questions

    def _read_json(self, file_path: Path) -> Any:
        self._validate_file(file_path)
        content = self._read_with_encoding_fallback(file_path)

        if not content.strip():
            raise LoaderError("File is empty or contains only whitespace", file_path)

        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            raise LoaderError(f"Invalid JSON: {e}", file_path, cause=e) from e

    def _records(self, items: list[Any], file_path: Path) -> list[dict[str, Any]]:
        for i, item in enumerate(items, start=1):
            if not isinstance(item, dict):
                raise LoaderError(f"Record {i} must be an object", file_path)
        return items
