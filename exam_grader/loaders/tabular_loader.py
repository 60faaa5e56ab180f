"""
Spreadsheet exam file loader using openpyxl and pandas.

Reads answer sheets laid out one question per row, with a header row
naming the columns (question_id, type, points, correct_answer,
student_answer, numeric_tolerance).
"""

from pathlib import Path
from typing import Any, ClassVar

import pandas as pd
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from exam_grader.loaders.base import ExamLoader, LoaderError
from exam_grader.models import ExamDocument

REQUIRED_COLUMNS = ("question_id", "type")


class TabularLoader(ExamLoader):
    """
    Loads answer sheets from spreadsheets and CSV files.

    Handles .xlsx (openpyxl), .xls (pandas with xlrd) and .csv (pandas).
    Only the first worksheet is read.
    """

    SUPPORTED_EXTENSIONS: ClassVar[tuple[str, ...]] = (".xlsx", ".xls", ".csv")

    def load(self, file_path: Path) -> ExamDocument:
        """
        Load question rows from a spreadsheet.

        Raises:
            LoaderError: If the file cannot be read or lacks required columns.
        """
        self._validate_file(file_path)

        try:
            extension = file_path.suffix.lower()

            if extension == ".xlsx":
                rows = self._load_xlsx(file_path)
            elif extension == ".csv":
                rows = self._frame_to_rows(
                    pd.read_csv(file_path, dtype=str, keep_default_na=False)
                )
            else:  # .xls
                rows = self._frame_to_rows(pd.read_excel(file_path, sheet_name=0, engine="xlrd"))

        except InvalidFileException as e:
            raise LoaderError(
                "File is not a valid Excel document or is corrupted", file_path, cause=e
            ) from e
        except pd.errors.EmptyDataError as e:
            raise LoaderError("Spreadsheet contains no data", file_path, cause=e) from e
        except LoaderError:
            raise
        except Exception as e:
            raise LoaderError(f"Unexpected error: {e}", file_path, cause=e) from e

        if not rows:
            raise LoaderError("Spreadsheet contains no data", file_path)

        missing = [c for c in REQUIRED_COLUMNS if c not in rows[0]]
        if missing:
            raise LoaderError(f"Missing required columns: {missing}", file_path)

        return self._create_result(file_path, questions=tuple(rows), tabular=True)

    def _load_xlsx(self, file_path: Path) -> list[dict[str, Any]]:
        """Read the first worksheet of an .xlsx file into row dicts."""
        workbook = load_workbook(file_path, read_only=True, data_only=True)
        try:
            sheet = workbook.worksheets[0]
            values = sheet.iter_rows(values_only=True)

            header = next(values, None)
            if header is None:
                return []
            columns = [self._column_name(cell) for cell in header]

            rows: list[dict[str, Any]] = []
            for row in values:
                if all(cell is None or str(cell).strip() == "" for cell in row):
                    continue  # Skip empty rows
                rows.append({col: cell for col, cell in zip(columns, row) if col})
            return rows
        finally:
            workbook.close()

    def _frame_to_rows(self, frame: pd.DataFrame) -> list[dict[str, Any]]:
        """Convert a DataFrame into row dicts with None for missing cells."""
        frame = frame.rename(columns=self._column_name)
        frame = frame.dropna(how="all")
        frame = frame.astype(object).where(pd.notna(frame), None)
        return [
            {k: v for k, v in record.items() if k}
            for record in frame.to_dict(orient="records")
            if any(v is not None and str(v).strip() for v in record.values())
        ]

    @staticmethod
    def _column_name(cell: Any) -> str:
        """Normalise a header cell to a snake_case column name."""
        if cell is None:
            return ""
        return str(cell).strip().lower().replace(" ", "_")
