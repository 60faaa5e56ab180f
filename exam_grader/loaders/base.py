"""
Base classes for exam file loading.

Defines the abstract interface that all loaders must implement,
ensuring consistent behavior across different file formats.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, ClassVar

from exam_grader.config import get_settings
from exam_grader.models import ExamDocument

logger = logging.getLogger(__name__)


class LoaderError(Exception):
    """
    Raised when an exam file cannot be loaded.

    Contains detailed information about the failure cause.
    """

    def __init__(self, message: str, file_path: str | Path, cause: Exception | None = None):
        self.file_path = str(file_path)
        self.cause = cause
        super().__init__(f"Failed to load '{file_path}': {message}")


class ExamLoader(ABC):
    """
    Abstract base class for exam file loaders.

    All loaders must implement the `load` method and declare
    which file extensions they support via `SUPPORTED_EXTENSIONS`.
    """

    # Class variable: each subclass must override with supported extensions
    SUPPORTED_EXTENSIONS: ClassVar[tuple[str, ...]] = ()

    # Encodings to try in order of preference
    ENCODINGS: ClassVar[tuple[str, ...]] = ("utf-8", "utf-8-sig", "latin-1", "cp1252")

    def __init__(self, max_file_size_mb: float | None = None):
        self._max_file_size_mb = max_file_size_mb or get_settings().max_file_size_mb

    @classmethod
    def supports(cls, file_path: Path) -> bool:
        """
        Check if this loader supports the given file.

        Args:
            file_path: Path to the file to check.

        Returns:
            True if this loader can handle the file format.
        """
        return file_path.suffix.lower() in cls.SUPPORTED_EXTENSIONS

    @abstractmethod
    def load(self, file_path: Path) -> ExamDocument:
        """
        Load question and answer records from the file.

        Args:
            file_path: Path to the exam file.

        Returns:
            ExamDocument containing the raw records.

        Raises:
            LoaderError: If loading fails for any reason.
        """
        ...

    def _validate_file(self, file_path: Path) -> None:
        """
        Validate that the file exists, is supported and not too large.

        Raises:
            LoaderError: If the file cannot be loaded.
        """
        if not file_path.exists():
            raise LoaderError("File does not exist", file_path)

        if not file_path.is_file():
            raise LoaderError("Path is not a file", file_path)

        if not self.supports(file_path):
            raise LoaderError(
                f"Unsupported file format. Expected one of: {self.SUPPORTED_EXTENSIONS}",
                file_path,
            )

        size_mb = file_path.stat().st_size / (1024 * 1024)
        if size_mb > self._max_file_size_mb:
            raise LoaderError(
                f"File is too large ({size_mb:.1f} MB, limit {self._max_file_size_mb} MB)",
                file_path,
            )

        logger.info("Loading exam file %s", file_path)

    def _read_with_encoding_fallback(self, file_path: Path) -> str:
        """
        Read file content with encoding fallback.

        Raises:
            LoaderError: If no encoding works.
        """
        last_error: Exception | None = None

        for encoding in self.ENCODINGS:
            try:
                return file_path.read_text(encoding=encoding)
            except UnicodeDecodeError as e:
                last_error = e
                continue

        raise LoaderError(
            f"Could not decode file with any supported encoding: {self.ENCODINGS}",
            file_path,
            cause=last_error,
        )

    def _create_result(self, file_path: Path, **fields: Any) -> ExamDocument:
        """Create an ExamDocument for the loaded file."""
        return ExamDocument(
            source_path=str(file_path.resolve()),
            file_extension=file_path.suffix.lower(),
            **fields,
        )
