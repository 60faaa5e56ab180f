"""
Loader factory module.

Provides a factory function to select the appropriate loader
based on file extension, and a convenience function for direct loading.
"""

from pathlib import Path

from exam_grader.loaders.base import ExamLoader, LoaderError
from exam_grader.loaders.json_loader import JsonLoader
from exam_grader.loaders.tabular_loader import TabularLoader
from exam_grader.models import ExamDocument

# Registry of all available loaders
_LOADERS: tuple[type[ExamLoader], ...] = (
    JsonLoader,
    TabularLoader,
)


def get_supported_extensions() -> tuple[str, ...]:
    """
    Get all supported file extensions across all loaders.

    Returns:
        Tuple of supported extensions (e.g., ('.csv', '.json', ...)).
    """
    extensions: list[str] = []
    for loader_cls in _LOADERS:
        extensions.extend(loader_cls.SUPPORTED_EXTENSIONS)
    return tuple(sorted(set(extensions)))


def create_loader(file_path: Path | str) -> ExamLoader:
    """
    Create the appropriate loader for a given file.

    Raises:
        LoaderError: If the file format is not supported.
    """
    path = Path(file_path) if isinstance(file_path, str) else file_path
    extension = path.suffix.lower()

    for loader_cls in _LOADERS:
        if extension in loader_cls.SUPPORTED_EXTENSIONS:
            return loader_cls()

    supported = get_supported_extensions()
    raise LoaderError(
        f"Unsupported file format '{extension}'. Supported formats: {supported}",
        path,
    )


def load_exam(file_path: Path | str) -> ExamDocument:
    """
    Load an exam file.

    Convenience function that creates the appropriate loader
    and performs the load in one step.

    Raises:
        LoaderError: If loading fails.
    """
    path = Path(file_path) if isinstance(file_path, str) else file_path
    loader = create_loader(path)
    return loader.load(path)
