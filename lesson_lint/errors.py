"""Exception hierarchy for lesson-lint."""

from __future__ import annotations

from pathlib import Path


class LessonLintError(Exception):
    """Base class for all lesson-lint errors."""


class DocumentReadError(LessonLintError):
    """Raised when a lesson document cannot be read from disk."""

    def __init__(self, path: Path, reason: str) -> None:
        msg = f"Cannot read lesson document {path}: {reason}"
        super().__init__(msg)
        self.path = path
        self.reason = reason


class QuizMetadataError(LessonLintError, ValueError):
    """Raised when a quiz metadata line cannot be parsed."""


class ConfigError(LessonLintError, ValueError):
    """Raised for invalid lint configuration values."""


class ExportSchemaError(LessonLintError, ValueError):
    """Raised when a quiz export file has an unsupported schema."""


class ExportFileError(LessonLintError):
    """Raised when a quiz export file cannot be written or read."""

    def __init__(self, path: Path, reason: str) -> None:
        msg = f"Cannot access quiz export file {path}: {reason}"
        super().__init__(msg)
        self.path = path
        self.reason = reason


class LintFailedError(LessonLintError):
    """Raised when a lint report contains findings that should fail a run."""


__all__ = [
    "ConfigError",
    "DocumentReadError",
    "ExportFileError",
    "ExportSchemaError",
    "LessonLintError",
    "LintFailedError",
    "QuizMetadataError",
]
