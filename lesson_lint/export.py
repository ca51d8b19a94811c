"""Versioned JSON export of a lesson's quiz questions.

The export is what the grading platform needs from a lesson: identifier,
title, point value, the prompt, the options with their feedback, and which
option is correct.  Only well-formed questions are exported, so lint a
lesson before publishing its quiz bank.
"""

from __future__ import annotations

import dataclasses as dc
import json
import logging
import typing as t

from .errors import ExportFileError, ExportSchemaError

if t.TYPE_CHECKING:
    from pathlib import Path

    from .document import LessonDocument

_logger = logging.getLogger(__name__)

_SCHEMA_VERSION: t.Final[str] = "1.0"


def _parse_version(version_str: str) -> tuple[int, int]:
    """Parse a ``"major.minor"`` version string into a comparable tuple.

    Raises
    ------
    ExportSchemaError
        If the string is not two dot-separated non-negative integers.
    """
    parts = version_str.strip().split(".")
    if len(parts) != 2:
        msg = f"Invalid schema version {version_str!r}; expected 'major.minor'"
        raise ExportSchemaError(msg)
    try:
        major, minor = int(parts[0]), int(parts[1])
    except ValueError:
        msg = f"Invalid schema version {version_str!r}; expected numeric 'major.minor'"
        raise ExportSchemaError(msg) from None
    if major < 0 or minor < 0:
        msg = f"Invalid schema version {version_str!r}; components must be non-negative"
        raise ExportSchemaError(msg)
    return (major, minor)


def _check_version(data: t.Mapping[str, t.Any]) -> str:
    """Reject exports from a newer major schema version.

    Returns the file's version string.  Older majors and any minor version
    of the current major are read as-is; unknown keys are ignored.
    """
    version = data.get("version")
    if not isinstance(version, str):
        actual = type(version).__name__
        msg = f"Invalid export version field: expected str, got {actual}"
        raise ExportSchemaError(msg)
    file_major, _ = _parse_version(version)
    current_major, _ = _parse_version(_SCHEMA_VERSION)
    if file_major > current_major:
        msg = (
            f"Unsupported quiz export schema version {version!r}; "
            f"expected at most {current_major}.x"
        )
        raise ExportSchemaError(msg)
    return version.strip()


@dc.dataclass(slots=True)
class ExportedOption:
    """An answer option as published to the grading platform."""

    text: str
    feedback: list[str]
    correct: bool

    def to_dict(self) -> dict[str, t.Any]:
        """Return a JSON-serializable mapping."""
        return {
            "text": self.text,
            "feedback": list(self.feedback),
            "correct": self.correct,
        }

    @classmethod
    def from_dict(cls, data: t.Mapping[str, t.Any]) -> ExportedOption:
        """Construct from a JSON-compatible mapping."""
        return cls(
            text=str(data["text"]),
            feedback=[str(item) for item in data.get("feedback", [])],
            correct=bool(data.get("correct", False)),
        )


@dc.dataclass(slots=True)
class ExportedQuestion:
    """A quiz question ready for grading."""

    identifier: str
    title: str
    points: int
    answer: int
    prompt: str
    options: list[ExportedOption]

    def to_dict(self) -> dict[str, t.Any]:
        """Return a JSON-serializable mapping."""
        return {
            "id": self.identifier,
            "title": self.title,
            "points": self.points,
            "answer": self.answer,
            "prompt": self.prompt,
            "options": [option.to_dict() for option in self.options],
        }

    @classmethod
    def from_dict(cls, data: t.Mapping[str, t.Any]) -> ExportedQuestion:
        """Construct from a JSON-compatible mapping."""
        try:
            return cls(
                identifier=str(data["id"]),
                title=str(data["title"]),
                points=int(data["points"]),
                answer=int(data["answer"]),
                prompt=str(data.get("prompt", "")),
                options=[ExportedOption.from_dict(o) for o in data.get("options", [])],
            )
        except (KeyError, TypeError, ValueError) as exc:
            msg = f"Malformed exported question: {exc}"
            raise ExportSchemaError(msg) from exc


@dc.dataclass(slots=True)
class QuizBank:
    """All exportable quiz questions of one lesson."""

    SCHEMA_VERSION: t.ClassVar[str] = _SCHEMA_VERSION

    version: str
    source: str
    questions: list[ExportedQuestion]

    @property
    def total_points(self) -> int:
        return sum(question.points for question in self.questions)

    @classmethod
    def from_document(cls, document: LessonDocument) -> QuizBank:
        """Collect the well-formed quiz questions of *document*.

        A question is exported when its metadata parsed, every required
        field is present, points is a non-negative integer and the answer
        names one of its options.
        """
        questions: list[ExportedQuestion] = []
        for quiz in document.quizzes:
            metadata = quiz.metadata
            correct = quiz.correct_option()
            if (
                metadata is None
                or correct is None
                or metadata.missing_attributes()
                or metadata.points is None
                or metadata.points < 0
            ):
                _logger.debug(
                    "Skipping malformed quiz at line %d of %s",
                    quiz.metadata_line,
                    document.display_name,
                )
                continue
            questions.append(
                ExportedQuestion(
                    identifier=str(metadata.identifier),
                    title=str(metadata.title),
                    points=metadata.points,
                    answer=int(metadata.answer_index or 0),
                    prompt=quiz.prompt,
                    options=[
                        ExportedOption(
                            text=option.text,
                            feedback=list(option.feedback),
                            correct=option is correct,
                        )
                        for option in quiz.options
                    ],
                )
            )
        return cls(
            version=cls.SCHEMA_VERSION,
            source=document.display_name,
            questions=questions,
        )

    def to_dict(self) -> dict[str, t.Any]:
        """Return a JSON-serializable mapping matching the v1.0 schema."""
        return {
            "version": self.version,
            "source": self.source,
            "total_points": self.total_points,
            "questions": [question.to_dict() for question in self.questions],
        }

    @classmethod
    def from_dict(cls, data: t.Mapping[str, t.Any]) -> QuizBank:
        """Construct from a JSON-compatible mapping.

        The file's own schema version is kept on the returned bank.

        Raises
        ------
        ExportSchemaError
            If the schema version is unsupported or a question is malformed.
        """
        version = _check_version(data)
        return cls(
            version=version,
            source=str(data.get("source", "")),
            questions=[
                ExportedQuestion.from_dict(q) for q in data.get("questions", [])
            ],
        )

    def save(self, path: Path) -> None:
        """Write this bank to *path* as JSON, creating directories as needed.

        Raises
        ------
        ExportFileError
            If the directory cannot be created or the file cannot be written.
        """
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(
                json.dumps(self.to_dict(), indent=2) + "\n", encoding="utf-8"
            )
        except OSError as exc:
            raise ExportFileError(path, exc.strerror or str(exc)) from exc

    @classmethod
    def load(cls, path: Path) -> QuizBank:
        """Load a quiz bank from a JSON file at *path*."""
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise ExportFileError(path, "not valid UTF-8") from exc
        except OSError as exc:
            raise ExportFileError(path, exc.strerror or str(exc)) from exc
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            msg = f"{path} is not valid JSON: {exc}"
            raise ExportSchemaError(msg) from exc
        if not isinstance(data, dict):
            msg = f"{path} must contain a JSON object"
            raise ExportSchemaError(msg)
        return cls.from_dict(data)


__all__ = ["ExportedOption", "ExportedQuestion", "QuizBank"]
