"""Document model for parsed lesson markdown."""

from __future__ import annotations

import dataclasses as dc
import typing as t

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from pathlib import Path

    from .quiz import QuizMetadata


@dc.dataclass(slots=True, frozen=True)
class Heading:
    """An ATX heading such as ``## Setup``."""

    level: int
    title: str
    line: int


@dc.dataclass(slots=True)
class CodeBlock:
    """A fenced code block.

    ``end_line`` and ``closing_fence`` stay ``None`` when the document ends
    before a matching closing delimiter is found.
    """

    fence: str
    info: str
    start_line: int
    end_line: int | None = None
    closing_fence: str | None = None
    lines: list[str] = dc.field(default_factory=list)

    @property
    def language(self) -> str:
        """The language hint, i.e. the first word of the info string."""
        return self.info.split(maxsplit=1)[0] if self.info.strip() else ""

    @property
    def closed(self) -> bool:
        return self.closing_fence is not None

    @property
    def content(self) -> str:
        return "\n".join(self.lines)


@dc.dataclass(slots=True)
class QuizOption:
    """One answer option together with its feedback sub-bullets."""

    text: str
    line: int
    feedback: list[str] = dc.field(default_factory=list)


@dc.dataclass(slots=True)
class QuizQuestion:
    """A quiz block: prompt, enumerated options and trailing metadata."""

    prompt: str
    prompt_line: int
    options: list[QuizOption] = dc.field(default_factory=list)
    metadata: QuizMetadata | None = None
    metadata_line: int = 0
    metadata_error: str | None = None

    @property
    def line(self) -> int:
        """The line reported for findings about this question."""
        return self.prompt_line or self.metadata_line

    @property
    def identifier(self) -> str | None:
        return self.metadata.identifier if self.metadata else None

    def correct_option(self) -> QuizOption | None:
        """Return the option named by the ``answer`` index, if it exists."""
        if self.metadata is None:
            return None
        index = self.metadata.answer_index
        if index is None or not 1 <= index <= len(self.options):
            return None
        return self.options[index - 1]


@dc.dataclass(slots=True)
class LessonDocument:
    """A parsed lesson: headings, code blocks and quiz questions in order."""

    path: Path | None
    lines: list[str]
    headings: list[Heading] = dc.field(default_factory=list)
    code_blocks: list[CodeBlock] = dc.field(default_factory=list)
    quizzes: list[QuizQuestion] = dc.field(default_factory=list)

    @property
    def display_name(self) -> str:
        return str(self.path) if self.path is not None else "<string>"

    def quiz_by_id(self, identifier: str) -> QuizQuestion | None:
        """Return the first quiz question carrying *identifier*."""
        return next(
            (quiz for quiz in self.quizzes if quiz.identifier == identifier),
            None,
        )


__all__ = [
    "CodeBlock",
    "Heading",
    "LessonDocument",
    "QuizOption",
    "QuizQuestion",
]
