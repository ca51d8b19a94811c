"""Line scanner turning lesson markdown into a :class:`LessonDocument`.

The scanner only understands the parts of markdown a lesson linter needs:
ATX headings, fenced code blocks and quiz blocks closed by a kramdown
attribute line.  Everything else is treated as prose.
"""

from __future__ import annotations

import dataclasses as dc
import logging
import re
import typing as t
from pathlib import Path

from .document import CodeBlock, Heading, LessonDocument, QuizOption, QuizQuestion
from .errors import DocumentReadError, QuizMetadataError
from .quiz import is_attribute_line, parse_quiz_metadata

_logger = logging.getLogger(__name__)

DEFAULT_QUIZ_CLASSES: t.Final[tuple[str, ...]] = ("choose_best",)

_FENCE_OPEN_RE: t.Final = re.compile(
    r"^(?P<indent>[ \t]*)(?P<fence>`{3,}|~{3,})(?P<info>.*)$"
)
_FENCE_CLOSE_RE: t.Final = re.compile(r"^[ \t]*(?P<fence>`{3,}|~{3,})[ \t]*$")
_HEADING_RE: t.Final = re.compile(
    r"^ {0,3}(?P<marks>#{1,6})(?:[ \t]+(?P<title>.*?))?[ \t]*$"
)
_CLOSING_HASHES_RE: t.Final = re.compile(r"(?:^|[ \t]+)#+$")
_BULLET_RE: t.Final = re.compile(r"^(?P<indent>[ \t]*)[-*+][ \t]+(?P<text>.*)$")
_ORDERED_RE: t.Final = re.compile(
    r"^(?P<indent>[ \t]*)\d{1,9}[.)][ \t]+(?P<text>.*)$"
)


def _indent_width(indent: str) -> int:
    return len(indent.expandtabs(4))


@dc.dataclass(slots=True)
class _Candidate:
    """A question being accumulated until its metadata line arrives."""

    prompt: str
    prompt_line: int
    options: list[QuizOption] = dc.field(default_factory=list)
    option_indent: int | None = None
    in_feedback: bool = False
    blank_seen: bool = False

    def add_option(self, text: str, line: int) -> None:
        self.options.append(QuizOption(text=text.strip(), line=line))
        self.in_feedback = False

    def add_feedback(self, text: str) -> None:
        self.options[-1].feedback.append(text.strip())
        self.in_feedback = True

    def extend_last(self, text: str) -> None:
        """Append a continuation line to the most recent option or feedback."""
        option = self.options[-1]
        if self.in_feedback and option.feedback:
            option.feedback[-1] = f"{option.feedback[-1]} {text.strip()}"
        else:
            option.text = f"{option.text} {text.strip()}"

    def finish(self) -> QuizQuestion:
        return QuizQuestion(
            prompt=self.prompt,
            prompt_line=self.prompt_line,
            options=self.options,
        )


class _Scanner:
    def __init__(self, quiz_classes: t.Sequence[str]) -> None:
        self._quiz_class_res = [
            re.compile(rf"(?<![\w-])\.{re.escape(cls)}(?![\w-])")
            for cls in quiz_classes
        ]
        self._quiz_classes = frozenset(quiz_classes)
        self.headings: list[Heading] = []
        self.code_blocks: list[CodeBlock] = []
        self.quizzes: list[QuizQuestion] = []
        self._fence: CodeBlock | None = None
        self._candidate: _Candidate | None = None

    def feed(self, lineno: int, line: str) -> None:
        if self._fence is not None:
            self._feed_fenced(self._fence, lineno, line)
            return

        if (fence := _FENCE_OPEN_RE.match(line)) and self._open_fence(lineno, fence):
            return

        if heading := _HEADING_RE.match(line):
            self._add_heading(lineno, heading)
            return

        if is_attribute_line(line):
            self._add_attribute_line(lineno, line)
            return

        if not line.strip():
            if self._candidate is not None:
                self._candidate.blank_seen = True
            return

        if bullet := _BULLET_RE.match(line):
            self._add_bullet(lineno, bullet)
            return

        if ordered := _ORDERED_RE.match(line):
            self._add_ordered(lineno, ordered)
            return

        self._add_text(lineno, line)

    def _feed_fenced(self, block: CodeBlock, lineno: int, line: str) -> None:
        closing = _FENCE_CLOSE_RE.match(line)
        if (
            closing is not None
            and closing.group("fence")[0] == block.fence[0]
            and len(closing.group("fence")) >= len(block.fence)
        ):
            block.end_line = lineno
            block.closing_fence = closing.group("fence")
            self._fence = None
            return
        block.lines.append(line)

    def _open_fence(self, lineno: int, match: re.Match[str]) -> bool:
        fence = match.group("fence")
        info = match.group("info").strip()
        if fence.startswith("`") and "`" in info:
            # Inline code spanning a line, not a fence.
            return False

        block = CodeBlock(fence=fence, info=info, start_line=lineno)
        self.code_blocks.append(block)
        self._fence = block

        candidate = self._candidate
        indent = _indent_width(match.group("indent"))
        if (
            candidate is None
            or candidate.option_indent is None
            or indent <= candidate.option_indent
        ):
            self._candidate = None
        return True

    def _add_heading(self, lineno: int, match: re.Match[str]) -> None:
        title = _CLOSING_HASHES_RE.sub("", match.group("title") or "").strip()
        self.headings.append(
            Heading(level=len(match.group("marks")), title=title, line=lineno)
        )
        self._candidate = None

    def _is_quiz_line(self, line: str) -> bool:
        return any(regex.search(line) for regex in self._quiz_class_res)

    def _add_attribute_line(self, lineno: int, line: str) -> None:
        candidate, self._candidate = self._candidate, None
        try:
            metadata = parse_quiz_metadata(line, line=lineno)
        except QuizMetadataError as exc:
            if not self._is_quiz_line(line):
                _logger.debug("Ignoring unparsable attribute line %d", lineno)
                return
            question = self._question_from(candidate, lineno)
            question.metadata_error = str(exc)
            self.quizzes.append(question)
            return

        if not self._quiz_classes.intersection(metadata.classes):
            return
        question = self._question_from(candidate, lineno)
        question.metadata = metadata
        self.quizzes.append(question)

    @staticmethod
    def _question_from(candidate: _Candidate | None, lineno: int) -> QuizQuestion:
        if candidate is None:
            question = QuizQuestion(prompt="", prompt_line=0)
        else:
            question = candidate.finish()
        question.metadata_line = lineno
        return question

    def _add_bullet(self, lineno: int, match: re.Match[str]) -> None:
        candidate = self._candidate
        text = match.group("text")
        if candidate is None:
            # The question itself may be the first item of the list.
            self._candidate = _Candidate(prompt=text.strip(), prompt_line=lineno)
            return
        indent = _indent_width(match.group("indent"))
        if candidate.option_indent is None:
            candidate.option_indent = indent
            candidate.add_option(text, lineno)
        elif indent <= candidate.option_indent:
            candidate.add_option(text, lineno)
        else:
            candidate.add_feedback(text)

    def _add_ordered(self, lineno: int, match: re.Match[str]) -> None:
        candidate = self._candidate
        indent = _indent_width(match.group("indent"))
        if (
            candidate is not None
            and candidate.option_indent is not None
            and indent > candidate.option_indent
        ):
            candidate.add_feedback(match.group("text"))
            return
        self._candidate = _Candidate(
            prompt=match.group("text").strip(), prompt_line=lineno
        )

    def _add_text(self, lineno: int, line: str) -> None:
        candidate = self._candidate
        starts_indented = line[:1] in (" ", "\t")
        if candidate is not None and candidate.options and starts_indented:
            candidate.extend_last(line)
            return
        if candidate is not None and not candidate.options and not candidate.blank_seen:
            candidate.prompt = f"{candidate.prompt} {line.strip()}".strip()
            return
        self._candidate = _Candidate(prompt=line.strip(), prompt_line=lineno)


def parse_document(
    text: str,
    *,
    path: Path | None = None,
    quiz_classes: t.Sequence[str] = DEFAULT_QUIZ_CLASSES,
) -> LessonDocument:
    """Parse lesson markdown *text* into a :class:`LessonDocument`.

    Parameters
    ----------
    text:
        Full document content.
    path:
        Optional source path, kept for reporting.
    quiz_classes:
        Attribute-list classes that mark a metadata line as a quiz question.
    """
    lines = text.splitlines()
    scanner = _Scanner(quiz_classes)
    for lineno, line in enumerate(lines, start=1):
        scanner.feed(lineno, line)

    document = LessonDocument(
        path=path,
        lines=lines,
        headings=scanner.headings,
        code_blocks=scanner.code_blocks,
        quizzes=scanner.quizzes,
    )
    _logger.debug(
        "Parsed %s: %d headings, %d code blocks, %d quiz questions",
        document.display_name,
        len(document.headings),
        len(document.code_blocks),
        len(document.quizzes),
    )
    return document


def read_document_text(path: Path) -> str:
    """Return the UTF-8 text of *path*, wrapping failures in a lint error."""
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise DocumentReadError(path, "not valid UTF-8") from exc
    except OSError as exc:
        raise DocumentReadError(path, exc.strerror or str(exc)) from exc


def parse_file(
    path: Path | str,
    *,
    quiz_classes: t.Sequence[str] = DEFAULT_QUIZ_CLASSES,
) -> LessonDocument:
    """Read and parse the lesson document at *path*."""
    path = Path(path)
    return parse_document(
        read_document_text(path), path=path, quiz_classes=quiz_classes
    )


__all__ = [
    "DEFAULT_QUIZ_CLASSES",
    "parse_document",
    "parse_file",
    "read_document_text",
]
