"""Document-integrity rules applied to a parsed lesson."""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as t
from collections import defaultdict

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .config import LintConfig
    from .document import LessonDocument, QuizQuestion
    from .quiz import QuizMetadata


class Severity(enum.StrEnum):
    """How serious a finding is."""

    ERROR = "error"
    WARNING = "warning"


@dc.dataclass(slots=True, frozen=True)
class Finding:
    """A single problem reported by a rule."""

    code: str
    severity: Severity
    message: str
    line: int
    path: str = "<string>"

    def to_dict(self) -> dict[str, t.Any]:
        """Return a JSON-serializable mapping."""
        return {
            "code": self.code,
            "severity": str(self.severity),
            "message": self.message,
            "line": self.line,
        }

    def format(self) -> str:
        return f"{self.path}:{self.line}: {self.code} {self.severity} {self.message}"


@t.runtime_checkable
class Rule(t.Protocol):
    """Protocol implemented by every lint rule."""

    code: str
    name: str
    severity: Severity
    description: str

    def check(self, document: LessonDocument, config: LintConfig) -> list[Finding]:
        """Return findings for *document*."""
        ...


class _RuleBase:
    code: t.ClassVar[str]
    name: t.ClassVar[str]
    severity: t.ClassVar[Severity] = Severity.ERROR
    description: t.ClassVar[str] = ""

    def _finding(self, document: LessonDocument, line: int, message: str) -> Finding:
        return Finding(
            code=self.code,
            severity=self.severity,
            message=message,
            line=line,
            path=document.display_name,
        )

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        """Return a debug representation."""
        return f"{type(self).__name__}({self.code})"


def _parsed_quizzes(
    document: LessonDocument,
) -> t.Iterator[tuple[QuizQuestion, QuizMetadata]]:
    """Yield questions whose metadata line parsed, paired with that metadata."""
    for quiz in document.quizzes:
        if quiz.metadata is not None:
            yield quiz, quiz.metadata


def _quiz_label(quiz: QuizQuestion) -> str:
    return f"quiz #{quiz.identifier}" if quiz.identifier else "quiz"


class UnclosedFenceRule(_RuleBase):
    """Every fenced code block needs a closing delimiter."""

    code = "LL001"
    name = "unclosed-fence"
    description = "fenced code block is never closed"

    def check(self, document: LessonDocument, config: LintConfig) -> list[Finding]:
        del config
        return [
            self._finding(
                document,
                block.start_line,
                f"code block opened with {block.fence!r} is never closed",
            )
            for block in document.code_blocks
            if not block.closed
        ]


class FenceLengthMismatchRule(_RuleBase):
    """Closing delimiters should repeat the opener exactly."""

    code = "LL002"
    name = "fence-length-mismatch"
    severity = Severity.WARNING
    description = "closing fence is longer than the opening fence"

    def check(self, document: LessonDocument, config: LintConfig) -> list[Finding]:
        del config
        return [
            self._finding(
                document,
                block.end_line or block.start_line,
                f"closing fence {block.closing_fence!r} does not match "
                f"opening fence {block.fence!r} (line {block.start_line})",
            )
            for block in document.code_blocks
            if block.closing_fence is not None and block.closing_fence != block.fence
        ]


class QuizMetadataRule(_RuleBase):
    """Quiz metadata lines must parse and carry every required field."""

    code = "LL003"
    name = "quiz-metadata-invalid"
    description = "quiz metadata line is malformed or incomplete"

    def check(self, document: LessonDocument, config: LintConfig) -> list[Finding]:
        del config
        findings: list[Finding] = []
        for quiz in document.quizzes:
            if quiz.metadata is None:
                findings.append(
                    self._finding(
                        document,
                        quiz.metadata_line,
                        f"cannot parse quiz metadata: {quiz.metadata_error}",
                    )
                )
                continue
            if missing := quiz.metadata.missing_attributes():
                findings.append(
                    self._finding(
                        document,
                        quiz.metadata_line,
                        f"{_quiz_label(quiz)} metadata is missing "
                        + ", ".join(missing),
                    )
                )
            raw_points = quiz.metadata.attributes.get("points")
            points = quiz.metadata.points
            if raw_points is not None and (points is None or points < 0):
                findings.append(
                    self._finding(
                        document,
                        quiz.metadata_line,
                        f"{_quiz_label(quiz)} points must be a non-negative "
                        f"integer, got {raw_points!r}",
                    )
                )
        return findings


class TooFewOptionsRule(_RuleBase):
    """Each question offers a real choice."""

    code = "LL004"
    name = "quiz-too-few-options"
    description = "quiz question has fewer answer options than required"

    def check(self, document: LessonDocument, config: LintConfig) -> list[Finding]:
        return [
            self._finding(
                document,
                quiz.line,
                f"{_quiz_label(quiz)} has {len(quiz.options)} answer option(s); "
                f"at least {config.min_options} required",
            )
            for quiz, _metadata in _parsed_quizzes(document)
            if quiz.prompt_line and len(quiz.options) < config.min_options
        ]


class AnswerFormatRule(_RuleBase):
    """The ``answer`` field names exactly one option by positive index."""

    code = "LL005"
    name = "quiz-answer-invalid"
    description = "quiz answer is not a single positive integer"

    def check(self, document: LessonDocument, config: LintConfig) -> list[Finding]:
        del config
        findings: list[Finding] = []
        for quiz, metadata in _parsed_quizzes(document):
            raw = metadata.answer
            if raw is None:
                continue
            index = metadata.answer_index
            if index is None or index == 0:
                findings.append(
                    self._finding(
                        document,
                        quiz.metadata_line,
                        f"{_quiz_label(quiz)} answer must be one positive "
                        f"1-based option index, got {raw!r}",
                    )
                )
        return findings


class AnswerRangeRule(_RuleBase):
    """The ``answer`` index refers to an enumerated option."""

    code = "LL006"
    name = "quiz-answer-out-of-range"
    description = "quiz answer index does not refer to an existing option"

    def check(self, document: LessonDocument, config: LintConfig) -> list[Finding]:
        del config
        findings: list[Finding] = []
        for quiz, metadata in _parsed_quizzes(document):
            index = metadata.answer_index
            if not index or not quiz.prompt_line:
                continue
            if index > len(quiz.options):
                findings.append(
                    self._finding(
                        document,
                        quiz.metadata_line,
                        f"{_quiz_label(quiz)} answer {index} is out of range; "
                        f"question has {len(quiz.options)} option(s)",
                    )
                )
        return findings


class DuplicateIdRule(_RuleBase):
    """Quiz identifiers are unique within a lesson."""

    code = "LL007"
    name = "quiz-duplicate-id"
    description = "quiz id is used by more than one question"

    def check(self, document: LessonDocument, config: LintConfig) -> list[Finding]:
        del config
        seen: dict[str, list[QuizQuestion]] = defaultdict(list)
        for quiz, metadata in _parsed_quizzes(document):
            if quiz.identifier:
                seen[quiz.identifier].append(quiz)
        findings: list[Finding] = []
        for identifier, quizzes in seen.items():
            first, *duplicates = quizzes
            findings.extend(
                self._finding(
                    document,
                    quiz.metadata_line,
                    f"quiz id #{identifier} already used on line "
                    f"{first.metadata_line}",
                )
                for quiz in duplicates
            )
        return findings


class MissingPromptRule(_RuleBase):
    """A metadata line must close a question, not stand alone."""

    code = "LL008"
    name = "quiz-missing-prompt"
    description = "quiz metadata line is not preceded by a question"

    def check(self, document: LessonDocument, config: LintConfig) -> list[Finding]:
        del config
        return [
            self._finding(
                document,
                quiz.metadata_line,
                f"{_quiz_label(quiz)} metadata has no question before it",
            )
            for quiz in document.quizzes
            if not quiz.prompt_line
        ]


class MissingFeedbackRule(_RuleBase):
    """Every option explains why it is right or wrong."""

    code = "LL009"
    name = "quiz-missing-feedback"
    severity = Severity.WARNING
    description = "quiz answer option has no feedback text"

    def check(self, document: LessonDocument, config: LintConfig) -> list[Finding]:
        del config
        return [
            self._finding(
                document,
                option.line,
                f"{_quiz_label(quiz)} option {position} has no feedback",
            )
            for quiz, _metadata in _parsed_quizzes(document)
            for position, option in enumerate(quiz.options, start=1)
            if not any(text.strip() for text in option.feedback)
        ]


class CodeLanguageRule(_RuleBase):
    """Fenced code blocks carry a language hint."""

    code = "LL010"
    name = "code-missing-language"
    severity = Severity.WARNING
    description = "fenced code block has no language hint"

    def check(self, document: LessonDocument, config: LintConfig) -> list[Finding]:
        del config
        return [
            self._finding(
                document, block.start_line, "code block has no language hint"
            )
            for block in document.code_blocks
            if not block.language
        ]


class HeadingLevelRule(_RuleBase):
    """Heading levels descend one step at a time."""

    code = "LL011"
    name = "heading-level-skip"
    severity = Severity.WARNING
    description = "heading level jumps by more than one"

    def check(self, document: LessonDocument, config: LintConfig) -> list[Finding]:
        del config
        findings: list[Finding] = []
        previous: int | None = None
        for heading in document.headings:
            if previous is not None and heading.level > previous + 1:
                findings.append(
                    self._finding(
                        document,
                        heading.line,
                        f"heading level {heading.level} follows level {previous}",
                    )
                )
            previous = heading.level
        return findings


DEFAULT_RULES: t.Final[tuple[Rule, ...]] = (
    UnclosedFenceRule(),
    FenceLengthMismatchRule(),
    QuizMetadataRule(),
    TooFewOptionsRule(),
    AnswerFormatRule(),
    AnswerRangeRule(),
    DuplicateIdRule(),
    MissingPromptRule(),
    MissingFeedbackRule(),
    CodeLanguageRule(),
    HeadingLevelRule(),
)


def rule_by_code(code: str) -> Rule | None:
    """Return the registered rule with *code*, if any."""
    code = code.upper()
    return next((rule for rule in DEFAULT_RULES if rule.code == code), None)


__all__ = [
    "DEFAULT_RULES",
    "AnswerFormatRule",
    "AnswerRangeRule",
    "CodeLanguageRule",
    "DuplicateIdRule",
    "FenceLengthMismatchRule",
    "Finding",
    "HeadingLevelRule",
    "MissingFeedbackRule",
    "MissingPromptRule",
    "QuizMetadataRule",
    "Rule",
    "Severity",
    "TooFewOptionsRule",
    "UnclosedFenceRule",
    "rule_by_code",
]
