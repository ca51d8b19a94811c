"""Unit tests for the Linter orchestration and LintReport."""

from __future__ import annotations

import textwrap
import typing as t

import pytest

from lesson_lint.config import LintConfig
from lesson_lint.errors import DocumentReadError, LintFailedError
from lesson_lint.linter import Linter, LintReport, lint_file, lint_text
from lesson_lint.rules import Finding, Severity

if t.TYPE_CHECKING:
    from pathlib import Path

    from lesson_lint.document import LessonDocument

CLEAN_LESSON = textwrap.dedent(
    """\
    # Lesson

    ```bash
    bundle install
    ```

    ## Quiz

    1. Pick one.
    - First
        * Right.
    - Second
        * Wrong.
    {: .choose_best #1 title="Pick" points="1" answer="1" }
    """
)

BROKEN_LESSON = textwrap.dedent(
    """\
    # Lesson
    ### Skipped a level

    1. Pick one.
    - Only option
    {: .choose_best #1 title="Pick" points="1" answer="4" }

    ```
    never closed
    """
)


def test_clean_lesson_has_no_findings() -> None:
    """A well-formed lesson passes every default rule."""
    report = lint_text(CLEAN_LESSON)

    assert report.ok
    assert not report.has_errors(strict=True)
    assert report.format() == "<string>: no problems found"


def test_broken_lesson_reports_in_line_order() -> None:
    """Findings from all rules are merged and sorted by line then code."""
    report = lint_text(BROKEN_LESSON, path="lesson.md")

    assert [(f.line, f.code) for f in report.findings] == [
        (2, "LL011"),
        (4, "LL004"),
        (5, "LL009"),
        (6, "LL006"),
        (8, "LL001"),
        (8, "LL010"),
    ]
    assert {f.code for f in report.errors} == {"LL001", "LL004", "LL006"}
    assert {f.code for f in report.warnings} == {"LL009", "LL010", "LL011"}
    assert report.path == "lesson.md"


def test_report_leaves_callers_findings_untouched() -> None:
    """LintReport sorts a copy of the findings it is given."""
    findings = [
        Finding("LL010", Severity.WARNING, "no language", 9, "x.md"),
        Finding("LL001", Severity.ERROR, "never closed", 3, "x.md"),
    ]

    report = LintReport(path="x.md", findings=findings)

    assert [f.line for f in report.findings] == [3, 9]
    assert [f.line for f in findings] == [9, 3]


def test_non_ascii_digit_answer_is_reported() -> None:
    """Unicode digits in ``answer`` are a format error, not a crash."""
    text = CLEAN_LESSON.replace('answer="1"', 'answer="\u00b2"')

    report = lint_text(text)

    assert [f.code for f in report.findings] == ["LL005"]


def test_select_and_ignore_filter_rules() -> None:
    """Only selected, non-ignored rules run."""
    linter = Linter(LintConfig(select=("LL00",), ignore=("LL004", "ll009")))

    report = linter.lint_text(BROKEN_LESSON)

    assert {f.code for f in report.findings} == {"LL001", "LL006"}
    assert "LL011" not in {rule.code for rule in linter.rules}


def test_custom_rules_can_be_supplied() -> None:
    """Any object implementing the Rule protocol can be used."""

    class NoTodoRule:
        code = "X001"
        name = "no-todo"
        severity = Severity.WARNING
        description = "TODO markers left in a lesson"

        def check(
            self, document: LessonDocument, config: LintConfig
        ) -> list[Finding]:
            del config
            return [
                Finding(self.code, self.severity, "TODO left", number)
                for number, line in enumerate(document.lines, start=1)
                if "TODO" in line
            ]

    report = Linter(rules=[NoTodoRule()]).lint_text("# T\nTODO: finish\n")

    assert [(f.code, f.line) for f in report.findings] == [("X001", 2)]


def test_warnings_only_fail_in_strict_mode() -> None:
    """has_errors treats warnings as failures only when strict."""
    report = LintReport(
        path="x.md",
        findings=[Finding("LL010", Severity.WARNING, "no language", 1, "x.md")],
    )

    assert not report.has_errors()
    assert report.has_errors(strict=True)
    report.raise_for_findings()
    with pytest.raises(LintFailedError, match="x.md:1: LL010 warning"):
        report.raise_for_findings(strict=True)


def test_lint_file_and_missing_file(tmp_path: Path) -> None:
    """lint_file reads from disk and reports read errors."""
    lesson = tmp_path / "lesson.md"
    lesson.write_text(CLEAN_LESSON, encoding="utf-8")

    report = lint_file(lesson)

    assert report.ok
    assert report.path == str(lesson)
    assert report.document is not None
    with pytest.raises(DocumentReadError):
        lint_file(tmp_path / "absent.md")


def test_lint_paths_expands_directories(tmp_path: Path) -> None:
    """Directories are searched recursively; explicit files are kept."""
    (tmp_path / "b.md").write_text("# B\n", encoding="utf-8")
    nested = tmp_path / "nested"
    nested.mkdir()
    (nested / "a.md").write_text("```\n", encoding="utf-8")
    (nested / "notes.txt").write_text("ignored", encoding="utf-8")

    linter = Linter()
    paths = linter.expand_paths([tmp_path, tmp_path / "b.md"])
    reports = linter.lint_paths([tmp_path])

    assert paths == [tmp_path / "b.md", nested / "a.md"]
    assert [r.ok for r in reports] == [True, False]


def test_include_patterns_are_configurable(tmp_path: Path) -> None:
    """The include globs decide which files a directory contributes."""
    (tmp_path / "one.markdown").write_text("# One\n", encoding="utf-8")
    (tmp_path / "two.md").write_text("# Two\n", encoding="utf-8")

    linter = Linter(LintConfig(include=("*.markdown",)))

    assert linter.expand_paths([tmp_path]) == [tmp_path / "one.markdown"]
