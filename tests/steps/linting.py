# ruff: noqa: S101
"""pytest-bdd steps that lint lessons and assert on the reports."""

from __future__ import annotations

from pytest_bdd import parsers, then, when

from lesson_lint.export import QuizBank
from lesson_lint.linter import Linter, LintReport
from lesson_lint.parser import parse_document
from lesson_lint.rules import Severity


@when("the lesson is linted", target_fixture="report")
def lint_lesson(lesson_text: str) -> LintReport:
    """Run the default rule set over the scenario's lesson."""
    return Linter().lint_text(lesson_text, path="lesson.md")


@when("the lesson quiz bank is exported", target_fixture="quiz_bank")
def export_quiz_bank(lesson_text: str) -> QuizBank:
    """Collect the well-formed quiz questions of the lesson."""
    return QuizBank.from_document(parse_document(lesson_text))


@then("the report has no findings")
def assert_no_findings(report: LintReport) -> None:
    """The lesson is clean even under strict judgement."""
    assert report.ok, report.format()


@then(
    parsers.parse(
        'the report contains {severity:w} "{code}" on line {line:d}'
    )
)
def assert_finding(report: LintReport, severity: str, code: str, line: int) -> None:
    """A finding with *code* and *severity* was reported on *line*."""
    matches = [
        finding
        for finding in report.findings
        if finding.code == code and finding.line == line
    ]
    assert matches, f"no {code} on line {line} in:\n{report.format()}"
    assert matches[0].severity is Severity(severity)


@then("the report passes in normal mode")
def assert_passes_normally(report: LintReport) -> None:
    """Warnings alone do not fail a run."""
    assert not report.has_errors()


@then("the report fails in strict mode")
def assert_fails_strictly(report: LintReport) -> None:
    """Strict runs treat warnings as failures."""
    assert report.has_errors(strict=True)


@then(
    parsers.parse(
        "the quiz bank holds {count:d} questions worth {points:d} points"
    )
)
def assert_quiz_bank(quiz_bank: QuizBank, count: int, points: int) -> None:
    """The exported bank has the expected size and score."""
    assert len(quiz_bank.questions) == count
    assert quiz_bank.total_points == points
