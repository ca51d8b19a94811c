# ruff: noqa: S101
"""pytest-bdd steps driving the ``lesson-lint`` command."""

from __future__ import annotations

import dataclasses as dc
import json
import typing as t

from pytest_bdd import given, parsers, then, when

from lesson_lint.cli import run
from tests.helpers.docs import BUNDLED_LESSON_PATH

if t.TYPE_CHECKING:  # pragma: no cover - typing only
    from pathlib import Path

    import pytest


@dc.dataclass(slots=True)
class CliResult:
    """Exit status and captured output of one ``lesson-lint`` run."""

    status: int
    out: str
    err: str


@given("a lesson directory containing the bundled lesson", target_fixture="lesson_dir")
def lesson_dir_with_bundled_lesson(tmp_path: Path) -> Path:
    """Copy the bundled lesson into a fresh directory."""
    lesson_dir = tmp_path / "lessons"
    lesson_dir.mkdir()
    (lesson_dir / BUNDLED_LESSON_PATH.name).write_text(
        BUNDLED_LESSON_PATH.read_text(encoding="utf-8"), encoding="utf-8"
    )
    return lesson_dir


@given(
    "a lesson directory containing a lesson with an unclosed code block",
    target_fixture="lesson_dir",
)
def lesson_dir_with_broken_lesson(tmp_path: Path) -> Path:
    """Write a lesson whose code block never closes."""
    lesson_dir = tmp_path / "lessons"
    lesson_dir.mkdir()
    (lesson_dir / "broken.md").write_text("# Broken\n\n```ruby\nputs 1\n", encoding="utf-8")
    return lesson_dir


def _run(args: list[str], capsys: pytest.CaptureFixture[str]) -> CliResult:
    status = run(args)
    captured = capsys.readouterr()
    return CliResult(status=status, out=captured.out, err=captured.err)


@when("lesson-lint is run on the directory", target_fixture="cli_result")
def run_on_directory(
    lesson_dir: Path,
    capsys: pytest.CaptureFixture[str],
) -> CliResult:
    """Invoke the command on the scenario's lesson directory."""
    return _run([str(lesson_dir)], capsys)


@when(
    "lesson-lint is run on the directory exporting quizzes",
    target_fixture="cli_result",
)
def run_with_export(
    lesson_dir: Path,
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> CliResult:
    """Invoke the command with ``--export-quizzes`` into ``tmp_path/export``."""
    return _run(
        ["--export-quizzes", str(tmp_path / "export"), str(lesson_dir)],
        capsys,
    )


@then(parsers.parse("the exit status is {status:d}"))
def assert_exit_status(cli_result: CliResult, status: int) -> None:
    """The command exited with *status*."""
    assert cli_result.status == status, cli_result.out + cli_result.err


@then(parsers.parse('the output mentions "{text}"'))
def assert_output_mentions(cli_result: CliResult, text: str) -> None:
    """Standard output contains *text*."""
    assert text in cli_result.out


@then(parsers.parse("an exported quiz bank holds {count:d} questions"))
def assert_exported_bank(tmp_path: Path, count: int) -> None:
    """The export directory holds a bank with *count* questions."""
    (bank_path,) = (tmp_path / "export").glob("*.quiz.json")
    data = json.loads(bank_path.read_text(encoding="utf-8"))
    assert len(data["questions"]) == count
