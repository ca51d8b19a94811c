"""Pytest plugin that lints lesson markdown as part of a test run."""

from __future__ import annotations

import logging
import typing as t

import pytest

from .config import LintConfig, load_config
from .errors import LintFailedError
from .linter import Linter

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from pathlib import Path

    from _pytest._code.code import TerminalRepr

logger = logging.getLogger(__name__)

_LINTER_KEY = pytest.StashKey[Linter]()


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register command-line and ini options for the plugin."""
    group = parser.getgroup("lesson_lint")
    group.addoption(
        "--lesson-lint",
        action="store_true",
        dest="lesson_lint",
        default=False,
        help="Collect lesson markdown files and lint them as test items.",
    )
    group.addoption(
        "--lesson-lint-strict",
        action="store_true",
        dest="lesson_lint_strict",
        default=None,
        help="Fail lesson items on warnings too. Overrides the ini setting.",
    )
    parser.addini(
        "lesson_lint_strict",
        "Fail lesson lint items on warnings as well as errors.",
        type="bool",
        default=False,
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register the marker applied to collected lesson items."""
    config.addinivalue_line(
        "markers",
        "lesson_lint: lint check generated from a lesson markdown file",
    )


def _strict_enabled(config: pytest.Config) -> bool:
    """Return whether warnings should fail; CLI option beats ini."""
    cli_value = config.getoption("lesson_lint_strict")
    if cli_value is not None:
        return bool(cli_value)
    return bool(config.getini("lesson_lint_strict"))


def _build_config(config: pytest.Config) -> LintConfig:
    return load_config(config.rootpath).replace(strict=_strict_enabled(config) or None)


def _linter_for(config: pytest.Config) -> Linter:
    """Return the session-wide linter, creating it on first use."""
    linter = config.stash.get(_LINTER_KEY, None)
    if linter is None:
        linter = Linter(_build_config(config))
        config.stash[_LINTER_KEY] = linter
    return linter


def pytest_collect_file(
    file_path: Path, parent: pytest.Collector
) -> LessonFile | None:
    """Collect markdown files matching the include globs when enabled."""
    config = parent.config
    if not config.getoption("lesson_lint"):
        return None
    linter = _linter_for(config)
    if not any(file_path.match(pattern) for pattern in linter.config.include):
        return None
    return LessonFile.from_parent(parent, path=file_path)


class LessonFile(pytest.File):
    """A lesson document yielding a single lint item."""

    def collect(self) -> t.Iterable[LessonItem]:
        """Yield the lint item for this file."""
        item = LessonItem.from_parent(self, name="lesson-lint")
        item.add_marker(pytest.mark.lesson_lint)
        yield item


class LessonItem(pytest.Item):
    """Fail when the parent lesson has lint findings."""

    def runtest(self) -> None:
        """Lint the lesson and raise on failing findings."""
        linter = _linter_for(self.config)
        report = linter.lint_file(self.path)
        report.raise_for_findings(strict=linter.config.strict)

    def repr_failure(
        self,
        excinfo: pytest.ExceptionInfo[BaseException],
        style: t.Any = None,  # noqa: ANN401 - mirrors pytest signature
    ) -> str | TerminalRepr:
        """Show the lint report instead of a traceback."""
        if isinstance(excinfo.value, LintFailedError):
            return str(excinfo.value)
        return super().repr_failure(excinfo, style=style)

    def reportinfo(self) -> tuple[Path, int, str]:
        """Describe the item in pytest's output."""
        return self.path, 0, f"lesson-lint: {self.path.name}"


@pytest.fixture
def lesson_linter(request: pytest.FixtureRequest) -> Linter:
    """Provide a :class:`Linter` configured from pyproject and pytest options."""
    try:
        return _linter_for(request.config)
    except Exception:
        logger.exception("Error configuring lesson_linter fixture")
        raise


__all__ = ["LessonFile", "LessonItem", "lesson_linter"]
