"""Global test configuration and shared fixtures."""

from __future__ import annotations

import typing as t

import pytest

pytest_plugins = ("lesson_lint.pytest_plugin", "pytester")

_LESSON_LINT_ENV: t.Final[tuple[str, ...]] = (
    "LESSON_LINT_IGNORE",
    "LESSON_LINT_SELECT",
    "LESSON_LINT_STRICT",
)


@pytest.fixture(autouse=True)
def clear_lesson_lint_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep ``LESSON_LINT_*`` settings from the caller's shell out of tests."""
    for name in _LESSON_LINT_ENV:
        monkeypatch.delenv(name, raising=False)
