"""Unit tests for the documentation test helpers."""

from __future__ import annotations

import pytest

from tests.helpers.docs import backticked_names, extract_marked_block

DOC = "intro\n<!-- api:start -->\n- `Linter` and `lint_text`\n<!-- api:end -->\n"


def test_extract_marked_block_returns_inner_text() -> None:
    """The text between the markers is returned without the markers."""
    assert extract_marked_block(DOC, name="api") == "\n- `Linter` and `lint_text`\n"


@pytest.mark.parametrize(
    ("text", "message"),
    [
        ("no markers", "found 0"),
        ("<!-- api:start --><!-- api:start --><!-- api:end -->", "found 2"),
        ("<!-- api:end --> <!-- api:start -->", "out of order"),
    ],
)
def test_extract_marked_block_rejects_bad_markers(text: str, message: str) -> None:
    """Missing, repeated or reversed markers raise ValueError."""
    with pytest.raises(ValueError, match=message):
        extract_marked_block(text, name="api")


def test_backticked_names() -> None:
    """Single-word code spans are collected; multi-word spans are not."""
    assert backticked_names("`Linter`, `lint text`, `QuizBank`") == {
        "Linter",
        "QuizBank",
    }
