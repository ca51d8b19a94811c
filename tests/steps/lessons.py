"""Given steps that build lesson documents for scenarios."""

from __future__ import annotations

from pytest_bdd import given, parsers

from tests.helpers.docs import BUNDLED_LESSON_PATH


def quiz_block(identifier: str, *, options: int, answer: int) -> list[str]:
    """Return the lines of a quiz question with feedback on every option."""
    lines = ["1. Which option is correct?"]
    for number in range(1, options + 1):
        lines.append(f"- Option {number}")
        lines.append(f"    * Feedback for option {number}.")
    lines.append(
        f'{{: .choose_best #{identifier} title="Question {identifier}" '
        f'points="1" answer="{answer}" }}'
    )
    return lines


def lesson(*blocks: list[str]) -> str:
    """Join *blocks* under a lesson heading, separated by blank lines."""
    lines = ["# Lesson", ""]
    for index, block in enumerate(blocks):
        if index:
            lines.append("")
        lines.extend(block)
    return "\n".join(lines) + "\n"


@given(
    parsers.parse(
        'a lesson quiz "{identifier}" with {options:d} options '
        "answering option {answer:d}"
    ),
    target_fixture="lesson_text",
)
def lesson_with_quiz(identifier: str, options: int, answer: int) -> str:
    """Build a lesson holding a single quiz question."""
    return lesson(quiz_block(identifier, options=options, answer=answer))


@given(
    parsers.parse('two lesson quizzes sharing the id "{identifier}"'),
    target_fixture="lesson_text",
)
def lesson_with_duplicate_ids(identifier: str) -> str:
    """Build a lesson whose two questions reuse one identifier."""
    block = quiz_block(identifier, options=2, answer=1)
    return lesson(block, block)


@given(
    parsers.parse('a lesson with an unclosed "{language}" code block'),
    target_fixture="lesson_text",
)
def lesson_with_unclosed_fence(language: str) -> str:
    """Build a lesson whose only code block never closes."""
    return lesson([f"```{language}", "puts 'hello'"])


@given("a lesson with a code block lacking a language hint", target_fixture="lesson_text")
def lesson_without_language() -> str:
    """Build a lesson with an untagged but closed code block."""
    return lesson(["```", "plain text", "```"])


@given("the bundled feature spec lesson", target_fixture="lesson_text")
def bundled_lesson() -> str:
    """Load the lesson shipped in ``docs/lessons``."""
    return BUNDLED_LESSON_PATH.read_text(encoding="utf-8")
