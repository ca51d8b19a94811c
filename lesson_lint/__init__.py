"""Lint lesson markdown: code fences, headings and embedded quiz blocks.

Lessons mix prose, illustrative code blocks and quiz questions whose trailing
``{: .choose_best #id title="..." points="N" answer="N" }`` line is consumed by
a grading platform.  This package parses those documents, checks their
integrity and exports the quiz questions.
"""

from __future__ import annotations

from .config import LintConfig, load_config
from .document import CodeBlock, Heading, LessonDocument, QuizOption, QuizQuestion
from .errors import (
    ConfigError,
    DocumentReadError,
    ExportFileError,
    ExportSchemaError,
    LessonLintError,
    LintFailedError,
    QuizMetadataError,
)
from .export import ExportedOption, ExportedQuestion, QuizBank
from .linter import Linter, LintReport, lint_file, lint_text
from .parser import parse_document, parse_file
from .quiz import QuizMetadata, parse_quiz_metadata
from .report import format_json, format_text
from .rules import DEFAULT_RULES, Finding, Rule, Severity

__all__ = [
    "DEFAULT_RULES",
    "CodeBlock",
    "ConfigError",
    "DocumentReadError",
    "ExportFileError",
    "ExportSchemaError",
    "ExportedOption",
    "ExportedQuestion",
    "Finding",
    "Heading",
    "LessonDocument",
    "LessonLintError",
    "LintConfig",
    "LintFailedError",
    "LintReport",
    "Linter",
    "QuizBank",
    "QuizMetadata",
    "QuizMetadataError",
    "QuizOption",
    "QuizQuestion",
    "Rule",
    "Severity",
    "format_json",
    "format_text",
    "lint_file",
    "lint_text",
    "load_config",
    "parse_document",
    "parse_file",
    "parse_quiz_metadata",
]
