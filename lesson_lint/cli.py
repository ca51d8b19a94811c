"""The ``lesson-lint`` command-line entry point."""

from __future__ import annotations

import argparse
import logging
import os
import sys
import typing as t
from pathlib import Path

from .config import load_config, split_codes
from .errors import ExportFileError, LessonLintError
from .export import QuizBank
from .linter import Linter
from .report import format_json, format_text
from .rules import DEFAULT_RULES

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .document import LessonDocument
    from .linter import LintReport

_logger = logging.getLogger(__name__)

EXIT_OK: t.Final[int] = 0
EXIT_FINDINGS: t.Final[int] = 1
EXIT_ERROR: t.Final[int] = 2


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for ``lesson-lint``."""
    parser = argparse.ArgumentParser(
        prog="lesson-lint",
        description=(
            "Check lesson markdown: code fences, headings and quiz blocks "
            "with their metadata lines."
        ),
    )
    parser.add_argument(
        "paths",
        nargs="*",
        type=Path,
        help="lesson files or directories to lint (default: current directory)",
    )
    parser.add_argument(
        "--select", help="comma separated rule codes (or prefixes) to run"
    )
    parser.add_argument("--ignore", help="comma separated rule codes to skip")
    parser.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="treat warnings as failures",
    )
    parser.add_argument(
        "--format",
        choices=("text", "json"),
        default="text",
        help="output format (default: text)",
    )
    parser.add_argument(
        "--export-quizzes",
        type=Path,
        metavar="DIR",
        help="write each lesson's quiz bank under DIR as <lesson>.quiz.json",
    )
    parser.add_argument(
        "--list-rules", action="store_true", help="list available rules and exit"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="enable debug logging"
    )
    return parser


def _list_rules() -> str:
    return "\n".join(
        f"{rule.code}  {rule.severity:<7}  {rule.name}: {rule.description}"
        for rule in DEFAULT_RULES
    )


def _export_targets(
    reports: t.Sequence[LintReport], directory: Path
) -> list[tuple[LessonDocument, Path]]:
    """Map each parsed lesson to its quiz bank path under *directory*.

    Lessons keep their layout relative to the directory that holds them
    all, so ``one/intro.md`` and ``two/intro.md`` do not collide.
    """
    parsed = [
        (report.document, Path(report.path).resolve())
        for report in reports
        if report.document is not None
    ]
    if not parsed:
        return []
    root = Path(os.path.commonpath([source.parent for _, source in parsed]))
    targets: list[tuple[LessonDocument, Path]] = []
    claimed: dict[Path, Path] = {}
    for document, source in parsed:
        target = directory / source.relative_to(root).with_suffix(".quiz.json")
        if target in claimed:
            reason = f"both {claimed[target]} and {source} export to it"
            raise ExportFileError(target, reason)
        claimed[target] = source
        targets.append((document, target))
    return targets


def _export_quizzes(reports: t.Sequence[LintReport], directory: Path) -> None:
    for document, target in _export_targets(reports, directory):
        bank = QuizBank.from_document(document)
        bank.save(target)
        _logger.info("Exported %d question(s) to %s", len(bank.questions), target)


def run(argv: t.Sequence[str] | None = None) -> int:
    """Run the linter with *argv* and return the process exit status."""
    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    if args.list_rules:
        print(_list_rules())  # noqa: T201 - CLI output
        return EXIT_OK

    paths: list[Path] = args.paths or [Path.cwd()]
    try:
        config = load_config(paths[0]).replace(
            select=split_codes(args.select) if args.select is not None else None,
            ignore=split_codes(args.ignore) if args.ignore is not None else None,
            strict=args.strict,
        )
        linter = Linter(config)
        reports = linter.lint_paths(paths)
        if args.export_quizzes is not None:
            _export_quizzes(reports, args.export_quizzes)
    except LessonLintError as exc:
        print(f"lesson-lint: {exc}", file=sys.stderr)  # noqa: T201 - CLI output
        return EXIT_ERROR

    render = format_json if args.format == "json" else format_text
    print(render(reports))  # noqa: T201 - CLI output

    failed = any(report.has_errors(strict=config.strict) for report in reports)
    return EXIT_FINDINGS if failed else EXIT_OK


def main() -> None:
    """Console script entry point."""
    sys.exit(run())


if __name__ == "__main__":  # pragma: no cover
    main()
