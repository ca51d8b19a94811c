"""Render lint reports for people and for machines."""

from __future__ import annotations

import json
import typing as t

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .linter import LintReport

REPORT_FORMAT_VERSION: t.Final[str] = "1.0"


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


def summarize(reports: t.Sequence[LintReport]) -> dict[str, int]:
    """Return finding totals across *reports*."""
    return {
        "files": len(reports),
        "errors": sum(len(report.errors) for report in reports),
        "warnings": sum(len(report.warnings) for report in reports),
    }


def format_text(reports: t.Sequence[LintReport]) -> str:
    """Return a ``path:line: CODE severity message`` listing plus a summary."""
    lines = [
        finding.format() for report in reports for finding in report.findings
    ]
    totals = summarize(reports)
    summary = (
        f"{_plural(totals['errors'], 'error')}, "
        f"{_plural(totals['warnings'], 'warning')} "
        f"in {_plural(totals['files'], 'file')}"
    )
    if lines:
        lines.append("")
    lines.append(summary)
    return "\n".join(lines)


def format_json(reports: t.Sequence[LintReport]) -> str:
    """Return a stable JSON document describing *reports*."""
    payload = {
        "version": REPORT_FORMAT_VERSION,
        "files": [
            {
                "path": report.path,
                "findings": [finding.to_dict() for finding in report.findings],
            }
            for report in reports
        ],
        "summary": summarize(reports),
    }
    return json.dumps(payload, indent=2)


__all__ = ["REPORT_FORMAT_VERSION", "format_json", "format_text", "summarize"]
