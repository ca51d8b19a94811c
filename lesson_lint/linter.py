"""Run lint rules over lesson documents and collect the results."""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as t
from pathlib import Path

from .config import LintConfig
from .errors import LintFailedError
from .parser import parse_document, read_document_text
from .rules import DEFAULT_RULES, Finding, Rule, Severity

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .document import LessonDocument

_logger = logging.getLogger(__name__)


@dc.dataclass(slots=True)
class LintReport:
    """Findings for a single lesson document."""

    path: str
    findings: list[Finding] = dc.field(default_factory=list)
    document: LessonDocument | None = dc.field(default=None, repr=False)

    def __post_init__(self) -> None:
        """Keep findings in document order."""
        self.findings = sorted(
            self.findings, key=lambda finding: (finding.line, finding.code)
        )

    @property
    def errors(self) -> list[Finding]:
        return [f for f in self.findings if f.severity is Severity.ERROR]

    @property
    def warnings(self) -> list[Finding]:
        return [f for f in self.findings if f.severity is Severity.WARNING]

    @property
    def ok(self) -> bool:
        """``True`` when the report holds no findings at all."""
        return not self.findings

    def has_errors(self, *, strict: bool = False) -> bool:
        """Return ``True`` if the report should fail a run.

        With *strict* set, warnings count as errors.
        """
        return bool(self.findings) if strict else bool(self.errors)

    def format(self) -> str:
        """Return one line per finding, or a short all-clear message."""
        if not self.findings:
            return f"{self.path}: no problems found"
        return "\n".join(finding.format() for finding in self.findings)

    def raise_for_findings(self, *, strict: bool = False) -> None:
        """Raise :class:`LintFailedError` when the report should fail."""
        if self.has_errors(strict=strict):
            raise LintFailedError(self.format())


class Linter:
    """Apply a set of rules to lesson documents.

    Parameters
    ----------
    config : LintConfig | None
        Settings controlling rule selection and thresholds.
    rules : Sequence[Rule] | None
        Rules to consider.  Defaults to every registered rule.  The
        configuration's ``select``/``ignore`` lists filter this set.
    """

    def __init__(
        self,
        config: LintConfig | None = None,
        rules: t.Sequence[Rule] | None = None,
    ) -> None:
        self.config = config or LintConfig()
        candidates = DEFAULT_RULES if rules is None else tuple(rules)
        self.rules: tuple[Rule, ...] = tuple(
            rule for rule in candidates if self.config.is_enabled(rule.code)
        )
        _logger.debug("Active rules: %s", ", ".join(r.code for r in self.rules))

    def lint_document(self, document: LessonDocument) -> LintReport:
        """Run every active rule over an already parsed *document*."""
        findings: list[Finding] = []
        for rule in self.rules:
            findings.extend(rule.check(document, self.config))
        return LintReport(
            path=document.display_name, findings=findings, document=document
        )

    def lint_text(self, text: str, *, path: Path | str | None = None) -> LintReport:
        """Parse and lint markdown *text*."""
        document = parse_document(
            text,
            path=Path(path) if path is not None else None,
            quiz_classes=self.config.quiz_classes,
        )
        return self.lint_document(document)

    def lint_file(self, path: Path | str) -> LintReport:
        """Read, parse and lint the lesson at *path*."""
        path = Path(path)
        return self.lint_text(read_document_text(path), path=path)

    def expand_paths(self, paths: t.Iterable[Path | str]) -> list[Path]:
        """Expand directories to the lesson files they contain.

        Files are returned as given; directories are searched recursively
        with the configured ``include`` globs.  The result is de-duplicated
        and ordered.
        """
        expanded: list[Path] = []
        seen: set[Path] = set()
        for raw in paths:
            path = Path(raw)
            if path.is_dir():
                matches = sorted(
                    {
                        match
                        for pattern in self.config.include
                        for match in path.rglob(pattern)
                        if match.is_file()
                    }
                )
                _logger.debug("Expanded %s to %d file(s)", path, len(matches))
            else:
                matches = [path]
            for match in matches:
                if match not in seen:
                    seen.add(match)
                    expanded.append(match)
        return expanded

    def lint_paths(self, paths: t.Iterable[Path | str]) -> list[LintReport]:
        """Lint every file named by *paths*, expanding directories."""
        return [self.lint_file(path) for path in self.expand_paths(paths)]


def lint_text(
    text: str,
    *,
    path: Path | str | None = None,
    config: LintConfig | None = None,
) -> LintReport:
    """Lint *text* with a default :class:`Linter`."""
    return Linter(config).lint_text(text, path=path)


def lint_file(path: Path | str, *, config: LintConfig | None = None) -> LintReport:
    """Lint the lesson at *path* with a default :class:`Linter`."""
    return Linter(config).lint_file(path)


__all__ = ["LintReport", "Linter", "lint_file", "lint_text"]
