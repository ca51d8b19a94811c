"""Parsing and rendering of quiz metadata lines.

A quiz question in a lesson ends with a kramdown inline attribute list such
as::

    {: .choose_best #3 title="Feature specs" points="1" answer="2" }

The line carries the question identifier, a display title, the point value
and the 1-based index of the correct option.  The grading platform consumes
it; here it is parsed so the surrounding question can be checked.
"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as t

from .errors import QuizMetadataError

REQUIRED_ATTRIBUTES: t.Final[tuple[str, ...]] = ("title", "points", "answer")

_IAL_RE: t.Final = re.compile(r"^\s*\{:\s*(?P<body>.*?)\s*\}\s*$")
_TOKEN_RE: t.Final = re.compile(
    r"""
    \s*
    (?:
        \.(?P<cls>[A-Za-z_][\w-]*)
      | \#(?P<ident>[\w-]+)
      | (?P<key>[A-Za-z_][\w-]*)=
        (?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)'|(?P<bare>[^\s"'}]+))
    )
    (?=\s|$)
    """,
    re.VERBOSE,
)


def is_attribute_line(text: str) -> bool:
    """Return ``True`` when *text* looks like a kramdown attribute list."""
    return _IAL_RE.match(text) is not None


@dc.dataclass(slots=True)
class QuizMetadata:
    """Parsed contents of a quiz metadata line."""

    classes: list[str]
    identifier: str | None
    attributes: dict[str, str]
    line: int = 0
    raw: str = ""

    @property
    def kind(self) -> str | None:
        """The first class on the line, e.g. ``choose_best``."""
        return self.classes[0] if self.classes else None

    @property
    def title(self) -> str | None:
        return self.attributes.get("title")

    @property
    def answer(self) -> str | None:
        """The raw ``answer`` attribute value."""
        return self.attributes.get("answer")

    @property
    def points(self) -> int | None:
        """The ``points`` attribute as an integer, or ``None`` if unusable."""
        raw = self.attributes.get("points")
        if raw is None:
            return None
        try:
            return int(raw.strip())
        except ValueError:
            return None

    @property
    def answer_index(self) -> int | None:
        """The 1-based answer index, or ``None`` when not a single integer."""
        raw = (self.answer or "").strip()
        if not (raw.isascii() and raw.isdigit()):
            return None
        return int(raw)

    def missing_attributes(self) -> list[str]:
        """Return the required fields absent from this line."""
        missing = [] if self.identifier else ["id"]
        missing.extend(
            name for name in REQUIRED_ATTRIBUTES if name not in self.attributes
        )
        return missing

    def render(self) -> str:
        """Return the canonical text form of this metadata line.

        Values are double-quoted unless they contain a double quote, in
        which case they are single-quoted so the line parses back to the
        same attributes.
        """
        parts = [f".{cls}" for cls in self.classes]
        if self.identifier is not None:
            parts.append(f"#{self.identifier}")
        for key, value in self.attributes.items():
            parts.append(f"{key}={_quote(key, value)}")
        return "{: " + " ".join(parts) + " }"


def _quote(key: str, value: str) -> str:
    if '"' not in value:
        return f'"{value}"'
    if "'" not in value:
        return f"'{value}'"
    msg = f"attribute '{key}' mixes both quote characters and cannot be rendered"
    raise QuizMetadataError(msg)


def parse_quiz_metadata(raw: str, *, line: int = 0) -> QuizMetadata:
    """Parse a kramdown attribute list into :class:`QuizMetadata`.

    Parameters
    ----------
    raw:
        The full metadata line including the ``{:`` and ``}`` delimiters.
    line:
        1-based line number used in error messages.

    Raises
    ------
    QuizMetadataError
        If the delimiters are missing, a token is not understood, or an
        identifier or attribute is given twice.
    """
    match = _IAL_RE.match(raw)
    if match is None:
        msg = f"line {line}: not an attribute list: {raw.strip()!r}"
        raise QuizMetadataError(msg)

    body = match.group("body")
    classes: list[str] = []
    identifier: str | None = None
    attributes: dict[str, str] = {}

    pos = 0
    while pos < len(body):
        if body[pos:].strip() == "":
            break
        token = _TOKEN_RE.match(body, pos)
        if token is None:
            remainder = body[pos:].strip()
            msg = f"line {line}: unrecognised metadata token near {remainder!r}"
            raise QuizMetadataError(msg)
        pos = token.end()

        if cls := token.group("cls"):
            classes.append(cls)
        elif ident := token.group("ident"):
            if identifier is not None:
                msg = f"line {line}: quiz id given twice ({identifier!r}, {ident!r})"
                raise QuizMetadataError(msg)
            identifier = ident
        else:
            key = token.group("key")
            if key in attributes:
                msg = f"line {line}: attribute {key!r} given more than once"
                raise QuizMetadataError(msg)
            value = next(
                group
                for group in (token.group("dq"), token.group("sq"), token.group("bare"))
                if group is not None
            )
            attributes[key] = value

    return QuizMetadata(
        classes=classes,
        identifier=identifier,
        attributes=attributes,
        line=line,
        raw=raw.rstrip("\n"),
    )


__all__ = [
    "REQUIRED_ATTRIBUTES",
    "QuizMetadata",
    "is_attribute_line",
    "parse_quiz_metadata",
]
