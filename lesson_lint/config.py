"""Lint configuration and its sources.

Settings are layered: built-in defaults, then the ``[tool.lesson-lint]``
table of the nearest ``pyproject.toml``, then ``LESSON_LINT_*`` environment
variables.  Command-line flags are applied last by the caller through
:meth:`LintConfig.replace`.
"""

from __future__ import annotations

import dataclasses as dc
import logging
import os
import tomllib
import typing as t
from pathlib import Path

from .errors import ConfigError

_logger = logging.getLogger(__name__)

PYPROJECT_TABLE: t.Final[str] = "lesson-lint"
IGNORE_ENV: t.Final[str] = "LESSON_LINT_IGNORE"
SELECT_ENV: t.Final[str] = "LESSON_LINT_SELECT"
STRICT_ENV: t.Final[str] = "LESSON_LINT_STRICT"

_TRUTHY: t.Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})
_FALSY: t.Final[frozenset[str]] = frozenset({"0", "false", "no", "off", ""})


@dc.dataclass(frozen=True, slots=True)
class LintConfig:
    """
    Settings controlling which rules run and how findings are judged.

    Attributes
    ----------
    select : tuple[str, ...]
        Rule codes to run.  Empty means every registered rule.
    ignore : tuple[str, ...]
        Rule codes to skip, applied after ``select``.
    min_options : int
        Minimum number of answer options per quiz question (must be >= 2).
    quiz_classes : tuple[str, ...]
        Attribute-list classes that mark a quiz metadata line.
    strict : bool
        Treat warnings as failures.
    include : tuple[str, ...]
        Glob patterns used when expanding directories.

    Raises
    ------
    ConfigError
        If any value is out of range.
    """

    select: tuple[str, ...] = ()
    ignore: tuple[str, ...] = ()
    min_options: int = 2
    quiz_classes: tuple[str, ...] = ("choose_best",)
    strict: bool = False
    include: tuple[str, ...] = ("*.md",)

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if isinstance(self.min_options, bool) or not isinstance(self.min_options, int):
            msg = "min_options must be an integer"
            raise ConfigError(msg)
        if self.min_options < 2:
            msg = "min_options must be >= 2"
            raise ConfigError(msg)
        if not self.quiz_classes:
            msg = "quiz_classes must name at least one class"
            raise ConfigError(msg)
        if not self.include:
            msg = "include must contain at least one glob pattern"
            raise ConfigError(msg)
        for code in (*self.select, *self.ignore):
            if not code or not code.strip():
                msg = "rule codes must be non-empty"
                raise ConfigError(msg)

    def replace(self, **changes: t.Any) -> LintConfig:  # noqa: ANN401
        """Return a copy with *changes* applied, dropping ``None`` values."""
        return dc.replace(self, **{k: v for k, v in changes.items() if v is not None})

    def is_enabled(self, code: str) -> bool:
        """Return ``True`` when the rule *code* should run."""
        code = code.upper()
        if self.select and not any(code.startswith(s.upper()) for s in self.select):
            return False
        return not any(code.startswith(i.upper()) for i in self.ignore)


def split_codes(value: str | t.Iterable[str]) -> tuple[str, ...]:
    """Normalise a comma separated string or iterable of rule codes."""
    items = value.split(",") if isinstance(value, str) else value
    return tuple(item.strip().upper() for item in items if item.strip())


def parse_bool(value: str | bool, *, name: str) -> bool:  # noqa: FBT001
    """Interpret *value* as a boolean flag named *name*."""
    if isinstance(value, bool):
        return value
    lowered = value.strip().lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    msg = f"{name} must be a boolean, got {value!r}"
    raise ConfigError(msg)


def _as_str_tuple(value: object, *, name: str) -> tuple[str, ...]:
    if isinstance(value, str):
        return split_codes(value) if name in {"select", "ignore"} else (value,)
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return split_codes(value) if name in {"select", "ignore"} else tuple(value)
    msg = f"{name} must be a string or a list of strings"
    raise ConfigError(msg)


def config_from_mapping(
    data: t.Mapping[str, t.Any], *, base: LintConfig | None = None
) -> LintConfig:
    """Build a config from a ``[tool.lesson-lint]`` style mapping."""
    base = base or LintConfig()
    changes: dict[str, t.Any] = {}
    for raw_key, value in data.items():
        key = raw_key.replace("-", "_")
        if key in {"select", "ignore", "quiz_classes", "include"}:
            changes[key] = _as_str_tuple(value, name=key)
        elif key == "min_options":
            changes[key] = value
        elif key == "strict":
            changes[key] = parse_bool(value, name=key)
        else:
            msg = f"Unknown lesson-lint setting {raw_key!r}"
            raise ConfigError(msg)
    return dc.replace(base, **changes)


def find_pyproject(start: Path) -> Path | None:
    """Return the nearest ``pyproject.toml`` at or above *start*."""
    start = start.resolve()
    directory = start if start.is_dir() else start.parent
    for candidate_dir in (directory, *directory.parents):
        candidate = candidate_dir / "pyproject.toml"
        if candidate.is_file():
            return candidate
    return None


def load_pyproject_config(
    path: Path, *, base: LintConfig | None = None
) -> LintConfig:
    """Read the ``[tool.lesson-lint]`` table from the TOML file at *path*."""
    try:
        with path.open("rb") as fh:
            data = tomllib.load(fh)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        msg = f"Cannot read configuration from {path}: {exc}"
        raise ConfigError(msg) from exc

    table = data.get("tool", {}).get(PYPROJECT_TABLE)
    if table is None:
        return base or LintConfig()
    if not isinstance(table, dict):
        msg = f"[tool.{PYPROJECT_TABLE}] in {path} must be a table"
        raise ConfigError(msg)
    _logger.debug("Loaded [tool.%s] from %s", PYPROJECT_TABLE, path)
    return config_from_mapping(table, base=base)


def apply_env_overrides(
    config: LintConfig, env: t.Mapping[str, str] | None = None
) -> LintConfig:
    """Apply ``LESSON_LINT_*`` environment variables on top of *config*."""
    env = os.environ if env is None else env
    changes: dict[str, t.Any] = {}
    if (select := env.get(SELECT_ENV)) is not None:
        changes["select"] = split_codes(select)
    if (ignore := env.get(IGNORE_ENV)) is not None:
        changes["ignore"] = split_codes(ignore)
    if (strict := env.get(STRICT_ENV)) is not None:
        changes["strict"] = parse_bool(strict, name=STRICT_ENV)
    if changes:
        _logger.debug("Environment overrides: %s", sorted(changes))
    return dc.replace(config, **changes)


def load_config(
    start: Path | None = None, env: t.Mapping[str, str] | None = None
) -> LintConfig:
    """Resolve configuration for files under *start* (default: cwd)."""
    pyproject = find_pyproject(start or Path.cwd())
    config = (
        load_pyproject_config(pyproject) if pyproject is not None else LintConfig()
    )
    return apply_env_overrides(config, env)


__all__ = [
    "IGNORE_ENV",
    "PYPROJECT_TABLE",
    "SELECT_ENV",
    "STRICT_ENV",
    "LintConfig",
    "apply_env_overrides",
    "config_from_mapping",
    "find_pyproject",
    "load_config",
    "load_pyproject_config",
    "parse_bool",
    "split_codes",
]
