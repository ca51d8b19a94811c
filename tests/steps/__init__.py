"""Aggregate pytest-bdd step definitions for lesson-lint features."""

from .cli import *  # noqa: F403
from .documentation import *  # noqa: F403
from .lessons import *  # noqa: F403
from .linting import *  # noqa: F403

# Re-export all imported step definitions so ``from tests.steps import *``
# makes them available to scenario modules during collection.
__all__ = [
    name
    for name in globals()
    if not name.startswith("_") and name != "annotations"
]
