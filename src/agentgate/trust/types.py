"""Per-project autonomy (trust) state models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

MIN_LEVEL = 0
MAX_LEVEL = 4

APPROVABLE_CATEGORIES = frozenset(
    {"typescript", "python", "shell", "markdown", "config", "git", "docker", "npm"}
)


class GrantType(str, Enum):
    GLOB = "glob"
    REGEX = "regex"
    PREFIX = "prefix"


@dataclass(frozen=True, slots=True)
class Grant:
    pattern: str
    type: GrantType = GrantType.GLOB


@dataclass(slots=True)
class AutonomyState:
    """Trust recorded for one project.

    ``level`` is None when the document carries a value outside 0-4 or a
    non-integer: the state is then unknown and every gate that reads it denies.
    """

    level: int | None
    grants: list[Grant] = field(default_factory=list)
    approved_categories: frozenset[str] = frozenset()
    high_risk_history: list[str] = field(default_factory=list)
    source: str = ""

    @property
    def known(self) -> bool:
        return self.level is not None
