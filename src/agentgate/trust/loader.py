"""Autonomy state loader. Documents are read fresh for every decision."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from agentgate.config import Settings
from agentgate.errors import DocumentError
from agentgate.trust.types import MAX_LEVEL, MIN_LEVEL, AutonomyState, Grant, GrantType

if TYPE_CHECKING:
    from agentgate.policy.types import ProjectIdentity

logger = logging.getLogger(__name__)

STATE_FILENAME = ".autonomy-state"


def _parse_level(raw: object) -> int | None:
    if raw is None:
        return 0
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, float) and raw.is_integer():
        value = int(raw)
    elif isinstance(raw, str) and raw.strip().isdigit():
        value = int(raw.strip())
    else:
        return None
    if value < MIN_LEVEL or value > MAX_LEVEL:
        return None
    return value


def _parse_grants(raw: object) -> list[Grant]:
    if not isinstance(raw, list):
        return []
    grants: list[Grant] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        pattern = item.get("pattern")
        if not isinstance(pattern, str) or not pattern:
            continue
        raw_type = item.get("type") or GrantType.GLOB.value
        try:
            grant_type = GrantType(str(raw_type).strip().lower())
        except ValueError:
            logger.debug("skipping grant with unknown type %r", raw_type)
            continue
        grants.append(Grant(pattern=pattern, type=grant_type))
    return grants


def _parse_strings(raw: object) -> list[str]:
    if not isinstance(raw, list):
        return []
    return [item for item in raw if isinstance(item, str) and item]


def parse_autonomy_state(data: object, *, source: str = "") -> AutonomyState:
    """Build state from a decoded document; malformed fields read as absent."""
    if not isinstance(data, dict):
        raise DocumentError("autonomy state is not a JSON object", path=source)
    return AutonomyState(
        level=_parse_level(data.get("level")),
        grants=_parse_grants(data.get("grants")),
        approved_categories=frozenset(_parse_strings(data.get("approved_categories"))),
        high_risk_history=_parse_strings(data.get("high_risk_history")),
        source=source,
    )


def read_autonomy_state(path: Path) -> AutonomyState:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise DocumentError(f"unreadable autonomy state: {exc}", path=str(path)) from exc
    return parse_autonomy_state(data, source=str(path))


def state_candidates(
    project: ProjectIdentity, settings: Settings, *, include_workspace: bool = True
) -> list[Path]:
    candidates = [Path(settings.sessions_dir) / project.name / STATE_FILENAME]
    if include_workspace:
        candidates.append(Path(settings.workspace_dir) / project.name / STATE_FILENAME)
    return candidates


def find_state_file(
    project: ProjectIdentity, settings: Settings, *, include_workspace: bool = True
) -> Path | None:
    for candidate in state_candidates(project, settings, include_workspace=include_workspace):
        if candidate.is_file():
            return candidate
    return None


def load_autonomy_state(
    project: ProjectIdentity | None, settings: Settings, *, include_workspace: bool = True
) -> AutonomyState | None:
    """Return the project's state, or None when there is no project or no state file.

    The sessions location is checked first; ``include_workspace`` adds the
    ``<workspace>/<project>`` fallback used for high-risk decisions.
    Raises :class:`DocumentError` when a state file exists but cannot be parsed.
    """
    if project is None:
        return None
    path = find_state_file(project, settings, include_workspace=include_workspace)
    if path is None:
        return None
    return read_autonomy_state(path)
