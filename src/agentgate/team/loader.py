"""Formation registry loader. No caching: the registry is read fresh per decision."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from agentgate.config import Settings
from agentgate.errors import DocumentError
from agentgate.team.types import Ownership, PolicyLayer, Teammate, TeamRegistry

logger = logging.getLogger(__name__)


def _strings(raw: object) -> tuple[str, ...]:
    if not isinstance(raw, list):
        return ()
    return tuple(item for item in raw if isinstance(item, str) and item)


def _layer(name: str, raw: object) -> PolicyLayer:
    if not isinstance(raw, dict):
        return PolicyLayer(name=name)
    profile = raw.get("profile")
    return PolicyLayer(
        name=name,
        profile=profile.strip() if isinstance(profile, str) else "",
        allow=_strings(raw.get("allow")),
        deny=_strings(raw.get("deny")),
    )


def _ownership(raw: object) -> Ownership:
    if not isinstance(raw, dict):
        return Ownership()
    return Ownership(
        files=_strings(raw.get("files")),
        directories=_strings(raw.get("directories")),
        patterns=_strings(raw.get("patterns")),
    )


def parse_registry(data: object, *, source: str = "") -> TeamRegistry:
    """Build a registry from a decoded document; malformed fields read as absent."""
    if not isinstance(data, dict):
        raise DocumentError("formation registry is not a JSON object", path=source)

    teammates: list[Teammate] = []
    raw_teammates = data.get("teammates")
    if isinstance(raw_teammates, dict):
        for role, entry in raw_teammates.items():
            if not isinstance(entry, dict):
                logger.debug("skipping malformed teammate entry %r", role)
                continue
            agent_id = entry.get("agent_id")
            teammates.append(
                Teammate(
                    role=str(role),
                    agent_id=agent_id if isinstance(agent_id, str) else "",
                    ownership=_ownership(entry.get("ownership")),
                    tool_policies=_layer("teammate", entry.get("tool_policies")),
                )
            )

    policies = data.get("tool_policies")
    if not isinstance(policies, dict):
        policies = {}
    raw_per_role = policies.get("per_role")
    per_role: dict[str, PolicyLayer] = {}
    if isinstance(raw_per_role, dict):
        for role, entry in raw_per_role.items():
            per_role[str(role)] = _layer("role", entry)

    return TeamRegistry(
        teammates=teammates,
        defaults=_layer("defaults", policies.get("defaults")),
        per_role=per_role,
        source=source,
    )


def registry_path(settings: Settings, cwd: Path | None = None) -> Path:
    path = Path(settings.registry_file).expanduser()
    if path.is_absolute():
        return path
    return (cwd or Path.cwd()) / path


def load_registry(path: Path) -> TeamRegistry | None:
    """Return the registry at *path*, or None when the file does not exist (not in team mode).

    Raises :class:`DocumentError` when the file exists but cannot be parsed.
    """
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise DocumentError(f"unreadable formation registry: {exc}", path=str(path)) from exc
    return parse_registry(data, source=str(path))
