"""File-ownership conflict detection for concurrent multi-agent writes.

Claims are ranked globally, not per teammate: exact file claims, then the
longest matching directory claim, then glob patterns. Within a tier the
registry's stored order decides.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path

from agentgate.config import Settings, get_settings
from agentgate.errors import DocumentError
from agentgate.policy.types import Decision, OwnershipConflict
from agentgate.team.loader import load_registry, registry_path
from agentgate.team.types import Teammate, TeamRegistry

logger = logging.getLogger(__name__)

GATE = "ownership"
UNKNOWN_AGENT = "unknown"


@dataclass(frozen=True, slots=True)
class OwnershipClaim:
    teammate: Teammate
    kind: str
    value: str


def _directory_contains(directory: str, path: str) -> bool:
    if directory.endswith("/"):
        return path.startswith(directory)
    return path == directory or path.startswith(directory + "/")


def find_owner(file_path: str, registry: TeamRegistry) -> OwnershipClaim | None:
    """Return the claim that owns *file_path*, or None when nobody claims it."""
    for teammate in registry.teammates:
        if file_path in teammate.ownership.files:
            return OwnershipClaim(teammate, "file", file_path)

    best: OwnershipClaim | None = None
    for teammate in registry.teammates:
        for directory in teammate.ownership.directories:
            if not _directory_contains(directory, file_path):
                continue
            if best is None or len(directory.rstrip("/")) > len(best.value.rstrip("/")):
                best = OwnershipClaim(teammate, "directory", directory)
    if best is not None:
        return best

    for teammate in registry.teammates:
        for pattern in teammate.ownership.patterns:
            if fnmatchcase(file_path, pattern):
                return OwnershipClaim(teammate, "pattern", pattern)
    return None


def check_ownership(
    file_path: str, registry: TeamRegistry | None, acting_agent_id: str
) -> Decision:
    """Decide whether the acting agent may write *file_path* under declared ownership."""
    if registry is None:
        return Decision.allow("No formation registry: not in team mode", gate=GATE)

    acting = acting_agent_id or UNKNOWN_AGENT
    claim = find_owner(file_path, registry)
    if claim is None:
        logger.info("file %s is not assigned to any teammate (new file allowed)", file_path)
        return Decision.allow("Unowned, new file permitted", gate=GATE)

    owner = claim.teammate
    if owner.agent_id == acting:
        return Decision.allow(
            f"Owned by acting agent via {claim.kind} {claim.value}",
            gate=GATE,
            matched=claim.value,
        )

    conflict = OwnershipConflict(
        file_path=file_path,
        role=owner.role,
        owner_agent_id=owner.agent_id,
        acting_agent_id=acting,
        pattern=claim.value if claim.kind == "pattern" else "",
    )
    return Decision.deny(
        f"File ownership conflict: {file_path} owned by {owner.role} ({owner.agent_id})",
        gate=GATE,
        matched=claim.value,
        report=conflict.render(),
        conflict=conflict,
    )


def check_file_ownership(
    file_path: str,
    acting_agent_id: str,
    *,
    path: Path | None = None,
    settings: Settings | None = None,
) -> Decision:
    """Load the registry fresh and check *file_path*; an unreadable registry denies."""
    settings = settings or get_settings()
    try:
        registry = load_registry(path or registry_path(settings))
    except DocumentError as exc:
        logger.warning("formation registry unreadable, denying write: %s", exc)
        return Decision.deny(f"Formation registry unreadable: {exc.path}", gate=GATE)
    return check_ownership(file_path, registry, acting_agent_id)
