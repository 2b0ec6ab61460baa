"""Decision engine data models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True, slots=True)
class ProposedAction:
    tool_name: str
    command_text: str = ""
    file_path: str = ""
    session_id: str = ""
    acting_agent_id: str = ""


@dataclass(frozen=True, slots=True)
class ProjectIdentity:
    name: str
    method: str


@dataclass(frozen=True, slots=True)
class OwnershipConflict:
    file_path: str
    role: str
    owner_agent_id: str
    acting_agent_id: str
    pattern: str = ""

    def render(self) -> str:
        lines = [
            f"FILE OWNERSHIP CONFLICT: {self.file_path}",
            f"  Owner: {self.role} (agent_id: {self.owner_agent_id})",
        ]
        if self.pattern:
            lines.append(f"  Pattern matched: {self.pattern}")
        lines.append(f"  Attempted write by: agent_id: {self.acting_agent_id}")
        lines.append("")
        lines.append("Coordinate via task or update the formation registry ownership.")
        return "\n".join(lines)


@dataclass(frozen=True, slots=True)
class Decision:
    """Outcome of one gate: Allow, or Deny with a human-readable reason.

    ``report`` holds the multi-line operator explanation (high-risk denials and
    ownership conflicts); every other reason is a single line.
    """

    allowed: bool
    reason: str
    gate: str = ""
    matched: str = ""
    report: str = ""
    conflict: OwnershipConflict | None = None

    def __bool__(self) -> bool:
        return self.allowed

    @classmethod
    def allow(cls, reason: str, *, gate: str = "", matched: str = "") -> Decision:
        return cls(allowed=True, reason=reason, gate=gate, matched=matched)

    @classmethod
    def deny(
        cls,
        reason: str,
        *,
        gate: str = "",
        matched: str = "",
        report: str = "",
        conflict: OwnershipConflict | None = None,
    ) -> Decision:
        return cls(
            allowed=False,
            reason=reason,
            gate=gate,
            matched=matched,
            report=report,
            conflict=conflict,
        )
