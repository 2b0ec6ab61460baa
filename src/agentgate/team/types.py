"""Team (formation) registry models."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class PolicyLayer:
    """One override layer of the tool-policy cascade."""

    name: str
    profile: str = ""
    allow: tuple[str, ...] = ()
    deny: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Ownership:
    files: tuple[str, ...] = ()
    directories: tuple[str, ...] = ()
    patterns: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Teammate:
    role: str
    agent_id: str
    ownership: Ownership = field(default_factory=Ownership)
    tool_policies: PolicyLayer = field(default_factory=lambda: PolicyLayer(name="teammate"))


@dataclass(slots=True)
class TeamRegistry:
    """Registry of teammates in their stored order, plus formation-level tool policies."""

    teammates: list[Teammate] = field(default_factory=list)
    defaults: PolicyLayer = field(default_factory=lambda: PolicyLayer(name="defaults"))
    per_role: dict[str, PolicyLayer] = field(default_factory=dict)
    source: str = ""

    def role_for_agent(self, agent_id: str) -> Teammate | None:
        for teammate in self.teammates:
            if teammate.agent_id == agent_id:
                return teammate
        return None
