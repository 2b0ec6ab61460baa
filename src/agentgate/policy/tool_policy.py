"""Tool-policy cascade: formation defaults, role overrides, teammate overrides.

Specificity picks the *profile* (teammate > role > defaults), but allows and
denies are unioned across every layer and a deny from any layer always wins.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from agentgate.config import Settings, get_settings
from agentgate.errors import DocumentError
from agentgate.policy.types import Decision
from agentgate.team.loader import load_registry, registry_path
from agentgate.team.types import PolicyLayer, TeamRegistry

logger = logging.getLogger(__name__)

GATE = "tool_policy"
DEFAULT_PROFILE = "full"

TOOL_GROUPS: dict[str, frozenset[str]] = {
    "group:read": frozenset({"Read", "Grep", "Glob"}),
    "group:write": frozenset({"Write", "Edit"}),
    "group:exec": frozenset({"Bash"}),
    "group:task": frozenset({"TaskCreate", "TaskUpdate", "TaskList", "TaskGet"}),
    "group:team": frozenset({"SendMessage", "TeamCreate"}),
    "group:search": frozenset({"WebSearch", "WebFetch"}),
    "group:fs": frozenset({"Read", "Write", "Edit", "Grep", "Glob"}),
    "group:all-read": frozenset({"Read", "Grep", "Glob", "WebSearch", "WebFetch"}),
    "group:test": frozenset({"Bash"}),
    "group:deploy": frozenset({"Bash"}),
}

PROFILES: dict[str, tuple[str, ...]] = {
    "full": (
        "group:read",
        "group:write",
        "group:exec",
        "group:task",
        "group:team",
        "group:search",
    ),
    "coding": ("group:fs", "group:exec", "group:task"),
    "testing": ("group:read", "group:test", "group:task"),
    "readonly": ("group:read", "group:task"),
    "minimal": ("group:task",),
}


def expand_group(token: str) -> frozenset[str]:
    """Expand a ``group:*`` token; any other token is a literal tool name."""
    return TOOL_GROUPS.get(token, frozenset({token}))


def expand_tokens(tokens: Iterable[str]) -> frozenset[str]:
    tools: set[str] = set()
    for token in tokens:
        tools |= expand_group(token)
    return frozenset(tools)


def expand_profile(profile: str) -> frozenset[str]:
    """Expand a built-in profile to tool names; unknown profiles expand to nothing."""
    return expand_tokens(PROFILES.get(profile, ()))


@dataclass(frozen=True, slots=True)
class EffectivePolicy:
    role: str
    profile: str
    allowed: frozenset[str]
    denied: frozenset[str]


def merge_layers(role: str, layers: list[PolicyLayer]) -> EffectivePolicy:
    """Merge *layers* ordered least to most specific."""
    profile = DEFAULT_PROFILE
    for layer in reversed(layers):
        if layer.profile:
            profile = layer.profile
            break
    allowed = expand_profile(profile)
    denied: frozenset[str] = frozenset()
    for layer in layers:
        allowed |= expand_tokens(layer.allow)
        denied |= expand_tokens(layer.deny)
    return EffectivePolicy(role=role, profile=profile, allowed=allowed, denied=denied)


def layers_for_role(
    registry: TeamRegistry, role: str, teammate_layer: PolicyLayer
) -> list[PolicyLayer]:
    return [
        registry.defaults,
        registry.per_role.get(role, PolicyLayer(name="role")),
        teammate_layer,
    ]


def resolve_policy(
    tool_name: str, registry: TeamRegistry | None, acting_agent_id: str
) -> Decision:
    """Decide whether the acting agent may use *tool_name* under the formation's policies."""
    if registry is None:
        return Decision.allow("No formation registry: no policy enforcement", gate=GATE)
    if not acting_agent_id:
        logger.warning("tool policy not enforced: no acting agent id for %s", tool_name)
        return Decision.allow("No agent ID: policy not enforced", gate=GATE)

    teammate = registry.role_for_agent(acting_agent_id)
    if teammate is None:
        return Decision.allow(
            f"Agent {acting_agent_id} not in registry: default allow", gate=GATE
        )

    policy = merge_layers(
        teammate.role, layers_for_role(registry, teammate.role, teammate.tool_policies)
    )
    if tool_name not in policy.allowed:
        return Decision.deny(
            f"Tool '{tool_name}' not in profile '{policy.profile}' for role '{policy.role}'",
            gate=GATE,
            matched=policy.profile,
        )
    if tool_name in policy.denied:
        return Decision.deny(
            f"Tool '{tool_name}' denied for role '{policy.role}' (deny-wins cascade)",
            gate=GATE,
            matched=tool_name,
        )
    return Decision.allow(
        f"Allowed: profile={policy.profile}, role={policy.role}",
        gate=GATE,
        matched=policy.profile,
    )


def check_tool_policy(
    tool_name: str,
    acting_agent_id: str,
    *,
    path: Path | None = None,
    settings: Settings | None = None,
) -> Decision:
    """Load the registry fresh and resolve *tool_name*; an unreadable registry denies."""
    settings = settings or get_settings()
    try:
        registry = load_registry(path or registry_path(settings))
    except DocumentError as exc:
        logger.warning("formation registry unreadable, denying tool: %s", exc)
        return Decision.deny(f"Formation registry unreadable: {exc.path}", gate=GATE)
    return resolve_policy(tool_name, registry, acting_agent_id)
