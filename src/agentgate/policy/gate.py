"""Combine every applicable gate for one proposed action with AND semantics."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from agentgate.config import Settings, get_settings
from agentgate.errors import DocumentError
from agentgate.policy.autonomy import authorize, load_state_or_unknown
from agentgate.policy.classifier import classify, is_file_mutating
from agentgate.policy.ownership import GATE as OWNERSHIP_GATE
from agentgate.policy.ownership import check_ownership
from agentgate.policy.projects import is_metadata_file, resolve_action_project
from agentgate.policy.tool_policy import GATE as TOOL_POLICY_GATE
from agentgate.policy.tool_policy import resolve_policy
from agentgate.policy.types import Decision, ProjectIdentity, ProposedAction, RiskLevel
from agentgate.team.loader import load_registry, registry_path

logger = logging.getLogger(__name__)

EXIT_ALLOW = 0
EXIT_ADVISORY = 1
EXIT_BLOCK = 2

BLOCKING_GATES = frozenset({TOOL_POLICY_GATE, OWNERSHIP_GATE})


@dataclass(slots=True)
class GateReport:
    action: ProposedAction
    risk: RiskLevel
    project: ProjectIdentity | None
    decisions: list[Decision] = field(default_factory=list)

    @property
    def allowed(self) -> bool:
        return all(decision.allowed for decision in self.decisions)

    @property
    def denials(self) -> list[Decision]:
        return [decision for decision in self.decisions if not decision.allowed]

    @property
    def exit_code(self) -> int:
        """0 allowed, 2 when a team gate blocks, 1 when only autonomy denies (advisory)."""
        denials = self.denials
        if not denials:
            return EXIT_ALLOW
        if any(decision.gate in BLOCKING_GATES for decision in denials):
            return EXIT_BLOCK
        return EXIT_ADVISORY

    def render(self) -> str:
        return "\n\n".join(decision.report or decision.reason for decision in self.denials)


def evaluate(
    action: ProposedAction,
    settings: Settings | None = None,
    *,
    registry_file: Path | None = None,
) -> GateReport:
    """Run classification, autonomy, tool policy and ownership for *action*."""
    settings = settings or get_settings()
    risk = classify(action)
    project = resolve_action_project(action, settings)
    report = GateReport(action=action, risk=risk, project=project)
    logger.debug(
        "evaluating %s risk=%s project=%s",
        action.tool_name,
        risk.value,
        project.name if project else "-",
    )

    if risk is not RiskLevel.LOW:
        state = load_state_or_unknown(project, settings, risk)
        report.decisions.append(
            authorize(action, project, state, audit_log=settings.audit_log_path)
        )

    try:
        registry = load_registry(registry_file or registry_path(settings))
    except DocumentError as exc:
        logger.warning("formation registry unreadable: %s", exc)
        report.decisions.append(
            Decision.deny(f"Formation registry unreadable: {exc.path}", gate=TOOL_POLICY_GATE)
        )
        return report

    report.decisions.append(resolve_policy(action.tool_name, registry, action.acting_agent_id))
    if (
        is_file_mutating(action.tool_name)
        and action.file_path
        and not is_metadata_file(action.file_path)
    ):
        report.decisions.append(
            check_ownership(action.file_path, registry, action.acting_agent_id)
        )
    return report
