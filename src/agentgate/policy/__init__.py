"""Decision engine: risk classification, autonomy, tool policy and file ownership."""

from agentgate.policy.autonomy import authorize, authorize_action
from agentgate.policy.classifier import classify
from agentgate.policy.gate import GateReport, evaluate
from agentgate.policy.ownership import check_file_ownership, check_ownership
from agentgate.policy.projects import resolve_project
from agentgate.policy.tool_policy import check_tool_policy, resolve_policy
from agentgate.policy.types import Decision, ProjectIdentity, ProposedAction, RiskLevel

__all__ = [
    "Decision",
    "GateReport",
    "ProjectIdentity",
    "ProposedAction",
    "RiskLevel",
    "authorize",
    "authorize_action",
    "check_file_ownership",
    "check_ownership",
    "check_tool_policy",
    "classify",
    "evaluate",
    "resolve_policy",
    "resolve_project",
]
