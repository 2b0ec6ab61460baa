"""Autonomy resolver: pre-approval of medium and high risk actions from per-project trust."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from fnmatch import fnmatchcase
from pathlib import Path

from agentgate.config import Settings, get_settings
from agentgate.errors import DocumentError
from agentgate.policy.classifier import classify, describe_high_risk
from agentgate.policy.projects import resolve_action_project
from agentgate.policy.types import Decision, ProjectIdentity, ProposedAction, RiskLevel
from agentgate.trust.audit import AUTO_APPROVED_PREFIX_TAG, AUTO_APPROVED_TAG, append_audit_line
from agentgate.trust.loader import load_autonomy_state
from agentgate.trust.types import AutonomyState, Grant, GrantType

logger = logging.getLogger(__name__)

GATE = "autonomy"

CATEGORY_BY_EXTENSION = {
    "ts": "typescript",
    "tsx": "typescript",
    "js": "typescript",
    "jsx": "typescript",
    "py": "python",
    "sh": "shell",
    "bash": "shell",
    "md": "markdown",
    "json": "config",
    "yaml": "config",
    "yml": "config",
}
CATEGORY_BY_PROGRAM = {
    "git": "git",
    "docker": "docker",
    "npm": "npm",
    "yarn": "npm",
    "pnpm": "npm",
}

REASON_NO_STATE = "manual mode / no autonomy state"
REASON_UNKNOWN_STATE = "autonomy state unreadable or level unknown"
REASON_NEEDS_APPROVAL = "needs approval"


def _glob_match(path: str, pattern: str) -> bool:
    return fnmatchcase(path, pattern)


def _regex_match(path: str, pattern: str) -> bool:
    try:
        return re.search(pattern, path) is not None
    except re.error:
        logger.debug("skipping invalid regex grant %r", pattern)
        return False


def _prefix_match(path: str, pattern: str) -> bool:
    return path.startswith(pattern)


_GRANT_MATCHERS: dict[GrantType, Callable[[str, str], bool]] = {
    GrantType.GLOB: _glob_match,
    GrantType.REGEX: _regex_match,
    GrantType.PREFIX: _prefix_match,
}


def grant_matches(grant: Grant, path: str) -> bool:
    return _GRANT_MATCHERS[grant.type](path, grant.pattern)


def match_grant(grants: list[Grant], path: str) -> Grant | None:
    """Return the first grant, in stored order, whose pattern matches *path*."""
    if not path:
        return None
    for grant in grants:
        if grant_matches(grant, path):
            return grant
    return None


def derive_category(action: ProposedAction) -> str:
    """Map the action to an approval category: file extension first, else the leading program."""
    if action.file_path:
        base = action.file_path.rsplit("/", 1)[-1]
        if "." not in base:
            return ""
        return CATEGORY_BY_EXTENSION.get(base.rsplit(".", 1)[-1], "")
    tokens = action.command_text.split()
    if len(tokens) < 2:
        return ""
    return CATEGORY_BY_PROGRAM.get(tokens[0], "")


def command_prefix(command: str, width: int = 3) -> str:
    return " ".join(command.split()[:width])


def _authorize_medium(
    action: ProposedAction, project: ProjectIdentity | None, state: AutonomyState | None
) -> Decision:
    if project is None or state is None:
        return Decision.deny(REASON_NO_STATE, gate=GATE)
    if not state.known:
        return Decision.deny(REASON_UNKNOWN_STATE, gate=GATE)

    level = state.level or 0
    if level >= 3:
        return Decision.allow("Autonomy A3: all medium-risk auto-approved", gate=GATE)

    if level >= 2:
        grant = match_grant(state.grants, action.file_path)
        if grant is not None:
            return Decision.allow(
                f"Autonomy A2: grant matched {grant.type.value} {grant.pattern}",
                gate=GATE,
                matched=grant.pattern,
            )

    if level >= 1:
        category = derive_category(action)
        if category and category in state.approved_categories:
            return Decision.allow(
                f"Autonomy A1: category '{category}' pre-approved", gate=GATE, matched=category
            )

    return Decision.deny(REASON_NEEDS_APPROVAL, gate=GATE)


def high_risk_report(description: str, pattern: str, command: str, level: str) -> str:
    return "\n".join(
        [
            "HIGH RISK OPERATION BLOCKED",
            "",
            "Risk Level: HIGH",
            f"Operation: {description}",
            f"Pattern: {pattern}",
            f"Command: {command}",
            "",
            f"Current Autonomy Level: A{level}",
            "Note: A4 with history can auto-approve high-risk actions.",
            "",
            "This operation can cause data loss or system damage.",
            "To proceed, get explicit user approval.",
        ]
    )


def _history_approval(command: str, pattern: str, state: AutonomyState) -> tuple[str, str] | None:
    """Return ``(audit tag, matched text)`` when level 4 history covers *command*."""
    if pattern in state.high_risk_history:
        return AUTO_APPROVED_TAG, pattern
    prefix = command_prefix(command)
    if prefix and any(entry.startswith(prefix) for entry in state.high_risk_history):
        return AUTO_APPROVED_PREFIX_TAG, prefix
    return None


def _authorize_high(
    action: ProposedAction, state: AutonomyState | None, audit_log: Path
) -> Decision:
    command = action.command_text
    pattern, description = describe_high_risk(command)
    level = str(state.level) if state is not None and state.known else "?"
    report = high_risk_report(description, pattern, command, level)

    approval = None
    if state is not None and state.known and (state.level or 0) >= 4:
        approval = _history_approval(command, pattern, state)
    if approval is not None:
        tag, matched = approval
        try:
            append_audit_line(audit_log, tag, matched, command)
        except OSError as exc:
            logger.warning("audit log %s not writable, denying: %s", audit_log, exc)
            return Decision.deny(
                "high-risk auto-approval could not be audited",
                gate=GATE,
                matched=pattern,
                report=report,
            )
        what = "pattern" if tag == AUTO_APPROVED_TAG else "command prefix"
        return Decision.allow(
            f"Autonomy A4: high-risk {what} '{matched}' approved before",
            gate=GATE,
            matched=matched,
        )

    return Decision.deny(
        f"high-risk operation blocked: {description} ({pattern})",
        gate=GATE,
        matched=pattern,
        report=report,
    )


def authorize(
    action: ProposedAction,
    project: ProjectIdentity | None,
    state: AutonomyState | None,
    *,
    audit_log: Path | None = None,
) -> Decision:
    """Decide whether *action* is pre-approved for *project* given its trust *state*.

    ``state`` is None when no trust document exists; the resolver then defaults closed.
    """
    risk = classify(action)
    if risk is RiskLevel.LOW:
        return Decision.allow("low risk", gate=GATE)
    if risk is RiskLevel.MEDIUM:
        return _authorize_medium(action, project, state)
    return _authorize_high(action, state, audit_log or get_settings().audit_log_path)


def load_state_or_unknown(
    project: ProjectIdentity | None, settings: Settings, risk: RiskLevel = RiskLevel.HIGH
) -> AutonomyState | None:
    """Load trust state for a *risk* decision.

    Medium risk reads only the sessions location; high risk also falls back to the
    workspace root. An unparseable document becomes a state with an unknown level.
    """
    try:
        return load_autonomy_state(
            project, settings, include_workspace=risk is RiskLevel.HIGH
        )
    except DocumentError as exc:
        logger.warning("treating autonomy state as unknown: %s", exc)
        return AutonomyState(level=None, source=exc.path)


def authorize_action(action: ProposedAction, settings: Settings | None = None) -> Decision:
    """Resolve the project, load its trust state and authorize *action*."""
    settings = settings or get_settings()
    project = resolve_action_project(action, settings)
    state = load_state_or_unknown(project, settings, classify(action))
    return authorize(action, project, state, audit_log=settings.audit_log_path)
