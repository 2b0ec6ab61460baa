"""Advisory structural checks for trust, registry and task-metadata documents.

Only required fields, enums and a few cross-field contradictions are checked.
Issues are reported to the caller; nothing here blocks an action.
"""

from __future__ import annotations

import json
from dataclasses import dataclass

from agentgate.policy.tool_policy import PROFILES
from agentgate.trust.types import APPROVABLE_CATEGORIES, MAX_LEVEL, MIN_LEVEL, GrantType


@dataclass(slots=True)
class ValidationIssue:
    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


KIND_AUTONOMY_STATE = "autonomy-state"
KIND_FORMATION_REGISTRY = "formation-registry"
KIND_TASK_METADATA = "task-metadata"

MAX_TEAMMATES = 5
RISK_VALUES = ("low", "medium", "high")
COMPLEXITY_VALUES = ("novel", "complex", "medium", "routine")
SCOPE_VALUES = ("small", "medium", "large")


def _present(data: dict[str, object], key: str) -> bool:
    value = data.get(key)
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def validate_autonomy_state(data: object) -> list[ValidationIssue]:
    if not isinstance(data, dict):
        return [ValidationIssue(field="$", message="must be a JSON object")]
    issues: list[ValidationIssue] = []

    level = data.get("level")
    if level is None:
        issues.append(ValidationIssue(field="level", message="required"))
    elif isinstance(level, bool) or not isinstance(level, int):
        issues.append(ValidationIssue(field="level", message="must be an integer"))
    elif level < MIN_LEVEL or level > MAX_LEVEL:
        issues.append(
            ValidationIssue(field="level", message=f"invalid level {level} (must be 0-4)")
        )

    grants = data.get("grants")
    if grants is not None:
        if not isinstance(grants, list):
            issues.append(ValidationIssue(field="grants", message="must be a list"))
        else:
            allowed_types = {item.value for item in GrantType}
            for index, grant in enumerate(grants):
                name = f"grants[{index}]"
                if not isinstance(grant, dict):
                    issues.append(ValidationIssue(field=name, message="must be an object"))
                    continue
                if not _present(grant, "pattern"):
                    issues.append(ValidationIssue(field=f"{name}.pattern", message="required"))
                grant_type = grant.get("type")
                if grant_type is not None and grant_type not in allowed_types:
                    issues.append(
                        ValidationIssue(
                            field=f"{name}.type",
                            message=f"invalid type '{grant_type}' (must be glob|regex|prefix)",
                        )
                    )

    categories = data.get("approved_categories")
    if isinstance(categories, list):
        unknown = [item for item in categories if item not in APPROVABLE_CATEGORIES]
        if unknown:
            issues.append(
                ValidationIssue(
                    field="approved_categories", message=f"unsupported values: {unknown}"
                )
            )
    elif categories is not None:
        issues.append(ValidationIssue(field="approved_categories", message="must be a list"))

    history = data.get("high_risk_history")
    if history is not None and not isinstance(history, list):
        issues.append(ValidationIssue(field="high_risk_history", message="must be a list"))
    return issues


def validate_formation_registry(data: object) -> list[ValidationIssue]:
    if not isinstance(data, dict):
        return [ValidationIssue(field="$", message="must be a JSON object")]
    issues: list[ValidationIssue] = []

    for key in ("formation", "project"):
        if not _present(data, key):
            issues.append(ValidationIssue(field=key, message="required"))

    teammates = data.get("teammates")
    if teammates is None:
        issues.append(ValidationIssue(field="teammates", message="required"))
    elif not isinstance(teammates, dict):
        issues.append(ValidationIssue(field="teammates", message="must be an object"))
    else:
        if len(teammates) > MAX_TEAMMATES:
            issues.append(
                ValidationIssue(
                    field="teammates",
                    message=f"too many teammates: {len(teammates)} (max {MAX_TEAMMATES})",
                )
            )
        for role, entry in teammates.items():
            name = f"teammates.{role}"
            if not isinstance(entry, dict):
                issues.append(ValidationIssue(field=name, message="must be an object"))
                continue
            if not _present(entry, "agent_id"):
                issues.append(ValidationIssue(field=f"{name}.agent_id", message="required"))
            issues.extend(_profile_issues(f"{name}.tool_policies", entry.get("tool_policies")))

    policies = data.get("tool_policies")
    if isinstance(policies, dict):
        issues.extend(_profile_issues("tool_policies.defaults", policies.get("defaults")))
        per_role = policies.get("per_role")
        if isinstance(per_role, dict):
            for role, layer in per_role.items():
                issues.extend(_profile_issues(f"tool_policies.per_role.{role}", layer))
    return issues


def _profile_issues(field: str, layer: object) -> list[ValidationIssue]:
    if not isinstance(layer, dict):
        return []
    profile = layer.get("profile")
    if profile in (None, "") or profile in PROFILES:
        return []
    return [
        ValidationIssue(
            field=f"{field}.profile",
            message=f"unknown profile '{profile}' (must be {'|'.join(PROFILES)})",
        )
    ]


def validate_task_metadata(data: object) -> list[ValidationIssue]:
    if not isinstance(data, dict):
        return [ValidationIssue(field="$", message="must be a JSON object")]
    issues: list[ValidationIssue] = []

    for key in ("project", "sprint", "risk"):
        if not _present(data, key):
            issues.append(ValidationIssue(field=key, message="required"))

    risk = data.get("risk")
    complexity = data.get("complexity")
    scope = data.get("scope")
    for key, value, allowed in (
        ("risk", risk, RISK_VALUES),
        ("complexity", complexity, COMPLEXITY_VALUES),
        ("scope", scope, SCOPE_VALUES),
    ):
        if _present(data, key) and value not in allowed:
            issues.append(
                ValidationIssue(
                    field=key,
                    message=f"invalid {key} '{value}' (must be {'|'.join(allowed)})",
                )
            )

    if complexity == "routine" and risk in ("medium", "high"):
        issues.append(
            ValidationIssue(
                field="complexity",
                message=f"contradiction: routine complexity + {risk} risk (recategorize)",
            )
        )
    if risk == "high":
        if not _present(data, "complexity"):
            issues.append(ValidationIssue(field="complexity", message="required for high risk"))
        if not _present(data, "scope"):
            issues.append(ValidationIssue(field="scope", message="required for high risk"))
    return issues


VALIDATORS = {
    KIND_AUTONOMY_STATE: validate_autonomy_state,
    KIND_FORMATION_REGISTRY: validate_formation_registry,
    KIND_TASK_METADATA: validate_task_metadata,
}


def validate_document(kind: str, data: object) -> list[ValidationIssue]:
    """Check *data* against the named document kind; unknown kinds pass."""
    validator = VALIDATORS.get(kind)
    if validator is None:
        return []
    return validator(data)


def validate_json_text(kind: str, text: str) -> list[ValidationIssue]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        return [ValidationIssue(field="$", message=f"invalid JSON: {exc.msg}")]
    return validate_document(kind, data)
