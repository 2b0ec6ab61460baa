"""Risk classification for proposed agent actions. Pure, no I/O."""

from __future__ import annotations

import re
from dataclasses import dataclass

from agentgate.policy.types import ProposedAction, RiskLevel

FILE_MUTATING_TOOLS = {"Write", "Edit", "MultiEdit", "NotebookEdit"}
EXECUTION_TOOLS = {"Bash"}
STATEFUL_PROGRAMS = ("rm", "git", "docker", "npm", "pip")

UNRECOGNIZED_PATTERN = "(unrecognized high-risk pattern)"
UNRECOGNIZED_DESCRIPTION = "Destructive operation detected by risk classifier"


@dataclass(frozen=True, slots=True)
class DestructivePattern:
    label: str
    description: str
    regex: re.Pattern[str]


def _pattern(label: str, description: str, regex: str) -> DestructivePattern:
    return DestructivePattern(label, description, re.compile(regex, re.IGNORECASE))


# Separate or long-form flags anywhere in the same command segment.
_SEGMENT = r"(?=[^;&|\n]*\s(?:{flag})\b)"
_RECURSIVE_FLAG = _SEGMENT.format(flag=r"-[a-z]*r[a-z]*|--recursive")
_FORCE_FLAG = _SEGMENT.format(flag=r"-[a-z]*f[a-z]*|--force")

# Order matters: the first match names the pattern reported to the operator.
DESTRUCTIVE_PATTERNS: tuple[DestructivePattern, ...] = (
    _pattern("rm -rf", "Recursive force delete", r"\brm\s+-[a-z]*r[a-z]*f"),
    _pattern("rm -fr", "Recursive force delete", r"\brm\s+-[a-z]*f[a-z]*r"),
    _pattern("rm -rf", "Recursive force delete", r"\brm\b" + _RECURSIVE_FLAG + _FORCE_FLAG),
    _pattern("DROP DATABASE", "Database deletion", r"\bdrop\s+database\b"),
    _pattern("DROP TABLE", "Table deletion", r"\bdrop\s+table\b"),
    _pattern("TRUNCATE", "Table truncation", r"\btruncate\s+(?:table\s+)?[a-z_\"`\[]"),
    _pattern("DELETE FROM", "Data deletion", r"\bdelete\s+from\b"),
    _pattern(
        "docker system prune -a",
        "Delete all Docker images",
        r"\bdocker\s+system\s+prune\s+(?:\S+\s+)*?(?:-[a-z]*a[a-z]*|--all)\b",
    ),
    _pattern("docker volume rm", "Docker volume deletion", r"\bdocker\s+volume\s+rm\b"),
    _pattern(
        "git push --force",
        "Force push to remote",
        r"\bgit\s+push\b[^;&|\n]*\s--force",
    ),
    _pattern("git push -f", "Force push to remote", r"\bgit\s+push\b[^;&|\n]*\s-f\b"),
    _pattern("git reset --hard", "Hard reset (loses commits)", r"\bgit\s+reset\s+--hard\b"),
    _pattern("git clean -f", "Force clean untracked files", r"\bgit\s+clean\b" + _FORCE_FLAG),
    _pattern("shutdown", "System shutdown/reboot", r"\bshutdown\b"),
    _pattern("reboot", "System shutdown/reboot", r"\breboot\b"),
    _pattern("mkfs", "Format filesystem", r"\bmkfs\b"),
    _pattern("dd if=", "Direct disk write", r"\bdd\s+if="),
    _pattern("chown -R", "Recursive ownership change", r"\bchown\s+-[a-z]*r"),
    _pattern("chmod -R 777", "Dangerous permission change", r"\bchmod\s+-[a-z]*r[a-z]*\s+0?777\b"),
    _pattern(
        "> /dev/sd*",
        "Raw block device overwrite",
        r">\s*/dev/(?:sd[a-z]|hd[a-z]|vd[a-z]|nvme\d|mmcblk\d)",
    ),
)

_STATEFUL_RE = re.compile(r"(?:^|\s)(?:" + "|".join(STATEFUL_PROGRAMS) + r")\s")


def match_destructive(command: str) -> DestructivePattern | None:
    """Return the first catalog entry matching *command*, or None."""
    if not command:
        return None
    for entry in DESTRUCTIVE_PATTERNS:
        if entry.regex.search(command):
            return entry
    return None


def describe_high_risk(command: str) -> tuple[str, str]:
    """Return ``(label, description)`` for a command already classified high."""
    entry = match_destructive(command)
    if entry is None:
        return UNRECOGNIZED_PATTERN, UNRECOGNIZED_DESCRIPTION
    return entry.label, entry.description


def is_file_mutating(tool_name: str) -> bool:
    return tool_name in FILE_MUTATING_TOOLS


def classify(action: ProposedAction) -> RiskLevel:
    """Label *action* low, medium or high. The file path is never consulted."""
    if match_destructive(action.command_text) is not None:
        return RiskLevel.HIGH
    if is_file_mutating(action.tool_name):
        return RiskLevel.MEDIUM
    if action.tool_name in EXECUTION_TOOLS and _STATEFUL_RE.search(action.command_text):
        return RiskLevel.MEDIUM
    return RiskLevel.LOW
