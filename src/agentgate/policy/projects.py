"""Project detection from paths. Pure string matching, no filesystem access."""

from __future__ import annotations

import re

from agentgate.config import Settings
from agentgate.policy.types import ProjectIdentity, ProposedAction

METHOD_SESSIONS = "sessions"
METHOD_TEAM_SCOPED_APP = "team-scoped-app"
METHOD_ROOT_LEVEL = "root-level"

# Infrastructure directories directly under the workspace root that are never projects.
NON_PROJECTS = frozenset(
    {
        "v11",
        "v10",
        "v9",
        "v8",
        "v7",
        "v6_Ultra",
        "sessions",
        "scripts",
        "system-apps-config",
        "portfolio-platform",
        ".claude",
        ".agent-metrics",
        ".agent-registry",
        ".secrets",
        ".archive",
        ".cache",
        ".local",
        ".npm",
        ".nvm",
        ".config",
        ".ssh",
        "snap",
        "node_modules",
        "deploy.sh",
    }
)

METADATA_FILENAMES = frozenset(
    {
        "state.md",
        "spec.md",
        "gates.md",
        ".task-state.json",
        ".autonomy-state",
        ".plan-mode-state",
        ".gitignore",
        "CLAUDE.md",
    }
)
_METADATA_DIR_MARKERS = ("/v11/hooks/", "/v9/hooks/", "/.agent-metrics/", "/.claude/")
_BACKUP_RE = re.compile(r"\.(?:json|md)\.backup")


def _next_segment(path: str, root: str) -> str:
    prefix = root.rstrip("/") + "/"
    if not path.startswith(prefix):
        return ""
    return path[len(prefix) :].split("/", 1)[0]


def resolve_project(path: str, settings: Settings) -> ProjectIdentity | None:
    """Map *path* to a project using ordered conventions; first match wins."""
    if not path:
        return None

    name = _next_segment(path, settings.sessions_dir)
    if name:
        return ProjectIdentity(name=name, method=METHOD_SESSIONS)

    name = _next_segment(path, settings.platform_apps_dir)
    if name:
        return ProjectIdentity(name=name, method=METHOD_TEAM_SCOPED_APP)

    name = _next_segment(path, settings.workspace_dir)
    if name and name not in NON_PROJECTS:
        return ProjectIdentity(name=name, method=METHOD_ROOT_LEVEL)
    return None


def find_workspace_path(command: str, settings: Settings) -> str:
    """Return the first absolute path under the workspace root embedded in *command*."""
    if not command:
        return ""
    root = re.escape(settings.workspace_dir.rstrip("/"))
    match = re.search(rf"{root}/[^\s'\";&|]+", command)
    return match.group(0) if match else ""


def resolve_action_project(action: ProposedAction, settings: Settings) -> ProjectIdentity | None:
    """Resolve the project for *action*: file path first, then a path scanned from the command."""
    project = resolve_project(action.file_path, settings)
    if project is None and action.command_text:
        embedded = find_workspace_path(action.command_text, settings)
        if embedded:
            project = resolve_project(embedded, settings)
    return project


def is_metadata_file(path: str) -> bool:
    """True for hook infrastructure and bookkeeping files that gates should not treat as work."""
    if not path:
        return False
    if any(marker in path for marker in _METADATA_DIR_MARKERS):
        return True
    base = path.rsplit("/", 1)[-1]
    if base in METADATA_FILENAMES:
        return True
    if base == ".env" or base.startswith(".env."):
        return True
    return bool(_BACKUP_RE.search(base))
