"""Tests for project detection and metadata-file recognition."""

from __future__ import annotations

from pathlib import Path

import pytest

from agentgate.config import Settings
from agentgate.policy.projects import (
    METHOD_ROOT_LEVEL,
    METHOD_SESSIONS,
    METHOD_TEAM_SCOPED_APP,
    find_workspace_path,
    is_metadata_file,
    resolve_action_project,
    resolve_project,
)
from agentgate.policy.types import ProjectIdentity, ProposedAction


def test_sessions_convention(settings: Settings, workspace: Path) -> None:
    project = resolve_project(f"{workspace}/sessions/alpha/src/app.ts", settings)
    assert project == ProjectIdentity(name="alpha", method=METHOD_SESSIONS)


def test_team_scoped_app_convention(settings: Settings, workspace: Path) -> None:
    path = f"{workspace}/portfolio-platform/apps/beta/pages/index.tsx"
    project = resolve_project(path, settings)
    assert project == ProjectIdentity(name="beta", method=METHOD_TEAM_SCOPED_APP)


def test_root_level_convention(settings: Settings, workspace: Path) -> None:
    project = resolve_project(f"{workspace}/gamma/README.md", settings)
    assert project == ProjectIdentity(name="gamma", method=METHOD_ROOT_LEVEL)


@pytest.mark.parametrize(
    "name", ["v11", "scripts", ".claude", "node_modules", "portfolio-platform"]
)
def test_infrastructure_directories_are_not_projects(
    settings: Settings, workspace: Path, name: str
) -> None:
    assert resolve_project(f"{workspace}/{name}/something.txt", settings) is None


def test_platform_root_without_app_is_not_a_project(settings: Settings, workspace: Path) -> None:
    assert resolve_project(f"{workspace}/portfolio-platform/README.md", settings) is None


def test_paths_outside_workspace(settings: Settings) -> None:
    assert resolve_project("/etc/passwd", settings) is None
    assert resolve_project("", settings) is None


def test_workspace_prefix_must_be_a_whole_segment(settings: Settings, workspace: Path) -> None:
    assert resolve_project(f"{workspace}-other/alpha/x.py", settings) is None


def test_sessions_root_override(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("SESSIONS_ROOT", str(tmp_path / "elsewhere"))
    settings = Settings()
    project = resolve_project(f"{tmp_path}/elsewhere/delta/x.py", settings)
    assert project == ProjectIdentity(name="delta", method=METHOD_SESSIONS)


def test_find_workspace_path_in_command(settings: Settings, workspace: Path) -> None:
    command = f"cd '{workspace}/alpha/src' && git status"
    assert find_workspace_path(command, settings) == f"{workspace}/alpha/src"
    assert find_workspace_path("git status", settings) == ""


def test_action_project_prefers_file_path(settings: Settings, workspace: Path) -> None:
    action = ProposedAction(
        tool_name="Bash",
        command_text=f"ls {workspace}/beta",
        file_path=f"{workspace}/alpha/x.py",
    )
    project = resolve_action_project(action, settings)
    assert project is not None
    assert project.name == "alpha"


def test_action_project_falls_back_to_command(settings: Settings, workspace: Path) -> None:
    action = ProposedAction(tool_name="Bash", command_text=f"rm -rf {workspace}/beta/dist")
    project = resolve_action_project(action, settings)
    assert project == ProjectIdentity(name="beta", method=METHOD_ROOT_LEVEL)


@pytest.mark.parametrize(
    "path",
    [
        "/w/alpha/state.md",
        "/w/alpha/.autonomy-state",
        "/w/alpha/.env",
        "/w/alpha/.env.local",
        "/w/alpha/config.json.backup-1",
        "/w/.claude/settings.json",
        "/w/v11/hooks/pre.sh",
        "/w/alpha/CLAUDE.md",
    ],
)
def test_metadata_files(path: str) -> None:
    assert is_metadata_file(path) is True


@pytest.mark.parametrize("path", ["/w/alpha/src/app.ts", "/w/alpha/environment.py", ""])
def test_regular_files_are_not_metadata(path: str) -> None:
    assert is_metadata_file(path) is False
