"""Tests for agentgate.policy.classifier."""

from __future__ import annotations

import pytest

from agentgate.policy.classifier import (
    UNRECOGNIZED_DESCRIPTION,
    UNRECOGNIZED_PATTERN,
    classify,
    describe_high_risk,
    is_file_mutating,
    match_destructive,
)
from agentgate.policy.types import ProposedAction, RiskLevel


def _bash(command: str) -> ProposedAction:
    return ProposedAction(tool_name="Bash", command_text=command)


@pytest.mark.parametrize(
    ("command", "label"),
    [
        ("rm -rf /tmp/build", "rm -rf"),
        ("rm -fr node_modules", "rm -fr"),
        ("psql -c 'DROP DATABASE prod'", "DROP DATABASE"),
        ("sqlite3 app.db 'drop table users'", "DROP TABLE"),
        ("psql -c 'TRUNCATE TABLE events'", "TRUNCATE"),
        ("psql -c 'DELETE FROM users'", "DELETE FROM"),
        ("docker system prune -a", "docker system prune -a"),
        ("docker volume rm data", "docker volume rm"),
        ("git push --force origin main", "git push --force"),
        ("git push -f origin main", "git push -f"),
        ("git reset --hard HEAD~1", "git reset --hard"),
        ("git clean -fd", "git clean -f"),
        ("git clean -d -f", "git clean -f"),
        ("git clean --force", "git clean -f"),
        ("sudo shutdown now", "shutdown"),
        ("reboot", "reboot"),
        ("mkfs.ext4 /dev/sdb1", "mkfs"),
        ("dd if=/dev/zero of=/dev/sdb", "dd if="),
        ("chown -R root:root /srv", "chown -R"),
        ("chmod -R 777 /srv", "chmod -R 777"),
        ("cat image.bin > /dev/sda", "> /dev/sd*"),
    ],
)
def test_destructive_catalog(command: str, label: str) -> None:
    entry = match_destructive(command)
    assert entry is not None
    assert entry.label == label
    assert classify(_bash(command)) is RiskLevel.HIGH


def test_first_catalog_entry_names_the_pattern() -> None:
    assert describe_high_risk("git reset --hard && rm -rf dist") == (
        "rm -rf",
        "Recursive force delete",
    )


def test_unrecognized_high_risk_fallback() -> None:
    assert describe_high_risk("ls -la") == (UNRECOGNIZED_PATTERN, UNRECOGNIZED_DESCRIPTION)


def test_matching_is_case_insensitive() -> None:
    assert classify(_bash("RM -RF /tmp/x")) is RiskLevel.HIGH


def test_destructive_command_beats_tool_kind() -> None:
    action = ProposedAction(tool_name="Write", command_text="rm -rf /", file_path="/w/a.py")
    assert classify(action) is RiskLevel.HIGH


@pytest.mark.parametrize("tool", ["Write", "Edit", "MultiEdit", "NotebookEdit"])
def test_file_mutating_tools_are_medium(tool: str) -> None:
    assert is_file_mutating(tool) is True
    assert classify(ProposedAction(tool_name=tool, file_path="/w/app/x.py")) is RiskLevel.MEDIUM


@pytest.mark.parametrize(
    "command",
    ["git commit -m wip", "npm install", "pip install requests", "docker build .", "rm notes.txt"],
)
def test_stateful_programs_are_medium(command: str) -> None:
    assert classify(_bash(command)) is RiskLevel.MEDIUM


def test_stateful_program_after_other_tokens() -> None:
    assert classify(_bash("cd app && git status")) is RiskLevel.MEDIUM


@pytest.mark.parametrize("command", ["ls -la", "cat README.md", "gitk", "pytest -q", ""])
def test_plain_commands_are_low(command: str) -> None:
    assert classify(_bash(command)) is RiskLevel.LOW


def test_read_only_tools_are_low() -> None:
    assert classify(ProposedAction(tool_name="Read", file_path="/w/app/x.py")) is RiskLevel.LOW
    assert is_file_mutating("Read") is False


def test_file_path_is_never_consulted() -> None:
    action = ProposedAction(tool_name="Read", file_path="/tmp/rm -rf")
    assert classify(action) is RiskLevel.LOW


def test_git_push_force_needs_push_in_same_command() -> None:
    assert match_destructive("git push origin main; echo --force") is None


@pytest.mark.parametrize(
    "command",
    ["rm -r -f /", "rm -R -f /srv", "rm --recursive --force /", "rm -f --recursive tmp"],
)
def test_separate_recursive_and_force_flags(command: str) -> None:
    entry = match_destructive(command)
    assert entry is not None
    assert entry.label == "rm -rf"
    assert classify(_bash(command)) is RiskLevel.HIGH


def test_flags_in_another_segment_do_not_combine() -> None:
    assert match_destructive("rm -r build; ls -f") is None
    assert classify(_bash("rm -r build; ls -f")) is RiskLevel.MEDIUM
