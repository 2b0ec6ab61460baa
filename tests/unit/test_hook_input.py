"""Tests for hook input parsing."""

from __future__ import annotations

import json

import pytest

from agentgate.errors import HookInputError
from agentgate.events.hook_input import HookInput, parse_hook_input


def test_bash_record() -> None:
    record = parse_hook_input(
        json.dumps(
            {
                "tool_name": "Bash",
                "tool_input": {"command": "git status"},
                "session_id": "s-1",
            }
        )
    )
    assert record == HookInput(
        tool_name="Bash", file_path="", command="git status", session_id="s-1"
    )


@pytest.mark.parametrize("key", ["file_path", "path", "notebook_path"])
def test_file_path_aliases(key: str) -> None:
    record = parse_hook_input(
        json.dumps({"tool_name": "Write", "tool_input": {key: "/w/alpha/x.py"}})
    )
    assert record.file_path == "/w/alpha/x.py"


def test_file_path_takes_precedence() -> None:
    record = parse_hook_input(
        json.dumps({"tool_name": "Edit", "tool_input": {"path": "/b", "file_path": "/a"}})
    )
    assert record.file_path == "/a"


def test_missing_fields_are_empty() -> None:
    record = parse_hook_input("")
    assert record.tool_name == ""
    assert record.file_path == ""
    assert record.command == ""


def test_non_object_tool_input_is_ignored() -> None:
    record = parse_hook_input(json.dumps({"tool_name": "Bash", "tool_input": "ls"}))
    assert record.command == ""


@pytest.mark.parametrize("raw", ["{not json", "[1, 2]", "\"text\""])
def test_invalid_records_raise(raw: str) -> None:
    with pytest.raises(HookInputError):
        parse_hook_input(raw)


def test_to_action_carries_agent_id() -> None:
    record = HookInput(tool_name="Write", file_path="/w/x.py", command="", session_id="s")
    action = record.to_action("agent-7")
    assert action.acting_agent_id == "agent-7"
    assert action.file_path == "/w/x.py"
    assert action.session_id == "s"
