"""Parse the JSON record a hook runtime sends for each proposed tool call."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from agentgate.errors import HookInputError
from agentgate.policy.types import ProposedAction

_PATH_KEYS = ("file_path", "path", "notebook_path")


def _text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


@dataclass(frozen=True, slots=True)
class HookInput:
    tool_name: str
    file_path: str
    command: str
    session_id: str

    def to_action(self, agent_id: str = "") -> ProposedAction:
        return ProposedAction(
            tool_name=self.tool_name,
            command_text=self.command,
            file_path=self.file_path,
            session_id=self.session_id,
            acting_agent_id=agent_id,
        )


def normalize_hook_payload(payload: dict[str, Any]) -> HookInput:
    """Flatten a decoded hook payload; absent fields become empty strings."""
    tool_input = payload.get("tool_input")
    if not isinstance(tool_input, dict):
        tool_input = {}
    file_path = ""
    for key in _PATH_KEYS:
        candidate = _text(tool_input.get(key)).strip()
        if candidate:
            file_path = candidate
            break
    return HookInput(
        tool_name=_text(payload.get("tool_name")).strip(),
        file_path=file_path,
        command=_text(tool_input.get("command")),
        session_id=_text(payload.get("session_id")).strip(),
    )


def parse_hook_input(raw: str) -> HookInput:
    try:
        payload = json.loads(raw) if raw.strip() else {}
    except json.JSONDecodeError as exc:
        raise HookInputError(f"hook input is not valid JSON: {exc.msg}") from exc
    if not isinstance(payload, dict):
        raise HookInputError("hook input must be a JSON object")
    return normalize_hook_payload(payload)
