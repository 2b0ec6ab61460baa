import logging

import structlog

from agentgate.logging import bind_context, clear_context, configure_logging


def test_configure_logging_routes_to_stderr() -> None:
    root = logging.getLogger()
    saved = list(root.handlers), root.level
    try:
        configure_logging("debug", json_output=True)
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        handler = root.handlers[0]
        assert isinstance(handler, logging.StreamHandler)
        assert isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter)
    finally:
        root.handlers[:] = saved[0]
        root.setLevel(saved[1])


def test_bind_and_clear_context() -> None:
    bind_context(session_id="s-1", agent_id="agent-a")
    assert structlog.contextvars.get_contextvars() == {"session_id": "s-1", "agent_id": "agent-a"}
    clear_context()
    assert structlog.contextvars.get_contextvars() == {}


def test_empty_context_values_are_not_bound() -> None:
    bind_context(session_id="", agent_id="agent-a")
    assert structlog.contextvars.get_contextvars() == {"agent_id": "agent-a"}
    clear_context()


def test_component_strips_package_prefix() -> None:
    from agentgate.logging import _add_component

    event = _add_component(None, "info", {"event": "x", "logger": "agentgate.policy.gate"})
    assert event == {"event": "x", "component": "policy.gate"}
