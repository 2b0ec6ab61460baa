"""Tests for error hierarchy."""

from agentgate.errors import (
    AgentGateError,
    ArtifactError,
    ConfigError,
    DocumentError,
    HookInputError,
)


def test_hierarchy() -> None:
    assert issubclass(ConfigError, AgentGateError)
    assert issubclass(DocumentError, AgentGateError)
    assert issubclass(HookInputError, AgentGateError)
    assert issubclass(ArtifactError, AgentGateError)


def test_retryable_default() -> None:
    assert AgentGateError("test").retryable is False
    assert DocumentError("test").retryable is True
    assert HookInputError("test").retryable is False


def test_error_attributes() -> None:
    err = DocumentError("bad json", path="/w/alpha/.autonomy-state")
    assert str(err) == "bad json"
    assert err.path == "/w/alpha/.autonomy-state"


def test_catch_as_agentgate_error() -> None:
    try:
        raise DocumentError("test")
    except AgentGateError as exc:
        assert exc.retryable is True
