"""agentgate exception hierarchy.

All agentgate-specific exceptions inherit from AgentGateError,
enabling structured error handling and cleaner catch clauses.
Decision functions never let these escape: they degrade to the
safe branch for the gate that hit them.
"""


class AgentGateError(Exception):
    """Base exception for all agentgate errors."""

    def __init__(self, message: str = "", *, retryable: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable


class ConfigError(AgentGateError):
    """Invalid or missing configuration."""


class DocumentError(AgentGateError):
    """A trust document or team registry exists but cannot be parsed."""

    def __init__(self, message: str = "", *, path: str = "", retryable: bool = True) -> None:
        super().__init__(message, retryable=retryable)
        self.path = path


class HookInputError(AgentGateError):
    """The hook runtime sent a record that is not a JSON object."""


class ArtifactError(AgentGateError):
    """Invalid artifact name, identifier or storage failure."""
