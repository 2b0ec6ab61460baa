"""agentgate: risk, autonomy, tool-policy and ownership gates for agent actions."""

__version__ = "0.1.0"
