"""Custom exceptions for the LifeRhythm agent."""

from typing import Any, Dict, List


class LifeRhythmError(Exception):
    """Base class for all agent errors."""
    pass


class NotConnectedError(LifeRhythmError):
    """Raised when the tool bridge or agent is used before connect()."""

    def __init__(self, message: str = "Not connected to MCP server. Call connect() first.") -> None:
        super().__init__(message)


class BridgeConnectionError(LifeRhythmError, ConnectionError):
    """Raised when the MCP server cannot be reached or the handshake fails."""
    pass


class ToolInvocationError(LifeRhythmError):
    """Raised when the MCP server fails a tool call.

    The failed call is already recorded in ``actions`` (with its error), so
    callers can see everything that ran before the failure.
    """

    def __init__(self, tool: str, tool_input: Dict[str, Any], actions: List[Any], reason: str) -> None:
        super().__init__(f"Tool '{tool}' failed: {reason}")
        self.tool = tool
        self.input = tool_input
        self.actions = actions


class MaxTurnsExceededError(LifeRhythmError):
    """Raised when the agent loop hits its turn cap without a final answer."""

    def __init__(self, max_turns: int) -> None:
        super().__init__(
            f"Agent exceeded maximum turns ({max_turns}). "
            "Aborting to prevent runaway tool calls."
        )
        self.max_turns = max_turns


class MalformedToolCallError(LifeRhythmError):
    """Raised when the model requests a tool call with unparseable arguments."""

    def __init__(self, tool: str, arguments: str, reason: str) -> None:
        super().__init__(f"Invalid arguments for tool '{tool}': {reason}")
        self.tool = tool
        self.arguments = arguments


class ConfigError(LifeRhythmError):
    """Raised when configuration is invalid."""
    pass
