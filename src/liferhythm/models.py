from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass(frozen=True)
class ToolDescriptor:
    """A tool advertised by the MCP server."""

    name: str
    description: str = ""
    input_schema: Dict[str, Any] = field(
        default_factory=lambda: {"type": "object", "properties": {}}
    )

    def to_anthropic(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.input_schema,
        }

    def to_openai(self) -> Dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.input_schema,
            },
        }


@dataclass(frozen=True)
class ToolCall:
    """One tool-invocation request from the decision service."""

    id: str
    name: str
    input: Dict[str, Any]


@dataclass
class Decision:
    """A decision-service reply: ordered text / tool_use content blocks."""

    stop_reason: str
    content: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "".join(
            block.get("text", "") for block in self.content if block.get("type") == "text"
        )

    @property
    def tool_calls(self) -> List[ToolCall]:
        return [
            ToolCall(id=block["id"], name=block["name"], input=block.get("input") or {})
            for block in self.content
            if block.get("type") == "tool_use"
        ]

    @property
    def is_terminal(self) -> bool:
        return self.stop_reason == "end_turn" or not self.tool_calls


@dataclass(frozen=True)
class Action:
    """A completed tool invocation. ``error`` is set only when the call failed."""

    tool: str
    input: Dict[str, Any]
    result: Any = None
    error: str | None = None


@dataclass
class Session:
    """Per-call conversation state (messages, turn counter, action log)."""

    messages: List[Dict[str, Any]] = field(default_factory=list)
    turns: int = 0
    actions: List[Action] = field(default_factory=list)


@dataclass(frozen=True)
class AgentResult:
    response: str
    actions: List[Action]
