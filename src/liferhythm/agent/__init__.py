"""Agent package for the LifeRhythm natural-language agent.

Keeps the tool-calling loop, the MCP bridge, the hosted-model decision
services and the date grounding helper in separate modules.
"""

from .agent import LifeRhythmAgent, serialize_result
from .bridge import MCPToolBridge, ToolBridge, build_server_env
from .date_context import build_date_context
from .decision import (
    AnthropicDecisionService,
    DecisionService,
    OpenAIDecisionService,
    build_decision_service,
)

__all__ = [
    "AnthropicDecisionService",
    "DecisionService",
    "LifeRhythmAgent",
    "MCPToolBridge",
    "OpenAIDecisionService",
    "ToolBridge",
    "build_date_context",
    "build_decision_service",
    "build_server_env",
    "serialize_result",
]
