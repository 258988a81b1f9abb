"""LifeRhythm intelligence layer.

Wraps the LifeRhythm MCP server with natural language understanding: a hosted
model reads a conversational update, decides which MCP tools to call, and the
agent executes those calls and feeds the results back until the model answers.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from ..exceptions import MaxTurnsExceededError, NotConnectedError, ToolInvocationError
from ..models import Action, AgentResult, Session, ToolDescriptor
from ..settings import Settings, get_settings
from .bridge import MCPToolBridge, ToolBridge
from .date_context import build_date_context
from .decision import DecisionService, build_decision_service

logger = logging.getLogger(__name__)


def serialize_result(result: Any) -> str:
    """JSON-encode a tool result for the tool_result block sent back to the model."""
    if hasattr(result, "model_dump"):
        return json.dumps(result.model_dump(mode="json", by_alias=True, exclude_none=True))
    return json.dumps(result, default=str)


class LifeRhythmAgent:
    """Turns one natural-language update into MCP tool calls, bounded by a turn cap."""

    def __init__(
        self,
        bridge: ToolBridge | None = None,
        decision_service: DecisionService | None = None,
        settings: Settings | None = None,
        max_turns: int | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.bridge = bridge or MCPToolBridge(
            server_path=self.settings.mcp_server_path,
            sheet_id=self.settings.sheet_id,
            command=self.settings.mcp_server_command,
            args=self.settings.server_args(),
        )
        self.max_turns = max_turns if max_turns is not None else self.settings.max_turns
        self.system_prompt = self.settings.agent_system_prompt
        self.tools: List[ToolDescriptor] = []
        self._decision_service = decision_service

    @property
    def decision_service(self) -> DecisionService:
        # Built lazily so constructing an agent never needs API credentials.
        if self._decision_service is None:
            self._decision_service = build_decision_service(self.settings)
        return self._decision_service

    async def connect(self) -> List[ToolDescriptor]:
        """Connect to the MCP server and cache its tools. Must be called before process()."""
        await self.bridge.connect()
        self.tools = await self.bridge.discover_tools()
        return self.tools

    async def disconnect(self) -> None:
        """Disconnect from the MCP server. Safe to call when not connected."""
        await self.bridge.disconnect()
        self.tools = []

    async def close(self) -> None:
        """Disconnect and release the decision-service client."""
        await self.disconnect()
        if self._decision_service is not None:
            await self._decision_service.close()

    async def process(self, utterance: str, now: datetime | None = None) -> AgentResult:
        """Process a natural language update.

        Args:
            utterance: Conversational input from the user.
            now: Reference instant for date grounding (default: current UTC time).

        Returns:
            AgentResult: Final model text and the ordered list of actions taken.

        Raises:
            NotConnectedError: connect() has not been called.
            ToolInvocationError: The MCP server failed a tool call.
            MaxTurnsExceededError: No final answer within ``max_turns`` rounds.
        """
        if not self.bridge.is_connected:
            raise NotConnectedError()

        now = now or datetime.now(timezone.utc)
        user_message = f"{build_date_context(now)}\n\n{utterance}"
        session = Session(messages=[{"role": "user", "content": user_message}])

        while session.turns < self.max_turns:
            session.turns += 1
            logger.debug("Turn %d/%d", session.turns, self.max_turns)

            decision = await self.decision_service.decide(
                self.system_prompt, self.tools, session.messages
            )

            if decision.is_terminal:
                logger.info(
                    "Finished after %d turn(s), %d action(s)", session.turns, len(session.actions)
                )
                return AgentResult(response=decision.text.strip(), actions=session.actions)

            session.messages.append({"role": "assistant", "content": decision.content})

            tool_results: List[Dict[str, Any]] = []
            for call in decision.tool_calls:
                result = await self._invoke(session, call.name, call.input)
                tool_results.append(
                    {
                        "type": "tool_result",
                        "tool_use_id": call.id,
                        "content": serialize_result(result),
                    }
                )

            session.messages.append({"role": "user", "content": tool_results})

        raise MaxTurnsExceededError(self.max_turns)

    async def _invoke(self, session: Session, name: str, args: Dict[str, Any]) -> Any:
        logger.info("Executing tool: %s", name)
        try:
            result = await self.bridge.invoke(name, args)
        except NotConnectedError:
            raise
        except Exception as e:
            session.actions.append(Action(tool=name, input=args, error=str(e)))
            raise ToolInvocationError(name, args, session.actions, str(e)) from e
        session.actions.append(Action(tool=name, input=args, result=result))
        return result
