import json
import logging
from typing import Any, Dict, List, Protocol, Sequence, runtime_checkable

from anthropic import AsyncAnthropic
from openai import AsyncOpenAI

from ..exceptions import ConfigError, MalformedToolCallError
from ..models import Decision, ToolDescriptor
from ..settings import Settings

logger = logging.getLogger(__name__)


@runtime_checkable
class DecisionService(Protocol):
    """Hosted model that answers or asks for tool calls."""

    async def decide(
        self,
        system: str,
        tools: Sequence[ToolDescriptor],
        messages: List[Dict[str, Any]],
    ) -> Decision: ...

    async def close(self) -> None: ...


class AnthropicDecisionService:
    """Decision service backed by the Anthropic Messages API."""

    def __init__(self, api_key: str | None, model: str, max_tokens: int = 4096) -> None:
        self.model = model
        self.max_tokens = max_tokens
        self._client = AsyncAnthropic(api_key=api_key)

    async def decide(
        self,
        system: str,
        tools: Sequence[ToolDescriptor],
        messages: List[Dict[str, Any]],
    ) -> Decision:
        response = await self._client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            system=system,
            tools=[t.to_anthropic() for t in tools],
            messages=messages,
        )

        content: List[Dict[str, Any]] = []
        for block in response.content:
            if block.type == "text":
                content.append({"type": "text", "text": block.text})
            elif block.type == "tool_use":
                content.append(
                    {"type": "tool_use", "id": block.id, "name": block.name, "input": block.input}
                )
        return Decision(stop_reason=response.stop_reason or "end_turn", content=content)

    async def close(self) -> None:
        await self._client.close()


def to_openai_messages(system: str, messages: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Translate block-style conversation messages into Chat Completions messages.

    Args:
        system: System instruction, sent as the first message.
        messages: Agent messages; content is either text or a list of
            ``text`` / ``tool_use`` / ``tool_result`` blocks.

    Returns:
        List[Dict[str, Any]]: OpenAI chat messages, tool results expanded into
            one ``role: tool`` message each.
    """
    out: List[Dict[str, Any]] = [{"role": "system", "content": system}]
    for msg in messages:
        content = msg["content"]
        if isinstance(content, str):
            out.append({"role": msg["role"], "content": content})
            continue

        if msg["role"] == "assistant":
            text = "".join(b.get("text", "") for b in content if b.get("type") == "text")
            tool_calls = [
                {
                    "id": b["id"],
                    "type": "function",
                    "function": {"name": b["name"], "arguments": json.dumps(b.get("input") or {})},
                }
                for b in content
                if b.get("type") == "tool_use"
            ]
            entry: Dict[str, Any] = {"role": "assistant", "content": text or None}
            if tool_calls:
                entry["tool_calls"] = tool_calls
            out.append(entry)
            continue

        for block in content:
            if block.get("type") == "tool_result":
                out.append(
                    {
                        "role": "tool",
                        "tool_call_id": block["tool_use_id"],
                        "content": block.get("content", ""),
                    }
                )
            elif block.get("type") == "text":
                out.append({"role": "user", "content": block.get("text", "")})
    return out


class OpenAIDecisionService:
    """Decision service backed by OpenAI-compatible chat completions."""

    def __init__(
        self,
        api_key: str | None,
        model: str,
        base_url: str | None = None,
        temperature: float = 0.0,
    ) -> None:
        self.model = model
        self.temperature = temperature
        self._client = AsyncOpenAI(api_key=api_key, base_url=base_url)

    async def decide(
        self,
        system: str,
        tools: Sequence[ToolDescriptor],
        messages: List[Dict[str, Any]],
    ) -> Decision:
        all_tools = [t.to_openai() for t in tools]
        response = await self._client.chat.completions.create(
            model=self.model,
            messages=to_openai_messages(system, messages),
            tools=all_tools if all_tools else None,
            temperature=self.temperature,
        )

        choice = response.choices[0]
        message = choice.message
        content: List[Dict[str, Any]] = []
        if message.content:
            content.append({"type": "text", "text": message.content})
        for tc in message.tool_calls or []:
            try:
                args = json.loads(tc.function.arguments) if tc.function.arguments else {}
            except json.JSONDecodeError as e:
                logger.error("Invalid tool arguments for %s: %s", tc.function.name, e)
                raise MalformedToolCallError(tc.function.name, tc.function.arguments, str(e)) from e
            content.append(
                {
                    "type": "tool_use",
                    "id": tc.id,
                    "name": tc.function.name,
                    "input": args,
                }
            )

        # Some compatible backends report finish_reason "stop" alongside tool calls.
        stop_reason = "tool_use" if message.tool_calls else "end_turn"
        logger.debug("finish_reason=%s -> stop_reason=%s", choice.finish_reason, stop_reason)
        return Decision(stop_reason=stop_reason, content=content)

    async def close(self) -> None:
        await self._client.close()


def build_decision_service(settings: Settings) -> DecisionService:
    """Construct the decision service named by ``settings.provider``."""
    if settings.provider == "anthropic":
        return AnthropicDecisionService(
            api_key=settings.anthropic_api_key,
            model=settings.model,
            max_tokens=settings.max_tokens,
        )
    if settings.provider == "openai":
        return OpenAIDecisionService(
            api_key=settings.openai_api_key,
            model=settings.model,
            base_url=settings.openai_base_url,
            temperature=settings.temperature,
        )
    raise ConfigError(f"Unknown decision provider: {settings.provider}")
