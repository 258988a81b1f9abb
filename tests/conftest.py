import copy
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List

import pytest


_root = Path(__file__).resolve().parents[1]
_src = _root / "src"
if _src.exists() and str(_src) not in sys.path:
    sys.path.insert(0, str(_src))

from liferhythm.models import Decision, ToolDescriptor  # noqa: E402
from liferhythm.settings import Settings  # noqa: E402


class FakeDecisionService:
    """Scripted decision service. Replays ``decisions``; repeats the last one when exhausted."""

    def __init__(self, decisions: List[Decision], events: List[str] | None = None) -> None:
        self.decisions = decisions
        self.events = events if events is not None else []
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    async def decide(self, system, tools, messages) -> Decision:
        self.calls.append(
            {"system": system, "tools": list(tools), "messages": copy.deepcopy(messages)}
        )
        self.events.append(f"decide:{len(self.calls)}")
        idx = min(len(self.calls), len(self.decisions)) - 1
        return self.decisions[idx]

    async def close(self) -> None:
        self.closed = True


class FakeBridge:
    """In-memory tool bridge recording every invocation."""

    def __init__(
        self,
        tools: List[ToolDescriptor] | None = None,
        result: Callable[[str, Dict[str, Any]], Any] | None = None,
        events: List[str] | None = None,
    ) -> None:
        self.tools = tools or []
        self.result = result or (lambda name, args: {"success": True})
        self.events = events if events is not None else []
        self.invocations: List[tuple] = []
        self.connected = False
        self.connect_count = 0

    @property
    def is_connected(self) -> bool:
        return self.connected

    async def connect(self) -> None:
        self.connected = True
        self.connect_count += 1

    async def disconnect(self) -> None:
        self.connected = False

    async def discover_tools(self) -> List[ToolDescriptor]:
        return list(self.tools)

    async def invoke(self, name: str, args: Dict[str, Any]) -> Any:
        self.invocations.append((name, args))
        self.events.append(f"invoke:{name}")
        return self.result(name, args)


def text_decision(text: str) -> Decision:
    return Decision(stop_reason="end_turn", content=[{"type": "text", "text": text}])


def tool_decision(*calls: tuple, text: str = "") -> Decision:
    content: List[Dict[str, Any]] = []
    if text:
        content.append({"type": "text", "text": text})
    for call_id, name, args in calls:
        content.append({"type": "tool_use", "id": call_id, "name": name, "input": args})
    return Decision(stop_reason="tool_use", content=content)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings isolated from the developer's environment and .env."""
    return Settings(
        _env_file=None,
        log_dir=tmp_path / "logs",
        mcp_server_path=tmp_path / "liferhythm-mcp",
        anthropic_api_key="test-key",
        openai_api_key="test-key",
    )


@pytest.fixture
def events() -> List[str]:
    return []


@pytest.fixture
def bridge(events: List[str]) -> FakeBridge:
    return FakeBridge(
        tools=[
            ToolDescriptor(
                name="create_item",
                description="Create an item",
                input_schema={"type": "object", "properties": {"title": {"type": "string"}}},
            )
        ],
        events=events,
    )
