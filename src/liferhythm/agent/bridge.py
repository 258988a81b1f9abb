import logging
import os
from contextlib import AsyncExitStack
from pathlib import Path
from typing import Any, Dict, List, Mapping, Protocol, Sequence, runtime_checkable

from mcp import StdioServerParameters
from mcp.client.session import ClientSession
from mcp.client.stdio import stdio_client

from ..exceptions import BridgeConnectionError, NotConnectedError
from ..models import ToolDescriptor

logger = logging.getLogger(__name__)


# Only these variables reach the MCP subprocess. Never forward os.environ as a
# whole: it holds the model API keys.
PASSTHROUGH_ENV = (
    "PATH",
    "HOME",
    "GOOGLE_APPLICATION_CREDENTIALS",
    "GOOGLE_SERVICE_ACCOUNT_EMAIL",
    "GOOGLE_PRIVATE_KEY",
)


def build_server_env(sheet_id: str, environ: Mapping[str, str] | None = None) -> Dict[str, str]:
    """Build the allow-listed environment for the MCP server process.

    Args:
        sheet_id: Sheet the server should operate on (LIFERHYTHM_SHEET_ID).
        environ: Source environment, defaults to ``os.environ``.

    Returns:
        Dict[str, str]: Environment with unset variables omitted.
    """
    source = os.environ if environ is None else environ
    env = {name: source.get(name) for name in PASSTHROUGH_ENV}
    env["NODE_ENV"] = source.get("NODE_ENV") or "production"
    env["LIFERHYTHM_SHEET_ID"] = sheet_id
    return {k: v for k, v in env.items() if v is not None}


@runtime_checkable
class ToolBridge(Protocol):
    """Capability set the agent needs from a tool provider."""

    @property
    def is_connected(self) -> bool: ...

    async def connect(self) -> None: ...

    async def disconnect(self) -> None: ...

    async def discover_tools(self) -> List[ToolDescriptor]: ...

    async def invoke(self, name: str, args: Dict[str, Any]) -> Any: ...


class MCPToolBridge:
    """Tool bridge over a single MCP server spoken to via stdio."""

    def __init__(
        self,
        server_path: Path | str,
        sheet_id: str,
        command: str = "node",
        args: Sequence[str] = ("index.js",),
    ) -> None:
        self.server_path = Path(server_path).expanduser()
        self.sheet_id = sheet_id
        self.command = command
        self.args = list(args)
        self._stack: AsyncExitStack | None = None
        self._session: ClientSession | None = None

    @property
    def is_connected(self) -> bool:
        return self._session is not None

    def server_parameters(self) -> StdioServerParameters:
        return StdioServerParameters(
            command=self.command,
            args=self.args,
            env=build_server_env(self.sheet_id),
            cwd=str(self.server_path),
        )

    async def connect(self) -> None:
        """Spawn the MCP server and complete the initialize handshake. Idempotent."""
        if self._session is not None:
            return

        params = self.server_parameters()
        logger.info("Starting MCP server: %s %s (cwd=%s)", params.command, " ".join(params.args), params.cwd)

        stack = AsyncExitStack()
        try:
            read, write = await stack.enter_async_context(stdio_client(params))
            session = await stack.enter_async_context(ClientSession(read, write))
            await session.initialize()
        except Exception as e:
            await stack.aclose()
            raise BridgeConnectionError(f"Failed to connect to MCP server at {self.server_path}: {e}") from e

        self._stack = stack
        self._session = session
        logger.info("MCP session established")

    async def disconnect(self) -> None:
        """Close the session and stop the server process. Safe when not connected."""
        stack = self._stack
        self._stack = None
        self._session = None
        if stack is not None:
            await stack.aclose()
            logger.info("MCP session closed")

    async def discover_tools(self) -> List[ToolDescriptor]:
        """List the tools the server exposes.

        Returns:
            List[ToolDescriptor]: One descriptor per MCP tool, in server order.
        """
        if self._session is None:
            raise BridgeConnectionError("No active MCP connection; call connect() first.")

        tools_result = await self._session.list_tools()
        descriptors = [
            ToolDescriptor(
                name=tool.name,
                description=tool.description or "",
                input_schema=tool.inputSchema or {"type": "object", "properties": {}},
            )
            for tool in tools_result.tools
        ]
        logger.info("Discovered %d MCP tool(s)", len(descriptors))
        return descriptors

    async def invoke(self, name: str, args: Dict[str, Any]) -> Any:
        """Call one MCP tool and return its CallToolResult unchanged."""
        if self._session is None:
            raise NotConnectedError()
        logger.debug("Calling MCP tool %s", name)
        return await self._session.call_tool(name, args)
