import json
from typing import Any, Dict, Optional, Tuple

from mcp.server.fastmcp.utilities.logging import get_logger
from solana.rpc.async_api import AsyncClient
from solders.keypair import Keypair

from .config import AgentConfig
from .context import ExecutionContext
from .errors import CommandParseError
from .mcp_session import McpSession
from .tool import Tool, ToolRegistry

logger = get_logger(__name__)

MCP_RUNNING_MESSAGE = "MCP server is running and handling tool execution"


class Agent:
    """
    A named set of tools sharing one execution context.

    Without an MCP endpoint the agent dispatches JSON commands of the form
    ``{"tool": name, "params": {...}}`` itself. With one, `initialize` hands
    every tool to an MCP server and the server's clients do the calling.
    """

    def __init__(self, config: AgentConfig, connection: AsyncClient,
                 credential: Optional[Keypair] = None):
        self.config = config
        self.tools = ToolRegistry()
        self.context = ExecutionContext(
            connection=connection,
            credential=credential,
            model=config.mcp.as_model_config() if config.mcp else None,
        )
        self.session: Optional[McpSession] = None

    @property
    def name(self) -> Optional[str]:
        return self.config.name

    def register_tool(self, tool: Tool) -> None:
        self.tools.register(tool)

    async def initialize(self) -> None:
        """Starts the MCP server when configured. Calling this twice starts a second server."""
        if not self.config.mcp:
            return
        session = McpSession(self.config.mcp, instructions=self.config.description or None)
        session.register_tools(self.tools, self.context)
        await session.start()
        self.session = session

    async def execute(self, command: str) -> str:
        """Runs one JSON command and returns the JSON result, or `{"error": ...}` on any failure."""
        if self.session is not None:
            return MCP_RUNNING_MESSAGE

        try:
            tool_name, params = self._parse_command(command)
            tool = self.tools.require(tool_name)
            result = await tool.execute(params, self.context)
            return json.dumps(result, default=str)
        except Exception as e:
            logger.exception(f"Error executing tool: {e}")
            return json.dumps({"error": str(e) or type(e).__name__})

    @staticmethod
    def _parse_command(command: str) -> Tuple[str, Dict[str, Any]]:
        try:
            payload = json.loads(command)
        except (TypeError, ValueError) as e:
            raise CommandParseError(f"Command is not valid JSON: {e}") from e
        if not isinstance(payload, dict):
            raise CommandParseError("Command must be a JSON object")

        tool_name = payload.get("tool")
        if not tool_name or not isinstance(tool_name, str):
            raise CommandParseError("Command is missing the 'tool' name")

        params = payload.get("params") or {}
        return tool_name, params
