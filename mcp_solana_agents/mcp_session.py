"""
Exposes a tool registry over MCP with FastMCP.

FastMCP builds a tool's input model from the signature of the function it is
given, so each registered tool gets a small async handler whose signature is
generated from the tool's flattened schema. Every parameter defaults to None
(MCP does not track required fields); the tool's own schema still decides what
is required when the call comes in.
"""

import asyncio
import inspect
import json
from typing import Any, Callable, List, Optional

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from mcp.server.fastmcp.utilities.logging import get_logger

from .config import McpConfig
from .context import ExecutionContext
from .errors import AgentKitError
from .shape import McpShape, to_mcp_shape
from .tool import Tool, ToolRegistry

logger = get_logger(__name__)


def make_handler(tool: Tool, context: ExecutionContext, shape: McpShape) -> Callable[..., Any]:
    """Wraps `tool` in a keyword-only coroutine FastMCP can introspect and call."""

    async def handler(**arguments: Any) -> str:
        params = {key: value for key, value in arguments.items() if value is not None}
        try:
            result = await tool.execute(params, context)
        except AgentKitError as e:
            logger.error(f"Error executing tool {tool.name}: {e}")
            raise ToolError(str(e)) from e
        return json.dumps(result, indent=2, default=str)

    handler.__signature__ = inspect.Signature([
        inspect.Parameter(
            key,
            inspect.Parameter.KEYWORD_ONLY,
            default=None,
            annotation=Optional[shape.fields[key].python_type()],
        )
        for key in shape.keys
    ])
    handler.__name__ = tool.name
    handler.__doc__ = tool.description
    return handler


class McpSession:
    """One FastMCP server plus the background task running its transport."""

    def __init__(self, config: McpConfig, instructions: Optional[str] = None):
        self.config = config
        self.server = FastMCP(name=config.name, instructions=instructions)
        self.registered_tools: List[str] = []
        self._task: Optional[asyncio.Task] = None

    def register_tools(self, registry: ToolRegistry, context: ExecutionContext) -> None:
        for tool in registry.list_all():
            shape = to_mcp_shape(tool.get_schema())
            self.server.add_tool(
                make_handler(tool, context, shape),
                name=tool.name,
                description=tool.description,
            )
            self.registered_tools.append(tool.name)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.config.transport == "sse":
            serve = self.server.run_sse_async
        else:
            serve = self.server.run_stdio_async

        self._task = asyncio.create_task(serve(), name=f"mcp-{self.config.name}")
        self._task.add_done_callback(self._on_transport_done)
        logger.info(f"MCP server started over {self.config.transport}")
        logger.info(f"Registered tools: {', '.join(self.registered_tools)}")

    def _on_transport_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"MCP transport stopped with an error: {error!r}")
        else:
            logger.info("MCP transport closed")
