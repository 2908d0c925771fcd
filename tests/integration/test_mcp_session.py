import inspect
import json
from typing import Optional
from unittest.mock import AsyncMock, patch

import pytest
from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError

from mcp_solana_agents.config import McpConfig
from mcp_solana_agents.context import ExecutionContext
from mcp_solana_agents.mcp_session import McpSession, make_handler
from mcp_solana_agents.shape import to_mcp_shape
from mcp_solana_agents.tool import ToolRegistry
from mcp_solana_agents.tools import GetBalanceTool, TransferTool

from .conftest import rpc_value

# Mark all tests in this module as asyncio
pytestmark = pytest.mark.asyncio


@pytest.fixture(scope="function")
def session() -> McpSession:
    return McpSession(McpConfig(endpoint="http://localhost:9000"))


async def test_handler_signature_follows_flattened_schema(context: ExecutionContext):
    tool = TransferTool()
    handler = make_handler(tool, context, to_mcp_shape(tool.get_schema()))

    parameters = inspect.signature(handler).parameters
    assert list(parameters) == ["to", "amount", "tokenAddress"]
    assert all(p.default is None for p in parameters.values())
    assert parameters["amount"].annotation == Optional[float]
    assert handler.__name__ == "transfer"


async def test_handler_runs_tool_and_returns_json(
    context: ExecutionContext, mock_connection: AsyncMock, address: str
):
    tool = GetBalanceTool()
    mock_connection.get_balance.return_value = rpc_value(500_000_000)
    handler = make_handler(tool, context, to_mcp_shape(tool.get_schema()))

    result = await handler(address=address, tokenAddress=None)

    assert json.loads(result) == {"balance": 0.5, "token": "SOL"}


async def test_handler_reports_tool_errors(context: ExecutionContext):
    tool = GetBalanceTool()
    handler = make_handler(tool, context, to_mcp_shape(tool.get_schema()))

    with pytest.raises(ToolError, match="address: Required"):
        await handler(address=None, tokenAddress=None)


async def test_register_tools_exposes_every_tool(session: McpSession, context: ExecutionContext):
    registry = ToolRegistry([GetBalanceTool(), TransferTool()])

    session.register_tools(registry, context)

    assert session.registered_tools == ["getBalance", "transfer"]
    listed = {tool.name: tool for tool in await session.server.list_tools()}
    assert set(listed) == {"getBalance", "transfer"}
    schema = listed["getBalance"].inputSchema
    assert set(schema["properties"]) == {"address", "tokenAddress"}
    assert schema.get("required", []) == []
    assert listed["transfer"].description == "Transfer SOL or SPL tokens to another wallet"


async def test_start_runs_configured_transport():
    session = McpSession(McpConfig(endpoint="http://localhost:9000", transport="sse"))

    with patch.object(FastMCP, "run_sse_async", new=AsyncMock()) as run_sse:
        await session.start()
        await session._task

    run_sse.assert_awaited_once()
    assert not session.running
