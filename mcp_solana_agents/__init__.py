"""
MCP Solana Agents Package

Agents that hold a named set of Solana tools and either dispatch JSON commands
to them directly or expose them to MCP (Model Context Protocol) clients.

Main components:
- tool.py / schema.py / shape.py: tool contract, registry, parameter schemas
  and their flattening for MCP registration
- tools/: balance, token balances, transfer, memo and market analysis tools
- agent.py / orchestrator.py: agents, the shared registry and periodic jobs
- server.py: HTTP front end
"""

from .agent import Agent
from .config import AgentConfig, MarketConfig, McpConfig, MemoConfig, ModelConfig, Settings, ToolConfig
from .context import ExecutionContext
from .errors import (
    AgentKitError,
    CommandParseError,
    ConfigError,
    ExternalServiceError,
    SchemaShapeError,
    ToolExecutionError,
    ToolNotFoundError,
    UnimplementedError,
    ValidationError,
)
from .orchestrator import Orchestrator
from .shape import McpShape, to_mcp_shape
from .tool import BaseTool, ConfiguredTool, Tool, ToolRegistry

__version__ = "0.1.0"
