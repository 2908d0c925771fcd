"""
Top-level manager: agents, a shared tool registry and the periodic market jobs.

The orchestrator's registry is its own namespace. Agents get their own registry
and only receive the tools named in their `AgentConfig.tools`.
"""

import asyncio
import json
from typing import Any, Awaitable, Callable, Dict, List, Optional

from mcp.server.fastmcp.utilities.logging import get_logger
from solana.rpc.async_api import AsyncClient
from solders.keypair import Keypair

from .agent import Agent
from .config import AgentConfig, Settings, ToolConfig
from .context import ExecutionContext
from .tool import ConfiguredTool, Tool, ToolRegistry

logger = get_logger(__name__)


class PeriodicLoop:
    """Runs `iteration` now and then every `interval` seconds, never overlapping itself."""

    def __init__(self, name: str, iteration: Callable[[], Awaitable[Any]], interval: float):
        self.name = name
        self.iteration = iteration
        self.interval = interval
        self._task: Optional[asyncio.Task] = None
        self._first_run: Optional[asyncio.Future] = None

    @property
    def task(self) -> Optional[asyncio.Task]:
        return self._task

    async def start(self) -> None:
        """Returns once the first iteration has finished (or the loop was stopped)."""
        self._first_run = asyncio.get_running_loop().create_future()
        self._task = asyncio.create_task(self._run(), name=self.name)
        await asyncio.wait({self._first_run, self._task}, return_when=asyncio.FIRST_COMPLETED)

    async def _run(self) -> None:
        while True:
            try:
                await self.iteration()
            except Exception as e:
                logger.exception(f"{self.name} iteration failed: {e}")
            if not self._first_run.done():
                self._first_run.set_result(None)
            await asyncio.sleep(self.interval)

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None
        if self._first_run is not None and not self._first_run.done():
            self._first_run.cancel()


class Orchestrator:
    def __init__(self, settings: Settings, connection: Optional[AsyncClient] = None,
                 tools: Optional[List[Tool]] = None):
        self.settings = settings
        self.agents: Dict[str, Agent] = {}
        self.tools = ToolRegistry(tools)
        self.context = ExecutionContext(
            connection=connection if connection is not None else AsyncClient(settings.rpc_endpoint),
            credential=settings.wallet(),
            model=settings.mcp.as_model_config() if settings.mcp else None,
        )
        self._market_loop: Optional[PeriodicLoop] = None
        self._memo_loop: Optional[PeriodicLoop] = None
        logger.info(f"Orchestrator initialized with connection to {settings.rpc_endpoint}")

    # --- Agents ---

    def create_agent(self, config: AgentConfig) -> Agent:
        name = config.name or f"agent-{len(self.agents)}"
        try:
            agent = Agent(config, self.connection, credential=self.context.credential)
            for tool_name in config.tools:
                agent.register_tool(self.tools.require(tool_name))
        except Exception as e:
            logger.exception(f"Failed to create agent {name}: {e}")
            raise
        self.agents[name] = agent
        logger.info(f"Created agent: {name}")
        return agent

    def get_agent(self, name: str) -> Optional[Agent]:
        return self.agents.get(name)

    async def initialize(self) -> None:
        """Initializes every agent, stopping at the first failure."""
        logger.info("Initializing all agents")
        try:
            for agent in self.agents.values():
                await agent.initialize()
        except Exception as e:
            logger.exception(f"Failed to initialize agents: {e}")
            raise
        logger.info("All agents initialized")

    # --- Tools ---

    def register_tool(self, tool: Tool) -> None:
        self.tools.register(tool)
        logger.info(f"Tool registered: {tool.get_name()}")

    def create_tool(self, config: ToolConfig) -> Tool:
        tool = ConfiguredTool(config.name, config.description, config.parameters, config.handler)
        self.register_tool(tool)
        return tool

    def get_tool(self, name: str) -> Optional[Tool]:
        return self.tools.lookup(name)

    async def execute_tool(self, name: str, params: Any) -> Any:
        try:
            tool = self.tools.require(name)
            logger.info(f"Executing tool: {name}")
            result = await tool.execute(params, self.context)
        except Exception as e:
            logger.exception(f"Tool execution failed: {e}")
            raise
        logger.info(f"Tool execution completed: {name}")
        return result

    # --- Wallet and connection ---

    def set_wallet(self, wallet: Keypair) -> None:
        """Sets the signer for the orchestrator and every agent it has created."""
        self.context.set_credential(wallet)
        for agent in self.agents.values():
            agent.context.set_credential(wallet)
        logger.info(f"Wallet set to: {wallet.pubkey()}")

    def get_wallet(self) -> Optional[Keypair]:
        return self.context.credential

    @property
    def connection(self) -> AsyncClient:
        return self.context.connection

    # --- Periodic jobs ---

    @property
    def market_analysis_task(self) -> Optional[asyncio.Task]:
        return self._market_loop.task if self._market_loop else None

    @property
    def memo_logging_task(self) -> Optional[asyncio.Task]:
        return self._memo_loop.task if self._memo_loop else None

    async def start_market_analysis(self) -> None:
        if self._market_loop is not None:
            logger.warning("Market analysis is already running")
            return
        logger.info("Starting market analysis")
        self._market_loop = PeriodicLoop(
            "market-analysis", self.analyze_markets, self.settings.market.interval
        )
        await self._market_loop.start()

    def stop_market_analysis(self) -> None:
        if self._market_loop is not None:
            self._market_loop.stop()
            self._market_loop = None
            logger.info("Stopped market analysis")

    async def start_memo_logging(self) -> None:
        if self._memo_loop is not None:
            logger.warning("Memo logging is already running")
            return
        logger.info("Starting memo logging")
        self._memo_loop = PeriodicLoop("memo-logging", self.analyze_markets, self.settings.memo.interval)
        await self._memo_loop.start()

    def stop_memo_logging(self) -> None:
        if self._memo_loop is not None:
            self._memo_loop.stop()
            self._memo_loop = None
            logger.info("Stopped memo logging")

    def _market_params(self, market: str) -> Dict[str, Any]:
        return {"dex": self.settings.market.dex, "marketAddress": market}

    def _memo_params(self, content: Any) -> Dict[str, Any]:
        return {"programId": self.settings.memo.program_id, "content": json.dumps(content)}

    async def analyze_markets(self) -> List[Dict[str, Any]]:
        """Analyzes each configured market and writes one memo per analysis."""
        analyses: List[Dict[str, Any]] = []
        try:
            for market in self.settings.market.markets:
                analysis = await self.execute_tool("analyzeMarket", self._market_params(market))
                await self.execute_tool("writeMemo", self._memo_params(analysis))
                analyses.append(analysis)
        except Exception as e:
            logger.exception(f"Market analysis failed: {e}")
        return analyses
