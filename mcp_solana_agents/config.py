"""
Configuration models and environment loading.

Everything can be built in code, but `load_settings()` reads the usual
environment variables, after loading a `.env` file from the project root:

- RPC_ENDPOINT, PORT, HOST, LOG_LEVEL
- MCP_ENDPOINT, MCP_API_KEY, MCP_TRANSPORT
- MEMO_PROGRAM_ID, MEMO_INTERVAL
- MARKET_DEX, MARKETS (comma separated), MARKET_INTERVAL
- WALLET_SECRET_KEY (base58 keypair, optional)
"""

import os
from pathlib import Path
from typing import Any, Awaitable, Callable, List, Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError
from solders.keypair import Keypair

from .errors import ConfigError

DEFAULT_RPC_ENDPOINT = "https://api.mainnet-beta.solana.com"
DEFAULT_MODEL = "gpt-4"

Dex = Literal["raydium", "meteora", "orca", "pumpfun"]

# --- Models ---

class ModelConfig(BaseModel):
    """External model settings handed to tools through the execution context."""
    endpoint: str
    api_key: str = ""
    model: str = DEFAULT_MODEL


class McpConfig(ModelConfig):
    name: str = "mcp-solana-agents"
    transport: Literal["stdio", "sse"] = "stdio"

    def as_model_config(self) -> ModelConfig:
        return ModelConfig(endpoint=self.endpoint, api_key=self.api_key, model=self.model)


class MarketConfig(BaseModel):
    dex: Dex = "raydium"
    markets: List[str] = Field(default_factory=list) # Market addresses to watch
    interval: float = Field(60, gt=0) # Seconds between analysis runs


class MemoConfig(BaseModel):
    program_id: str = "" # The deployed memo program ID
    interval: float = Field(300, gt=0) # Seconds between memo runs


class AgentConfig(BaseModel):
    name: Optional[str] = None
    description: str = "" # Sent to MCP clients as the server instructions
    tools: List[str] = Field(default_factory=list) # Names copied from the orchestrator registry
    mcp: Optional[McpConfig] = None


class ToolConfig(BaseModel):
    """A tool defined by data plus a handler instead of a subclass."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str = Field(..., min_length=1)
    description: str = ""
    parameters: Any # an ObjectSchema
    handler: Callable[..., Awaitable[Any]]


class Settings(BaseModel):
    rpc_endpoint: str = DEFAULT_RPC_ENDPOINT
    mcp: Optional[McpConfig] = None
    market: MarketConfig = Field(default_factory=MarketConfig)
    memo: MemoConfig = Field(default_factory=MemoConfig)
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    wallet_secret_key: Optional[str] = Field(None, repr=False)

    def wallet(self) -> Optional[Keypair]:
        if not self.wallet_secret_key:
            return None
        try:
            return Keypair.from_base58_string(self.wallet_secret_key)
        except ValueError as e:
            raise ConfigError(f"WALLET_SECRET_KEY is not a valid base58 keypair: {e}") from e


# --- Environment ---

def _split_list(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


def load_settings(env_file: Optional[Path] = None) -> Settings:
    """Builds `Settings` from the environment, loading `.env` first if present."""
    dotenv_path = env_file or Path(__file__).parent.parent / ".env"
    load_dotenv(dotenv_path=dotenv_path)

    env = os.environ
    mcp_endpoint = env.get("MCP_ENDPOINT")
    try:
        return Settings(
            rpc_endpoint=env.get("RPC_ENDPOINT", DEFAULT_RPC_ENDPOINT),
            mcp=McpConfig(
                endpoint=mcp_endpoint,
                api_key=env.get("MCP_API_KEY", ""),
                transport=env.get("MCP_TRANSPORT", "stdio"),
            ) if mcp_endpoint else None,
            market=MarketConfig(
                dex=env.get("MARKET_DEX", "raydium"),
                markets=_split_list(env.get("MARKETS")),
                interval=env.get("MARKET_INTERVAL", 60),
            ),
            memo=MemoConfig(
                program_id=env.get("MEMO_PROGRAM_ID", ""),
                interval=env.get("MEMO_INTERVAL", 300),
            ),
            host=env.get("HOST", "0.0.0.0"),
            port=env.get("PORT", 3000),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
            wallet_secret_key=env.get("WALLET_SECRET_KEY") or None,
        )
    except PydanticValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
