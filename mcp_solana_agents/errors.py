"""Exception taxonomy shared by tools, agents and the orchestrator."""

from typing import List, Optional


class AgentKitError(Exception):
    """Base class for every error raised by this package."""


class ValidationError(AgentKitError):
    """Tool parameters did not match the tool's schema."""

    def __init__(self, message: str, fields: Optional[List[str]] = None):
        super().__init__(message)
        self.fields = fields or []


class ToolNotFoundError(AgentKitError):
    def __init__(self, name: str):
        super().__init__(f"Tool {name} not found")
        self.name = name


class CommandParseError(AgentKitError):
    """A dispatch command was not a JSON object with a `tool` key."""


class ExternalServiceError(AgentKitError):
    """The Solana RPC node (or the network in front of it) failed."""


class UnimplementedError(AgentKitError):
    pass


class SchemaShapeError(AgentKitError):
    pass


class ToolExecutionError(AgentKitError):
    """A tool ran but could not complete (no wallet, unknown market, ...)."""


class ConfigError(AgentKitError):
    pass
