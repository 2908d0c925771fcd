from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, Iterator, List, Optional

from mcp.server.fastmcp.utilities.logging import get_logger

from .context import ExecutionContext
from .errors import ToolNotFoundError, UnimplementedError
from .schema import ObjectSchema

logger = get_logger(__name__)

Handler = Callable[[Dict[str, Any], ExecutionContext], Awaitable[Any]]


class Tool(ABC):
    """What every tool offers: a stable name, a description, a schema and `execute`."""

    @property
    @abstractmethod
    def name(self) -> str: ...

    @property
    @abstractmethod
    def description(self) -> str: ...

    @abstractmethod
    def get_schema(self) -> ObjectSchema: ...

    @abstractmethod
    async def execute(self, params: Any, context: ExecutionContext) -> Any: ...

    def get_name(self) -> str:
        return self.name


class BaseTool(Tool):
    """
    Holds the descriptor and validates parameters before doing any work.

    Subclasses implement `run`, which receives the validated parameters. The
    base `run` raises `UnimplementedError` so a tool that forgot to override it
    fails loudly instead of quietly returning nothing.
    """

    def __init__(self, name: str, description: str, parameters: ObjectSchema):
        if not name:
            raise ValueError("Tool name must not be empty")
        self._name = name
        self._description = description
        self._parameters = parameters

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    def get_schema(self) -> ObjectSchema:
        return self._parameters

    async def execute(self, params: Any, context: ExecutionContext) -> Any:
        validated = self._parameters.validate(params if params is not None else {})
        logger.debug(f"Running tool {self._name} with {validated}")
        return await self.run(validated, context)

    async def run(self, params: Dict[str, Any], context: ExecutionContext) -> Any:
        raise UnimplementedError(f"Tool {self._name} must implement run()")

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._name}>"


class ConfiguredTool(BaseTool):
    """A tool whose behaviour is a stored handler rather than a subclass."""

    def __init__(self, name: str, description: str, parameters: ObjectSchema, handler: Handler):
        super().__init__(name, description, parameters)
        self.handler = handler

    async def run(self, params: Dict[str, Any], context: ExecutionContext) -> Any:
        return await self.handler(params, context)


class ToolRegistry:
    """Tools keyed by name. Registering an existing name replaces the old tool."""

    def __init__(self, tools: Optional[List[Tool]] = None):
        self._tools: Dict[str, Tool] = {}
        for tool in tools or []:
            self.register(tool)

    def register(self, tool: Tool) -> None:
        name = tool.get_name()
        if name in self._tools:
            logger.debug(f"Replacing tool registered as {name}")
        self._tools[name] = tool

    def lookup(self, name: str) -> Optional[Tool]:
        return self._tools.get(name)

    def require(self, name: str) -> Tool:
        tool = self._tools.get(name)
        if tool is None:
            raise ToolNotFoundError(name)
        return tool

    def list_all(self) -> List[Tool]:
        return list(self._tools.values())

    def names(self) -> List[str]:
        return list(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[Tool]:
        return iter(self.list_all())

    def __len__(self) -> int:
        return len(self._tools)
