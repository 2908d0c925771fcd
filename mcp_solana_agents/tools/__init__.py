"""Built-in Solana tools."""

from typing import List

from ..tool import Tool
from .balance import GetBalanceTool, GetTokenBalancesTool
from .market import AnalyzeMarketTool
from .memo import WriteMemoTool
from .transfer import TransferTool


def default_tools() -> List[Tool]:
    """Fresh instances of every built-in tool."""
    return [
        GetBalanceTool(),
        GetTokenBalancesTool(),
        TransferTool(),
        WriteMemoTool(),
        AnalyzeMarketTool(),
    ]


__all__ = [
    "AnalyzeMarketTool",
    "GetBalanceTool",
    "GetTokenBalancesTool",
    "TransferTool",
    "WriteMemoTool",
    "default_tools",
]
