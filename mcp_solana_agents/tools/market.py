"""
Market analysis across the Solana DEXes we know about.

The DEX is detected from the program IDs touched by the market's recent
transactions, falling back to the owner of the market account. Liquidity and
price are not decoded from the pool accounts yet and are reported as 0; for
Raydium markets `volume24h` counts the transactions seen in the last 24 hours.
"""

import asyncio
import time
from typing import Any, Dict, List, Optional

from mcp.server.fastmcp.utilities.logging import get_logger
from solders.pubkey import Pubkey

from ..context import ExecutionContext
from ..errors import ToolExecutionError
from ..schema import ObjectSchema, PublicKeySchema
from ..tool import BaseTool
from .rpc import call_rpc

logger = get_logger(__name__)

# Known DEX program IDs, checked in this order
DEX_PROGRAM_IDS = {
    "raydium": "675kPX9MHTjS2zt1qfr1NYHuzeLXfQM9H24wFSUt1Mp8",
    "meteora": "M2mx93ekt1fmXSVkTrUL9xVFHkmME8HTUi5Cyc5aF7K",
    "orca": "9W959DqEETiGZocYWCQPaJ6sBmUzgfxXfqGeTEdp3aQP",
    "pumpfun": "PFUNNzqmGKMwHbTeaJTYxDHcq5pVkiVJHqQ3FbxFueh",
}

DETECTION_SIGNATURE_LIMIT = 20
VOLUME_SIGNATURE_LIMIT = 100
ONE_DAY_SECONDS = 24 * 60 * 60


def _account_keys(tx: Any) -> List[str]:
    """Account keys of a base64-encoded getTransaction result, as strings."""
    if tx is None:
        return []
    message = tx.transaction.transaction.message
    return [str(key) for key in message.account_keys]


def _match_dex(program_ids: List[str]) -> Optional[str]:
    for dex, program_id in DEX_PROGRAM_IDS.items():
        if program_id in program_ids:
            return dex
    return None


class AnalyzeMarketTool(BaseTool):
    def __init__(self):
        super().__init__(
            "analyzeMarket",
            "Analyze a specific DEX market for trading activity and liquidity",
            ObjectSchema({
                "marketAddress": PublicKeySchema("The market address to analyze"),
            }),
        )

    async def run(self, params: Dict[str, Any], context: ExecutionContext) -> Dict[str, Any]:
        market = Pubkey.from_string(params["marketAddress"])

        dex = await self.detect_dex(market, context)
        if dex is None:
            raise ToolExecutionError(f"No supported DEX found for market: {market}")
        logger.info(f"Market {market} trades on {dex}")

        account = await call_rpc("getAccountInfo", context.connection.get_account_info(market))
        if account.value is None:
            raise ToolExecutionError(f"Market account not found: {market}")

        analysis = {
            "dex": dex,
            "marketAddress": str(market),
            "liquidity": 0,
            "volume24h": 0,
            "price": 0,
            "timestamp": int(time.time() * 1000),
        }
        if dex == "raydium":
            analysis["volume24h"] = await self._recent_trade_count(market, context)
        return analysis

    async def detect_dex(self, market: Pubkey, context: ExecutionContext) -> Optional[str]:
        connection = context.connection
        signatures = await call_rpc(
            "getSignaturesForAddress",
            connection.get_signatures_for_address(market, limit=DETECTION_SIGNATURE_LIMIT),
        )
        transactions = await asyncio.gather(*(
            call_rpc(
                "getTransaction",
                connection.get_transaction(
                    status.signature, encoding="base64", max_supported_transaction_version=0
                ),
            )
            for status in signatures.value
        ))

        for resp in transactions:
            dex = _match_dex(_account_keys(resp.value))
            if dex:
                return dex

        account = await call_rpc("getAccountInfo", connection.get_account_info(market))
        if account.value is None:
            raise ToolExecutionError(f"Token account not found: {market}")
        return _match_dex([str(account.value.owner)])

    async def _recent_trade_count(self, market: Pubkey, context: ExecutionContext) -> int:
        signatures = await call_rpc(
            "getSignaturesForAddress",
            context.connection.get_signatures_for_address(market, limit=VOLUME_SIGNATURE_LIMIT),
        )
        one_day_ago = time.time() - ONE_DAY_SECONDS
        # TODO: decode swap instructions to report traded amounts instead of a trade count
        return sum(
            1 for status in signatures.value
            if status.block_time is not None and status.block_time >= one_day_ago
        )
