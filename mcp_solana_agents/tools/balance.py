import asyncio
from typing import Any, Dict

from mcp.server.fastmcp.utilities.logging import get_logger
from solana.rpc.types import TokenAccountOpts
from solders.pubkey import Pubkey
from spl.token.constants import TOKEN_PROGRAM_ID

from ..context import ExecutionContext
from ..errors import ExternalServiceError
from ..schema import ObjectSchema, PublicKeySchema
from ..tool import BaseTool
from .rpc import LAMPORTS_PER_SOL, call_rpc, parsed_data

logger = get_logger(__name__)


class GetBalanceTool(BaseTool):
    def __init__(self):
        super().__init__(
            "getBalance",
            "Get the balance of SOL or an SPL token for a given wallet address",
            ObjectSchema({
                "address": PublicKeySchema("The wallet address to check"),
                "tokenAddress": PublicKeySchema("Optional SPL token mint address").optional(),
            }),
        )

    async def run(self, params: Dict[str, Any], context: ExecutionContext) -> Dict[str, Any]:
        wallet = Pubkey.from_string(params["address"])
        token_address = params.get("tokenAddress")
        connection = context.connection

        if not token_address:
            resp = await call_rpc("getBalance", connection.get_balance(wallet))
            return {"balance": resp.value / LAMPORTS_PER_SOL, "token": "SOL"}

        mint = Pubkey.from_string(token_address)
        accounts = await call_rpc(
            "getTokenAccountsByOwner",
            connection.get_token_accounts_by_owner(wallet, TokenAccountOpts(mint=mint)),
        )
        if not accounts.value:
            return {"balance": 0, "token": token_address}

        balance = await call_rpc(
            "getTokenAccountBalance",
            connection.get_token_account_balance(accounts.value[0].pubkey),
        )
        return {"balance": balance.value.ui_amount or 0, "token": token_address}


class GetTokenBalancesTool(BaseTool):
    def __init__(self):
        super().__init__(
            "getTokenBalances",
            "Get all token balances (including SOL) for a given wallet address",
            ObjectSchema({
                "address": PublicKeySchema("The wallet address to check"),
            }),
        )

    async def run(self, params: Dict[str, Any], context: ExecutionContext) -> Dict[str, Any]:
        wallet = Pubkey.from_string(params["address"])
        connection = context.connection

        sol = await call_rpc("getBalance", connection.get_balance(wallet))
        accounts = await call_rpc(
            "getTokenAccountsByOwner",
            connection.get_token_accounts_by_owner_json_parsed(
                wallet, TokenAccountOpts(program_id=TOKEN_PROGRAM_ID)
            ),
        )

        tokens = await asyncio.gather(
            *(self._describe(keyed.account, context) for keyed in accounts.value)
        )
        return {"sol": sol.value / LAMPORTS_PER_SOL, "tokens": list(tokens)}

    async def _describe(self, account: Any, context: ExecutionContext) -> Dict[str, Any]:
        info = parsed_data(account)["info"]
        mint = info["mint"]
        token_amount = info["tokenAmount"]
        amount = int(token_amount["amount"])

        name = mint
        symbol = "UNKNOWN"
        decimals = int(token_amount.get("decimals", 0))

        try:
            mint_resp = await call_rpc(
                "getAccountInfo",
                context.connection.get_account_info_json_parsed(Pubkey.from_string(mint)),
            )
            mint_data = parsed_data(mint_resp.value)
            if isinstance(mint_data, dict) and mint_data.get("type") == "mint":
                mint_info = mint_data.get("info", {})
                decimals = int(mint_info.get("decimals", decimals))
                name = mint_info.get("name") or name
                symbol = mint_info.get("symbol") or symbol
        except ExternalServiceError as e:
            logger.warning(f"Failed to fetch metadata for token {mint}: {e}")

        return {
            "tokenAddress": mint,
            "name": name,
            "symbol": symbol,
            "balance": amount / (10 ** decimals),
            "decimals": decimals,
        }
