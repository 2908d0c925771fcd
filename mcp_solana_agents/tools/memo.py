from typing import Any, Dict

from mcp.server.fastmcp.utilities.logging import get_logger
from solders.instruction import AccountMeta, Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.system_program import CreateAccountParams, create_account

from ..context import ExecutionContext
from ..schema import ObjectSchema, PublicKeySchema, StringSchema
from ..tool import BaseTool
from .rpc import call_rpc, send_instructions

logger = get_logger(__name__)

MEMO_LENGTH_PREFIX = 8 # Bytes reserved ahead of the memo content


class WriteMemoTool(BaseTool):
    """Stores memo content in a fresh account owned by the memo program."""

    def __init__(self):
        super().__init__(
            "writeMemo",
            "Write a memo to the on-chain memo program",
            ObjectSchema({
                "programId": PublicKeySchema("The memo program ID"),
                "content": StringSchema("The memo content to write"),
            }),
        )

    async def run(self, params: Dict[str, Any], context: ExecutionContext) -> Dict[str, Any]:
        wallet = context.require_credential()
        program_id = Pubkey.from_string(params["programId"])
        data = params["content"].encode("utf-8")

        memo_account = Keypair()
        space = len(data) + MEMO_LENGTH_PREFIX
        rent = await call_rpc(
            "getMinimumBalanceForRentExemption",
            context.connection.get_minimum_balance_for_rent_exemption(space),
        )

        create_ix = create_account(CreateAccountParams(
            from_pubkey=wallet.pubkey(),
            to_pubkey=memo_account.pubkey(),
            lamports=rent.value,
            space=space,
            owner=program_id,
        ))
        write_ix = Instruction(
            program_id,
            data,
            [
                AccountMeta(memo_account.pubkey(), is_signer=True, is_writable=True),
                AccountMeta(wallet.pubkey(), is_signer=True, is_writable=False),
            ],
        )

        signature = await send_instructions(
            context.connection, [create_ix, write_ix], wallet, [wallet, memo_account]
        )
        logger.info(f"Wrote {len(data)} byte memo to {memo_account.pubkey()} ({signature})")
        return {
            "signature": signature,
            "programId": params["programId"],
            "memoAccount": str(memo_account.pubkey()),
            "content": params["content"],
        }
