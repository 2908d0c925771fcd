from typing import Any, Dict, List

from mcp.server.fastmcp.utilities.logging import get_logger
from solders.instruction import Instruction
from solders.pubkey import Pubkey
from solders.system_program import TransferParams as SystemTransferParams
from solders.system_program import transfer as system_transfer
from spl.token.constants import TOKEN_PROGRAM_ID
from spl.token.instructions import (
    TransferCheckedParams,
    create_associated_token_account,
    get_associated_token_address,
    transfer_checked,
)

from ..context import ExecutionContext
from ..schema import NumberSchema, ObjectSchema, PublicKeySchema
from ..tool import BaseTool
from .rpc import LAMPORTS_PER_SOL, call_rpc, send_instructions

logger = get_logger(__name__)


class TransferTool(BaseTool):
    def __init__(self):
        super().__init__(
            "transfer",
            "Transfer SOL or SPL tokens to another wallet",
            ObjectSchema({
                "to": PublicKeySchema("The recipient wallet address"),
                "amount": NumberSchema("The amount to transfer", positive=True),
                "tokenAddress": PublicKeySchema(
                    "Optional SPL token mint address. If not provided, transfers SOL"
                ).optional(),
            }),
        )

    async def run(self, params: Dict[str, Any], context: ExecutionContext) -> Dict[str, Any]:
        wallet = context.require_credential()
        recipient = Pubkey.from_string(params["to"])
        amount = params["amount"]
        token_address = params.get("tokenAddress")

        if not token_address:
            lamports = int(round(amount * LAMPORTS_PER_SOL))
            instruction = system_transfer(SystemTransferParams(
                from_pubkey=wallet.pubkey(), to_pubkey=recipient, lamports=lamports,
            ))
            logger.info(f"Transferring {lamports} lamports to {recipient}")
            signature = await send_instructions(context.connection, [instruction], wallet, [wallet])
            return {"signature": signature, "token": "SOL", "amount": amount}

        mint = Pubkey.from_string(token_address)
        source = get_associated_token_address(wallet.pubkey(), mint)
        dest = get_associated_token_address(recipient, mint)

        supply = await call_rpc("getTokenSupply", context.connection.get_token_supply(mint))
        decimals = supply.value.decimals
        dest_info = await call_rpc("getAccountInfo", context.connection.get_account_info(dest))

        instructions: List[Instruction] = []
        if dest_info.value is None:
            logger.info(f"Creating associated token account {dest} for {recipient}")
            instructions.append(create_associated_token_account(wallet.pubkey(), recipient, mint))
        instructions.append(transfer_checked(TransferCheckedParams(
            program_id=TOKEN_PROGRAM_ID,
            source=source,
            mint=mint,
            dest=dest,
            owner=wallet.pubkey(),
            amount=int(round(amount * 10 ** decimals)),
            decimals=decimals,
        )))

        logger.info(f"Transferring {amount} of {token_address} to {recipient}")
        signature = await send_instructions(context.connection, instructions, wallet, [wallet])
        return {"signature": signature, "token": token_address, "amount": amount}
