"""Shared helpers for tools that talk to the Solana RPC node."""

from typing import Any, Awaitable, List, Sequence, TypeVar

import httpx
from solana.exceptions import SolanaRpcException
from solana.rpc.async_api import AsyncClient
from solana.rpc.core import RPCException
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.transaction import Transaction

from ..errors import ExternalServiceError

LAMPORTS_PER_SOL = 1_000_000_000

T = TypeVar("T")


async def call_rpc(description: str, request: Awaitable[T]) -> T:
    """Awaits one RPC request, reporting node or transport failures as `ExternalServiceError`."""
    try:
        return await request
    except (RPCException, SolanaRpcException, httpx.HTTPError, OSError) as e:
        raise ExternalServiceError(f"{description} failed: {e}") from e


async def send_instructions(
    connection: AsyncClient,
    instructions: Sequence[Instruction],
    payer: Keypair,
    signers: List[Keypair],
) -> str:
    """Signs the instructions into one transaction with a fresh blockhash and submits it."""
    blockhash_resp = await call_rpc("getLatestBlockhash", connection.get_latest_blockhash())
    blockhash = blockhash_resp.value.blockhash
    message = Message.new_with_blockhash(list(instructions), payer.pubkey(), blockhash)
    transaction = Transaction(signers, message, blockhash)
    send_resp = await call_rpc("sendTransaction", connection.send_transaction(transaction))
    return str(send_resp.value)


def parsed_data(account: Any) -> Any:
    """Returns the `parsed` payload of a jsonParsed account, or None for raw data."""
    if account is None:
        return None
    return getattr(account.data, "parsed", None)
