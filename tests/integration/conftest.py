import sys
from pathlib import Path
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from solders.hash import Hash as Blockhash
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature

# Ensure the package can be imported without installing it
ROOT_DIR = Path(__file__).parent.parent.parent
sys.path.insert(0, str(ROOT_DIR))

from mcp_solana_agents.context import ExecutionContext


# --- Mock response helpers ---

def rpc_value(value: Any) -> MagicMock:
    """An RPC response object whose `.value` is `value`."""
    resp = MagicMock()
    resp.value = value
    return resp


def signature_status(block_time: Optional[int]) -> MagicMock:
    status = MagicMock()
    status.signature = Signature.default()
    status.block_time = block_time
    return status


def transaction_touching(program_ids: List[str]) -> MagicMock:
    """A getTransaction response whose message references `program_ids`."""
    tx = MagicMock()
    tx.transaction.transaction.message.account_keys = [Pubkey.from_string(p) for p in program_ids]
    return rpc_value(tx)


def parsed_account(parsed: Dict[str, Any]) -> MagicMock:
    account = MagicMock()
    account.data.parsed = parsed
    return account


# --- Fixtures ---

@pytest.fixture(scope="function")
def mock_connection() -> AsyncMock:
    """An AsyncClient stand-in with a valid blockhash and a fixed send signature."""
    connection = AsyncMock()
    connection.get_latest_blockhash.return_value = rpc_value(MagicMock(blockhash=Blockhash.default()))
    connection.send_transaction.return_value = rpc_value(Signature.default())
    return connection


@pytest.fixture(scope="function")
def wallet() -> Keypair:
    return Keypair()


@pytest.fixture(scope="function")
def context(mock_connection: AsyncMock) -> ExecutionContext:
    """Context without a wallet."""
    return ExecutionContext(connection=mock_connection)


@pytest.fixture(scope="function")
def signing_context(mock_connection: AsyncMock, wallet: Keypair) -> ExecutionContext:
    return ExecutionContext(connection=mock_connection, credential=wallet)


@pytest.fixture(scope="function")
def address() -> str:
    return str(Keypair().pubkey())
