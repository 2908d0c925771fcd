from typing import Optional

from solana.rpc.async_api import AsyncClient
from solders.keypair import Keypair

from .config import ModelConfig
from .errors import ToolExecutionError


class ExecutionContext:
    """
    What every tool invocation receives: the RPC connection, the signing wallet
    (if any) and the external model settings.

    One context is shared by reference between all tools of an agent. The
    wallet only changes through `set_credential`. Tools that sign read it once
    per call through `require_credential`, so a swap during a call only affects
    later calls.
    """

    def __init__(self, connection: AsyncClient, credential: Optional[Keypair] = None,
                 model: Optional[ModelConfig] = None):
        self.connection = connection
        self.model = model
        self._credential = credential

    @property
    def credential(self) -> Optional[Keypair]:
        return self._credential

    def set_credential(self, credential: Optional[Keypair]) -> None:
        self._credential = credential

    def require_credential(self) -> Keypair:
        credential = self._credential
        if credential is None:
            raise ToolExecutionError("No wallet available in context")
        return credential
