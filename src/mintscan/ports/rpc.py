# mintscan/ports/rpc.py
from __future__ import annotations

from typing import Protocol
from ..domain.models import RawBlock, Receipt


class ChainReader(Protocol):
    """Port defining the contract for the Ethereum JSON-RPC data source.

    Implementations validate raw payloads and raise RPCError on any failure.
    """

    async def latest_block(self) -> int:
        """Return the latest block number as an integer."""

    async def get_block(self, number: int, full_transactions: bool = True) -> RawBlock:
        """Return block `number` with its transactions, in block order."""

    async def get_receipt(self, tx_hash: bytes) -> Receipt:
        """Return the receipt (with logs) of a mined transaction."""

    async def aclose(self) -> None:
        """Release the underlying transport."""
