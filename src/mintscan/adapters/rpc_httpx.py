from __future__ import annotations
import itertools, logging
from typing import Any

import httpx
from eth_utils import to_int

from ..domain.errors import RPCError
from ..domain.models import LogEntry, RawBlock, RawTransaction, Receipt
from ..domain.value_types import hex0x, hex_to_bytes, to_address, to_hash32
from ..ports.rpc import ChainReader

logger = logging.getLogger(__name__)

def _to_hex_block(n: int) -> str: return hex(int(n))
def _quantity(v: Any) -> int:
    if isinstance(v, int): return v
    return to_int(hexstr=v)

# ---------- payload -> typed records (all raw field access lives here) -------

def _parse_transaction(raw: Any) -> RawTransaction | None:
    if not isinstance(raw, dict):
        return None     # hash-only block body
    try:
        to = raw.get("to")
        return RawTransaction(
            hash=to_hash32(raw["hash"]),
            sender=to_address(raw["from"]),
            to=to_address(to) if to else None,
            input=hex_to_bytes(raw.get("input") or raw.get("data") or "0x"),
        )
    except (KeyError, TypeError, ValueError) as e:
        logger.debug("dropping malformed transaction %r: %s", raw.get("hash"), e)
        return None

def _parse_log(raw: Any) -> LogEntry | None:
    try:
        return LogEntry(
            address=to_address(raw["address"]),
            topics=tuple(hex_to_bytes(t) for t in raw.get("topics") or ()),
            data=hex_to_bytes(raw.get("data") or "0x"),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        logger.debug("dropping malformed log entry: %s", e)
        return None

def parse_block(raw: Any) -> RawBlock:
    if not isinstance(raw, dict):
        raise RPCError(f"unexpected block payload: {type(raw).__name__}")
    try:
        number = _quantity(raw["number"])
        txs = raw.get("transactions") or []
    except (KeyError, TypeError, ValueError) as e:
        raise RPCError(f"malformed block payload: {e}") from e
    typed = (_parse_transaction(t) for t in txs)
    return RawBlock(number=number, transactions=tuple(t for t in typed if t is not None))

def parse_receipt(raw: Any) -> Receipt:
    if not isinstance(raw, dict):
        raise RPCError(f"unexpected receipt payload: {type(raw).__name__}")
    try:
        tx_hash = to_hash32(raw["transactionHash"])
    except (KeyError, TypeError, ValueError) as e:
        raise RPCError(f"malformed receipt payload: {e}") from e
    logs = raw.get("logs")
    typed = (_parse_log(rl) for rl in (logs if isinstance(logs, list) else []))
    return Receipt(transaction_hash=tx_hash, logs=tuple(l for l in typed if l is not None))


class HttpxRPC(ChainReader):
    def __init__(self, rpc_url: str, timeout_s: float = 20, client: httpx.AsyncClient | None = None) -> None:
        self.rpc_url = rpc_url
        self.client = client or httpx.AsyncClient(
            http2=True,
            timeout=httpx.Timeout(timeout_s),
        )
        self._ids = itertools.count(1)

    async def _call(self, method: str, params: list[Any]) -> Any:
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        try:
            r = await self.client.post(self.rpc_url, json=payload)
            r.raise_for_status()
            data = r.json()
        except httpx.HTTPError as e:
            raise RPCError(f"{method} transport error: {e}") from e
        except ValueError as e:
            raise RPCError(f"{method} returned invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise RPCError(f"{method} returned unexpected payload")
        if "error" in data:
            err = data["error"]
            msg = err.get("message") if isinstance(err, dict) else str(err)
            code = err.get("code") if isinstance(err, dict) else None
            raise RPCError(f"{method} RPC error code={code} message={msg}")
        return data.get("result")

    async def latest_block(self) -> int:
        res = await self._call("eth_blockNumber", [])
        try:
            return _quantity(res)
        except (TypeError, ValueError) as e:
            raise RPCError(f"eth_blockNumber returned {res!r}") from e

    async def get_block(self, number: int, full_transactions: bool = True) -> RawBlock:
        res = await self._call("eth_getBlockByNumber", [_to_hex_block(number), full_transactions])
        if res is None:
            raise RPCError(f"block {number} not found")
        return parse_block(res)

    async def get_receipt(self, tx_hash: bytes) -> Receipt:
        res = await self._call("eth_getTransactionReceipt", [hex0x(tx_hash)])
        if res is None:
            raise RPCError(f"receipt for {hex0x(tx_hash)} not found")
        return parse_receipt(res)

    async def aclose(self) -> None:
        await self.client.aclose()
