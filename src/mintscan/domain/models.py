from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Mapping

from .value_types import Address, Hash32, Selector

@dataclass(slots=True, frozen=True)
class BlockRange:
    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < 0:
            raise ValueError(f"block numbers must be >= 0 (got {self.start}..{self.end})")
        if self.start > self.end:
            raise ValueError(f"start ({self.start}) must be <= end ({self.end})")

    def span(self) -> int: return self.end - self.start + 1

    def descending(self) -> range:
        """Block numbers from `end` down to `start`, inclusive."""
        return range(self.end, self.start - 1, -1)

# ---------- chain data (validated at the RPC boundary) -----------------------

@dataclass(slots=True, frozen=True)
class RawTransaction:
    hash: Hash32
    sender: Address
    to: Address | None      # None for contract creation
    input: bytes

    @property
    def selector(self) -> Selector: return Selector(self.input[:4])

@dataclass(slots=True, frozen=True)
class RawBlock:
    number: int
    transactions: tuple[RawTransaction, ...] = ()

@dataclass(slots=True, frozen=True)
class LogEntry:
    address: Address
    topics: tuple[bytes, ...]
    data: bytes

@dataclass(slots=True, frozen=True)
class Receipt:
    transaction_hash: Hash32
    logs: tuple[LogEntry, ...] = ()

# ---------- signatures & decoded values --------------------------------------

@dataclass(slots=True, frozen=True)
class Argument:
    name: str
    type: str

@dataclass(slots=True, frozen=True)
class CallSignature:
    selector: Selector
    name: str
    argument_schema: tuple[Argument, ...]

    @property
    def canonical(self) -> str:
        return f"{self.name}({','.join(a.type for a in self.argument_schema)})"

    @property
    def types(self) -> tuple[str, ...]: return tuple(a.type for a in self.argument_schema)

@dataclass(slots=True, frozen=True)
class DecodedCall:
    signature: CallSignature
    arguments: Mapping[str, Any]    # schema order; amounts unscaled

@dataclass(slots=True, frozen=True)
class TransferEvent:
    from_address: str               # checksum
    to_address: str                 # checksum
    amount: int                     # raw, unscaled

# ---------- scan -------------------------------------------------------------

@dataclass(slots=True, frozen=True)
class MatchRule:
    contract_address: Address
    selector: Selector
    label: str = ""

    def matches(self, tx: RawTransaction) -> bool:
        return tx.to is not None and tx.to == self.contract_address and tx.selector == self.selector

@dataclass(slots=True, frozen=True)
class ScanRecord:
    block_number: int
    transaction: RawTransaction
    rule: MatchRule
    call: DecodedCall | None
    transfers: tuple[TransferEvent, ...] = ()
    decode_error: str | None = None
    receipt_ok: bool = True

@dataclass(slots=True)
class ScanStats:
    blocks_scanned: int = 0
    blocks_failed: int = 0
    matches: int = 0
    receipts_failed: int = 0
    decode_failed: int = 0
    transfers: int = 0
    failed_blocks: list[int] = field(default_factory=list)
