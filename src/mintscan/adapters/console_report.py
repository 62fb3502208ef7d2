from __future__ import annotations
from typing import Any

from rich.console import Console

from ..domain.decoding import DEFAULT_DECIMALS, format_amount
from ..domain.models import BlockRange, DecodedCall, ScanRecord, ScanStats, TransferEvent
from ..domain.value_types import checksum, hex0x
from ..ports.report import ScanReport

SEPARATOR = "-" * 50

def _title(name: str) -> str:
    name = name.lstrip("_")
    return name[:1].upper() + name[1:]

def _value(abi_type: str, v: Any, decimals: int) -> str:
    if abi_type.startswith("uint") and isinstance(v, int):
        return format_amount(v, decimals)
    if isinstance(v, bytes):
        return hex0x(v)
    return str(v)

def format_call(call: DecodedCall, decimals: int = DEFAULT_DECIMALS) -> str:
    """`Mint - Receiver: 0x.., Amount: 2.000000`"""
    parts = [f"{_title(a.name)}: {_value(a.type, call.arguments[a.name], decimals)}"
             for a in call.signature.argument_schema]
    return f"{_title(call.signature.name)} - {', '.join(parts)}"

def format_transfer(ev: TransferEvent, decimals: int = DEFAULT_DECIMALS) -> str:
    return (f"Token Transfer - From: {ev.from_address}, To: {ev.to_address}, "
            f"Amount: {format_amount(ev.amount, decimals)}")


class ConsoleReport(ScanReport):
    def __init__(self, console: Console | None = None, decimals: int = DEFAULT_DECIMALS) -> None:
        self.console = console or Console()
        self.decimals = decimals

    def _line(self, text: str = "", style: str | None = None) -> None:
        self.console.print(text, style=style, markup=False, highlight=False, soft_wrap=True)

    def start(self, block_range: BlockRange) -> None:
        self._line(f"Searching from block {block_range.start} to {block_range.end}", style="bold")

    def progress(self, block_number: int) -> None:
        self._line(f"Processing block {block_number}", style="dim")

    def record(self, rec: ScanRecord) -> None:
        tx = rec.transaction
        self._line()
        self._line(f"Transaction in block {rec.block_number}:", style="bold")
        self._line(f"Hash: {hex0x(tx.hash)}")
        self._line(f"From: {checksum(tx.sender)}")
        self._line(f"To: {checksum(tx.to) if tx.to is not None else '-'}")
        if rec.call is not None:
            self._line(f"This is a {rec.call.signature.name} transaction")
            self._line(format_call(rec.call, self.decimals), style="green")
        else:
            self._line(f"Could not decode {rec.rule.label or 'call'} input: {rec.decode_error}", style="yellow")
        if not rec.receipt_ok:
            self._line("Receipt unavailable", style="yellow")
        for ev in rec.transfers:
            self._line(format_transfer(ev, self.decimals), style="cyan")
        self._line(SEPARATOR)

    def finish(self, stats: ScanStats) -> None:
        self._line(
            f"done: blocks_scanned={stats.blocks_scanned} blocks_failed={stats.blocks_failed} "
            f"matches={stats.matches} transfers={stats.transfers} "
            f"receipts_failed={stats.receipts_failed} decode_failed={stats.decode_failed}",
            style="bold",
        )
