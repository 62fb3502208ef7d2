# mintscan/ports/report.py
from __future__ import annotations

from typing import Protocol
from ..domain.models import BlockRange, ScanRecord, ScanStats


class ScanReport(Protocol):
    """Port receiving the audit trail as the scan produces it (descending block order)."""

    def start(self, block_range: BlockRange) -> None: ...

    def progress(self, block_number: int) -> None: ...

    def record(self, rec: ScanRecord) -> None:
        """One matched transaction, with its decoded call and Transfer events."""

    def finish(self, stats: ScanStats) -> None: ...
