from __future__ import annotations
import asyncio, logging
from typing import Sequence

from ..domain.decoding import decode_input, extract_transfers
from ..domain.errors import DecodeError, FatalConfigError
from ..domain.models import BlockRange, MatchRule, RawBlock, RawTransaction, ScanRecord, ScanStats
from ..domain.registry import SignatureRegistry
from ..domain.value_types import hex0x
from ..ports.report import ScanReport
from ..ports.rpc import ChainReader

logger = logging.getLogger(__name__)


def validate_rules(registry: SignatureRegistry, rules: Sequence[MatchRule]) -> None:
    """Every configured action selector must have a decoding schema."""
    if not rules:
        raise FatalConfigError("no contract match rules configured")
    for rule in rules:
        if rule.selector not in registry:
            raise FatalConfigError(
                f"no signature registered for selector {hex0x(rule.selector)} ({rule.label or hex0x(rule.contract_address)})")

def match_transaction(tx: RawTransaction, rules: Sequence[MatchRule]) -> MatchRule | None:
    if tx.to is None:
        return None
    for rule in rules:
        if rule.matches(tx):
            return rule
    return None


async def _fetch_block(rpc: ChainReader, number: int) -> RawBlock | None:
    try:
        return await rpc.get_block(number, full_transactions=True)
    except Exception as e:
        logger.warning("Error fetching block %d: %s", number, e)
        return None

async def _inspect(
    rpc: ChainReader, registry: SignatureRegistry, token_address: bytes,
    block_number: int, tx: RawTransaction, rule: MatchRule, stats: ScanStats,
) -> ScanRecord:
    call = decode_error = None
    try:
        call = decode_input(registry, tx.input)
    except DecodeError as e:
        stats.decode_failed += 1
        decode_error = str(e)
        logger.warning("Error decoding input of %s: %s", hex0x(tx.hash), e)

    transfers: tuple = ()
    receipt_ok = True
    try:
        receipt = await rpc.get_receipt(tx.hash)
    except Exception as e:
        stats.receipts_failed += 1
        receipt_ok = False
        logger.warning("Error getting transaction receipt %s: %s", hex0x(tx.hash), e)
    else:
        transfers = tuple(extract_transfers(receipt, token_address, registry.transfer_topic))
        stats.transfers += len(transfers)

    return ScanRecord(block_number=block_number, transaction=tx, rule=rule, call=call,
                      transfers=transfers, decode_error=decode_error, receipt_ok=receipt_ok)


async def scan_blocks(
    *,
    rpc: ChainReader,
    registry: SignatureRegistry,
    block_range: BlockRange,
    match_rules: Sequence[MatchRule],
    token_address: bytes,
    report: ScanReport,
    pace_s: float = 0.05,
    concurrency: int = 1,
    progress_every: int = 1_000,
) -> ScanStats:
    """
    Walk `block_range` from end to start, report every transaction that hits one
    of `match_rules` together with its decoded call and the token's Transfer logs.

    Block/receipt/decode failures are logged and skipped. With `concurrency > 1`
    up to that many blocks are fetched at once; results are still processed in
    descending block order.
    """
    if concurrency < 1:
        raise ValueError(f"concurrency must be >= 1 (got {concurrency})")
    validate_rules(registry, match_rules)
    rules = tuple(match_rules)
    stats = ScanStats()
    report.start(block_range)

    numbers = block_range.descending()
    for i in range(0, len(numbers), concurrency):
        window = numbers[i:i + concurrency]
        if len(window) == 1:
            blocks = [await _fetch_block(rpc, window[0])]
        else:
            # gather keeps argument order -> descending block order is preserved
            blocks = await asyncio.gather(*(_fetch_block(rpc, n) for n in window))

        for number, block in zip(window, blocks):
            if progress_every and number % progress_every == 0:
                report.progress(number)
            if block is None:
                stats.blocks_failed += 1
                stats.failed_blocks.append(number)
            else:
                stats.blocks_scanned += 1
                for tx in block.transactions:
                    rule = match_transaction(tx, rules)
                    if rule is None:
                        continue
                    stats.matches += 1
                    rec = await _inspect(rpc, registry, token_address, number, tx, rule, stats)
                    report.record(rec)
            if pace_s > 0:
                await asyncio.sleep(pace_s)

    report.finish(stats)
    return stats
