from __future__ import annotations
from ..domain.models import BlockRange

SECONDS_PER_DAY = 24 * 60 * 60

def blocks_per_day(block_time_s: int) -> int:
    if block_time_s <= 0:
        raise ValueError(f"block time must be > 0 (got {block_time_s})")
    return SECONDS_PER_DAY // block_time_s

def lookback_range(head: int, lookback_days: int, block_time_s: int) -> BlockRange:
    """[head - days*blocks_per_day, head], clamped at genesis."""
    if lookback_days < 0:
        raise ValueError(f"lookback days must be >= 0 (got {lookback_days})")
    start = head - lookback_days * blocks_per_day(block_time_s)
    return BlockRange(start=max(0, start), end=head)

def resolve_range(head: int, lookback_days: int, block_time_s: int,
                  from_block: int | None = None, to_block: int | None = None) -> BlockRange:
    """Lookback window ending at the head, with either end optionally pinned."""
    end = head if to_block is None else min(int(to_block), head)
    if from_block is not None:
        return BlockRange(start=int(from_block), end=end)
    return lookback_range(end, lookback_days, block_time_s)
