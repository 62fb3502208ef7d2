import pytest

from mintscan.application.planning import blocks_per_day, lookback_range, resolve_range
from mintscan.domain.models import BlockRange


def test_blocks_per_day():
    assert blocks_per_day(30) == 2_880
    assert blocks_per_day(15) == 5_760
    with pytest.raises(ValueError):
        blocks_per_day(0)

def test_thirty_day_window():
    r = lookback_range(head=10_000_000, lookback_days=30, block_time_s=30)
    assert r == BlockRange(start=10_000_000 - 86_400, end=10_000_000)
    assert r.span() == 86_401

def test_window_clamped_at_genesis():
    assert lookback_range(head=1_000, lookback_days=30, block_time_s=30) == BlockRange(0, 1_000)

def test_block_range_invariants():
    with pytest.raises(ValueError):
        BlockRange(start=10, end=9)
    with pytest.raises(ValueError):
        BlockRange(start=-1, end=9)
    assert list(BlockRange(3, 5).descending()) == [5, 4, 3]
    assert BlockRange(7, 7).span() == 1

def test_resolve_range_overrides():
    assert resolve_range(500, 1, 86_400) == BlockRange(499, 500)
    assert resolve_range(500, 30, 30, from_block=100) == BlockRange(100, 500)
    assert resolve_range(500, 30, 30, from_block=100, to_block=200) == BlockRange(100, 200)
    # never past the head
    assert resolve_range(500, 30, 30, from_block=100, to_block=900) == BlockRange(100, 500)
    with pytest.raises(ValueError):
        resolve_range(500, 30, 30, from_block=600)
