from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Any

from .domain.errors import ConfigError
from .domain.models import MatchRule
from .domain.value_types import Address, to_address, to_selector

DEFAULT_RPC_URL = "https://mainnet-v934-fireblocks.mainnet-20240103-ase1.zq1.network"
RPC_URL_ENV = "MINTSCAN_RPC_URL"

CONTRACT_1 = "0xE9df5b4b1134A3aadf693Db999786699B016239e"
MINT_ACTION = "0x40C10F19"

CONTRACT_2 = "0x7bAefF8996101048Ba905dB8695C8f77ae4e7631"
DEPOSIT_TOKEN1_DISTRIBUTION_ACTION = "0x0800BA03"

TOKEN_OF_INTEREST = "0xE9df5b4b1134A3aadf693Db999786699B016239e"


def parse_match_rule(text: str) -> MatchRule:
    """`ADDRESS:SELECTOR[:LABEL]` -> MatchRule."""
    parts = text.split(":", 2)
    if len(parts) < 2:
        raise ConfigError(f"contract rule must look like ADDRESS:SELECTOR[:LABEL], got {text!r}")
    try:
        addr = to_address(parts[0])
        sel = to_selector(parts[1])
    except ValueError as e:
        raise ConfigError(f"bad contract rule {text!r}: {e}") from e
    return MatchRule(contract_address=addr, selector=sel, label=parts[2] if len(parts) == 3 else "")

def parse_address(text: str, what: str = "address") -> Address:
    try:
        return to_address(text)
    except ValueError as e:
        raise ConfigError(f"bad {what} {text!r}: {e}") from e

def default_contracts() -> tuple[MatchRule, ...]:
    return (
        parse_match_rule(f"{CONTRACT_1}:{MINT_ACTION}:mint"),
        parse_match_rule(f"{CONTRACT_2}:{DEPOSIT_TOKEN1_DISTRIBUTION_ACTION}:depositToken1Distribution"),
    )


@dataclass(slots=True, frozen=True)
class Settings:
    rpc_url: str = DEFAULT_RPC_URL
    contracts: tuple[MatchRule, ...] = field(default_factory=default_contracts)
    token_address: Address = field(default_factory=lambda: parse_address(TOKEN_OF_INTEREST))
    display_decimals: int = 6       # fixed token scale (10**6); never read on-chain
    lookback_days: int = 30
    block_time_s: int = 30          # assumed average block time
    pace_s: float = 0.05            # courtesy delay after every block
    concurrency: int = 1
    progress_every: int = 1_000
    timeout_s: float = 20

    def __post_init__(self) -> None:
        if not self.rpc_url:
            raise ConfigError("rpc_url is required")
        if not self.contracts:
            raise ConfigError("at least one contract rule is required")
        if self.display_decimals < 0:
            raise ConfigError("display decimals must be >= 0")
        if self.lookback_days < 0:
            raise ConfigError("lookback days must be >= 0")
        if self.block_time_s <= 0:
            raise ConfigError("block time must be > 0")
        if self.pace_s < 0:
            raise ConfigError("pace must be >= 0")
        if self.concurrency < 1:
            raise ConfigError("concurrency must be >= 1")
        if self.timeout_s <= 0:
            raise ConfigError("timeout must be > 0")

    def with_overrides(self, **overrides: Any) -> "Settings":
        """Copy with every non-None override applied (CLI options default to None)."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})
