import pytest
from unittest.mock import AsyncMock, MagicMock

from eth_abi import encode

from mintscan.config import CONTRACT_1, CONTRACT_2, TOKEN_OF_INTEREST, default_contracts
from mintscan.domain.models import LogEntry, RawBlock, RawTransaction, Receipt
from mintscan.domain.registry import TRANSFER_TOPIC, default_registry
from mintscan.domain.value_types import to_address

MINT_SELECTOR = bytes.fromhex("40c10f19")
DEPOSIT_SELECTOR = bytes.fromhex("0800ba03")
RECEIVER = "0x" + "aa" * 20
SENDER = "0x" + "11" * 20


def tx_hash(n: int) -> bytes:
    return n.to_bytes(32, "big")

def make_tx(n: int, to: str | None, data: bytes, sender: str = SENDER) -> RawTransaction:
    return RawTransaction(hash=tx_hash(n), sender=to_address(sender),
                          to=to_address(to) if to else None, input=data)

def mint_input(receiver: str = RECEIVER, amount: int = 2_000_000) -> bytes:
    return MINT_SELECTOR + encode(["address", "uint256"], [receiver, amount])

def deposit_input(amount: int = 123_456_789) -> bytes:
    return DEPOSIT_SELECTOR + encode(["uint256"], [amount])

def address_topic(addr: str) -> bytes:
    return bytes(12) + to_address(addr)

def transfer_log(frm: str, to: str, amount: int, token: str = TOKEN_OF_INTEREST) -> LogEntry:
    return LogEntry(address=to_address(token),
                    topics=(TRANSFER_TOPIC, address_topic(frm), address_topic(to)),
                    data=amount.to_bytes(32, "big"))


@pytest.fixture
def registry():
    return default_registry()

@pytest.fixture
def rules():
    return default_contracts()

@pytest.fixture
def token():
    return to_address(TOKEN_OF_INTEREST)

@pytest.fixture
def contract1():
    return CONTRACT_1

@pytest.fixture
def contract2():
    return CONTRACT_2

@pytest.fixture
def report():
    return MagicMock()

@pytest.fixture
def rpc():
    """ChainReader double: every block empty, every receipt without logs."""
    m = MagicMock()
    m.get_block = AsyncMock(side_effect=lambda n, full_transactions=True: RawBlock(number=n))
    m.get_receipt = AsyncMock(side_effect=lambda h: Receipt(transaction_hash=h))
    m.latest_block = AsyncMock(return_value=100)
    m.aclose = AsyncMock()
    return m
