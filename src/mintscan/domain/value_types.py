from __future__ import annotations
from typing import NewType

from eth_utils import decode_hex, is_hex, remove_0x_prefix, to_checksum_address

Address  = NewType("Address", bytes)    # 20 raw bytes
Hash32   = NewType("Hash32", bytes)     # 32 raw bytes (tx hash, topic)
Selector = NewType("Selector", bytes)   # first 4 bytes of call input


def _hex_bytes(text: str, size: int | None, what: str) -> bytes:
    if not isinstance(text, str) or not is_hex(text.strip()):
        raise ValueError(f"invalid {what}: {text!r}")
    h = remove_0x_prefix(text.strip())
    if len(h) % 2: h = "0" + h
    b = decode_hex(h)
    if size is not None and len(b) != size:
        raise ValueError(f"invalid {what}: expected {size} bytes, got {len(b)}")
    return b

def to_address(text: str) -> Address: return Address(_hex_bytes(text, 20, "address"))
def to_hash32(text: str) -> Hash32: return Hash32(_hex_bytes(text, 32, "hash"))
def to_selector(text: str) -> Selector: return Selector(_hex_bytes(text, 4, "selector"))
def hex_to_bytes(text: str) -> bytes: return _hex_bytes(text, None, "hex data")

def checksum(addr: bytes) -> str:
    return to_checksum_address("0x" + addr[-20:].hex())

def hex0x(b: bytes) -> str:
    return "0x" + b.hex()
