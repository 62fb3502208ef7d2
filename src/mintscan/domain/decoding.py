from __future__ import annotations

from decimal import Context, Decimal
from typing import Any

from eth_abi import decode as abi_decode
from eth_abi.exceptions import DecodingError
from eth_utils import to_checksum_address

from .errors import MalformedArguments, UnknownSelector
from .models import DecodedCall, Receipt, TransferEvent
from .registry import TRANSFER_TOPIC, SignatureRegistry

DEFAULT_DECIMALS = 6    # fixed display scale of the token, NOT read on-chain
_CTX = Context(prec=100)  # uint256 needs 78 digits

# ---------- call input -------------------------------------------------------

def decode_call(registry: SignatureRegistry, selector: bytes, body: bytes) -> DecodedCall:
    """
    Decode ABI-encoded call arguments for `selector`.
    Raises UnknownSelector / MalformedArguments; amounts stay raw integers.
    """
    sig = registry.lookup(selector)
    if sig is None:
        raise UnknownSelector(bytes(selector))
    try:
        values = abi_decode(list(sig.types), bytes(body))
    except (DecodingError, OverflowError, ValueError) as e:
        raise MalformedArguments(f"{sig.name}: {e}") from e
    if len(values) != len(sig.argument_schema):
        raise MalformedArguments(f"{sig.name}: expected {len(sig.argument_schema)} values, got {len(values)}")
    args: dict[str, Any] = {
        a.name: to_checksum_address(v) if a.type == "address" else v
        for a, v in zip(sig.argument_schema, values)
    }
    return DecodedCall(signature=sig, arguments=args)

def decode_input(registry: SignatureRegistry, data: bytes) -> DecodedCall:
    if len(data) < 4:
        raise MalformedArguments(f"call input too short ({len(data)} bytes)")
    return decode_call(registry, data[:4], data[4:])

# ---------- Transfer logs (32B word slicing, no eth_abi) ---------------------

def _addr_from_word(w: bytes) -> str:
    return to_checksum_address("0x" + w[-20:].hex())

def extract_transfers(receipt: Receipt, token_address: bytes,
                      transfer_topic: bytes = TRANSFER_TOPIC) -> list[TransferEvent]:
    """Transfer(address,address,uint256) events emitted by `token_address`; bad entries skipped."""
    token = bytes(token_address)
    out: list[TransferEvent] = []
    for entry in receipt.logs:
        topics = entry.topics
        if len(topics) < 3 or topics[0] != transfer_topic:
            continue
        if bytes(entry.address) != token:
            continue
        if len(topics[1]) != 32 or len(topics[2]) != 32:
            continue
        # empty data reads as amount 0
        out.append(TransferEvent(
            from_address=_addr_from_word(topics[1]),
            to_address=_addr_from_word(topics[2]),
            amount=int.from_bytes(entry.data, "big"),
        ))
    return out

# ---------- fixed-point display ----------------------------------------------

def scale_amount(raw: int, decimals: int = DEFAULT_DECIMALS) -> Decimal:
    return Decimal(int(raw)).scaleb(-decimals, context=_CTX)

def format_amount(raw: int, decimals: int = DEFAULT_DECIMALS) -> str:
    q = Decimal(1).scaleb(-decimals)
    return f"{scale_amount(raw, decimals).quantize(q, context=_CTX):f}"
