from __future__ import annotations

import json
from dataclasses import replace
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from eth_abi import is_encodable_type
from eth_abi.exceptions import ABITypeError, ParseError
from eth_abi.grammar import normalize, parse
from eth_utils import keccak

from .errors import FatalConfigError
from .models import Argument, CallSignature
from .value_types import Hash32, Selector

# Embedded contract ABIs (function fragments as published by the contracts)
MINT_ABI = """[{"inputs":[{"internalType":"address","name":"_receiver","type":"address"},
{"internalType":"uint256","name":"_amount","type":"uint256"}],"name":"mint","outputs":[],
"stateMutability":"nonpayable","type":"function"}]"""

DEPOSIT_TOKEN1_DISTRIBUTION_ABI = """[{"inputs":[{"internalType":"uint256","name":"amount","type":"uint256"}],
"name":"depositToken1Distribution","outputs":[],"stateMutability":"nonpayable","type":"function"}]"""

TRANSFER_EVENT = "Transfer(address,address,uint256)"
TRANSFER_TOPIC = Hash32(keccak(text=TRANSFER_EVENT))   # 0xddf252ad...b3ef


def _abi_type(raw: Any, where: str) -> str:
    if not isinstance(raw, str) or not raw:
        raise FatalConfigError(f"{where}: missing type")
    if raw.startswith("tuple"):
        raise FatalConfigError(f"{where}: tuple arguments are not supported")
    try:
        t = normalize(raw)
        parse(t).validate()
    except (ParseError, ABITypeError) as e:
        raise FatalConfigError(f"{where}: bad ABI type {raw!r}: {e}") from e
    if not is_encodable_type(t):
        raise FatalConfigError(f"{where}: unsupported ABI type {raw!r}")
    return t

def _signature_from_fragment(frag: Any) -> CallSignature | None:
    if not isinstance(frag, dict):
        raise FatalConfigError(f"ABI entry is not an object: {frag!r}")
    if frag.get("type", "function") != "function":
        return None
    name = frag.get("name")
    inputs = frag.get("inputs")
    if not isinstance(name, str) or not name or not isinstance(inputs, list):
        raise FatalConfigError(f"function fragment needs 'name' and 'inputs': {frag!r}")
    args: list[Argument] = []
    for i, inp in enumerate(inputs):
        if not isinstance(inp, dict):
            raise FatalConfigError(f"{name}: input #{i} is not an object")
        arg = Argument(name=str(inp.get("name") or f"arg{i}"),
                       type=_abi_type(inp.get("type"), f"{name} input #{i}"))
        if any(a.name == arg.name for a in args):
            raise FatalConfigError(f"{name}: duplicate input name {arg.name!r}")
        args.append(arg)
    sig = CallSignature(selector=Selector(b""), name=name, argument_schema=tuple(args))
    return replace(sig, selector=Selector(keccak(text=sig.canonical)[:4]))


class SignatureRegistry:
    """Immutable lookup of call signatures by 4-byte selector, plus the Transfer topic."""

    __slots__ = ("_by_selector", "transfer_topic")

    def __init__(self, signatures: Iterable[CallSignature], transfer_topic: bytes = TRANSFER_TOPIC) -> None:
        by_sel: dict[bytes, CallSignature] = {}
        for sig in signatures:
            if len(sig.selector) != 4:
                raise FatalConfigError(f"{sig.name}: selector must be 4 bytes")
            if sig.selector in by_sel:
                raise FatalConfigError(
                    f"duplicate selector 0x{sig.selector.hex()} ({by_sel[sig.selector].name}, {sig.name})")
            by_sel[sig.selector] = sig
        if len(transfer_topic) != 32:
            raise FatalConfigError("transfer topic must be 32 bytes")
        self._by_selector: Mapping[bytes, CallSignature] = MappingProxyType(by_sel)
        self.transfer_topic = Hash32(bytes(transfer_topic))

    @classmethod
    def from_abi_json(cls, *abi_json: str) -> "SignatureRegistry":
        sigs: list[CallSignature] = []
        for doc in abi_json:
            try:
                fragments = json.loads(doc)
            except (TypeError, ValueError) as e:
                raise FatalConfigError(f"unparseable ABI JSON: {e}") from e
            if isinstance(fragments, dict):
                fragments = [fragments]
            if not isinstance(fragments, list):
                raise FatalConfigError("ABI JSON must be a list of fragments")
            for frag in fragments:
                sig = _signature_from_fragment(frag)
                if sig is not None:
                    sigs.append(sig)
        return cls(sigs)

    def lookup(self, selector: bytes) -> CallSignature | None:
        return self._by_selector.get(bytes(selector))

    def signatures(self) -> tuple[CallSignature, ...]:
        return tuple(self._by_selector.values())

    def __contains__(self, selector: object) -> bool:
        return isinstance(selector, (bytes, bytearray)) and bytes(selector) in self._by_selector

    def __len__(self) -> int: return len(self._by_selector)


def default_registry() -> SignatureRegistry:
    """mint(address,uint256) and depositToken1Distribution(uint256)."""
    return SignatureRegistry.from_abi_json(MINT_ABI, DEPOSIT_TOKEN1_DISTRIBUTION_ABI)
