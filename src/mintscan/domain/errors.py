from __future__ import annotations


class MintscanError(Exception):
    """Base class for every error raised by mintscan itself."""


class FatalConfigError(MintscanError):
    """An embedded signature schema could not be parsed; nothing can be decoded."""


class ConfigError(MintscanError, ValueError):
    """User-supplied configuration (address, selector, numeric option) is invalid."""


class RPCError(MintscanError, RuntimeError):
    """A JSON-RPC call failed or returned no usable result."""


class DecodeError(MintscanError):
    pass


class UnknownSelector(DecodeError):
    def __init__(self, selector: bytes) -> None:
        super().__init__(f"unknown selector 0x{selector.hex()}")
        self.selector = selector


class MalformedArguments(DecodeError):
    pass
