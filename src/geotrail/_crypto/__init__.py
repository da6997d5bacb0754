"""Payload obfuscation for records stored remotely."""

from __future__ import annotations

from typing import Protocol

from geotrail._crypto.xor import XorCodec, xor_decode, xor_encode


class PayloadCodec(Protocol):
    """Protocol for reversible payload obfuscation."""

    def encode(self, plaintext: str) -> list[int]: ...

    def decode(self, data: list[int]) -> str: ...


__all__ = [
    "PayloadCodec",
    "XorCodec",
    "xor_decode",
    "xor_encode",
]
