"""Repeating-key XOR obfuscation.

This hides coordinates and log text from casual inspection of the
remote store.  It is **not** encryption: there is no integrity check and
anyone holding the key (or enough plaintext) can recover the payload.
"""

from __future__ import annotations

from collections.abc import Iterable

from geotrail.exceptions import CodecError


def _key_codes(key: str) -> list[int]:
    if not key:
        raise CodecError("Obfuscation key must be non-empty")
    return [ord(ch) for ch in key]


def _xor(data: Iterable[int], codes: list[int]) -> list[int]:
    period = len(codes)
    return [(int(b) ^ codes[i % period]) & 0xFF for i, b in enumerate(data)]


def xor_encode(plaintext: str, key: str) -> list[int]:
    """Obfuscate *plaintext* into a list of byte values (0-255).

    Parameters
    ----------
    plaintext : str
        Text to obfuscate; encoded as UTF-8 first.
    key : str
        Non-empty repeating key.  Byte *i* is combined with
        ``ord(key[i % len(key)])``.

    Raises
    ------
    CodecError
        If *key* is empty.
    """
    return _xor(plaintext.encode("utf-8"), _key_codes(key))


def xor_decode(data: Iterable[int], key: str) -> str:
    """Reverse :func:`xor_encode`.

    Never raises on corrupted input: out-of-range values are masked to a
    byte and invalid UTF-8 is replaced.  Callers must validate the result
    structurally before trusting it.
    """
    raw = bytes(_xor(data, _key_codes(key)))
    return raw.decode("utf-8", errors="replace")


class XorCodec:
    """Key-bound XOR codec used by the retention and log layers."""

    def __init__(self, key: str) -> None:
        self._codes = _key_codes(key)

    def encode(self, plaintext: str) -> list[int]:
        return _xor(plaintext.encode("utf-8"), self._codes)

    def decode(self, data: Iterable[int]) -> str:
        return bytes(_xor(data, self._codes)).decode("utf-8", errors="replace")
