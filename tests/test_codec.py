from __future__ import annotations

import pytest

from geotrail._crypto import XorCodec, xor_decode, xor_encode
from geotrail.exceptions import CodecError, ConfigError


@pytest.mark.parametrize(
    ("text", "key"),
    [
        ("", "k"),
        ('{"id":"abc","latitude":52.1,"longitude":4.3,"timestamp":1700000000000}', "secret-key"),
        ("multi\nline log\n", "x"),
        ("ünïcödé ✓ 测试", "key"),
    ],
)
def test_decode_reverses_encode(text: str, key: str) -> None:
    assert xor_decode(xor_encode(text, key), key) == text


def test_encode_matches_repeating_key_xor() -> None:
    assert xor_encode("abc", "k") == [ord("a") ^ ord("k"), ord("b") ^ ord("k"), ord("c") ^ ord("k")]
    assert xor_encode("abcd", "xy") == [
        ord("a") ^ ord("x"),
        ord("b") ^ ord("y"),
        ord("c") ^ ord("x"),
        ord("d") ^ ord("y"),
    ]


def test_encode_outputs_byte_values() -> None:
    data = xor_encode("héllo wörld", "Ω-key")
    assert all(0 <= b <= 255 for b in data)


def test_transform_is_its_own_inverse() -> None:
    plain = list("payload".encode("utf-8"))
    cipher = xor_encode("payload", "key")
    assert [b ^ ord("key"[i % 3]) for i, b in enumerate(cipher)] == plain


def test_empty_key_fails_fast() -> None:
    with pytest.raises(CodecError):
        xor_encode("text", "")
    with pytest.raises(CodecError):
        xor_decode([1, 2, 3], "")
    with pytest.raises(ConfigError):
        XorCodec("")


def test_decode_tolerates_garbage() -> None:
    codec = XorCodec("key")
    # Invalid UTF-8 and out-of-range values decode to text instead of raising.
    assert isinstance(codec.decode([0xFF ^ ord("k"), 0xFE ^ ord("e"), 999, -3]), str)


def test_codec_truncated_payload_decodes_prefix() -> None:
    codec = XorCodec("key")
    data = codec.encode("hello world")
    assert codec.decode(data[:5]) == "hello"
