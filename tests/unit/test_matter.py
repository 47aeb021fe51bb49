"""
Primitive code table and qb64/qb2 codec.

Goals:
- Table entries agree with the sizes the protocol fixes (digests, keys, numbers).
- Every code's text width is constant (the property SAIDs rely on).
- qb64 and qb2 parse back to the same primitive; stream tails are ignored.
- Bad material (unknown code, short text, non-zero pad) is rejected.
"""
from __future__ import annotations

import pytest

from sad.errors import Incomplete, InvalidMaterial, UnknownCode
from sad.matter import (
    DIGEST_CODES,
    HARDS,
    SIZES,
    DigDex,
    Matter,
    MtrDex,
    is_digest,
    lookup,
    raw_size,
    sizage,
)


@pytest.mark.parametrize(
    "code,raw_len,text_len",
    [
        ("E", 32, 44),
        ("B", 32, 44),
        ("M", 2, 4),
        ("N", 8, 12),
        ("K", 56, 76),
        ("0A", 16, 24),
        ("0B", 64, 88),
        ("0D", 64, 88),
        ("0H", 4, 8),
        ("1AAA", 33, 48),
        ("1AAE", 114, 156),
        ("1AAF", 3, 8),
        ("1AAG", 24, 36),
    ],
)
def test_lookup_sizes(code: str, raw_len: int, text_len: int) -> None:
    assert lookup(code) == (raw_len, text_len)
    assert raw_size(code) == raw_len


def test_unknown_code() -> None:
    with pytest.raises(UnknownCode):
        lookup("Z")
    with pytest.raises(UnknownCode):
        sizage("0Z")


def test_table_is_read_only() -> None:
    with pytest.raises(TypeError):
        SIZES["E"] = SIZES["F"]  # type: ignore[index]
    with pytest.raises(TypeError):
        HARDS["Z"] = 2  # type: ignore[index]


def test_every_code_aligns() -> None:
    for code in MtrDex:
        sz = sizage(code)
        cs = sz.hs + sz.ss
        rs = raw_size(code)
        assert sz.fs % 4 == 0
        assert (3 - (rs + sz.ls) % 3) % 3 == cs % 4
        assert HARDS[code[0]] == sz.hs == len(code)


def test_digest_codes() -> None:
    assert DIGEST_CODES == {"E", "F", "G", "H", "I", "0D", "0E", "0F", "0G"}
    assert set(DigDex) == DIGEST_CODES
    assert is_digest("E") and not is_digest("B")


def test_qb64_layout_one_char_code() -> None:
    m = Matter(raw=bytes(32), code=DigDex.Blake3_256)
    assert m.qb64 == "E" + "A" * 43
    assert m.qb64b == m.qb64.encode()
    assert m.size == 44
    assert m.digestive


def test_qb64_layout_two_char_code() -> None:
    m = Matter(raw=bytes(64), code=DigDex.Blake3_512)
    assert m.qb64 == "0D" + "A" * 86
    assert len(m.qb2) == 66


@pytest.mark.parametrize("code", sorted(MtrDex))
def test_round_trip_every_code(code: str) -> None:
    raw = bytes((i * 7 + 3) % 256 for i in range(raw_size(code)))
    m = Matter(raw=raw, code=code)
    assert len(m.qb64) == lookup(code)[1]
    assert Matter(qb64=m.qb64) == m
    assert Matter(qb64b=m.qb64b) == m
    assert Matter(qb2=m.qb2) == m
    assert Matter(qb64=m.qb64).code == code


def test_parse_ignores_stream_tail() -> None:
    m = Matter(raw=b"\x01" * 32, code="E")
    assert Matter(qb64=m.qb64 + "EXTRA") == m
    assert Matter(qb2=m.qb2 + b"\xff\xff") == m


def test_raw_too_short() -> None:
    with pytest.raises(InvalidMaterial):
        Matter(raw=b"\x00" * 31, code="E")


def test_raw_too_long_is_truncated() -> None:
    assert Matter(raw=b"\x07" * 40, code="E").raw == b"\x07" * 32


def test_short_text_is_incomplete() -> None:
    with pytest.raises(Incomplete):
        Matter(qb64="EAAA")
    with pytest.raises(Incomplete):
        Matter(qb64="")


def test_unknown_selector() -> None:
    with pytest.raises(UnknownCode):
        Matter(qb64="#" * 44)
    with pytest.raises(UnknownCode):
        Matter(qb64="1ZZZ" + "A" * 44)


def test_non_zero_pad_rejected() -> None:
    with pytest.raises(InvalidMaterial):
        Matter(qb64="E_" + "A" * 42)


def test_bad_alphabet_rejected() -> None:
    with pytest.raises(InvalidMaterial):
        Matter(qb64="E" + "+" * 43)


def test_missing_material() -> None:
    with pytest.raises(InvalidMaterial):
        Matter()


def test_equality_and_hash() -> None:
    a = Matter(raw=b"\x02" * 32, code="E")
    b = Matter(qb64=a.qb64)
    c = Matter(raw=b"\x02" * 32, code="F")
    assert a == b and hash(a) == hash(b)
    assert a != c
    assert "E" in repr(a)


@pytest.mark.parametrize("text", ["0é" + "A" * 86, "1AAé" + "A" * 44])
def test_non_ascii_code_rejected(text: str) -> None:
    with pytest.raises(UnknownCode):
        Matter(qb64=text)
