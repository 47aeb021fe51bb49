"""
Version-string codec: versify / deversify / sniff.
"""
from __future__ import annotations

import pytest

from sad.errors import Incomplete, MalformedVersionString, UnsupportedKind, UnsupportedVersion
from sad.versioning import (
    CURRENT_VERSION,
    IDENTS,
    KINDS,
    MAXSIZE,
    MINSNIFFSIZE,
    VERFULLSIZE,
    Version,
    VersionToken,
    deversify,
    rematch,
    sniff,
    versify,
)


def test_constants() -> None:
    assert VERFULLSIZE == 17
    assert MINSNIFFSIZE == 29
    assert MAXSIZE == 0xFFFFFF
    assert KINDS == {"JSON", "CBOR", "MGPK"}
    assert IDENTS == {"KERI", "ACDC"}
    assert CURRENT_VERSION == Version(1, 0)


def test_versify() -> None:
    assert versify() == "KERI10JSON000000_"
    assert versify("ACDC", (1, 0), "JSON", 0x22B) == "ACDC10JSON00022b_"
    assert versify("ACDC", kind="MGPK", size=MAXSIZE) == "ACDC10MGPKffffff_"
    for size in (0, 1, 4095, MAXSIZE):
        assert len(versify(size=size)) == VERFULLSIZE


def test_versify_rejects() -> None:
    with pytest.raises(UnsupportedKind):
        versify(kind="YAML")
    with pytest.raises(MalformedVersionString):
        versify(ident="acdc")
    with pytest.raises(MalformedVersionString):
        versify(size=MAXSIZE + 1)
    with pytest.raises(MalformedVersionString):
        versify(version=(16, 0))


def test_deversify() -> None:
    tok = deversify("ACDC10JSON00022b_")
    assert tok == VersionToken(ident="ACDC", version=Version(1, 0), kind="JSON", size=0x22B)
    assert str(tok) == "ACDC10JSON00022b_"
    assert deversify(b"KERI10CBOR000010_").kind == "CBOR"


@pytest.mark.parametrize(
    "vs",
    [
        "ACDC10JSON00022B_",  # upper-case hex
        "ACDC10JSON00022b",  # no terminator
        "ACDC10JSON00022b_x",  # trailing text
        "acdc10JSON00022b_",
        "",
    ],
)
def test_deversify_malformed(vs: str) -> None:
    with pytest.raises(MalformedVersionString):
        deversify(vs)


def test_deversify_non_text() -> None:
    with pytest.raises(MalformedVersionString):
        deversify(12)  # type: ignore[arg-type]


def test_unknown_kind_token() -> None:
    with pytest.raises(UnsupportedKind):
        deversify("ACDC10XMLX000000_")


def test_unsupported_version_is_malformed() -> None:
    with pytest.raises(UnsupportedVersion) as ei:
        deversify("ACDC20JSON000000_")
    assert isinstance(ei.value, MalformedVersionString)
    assert ei.value.data == {"major": 2, "minor": 0}


def test_sniff_json_prefix() -> None:
    raw = b'{"v":"ACDC10JSON00004a_","d":"","i":"x"}'
    tok = sniff(raw)
    assert (tok.ident, tok.kind, tok.size) == ("ACDC", "JSON", 0x4A)
    assert rematch(raw).start() == 6


def test_sniff_needs_prefix() -> None:
    with pytest.raises(Incomplete) as ei:
        sniff(b'{"v":"ACDC10JSON')
    assert ei.value.data["needed"] == MINSNIFFSIZE


def test_sniff_offset_window() -> None:
    token = b"KERI10JSON000000_"
    assert sniff(b" " * 12 + token).ident == "KERI"
    with pytest.raises(MalformedVersionString):
        sniff(b" " * 13 + token)


def test_sniff_no_token() -> None:
    with pytest.raises(MalformedVersionString):
        sniff(b"x" * 64)
