"""
Self-describing record lifecycle (from_raw / from_ked).

Goals:
- from_ked produces bytes whose declared size is their exact length.
- from_raw(from_ked(k).raw) reproduces the record; the round trip is
  byte-identical for every kind.
- Truncated buffers, foreign identities, and tampered bytes are rejected
  with the matching error kind.
"""
from __future__ import annotations

import json
import logging

import pytest

from sad.encoding import dumps, sizeify
from sad.errors import (
    CodecFailure,
    DigestMismatch,
    FieldMissing,
    Incomplete,
    MalformedVersionString,
    UnexpectedIdentity,
    UnsupportedKind,
)
from sad.sadder import Sadder
from sad.saider import Saider
from sad.versioning import VERFULLSIZE, deversify, sniff, versify

KINDS = ["JSON", "CBOR", "MGPK"]


@pytest.mark.parametrize("kind", KINDS)
def test_from_ked_size_consistency(acdc_ked, kind: str) -> None:
    rec = Sadder.from_ked(acdc_ked(kind=kind))
    assert rec.size == len(rec.raw)
    assert deversify(rec.ked["v"]).size == len(rec.raw)
    assert sniff(rec.raw).size == len(rec.raw)
    assert rec.kind == kind
    assert rec.ident == "ACDC"
    assert tuple(rec.version) == (1, 0)
    assert rec.code == "E"
    assert rec.raw == dumps(rec.ked, kind)


@pytest.mark.parametrize("kind", KINDS)
def test_round_trip(acdc_ked, kind: str) -> None:
    rec = Sadder.from_ked(acdc_ked(kind=kind))
    again = Sadder.from_raw(rec.raw)
    assert again == rec
    assert again.ked == rec.ked
    assert again.said == rec.said
    assert Sadder.from_ked(again.ked, kind=kind).raw == rec.raw


def test_from_ked_does_not_touch_input(acdc_ked) -> None:
    ked = acdc_ked()
    before = json.dumps(ked)
    Sadder.from_ked(ked)
    assert json.dumps(ked) == before


def test_kind_override(acdc_ked) -> None:
    rec = Sadder.from_ked(acdc_ked(kind="JSON"), kind="MGPK")
    assert rec.kind == "MGPK"
    assert sniff(rec.raw).kind == "MGPK"
    assert Sadder.from_raw(rec.raw) == rec


def test_other_digest_code(acdc_ked) -> None:
    rec = Sadder.from_ked(acdc_ked(), code="0D")
    assert rec.code == "0D"
    assert len(rec.said) == 88
    assert Sadder.from_raw(rec.raw).code == "0D"


def test_trailing_stream_bytes_ignored(acdc_ked) -> None:
    rec = Sadder.from_ked(acdc_ked())
    again = Sadder.from_raw(rec.raw + b'{"v":"next record')
    assert again.raw == rec.raw


def test_truncated_buffer(acdc_ked) -> None:
    rec = Sadder.from_ked(acdc_ked())
    with pytest.raises(Incomplete) as ei:
        Sadder.from_raw(rec.raw[:-1])
    assert ei.value.data == {"needed": rec.size, "got": rec.size - 1}
    with pytest.raises(Incomplete):
        Sadder.from_raw(rec.raw[:10])


def test_identity_gate_on_raw(keri_ked) -> None:
    rec = Sadder.from_ked(keri_ked())
    assert Sadder.from_raw(rec.raw, idents={"KERI"}) == rec
    with pytest.raises(UnexpectedIdentity) as ei:
        Sadder.from_raw(rec.raw, idents={"ACDC"})
    assert ei.value.data == {"ident": "KERI", "allowed": ["ACDC"]}


def test_identity_gate_on_ked(keri_ked) -> None:
    with pytest.raises(UnexpectedIdentity):
        Sadder.from_ked(keri_ked(), idents=["ACDC"])


def test_tampered_field(acdc_ked) -> None:
    rec = Sadder.from_ked(acdc_ked())
    bad = rec.raw.replace(b"5493001KJTIIGC8Y1R17", b"5493001KJTIIGC8Y1R18")
    assert len(bad) == len(rec.raw) and bad != rec.raw
    with pytest.raises(DigestMismatch):
        Sadder.from_raw(bad)


def test_tampered_said(acdc_ked) -> None:
    rec = Sadder.from_ked(acdc_ked())
    said = rec.saidb
    flipped = said[:-1] + (b"A" if said[-1:] != b"A" else b"B")
    with pytest.raises(DigestMismatch):
        Sadder.from_raw(rec.raw.replace(said, flipped))


def test_said_of_wrong_width(acdc_ked) -> None:
    rec = Sadder.from_ked(acdc_ked())
    # same byte length, but a code the table does not know
    bad = rec.raw.replace(rec.saidb, b"#" + rec.saidb[1:])
    with pytest.raises(DigestMismatch):
        Sadder.from_raw(bad)


def test_record_without_said() -> None:
    raw, *_ = sizeify({"v": versify("ACDC"), "x": "no said field here"})
    with pytest.raises(DigestMismatch):
        Sadder.from_raw(raw)


def test_unsupported_kind_in_raw() -> None:
    raw = b'{"v":"ACDC10XMLX000030_","d":"","x":"padding"}'
    with pytest.raises(UnsupportedKind):
        Sadder.from_raw(raw)


def test_malformed_raw() -> None:
    with pytest.raises(MalformedVersionString):
        Sadder.from_raw(b'{"version":"1.0","d":"","x":"yyyyyyyyyyyyyyyy"}')


def test_body_codec_failure() -> None:
    head = b'{"v":"'
    tail = b'","a":bad}'
    vs = versify("ACDC", size=len(head) + VERFULLSIZE + len(tail))
    with pytest.raises(CodecFailure):
        Sadder.from_raw(head + vs.encode() + tail)


def test_from_ked_missing_fields(acdc_ked) -> None:
    ked = acdc_ked()
    del ked["v"]
    with pytest.raises(FieldMissing):
        Sadder.from_ked(ked)
    ked = acdc_ked()
    del ked["d"]
    with pytest.raises(FieldMissing):
        Sadder.from_ked(ked)


def test_ked_is_a_copy(acdc_ked) -> None:
    rec = Sadder.from_ked(acdc_ked())
    ked = rec.ked
    ked["a"]["LEI"] = "changed"
    assert rec.ked["a"]["LEI"] == "5493001KJTIIGC8Y1R17"


def test_accessors(acdc_ked) -> None:
    rec = Sadder.from_ked(acdc_ked())
    assert rec.label == "d"
    assert rec.said == rec.ked["d"]
    assert rec.saidb == rec.said.encode()
    assert isinstance(rec.saider, Saider)
    assert rec.compare(rec.said)
    assert rec.compare(rec.saidb)
    assert rec.compare(rec.saider)
    assert not rec.compare("E" + "A" * 43)
    assert json.loads(rec.pretty()) == rec.ked
    assert len(rec.pretty(size=20)) == 20
    assert rec.said in repr(rec)


def test_equality_is_by_raw(acdc_ked) -> None:
    a = Sadder.from_ked(acdc_ked())
    b = Sadder.from_raw(a.raw)
    c = Sadder.from_ked(acdc_ked(kind="CBOR"))
    assert a == b and hash(a) == hash(b)
    assert a != c
    assert len({a, b, c}) == 2


def test_rejection_is_logged(acdc_ked, caplog: pytest.LogCaptureFixture) -> None:
    rec = Sadder.from_ked(acdc_ked())
    bad = rec.raw.replace(b"5493001KJTIIGC8Y1R17", b"5493001KJTIIGC8Y1R18")
    with caplog.at_level(logging.WARNING, logger="sad"):
        with pytest.raises(DigestMismatch):
            Sadder.from_raw(bad)
    assert any(r.levelno == logging.WARNING and r.name == "sad.sadder" for r in caplog.records)


@pytest.mark.parametrize("said", ["0é" + "A" * 86, "1AAé" + "A" * 44])
def test_non_ascii_said(acdc_ked, said: str) -> None:
    ked = Sadder.from_ked(acdc_ked()).ked
    ked["d"] = said
    raw, *_ = sizeify(ked)
    with pytest.raises(DigestMismatch) as info:
        Sadder.from_raw(raw)
    assert info.value.cause is not None
