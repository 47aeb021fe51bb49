"""
sad.encoding
============

Body codecs for self-describing records, selected by the serialization kind
named in the record's version string:

- JSON: json_codec.py   (stdlib json, compact, UTF-8)
- CBOR: cbor_codec.py   (cbor2, insertion-ordered maps)
- MGPK: mgpk_codec.py   (msgspec.msgpack)

Every codec must be deterministic and must keep map insertion order: the SAID
of a record is a digest over these exact bytes, recomputed independently by
every verifier.

Public API
----------
dumps(ked, kind) -> bytes
loads(raw, kind, size=None) -> dict
sizeify(ked, kind=None) -> (raw, ident, kind, ked, version)

The codec registry is a read-only mapping built at import.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from ..errors import (
    CodecFailure,
    FieldMissing,
    Incomplete,
    InternalError,
    MalformedVersionString,
    UnsupportedKind,
)
from ..versioning import KINDS, Version, deversify, rematch, versify
from . import cbor_codec, json_codec, mgpk_codec


@dataclass(frozen=True)
class Codec:
    kind: str
    dumps: Callable[[Dict[str, Any]], bytes]
    loads: Callable[[bytes], Dict[str, Any]]


CODECS: Mapping[str, Codec] = MappingProxyType(
    {
        m.KIND: Codec(kind=m.KIND, dumps=m.dumps, loads=m.loads)
        for m in (json_codec, cbor_codec, mgpk_codec)
    }
)

if set(CODECS) != set(KINDS):  # pragma: no cover - import-time wiring check
    raise InternalError("codec registry out of sync with serialization kinds")


def get_codec(kind: str) -> Codec:
    try:
        return CODECS[kind]
    except (KeyError, TypeError):
        raise UnsupportedKind(kind) from None


def dumps(ked: Mapping[str, Any], kind: str) -> bytes:
    """Serialize `ked` with the codec for `kind`; raises CodecFailure."""
    codec = get_codec(kind)
    try:
        return codec.dumps(dict(ked))
    except Exception as e:
        raise CodecFailure(kind, "encode", f"{kind} encode failed: {e}").with_cause(e) from e


def loads(raw: bytes, kind: str, size: Optional[int] = None) -> Dict[str, Any]:
    """
    Deserialize the first `size` bytes of `raw` (all of it when size is None)
    with the codec for `kind`. The body must decode to a map.
    """
    codec = get_codec(kind)
    if size is not None:
        if len(raw) < size:
            raise Incomplete(size, len(raw))
        raw = raw[:size]
    try:
        ked = codec.loads(bytes(raw))
    except Exception as e:
        raise CodecFailure(kind, "decode", f"{kind} decode failed: {e}").with_cause(e) from e
    if not isinstance(ked, dict):
        raise CodecFailure(kind, "decode", "record body is not a map", got=type(ked).__name__)
    return ked


def sizeify(
    ked: Mapping[str, Any], kind: Optional[str] = None
) -> Tuple[bytes, str, str, Dict[str, Any], Version]:
    """
    Serialize `ked` and rewrite the size field of its version string to the
    measured length. The token has fixed width, so rewriting it leaves the
    length unchanged. `kind` overrides the kind named in ked["v"].

    Returns (raw, ident, kind, ked, version); the returned ked is a new dict
    holding the corrected version string.
    """
    if "v" not in ked:
        raise FieldMissing("v")
    token = deversify(ked["v"])
    kind = kind or token.kind
    if kind not in KINDS:
        raise UnsupportedKind(kind)

    raw = dumps(ked, kind)
    size = len(raw)
    match = rematch(raw)
    if match is None or match.group(0) != str(ked["v"]).encode("utf-8"):
        raise MalformedVersionString("version string is not the leading field")
    fore, back = match.span()

    vs = versify(token.ident, token.version, kind, size)
    raw = raw[:fore] + vs.encode("utf-8") + raw[back:]
    if len(raw) != size:
        raise InternalError("version string rewrite changed record size", size=size, got=len(raw))

    out = dict(ked)
    out["v"] = vs
    return raw, token.ident, kind, out, token.version


__all__ = [
    "Codec",
    "CODECS",
    "get_codec",
    "dumps",
    "loads",
    "sizeify",
]
