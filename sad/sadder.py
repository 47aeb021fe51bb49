"""
sad.sadder
==========

Generic self-describing record.

A record is built one of two ways:

- ``Sadder.from_raw(raw)``: sniff the version token, slice exactly the
  declared size, decode the body with the codec for its kind, gate the
  protocol identity, then verify the embedded SAID.
- ``Sadder.from_ked(ked)``: saidify the ked (placeholder, size, digest) and
  serialize it.

Either way the result holds mutually consistent raw bytes and ked, and the
round trip is exact::

    Sadder.from_ked(Sadder.from_raw(raw).ked).raw == raw

Accessors project stored state only; nothing is recomputed after
construction.
"""

from __future__ import annotations

import copy
import json
from typing import AbstractSet, Any, Dict, Iterable, Mapping, Optional

from . import encoding
from .errors import (
    DigestMismatch,
    FieldMissing,
    Incomplete,
    SadError,
    UnexpectedIdentity,
)
from .logging import get_logger
from .matter import DigDex
from .saider import DEFAULT_LABEL, Saider
from .utils.bytes import BytesLike, b as _b
from .versioning import IDENTS, Version, deversify, sniff

log = get_logger(__name__)


def _allowed(idents: Optional[Iterable[str]]) -> AbstractSet[str]:
    return IDENTS if idents is None else frozenset(idents)


def _gate(ident: str, allowed: AbstractSet[str]) -> None:
    if ident not in allowed:
        log.warning("record rejected: identity", extra={"ident": ident, "allowed": sorted(allowed)})
        raise UnexpectedIdentity(ident, allowed)


class Sadder:
    """
    Self-addressed record: ``raw`` and ``ked`` are two views of the same
    bytes, and ``said`` is the digest the record carries at ``label``.

    Use the `from_raw` / `from_ked` constructors.
    """

    __slots__ = ("_raw", "_ked", "_ident", "_kind", "_size", "_version", "_saider", "_label")

    def __init__(
        self,
        *,
        raw: bytes,
        ked: Dict[str, Any],
        ident: str,
        kind: str,
        version: Version,
        saider: Saider,
        label: str = DEFAULT_LABEL,
    ) -> None:
        self._raw = raw
        self._ked = ked
        self._ident = ident
        self._kind = kind
        self._size = len(raw)
        self._version = version
        self._saider = saider
        self._label = label

    # ---------------- construction ----------------

    @classmethod
    def from_raw(
        cls,
        raw: BytesLike,
        idents: Optional[Iterable[str]] = None,
        label: str = DEFAULT_LABEL,
    ) -> "Sadder":
        """
        Decode and verify the record at the front of `raw`. Bytes past the
        declared size are ignored, so `raw` may be a stream buffer.

        Raises Incomplete, MalformedVersionString, UnsupportedKind,
        UnsupportedVersion, CodecFailure, UnexpectedIdentity, DigestMismatch.
        """
        raw = _b(raw)
        token = sniff(raw)
        if len(raw) < token.size:
            raise Incomplete(token.size, len(raw), "buffer shorter than declared size")
        raw = raw[: token.size]

        ked = encoding.loads(raw, token.kind)
        _gate(token.ident, _allowed(idents))

        said = ked.get(label)
        if not isinstance(said, str):
            log.warning("record rejected: no said", extra={"label": label, "ident": token.ident})
            raise DigestMismatch("record carries no said", label=label)
        try:
            saider = Saider(qb64=said)
        except SadError as e:
            log.warning("record rejected: bad said", extra={"label": label, "err": e.to_dict()})
            raise DigestMismatch("said is not a digest primitive", label=label, said=said).with_cause(e) from e

        if not saider.verify(ked, kind=token.kind, label=label, prefixed=True):
            log.warning(
                "record rejected: digest mismatch",
                extra={"said": said, "ident": token.ident, "kind": token.kind},
            )
            raise DigestMismatch(said=said, ident=token.ident, kind=token.kind)

        log.debug("record verified", extra={"said": said, "ident": token.ident, "size": token.size})
        return cls(
            raw=raw,
            ked=ked,
            ident=token.ident,
            kind=token.kind,
            version=token.version,
            saider=saider,
            label=label,
        )

    @classmethod
    def from_ked(
        cls,
        ked: Mapping[str, Any],
        code: str = DigDex.Blake3_256,
        kind: Optional[str] = None,
        idents: Optional[Iterable[str]] = None,
        label: str = DEFAULT_LABEL,
    ) -> "Sadder":
        """
        Saidify `ked` with `code` and serialize it as `kind` (default: the
        kind its version string names). The caller's mapping is not touched.
        """
        if "v" not in ked:
            raise FieldMissing("v")
        token = deversify(ked["v"])
        _gate(token.ident, _allowed(idents))

        saider, sad = Saider.saidify(ked, code=code, kind=kind, label=label)
        raw, ident, kind, out, version = encoding.sizeify(sad, kind)
        # saidify already fixed the size; sizeify only re-measures it
        assert out["v"] == sad["v"]

        log.debug("record built", extra={"said": saider.qb64, "ident": ident, "size": len(raw)})
        return cls(
            raw=raw,
            ked=out,
            ident=ident,
            kind=kind,
            version=version,
            saider=saider,
            label=label,
        )

    # ---------------- accessors ----------------

    @property
    def raw(self) -> bytes:
        return self._raw

    @property
    def ked(self) -> Dict[str, Any]:
        """Deep copy of the field map; edits never reach this record."""
        return copy.deepcopy(self._ked)

    @property
    def code(self) -> str:
        return self._saider.code

    @property
    def ident(self) -> str:
        return self._ident

    @property
    def kind(self) -> str:
        return self._kind

    @property
    def size(self) -> int:
        return self._size

    @property
    def version(self) -> Version:
        return self._version

    @property
    def label(self) -> str:
        return self._label

    @property
    def saider(self) -> Saider:
        return self._saider

    @property
    def said(self) -> str:
        return self._saider.qb64

    @property
    def saidb(self) -> bytes:
        return self._saider.qb64b

    def pretty(self, *, size: int = 1024) -> str:
        """Indented JSON rendering of the ked, cut at `size` characters."""
        return json.dumps(self._ked, indent=1, ensure_ascii=False, default=str)[:size]

    def compare(self, said: Any) -> bool:
        """True when `said` (str, bytes or Saider) is this record's SAID."""
        if isinstance(said, Saider):
            return said == self._saider
        if isinstance(said, (bytes, bytearray, memoryview)):
            return _b(said) == self.saidb
        return said == self.said

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Sadder):
            return NotImplemented
        return self._raw == other._raw

    def __hash__(self) -> int:
        return hash(self._raw)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(ident={self._ident!r}, kind={self._kind!r}, said={self.said!r})"


__all__ = ["Sadder"]
