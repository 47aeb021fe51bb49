"""
sad.saider
==========

Self-addressing identifier (SAID) engine.

A SAID is a digest of a record embedded inside that same record. Computing it
looks circular: the digest covers the bytes, and the bytes contain the digest
and the record size. It resolves in one pass because every digest code has a
fixed text width (sad.matter):

1. fill ``ked[label]`` with ``DUMMY * text_len`` (same width as any real
   digest of that code);
2. if the record is versioned, serialize and rewrite the size field of the
   version string (fixed width, so the length does not move);
3. digest the serialization;
4. write the qb64 digest over the placeholder. Width is unchanged, so the
   size written in step 2 is still exact.

Verification reruns steps 1-3 on a copy and compares.

    saider, ked = Saider.saidify(ked)
    assert saider.verify(ked)
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple

from . import encoding
from .errors import FieldMissing, SadError, UnknownCode
from .logging import get_logger
from .matter import DIGEST_CODES, DigDex, Matter, lookup
from .utils import hash as hashing
from .utils.bytes import BytesLike
from .versioning import Serials

log = get_logger(__name__)

DUMMY = "#"
DEFAULT_LABEL = "d"

DIGESTS: Mapping[str, Callable[[bytes], bytes]] = MappingProxyType(
    {
        DigDex.Blake3_256: hashing.blake3_256,
        DigDex.Blake2b_256: hashing.blake2b_256,
        DigDex.Blake2s_256: hashing.blake2s_256,
        DigDex.SHA3_256: hashing.sha3_256,
        DigDex.SHA2_256: hashing.sha2_256,
        DigDex.Blake3_512: hashing.blake3_512,
        DigDex.Blake2b_512: hashing.blake2b_512,
        DigDex.SHA3_512: hashing.sha3_512,
        DigDex.SHA2_512: hashing.sha2_512,
    }
)


def _require_digest_code(code: str) -> None:
    if code not in DIGEST_CODES:
        raise UnknownCode(code, f"{code!r} is not a digest code")


def placeholder(code: str = DigDex.Blake3_256) -> str:
    """Filler of exactly the qb64 width of a `code` digest."""
    _require_digest_code(code)
    return DUMMY * lookup(code)[1]


class Saider(Matter):
    """
    Digest primitive that knows how to compute and check itself against a
    record. Construct empty-handed via `saidify`, or from an existing SAID
    with ``Saider(qb64=...)``.
    """

    def __init__(
        self,
        raw: Optional[BytesLike] = None,
        code: str = DigDex.Blake3_256,
        qb64b: Optional[BytesLike] = None,
        qb64: Optional[str] = None,
        qb2: Optional[BytesLike] = None,
    ) -> None:
        if raw is not None:
            _require_digest_code(code)
        super().__init__(raw=raw, code=code, qb64b=qb64b, qb64=qb64, qb2=qb2)
        _require_digest_code(self.code)

    # ---------------- derivation ----------------

    @staticmethod
    def _serialize(ked: Mapping[str, Any], kind: Optional[str]) -> bytes:
        return encoding.dumps(ked, kind or Serials.JSON)

    @classmethod
    def derive(
        cls,
        ked: Mapping[str, Any],
        code: str = DigDex.Blake3_256,
        kind: Optional[str] = None,
        label: str = DEFAULT_LABEL,
        ignore: Optional[Iterable[str]] = None,
    ) -> Tuple[bytes, Dict[str, Any]]:
        """
        Return ``(raw_digest, ked')`` where ked' is a copy of `ked` holding the
        placeholder at `label` and, when versioned, the exact size.
        """
        _require_digest_code(code)
        if label not in ked:
            raise FieldMissing(label)

        sad = dict(ked)
        sad[label] = placeholder(code)
        if "v" in sad:
            _, _, kind, sad, _ = encoding.sizeify(sad, kind)

        ser = dict(sad)
        for field in ignore or ():
            ser.pop(field, None)

        return DIGESTS[code](cls._serialize(ser, kind)), sad

    @classmethod
    def saidify(
        cls,
        ked: Mapping[str, Any],
        code: str = DigDex.Blake3_256,
        kind: Optional[str] = None,
        label: str = DEFAULT_LABEL,
        ignore: Optional[Iterable[str]] = None,
    ) -> Tuple["Saider", Dict[str, Any]]:
        """
        Compute the SAID of `ked` and embed it at `label`.

        Returns ``(saider, ked')``; the caller's mapping is left untouched.
        Raises UnknownCode for a non-digest code and FieldMissing when
        `label` (or "v", if versioned) is absent.
        """
        raw, sad = cls.derive(ked, code=code, kind=kind, label=label, ignore=ignore)
        saider = cls(raw=raw, code=code)
        sad[label] = saider.qb64
        log.debug(
            "saidified record",
            extra={"said": saider.qb64, "code": code, "label": label, "v": sad.get("v")},
        )
        return saider, sad

    # ---------------- verification ----------------

    def verify(
        self,
        ked: Mapping[str, Any],
        kind: Optional[str] = None,
        label: str = DEFAULT_LABEL,
        ignore: Optional[Iterable[str]] = None,
        prefixed: bool = False,
        versioned: bool = True,
    ) -> bool:
        """
        True when this SAID is the SAID of `ked`.

        prefixed  : also require ``ked[label]`` to equal this SAID
        versioned : also require ``ked["v"]`` to carry the exact size

        Any failure, including a missing or malformed field, yields False.
        """
        try:
            raw, sad = self.derive(ked, code=self.code, kind=kind, label=label, ignore=ignore)
        except SadError as e:
            log.debug("said derivation failed", extra={"label": label, "err": e.to_dict()})
            return False

        if Saider(raw=raw, code=self.code).qb64b != self.qb64b:
            return False
        if versioned and "v" in ked and ked["v"] != sad["v"]:
            return False
        if prefixed and ked.get(label) != self.qb64:
            return False
        return True


def verify_said(
    ked: Mapping[str, Any],
    kind: Optional[str] = None,
    label: str = DEFAULT_LABEL,
    ignore: Optional[Iterable[str]] = None,
) -> bool:
    """
    Check the SAID a record claims for itself at `label`. The digest code is
    read from the claimed value; a missing field or one of the wrong width
    for its code is a failure, never an exception.
    """
    said = ked.get(label)
    if not isinstance(said, str):
        return False
    try:
        saider = Saider(qb64=said)
    except SadError:
        return False
    return saider.verify(ked, kind=kind, label=label, ignore=ignore, prefixed=True)


__all__ = [
    "DUMMY",
    "DEFAULT_LABEL",
    "DIGESTS",
    "placeholder",
    "Saider",
    "verify_said",
]
