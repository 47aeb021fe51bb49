"""
sad.matter
==========

Primitive code table and the self-describing text/binary codec built on it.

Every cryptographic primitive (seed, key, signature, digest, salt, small
number) travels as a *qb64* string: a short code naming the primitive followed
by its raw bytes in URL-safe base64. The code's entry in the table fixes the
total text width, so a digest of a given code always occupies the same number
of characters whatever bytes it carries. SAID computation depends on exactly
that property (see sad.saider).

Table entries are ``Sizage(hs, ss, fs, ls)``:

- hs: hard size, characters of the code itself
- ss: soft size, extra code characters (always 0 for fixed-size codes)
- fs: full size, total qb64 characters
- ls: lead size, zero bytes prepended to raw before encoding

The raw size follows from the others: ``rs = (fs - cs) * 3 // 4 - ls`` with
``cs = hs + ss``. Text layout for a raw of ``rs`` bytes with pad size
``ps = (3 - (rs + ls) % 3) % 3``::

    qb64 = code + b64(bytes(ps + ls) + raw)[ps:]

which only lines up on a 24-bit boundary when ``ps == cs % 4``. The table is
checked against that rule once at import and then frozen.

Only fixed-size codes live here; count-prefixed variable-size codes belong to
a higher layer.
"""

from __future__ import annotations

from collections import namedtuple
from dataclasses import astuple, dataclass
from types import MappingProxyType
from typing import Iterator, Mapping, Optional, Tuple, Union

from .errors import Incomplete, InternalError, InvalidMaterial, UnknownCode
from .utils.bytes import BytesLike, b as _b, decode_b64, encode_b64

Sizage = namedtuple("Sizage", "hs ss fs ls")


# ---------------------------
# Codices
# ---------------------------


@dataclass(frozen=True)
class MatterCodex:
    """Every fixed-size primitive code. Iterating yields the code strings."""

    Ed25519_Seed: str = "A"  # Ed25519 256 bit random seed for private key
    Ed25519N: str = "B"  # Ed25519 verification key non-transferable, basic derivation
    X25519: str = "C"  # X25519 public encryption key
    Ed25519: str = "D"  # Ed25519 verification key, basic derivation
    Blake3_256: str = "E"  # Blake3 256 bit digest
    Blake2b_256: str = "F"  # Blake2b 256 bit digest
    Blake2s_256: str = "G"  # Blake2s 256 bit digest
    SHA3_256: str = "H"  # SHA3 256 bit digest
    SHA2_256: str = "I"  # SHA2 256 bit digest
    ECDSA_256k1_Seed: str = "J"  # ECDSA secp256k1 256 bit random seed
    Ed448_Seed: str = "K"  # Ed448 448 bit random seed
    X448: str = "L"  # X448 public encryption key
    Short: str = "M"  # Short 2 byte number
    Big: str = "N"  # Big 8 byte number
    X25519_Private: str = "O"  # X25519 private decryption key
    X25519_Cipher_Seed: str = "P"  # X25519 sealed box 124 char qb64 cipher of seed
    Salt_128: str = "0A"  # 128 bit random salt or number
    Ed25519_Sig: str = "0B"  # Ed25519 signature
    ECDSA_256k1_Sig: str = "0C"  # ECDSA secp256k1 signature
    Blake3_512: str = "0D"  # Blake3 512 bit digest
    Blake2b_512: str = "0E"  # Blake2b 512 bit digest
    SHA3_512: str = "0F"  # SHA3 512 bit digest
    SHA2_512: str = "0G"  # SHA2 512 bit digest
    Long: str = "0H"  # Long 4 byte number
    ECDSA_256k1N: str = "1AAA"  # ECDSA secp256k1 verification key non-transferable
    ECDSA_256k1: str = "1AAB"  # ECDSA secp256k1 verification or encryption key
    Ed448N: str = "1AAC"  # Ed448 non-transferable prefix public signing key
    Ed448: str = "1AAD"  # Ed448 public signing verification key
    Ed448_Sig: str = "1AAE"  # Ed448 signature
    Tern: str = "1AAF"  # 3 byte number or tritet
    DateTime: str = "1AAG"  # ISO-8601 datetime, base64 safe
    X25519_Cipher_Salt: str = "1AAH"  # X25519 sealed box 100 char qb64 cipher of salt

    def __iter__(self) -> Iterator[str]:
        return iter(astuple(self))


MtrDex = MatterCodex()


@dataclass(frozen=True)
class DigCodex:
    """Digest codes only; these are the codes a SAID may carry."""

    Blake3_256: str = "E"
    Blake2b_256: str = "F"
    Blake2s_256: str = "G"
    SHA3_256: str = "H"
    SHA2_256: str = "I"
    Blake3_512: str = "0D"
    Blake2b_512: str = "0E"
    SHA3_512: str = "0F"
    SHA2_512: str = "0G"

    def __iter__(self) -> Iterator[str]:
        return iter(astuple(self))


DigDex = DigCodex()


# ---------------------------
# Tables
# ---------------------------

_SIZES = {
    "A": Sizage(hs=1, ss=0, fs=44, ls=0),
    "B": Sizage(hs=1, ss=0, fs=44, ls=0),
    "C": Sizage(hs=1, ss=0, fs=44, ls=0),
    "D": Sizage(hs=1, ss=0, fs=44, ls=0),
    "E": Sizage(hs=1, ss=0, fs=44, ls=0),
    "F": Sizage(hs=1, ss=0, fs=44, ls=0),
    "G": Sizage(hs=1, ss=0, fs=44, ls=0),
    "H": Sizage(hs=1, ss=0, fs=44, ls=0),
    "I": Sizage(hs=1, ss=0, fs=44, ls=0),
    "J": Sizage(hs=1, ss=0, fs=44, ls=0),
    "K": Sizage(hs=1, ss=0, fs=76, ls=0),
    "L": Sizage(hs=1, ss=0, fs=76, ls=0),
    "M": Sizage(hs=1, ss=0, fs=4, ls=0),
    "N": Sizage(hs=1, ss=0, fs=12, ls=0),
    "O": Sizage(hs=1, ss=0, fs=44, ls=0),
    "P": Sizage(hs=1, ss=0, fs=124, ls=0),
    "0A": Sizage(hs=2, ss=0, fs=24, ls=0),
    "0B": Sizage(hs=2, ss=0, fs=88, ls=0),
    "0C": Sizage(hs=2, ss=0, fs=88, ls=0),
    "0D": Sizage(hs=2, ss=0, fs=88, ls=0),
    "0E": Sizage(hs=2, ss=0, fs=88, ls=0),
    "0F": Sizage(hs=2, ss=0, fs=88, ls=0),
    "0G": Sizage(hs=2, ss=0, fs=88, ls=0),
    "0H": Sizage(hs=2, ss=0, fs=8, ls=0),
    "1AAA": Sizage(hs=4, ss=0, fs=48, ls=0),
    "1AAB": Sizage(hs=4, ss=0, fs=48, ls=0),
    "1AAC": Sizage(hs=4, ss=0, fs=80, ls=0),
    "1AAD": Sizage(hs=4, ss=0, fs=80, ls=0),
    "1AAE": Sizage(hs=4, ss=0, fs=156, ls=0),
    "1AAF": Sizage(hs=4, ss=0, fs=8, ls=0),
    "1AAG": Sizage(hs=4, ss=0, fs=36, ls=0),
    "1AAH": Sizage(hs=4, ss=0, fs=100, ls=0),
}

# First character of a code → its hard size.
_HARDS = {c: 1 for c in "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"}
_HARDS.update({"0": 2, "1": 4, "2": 4, "3": 4, "4": 2, "5": 2, "6": 2, "7": 4, "8": 4, "9": 4})


def _raw_size(sz: Sizage) -> int:
    return (sz.fs - (sz.hs + sz.ss)) * 3 // 4 - sz.ls


def _validate(sizes: Mapping[str, Sizage], hards: Mapping[str, int]) -> None:
    codes = set(MtrDex)
    if codes != set(sizes):
        raise InternalError("code table out of sync with codex", missing=sorted(codes ^ set(sizes)))
    if not set(DigDex) <= codes:
        raise InternalError("digest codex not a subset of the code table")
    for code, sz in sizes.items():
        cs = sz.hs + sz.ss
        if len(code) != sz.hs or hards.get(code[0]) != sz.hs:
            raise InternalError("hard size mismatch", code=code)
        if sz.fs % 4:
            raise InternalError("full size not a multiple of 4", code=code, fs=sz.fs)
        rs = _raw_size(sz)
        ps = (3 - ((rs + sz.ls) % 3)) % 3
        if ps != cs % 4:
            raise InternalError("pad size does not align code", code=code, ps=ps, cs=cs)
        if cs + (ps + sz.ls + rs) * 4 // 3 - ps != sz.fs:
            raise InternalError("encoded width differs from full size", code=code)


_validate(_SIZES, _HARDS)

SIZES: Mapping[str, Sizage] = MappingProxyType(_SIZES)
HARDS: Mapping[str, int] = MappingProxyType(_HARDS)
DIGEST_CODES = frozenset(DigDex)


# ---------------------------
# Lookups
# ---------------------------


def sizage(code: str) -> Sizage:
    """Return the table entry for `code`; raises UnknownCode."""
    try:
        return SIZES[code]
    except (KeyError, TypeError):
        raise UnknownCode(code) from None


def lookup(code: str) -> Tuple[int, int]:
    """Return ``(raw_len, text_len)`` for `code`; raises UnknownCode."""
    sz = sizage(code)
    return _raw_size(sz), sz.fs


def raw_size(code: str) -> int:
    return lookup(code)[0]


def is_digest(code: str) -> bool:
    return code in DIGEST_CODES


# ---------------------------
# Matter
# ---------------------------


class Matter:
    """
    Fully qualified cryptographic primitive.

    Build from raw bytes plus a code, or parse from qb64 (str or bytes) or
    qb2 (binary). Only the leading primitive is consumed when parsing, so a
    stream may carry more bytes after it.

    Properties
    ----------
    code   : table code
    raw    : raw primitive bytes
    qb64   : text form (str)
    qb64b  : text form (bytes)
    qb2    : binary form
    digestive : True when the code is a digest code
    """

    def __init__(
        self,
        raw: Optional[BytesLike] = None,
        code: str = MtrDex.Ed25519N,
        qb64b: Optional[Union[BytesLike, str]] = None,
        qb64: Optional[Union[str, BytesLike]] = None,
        qb2: Optional[BytesLike] = None,
    ) -> None:
        if raw is not None:
            rs = raw_size(code)
            raw = _b(raw)
            if len(raw) < rs:
                raise InvalidMaterial(
                    "raw too short for code", code=code, needed=rs, got=len(raw)
                )
            self._code = code
            self._raw = raw[:rs]
        elif qb64b is not None:
            self._code, self._raw = self._exfil(_b(qb64b))
        elif qb64 is not None:
            self._code, self._raw = self._exfil(_b(qb64))
        elif qb2 is not None:
            self._code, self._raw = self._bexfil(_b(qb2))
        else:
            raise InvalidMaterial("missing primitive material")

    # ---------------- codec ----------------

    @staticmethod
    def _infil(code: str, raw: bytes) -> bytes:
        hs, ss, fs, ls = sizage(code)
        ps = (3 - ((len(raw) + ls) % 3)) % 3
        full = code.encode("utf-8") + encode_b64(bytes(ps + ls) + raw)[ps:]
        if len(full) != fs:
            raise InvalidMaterial("encoded width mismatch", code=code, fs=fs, got=len(full))
        return full

    @staticmethod
    def _exfil(qb64b: bytes) -> Tuple[str, bytes]:
        if not qb64b:
            raise Incomplete(1, 0, "empty primitive")
        first = chr(qb64b[0])
        hs = HARDS.get(first)
        if hs is None:
            raise UnknownCode(first, "unsupported code selector")
        if len(qb64b) < hs:
            raise Incomplete(hs, len(qb64b))
        if not qb64b[:hs].isascii():
            raise UnknownCode(qb64b[:hs].decode("utf-8", "replace"), "non-ASCII code characters")
        code = qb64b[:hs].decode("ascii")
        _, ss, fs, ls = sizage(code)
        if len(qb64b) < fs:
            raise Incomplete(fs, len(qb64b))
        cs = hs + ss
        ps = cs % 4
        try:
            paw = decode_b64(b"A" * ps + qb64b[cs:fs])
        except ValueError as e:
            raise InvalidMaterial(f"bad base64 body: {e}", code=code) from e
        if any(paw[: ps + ls]):
            raise InvalidMaterial("non-zero pad or lead bits", code=code)
        raw = paw[ps + ls :]
        if len(raw) != raw_size(code):
            raise InvalidMaterial("raw size mismatch", code=code, got=len(raw))
        return code, raw

    @classmethod
    def _bexfil(cls, qb2: bytes) -> Tuple[str, bytes]:
        if not qb2:
            raise Incomplete(1, 0, "empty primitive")
        # three bytes carry four sextets, enough for any hard code of ≤4 chars
        lead = encode_b64(qb2[:3] + bytes(max(0, 3 - len(qb2))))
        hs = HARDS.get(chr(lead[0]))
        if hs is None:
            raise UnknownCode(chr(lead[0]), "unsupported code selector")
        code = lead[:hs].decode("utf-8")
        bs = sizage(code).fs * 3 // 4
        if len(qb2) < bs:
            raise Incomplete(bs, len(qb2))
        return cls._exfil(encode_b64(qb2[:bs]))

    # ---------------- properties ----------------

    @property
    def code(self) -> str:
        return self._code

    @property
    def raw(self) -> bytes:
        return self._raw

    @property
    def qb64b(self) -> bytes:
        return self._infil(self._code, self._raw)

    @property
    def qb64(self) -> str:
        return self.qb64b.decode("utf-8")

    @property
    def qb2(self) -> bytes:
        return decode_b64(self.qb64b)

    @property
    def size(self) -> int:
        """Full text width of this primitive."""
        return sizage(self._code).fs

    @property
    def digestive(self) -> bool:
        return is_digest(self._code)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matter):
            return NotImplemented
        return self._code == other._code and self._raw == other._raw

    def __hash__(self) -> int:
        return hash((self._code, self._raw))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.qb64!r})"


__all__ = [
    "Sizage",
    "MatterCodex",
    "MtrDex",
    "DigCodex",
    "DigDex",
    "SIZES",
    "HARDS",
    "DIGEST_CODES",
    "sizage",
    "lookup",
    "raw_size",
    "is_digest",
    "Matter",
]
