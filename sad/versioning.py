"""
sad.versioning
==============

Version-string codec.

Every record carries, as the value of its first field, a fixed-width token::

    IIIIMmKKKKssssss_
    ACDC10JSON00022b_

- IIII   : protocol identity, four upper-case letters (KERI, ACDC)
- M, m   : major and minor version, one lower-case hex digit each
- KKKK   : serialization kind (JSON, CBOR, MGPK)
- ssssss : total record size in bytes, six lower-case hex digits
- _      : terminator

The token is 17 characters whatever the size, which is what lets a record
state its own length without that statement changing the length. The token
always starts within the first 12 bytes of a serialized record (the map
header plus the "v" label in every supported kind), so `sniff` only ever
reads ``MINSNIFFSIZE`` bytes.
"""

from __future__ import annotations

import re
from collections import namedtuple
from dataclasses import astuple, dataclass
from typing import Iterator, Optional, Tuple

from .errors import Incomplete, MalformedVersionString, UnsupportedKind, UnsupportedVersion
from .utils.bytes import BytesLike, b as _b

Version = namedtuple("Version", "major minor")
CURRENT_VERSION = Version(major=1, minor=0)

VERRAWSIZE = 6  # hex characters in the size field
VERFULLSIZE = 17  # total token width
MAXVERFULLSPAN = 12  # furthest offset the token may start at
MINSNIFFSIZE = MAXVERFULLSPAN + VERFULLSIZE
MAXSIZE = 16**VERRAWSIZE - 1

VEREX = (
    b"(?P<ident>[A-Z]{4})(?P<major>[0-9a-f])(?P<minor>[0-9a-f])"
    b"(?P<kind>[A-Z]{4})(?P<size>[0-9a-f]{6})_"
)
Rever = re.compile(VEREX)
ReverStr = re.compile(VEREX.decode("ascii"))


@dataclass(frozen=True)
class SerialCodex:
    """Serialization kinds a record body may use."""

    JSON: str = "JSON"  # text
    CBOR: str = "CBOR"  # self-describing binary map
    MGPK: str = "MGPK"  # compact binary (MessagePack)

    def __iter__(self) -> Iterator[str]:
        return iter(astuple(self))


Serials = SerialCodex()
KINDS = frozenset(Serials)


@dataclass(frozen=True)
class IdentCodex:
    """Protocol identities a record may belong to."""

    KERI: str = "KERI"  # key event log
    ACDC: str = "ACDC"  # authentic chained data container (credential)

    def __iter__(self) -> Iterator[str]:
        return iter(astuple(self))


Idents = IdentCodex()
IDENTS = frozenset(Idents)


@dataclass(frozen=True)
class VersionToken:
    ident: str
    version: Version
    kind: str
    size: int

    def __str__(self) -> str:
        return versify(self.ident, self.version, self.kind, self.size)


def versify(
    ident: str = Idents.KERI,
    version: Optional[Tuple[int, int]] = None,
    kind: str = Serials.JSON,
    size: int = 0,
) -> str:
    """
    Build a version token. Raises UnsupportedKind for an unknown kind and
    MalformedVersionString for a bad ident, version digit or size.
    """
    version = Version(*(version or CURRENT_VERSION))
    if kind not in KINDS:
        raise UnsupportedKind(kind)
    if not (isinstance(ident, str) and re.fullmatch(r"[A-Z]{4}", ident)):
        raise MalformedVersionString("identity must be four upper-case letters", ident=ident)
    if not (0 <= version.major <= 15 and 0 <= version.minor <= 15):
        raise MalformedVersionString(
            "version digits out of range", major=version.major, minor=version.minor
        )
    if not (0 <= size <= MAXSIZE):
        raise MalformedVersionString("size out of range", size=size, max=MAXSIZE)
    return f"{ident}{version.major:x}{version.minor:x}{kind}{size:0{VERRAWSIZE}x}_"


def _token(match: "re.Match") -> VersionToken:
    ident, major, minor, kind, size = match.group("ident", "major", "minor", "kind", "size")
    if isinstance(ident, bytes):
        ident, major, minor, kind, size = (
            x.decode("ascii") for x in (ident, major, minor, kind, size)
        )
    if kind not in KINDS:
        raise UnsupportedKind(kind)
    version = Version(major=int(major, 16), minor=int(minor, 16))
    if version != CURRENT_VERSION:
        raise UnsupportedVersion(version.major, version.minor)
    return VersionToken(ident=ident, version=version, kind=kind, size=int(size, 16))


def deversify(vs: str) -> VersionToken:
    """Parse a whole version token (the value of a record's "v" field)."""
    if isinstance(vs, (bytes, bytearray, memoryview)):
        vs = _b(vs).decode("utf-8", "replace")
    if not isinstance(vs, str):
        raise MalformedVersionString("version string must be text", got=type(vs).__name__)
    match = ReverStr.fullmatch(vs)
    if not match:
        raise MalformedVersionString(f"invalid version string {vs!r}")
    return _token(match)


def rematch(raw: BytesLike) -> Optional["re.Match"]:
    """Locate the token in the sniffable prefix of `raw`, or None."""
    match = Rever.search(_b(raw)[:MINSNIFFSIZE])
    if match is None or match.start() > MAXVERFULLSPAN:
        return None
    return match


def sniff(raw: BytesLike) -> VersionToken:
    """
    Extract the version token from the front of a serialized record.

    Raises Incomplete when fewer than MINSNIFFSIZE bytes are available,
    MalformedVersionString when no token sits in the allowed window, and
    UnsupportedKind / UnsupportedVersion for a well-formed token this layer
    cannot process.
    """
    raw = _b(raw)
    if len(raw) < MINSNIFFSIZE:
        raise Incomplete(MINSNIFFSIZE, len(raw), "need more bytes to sniff version string")
    match = rematch(raw)
    if match is None:
        raise MalformedVersionString("no version string in record prefix")
    return _token(match)


__all__ = [
    "Version",
    "CURRENT_VERSION",
    "VERRAWSIZE",
    "VERFULLSIZE",
    "MAXVERFULLSPAN",
    "MINSNIFFSIZE",
    "MAXSIZE",
    "Rever",
    "SerialCodex",
    "Serials",
    "KINDS",
    "IdentCodex",
    "Idents",
    "IDENTS",
    "VersionToken",
    "versify",
    "deversify",
    "rematch",
    "sniff",
]
