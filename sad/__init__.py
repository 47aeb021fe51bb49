"""
sad: self-addressing data.

Records that carry a digest of themselves inside themselves, in JSON, CBOR or
MessagePack, with a fixed-width version string stating identity, kind and
exact size.

    from sad import Sadder

    rec = Sadder.from_ked({"v": "ACDC10JSON000000_", "d": "", "i": issuer})
    again = Sadder.from_raw(rec.raw)
    assert again.said == rec.said
"""

from __future__ import annotations

from .acdc import ACDC_IDENTS, credential_from_ked, credential_from_raw
from .batch import BatchResult, verify_many
from .errors import (
    CodecFailure,
    ConfigError,
    DigestMismatch,
    FieldMissing,
    Incomplete,
    InvalidMaterial,
    MalformedVersionString,
    SadError,
    UnexpectedIdentity,
    UnknownCode,
    UnsupportedKind,
    UnsupportedVersion,
)
from .matter import DigDex, Matter, MtrDex, lookup
from .sadder import Sadder
from .saider import Saider, verify_said
from .version import __version__
from .versioning import CURRENT_VERSION, Idents, Serials, VersionToken, deversify, sniff, versify

__all__ = [
    "__version__",
    # records
    "Sadder",
    "Saider",
    "verify_said",
    "verify_many",
    "BatchResult",
    "ACDC_IDENTS",
    "credential_from_raw",
    "credential_from_ked",
    # primitives
    "Matter",
    "MtrDex",
    "DigDex",
    "lookup",
    # version string
    "CURRENT_VERSION",
    "Idents",
    "Serials",
    "VersionToken",
    "versify",
    "deversify",
    "sniff",
    # errors
    "SadError",
    "UnknownCode",
    "MalformedVersionString",
    "UnsupportedVersion",
    "UnsupportedKind",
    "Incomplete",
    "UnexpectedIdentity",
    "DigestMismatch",
    "CodecFailure",
    "FieldMissing",
    "InvalidMaterial",
    "ConfigError",
]
