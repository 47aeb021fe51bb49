"""
sad.utils.bytes
===============

Lightweight, dependency-free helpers around byte handling:

- Bytes-like normalisation: b()
- URL-safe base64 (RFC 4648 §5) with and without padding, the alphabet used
  by every text-domain primitive in this package

Examples
--------
>>> encode_b64(b"\\x00\\x01\\x02")
b'AAEC'
>>> decode_b64(b"AAEC")
b'\\x00\\x01\\x02'
"""

from __future__ import annotations

import base64
import re
from typing import Union

BytesLike = Union[bytes, bytearray, memoryview]

B64_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"
_B64_RE = re.compile(rb"\A[" + re.escape(B64_ALPHABET.encode("ascii")) + rb"]*\Z")


def b(x: Union[BytesLike, str]) -> bytes:
    """
    Normalize input to bytes:
    - bytes/bytearray/memoryview → bytes
    - str → utf-8 encode
    """
    if isinstance(x, bytes):
        return x
    if isinstance(x, bytearray):
        return bytes(x)
    if isinstance(x, memoryview):
        return x.tobytes()
    if isinstance(x, str):
        return x.encode("utf-8")
    raise TypeError(f"unsupported type for b(): {type(x)!r}")


def encode_b64(data: BytesLike) -> bytes:
    """URL-safe base64 encode without stripping pad characters."""
    return base64.urlsafe_b64encode(b(data))


def decode_b64(data: Union[BytesLike, str]) -> bytes:
    """
    URL-safe base64 decode. Accepts input whose length is a multiple of 4
    without '=' padding (the only shape text primitives take) and rejects any
    character outside the URL-safe alphabet.
    """
    raw = b(data)
    if not _B64_RE.match(raw):
        raise ValueError("invalid URL-safe base64 characters")
    if len(raw) % 4:
        raw += b"=" * (-len(raw) % 4)
    return base64.urlsafe_b64decode(raw)


__all__ = [
    "BytesLike",
    "B64_ALPHABET",
    "b",
    "encode_b64",
    "decode_b64",
]
