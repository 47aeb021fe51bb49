"""
sad.utils.hash
==============

Thin wrappers for the digest algorithms that have a code in the primitive
table. Every function takes bytes-like input and returns the raw digest.

Provided digests:
- blake3_256(data), blake3_512(data)      # `blake3` package
- blake2b_256(data), blake2b_512(data)    # hashlib
- blake2s_256(data)                       # hashlib
- sha3_256(data), sha3_512(data)          # hashlib
- sha2_256(data), sha2_512(data)          # hashlib

Digest length is fixed per function; callers rely on that to keep encoded
digests at a constant width.
"""

from __future__ import annotations

import hashlib

import blake3 as _blake3

from .bytes import BytesLike
from .bytes import b as _b


def blake3_256(data: BytesLike) -> bytes:
    """BLAKE3 digest, 32 bytes."""
    return _blake3.blake3(_b(data)).digest(length=32)


def blake3_512(data: BytesLike) -> bytes:
    """BLAKE3 extended output, 64 bytes."""
    return _blake3.blake3(_b(data)).digest(length=64)


def blake2b_256(data: BytesLike) -> bytes:
    return hashlib.blake2b(_b(data), digest_size=32).digest()


def blake2b_512(data: BytesLike) -> bytes:
    return hashlib.blake2b(_b(data), digest_size=64).digest()


def blake2s_256(data: BytesLike) -> bytes:
    return hashlib.blake2s(_b(data), digest_size=32).digest()


def sha3_256(data: BytesLike) -> bytes:
    """SHA3-256 digest."""
    return hashlib.sha3_256(_b(data)).digest()


def sha3_512(data: BytesLike) -> bytes:
    """SHA3-512 digest."""
    return hashlib.sha3_512(_b(data)).digest()


def sha2_256(data: BytesLike) -> bytes:
    return hashlib.sha256(_b(data)).digest()


def sha2_512(data: BytesLike) -> bytes:
    return hashlib.sha512(_b(data)).digest()


__all__ = [
    "blake3_256",
    "blake3_512",
    "blake2b_256",
    "blake2b_512",
    "blake2s_256",
    "sha3_256",
    "sha3_512",
    "sha2_256",
    "sha2_512",
]
