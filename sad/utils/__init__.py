"""
sad.utils
---------

Small stdlib-first helpers shared across the package:

- `bytes` : bytes-like normalisation, URL-safe base64 codec
- `hash`  : digest primitives (BLAKE3, BLAKE2, SHA3, SHA2)

Names like `bytes` and `hash` shadow Python builtins if imported directly;
prefer module-qualified access (`utils.bytes`, `utils.hash`).
"""

from __future__ import annotations

from . import bytes as bytes_utils
from . import hash as hash_utils

__all__ = ["bytes_utils", "hash_utils"]
