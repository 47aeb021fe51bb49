"""
sad.encoding.cbor_codec
-----------------------

Binary-map body codec backed by `cbor2`.

Records are *not* encoded in RFC 8949 canonical mode: the field order of a
ked is part of its wire layout (the version string must come first), so maps
are written in insertion order and read back in wire order.
"""

from __future__ import annotations

from typing import Any, Dict

import cbor2

KIND = "CBOR"


def dumps(ked: Dict[str, Any]) -> bytes:
    return cbor2.dumps(ked)


def loads(raw: bytes) -> Dict[str, Any]:
    return cbor2.loads(raw)
