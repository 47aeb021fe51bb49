"""
sad.encoding.mgpk_codec
-----------------------

Compact binary body codec (MessagePack) backed by `msgspec.msgpack`.
Maps keep insertion order on encode and wire order on decode.
"""

from __future__ import annotations

from typing import Any, Dict

from msgspec import msgpack as _msgpack

KIND = "MGPK"


def dumps(ked: Dict[str, Any]) -> bytes:
    return _msgpack.encode(ked)


def loads(raw: bytes) -> Dict[str, Any]:
    return _msgpack.decode(raw)
