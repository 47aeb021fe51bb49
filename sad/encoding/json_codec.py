"""
sad.encoding.json_codec
-----------------------

Text body codec. Compact separators, no ASCII escaping, insertion order kept,
so the same ked always yields the same UTF-8 bytes.
"""

from __future__ import annotations

import json
from typing import Any, Dict

KIND = "JSON"


def dumps(ked: Dict[str, Any]) -> bytes:
    return json.dumps(ked, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def loads(raw: bytes) -> Dict[str, Any]:
    return json.loads(raw.decode("utf-8"))
