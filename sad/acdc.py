"""
sad.acdc
--------

Credential (ACDC) records: a `Sadder` gated to the ``ACDC`` identity, plus
free-function projections over its well-known fields.

    cred = credential_from_raw(raw)
    issuer(cred), schema(cred), status(cred)

Projections read the stored ked; optional blocks (``ri``, ``e``) return an
absent value instead of raising.

Edge blocks (``e``) are covered by the outer SAID only. Nested blocks that
carry their own ``d`` are not verified here.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from .errors import FieldMissing
from .matter import DigDex
from .sadder import Sadder
from .saider import DEFAULT_LABEL
from .utils.bytes import BytesLike
from .versioning import Idents

ACDC_IDENTS = frozenset({Idents.ACDC})


def credential_from_raw(raw: BytesLike, label: str = DEFAULT_LABEL) -> Sadder:
    """Decode and verify a credential; non-ACDC records raise UnexpectedIdentity."""
    return Sadder.from_raw(raw, idents=ACDC_IDENTS, label=label)


def credential_from_ked(
    ked: Mapping[str, Any],
    code: str = DigDex.Blake3_256,
    kind: Optional[str] = None,
    label: str = DEFAULT_LABEL,
) -> Sadder:
    return Sadder.from_ked(ked, code=code, kind=kind, idents=ACDC_IDENTS, label=label)


# ---------------- projections ----------------


def crd(cred: Sadder) -> Dict[str, Any]:
    """Whole field map (a copy)."""
    return cred.ked


def _field(cred: Sadder, label: str) -> Any:
    ked = cred.ked
    if label not in ked:
        raise FieldMissing(label)
    return ked[label]


def issuer(cred: Sadder) -> Any:
    return _field(cred, "i")


def schema(cred: Sadder) -> Any:
    return _field(cred, "s")


def subject(cred: Sadder) -> Any:
    return _field(cred, "a")


def status(cred: Sadder) -> Optional[Any]:
    """Registry reference (``ri``), or None for a credential without one."""
    return cred.ked.get("ri")


def chains(cred: Sadder) -> Any:
    return cred.ked.get("e", {})


__all__ = [
    "ACDC_IDENTS",
    "credential_from_raw",
    "credential_from_ked",
    "crd",
    "issuer",
    "schema",
    "subject",
    "status",
    "chains",
]
