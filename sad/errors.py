"""
sad.errors
----------

A small, consistent error system for the self-addressing data layer.

Design goals
------------
- One root `SadError` with machine-friendly `code` and optional `data`.
- One concrete subclass per failure kind of the decode/encode pipeline
  (code table, version string, kind, buffer shortage, identity gate, digest,
  body codec, missing field, config).
- Safe JSON representation (`to_dict`) suitable for logs and bridges.
- Every failure here is permanent: the layer never retries, so `retryable`
  is always False unless a caller wraps something else.

This module uses only stdlib to avoid import-time dependency cycles.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Type, TypeVar

# ---------------------------------------------------------------------------
# Error codes & classes
# ---------------------------------------------------------------------------


class SadErrorCode(str, Enum):
    INTERNAL = "SAD/INTERNAL"
    CONFIG = "SAD/CONFIG"

    # Primitive code table
    UNKNOWN_CODE = "SAD/UNKNOWN_CODE"

    # Version string
    MALFORMED_VERSION = "SAD/MALFORMED_VERSION_STRING"
    UNSUPPORTED_VERSION = "SAD/UNSUPPORTED_VERSION"
    UNSUPPORTED_KIND = "SAD/UNSUPPORTED_KIND"

    # Record pipeline
    INCOMPLETE = "SAD/INCOMPLETE"
    UNEXPECTED_IDENTITY = "SAD/UNEXPECTED_IDENTITY"
    DIGEST_MISMATCH = "SAD/DIGEST_MISMATCH"
    CODEC_FAILURE = "SAD/CODEC_FAILURE"
    FIELD_MISSING = "SAD/FIELD_MISSING"
    INVALID_MATERIAL = "SAD/INVALID_MATERIAL"


@dataclass(eq=False)
class SadError(Exception):
    """
    Root error for the sad package.

    Attributes
    ----------
    code: str
        Machine-stable error code (see SadErrorCode).
    message: str
        Human hint suitable for logs.
    data: dict
        Optional machine data (codes, sizes, idents). Must be JSON-serializable.
    retryable: bool
        Whether the operation may succeed on retry without changing inputs.
    cause: Optional[BaseException]
        Wrapped original exception; not included in equality comparison.
    """

    code: str
    message: str
    data: Dict[str, Any] = field(default_factory=dict)
    retryable: bool = False
    cause: Optional[BaseException] = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        super().__init__(f"{_code_str(self.code)}: {self.message}")
        if self.cause is not None:
            self.__cause__ = self.cause

    # ---------------- Public API ----------------

    def with_context(self, **ctx: Any) -> "SadError":
        """Return a *new* error with extra context merged (does not mutate)."""
        out = self._clone()
        out.data = {**self.data, **_jsonmap(ctx)}
        return out

    def with_cause(self, exc: BaseException) -> "SadError":
        """Attach/replace the causal exception (returns a new instance)."""
        out = self._clone()
        out.data = dict(self.data)
        out.cause = exc
        out.__cause__ = exc
        return out

    def _clone(self) -> "SadError":
        # subclasses have their own __init__ signatures; copy state directly
        out = type(self).__new__(type(self))
        out.__dict__.update(self.__dict__)
        out.args = self.args
        return out

    def to_dict(self, include_cause: bool = False) -> Dict[str, Any]:
        """JSON-safe shape suitable for logs."""
        out = {
            "code": _code_str(self.code),
            "message": self.message,
            "data": _jsonmap(self.data),
            "retryable": self.retryable,
        }
        if include_cause and self.cause is not None:
            out["cause"] = {
                "type": type(self.cause).__name__,
                "message": str(self.cause),
            }
        return out

    def __str__(self) -> str:  # pragma: no cover - human formatting
        parts = [f"{_code_str(self.code)}: {self.message}"]
        if self.data:
            preview = ", ".join(f"{k}={_preview(v)}" for k, v in self.data.items())
            parts.append(f"[{preview}]")
        return " ".join(parts)


class InternalError(SadError):
    def __init__(self, message="internal error", **data: Any) -> None:
        super().__init__(code=SadErrorCode.INTERNAL, message=message, data=_jsonmap(data))


class ConfigError(SadError):
    def __init__(self, message="invalid configuration", **data: Any) -> None:
        super().__init__(code=SadErrorCode.CONFIG, message=message, data=_jsonmap(data))


class UnknownCode(SadError):
    """Primitive code absent from the code table (or not valid in this role)."""

    def __init__(self, code: Any, message: str = "", **data: Any) -> None:
        super().__init__(
            code=SadErrorCode.UNKNOWN_CODE,
            message=message or f"unknown primitive code {code!r}",
            data=_jsonmap({"primitive": code, **data}),
        )


class MalformedVersionString(SadError):
    def __init__(self, message="malformed version string", **data: Any) -> None:
        super().__init__(
            code=SadErrorCode.MALFORMED_VERSION, message=message, data=_jsonmap(data)
        )


class UnsupportedVersion(MalformedVersionString):
    def __init__(self, major: int, minor: int) -> None:
        # skip MalformedVersionString.__init__, it fixes the code
        SadError.__init__(
            self,
            code=SadErrorCode.UNSUPPORTED_VERSION,
            message=f"unsupported protocol version {major}.{minor}",
            data={"major": major, "minor": minor},
        )


class UnsupportedKind(SadError):
    def __init__(self, kind: Any) -> None:
        super().__init__(
            code=SadErrorCode.UNSUPPORTED_KIND,
            message=f"unsupported serialization kind {kind!r}",
            data=_jsonmap({"kind": kind}),
        )


class Incomplete(SadError):
    """Buffer holds fewer bytes than needed; more may arrive on a stream."""

    def __init__(self, needed: int, got: int, message: str = "") -> None:
        super().__init__(
            code=SadErrorCode.INCOMPLETE,
            message=message or f"need {needed} bytes, got {got}",
            data={"needed": needed, "got": got},
        )


class UnexpectedIdentity(SadError):
    def __init__(self, ident: str, allowed: Any) -> None:
        super().__init__(
            code=SadErrorCode.UNEXPECTED_IDENTITY,
            message=f"unexpected protocol identity {ident!r}",
            data={"ident": ident, "allowed": sorted(allowed)},
        )


class DigestMismatch(SadError):
    def __init__(self, message="digest verification failed", **data: Any) -> None:
        super().__init__(
            code=SadErrorCode.DIGEST_MISMATCH, message=message, data=_jsonmap(data)
        )


class CodecFailure(SadError):
    """Body codec could not encode/decode; the codec's own error is `cause`."""

    def __init__(self, kind: str, op: str, message: str = "", **data: Any) -> None:
        super().__init__(
            code=SadErrorCode.CODEC_FAILURE,
            message=message or f"{kind} {op} failed",
            data=_jsonmap({"kind": kind, "op": op, **data}),
        )


class FieldMissing(SadError):
    def __init__(self, label: str) -> None:
        super().__init__(
            code=SadErrorCode.FIELD_MISSING,
            message=f"missing field {label!r}",
            data={"label": label},
        )


class InvalidMaterial(SadError):
    """Raw or text primitive with the wrong length or a non-zero pad."""

    def __init__(self, message="invalid primitive material", **data: Any) -> None:
        super().__init__(
            code=SadErrorCode.INVALID_MATERIAL, message=message, data=_jsonmap(data)
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

T = TypeVar("T", bound=SadError)


def wrap(exc: BaseException, *, as_: Type[T] = InternalError, **ctx: Any) -> SadError:
    """
    Wrap any exception into a SadError subclass, attaching context.
    If `exc` is already a SadError, returns a context-enriched copy.
    """
    if isinstance(exc, SadError):
        return exc.with_context(**ctx)
    err = as_(str(exc) or "wrapped exception", **ctx)  # type: ignore[call-arg]
    return err.with_cause(exc)


def _code_str(code: Any) -> str:
    return code.value if isinstance(code, Enum) else str(code)


def _jsonmap(data: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: _coerce_json(v) for k, v in data.items()}


def _coerce_json(v: Any) -> Any:
    # Keep JSON primitives; stringify the rest; hex-encode bytes.
    if v is None or isinstance(v, (bool, int, float, str, list, dict)):
        return v
    if isinstance(v, (bytes, bytearray)):
        return v.hex()
    if isinstance(v, (set, frozenset, tuple)):
        return [_coerce_json(x) for x in v]
    return str(v)


def _preview(v: Any, limit: int = 96) -> str:
    s = str(_coerce_json(v))
    return s if len(s) <= limit else s[:limit] + "…"


__all__ = [
    "SadErrorCode",
    "SadError",
    "InternalError",
    "ConfigError",
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
    "wrap",
]
