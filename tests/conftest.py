"""
Shared pytest fixtures:
- Clean SAD_* environment per test
- Reset of the ``sad`` logger and logging context (the CLI reconfigures it)
- Ready-made credential (ACDC) and key-event (KERI) field maps
"""
from __future__ import annotations

import logging
import os
from typing import Any, Callable, Dict

import pytest

from sad import logging as slog
from sad.versioning import versify

ISSUER = "EIssuerAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA"
REGISTRY = "ERegistryAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA"
SCHEMA = "ESchemaAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA"
HOLDER = "EHolderAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for k in list(os.environ):
        if k.startswith("SAD_"):
            monkeypatch.delenv(k, raising=False)


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    root = logging.getLogger(slog.ROOT_LOGGER)
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()
    root.setLevel(logging.NOTSET)
    root.propagate = True
    slog.clear_context()


@pytest.fixture
def acdc_ked() -> Callable[..., Dict[str, Any]]:
    """Factory for a credential field map with an empty SAID and zero size."""

    def make(kind: str = "JSON", with_status: bool = True, **extra: Any) -> Dict[str, Any]:
        ked: Dict[str, Any] = {
            "v": versify("ACDC", kind=kind, size=0),
            "d": "",
            "i": ISSUER,
        }
        if with_status:
            ked["ri"] = REGISTRY
        ked["s"] = SCHEMA
        ked["a"] = {
            "d": "",
            "i": HOLDER,
            "dt": "2026-10-19T09:00:00.000000+00:00",
            "LEI": "5493001KJTIIGC8Y1R17",
        }
        ked.update(extra)
        return ked

    return make


@pytest.fixture
def keri_ked() -> Callable[..., Dict[str, Any]]:
    """Factory for a minimal key-event (inception-like) field map."""

    def make(kind: str = "JSON") -> Dict[str, Any]:
        return {
            "v": versify("KERI", kind=kind, size=0),
            "t": "icp",
            "d": "",
            "i": "DKeyAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA",
            "s": "0",
            "kt": "1",
            "k": ["DKeyAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA"],
            "nt": "0",
            "n": [],
            "bt": "0",
            "b": [],
            "c": [],
            "a": [],
        }

    return make
