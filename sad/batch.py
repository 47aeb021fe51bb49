"""
sad.batch
---------

Verify a stream of raw records on a worker pool.

Every operation in this package is a pure function of its input plus the
frozen code table, so records verify independently with no locking. Each
record yields one `BatchResult`; a rejected record carries its error instead
of raising, and results come back in input order whatever order the workers
finish in.

    results = verify_many(raws, idents={"ACDC"}, max_workers=8)
    good = [r.sadder for r in results if r.ok]
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from .errors import SadError
from .logging import get_logger
from .sadder import Sadder
from .saider import DEFAULT_LABEL
from .utils.bytes import BytesLike

log = get_logger(__name__)


@dataclass(frozen=True)
class BatchResult:
    index: int
    sadder: Optional[Sadder] = None
    error: Optional[SadError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _verify_one(
    index: int, raw: BytesLike, idents: Optional[frozenset], label: str
) -> BatchResult:
    try:
        return BatchResult(index=index, sadder=Sadder.from_raw(raw, idents=idents, label=label))
    except SadError as e:
        return BatchResult(index=index, error=e.with_context(index=index))


def verify_many(
    raws: Iterable[BytesLike],
    idents: Optional[Iterable[str]] = None,
    max_workers: Optional[int] = None,
    label: str = DEFAULT_LABEL,
) -> List[BatchResult]:
    """
    Decode and verify every record in `raws` concurrently.

    Only SadError is captured per record; anything else is a programming
    error and propagates.
    """
    items: Sequence[BytesLike] = list(raws)
    allowed = frozenset(idents) if idents is not None else None
    if not items:
        return []

    workers = max(1, min(int(max_workers or 4), len(items)))
    results: List[Optional[BatchResult]] = [None] * len(items)
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="sad-verify") as tp:
        futs = [tp.submit(_verify_one, i, raw, allowed, label) for i, raw in enumerate(items)]
        for fut in as_completed(futs):
            res = fut.result()
            results[res.index] = res

    out = [r for r in results if r is not None]
    log.debug(
        "batch verified",
        extra={"count": len(out), "rejected": sum(1 for r in out if not r.ok), "workers": workers},
    )
    return out


__all__ = ["BatchResult", "verify_many"]
