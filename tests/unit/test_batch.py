"""
Concurrent batch verification.
"""
from __future__ import annotations

import pytest

from sad.batch import BatchResult, verify_many
from sad.encoding import sizeify
from sad.errors import DigestMismatch, Incomplete, UnexpectedIdentity
from sad.sadder import Sadder


@pytest.fixture
def raws(acdc_ked, keri_ked):
    good = [Sadder.from_ked(acdc_ked(kind=k)).raw for k in ("JSON", "CBOR", "MGPK")]
    tampered = good[0].replace(b"5493001KJTIIGC8Y1R17", b"5493001KJTIIGC8Y1R18")
    keri = Sadder.from_ked(keri_ked()).raw
    return good + [tampered, good[1][:-3], keri]


def test_results_in_input_order(raws) -> None:
    results = verify_many(raws, max_workers=3)
    assert [r.index for r in results] == list(range(len(raws)))
    assert [r.ok for r in results] == [True, True, True, False, False, True]
    assert results[0].sadder.raw == raws[0]
    assert isinstance(results[3].error, DigestMismatch)
    assert isinstance(results[4].error, Incomplete)
    assert results[3].sadder is None


def test_errors_carry_index(raws) -> None:
    results = verify_many(raws)
    assert results[3].error.data["index"] == 3
    assert results[4].error.data["index"] == 4


def test_identity_gate(raws) -> None:
    results = verify_many(raws, idents={"ACDC"})
    assert isinstance(results[5].error, UnexpectedIdentity)
    assert results[0].ok


def test_single_worker_matches_pool(raws) -> None:
    serial = verify_many(raws, max_workers=1)
    pooled = verify_many(raws, max_workers=8)
    assert [(r.index, r.ok) for r in serial] == [(r.index, r.ok) for r in pooled]


def test_accepts_iterators(raws) -> None:
    results = verify_many(iter(raws[:2]))
    assert all(r.ok for r in results)


def test_empty() -> None:
    assert verify_many([]) == []


def test_result_shape() -> None:
    r = BatchResult(index=7)
    assert r.ok and r.sadder is None


def test_non_ascii_said_stays_in_its_slot(raws, acdc_ked) -> None:
    ked = Sadder.from_ked(acdc_ked()).ked
    ked["d"] = "1AAé" + "A" * 44
    bad, *_ = sizeify(ked)
    results = verify_many([raws[0], bad, raws[1]], max_workers=2)
    assert [r.ok for r in results] == [True, False, True]
    assert isinstance(results[1].error, DigestMismatch)
