"""
Verification driver.

Runs PuzzleVerifier over every catalog record and aggregates the verdicts.
Records are independent, so they can be spread over a thread pool; the
report always comes back in catalog order.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Dict, Iterable, List, Optional, Tuple

from .catalog import PuzzleCatalog
from .puzzle_types import (
    Bucket,
    FailureKind,
    PuzzleRecord,
    PuzzleReport,
    VerificationReport,
    VerificationVerdict,
)
from .verifier import PuzzleVerifier

logger = logging.getLogger(__name__)

TIMED_OUT = VerificationVerdict.failure("verification timed out", FailureKind.TIMEOUT)


def verify_records(
    records: Iterable[Tuple[Bucket, PuzzleRecord]],
    verifier: Optional[PuzzleVerifier] = None,
    max_workers: int = 1,
    timeout: Optional[float] = None,
) -> VerificationReport:
    """
    Verify (bucket, record) pairs and collect a report.

    With max_workers > 1 or a timeout, records are verified on a thread pool.
    A record still running `timeout` seconds after it started is reported as
    timed out; its worker is left to finish on its own.
    """
    verifier = verifier or PuzzleVerifier()
    items = [record for _bucket, record in records]

    if max_workers <= 1 and timeout is None:
        return VerificationReport([PuzzleReport(r, verifier.verify(r)) for r in items])

    verdicts = _verify_on_pool(items, verifier, max(1, max_workers), timeout)
    return VerificationReport([PuzzleReport(r, v) for r, v in zip(items, verdicts)])


def _verify_on_pool(
    items: List[PuzzleRecord],
    verifier: PuzzleVerifier,
    max_workers: int,
    timeout: Optional[float],
) -> List[VerificationVerdict]:
    """
    Verify records with at most `max_workers` running at once.

    A record is only submitted when a slot is free, so its deadline starts
    when it starts running. A timed-out record gives its slot back; the pool
    is sized so an abandoned worker never blocks the records after it.
    """
    verdicts: List[Optional[VerificationVerdict]] = [None] * len(items)
    pending = deque(range(len(items)))
    running: Dict[Future, Tuple[int, float]] = {}

    pool = ThreadPoolExecutor(max_workers=max(1, len(items)), thread_name_prefix="verify")
    try:
        while pending or running:
            while pending and len(running) < max_workers:
                index = pending.popleft()
                running[pool.submit(verifier.verify, items[index])] = (index, time.monotonic())

            wait_for = None
            if timeout is not None:
                first_deadline = min(started for _i, started in running.values()) + timeout
                wait_for = max(0.0, first_deadline - time.monotonic())
            done, _ = wait(list(running), timeout=wait_for, return_when=FIRST_COMPLETED)

            for future in done:
                index, _started = running.pop(future)
                verdicts[index] = future.result()

            if timeout is None:
                continue
            now = time.monotonic()
            for future, (index, started) in list(running.items()):
                if now - started >= timeout and not future.done():
                    del running[future]
                    logger.warning("Puzzle %s timed out after %ss", items[index].id, timeout)
                    verdicts[index] = TIMED_OUT
    finally:
        pool.shutdown(wait=False)

    return verdicts


def verify_catalog(
    catalog: PuzzleCatalog,
    verifier: Optional[PuzzleVerifier] = None,
    max_workers: int = 1,
    timeout: Optional[float] = None,
) -> VerificationReport:
    """Verify every puzzle in the catalog."""
    report = verify_records(catalog.iterate(), verifier, max_workers=max_workers, timeout=timeout)
    logger.info("Verified %d puzzles: %d passed, %d failed", report.total, report.passed, report.failed)
    return report
