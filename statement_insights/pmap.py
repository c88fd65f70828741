"""Order-preserving, bounded-concurrency map over a thread pool.

Used to analyse several statement files at once while keeping the output in
file order. At most ``concurrency`` mapper calls run at the same time; the
first mapper error is re-raised and work that has not started yet is
cancelled.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import TypeVar

InT = TypeVar("InT")
OutT = TypeVar("OutT")


def p_map(
    iterable: Iterable[InT],
    mapper: Callable[[InT], OutT],
    *,
    concurrency: int,
) -> list[OutT]:
    """Map ``iterable`` through ``mapper`` with at most ``concurrency`` in flight.

    The returned list is aligned with the input order regardless of
    completion order.
    """

    if not isinstance(concurrency, int) or isinstance(concurrency, bool) or concurrency < 1:
        raise ValueError("concurrency must be a positive integer")

    pending = enumerate(iterable)
    results: dict[int, OutT] = {}
    index_of: dict[Future[OutT], int] = {}

    with ThreadPoolExecutor(max_workers=concurrency, thread_name_prefix="si-pmap") as pool:

        def _submit_next() -> Future[OutT] | None:
            try:
                idx, item = next(pending)
            except StopIteration:
                return None
            fut = pool.submit(mapper, item)
            index_of[fut] = idx
            return fut

        active: set[Future[OutT]] = set()
        for _ in range(concurrency):
            fut = _submit_next()
            if fut is None:
                break
            active.add(fut)

        while active:
            done, active = wait(active, return_when=FIRST_COMPLETED)
            for fut in done:
                idx = index_of.pop(fut)
                try:
                    results[idx] = fut.result()
                except Exception:
                    pool.shutdown(wait=False, cancel_futures=True)
                    raise
            for _ in range(len(done)):
                fut = _submit_next()
                if fut is None:
                    break
                active.add(fut)

    return [results[i] for i in range(len(results))]


__all__ = ["p_map"]
