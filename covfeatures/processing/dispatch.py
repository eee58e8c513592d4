"""Partitioned thread-parallel loop over point ids."""

from concurrent.futures import ThreadPoolExecutor, wait
from typing import Callable, List, Tuple


def partition_ranges(n: int, threads: int) -> List[Tuple[int, int]]:
    """Split [0, n) into ``threads`` contiguous ranges whose sizes differ by at most one."""
    if threads < 1:
        raise ValueError(f"threads must be >= 1, got {threads}")
    n = int(n)
    return [(t * n // threads, (t + 1) * n // threads) for t in range(threads)]


def _run_range(fn: Callable[[int], object], start: int, end: int) -> None:
    for i in range(start, end):
        fn(i)


def run_partitioned(n: int, threads: int, fn: Callable[[int], object]) -> None:
    """
    Call ``fn(i)`` for every i in [0, n), one worker per contiguous range.

    Every worker is joined before returning. If any worker raised, the first
    failure in range order is re-raised; siblings are not cancelled.
    """
    ranges = partition_ranges(n, threads)

    if threads == 1:
        _run_range(fn, *ranges[0])
        return

    with ThreadPoolExecutor(max_workers=threads) as executor:
        futures = [executor.submit(_run_range, fn, start, end) for start, end in ranges]
        wait(futures)

    for future in futures:
        exc = future.exception()
        if exc is not None:
            raise exc
