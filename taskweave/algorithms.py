"""Chunked parallel algorithms: for-each, reduce, transform, sort and prefix scans.

Each algorithm splits its input into chunks of ``chunk_size`` items and hands
the chunks to a thread pool. Results are returned directly and keep the input
order where the algorithm has one.
"""

from __future__ import annotations

import heapq
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from itertools import accumulate
from typing import Any, TypeVar

T = TypeVar("T")
U = TypeVar("U")


def _chunks(data: Sequence[T], chunk_size: int) -> list[Sequence[T]]:
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be at least 1, got {chunk_size}")
    return [data[start:start + chunk_size] for start in range(0, len(data), chunk_size)]


def _map_chunks(
    work: Callable[[Any], U],
    chunks: Iterable[Any],
    max_workers: int | None,
) -> list[U]:
    """Run ``work`` on every chunk in a thread pool, results in chunk order."""
    chunks = list(chunks)
    if not chunks:
        return []
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        return list(pool.map(work, chunks))


def parallel_for_each(
    data: Iterable[T],
    chunk_size: int,
    func: Callable[[T], Any],
    max_workers: int | None = None,
) -> None:
    """Call ``func`` on every item, processing chunks in parallel."""

    def run(chunk: Sequence[T]) -> None:
        for item in chunk:
            func(item)

    _map_chunks(run, _chunks(list(data), chunk_size), max_workers)


def parallel_reduce(
    data: Iterable[T],
    chunk_size: int,
    identity: T,
    reduce_fn: Callable[[T, T], T],
    max_workers: int | None = None,
) -> T:
    """Fold every chunk from ``identity``, then fold the partial results the same way."""

    def fold(items: Iterable[T]) -> T:
        result = identity
        for item in items:
            result = reduce_fn(result, item)
        return result

    partials = _map_chunks(fold, _chunks(list(data), chunk_size), max_workers)
    return fold(partials)


def parallel_transform(
    data: Iterable[T],
    chunk_size: int,
    transform_fn: Callable[[T], U],
    max_workers: int | None = None,
) -> list[U]:
    """Apply ``transform_fn`` to every item and return the results in input order."""

    def run(chunk: Sequence[T]) -> list[U]:
        return [transform_fn(item) for item in chunk]

    mapped = _map_chunks(run, _chunks(list(data), chunk_size), max_workers)
    return [value for chunk in mapped for value in chunk]


def parallel_sort(
    data: Iterable[T],
    chunk_size: int,
    key: Callable[[T], Any] | None = None,
    max_workers: int | None = None,
) -> list[T]:
    """Return a sorted list: chunks are sorted in parallel, then merged.

    Inputs no longer than ``chunk_size`` are sorted in one step. The sort is stable.
    """
    items = list(data)
    chunks = _chunks(items, chunk_size)
    if len(items) <= chunk_size:
        return sorted(items, key=key)

    sorted_chunks = _map_chunks(lambda chunk: sorted(chunk, key=key), chunks, max_workers)
    return list(heapq.merge(*sorted_chunks, key=key))


def parallel_inclusive_scan(
    data: Iterable[T],
    chunk_size: int,
    op: Callable[[T, T], T],
    identity: T,
    max_workers: int | None = None,
) -> list[T]:
    """Return the inclusive prefix scan of ``data`` under the associative ``op``.

    Example: ``[1, 2, 3, 4]`` with addition gives ``[1, 3, 6, 10]``.
    """
    items = list(data)
    chunks = _chunks(items, chunk_size)
    if not items:
        return []

    # Phase 1: local scan of each chunk.
    local_scans = _map_chunks(lambda chunk: list(accumulate(chunk, op)), chunks, max_workers)

    # Phase 2: running combination of the chunk totals.
    prefixes = list(accumulate((scan[-1] for scan in local_scans), op))

    # Phase 3: fold the preceding prefix into every chunk after the first.
    def offset(pair: tuple[T, list[T]]) -> list[T]:
        prefix, scan = pair
        return [op(prefix, value) for value in scan]

    adjusted = _map_chunks(offset, zip(prefixes, local_scans[1:]), max_workers)

    result = list(local_scans[0])
    for scan in adjusted:
        result.extend(scan)
    return result


def parallel_exclusive_scan(
    data: Iterable[T],
    chunk_size: int,
    op: Callable[[T, T], T],
    identity: T,
    max_workers: int | None = None,
) -> list[T]:
    """Return the exclusive prefix scan: ``identity`` followed by the inclusive scan shifted right.

    Example: ``[1, 2, 3, 4]`` with addition gives ``[0, 1, 3, 6]``.
    """
    inclusive = parallel_inclusive_scan(data, chunk_size, op, identity, max_workers)
    if not inclusive:
        return []
    return [identity, *inclusive[:-1]]