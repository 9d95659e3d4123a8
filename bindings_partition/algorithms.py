"""Page placement algorithms.

Each algorithm takes the ordered sources and pages and returns a list of bins,
one ordered list of pages per bin. Bins are matched to sources positionally by
:class:`~bindings_partition.partitioner.BindingsPartitioner`.

* ``contiguous_chunks`` splits the input into consecutive chunks of
  ``ceil(pages / sources)``. Fast, but ignores page weight.
* ``best_fit_decreasing`` sorts pages by decreasing weight and puts each one in
  the currently lightest bin. The most balanced of the three.
* ``round_robin`` deals pages to bins cyclically in input order, balancing page
  counts but not weights.
"""
from __future__ import annotations

import enum
import math
from typing import Any, Callable, Dict, List, Optional, Sequence

from typing_extensions import TypeAlias

from .errors import EmptySourceList, UnknownAlgorithm
from .pages import Page, lightest_bin, page_weight, sort_pages
from .progress import ProgressController

__all__ = [
    "PartitionAlgorithm",
    "contiguous_chunks",
    "best_fit_decreasing",
    "round_robin",
    "algorithm_impl",
]


_BINS_TYPE: TypeAlias = List[List[Page]]


class PartitionAlgorithm(enum.Enum):
    """Supported partition algorithms."""

    CONTIGUOUS_CHUNK = "contiguous-chunk"
    BEST_FIT_DECREASING = "best-fit-decreasing"
    ROUND_ROBIN = "round-robin"

    @classmethod
    def parse(cls, value: Any) -> PartitionAlgorithm:
        if isinstance(value, PartitionAlgorithm):
            return value
        if not isinstance(value, str):
            raise UnknownAlgorithm(value)
        key = value.strip().lower().replace("_", "-")
        for member in cls:
            if member.value == key or member.name.lower().replace("_", "-") == key:
                return member
        if key in _ALIASES:
            return _ALIASES[key]
        raise UnknownAlgorithm(value)


_ALIASES = {
    "contiguous": PartitionAlgorithm.CONTIGUOUS_CHUNK,
    "chunk": PartitionAlgorithm.CONTIGUOUS_CHUNK,
    "brute-force": PartitionAlgorithm.CONTIGUOUS_CHUNK,
    "best-fit": PartitionAlgorithm.BEST_FIT_DECREASING,
    "bfd": PartitionAlgorithm.BEST_FIT_DECREASING,
    "rr": PartitionAlgorithm.ROUND_ROBIN,
    "cyclic": PartitionAlgorithm.ROUND_ROBIN,
}


def _require_sources(sources: Sequence[Any]) -> None:
    if not sources:
        raise EmptySourceList()


def contiguous_chunks(
    sources: Sequence[Any],
    pages: Sequence[Page],
    progress: Optional[ProgressController] = None,
) -> _BINS_TYPE:
    """Split ``pages`` into consecutive chunks, one per source in order.

    Only produced chunks are returned, so fewer bins than sources come back when
    pages run out early. Page weight is not considered.
    """
    _require_sources(sources)
    chunk_size = math.ceil(len(pages) / len(sources))
    bins: _BINS_TYPE = []
    current: List[Page] = []
    for page in pages:
        current.append(page)
        if len(current) == chunk_size:
            bins.append(current)
            current = []
        if progress:
            progress.advance(1)
    if current:
        bins.append(current)
    return bins


def best_fit_decreasing(
    sources: Sequence[Any],
    pages: Sequence[Page],
    progress: Optional[ProgressController] = None,
) -> _BINS_TYPE:
    """Place pages heaviest first, each into the currently lightest bin.

    Equal-weight pages keep their input order and weight ties between bins go
    to the earliest bin. ``pages`` itself is left untouched.
    """
    _require_sources(sources)
    bins: _BINS_TYPE = [[] for _ in sources]
    loads = [0] * len(bins)
    for page in sort_pages(pages, descending=True):
        idx = lightest_bin(loads)
        bins[idx].append(page)
        loads[idx] += page_weight(page)
        if progress:
            progress.advance(1)
    return bins


def round_robin(
    sources: Sequence[Any],
    pages: Sequence[Page],
    progress: Optional[ProgressController] = None,
) -> _BINS_TYPE:
    """Deal page ``i`` to bin ``i mod len(sources)``."""
    _require_sources(sources)
    bins: _BINS_TYPE = [[] for _ in sources]
    for idx, page in enumerate(pages):
        bins[idx % len(bins)].append(page)
        if progress:
            progress.advance(1)
    return bins


_ALGORITHM_IMPL: Dict[PartitionAlgorithm, Callable[..., _BINS_TYPE]] = {
    PartitionAlgorithm.CONTIGUOUS_CHUNK: contiguous_chunks,
    PartitionAlgorithm.BEST_FIT_DECREASING: best_fit_decreasing,
    PartitionAlgorithm.ROUND_ROBIN: round_robin,
}


def algorithm_impl(algorithm: Any) -> Callable[..., _BINS_TYPE]:
    """Resolve a selector to its placement function."""
    return _ALGORITHM_IMPL[PartitionAlgorithm.parse(algorithm)]
