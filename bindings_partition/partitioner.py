"""Partition engine for parallel bound joins.

The engine holds an ordered list of sources and a list of binding pages and
turns them into a :class:`Partition`: one ``(source, pages)`` pair per source,
in configured source order, for the selected :class:`PartitionAlgorithm`.

Usage::

    partitioner = BindingsPartitioner(sources, pages)
    partition = partitioner.partition("best-fit-decreasing")
    for source, assigned in partition:
        ...

An engine instance keeps mutable state (configuration and the last computed
partition) and is not safe to share between threads without external locking.
Build one engine per request when partitioning concurrently.
"""
from __future__ import annotations

import dataclasses
import statistics
import time
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, List, NamedTuple, Optional, Sequence, Tuple

from .algorithms import PartitionAlgorithm, algorithm_impl
from .config import PartitionerSettings
from .errors import EmptySourceList, SourceExhausted, UnknownAlgorithm
from .logger import StructuredLogger
from .pages import Page, bin_weight
from .progress import ProgressController
from .report import format_report

__all__ = [
    "BindingsPartitioner",
    "Partition",
    "PartitionMetrics",
    "SourceAssignment",
]


class SourceAssignment(NamedTuple):
    """Pages assigned to one source."""

    source: Any
    pages: Tuple[Page, ...]

    @property
    def weight(self) -> int:
        return bin_weight(self.pages)


@dataclass(frozen=True)
class PartitionMetrics:
    """Balance statistics for a computed partition."""

    bin_count: int
    page_count: int
    empty_bins: int
    total_weight: int
    min_weight: int
    max_weight: int
    mean_weight: float
    stddev_weight: float
    weight_gini: float
    imbalance_ratio: float
    weight_spread: int


@dataclass(frozen=True)
class Partition:
    """Final assignment of every page to exactly one source."""

    algorithm: PartitionAlgorithm
    assignments: Tuple[SourceAssignment, ...]
    metrics: PartitionMetrics

    def __iter__(self) -> Iterator[SourceAssignment]:
        return iter(self.assignments)

    def __len__(self) -> int:
        return len(self.assignments)

    def __getitem__(self, index: int) -> SourceAssignment:
        return self.assignments[index]

    @property
    def sources(self) -> Tuple[Any, ...]:
        return tuple(assignment.source for assignment in self.assignments)

    @property
    def bins(self) -> Tuple[Tuple[Page, ...], ...]:
        return tuple(assignment.pages for assignment in self.assignments)


def _gini(values: Sequence[float]) -> float:
    sorted_values = sorted(values)
    n = len(sorted_values)
    cumulative = 0.0
    cumulative_sum = 0.0
    for value in sorted_values:
        cumulative += value
        cumulative_sum += cumulative
    if not cumulative:
        return 0.0
    return (n + 1 - 2 * (cumulative_sum / cumulative)) / n


def _calculate_metrics(assignments: Sequence[SourceAssignment]) -> PartitionMetrics:
    weights = [assignment.weight for assignment in assignments]
    total_weight = sum(weights)
    min_weight = min(weights)
    max_weight = max(weights)
    mean_weight = total_weight / len(weights)
    return PartitionMetrics(
        bin_count=len(assignments),
        page_count=sum(len(assignment.pages) for assignment in assignments),
        empty_bins=sum(1 for assignment in assignments if not assignment.pages),
        total_weight=total_weight,
        min_weight=min_weight,
        max_weight=max_weight,
        mean_weight=mean_weight,
        stddev_weight=statistics.pstdev(weights) if len(weights) > 1 else 0.0,
        weight_gini=_gini(weights),
        imbalance_ratio=max_weight / mean_weight if mean_weight else 0.0,
        weight_spread=max_weight - min_weight,
    )


def _assemble(sources: Sequence[Any], bins: Sequence[List[Page]]) -> Tuple[SourceAssignment, ...]:
    # Sources without a bin (contiguous chunking ran out of pages) get an empty one.
    return tuple(
        SourceAssignment(source, tuple(bins[idx]) if idx < len(bins) else ())
        for idx, source in enumerate(sources)
    )


class BindingsPartitioner:
    """Distribute binding pages over federated sources."""

    def __init__(
        self,
        sources: Iterable[Any] = (),
        pages: Iterable[Page] = (),
        *,
        settings: Optional[PartitionerSettings] = None,
        logger: Optional[StructuredLogger] = None,
    ) -> None:
        self._settings = settings or PartitionerSettings.from_config()
        self._logger = logger or StructuredLogger.get_logger("partitioner")
        self._sources: Tuple[Any, ...] = ()
        self._pages: Tuple[Page, ...] = ()
        self._partition: Optional[Partition] = None
        self.configure(sources, pages)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    @property
    def sources(self) -> Tuple[Any, ...]:
        return self._sources

    @property
    def pages(self) -> Tuple[Page, ...]:
        return self._pages

    @property
    def settings(self) -> PartitionerSettings:
        return self._settings

    @property
    def last_partition(self) -> Optional[Partition]:
        return self._partition

    def configure(self, sources: Iterable[Any], pages: Iterable[Page]) -> None:
        """Replace the configured sources and pages and drop any stored partition."""

        self._sources = tuple(sources)
        self._pages = tuple(pages)
        self._partition = None
        self._logger.debug(
            "partition_configured",
            source_count=len(self._sources),
            page_count=len(self._pages),
        )

    def partition(self, algorithm: Optional[Any] = None) -> Partition:
        """Compute and store the partition for ``algorithm``.

        ``algorithm`` is a :class:`PartitionAlgorithm`, its value, name or an
        alias; ``None`` selects the configured default.
        """

        selector = self._settings.default_algorithm if algorithm is None else algorithm
        try:
            selected = PartitionAlgorithm.parse(selector)
        except UnknownAlgorithm:
            self._logger.warning("partition_rejected", reason="unknown_algorithm", selector=repr(selector))
            raise
        if not self._sources:
            self._logger.warning(
                "partition_rejected",
                reason="empty_source_list",
                algorithm=selected.value,
                page_count=len(self._pages),
            )
            raise EmptySourceList()

        started = time.perf_counter()
        impl = algorithm_impl(selected)
        with ProgressController(
            total_units=len(self._pages),
            description=self._settings.progress_description,
            enabled=self._settings.show_progress,
        ) as progress:
            bins = impl(self._sources, self._pages, progress)
        if len(bins) > len(self._sources):
            self._logger.warning(
                "partition_rejected",
                reason="source_exhausted",
                algorithm=selected.value,
                bin_count=len(bins),
                source_count=len(self._sources),
            )
            raise SourceExhausted(len(bins), len(self._sources))

        assignments = _assemble(self._sources, bins)
        metrics = _calculate_metrics(assignments)
        self._partition = Partition(algorithm=selected, assignments=assignments, metrics=metrics)
        self._logger.debug(
            "partition_completed",
            algorithm=selected.value,
            source_count=len(self._sources),
            latency_ms=round((time.perf_counter() - started) * 1000.0, 3),
            metrics=dataclasses.asdict(metrics),
        )
        return self._partition

    def report(self) -> str:
        """Human-readable description of the stored partition."""

        if self._partition is None:
            raise RuntimeError("no partition computed yet; call partition() first")
        return format_report(self._partition)
