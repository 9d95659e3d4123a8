"""Partition binding pages across federated sources for parallel bound joins."""

from .algorithms import PartitionAlgorithm, best_fit_decreasing, contiguous_chunks, round_robin
from .config import Config, PartitionerSettings
from .errors import EmptySourceList, PartitionError, SourceExhausted, UnknownAlgorithm
from .logger import StructuredLogger
from .pages import BindingsPage, bin_weight, page_weight
from .partitioner import BindingsPartitioner, Partition, PartitionMetrics, SourceAssignment
from .report import format_report, partition_summary

__all__ = [
    "BindingsPage",
    "BindingsPartitioner",
    "Config",
    "EmptySourceList",
    "Partition",
    "PartitionAlgorithm",
    "PartitionError",
    "PartitionMetrics",
    "PartitionerSettings",
    "SourceAssignment",
    "SourceExhausted",
    "StructuredLogger",
    "UnknownAlgorithm",
    "best_fit_decreasing",
    "bin_weight",
    "contiguous_chunks",
    "format_report",
    "page_weight",
    "partition_summary",
    "round_robin",
]
