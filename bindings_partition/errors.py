"""Error taxonomy for the bindings partition engine."""
from __future__ import annotations

from typing import Any

__all__ = [
    "PartitionError",
    "EmptySourceList",
    "UnknownAlgorithm",
    "SourceExhausted",
]


class PartitionError(Exception):
    """Base class for partitioning misuse and configuration errors."""


class EmptySourceList(PartitionError, ValueError):
    """Raised when a partition is requested without any configured source."""

    def __init__(self, message: str = "at least one source is required to partition pages") -> None:
        super().__init__(message)


class UnknownAlgorithm(PartitionError, ValueError):
    """Raised when an algorithm selector does not name a supported algorithm."""

    def __init__(self, value: Any) -> None:
        super().__init__(f"Unsupported partition algorithm: {value!r}")
        self.value = value


class SourceExhausted(PartitionError, RuntimeError):
    """Raised when an algorithm produced more bins than there are sources."""

    def __init__(self, bin_count: int, source_count: int) -> None:
        super().__init__(f"{bin_count} bins produced for {source_count} configured sources")
        self.bin_count = bin_count
        self.source_count = source_count
