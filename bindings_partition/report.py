"""Textual and structured reports of a computed partition."""
from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING, Any, Dict, List

from .pages import bin_weight, page_weight

if TYPE_CHECKING:  # pragma: no cover
    from .partitioner import Partition

__all__ = ["source_label", "format_report", "partition_summary"]


EMPTY_PARTITION = "Empty partition"


def source_label(source: Any) -> str:
    """Endpoint identifier of ``source``, falling back to ``str(source)``."""
    endpoint_id = getattr(source, "endpoint_id", None)
    if endpoint_id is not None:
        return str(endpoint_id)
    return str(source)


def format_report(partition: "Partition") -> str:
    if partition.metrics.page_count == 0:
        return EMPTY_PARTITION
    lines: List[str] = []
    for num, (source, pages) in enumerate(partition):
        lines.append(f"Pair n {num}")
        lines.append(f"-> source : {source_label(source)}")
        lines.append("-> #bindings :")
        for page in pages:
            lines.append(f"--> page of : {page_weight(page)} bindings")
        lines.append(f"-> total bindings : {bin_weight(pages)}")
    return "\n".join(lines)


def partition_summary(partition: "Partition") -> Dict[str, Any]:
    """JSON-serialisable view of ``partition``."""
    return {
        "algorithm": partition.algorithm.value,
        "assignments": [
            {
                "source": source_label(source),
                "page_sizes": [page_weight(page) for page in pages],
                "total_bindings": bin_weight(pages),
            }
            for source, pages in partition
        ],
        "metrics": dataclasses.asdict(partition.metrics),
    }
