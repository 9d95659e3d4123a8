"""Page and bin weight helpers.

A page is any sized sequence of binding tuples; its weight is its tuple count.
A bin is an ordered sequence of pages and weighs the sum of its pages.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional, Sequence, Tuple

from typing_extensions import TypeAlias

__all__ = [
    "Page",
    "Bin",
    "BindingsPage",
    "page_weight",
    "bin_weight",
    "sort_pages",
    "lightest_bin",
]


Page: TypeAlias = Sequence[Any]
Bin: TypeAlias = Sequence[Page]


@dataclass(frozen=True)
class BindingsPage:
    """Immutable batch of binding tuples handled as one unit of work."""

    bindings: Tuple[Any, ...] = field(default_factory=tuple)
    page_id: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.bindings, tuple):
            object.__setattr__(self, "bindings", tuple(self.bindings))

    @property
    def size(self) -> int:
        return len(self.bindings)

    def __len__(self) -> int:
        return len(self.bindings)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.bindings)

    def __getitem__(self, index: int) -> Any:
        return self.bindings[index]


def page_weight(page: Page) -> int:
    """Number of binding tuples held by ``page``."""
    return len(page)


def bin_weight(pages: Bin) -> int:
    """Total weight of the pages assigned to a bin."""
    return sum(page_weight(page) for page in pages)


def sort_pages(pages: Sequence[Page], *, descending: bool = False) -> List[Page]:
    """Return a new list of ``pages`` ordered by weight.

    The sort is stable in both directions, so pages of equal weight keep their
    input order.
    """
    return sorted(pages, key=page_weight, reverse=descending)


def lightest_bin(loads: Sequence[int]) -> int:
    """Index of the smallest running bin weight; ties go to the earliest bin."""
    if not loads:
        raise ValueError("loads must not be empty")
    return min(range(len(loads)), key=loads.__getitem__)
