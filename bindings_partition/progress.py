#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Progress reporting for page placement, built on top of tqdm."""

from __future__ import annotations

from typing import Optional

from tqdm import tqdm


class ProgressController:
    """Drive a tqdm bar while pages are placed into bins.

    - The bar counts pages, one unit per placed page.
    - A disabled controller keeps counting but never renders.
    - Partitioning is single-threaded, so units are pushed directly to the bar.
    """

    def __init__(self, total_units: int, description: str = "", *, enabled: bool = True) -> None:
        self.total_units = max(int(total_units), 0)
        self.description = description or "Progress"
        self.enabled = enabled
        self._bar: Optional[tqdm] = None
        self._completed_units: int = 0

    def __enter__(self) -> "ProgressController":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def completed_units(self) -> int:
        return self._completed_units

    def start(self) -> None:
        """Open the progress bar."""
        if self._bar is not None:
            return
        self._bar = tqdm(
            total=self.total_units,
            desc=self.description,
            unit="page",
            dynamic_ncols=True,
            mininterval=0.2,
            leave=False,
            disable=not self.enabled,
        )

    def advance(self, units: int = 1) -> None:
        """Record ``units`` placed pages."""
        if units <= 0:
            return
        self._completed_units += units
        if self._bar is not None:
            self._bar.update(units)

    def close(self) -> None:
        """Close the bar and release the terminal."""
        if self._bar is None:
            return
        self._bar.close()
        self._bar = None
