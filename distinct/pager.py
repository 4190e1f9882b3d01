"""Pager state and best-effort reconciliation after rows are removed.

Only the rows of the fetched page are deduplicated, so the corrected total
does not account for duplicates on pages that were never fetched.  The page
count derived from it can stay an over-estimate; e.g. 100 items at 10 per
page with 9 rows removed gives 91 items and still 10 pages.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable

from distinct.utils.logger import log_debug


@runtime_checkable
class PagerState(Protocol):
    """Pager handle the reconciler works against."""

    total_items: int

    def is_active(self) -> bool:
        ...

    def update_page_info(self) -> None:
        ...


@dataclass
class Pager:
    """Simple page-number pager."""

    items_per_page: int = 10
    total_items: int = 0
    current_page: int = 0
    total_pages: int = 0

    def __post_init__(self):
        self.update_page_info()

    def is_active(self) -> bool:
        return self.items_per_page > 0

    def update_page_info(self) -> None:
        """Recompute ``total_pages`` and keep ``current_page`` in range."""
        if not self.is_active():
            self.total_pages = 0
            return

        self.total_pages = math.ceil(max(self.total_items, 0) / self.items_per_page)
        if self.total_pages and self.current_page >= self.total_pages:
            self.current_page = self.total_pages - 1


def reconcile(pager: Optional[PagerState], new_total: int) -> None:
    """Push the corrected total into an active pager and let it recompute."""
    if pager is None or not pager.is_active():
        return

    previous = pager.total_items
    pager.total_items = new_total
    pager.update_page_info()
    log_debug(
        "Pager reconciled",
        previous_total=previous,
        total_items=new_total,
        total_pages=getattr(pager, "total_pages", None),
    )
