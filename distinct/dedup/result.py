"""Data classes for dedup pass results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Tuple


@dataclass(frozen=True)
class PassResult:
    """Outcome of one dedup pass over a result set.

    Attributes:
        pass_name: ``"raw"`` or ``"rendered"``.
        fields: Field identifiers the pass compared, in evaluation order.
        removed_indices: Original indices of the rows the pass removed.
        rows_before: Rows on the page before the pass.
        rows_after: Rows on the page after the pass.
        total_rows: Running total after the pass.
        skipped: Why the pass did nothing (``"disabled"``, ``"no_fields"``,
            ``"out_of_order"``), or ``None`` when it ran.
    """

    pass_name: str
    fields: Tuple[str, ...] = ()
    removed_indices: FrozenSet[int] = field(default_factory=frozenset)
    rows_before: int = 0
    rows_after: int = 0
    total_rows: int = 0
    skipped: str | None = None

    @property
    def removed(self) -> int:
        return len(self.removed_indices)
