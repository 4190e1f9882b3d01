"""Rows and the in-place mutable result set they live in."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional

from distinct.utils.logger import log_debug


@dataclass
class Row:
    """One row of a result page.

    ``index`` is the row's position in the page as fetched; it never changes
    when other rows are removed.  ``entity_id`` identifies the backing entity,
    when the row has one.
    """

    index: int
    values: Mapping[str, Any] = field(default_factory=dict)
    entity_id: Optional[Any] = None

    def direct_value(self, field_id: str) -> Optional[Any]:
        """Value stored under ``field_id``; None when absent or null."""
        return self.values.get(field_id)

    def comparison_value(self, field_id: str) -> Optional[Any]:
        """Direct value, falling back to the backing entity's identifier.

        None means the row has nothing comparable for the field.
        """
        value = self.direct_value(field_id)
        if value is not None:
            return value
        return self.entity_id


class ResultSet:
    """Ordered rows keyed by their original index plus a running total.

    ``total_rows`` mirrors the total reported by the count query, so it may
    exceed the number of rows on the current page.
    """

    def __init__(self, rows: Iterable[Row] = (), total_rows: Optional[int] = None):
        self._rows: Dict[int, Row] = {}
        for row in rows:
            if row.index in self._rows:
                raise ValueError(f"Duplicate row index: {row.index}")
            self._rows[row.index] = row
        self.total_rows = len(self._rows) if total_rows is None else total_rows

    @classmethod
    def from_records(
        cls,
        records: Iterable[Mapping[str, Any]],
        entity_key: Optional[str] = None,
        total_rows: Optional[int] = None,
    ) -> ResultSet:
        """Build a result set from plain mappings, indexed by position.

        When ``entity_key`` is given, that key is taken out of each record and
        used as the row's entity identifier.
        """
        rows = []
        for index, record in enumerate(records):
            values = dict(record)
            entity_id = values.pop(entity_key, None) if entity_key else None
            rows.append(Row(index=index, values=values, entity_id=entity_id))
        return cls(rows, total_rows=total_rows)

    @property
    def rows(self) -> List[Row]:
        return list(self._rows.values())

    @property
    def indices(self) -> List[int]:
        return list(self._rows)

    def get(self, index: int) -> Optional[Row]:
        return self._rows.get(index)

    def remove(self, index: int) -> bool:
        """Drop the row at ``index``; False when there is no such row."""
        return self._rows.pop(index, None) is not None

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[Row]:
        return iter(self.rows)

    def __contains__(self, index: object) -> bool:
        return index in self._rows


def apply_removals(result_set: ResultSet, to_remove: Iterable[int]) -> int:
    """Remove flagged rows in place and decrement the running total.

    Surviving rows keep their original indices.  Indices with no row are
    ignored.

    Returns:
        Number of rows actually removed.
    """
    removed = 0
    missing = []
    for index in sorted(set(to_remove)):
        if result_set.remove(index):
            removed += 1
        else:
            missing.append(index)

    if missing:
        log_debug("Ignoring removal of unknown rows", indices=missing)

    result_set.total_rows = max(result_set.total_rows - removed, 0)
    return removed
