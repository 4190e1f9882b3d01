"""Value extraction strategies for the two dedup passes.

A strategy decides which value of a row is compared for a field.  Returning
``None`` means the row has nothing comparable for that field: it neither
matches nor is recorded.
"""

from __future__ import annotations

import abc
import json
from typing import Any, Callable, Dict, Hashable, Optional, Set

from distinct.result_set import Row
from distinct.utils.logger import log_warning

RenderField = Callable[[int, str], Optional[str]]


def comparison_key(value: Any) -> Hashable:
    """Hashable form of ``value``, tagged with its type.

    The tag keeps ``True``, ``1`` and ``1.0`` apart.  Lists, dicts and other
    unhashable values are compared through their canonical JSON text.
    """
    try:
        hash(value)
        return (type(value).__name__, value)
    except TypeError:
        return ("json", json.dumps(value, sort_keys=True, default=str))


class SeenValues:
    """Values seen so far in one pass, one set per field."""

    def __init__(self):
        self._seen: Dict[str, Set[Hashable]] = {}

    def check_and_record(self, field_id: str, value: Any) -> bool:
        """Record ``value`` for ``field_id``; True if it had been seen before."""
        seen = self._seen.setdefault(field_id, set())
        key = comparison_key(value)
        already = key in seen
        seen.add(key)
        return already

    def __contains__(self, field_id: object) -> bool:
        return field_id in self._seen

    def values_for(self, field_id: str) -> Set[Hashable]:
        return set(self._seen.get(field_id, ()))


class DedupStrategy(abc.ABC):
    """Abstract base for value extraction strategies."""

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Short machine-readable name for logs and pass results."""

    @abc.abstractmethod
    def value_for(self, row: Row, field_id: str) -> Optional[Any]:
        """Comparison value of ``field_id`` on ``row``, or None to skip."""


class RawValueStrategy(DedupStrategy):
    """Compare values as fetched by the query.

    A row without a direct value for the field is compared by the identifier
    of its backing entity, so it collapses with earlier rows of the same
    entity even when those used the direct value.
    """

    @property
    def name(self) -> str:
        return "raw"

    def value_for(self, row: Row, field_id: str) -> Optional[Any]:
        return row.comparison_value(field_id)


class RenderedValueStrategy(DedupStrategy):
    """Compare the rendered output of each field.

    There is no entity fallback here.  A renderer returning None, or failing,
    leaves the field out for that row.
    """

    def __init__(self, render_field: RenderField):
        self.render_field = render_field

    @property
    def name(self) -> str:
        return "rendered"

    def value_for(self, row: Row, field_id: str) -> Optional[Any]:
        try:
            return self.render_field(row.index, field_id)
        except Exception as e:
            log_warning(
                "Field rendering failed, skipping field for row",
                row_index=row.index,
                field_id=field_id,
                error=str(e),
            )
            return None
