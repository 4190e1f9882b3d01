"""First-seen-wins duplicate detection.

``DuplicateDetector`` walks the rows of a result set once, in order, and
flags every row whose value for any filtered field was already seen on an
earlier row.  It only decides; ``apply_removals`` does the mutation.
"""

from __future__ import annotations

from typing import Iterable, Sequence, Set

from distinct.dedup.strategies import (
    DedupStrategy,
    RawValueStrategy,
    RenderedValueStrategy,
    RenderField,
    SeenValues,
)
from distinct.result_set import Row
from distinct.utils.logger import log_debug


class DuplicateDetector:
    """Flag duplicate rows for a strategy and an ordered list of fields.

    Usage::

        detector = DuplicateDetector()
        to_remove = detector.detect_raw(result_set, plan.raw_fields)
        apply_removals(result_set, to_remove)
    """

    def detect(
        self,
        strategy: DedupStrategy,
        rows: Iterable[Row],
        fields: Sequence[str],
    ) -> Set[int]:
        """Return the original indices of the rows to remove.

        Every comparable value is recorded, including values of rows already
        flagged, so later rows always compare against the first occurrence.
        A row is flagged as soon as one of its fields repeats.
        """
        to_remove: Set[int] = set()
        if not fields:
            return to_remove

        seen = SeenValues()
        for row in rows:
            for field_id in fields:
                value = strategy.value_for(row, field_id)
                if value is None:
                    continue
                if seen.check_and_record(field_id, value):
                    to_remove.add(row.index)

        log_debug(
            "Duplicate detection finished",
            strategy=strategy.name,
            fields=list(fields),
            flagged=sorted(to_remove),
        )
        return to_remove

    def detect_raw(self, rows: Iterable[Row], fields: Sequence[str]) -> Set[int]:
        return self.detect(RawValueStrategy(), rows, fields)

    def detect_rendered(
        self,
        rows: Iterable[Row],
        fields: Sequence[str],
        render_field: RenderField,
    ) -> Set[int]:
        return self.detect(RenderedValueStrategy(render_field), rows, fields)
