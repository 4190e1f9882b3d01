"""The two dedup passes and the per-execution orchestrator.

A query execution runs, in order:

  1. ``run_raw_pass`` right after the query executed, before any rendering;
  2. ``run_rendered_pass`` once rendered output is available, right before
     the final output is assembled.

Each pass is detect → remove → reconcile the pager.  The passes share
nothing but the result set the first one left behind.
"""

from __future__ import annotations

from typing import Callable, Iterable, List, Optional, Sequence, Set

from distinct.dedup.detector import DuplicateDetector
from distinct.dedup.result import PassResult
from distinct.dedup.strategies import RenderField
from distinct.field_settings import FieldDefinition
from distinct.pager import PagerState, reconcile
from distinct.plan import FilterPlan, SettingsLookup, build_filter_plan
from distinct.result_set import ResultSet, Row, apply_removals
from distinct.utils.logger import log_pass_summary, log_warning


def _run_pass(
    pass_name: str,
    result_set: ResultSet,
    fields: Sequence[str],
    detect: Callable[[Iterable[Row], Sequence[str]], Set[int]],
    pager: Optional[PagerState],
) -> PassResult:
    fields = tuple(fields)
    rows_before = len(result_set)
    if not fields:
        return PassResult(
            pass_name=pass_name,
            rows_before=rows_before,
            rows_after=rows_before,
            total_rows=result_set.total_rows,
            skipped="no_fields",
        )

    to_remove = detect(result_set.rows, fields)
    removed = apply_removals(result_set, to_remove)
    if removed:
        reconcile(pager, result_set.total_rows)

    log_pass_summary(pass_name, fields, removed, result_set.total_rows,
                     rows_before=rows_before, rows_after=len(result_set))
    return PassResult(
        pass_name=pass_name,
        fields=fields,
        removed_indices=frozenset(to_remove),
        rows_before=rows_before,
        rows_after=len(result_set),
        total_rows=result_set.total_rows,
    )


def run_raw_pass(
    result_set: ResultSet,
    raw_fields: Sequence[str],
    pager: Optional[PagerState] = None,
    detector: Optional[DuplicateDetector] = None,
) -> PassResult:
    """Remove rows repeating a raw field value (or backing entity)."""
    detector = detector or DuplicateDetector()
    return _run_pass("raw", result_set, raw_fields, detector.detect_raw, pager)


def run_rendered_pass(
    result_set: ResultSet,
    rendered_fields: Sequence[str],
    render_field: RenderField,
    pager: Optional[PagerState] = None,
    detector: Optional[DuplicateDetector] = None,
) -> PassResult:
    """Remove rows repeating a rendered field value.

    ``render_field(row_index, field_id)`` is looked up by the rows' original
    indices, which is why the raw pass removals must be applied first.  The
    rows left for display are ``result_set.rows`` afterwards.
    """
    detector = detector or DuplicateDetector()

    def detect(rows: Iterable[Row], fields: Sequence[str]) -> Set[int]:
        return detector.detect_rendered(rows, fields, render_field)

    return _run_pass("rendered", result_set, rendered_fields, detect, pager)


class DistinctPipeline:
    """Dedup state of one query execution.

    Builds the filter plan once and runs the raw pass, then the rendered
    pass, against the same result set::

        pipeline = DistinctPipeline(fields, SettingsResolver(store, "content", "page_1"), pager)
        pipeline.run_raw_pass(result_set)
        ...  # render
        pipeline.run_rendered_pass(result_set, render_field)

    Args:
        field_definitions: Fields of the listing.
        settings_lookup: Effective settings per UI field id.
        pager: Optional pager to reconcile after removals.
        enabled: Overrides ``Config.enabled`` when given.
    """

    def __init__(
        self,
        field_definitions: Iterable[FieldDefinition],
        settings_lookup: SettingsLookup,
        pager: Optional[PagerState] = None,
        enabled: Optional[bool] = None,
    ):
        if enabled is None:
            from distinct.config import get_config

            enabled = get_config().enabled

        self.enabled = enabled
        self.pager = pager
        self.detector = DuplicateDetector()
        self.plan = build_filter_plan(field_definitions, settings_lookup) if enabled else FilterPlan()
        self.results: List[PassResult] = []
        self._rendered_done = False

    def _skip(self, pass_name: str, result_set: ResultSet, reason: str) -> PassResult:
        result = PassResult(
            pass_name=pass_name,
            rows_before=len(result_set),
            rows_after=len(result_set),
            total_rows=result_set.total_rows,
            skipped=reason,
        )
        self.results.append(result)
        return result

    def run_raw_pass(self, result_set: ResultSet) -> PassResult:
        if not self.enabled:
            return self._skip("raw", result_set, "disabled")
        if self._rendered_done:
            log_warning("Raw pass requested after the rendered pass; skipping")
            return self._skip("raw", result_set, "out_of_order")

        result = run_raw_pass(result_set, self.plan.raw_fields, self.pager, self.detector)
        self.results.append(result)
        return result

    def run_rendered_pass(self, result_set: ResultSet, render_field: RenderField) -> PassResult:
        if not self.enabled:
            return self._skip("rendered", result_set, "disabled")

        self._rendered_done = True
        result = run_rendered_pass(
            result_set, self.plan.rendered_fields, render_field, self.pager, self.detector
        )
        self.results.append(result)
        return result

    @property
    def total_removed(self) -> int:
        return sum(r.removed for r in self.results)
