"""Filter plan: which fields take part in which dedup pass.

A ``FilterPlan`` is built once per query execution and shared by the raw
and the rendered pass.  Field order follows the field definitions so that
both passes evaluate fields deterministically.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, List, Tuple

from distinct.field_settings import FieldDefinition, FieldSetting
from distinct.utils.logger import log_debug, log_error, log_warning

SettingsLookup = Callable[[str], FieldSetting]


@dataclass(frozen=True)
class FilterPlan:
    """Disjoint, ordered field lists for the two passes.

    ``raw_fields`` holds raw identifiers (result-column aliases where the
    field exposes one); ``rendered_fields`` holds UI field ids.
    """

    raw_fields: Tuple[str, ...] = ()
    rendered_fields: Tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.raw_fields and not self.rendered_fields


def _unique(items: Iterable[str]) -> Tuple[str, ...]:
    return tuple(dict.fromkeys(items))


def _lookup_setting(settings_lookup: SettingsLookup, field_id: str) -> FieldSetting:
    """Effective setting of a field; disabled when the lookup fails."""
    try:
        setting = settings_lookup(field_id)
    except Exception as e:
        log_error("Settings lookup failed, field disabled", field_id=field_id, error=str(e))
        return FieldSetting.disabled(field_id)

    if not isinstance(setting, FieldSetting):
        log_warning(
            "Settings lookup returned no field setting, field disabled",
            field_id=field_id,
            value_type=type(setting).__name__,
        )
        return FieldSetting.disabled(field_id)
    return setting


def build_filter_plan(
    field_definitions: Iterable[FieldDefinition],
    settings_lookup: SettingsLookup,
) -> FilterPlan:
    """Split the enabled fields between the raw and the rendered pass.

    Args:
        field_definitions: Fields of the listing, in display order.
        settings_lookup: Callable returning the effective ``FieldSetting``
            for a UI field id (see ``SettingsResolver``).

    Returns:
        ``FilterPlan``; empty when no field has filtering enabled.
    """
    raw: List[str] = []
    rendered: List[str] = []

    for definition in field_definitions:
        setting = _lookup_setting(settings_lookup, definition.field_id)
        if not setting.filter_enabled:
            continue
        if setting.use_rendered_value:
            rendered.append(definition.field_id)
        else:
            raw.append(definition.raw_identifier)

    plan = FilterPlan(raw_fields=_unique(raw), rendered_fields=_unique(rendered))
    log_debug(
        "Built filter plan",
        raw_fields=list(plan.raw_fields),
        rendered_fields=list(plan.rendered_fields),
    )
    return plan
