"""Per-field dedup settings and the models of the settings file.

The settings file is organised view → display → field.  Field entries are
kept as raw mappings at load time and validated into ``FieldSetting`` only
when a field is resolved, so that one malformed entry falls back to the
built-in defaults instead of failing the whole listing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class FieldSetting(BaseModel):
    """Dedup configuration for a single field of a listing."""

    field_id: str = Field(..., min_length=1, description="UI identifier of the field")
    filter_enabled: bool = Field(False, description="Remove rows repeating this field's value")
    use_rendered_value: bool = Field(
        False, description="Compare the rendered output instead of the raw value"
    )

    @property
    def compares_rendered(self) -> bool:
        """True when the field takes part in the rendered pass."""
        return self.filter_enabled and self.use_rendered_value

    @property
    def compares_raw(self) -> bool:
        """True when the field takes part in the raw pass."""
        return self.filter_enabled and not self.use_rendered_value

    @classmethod
    def disabled(cls, field_id: str) -> FieldSetting:
        """Built-in default: filtering off, raw comparison."""
        return cls(field_id=field_id)


@dataclass(frozen=True)
class FieldDefinition:
    """A field of the listing as the query pipeline describes it.

    ``column_alias`` is the alias of the result column backing the field,
    when the field exposes one.  Raw values are looked up under it.
    """

    field_id: str
    column_alias: Optional[str] = None

    @property
    def raw_identifier(self) -> str:
        return self.column_alias or self.field_id


class DisplaySettings(BaseModel):
    """Settings of one display of a view."""

    fields: Dict[str, Any] = Field(
        default_factory=dict, description="field_id → raw setting mapping"
    )

    @field_validator("fields", mode="before")
    @classmethod
    def drop_empty_entries(cls, v: Any) -> Any:
        # ``title:`` with no body parses as None in YAML
        if isinstance(v, dict):
            return {k: (item if item is not None else {}) for k, item in v.items()}
        return v


class ViewSettings(BaseModel):
    """Settings of one view, keyed by display id."""

    displays: Dict[str, DisplaySettings] = Field(default_factory=dict)


class DistinctSettings(BaseModel):
    """Root container of the settings file."""

    views: Dict[str, ViewSettings] = Field(
        default_factory=dict, description="view_id → ViewSettings"
    )

    def get_field(self, view_id: str, display_id: str, field_id: str) -> Optional[Any]:
        view = self.views.get(view_id)
        if view is None:
            return None
        display = view.displays.get(display_id)
        if display is None:
            return None
        return display.fields.get(field_id)

    def list_view_ids(self) -> List[str]:
        return sorted(self.views)
