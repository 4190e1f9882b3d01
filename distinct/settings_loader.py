"""Field settings loader and resolver.

Reads the YAML settings file (view → display → field) and resolves the
effective ``FieldSetting`` of a field with the fallback chain

    display-specific setting → default-display setting → built-in default.

When the settings file is absent every field resolves to the built-in
default, i.e. dedup is off for the whole listing.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol, runtime_checkable

import yaml
from pydantic import ValidationError

from distinct.field_settings import DistinctSettings, FieldSetting
from distinct.utils.logger import log_debug, log_error, log_info, log_warning

_cache: Dict[Path, DistinctSettings] = {}


@runtime_checkable
class SettingsSource(Protocol):
    """Anything able to hand out raw per-field settings."""

    def get_field_settings(
        self, view_id: str, display_id: str, field_id: str
    ) -> Optional[Mapping[str, Any]]:
        """Return the stored mapping for the field, or None when nothing is stored."""
        ...


def _default_path() -> Path:
    from distinct.config import get_config

    return get_config().settings_file


def load_settings(path: Path | None = None) -> Optional[DistinctSettings]:
    """Load the settings file.

    Returns None when the file does not exist.  Parsed files are cached per
    path until ``reset_cache`` is called.
    """
    settings_path = Path(path) if path is not None else _default_path()
    cached = _cache.get(settings_path)
    if cached is not None:
        return cached

    if not settings_path.exists():
        return None

    try:
        with open(settings_path, "r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh) or {}

        cfg = DistinctSettings(**raw)
        _cache[settings_path] = cfg
        log_info(
            "Loaded field settings",
            path=str(settings_path),
            view_count=len(cfg.views),
            views=cfg.list_view_ids() or None,
        )
        return cfg
    except Exception as exc:
        log_error("Failed to load field settings", error=str(exc), path=str(settings_path))
        raise


def reset_cache() -> None:
    """Clear cached settings (useful for tests)."""
    _cache.clear()


def has_settings_file(path: Path | None = None) -> bool:
    """Return True when the settings file exists."""
    return (Path(path) if path is not None else _default_path()).exists()


def list_view_ids(path: Path | None = None) -> List[str]:
    """List the views that carry settings (empty when there is no file)."""
    cfg = load_settings(path)
    return cfg.list_view_ids() if cfg else []


class YamlSettingsStore:
    """``SettingsSource`` backed by the YAML settings file."""

    def __init__(self, path: Path | None = None):
        self.path = path

    def get_field_settings(
        self, view_id: str, display_id: str, field_id: str
    ) -> Optional[Mapping[str, Any]]:
        cfg = load_settings(self.path)
        if cfg is None:
            return None
        return cfg.get_field(view_id, display_id, field_id)


class SettingsResolver:
    """Resolve effective field settings for one view.

    Instances are callables usable as the ``settings_lookup`` of
    ``build_filter_plan``::

        lookup = SettingsResolver(YamlSettingsStore(), "content", "page_1")
        lookup("title")             # page_1 → default → built-in
        lookup("title", "block_1")  # block_1 → default → built-in

    Resolution never raises.  A source lacking ``get_field_settings``, a
    source that fails, or a malformed entry all resolve to the built-in
    default and are logged.
    """

    def __init__(
        self,
        source: Any,
        view_id: str,
        display_id: Optional[str] = None,
        default_display: Optional[str] = None,
    ):
        if default_display is None:
            from distinct.config import get_config

            default_display = get_config().default_display

        self.source = source
        self.view_id = view_id
        self.default_display = default_display
        self.display_id = display_id or default_display
        self.usable = isinstance(source, SettingsSource)
        if not self.usable:
            log_error(
                "Settings source cannot provide field settings; dedup disabled",
                view_id=view_id,
                source_type=type(source).__name__,
            )

    def __call__(self, field_id: str, display_id: Optional[str] = None) -> FieldSetting:
        if not self.usable:
            return FieldSetting.disabled(field_id)

        for candidate in self._display_chain(display_id or self.display_id):
            raw = self._fetch(candidate, field_id)
            if raw is not None:
                return self._validate(field_id, candidate, raw)

        return FieldSetting.disabled(field_id)

    def _display_chain(self, display_id: str) -> List[str]:
        if display_id == self.default_display:
            return [display_id]
        return [display_id, self.default_display]

    def _fetch(self, display_id: str, field_id: str) -> Optional[Any]:
        try:
            return self.source.get_field_settings(self.view_id, display_id, field_id)
        except Exception as exc:
            log_error(
                "Field settings could not be resolved",
                view_id=self.view_id,
                display_id=display_id,
                field_id=field_id,
                error=str(exc),
            )
            return None

    def _validate(self, field_id: str, display_id: str, raw: Any) -> FieldSetting:
        if isinstance(raw, FieldSetting):
            return raw.model_copy(update={"field_id": field_id})

        if not isinstance(raw, Mapping):
            log_warning(
                "Malformed field settings, using defaults",
                view_id=self.view_id,
                display_id=display_id,
                field_id=field_id,
                value_type=type(raw).__name__,
            )
            return FieldSetting.disabled(field_id)

        try:
            setting = FieldSetting(**{**raw, "field_id": field_id})
        except (ValidationError, TypeError) as exc:
            log_warning(
                "Malformed field settings, using defaults",
                view_id=self.view_id,
                display_id=display_id,
                field_id=field_id,
                error=str(exc),
            )
            return FieldSetting.disabled(field_id)

        log_debug(
            "Resolved field settings",
            view_id=self.view_id,
            display_id=display_id,
            field_id=field_id,
            filter_enabled=setting.filter_enabled,
            use_rendered_value=setting.use_rendered_value,
        )
        return setting
