"""Validate config/distinct.yaml against the Pydantic schema.

Usage:
    python -m tools.validate_settings                       # validate default path
    python -m tools.validate_settings config/distinct.yaml  # validate specific file
    python -m tools.validate_settings --schema              # print JSON Schema
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import yaml
from pydantic import ValidationError

from distinct.field_settings import DistinctSettings, FieldSetting


def validate_file(path: Path) -> Tuple[bool, List[str]]:
    """Validate a field settings YAML file.

    Returns (ok, messages): messages are errors when ok=False,
    or a success summary when ok=True.
    """
    if not path.exists():
        return False, [f"File not found: {path}"]

    try:
        with open(path, "r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh) or {}
    except Exception as exc:
        return False, [f"YAML parse error: {exc}"]

    try:
        cfg = DistinctSettings(**raw)
    except Exception as exc:
        return False, [f"Schema validation failed: {exc}"]

    # Field entries are validated lazily at runtime; check them all here
    errors: List[str] = []
    warnings: List[str] = []
    enabled = 0
    for view_id, view in cfg.views.items():
        for display_id, display in view.displays.items():
            for field_id, entry in display.fields.items():
                where = f"{view_id}/{display_id}/{field_id}"
                try:
                    setting = FieldSetting(**{**entry, "field_id": field_id})
                except (ValidationError, TypeError) as exc:
                    errors.append(f"Invalid field settings at {where}: {exc}")
                    continue
                if setting.filter_enabled:
                    enabled += 1
                elif setting.use_rendered_value:
                    warnings.append(
                        f"use_rendered_value has no effect at {where} (filter_enabled is false)"
                    )

    if errors:
        return False, errors

    messages = [f"Valid: {len(cfg.views)} view(s), {enabled} filtered field(s)"]
    for w in warnings:
        messages.append(f"[WARN] {w}")
    return True, messages


def generate_schema() -> dict:
    """Generate JSON Schema from the DistinctSettings Pydantic model."""
    return DistinctSettings.model_json_schema()


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Check distinct.yaml field settings")
    parser.add_argument("file", nargs="?", default="config/distinct.yaml")
    parser.add_argument("--schema", action="store_true", help="Print the JSON Schema instead")
    args = parser.parse_args(argv)

    if args.schema:
        print(json.dumps(generate_schema(), indent=2))
        return 0

    ok, messages = validate_file(Path(args.file))
    label = "OK" if ok else "ERROR"
    for msg in messages:
        print(f"[{label}] {msg}")
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
