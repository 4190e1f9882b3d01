"""Command line entry point for views-distinct.

Reads a result page as JSON, runs the raw pass and then the rendered pass
with the field settings of the given view/display, and prints the surviving
rows as JSON.

Input document::

    {
      "fields": ["title", {"field_id": "author", "column_alias": "users_name"}],
      "rows": [{"title": "A", "users_name": "ann", "_entity": 12}, ...],
      "total_rows": 100,
      "pager": {"items_per_page": 10, "total_items": 100}
    }

A row may carry ``"_rendered": {"title": "<b>A</b>"}`` to supply rendered
output; otherwise the string form of the field's value is used.
"""
from dotenv import load_dotenv
import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

# Load environment variables first, before any other imports
load_dotenv()

from distinct.config import reload_config
from distinct.field_settings import FieldDefinition
from distinct.pager import Pager
from distinct.pipeline import DistinctPipeline
from distinct.result_set import ResultSet
from distinct.settings_loader import SettingsResolver, YamlSettingsStore
from distinct.utils.logger import configure_logging, log_error, log_info

ENTITY_KEY = "_entity"
RENDERED_KEY = "_rendered"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Remove duplicate rows from a listing page.")
    parser.add_argument('input', nargs='?', default='-', help='JSON input file (default: stdin).')
    parser.add_argument('--view', required=True, help='View whose field settings apply.')
    parser.add_argument('--display', help='Display id (default: the configured default display).')
    parser.add_argument('--settings', type=str, help='Path to the YAML field settings file.')
    parser.add_argument('--disable', dest='enabled', action='store_false', default=None,
                        help='Skip deduplication and echo the rows.')
    parser.add_argument('--indent', type=int, default=2, help='JSON output indentation.')
    return parser


def parse_fields(raw_fields: List[Any]) -> List[FieldDefinition]:
    definitions = []
    for item in raw_fields:
        if isinstance(item, str):
            definitions.append(FieldDefinition(field_id=item))
        elif isinstance(item, dict) and item.get("field_id"):
            definitions.append(FieldDefinition(field_id=item["field_id"],
                                               column_alias=item.get("column_alias")))
        else:
            raise ValueError(f"Invalid field definition: {item!r}")
    return definitions


def make_renderer(records: List[Dict[str, Any]], definitions: List[FieldDefinition]):
    """Render a field from the input document, keyed by original row index."""
    aliases = {d.field_id: d.raw_identifier for d in definitions}

    def render_field(row_index: int, field_id: str) -> Optional[str]:
        record = records[row_index]
        rendered = record.get(RENDERED_KEY) or {}
        if field_id in rendered:
            value = rendered[field_id]
            return None if value is None else str(value)
        value = record.get(field_id)
        if value is None:
            value = record.get(aliases.get(field_id, field_id))
        return None if value is None else str(value)

    return render_field


def run(document: Dict[str, Any], view_id: str, display_id: Optional[str],
        settings_path: Optional[Path], enabled: Optional[bool]) -> Dict[str, Any]:
    """Run both passes over ``document`` and return the output document."""
    definitions = parse_fields(document.get("fields") or [])
    records = list(document.get("rows") or [])
    stripped = [{k: v for k, v in r.items() if k != RENDERED_KEY} for r in records]
    pager = Pager(**document["pager"]) if document.get("pager") else None

    # Without an explicit count the pager's total is the count-query total
    total_rows = document.get("total_rows")
    if total_rows is None and pager is not None:
        total_rows = pager.total_items
    result_set = ResultSet.from_records(stripped, entity_key=ENTITY_KEY, total_rows=total_rows)

    lookup = SettingsResolver(YamlSettingsStore(settings_path), view_id, display_id)
    pipeline = DistinctPipeline(definitions, lookup, pager=pager, enabled=enabled)

    pipeline.run_raw_pass(result_set)
    pipeline.run_rendered_pass(result_set, make_renderer(records, definitions))

    return {
        "rows": [records[row.index] for row in result_set],
        "total_rows": result_set.total_rows,
        "pager": None if pager is None else {
            "items_per_page": pager.items_per_page,
            "total_items": pager.total_items,
            "current_page": pager.current_page,
            "total_pages": pager.total_pages,
        },
        "removed": {r.pass_name: sorted(r.removed_indices) for r in pipeline.results},
    }


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.settings is not None:
        os.environ['DISTINCT_SETTINGS_FILE'] = args.settings
    config = reload_config()
    configure_logging(config.log_level, config.log_format, config.log_max_context_length)
    config.log_configuration()

    issues = config.validate_configuration()
    if issues:
        log_error("Configuration validation failed", issues=issues)
        print("❌ Configuration issues found:", file=sys.stderr)
        for issue in issues:
            print(f"  - {issue}", file=sys.stderr)
        return 1

    try:
        if args.input == '-':
            document = json.load(sys.stdin)
        else:
            with open(args.input, "r", encoding="utf-8") as fh:
                document = json.load(fh)
        output = run(document, args.view, args.display, config.settings_file, args.enabled)
    except (OSError, ValueError, TypeError, AttributeError) as e:
        log_error("Could not process input", input=args.input, error=str(e))
        print(f"❌ {e}", file=sys.stderr)
        return 1

    log_info("Dedup finished", view=args.view, rows=len(output["rows"]),
             total_rows=output["total_rows"])
    print(json.dumps(output, indent=args.indent, ensure_ascii=False, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
