"""End-to-end runs of the command line entry point."""

import json
import logging

import pytest

import main as cli

SETTINGS_YAML = """\
views:
  people:
    displays:
      default:
        fields:
          name:
            filter_enabled: true
      page_1:
        fields:
          name:
            filter_enabled: false
          city:
            filter_enabled: true
            use_rendered_value: true
"""


@pytest.fixture(autouse=True)
def _restore_logger():
    """main() installs its own handler; put the package logger back afterwards."""
    lg = logging.getLogger("views-distinct")
    saved = (lg.level, lg.handlers[:], lg.propagate)
    yield
    lg.setLevel(saved[0])
    lg.handlers = saved[1]
    lg.propagate = saved[2]


@pytest.fixture
def settings_path(tmp_path, monkeypatch):
    f = tmp_path / "distinct.yaml"
    f.write_text(SETTINGS_YAML)
    monkeypatch.setenv("DISTINCT_SETTINGS_FILE", str(f))
    monkeypatch.setenv("DISTINCT_ENABLED", "true")
    monkeypatch.setenv("DISTINCT_DEFAULT_DISPLAY", "default")
    return f


def _write(tmp_path, document):
    f = tmp_path / "page.json"
    f.write_text(json.dumps(document))
    return str(f)


def _run(capsys, argv):
    code = cli.main(argv)
    out = capsys.readouterr().out
    return code, (json.loads(out) if code == 0 else None)


@pytest.mark.e2e
def test_name_dedup_on_default_display(tmp_path, capsys, settings_path, sample_records):
    page = _write(tmp_path, {"fields": ["id", "name"], "rows": sample_records})

    code, output = _run(capsys, [page, "--view", "people", "--settings", str(settings_path)])

    assert code == 0
    assert output["rows"] == [
        {"id": 1, "name": "A"},
        {"id": 2, "name": "B"},
        {"id": 4, "name": "C"},
    ]
    assert output["total_rows"] == 3
    assert output["removed"] == {"raw": [2, 4], "rendered": []}
    assert output["pager"] is None


@pytest.mark.e2e
def test_rendered_pass_with_pager(tmp_path, capsys, settings_path):
    rows = [
        {"name": "A", "city": "Lyon"},
        {"name": "A", "city": "Paris", "_rendered": {"city": "PARIS"}},
        {"name": "B", "city": "paris", "_rendered": {"city": "PARIS"}},
        {"name": "C", "city": None},
        {"name": "D"},
    ]
    document = {
        "fields": ["name", "city"],
        "rows": rows,
        "total_rows": 100,
        "pager": {"items_per_page": 5, "total_items": 100},
    }
    page = _write(tmp_path, document)

    code, output = _run(capsys, [page, "--view", "people", "--display", "page_1",
                                 "--settings", str(settings_path)])

    assert code == 0
    assert [r["name"] for r in output["rows"]] == ["A", "A", "C", "D"]
    assert output["removed"] == {"raw": [], "rendered": [2]}
    assert output["total_rows"] == 99
    assert output["pager"]["total_items"] == 99
    assert output["pager"]["total_pages"] == 20


@pytest.mark.e2e
def test_pager_total_used_when_total_rows_missing(tmp_path, capsys, settings_path):
    rows = [{"name": n} for n in ["A", "A", "B", "C", "D"]]
    document = {
        "fields": ["name"],
        "rows": rows,
        "pager": {"items_per_page": 5, "total_items": 100},
    }
    page = _write(tmp_path, document)

    code, output = _run(capsys, [page, "--view", "people", "--settings", str(settings_path)])

    assert code == 0
    assert output["removed"]["raw"] == [1]
    assert output["total_rows"] == 99
    assert output["pager"]["total_items"] == 99
    assert output["pager"]["total_pages"] == 20


@pytest.mark.e2e
def test_entity_fallback_through_cli(tmp_path, capsys, settings_path):
    rows = [
        {"name": 7},
        {"name": None, "_entity": 7},
        {"_entity": 8},
    ]
    page = _write(tmp_path, {"fields": ["name"], "rows": rows})

    code, output = _run(capsys, [page, "--view", "people", "--settings", str(settings_path)])

    assert code == 0
    assert output["removed"]["raw"] == [1]
    assert len(output["rows"]) == 2


@pytest.mark.e2e
def test_disable_flag_echoes_rows(tmp_path, capsys, settings_path, sample_records):
    page = _write(tmp_path, {"fields": ["name"], "rows": sample_records})

    code, output = _run(capsys, [page, "--view", "people", "--disable",
                                 "--settings", str(settings_path)])

    assert code == 0
    assert output["rows"] == sample_records
    assert output["total_rows"] == 5


@pytest.mark.e2e
def test_missing_settings_file_keeps_rows(tmp_path, capsys, monkeypatch, sample_records):
    missing = tmp_path / "absent.yaml"
    monkeypatch.setenv("DISTINCT_SETTINGS_FILE", str(missing))
    page = _write(tmp_path, {"fields": ["name"], "rows": sample_records})

    code, output = _run(capsys, [page, "--view", "people", "--settings", str(missing)])

    assert code == 0
    assert len(output["rows"]) == 5


@pytest.mark.e2e
def test_invalid_input_exits_with_error(tmp_path, capsys, settings_path):
    bad = tmp_path / "page.json"
    bad.write_text("{not json")

    code = cli.main([str(bad), "--view", "people", "--settings", str(settings_path)])

    assert code == 1
    assert "❌" in capsys.readouterr().err


@pytest.mark.e2e
def test_invalid_settings_path_exits_with_error(tmp_path, capsys, monkeypatch):
    monkeypatch.setenv("DISTINCT_SETTINGS_FILE", "settings.json")
    page = _write(tmp_path, {"fields": [], "rows": []})

    code = cli.main([page, "--view", "people", "--settings", "settings.json"])

    assert code == 1
    assert "Configuration issues" in capsys.readouterr().err


class TestParseFields:
    def test_strings_and_mappings(self):
        defs = cli.parse_fields(["a", {"field_id": "b", "column_alias": "t_b"}])
        assert [d.raw_identifier for d in defs] == ["a", "t_b"]

    def test_invalid_definition(self):
        with pytest.raises(ValueError):
            cli.parse_fields([{"column_alias": "x"}])
