"""Pytest configuration and fixtures for views-distinct tests."""

import pytest
from unittest.mock import Mock, patch
from typing import Any, Dict, List

# Add the project root to the Python path
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from distinct.result_set import ResultSet, Row
from distinct.settings_loader import reset_cache

SAMPLE_SETTINGS_YAML = """\
views:
  content_listing:
    displays:
      default:
        fields:
          title:
            filter_enabled: true
          nid:
            filter_enabled: false
      page_1:
        fields:
          title:
            filter_enabled: true
            use_rendered_value: true
          author:
            filter_enabled: true
"""


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    """Reset the settings file cache around each test."""
    reset_cache()
    yield
    reset_cache()


@pytest.fixture
def mock_config():
    """Mock configuration for testing."""
    with patch("distinct.config.get_config") as mock_get_config:
        config = Mock()
        config.enabled = True
        config.settings_file = Path("config/distinct.yaml")
        config.default_display = "default"
        config.log_level = "INFO"
        config.log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        config.log_max_context_length = 1000
        config.validate_configuration.return_value = []
        config.log_configuration.return_value = None

        mock_get_config.return_value = config
        yield config


@pytest.fixture
def sample_records() -> List[Dict[str, Any]]:
    """Five-row listing where names A and B repeat."""
    return [
        {"id": 1, "name": "A"},
        {"id": 2, "name": "B"},
        {"id": 3, "name": "A"},
        {"id": 4, "name": "C"},
        {"id": 5, "name": "B"},
    ]


@pytest.fixture
def sample_result_set(sample_records) -> ResultSet:
    return ResultSet.from_records(sample_records)


@pytest.fixture
def settings_file(tmp_path) -> Path:
    """Settings YAML written to a temporary file."""
    f = tmp_path / "distinct.yaml"
    f.write_text(SAMPLE_SETTINGS_YAML)
    return f


@pytest.fixture
def make_rows():
    """Factory building rows indexed by position, with optional entity ids."""

    def _make(*value_maps, entity_ids=None) -> List[Row]:
        ids = entity_ids or [None] * len(value_maps)
        return [
            Row(index=i, values=values, entity_id=entity_id)
            for i, (values, entity_id) in enumerate(zip(value_maps, ids))
        ]

    return _make
