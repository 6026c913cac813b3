"""Test config/data schemas, YAML I/O and LineModel loading.

Tests for src.utils.validators, src.utils.fs and src.agp_chart.data:
    - Layout defaults match the shipped agp_chart.v1.yaml
    - Range checks on layout constants
    - Schema tags are enforced
    - Mismatched series rejected at load time
    - Missing files → FileNotFoundError
    - Atomic YAML/text/image writes leave no tmp files, even on failure

Run:
    pytest tests/test_validators.py -v
"""

from pathlib import Path

import pytest
import yaml
from PIL import Image
from pydantic import ValidationError

from src.agp_chart import LineModel, PointEntry, load_line_model
from src.utils import fs, validators


@pytest.fixture(scope="module")
def project_root():
    """Project root directory."""
    return Path(__file__).parent.parent


def _write_yaml(path: Path, obj) -> Path:
    path.write_text(yaml.safe_dump(obj), encoding="utf-8")
    return path


# ============================================================================
# LAYOUT CONFIG
# ============================================================================

def test_layout_defaults():
    cfg = validators.ChartLayoutConfig()
    assert cfg.top_space == 40.0
    assert cfg.bottom_space == 40.0
    assert cfg.line_gap == 60.0
    assert cfg.left_margin == 40.0
    assert cfg.top_headroom_factor == pytest.approx(1.10)
    assert cfg.fallback_grid_scale == 400.0
    assert cfg.curve_delta == pytest.approx(0.3)


@pytest.mark.parametrize("field,value", [
    ("line_gap", 0.0),
    ("top_space", -1.0),
    ("top_headroom_factor", 0.9),
    ("fallback_grid_scale", 0.0),
    ("curve_delta", 0.5),
])
def test_layout_range_checks(field, value):
    with pytest.raises(ValidationError):
        validators.ChartLayoutConfig(**{field: value})


def test_shipped_config_matches_defaults(project_root):
    cfg = validators.load_chart_config(project_root / "configs/agp_chart.v1.yaml")

    assert cfg.schema_version == "agp_chart.v1"
    assert cfg.layout == validators.ChartLayoutConfig()
    assert cfg.logging.log_level == "INFO"
    assert cfg.logging.json_format is False


def test_config_wrong_schema(tmp_path):
    path = _write_yaml(tmp_path / "cfg.yaml", {"schema": "agp_chart.v0"})
    with pytest.raises(ValueError, match="validation failed"):
        validators.load_chart_config(path)


def test_config_empty_file_uses_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert validators.load_chart_config(path).layout.line_gap == 60.0


def test_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        validators.load_chart_config(tmp_path / "nope.yaml")


def test_logging_level_normalized():
    assert validators.LoggingConfig(log_level="debug").log_level == "DEBUG"
    with pytest.raises(ValidationError):
        validators.LoggingConfig(log_level="chatty")


# ============================================================================
# CHART DATA
# ============================================================================

def test_sample_data_loads(project_root):
    data = validators.load_chart_data(project_root / "data/agp_sample.v1.yaml")
    assert len(data.lower) == len(data.upper) == 8
    assert data.upper[3].value == 240.0
    assert data.lower[0].label == "00:00"


def test_load_line_model(project_root):
    model = load_line_model(project_root / "data/agp_sample.v1.yaml")

    assert isinstance(model, LineModel)
    assert model.category_count == 8
    assert isinstance(model.lower[0], PointEntry)
    assert max(model.upper).value == 240.0


def test_data_mismatched_lengths(tmp_path):
    path = _write_yaml(tmp_path / "bad.yaml", {
        "schema": "agp_chart_data.v1",
        "lower": [{"value": 1, "label": "a"}, {"value": 2, "label": "b"}],
        "upper": [{"value": 3, "label": "a"}],
    })
    with pytest.raises(ValueError, match="equal length"):
        validators.load_chart_data(path)


def test_data_non_numeric_value(tmp_path):
    path = _write_yaml(tmp_path / "bad.yaml", {
        "schema": "agp_chart_data.v1",
        "lower": [{"value": "low", "label": "a"}],
        "upper": [{"value": 3, "label": "a"}],
    })
    with pytest.raises(ValueError):
        validators.load_chart_data(path)


def test_data_empty_series_allowed():
    data = validators.ChartDataV1(schema="agp_chart_data.v1", lower=[], upper=[])
    assert data.lower == []


def test_data_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_line_model(tmp_path / "missing.yaml")


# ============================================================================
# FS
# ============================================================================

def test_atomic_yaml_roundtrip(tmp_path):
    obj = {"points": [[40.0, 18.18], [100.0, 200.0]], "path": "M0,0 Z", "labels": [110, 0]}
    target = tmp_path / "nested" / "geometry.yaml"

    fs.atomic_yaml_dump(obj, target)

    assert fs.load_yaml(target) == obj
    assert not list(target.parent.glob("*.tmp"))


def test_load_yaml_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        fs.load_yaml(tmp_path / "absent.yaml")

    broken = tmp_path / "broken.yaml"
    broken.write_text("a: [1, 2\n", encoding="utf-8")
    with pytest.raises(yaml.YAMLError):
        fs.load_yaml(broken)


def test_ensure_dir(tmp_path):
    d = fs.ensure_dir(tmp_path / "a" / "b")
    assert d.is_dir()
    assert fs.ensure_dir(d) == d


def test_atomic_save_image_failure_leaves_nothing(tmp_path):
    target = tmp_path / "chart.unknownext"
    with pytest.raises(RuntimeError, match="atomically"):
        fs.atomic_save_image(Image.new("RGBA", (4, 4)), target)

    assert list(tmp_path.iterdir()) == []


def test_atomic_write_text_overwrites(tmp_path):
    target = tmp_path / "geometry.yaml"
    fs.atomic_write_text(target, "a: 1\n")
    fs.atomic_write_text(target, "a: 2\n")

    assert fs.load_yaml(target) == {"a": 2}
    assert [p.name for p in tmp_path.iterdir()] == ["geometry.yaml"]


def test_load_yaml_empty_file_is_none(tmp_path):
    empty = tmp_path / "empty.yaml"
    empty.write_text("", encoding="utf-8")
    assert fs.load_yaml(empty) is None
