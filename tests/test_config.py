import pytest
import yaml
from pydantic import ValidationError

from plotrecipes import load_config, load_recipe
from plotrecipes.utils.config import default_options
from plotrecipes.utils.config_env import _parse_env_value, override_config_from_env


RECIPE = {
    "data": "table.csv",
    "aesthetics": {"x": "species", "y": "value", "color": "species"},
    "geometry": {"geom": "bar", "stat": "identity"},
    "options": {"theme": "bw", "legend_position": "bottom"},
    "output": {"path": "out/chart.png", "resolution": 72},
}


def write_yaml(path, data):
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


def test_parse_env_value():
    assert _parse_env_value("true") is True
    assert _parse_env_value("No") is False
    assert _parse_env_value("none") is None
    assert _parse_env_value("3") == 3
    assert _parse_env_value("0.5") == 0.5
    assert _parse_env_value('["a", "b"]') == ["a", "b"]
    assert _parse_env_value("minimal") == "minimal"


def test_override_matches_underscored_keys():
    cfg = {"options": {"legend_position": "right", "theme": "grey"}}
    env = {"PLOTRECIPES_OPTIONS_LEGEND_POSITION": "top", "PLOTRECIPES_OPTIONS_THEME": "dark", "OTHER": "x"}
    override_config_from_env(cfg, environ=env)
    assert cfg == {"options": {"legend_position": "top", "theme": "dark"}}


def test_override_creates_missing_leaf_and_ignores_unknown_sections():
    cfg = {"options": {}}
    env = {"PLOTRECIPES_OPTIONS_JITTER_WIDTH": "0.1", "PLOTRECIPES_LOG_LEVEL": "DEBUG"}
    override_config_from_env(cfg, environ=env)
    assert cfg == {"options": {"jitter_width": 0.1}}


def test_load_config_missing_file_is_empty(tmp_path):
    assert load_config(tmp_path / "nope.yaml") == {}


def test_load_config_bad_yaml_is_empty(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("a: [unclosed", encoding="utf-8")
    assert load_config(path) == {}


def test_default_options(tmp_path):
    cfg = load_config(write_yaml(tmp_path / "settings.yaml", {"defaults": {"theme": "classic", "dpi": 200}}))
    options = default_options(cfg)
    assert options.theme == "classic"
    assert options.dpi == 200
    assert default_options({}).theme == "grey"


def test_load_recipe_resolves_data_path(tmp_path):
    recipe = load_recipe(write_yaml(tmp_path / "recipe.yaml", RECIPE))
    assert recipe.data == str((tmp_path / "table.csv").resolve())
    assert recipe.aesthetics.colour == "species"
    assert recipe.geometry.geom == "bar"
    assert recipe.options.legend_position == "bottom"
    assert recipe.output.resolution == 72


def test_load_recipe_env_override(tmp_path, monkeypatch):
    monkeypatch.setenv("PLOTRECIPES_OPTIONS_THEME", "minimal")
    monkeypatch.setenv("PLOTRECIPES_OUTPUT_RESOLUTION", "150")
    recipe = load_recipe(write_yaml(tmp_path / "recipe.yaml", RECIPE))
    assert recipe.options.theme == "minimal"
    assert recipe.output.resolution == 150


def test_load_recipe_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_recipe(tmp_path / "missing.yaml")


def test_load_recipe_rejects_bad_geometry(tmp_path):
    bad = dict(RECIPE, geometry={"geom": "sankey"})
    with pytest.raises(ValidationError):
        load_recipe(write_yaml(tmp_path / "recipe.yaml", bad))
