import json

import pytest

from config_io import load_json_config
from config_parsing import parse_generator_config, parse_legend, parse_viewer_config
from models import GeneratorConfig


def test_generator_defaults():
    cfg = GeneratorConfig()
    assert (cfg.width, cfg.height) == (27, 15)
    assert cfg.size == 405
    assert cfg.target_score == 4800
    assert cfg.iteration_limit == 65536
    assert cfg.pattern_iter_limit == 16384
    assert cfg.progress_interval == 1024


def test_parse_generator_config_empty_uses_defaults():
    assert parse_generator_config({}) == GeneratorConfig()
    assert parse_generator_config({"generator": "nope"}) == GeneratorConfig()


def test_parse_generator_config_overrides():
    cfg = parse_generator_config(
        {"generator": {"width": "12", "target_score": 300, "stuck_check_fraction": 0.5}}
    )
    assert cfg.width == 12
    assert cfg.height == 15
    assert cfg.target_score == 300.0
    assert cfg.stuck_check_fraction == 0.5


@pytest.mark.parametrize(
    "raw",
    [
        {"width": 4},
        {"height": 2},
        {"iteration_limit": 0},
        {"reroll_chance": 1.5},
        {"max_tile_density": -0.1},
        {"width": "wide"},
    ],
)
def test_parse_generator_config_rejects_bad_values(raw):
    with pytest.raises(ValueError):
        parse_generator_config({"generator": raw})


def test_load_json_config(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"generator": {"width": 9}}), encoding="utf-8")
    assert load_json_config(path) == {"generator": {"width": 9}}


def test_load_json_config_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_json_config(tmp_path / "nope.json")


@pytest.mark.parametrize("body", ["{not json", "[1, 2]"])
def test_load_json_config_invalid(tmp_path, body):
    path = tmp_path / "config.json"
    path.write_text(body, encoding="utf-8")
    with pytest.raises(SystemExit):
        load_json_config(path)


def test_parse_legend_fills_level_tiles():
    legend = parse_legend({"legend": {"#": {"shape": "rect", "color": [1, 2, 3]}}})
    assert set(legend) >= {"#", "-", "p", "e"}
    assert legend["#"].color == (1, 2, 3)
    assert set(vars(legend["#"])) == {"char", "shape", "color"}
    assert legend["-"].shape == "none"
    assert legend["-"].color is None


def test_parse_viewer_config():
    view = parse_viewer_config(
        {"tile_size": 1000, "render": {"mode": "ASCII"}, "window": {"bg": [300, 0, 0]}}
    )
    assert view.tile_size == 128
    assert view.render_mode == "ascii"
    assert view.bg == (255, 0, 0)
    assert view.max_attempts == 16
    assert parse_viewer_config({"render": {"mode": "gradient"}}).render_mode == "flat"
