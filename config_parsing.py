from __future__ import annotations

from typing import Any, Dict

from models import EXIT, PLAYER, SPACE, WALL, GeneratorConfig, TileSpec, ViewerConfig
from utils import as_color, clamp_int, deep_get

DEFAULT_LEGEND: Dict[str, Dict[str, Any]] = {
    WALL: {"shape": "rect", "color": [70, 80, 110]},
    SPACE: {"shape": "none"},
    EXIT: {"shape": "circle", "color": [120, 230, 140]},
    PLAYER: {"shape": "none"},
}


def parse_generator_config(cfg: Dict[str, Any]) -> GeneratorConfig:
    """Parse the "generator" section; missing keys fall back to the defaults.

    Raises:
        ValueError: If a value cannot be converted or fails validation.
    """
    raw = cfg.get("generator", {})
    if not isinstance(raw, dict):
        raw = {}
    defaults = GeneratorConfig()

    def _get(key: str, cast: Any) -> Any:
        value = raw.get(key, getattr(defaults, key))
        try:
            return cast(value)
        except (TypeError, ValueError):
            raise ValueError(f"generator.{key}: cannot use {value!r}")

    return GeneratorConfig(
        width=_get("width", int),
        height=_get("height", int),
        target_score=_get("target_score", float),
        iteration_limit=_get("iteration_limit", int),
        pattern_iter_limit=_get("pattern_iter_limit", int),
        reroll_chance=_get("reroll_chance", float),
        stuck_check_fraction=_get("stuck_check_fraction", float),
        max_tile_density=_get("max_tile_density", float),
        base_noise=_get("base_noise", float),
        max_pattern_noise=_get("max_pattern_noise", int),
        swap_temperature=_get("swap_temperature", float),
    )


def _parse_render_mode(raw: Any) -> str:
    if isinstance(raw, str) and raw.strip().lower() in ("flat", "ascii"):
        return raw.strip().lower()
    return "flat"


def parse_legend(cfg: Dict[str, Any]) -> Dict[str, TileSpec]:
    """Parse the tile legend, filling in any of the four level tiles left out."""
    legend_raw = cfg.get("legend", {})
    if not isinstance(legend_raw, dict):
        legend_raw = {}

    merged: Dict[str, Any] = dict(DEFAULT_LEGEND)
    for ch, raw in legend_raw.items():
        if isinstance(ch, str) and len(ch) == 1 and isinstance(raw, dict):
            merged[ch] = raw

    legend: Dict[str, TileSpec] = {}
    for ch, raw in merged.items():
        shape = str(raw.get("shape", "none")).lower()
        if shape not in ("rect", "circle", "none"):
            shape = "none"
        color = None if shape == "none" else as_color(raw.get("color"), (200, 60, 220))
        legend[ch] = TileSpec(
            char=ch,
            shape=shape,
            color=color,
        )
    return legend


def parse_viewer_config(cfg: Dict[str, Any]) -> ViewerConfig:
    """Parse window/render/viewer settings for the pygame viewer.

    Args:
        cfg: Full config dictionary.

    Returns:
        ViewerConfig with defaults applied.
    """
    return ViewerConfig(
        title=str(deep_get(cfg, "window.title", "Slide")),
        tile_size=clamp_int(int(cfg.get("tile_size", 40)), 8, 128),
        bg=as_color(deep_get(cfg, "window.bg", [18, 20, 28]), (18, 20, 28)),
        grid_color=as_color(deep_get(cfg, "window.grid", [60, 60, 70]), (60, 60, 70)),
        show_grid=bool(deep_get(cfg, "render.show_grid", False)),
        render_mode=_parse_render_mode(deep_get(cfg, "render.mode", "flat")),
        player_color=as_color(deep_get(cfg, "player.color", [235, 240, 255]), (235, 240, 255)),
        max_attempts=max(1, int(cfg.get("max_attempts", 16))),
        legend=parse_legend(cfg),
    )
