from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from utils import Color

WALL = "#"
SPACE = "-"
PLAYER = "p"
EXIT = "e"
UNUSED = "X"

LEVEL_ALPHABET = {WALL, SPACE, PLAYER, EXIT}


class GenerationFailure(RuntimeError):
    """No valid level could be produced within the configured budget."""


@dataclass(frozen=True)
class GeneratorConfig:
    width: int = 27
    height: int = 15
    target_score: float = 4800.0
    iteration_limit: int = 1 << 16
    pattern_iter_limit: int = 1 << 14
    reroll_chance: float = 0.02
    stuck_check_fraction: float = 0.875  # gate for the expensive stuck check
    max_tile_density: float = 0.875
    base_noise: float = 0.125
    max_pattern_noise: int = 8
    swap_temperature: float = 16.0

    def __post_init__(self) -> None:
        if self.width < 5 or self.height < 5:
            raise ValueError(
                f"Bad size parameters: {self.width}x{self.height} (minimum is 5x5)"
            )
        if self.iteration_limit <= 0 or self.pattern_iter_limit <= 0:
            raise ValueError("iteration limits must be > 0")
        for name in ("reroll_chance", "stuck_check_fraction", "max_tile_density"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be within [0, 1], got {value}")
        if self.max_pattern_noise < 1:
            raise ValueError("max_pattern_noise must be >= 1")

    @property
    def size(self) -> int:
        return self.width * self.height

    @property
    def progress_interval(self) -> int:
        return max(1, self.iteration_limit // 64)


@dataclass(frozen=True)
class ScoredExit:
    vertex: int
    score: float


@dataclass(frozen=True)
class GenerationResult:
    level: str
    exit_pos: int
    player_pos: int
    score: float
    iteration: int
    iterations_run: int

    @property
    def failed(self) -> bool:
        return self.level == ""


@dataclass(frozen=True)
class TileSpec:
    char: str
    shape: str  # none|rect|circle
    color: Optional[Color]  # None if shape == none


@dataclass
class Level:
    name: str
    rows: List[str]
    width_tiles: int
    height_tiles: int
    player_pos: int
    exit_pos: int

    @property
    def text(self) -> str:
        return "".join(self.rows)

    def char_at(self, x: int, y: int) -> str:
        return self.rows[y][x]


@dataclass(frozen=True)
class ViewerConfig:
    title: str
    tile_size: int
    bg: Color
    grid_color: Color
    show_grid: bool
    render_mode: str  # flat|ascii
    player_color: Color
    max_attempts: int
    legend: Dict[str, TileSpec]
