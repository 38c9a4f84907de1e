from __future__ import annotations

import logging
from typing import Dict, Tuple

import pygame

from level_loader import layout_tiles
from models import Level
from movement_graph import LevelGraph
from utils import index_to_xy

logger = logging.getLogger(__name__)

KEY_DIRECTIONS: Dict[int, Tuple[int, int]] = {
    pygame.K_UP: (0, -1),
    pygame.K_w: (0, -1),
    pygame.K_DOWN: (0, 1),
    pygame.K_s: (0, 1),
    pygame.K_LEFT: (-1, 0),
    pygame.K_a: (-1, 0),
    pygame.K_RIGHT: (1, 0),
    pygame.K_d: (1, 0),
}


class Player:
    """Slides across a level one wall-to-wall move at a time."""

    def __init__(self, level: Level) -> None:
        self.level = level
        self.graph = LevelGraph(layout_tiles(level), level.width_tiles, level.height_tiles)
        self.pos = level.player_pos
        self.moves = 0

    @property
    def reached_exit(self) -> bool:
        return self.pos == self.level.exit_pos

    @property
    def tile_xy(self) -> Tuple[int, int]:
        return index_to_xy(self.pos, self.level.width_tiles)

    def rect(self, tile_size: int) -> pygame.Rect:
        """Player rect in world coordinates, slightly inset from its tile."""
        x, y = self.tile_xy
        pad = int(tile_size * 0.15)
        return pygame.Rect(
            x * tile_size + pad, y * tile_size + pad, tile_size - 2 * pad, tile_size - 2 * pad
        )

    def reset(self) -> None:
        self.pos = self.level.player_pos
        self.moves = 0

    def slide(self, dx: int, dy: int) -> bool:
        """Slide in (dx, dy). Returns False if the move is blocked or never stops."""
        if self.reached_exit:
            return False
        landing = self.graph.slide(self.pos, dx, dy)
        if landing is None:
            return False
        self.pos = landing
        self.moves += 1
        logger.debug("slide (%d, %d) -> (%d, %d)", dx, dy, *self.tile_xy)
        return True

    def handle_key(self, key: int) -> bool:
        direction = KEY_DIRECTIONS.get(key)
        if direction is None:
            return False
        return self.slide(*direction)
