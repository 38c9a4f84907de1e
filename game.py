from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Any, Dict, Optional

import pygame

from config_io import load_json_config
from config_parsing import parse_generator_config, parse_viewer_config
from generate_levels import LevelChain, LevelGenerator
from level_loader import parse_level_string
from models import GenerationFailure, Level
from player import Player
from rendering import GameRenderer

logger = logging.getLogger(__name__)


class Game:
    """Plays generated levels back to back (loading, loop, update, render)."""

    def __init__(self, cfg_path: Path) -> None:
        cfg: Dict[str, Any] = load_json_config(cfg_path) if cfg_path.exists() else {}
        self.gen_cfg = parse_generator_config(cfg)
        self.view_cfg = parse_viewer_config(cfg)
        self.render_mode = self.view_cfg.render_mode

        self.rng = random.Random(cfg.get("seed"))
        self.chain = LevelChain(
            LevelGenerator(self.gen_cfg, self.rng),
            self.rng,
            max_attempts=self.view_cfg.max_attempts,
        )
        self.level_count = 0
        self.level: Optional[Level] = None
        self.player: Optional[Player] = None
        self.status: Optional[str] = None

        self._init_pygame()

    # ----------------------------
    # Initialization
    # ----------------------------

    def _init_pygame(self) -> None:
        """Initialize pygame and create a window that fits the grid."""
        pygame.init()

        ts = self.view_cfg.tile_size
        hud_height = 60
        self.window_w = self.gen_cfg.width * ts
        self.window_h = self.gen_cfg.height * ts + hud_height
        self.screen = pygame.display.set_mode((self.window_w, self.window_h))
        pygame.display.set_caption(self.view_cfg.title)
        self.clock = pygame.time.Clock()
        self.renderer = GameRenderer(self.window_w, self.window_h, ts, hud_height)

    # ----------------------------
    # Level management
    # ----------------------------

    def _render(self) -> None:
        self.renderer.render_frame(
            screen=self.screen,
            bg=self.view_cfg.bg,
            level=self.level,
            legend=self.view_cfg.legend,
            player=self.player,
            player_color=self.view_cfg.player_color,
            show_grid=self.view_cfg.show_grid,
            grid_color=self.view_cfg.grid_color,
            render_mode=self.render_mode,
            status=self.status,
        )

    def next_level(self) -> bool:
        """Generate the next level in the chain. Returns False if generation gave up."""
        self.status = "Generating..."
        self._render()
        try:
            result = self.chain.next_level()
        except GenerationFailure as e:
            logger.error("%s", e)
            self.status = "Generation failed. Press N to retry."
            return False

        self.level_count += 1
        self.level = parse_level_string(
            result.level,
            self.gen_cfg.width,
            self.gen_cfg.height,
            name=f"Level{self.level_count} ({result.score:.0f})",
        )
        self.player = Player(self.level)
        self.status = None
        logger.info("loaded %s", self.level.name)
        return True

    def restart_level(self) -> None:
        if self.player is not None:
            self.player.reset()
            self.status = None

    # ----------------------------
    # Events / loop
    # ----------------------------

    def _handle_keydown(self, key: int) -> bool:
        """Handle KEYDOWN events.

        Returns:
            False if the game should exit, True otherwise.
        """
        if key == pygame.K_ESCAPE:
            return False
        if key == pygame.K_r:
            self.restart_level()
        elif key == pygame.K_n:
            self.next_level()
        elif key == pygame.K_t:
            self.render_mode = "flat" if self.render_mode == "ascii" else "ascii"
        elif self.player is not None and self.player.handle_key(key):
            if self.player.reached_exit:
                logger.info("exit reached in %d moves", self.player.moves)
                self.next_level()
        return True

    def _handle_events(self) -> bool:
        for e in pygame.event.get():
            if e.type == pygame.QUIT:
                return False
            if e.type == pygame.KEYDOWN and not self._handle_keydown(e.key):
                return False
        return True

    def run(self) -> None:
        """Run the main game loop."""
        self.next_level()
        running = True
        while running:
            self.clock.tick(60)
            running = self._handle_events()
            self._render()
        pygame.quit()
