from __future__ import annotations

from typing import Dict, Iterable, Optional, Tuple

import pygame

from models import Level, TileSpec
from player import Player
from utils import Color


def iter_tiles(level: Level) -> Iterable[Tuple[int, int, str]]:
    """Yield (x, y, char) for every tile in the level."""
    for y, row in enumerate(level.rows):
        for x, ch in enumerate(row):
            yield x, y, ch


def draw_tile(
    surf: pygame.Surface,
    spec: TileSpec,
    rect: pygame.Rect,
    render_mode: str,
    tile_font: pygame.font.Font,
) -> None:
    """Draw a single tile based on its TileSpec."""
    if render_mode == "ascii":
        if spec.shape == "none":
            return
        color = spec.color if spec.color is not None else (220, 220, 235)
        text = tile_font.render(spec.char, True, color)
        surf.blit(text, text.get_rect(center=rect.center))
        return

    if spec.shape == "none" or spec.color is None:
        return

    if spec.shape == "circle":
        radius = int(min(rect.w, rect.h) * 0.33)
        pygame.draw.circle(surf, spec.color, rect.center, radius)
        return

    pygame.draw.rect(surf, spec.color, rect)


def draw_level_tiles(
    surf: pygame.Surface,
    level: Level,
    legend: Dict[str, TileSpec],
    origin: Tuple[int, int],
    tile_size: int,
    render_mode: str,
    tile_font: pygame.font.Font,
) -> None:
    ts = tile_size
    ox, oy = origin
    fallback = legend["-"]
    for x, y, ch in iter_tiles(level):
        spec = legend.get(ch, fallback)
        draw_tile(surf, spec, pygame.Rect(ox + x * ts, oy + y * ts, ts, ts), render_mode, tile_font)


def draw_player(
    surf: pygame.Surface,
    player: Player,
    origin: Tuple[int, int],
    tile_size: int,
    color: Color,
    render_mode: str,
    tile_font: pygame.font.Font,
) -> None:
    rect = player.rect(tile_size).move(origin)
    if render_mode == "ascii":
        text = tile_font.render("p", True, color)
        surf.blit(text, text.get_rect(center=rect.center))
        return
    pygame.draw.rect(surf, color, rect, border_radius=8)


def draw_grid(
    surf: pygame.Surface,
    level: Level,
    origin: Tuple[int, int],
    tile_size: int,
    grid_color: Color,
) -> None:
    """Draw the tile grid overlay."""
    ox, oy = origin
    w_px = level.width_tiles * tile_size
    h_px = level.height_tiles * tile_size
    for x in range(level.width_tiles + 1):
        sx = ox + x * tile_size
        pygame.draw.line(surf, grid_color, (sx, oy), (sx, oy + h_px), 1)
    for y in range(level.height_tiles + 1):
        sy = oy + y * tile_size
        pygame.draw.line(surf, grid_color, (ox, sy), (ox + w_px, sy), 1)


def draw_hud(
    surf: pygame.Surface,
    hud_font: pygame.font.Font,
    level: Optional[Level],
    moves: int,
    render_mode: str,
    status: Optional[str] = None,
) -> None:
    """Draw HUD text."""
    bar_height = hud_font.get_height() + 12
    bar = pygame.Surface((surf.get_width(), bar_height), pygame.SRCALPHA)
    bar.fill((0, 0, 0, 230))
    surf.blit(bar, (0, 0))

    mode_label = "ASCII" if render_mode == "ascii" else "Flat"
    name = level.name if level is not None else "-"
    txt = (
        f"{name} | Moves: {moves} | Mode (T): {mode_label} "
        "| R: restart | N: new level | ESC: quit"
    )
    surf.blit(hud_font.render(txt, True, (255, 255, 255)), (12, 6))
    if status:
        surf.blit(hud_font.render(status, True, (255, 220, 120)), (12, bar_height + 4))


class GameRenderer:
    """Renderer that centralizes fonts and the board layout."""

    def __init__(self, window_w: int, window_h: int, tile_size: int, hud_height: int) -> None:
        self.window_w = window_w
        self.window_h = window_h
        self.tile_size = tile_size
        self.hud_height = hud_height
        self.tile_font = pygame.font.SysFont("monospace", max(12, int(tile_size * 0.7)))
        self.hud_font = pygame.font.SysFont("monospace", 18)

    def board_origin(self, level: Level) -> Tuple[int, int]:
        """Top-left pixel of the board, centered below the HUD bar."""
        board_w = level.width_tiles * self.tile_size
        board_h = level.height_tiles * self.tile_size
        ox = max(0, (self.window_w - board_w) // 2)
        oy = self.hud_height + max(0, (self.window_h - self.hud_height - board_h) // 2)
        return ox, oy

    def render_frame(
        self,
        screen: pygame.Surface,
        bg: Color,
        level: Optional[Level],
        legend: Dict[str, TileSpec],
        player: Optional[Player],
        player_color: Color,
        show_grid: bool,
        grid_color: Color,
        render_mode: str,
        status: Optional[str] = None,
    ) -> None:
        """Render and present a full frame."""
        mode = render_mode if render_mode in ("ascii", "flat") else "flat"
        screen.fill(bg)
        if level is not None:
            origin = self.board_origin(level)
            draw_level_tiles(screen, level, legend, origin, self.tile_size, mode, self.tile_font)
            if player is not None:
                draw_player(
                    screen, player, origin, self.tile_size, player_color, mode, self.tile_font
                )
            if show_grid:
                draw_grid(screen, level, origin, self.tile_size, grid_color)
        draw_hud(screen, self.hud_font, level, player.moves if player else 0, mode, status)
        pygame.display.flip()
