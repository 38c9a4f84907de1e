from __future__ import annotations

from typing import List, Optional, Sequence

from models import EXIT, LEVEL_ALPHABET, PLAYER, SPACE, WALL, Level


def level_rows(tiles: Sequence[str], width: int) -> List[str]:
    """Split a flat tile sequence into rows of `width` characters."""
    text = "".join(tiles)
    return [text[i : i + width] for i in range(0, len(text), width)]


def format_level(
    tiles: Sequence[str],
    width: int,
    player_pos: Optional[int] = None,
    exit_pos: Optional[int] = None,
) -> str:
    """Render a level as ASCII rows, optionally overlaying player/exit markers.

    The exit marker wins if both markers share a tile.
    """
    chars = list(tiles)
    if player_pos is not None:
        chars[player_pos] = PLAYER
    if exit_pos is not None:
        chars[exit_pos] = EXIT
    return "\n".join(level_rows(chars, width))


def _find_unique(text: str, ch: str) -> int:
    count = text.count(ch)
    if count != 1:
        raise ValueError(f"Level must contain exactly one '{ch}', found {count}.")
    return text.index(ch)


def parse_level_string(text: str, width: int, height: int, name: str = "level") -> Level:
    """Parse a generated level string into a Level.

    Args:
        text: Flat level string of width*height characters.
        width: Grid width in tiles.
        height: Grid height in tiles.
        name: Display name for the level.

    Returns:
        A populated Level instance.

    Raises:
        ValueError: If the length, alphabet or player/exit markers are invalid.
    """
    if len(text) != width * height:
        raise ValueError(
            f"Level string has {len(text)} tiles, expected {width * height} ({width}x{height})."
        )
    unknown = set(text) - LEVEL_ALPHABET
    if unknown:
        raise ValueError(f"Level string contains unknown tiles: {''.join(sorted(unknown))}")

    return Level(
        name=name,
        rows=level_rows(text, width),
        width_tiles=width,
        height_tiles=height,
        player_pos=_find_unique(text, PLAYER),
        exit_pos=_find_unique(text, EXIT),
    )


def layout_tiles(level: Level) -> List[str]:
    """Wall/space layout of a level with the player and exit treated as open tiles."""
    return [WALL if ch == WALL else SPACE for ch in level.text]
