from __future__ import annotations

from typing import Any, Dict, Tuple

Color = Tuple[int, int, int]


def clamp_int(v: int, lo: int, hi: int) -> int:
    """Clamp an integer value into the inclusive range [lo, hi]."""
    return lo if v < lo else hi if v > hi else v


def clamp_float(v: float, lo: float, hi: float) -> float:
    """Clamp a float value into the inclusive range [lo, hi]."""
    return lo if v < lo else hi if v > hi else v


def offset_wrap(num: int, offset: int, lo: int, hi: int) -> int:
    """Return num + offset wrapped (modulo, not remainder) into [lo, hi]."""
    return (num + offset - lo) % (hi - lo + 1) + lo


def as_color(value: Any, default: Color) -> Color:
    """Parse a value into an RGB color tuple.

    Args:
        value: A list/tuple-like value with at least 3 items (r, g, b).
        default: The color to return if parsing fails.

    Returns:
        A clamped (r, g, b) tuple in the range [0, 255].
    """
    if isinstance(value, (list, tuple)) and len(value) >= 3:
        r = clamp_int(int(value[0]), 0, 255)
        g = clamp_int(int(value[1]), 0, 255)
        b = clamp_int(int(value[2]), 0, 255)
        return (r, g, b)
    return default


def deep_get(d: Dict[str, Any], path: str, default: Any) -> Any:
    """Get a nested value from a dict using a dotted path.

    Args:
        d: Source dictionary.
        path: Dot-separated key path (e.g. "generator.width").
        default: Value to return if any path segment is missing.

    Returns:
        The found value or default.
    """
    cur: Any = d
    for part in path.split("."):
        if not isinstance(cur, dict) or part not in cur:
            return default
        cur = cur[part]
    return cur


def index_to_xy(index: int, width: int) -> Tuple[int, int]:
    """Split a linear tile index (x + y*width) into (x, y)."""
    return index % width, index // width


def xy_to_index(x: int, y: int, width: int) -> int:
    return x + y * width
