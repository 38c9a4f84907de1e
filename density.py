"""
density.py

Per-tile wall probabilities ("density field") used to sample trial levels.

Fields are built from a target average plus uniform noise. Half of the time
the noise is much larger and a swap-based annealing pass pushes neighbouring
values apart, which shows up as stripes, checkerboards and similar patterns
once walls are rolled. Border tiles get one shared additive boost so level
edges trend solid.
"""

from __future__ import annotations

import logging
import math
import random
from typing import List, Sequence, Set, Tuple

from models import GeneratorConfig
from utils import clamp_float

logger = logging.getLogger(__name__)

PATTERN_RADIUS = 3


def _pattern_offsets() -> List[Tuple[int, int, int]]:
    offsets = []
    for dy in range(-PATTERN_RADIUS, PATTERN_RADIUS + 1):
        for dx in range(-PATTERN_RADIUS, PATTERN_RADIUS + 1):
            if dx == 0 and dy == 0:
                continue
            offsets.append((dx, dy, 8 - (dx * dx + dy * dy)))
    return offsets


def format_field(field: Sequence[float], width: int) -> str:
    rows = []
    for start in range(0, len(field), width):
        rows.append(" ".join(f"{v:.2f}" for v in field[start : start + width]))
    return "\n".join(rows)


class DensityFieldBuilder:
    """Builds density fields for one grid size."""

    def __init__(self, config: GeneratorConfig, rng: random.Random) -> None:
        self.config = config
        self.rng = rng
        self._neighbours = self._build_neighbours()

    def _build_neighbours(self) -> List[List[Tuple[int, int]]]:
        w, h = self.config.width, self.config.height
        offsets = _pattern_offsets()
        neighbours: List[List[Tuple[int, int]]] = []
        for y in range(h):
            for x in range(w):
                row = []
                for dx, dy, weight in offsets:
                    px, py = x + dx, y + dy
                    if 0 <= px < w and 0 <= py < h:
                        row.append((px + py * w, weight))
                neighbours.append(row)
        return neighbours

    def build(self, avg_density: float) -> List[float]:
        cfg = self.config
        rng = self.rng

        patterns_enabled = rng.randint(0, 1) == 1
        if patterns_enabled:
            logger.info("Patterns ON")

        max_noise = cfg.base_noise
        if patterns_enabled:
            max_noise += rng.randint(1, cfg.max_pattern_noise)
        field = [avg_density + rng.uniform(-max_noise, max_noise) for _ in range(cfg.size)]

        if patterns_enabled:
            self.anneal(field)

        for i, value in enumerate(field):
            field[i] = clamp_float(value, 0.0, cfg.max_tile_density)

        self.boost_border(field, rng.uniform(0.0, 1.0))
        return field

    def boost_border(self, field: List[float], wall_density: float) -> None:
        """Add wall_density (unclamped) to every border tile once."""
        w, h = self.config.width, self.config.height
        sz = w * h
        for x in range(w):
            field[x] += wall_density
            field[x + sz - w] += wall_density
        for y in range(1, h - 1):
            field[w * y] += wall_density
            field[w * y + w - 1] += wall_density

    # ----------------------------
    # Pattern annealing
    # ----------------------------

    def pattern_score(self, field: Sequence[float]) -> float:
        """Weighted sum of local contrast over every tile's 7x7 window."""
        total = 0.0
        for p, row in enumerate(self._neighbours):
            dp = field[p]
            for q, weight in row:
                total += weight * abs(dp - field[q])
        return total

    def _touched_score(self, field: Sequence[float], touched: Set[int]) -> float:
        # Every pattern_score term with at least one endpoint in `touched`.
        # The window is symmetric, so a term between an untouched q and p is
        # mirrored by the (q, p) term.
        total = 0.0
        for p in touched:
            dp = field[p]
            for q, weight in self._neighbours[p]:
                term = weight * abs(dp - field[q])
                total += term if q in touched else 2.0 * term
        return total

    def _pick_swap(self) -> Tuple[int, int]:
        w, h = self.config.width, self.config.height
        rng = self.rng
        x = rng.randint(1, w - 2)
        y = rng.randint(1, h - 2)
        dx = dy = 0
        while dx == 0 and dy == 0:
            dx = rng.randint(-1, 1)
            dy = rng.randint(-1, 1)
        return x + y * w, (x + dx) + (y + dy) * w

    def anneal(self, field: List[float]) -> float:
        """Swap nearby values while the pattern score strictly improves.

        Modifies field in place and returns the final pattern score.
        """
        limit = self.config.pattern_iter_limit
        report_every = max(1, limit // 16)
        best_score = -math.inf
        score = self.pattern_score(field)

        for iteration in range(limit):
            temp = 1.0 - iteration / limit
            temp *= self.config.swap_temperature * temp

            swaps = []
            s = 0
            while s < temp:
                swaps.append(self._pick_swap())
                s += 1

            touched = {i for pair in swaps for i in pair}
            before = self._touched_score(field, touched)
            for a, b in swaps:
                field[a], field[b] = field[b], field[a]
            trial = score + self._touched_score(field, touched) - before

            if iteration % report_every == 0:
                logger.info(
                    "Tile pattern with score %10.2f at iteration %7d", trial, iteration
                )

            if trial > best_score:
                best_score = trial
                score = trial
            else:
                for a, b in reversed(swaps):
                    field[a], field[b] = field[b], field[a]

        logger.info("Tile pattern with score %10.2f after %d iterations", score, limit)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Density field:\n%s", format_field(field, self.config.width))
        return score
