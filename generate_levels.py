#!/usr/bin/env python3
"""
generate_levels.py

Generates levels for a sliding puzzle on a wrapping tile grid.

Per generated level:
1. For each tile, determine the likelihood of a wall being placed there.
   Patterns (random, striped, checkerboard, etc) can be inserted at this stage.
2. Randomly create a level in accordance with the probabilities.
3. Iteratively improve the level by rerolling tiles with the same probabilities,
   keeping changes that do not lower the score (hill climbing).
4. Along the way, save the best-scoring beatable level where it is impossible
   to get stuck.

Output is one level string per line: width*height characters using
'#' wall, '-' space, 'p' player and 'e' exit. Each level starts where the
previous one's exit was.
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import math
import random
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from config_io import load_json_config
from config_parsing import parse_generator_config
from density import DensityFieldBuilder
from level_loader import format_level
from models import (
    EXIT,
    PLAYER,
    SPACE,
    UNUSED,
    WALL,
    GenerationFailure,
    GenerationResult,
    GeneratorConfig,
)
from movement_graph import LevelGraph
from utils import index_to_xy, xy_to_index

logger = logging.getLogger(__name__)


# ----------------------------
# Finalizing
# ----------------------------


class LevelFinalizer:
    """Stamps markers on the best level, re-validates it and serializes it."""

    def __init__(self, config: GeneratorConfig) -> None:
        self.config = config

    def finalize(self, best_level: Sequence[str], player_pos: int, exit_pos: int) -> str:
        level = list(best_level)
        level[player_pos] = PLAYER
        level[exit_pos] = EXIT
        self.verify(level, player_pos, exit_pos)
        return "".join(level)

    def verify(self, level: Sequence[str], player_pos: int, exit_pos: int) -> bool:
        """Post-condition check. Diagnostic only; never changes the result."""
        graph = LevelGraph(level, self.config.width, self.config.height)
        reachable = graph.path_exists(player_pos, exit_pos)
        stuck = graph.is_stuck(player_pos, exit_pos)
        logger.info(
            "End reachable: %s | Can get stuck: %s",
            "YES" if reachable else "NO (!)",
            "YES (!)" if stuck else "NO",
        )
        ok = reachable and not stuck
        if not ok:
            logger.warning(
                "Finalized level failed validation:\n%s",
                format_level(level, self.config.width),
            )
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("Movement graph:\n%s", graph.describe())
        return ok


# ----------------------------
# Generator orchestration
# ----------------------------


class LevelGenerator:
    def __init__(self, config: GeneratorConfig, rng: random.Random) -> None:
        self.config = config
        self.rng = rng
        self.density = DensityFieldBuilder(config, rng)
        self.finalizer = LevelFinalizer(config)

    def levelgen(self, px: int, py: int, avg_density: float) -> Tuple[str, int]:
        """Return (level string or "" on failure, exit tile index)."""
        result = self.generate(px, py, avg_density)
        return result.level, result.exit_pos

    def generate(self, px: int, py: int, avg_density: float) -> GenerationResult:
        w, h = self.config.width, self.config.height
        if not (0 <= px < w and 0 <= py < h):
            raise ValueError(f"start ({px}, {py}) is outside the {w}x{h} grid")
        logger.info(
            "Level generation started with ppos = (%d, %d) and target density = %f",
            px + 1,
            py + 1,
            avg_density,
        )
        density = self.density.build(avg_density)
        return self.optimize(density, xy_to_index(px, py, w))

    def _roll_tile(self, density: float) -> str:
        if density >= 1.0:
            return WALL
        return SPACE if density <= self.rng.random() else WALL

    def sample_level(self, density: Sequence[float], player_pos: int) -> List[str]:
        level = [self._roll_tile(d) for d in density]
        level[player_pos] = SPACE
        return level

    def perturb(self, level: List[str], density: Sequence[float], player_pos: int) -> None:
        rng = self.rng
        chance = self.config.reroll_chance
        for i, d in enumerate(density):
            if d < 1.0 and rng.random() < chance:
                level[i] = SPACE if d <= rng.random() else WALL
        level[player_pos] = SPACE

    def optimize(self, density: Sequence[float], player_pos: int) -> GenerationResult:
        """Hill-climb trial levels sampled from density until one meets the target.

        Returns a failed result (empty level) if the iteration budget runs out
        before any valid level was recorded.
        """
        cfg = self.config
        w = cfg.width
        if len(density) != cfg.size:
            raise ValueError(f"density field has {len(density)} tiles, expected {cfg.size}")

        level = self.sample_level(density, player_pos)
        graph = LevelGraph(level, w, cfg.height)
        last_score = graph.score(player_pos).score
        last_level = list(level)

        best_level = [UNUSED] * cfg.size
        best_score = -math.inf
        best_end_pos = player_pos
        best_iteration = 0

        stuck_score_gate = cfg.stuck_check_fraction * cfg.target_score
        stuck_iteration_gate = cfg.stuck_check_fraction * cfg.iteration_limit
        iteration = 0
        iters_since_update = 0
        failed = False

        while True:
            iteration += 1
            if iteration > cfg.iteration_limit:
                failed = best_level[0] == UNUSED
                logger.info("Iteration limit reached")
                break

            self.perturb(level, density, player_pos)
            graph.set_level(level)
            best = graph.score(player_pos)
            end_pos, score = best.vertex, best.score

            # Does a reachable tile exist that cannot reach the exit? Quadratic,
            # so only checked near the target score or the end of the budget.
            stuck: Optional[bool] = None
            if score > stuck_score_gate or iteration > stuck_iteration_gate:
                stuck = graph.is_stuck(player_pos, end_pos)

            if (
                stuck is False
                and score > best_score
                and end_pos != player_pos
                and graph.path_exists(player_pos, end_pos)
            ):
                best_score = score
                best_end_pos = end_pos
                best_iteration = iteration
                best_level[:] = level

            done = stuck is False and score >= cfg.target_score and best_level[0] != UNUSED

            iters_since_update += 1
            if score >= last_score:
                last_level[:] = level
                last_score = score
                if iters_since_update >= cfg.progress_interval:
                    iters_since_update = 0
                    self._log_progress(level, score, iteration, player_pos, end_pos)
            else:
                level[:] = last_level

            if done:
                break

        iterations_run = min(iteration, cfg.iteration_limit)
        if failed:
            logger.info("Level generation failed after %d iterations", iterations_run)
            return GenerationResult(
                level="",
                exit_pos=player_pos,
                player_pos=player_pos,
                score=best_score,
                iteration=0,
                iterations_run=iterations_run,
            )

        text = self.finalizer.finalize(best_level, player_pos, best_end_pos)
        logger.info(
            "Best recorded level with score: %7.2f/%7.2f at iteration %d",
            best_score,
            cfg.target_score,
            best_iteration,
        )
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("\n%s", format_level(text, w))
        return GenerationResult(
            level=text,
            exit_pos=best_end_pos,
            player_pos=player_pos,
            score=best_score,
            iteration=best_iteration,
            iterations_run=iterations_run,
        )

    def _log_progress(
        self, level: Sequence[str], score: float, iteration: int, player_pos: int, end_pos: int
    ) -> None:
        logger.info(
            "Score: %7.2f Target: %7.2f Iteration %d",
            score,
            self.config.target_score,
            iteration,
        )
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "\n%s", format_level(level, self.config.width, player_pos, end_pos)
            )


# ----------------------------
# Chaining
# ----------------------------


def random_target_density(rng: random.Random) -> float:
    """Density target in [1/128, 1/2], skewed toward sparser levels."""
    d = rng.uniform(0.125, 0.5)
    return 4 * d * d * d


class LevelChain:
    """Generates consecutive levels, each starting on the previous exit."""

    def __init__(
        self, generator: LevelGenerator, rng: random.Random, max_attempts: int = 16
    ) -> None:
        self.generator = generator
        self.rng = rng
        self.max_attempts = max(1, max_attempts)
        self.start_pos = generator.config.width + 1

    def next_level(self) -> GenerationResult:
        w = self.generator.config.width
        for attempt in range(1, self.max_attempts + 1):
            target = random_target_density(self.rng)
            result = self.generator.generate(*index_to_xy(self.start_pos, w), target)
            if not result.failed:
                self.start_pos = result.exit_pos
                return result
            logger.info(
                "Attempt %d/%d failed, retrying with a new density target",
                attempt,
                self.max_attempts,
            )
        raise GenerationFailure(
            f"Failed to generate a level from ({self.start_pos % w + 1}, "
            f"{self.start_pos // w + 1}) after {self.max_attempts} attempts."
        )


# ----------------------------
# CLI
# ----------------------------


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="Generate sliding-puzzle levels, one level string per line."
    )
    p.add_argument("count", type=int, help="How many levels to generate.")
    p.add_argument(
        "--config",
        type=str,
        default="config.json",
        help="JSON config file (default: config.json, skipped if missing)",
    )
    p.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Optional RNG seed for reproducible generation.",
    )
    p.add_argument("--target-score", type=float, default=None)
    p.add_argument("--iterations", type=int, default=None, help="Iteration budget per level.")
    p.add_argument(
        "--pretty", action="store_true", help="Print levels as rows instead of one line."
    )
    p.add_argument("-v", "--verbose", action="count", default=0)
    p.add_argument("-q", "--quiet", action="store_true")
    return p.parse_args(argv)


def _log_level(args: argparse.Namespace) -> int:
    if args.quiet:
        return logging.WARNING
    return logging.DEBUG if args.verbose >= 2 else logging.INFO if args.verbose else logging.WARNING


def build_config(args: argparse.Namespace) -> Tuple[GeneratorConfig, Optional[int], int]:
    """Return (generator config, seed, max attempts) from file and CLI flags."""
    cfg_path = Path(args.config)
    raw = load_json_config(cfg_path) if cfg_path.exists() else {}
    config = parse_generator_config(raw)

    overrides = {}
    if args.target_score is not None:
        overrides["target_score"] = args.target_score
    if args.iterations is not None:
        overrides["iteration_limit"] = args.iterations
    if overrides:
        config = dataclasses.replace(config, **overrides)

    seed = args.seed if args.seed is not None else raw.get("seed")
    max_attempts = max(1, int(raw.get("max_attempts", 16)))
    return config, seed, max_attempts


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    if args.count <= 0:
        raise SystemExit("count must be > 0")
    logging.basicConfig(level=_log_level(args), format="%(levelname)s %(name)s: %(message)s")

    try:
        config, seed, max_attempts = build_config(args)
    except ValueError as e:
        raise SystemExit(f"Invalid configuration: {e}")

    rng = random.Random(seed)
    chain = LevelChain(LevelGenerator(config, rng), rng, max_attempts=max_attempts)
    for _ in range(args.count):
        try:
            result = chain.next_level()
        except GenerationFailure as e:
            raise SystemExit(str(e))
        print(format_level(result.level, config.width) if args.pretty else result.level)
        if args.pretty:
            print()


if __name__ == "__main__":
    main()
