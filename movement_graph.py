"""
movement_graph.py

Directed movement graph induced by the slide rule, plus the BFS queries the
generator runs over it.

A slide starts on an open tile, steps in one cardinal direction (wrapping
around the grid edges) and stops on the last open tile before a wall. Slides
that never meet a wall within one lap, or that are blocked immediately, do not
produce an edge. Edges are not reciprocal in general; u -> v says nothing
about v -> u.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Deque, List, Optional, Sequence, Set, Tuple

from models import WALL, ScoredExit
from utils import index_to_xy, offset_wrap

logger = logging.getLogger(__name__)

# vertical axis first, then horizontal; negative step before positive
DIRECTIONS: Tuple[Tuple[int, int], ...] = ((0, -1), (0, 1), (-1, 0), (1, 0))

MIN_HOP_COST = 15.0


def hop_cost(v: int, c: int, width: int) -> float:
    """Score contribution of the edge v -> c (raw, non-wrapped coordinates)."""
    dist = abs(c % width - v % width + c // width - v // width)
    return dist ** 1.5 + MIN_HOP_COST


class LevelGraph:
    def __init__(self, level: Sequence[str], width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.size = width * height
        if len(level) != self.size:
            raise ValueError(
                f"level has {len(level)} tiles, expected {self.size} ({width}x{height})"
            )
        self.level = level
        self.graph: List[List[int]] = []
        self.build_graph()

    def set_level(self, level: Sequence[str]) -> None:
        if len(level) != self.size:
            raise ValueError(f"level has {len(level)} tiles, expected {self.size}")
        self.level = level
        self.build_graph()

    # ----------------------------
    # Construction
    # ----------------------------

    def slide(self, index: int, dx: int, dy: int) -> Optional[int]:
        """Landing tile of a slide from index in direction (dx, dy), or None."""
        w, h = self.width, self.height
        level = self.level
        x, y = index_to_xy(index, w)

        if dy:
            cy = offset_wrap(y, dy, 0, h - 1)
            steps = 0
            if level[x + cy * w] == WALL:
                return None
            while level[x + cy * w] != WALL:
                cy = offset_wrap(cy, dy, 0, h - 1)
                steps += 1
                if steps > h:
                    return None
            return x + offset_wrap(cy, -dy, 0, h - 1) * w

        cx = offset_wrap(x, dx, 0, w - 1)
        steps = 0
        if level[cx + y * w] == WALL:
            return None
        while level[cx + y * w] != WALL:
            cx = offset_wrap(cx, dx, 0, w - 1)
            steps += 1
            if steps > w:
                return None
        return offset_wrap(cx, -dx, 0, w - 1) + y * w

    def build_graph(self) -> None:
        graph: List[List[int]] = [[] for _ in range(self.size)]
        level = self.level
        for i in range(self.size):
            if level[i] == WALL:
                continue
            out = graph[i]
            for dx, dy in DIRECTIONS:
                landing = self.slide(i, dx, dy)
                if landing is not None:
                    out.append(landing)
        self.graph = graph

    def edges(self, index: int) -> List[int]:
        return self.graph[index]

    def describe(self) -> str:
        """Raw adjacency dump using 1-based (x, y) coordinates."""
        w = self.width
        lines = []
        for i, out in enumerate(self.graph):
            if not out:
                continue
            targets = " ".join(f"({c % w + 1}, {c // w + 1})" for c in out)
            lines.append(f"({i % w + 1}, {i // w + 1}): {targets}")
        return "\n".join(lines)

    # ----------------------------
    # Queries
    # ----------------------------

    def score(self, start: int) -> ScoredExit:
        """Best-scoring vertex reachable from start and its accumulated score.

        Plain FIFO breadth-first expansion. A vertex is final the first time it
        is dequeued; queued duplicates of it are skipped afterwards.
        """
        w = self.width
        graph = self.graph
        explored = [False] * self.size
        unexplored: Deque[Tuple[int, float]] = deque([(start, 0.0)])
        best_vertex = start
        best_score = -1.0

        while unexplored:
            v, acc = unexplored.popleft()
            if explored[v]:
                continue
            explored[v] = True
            if acc > best_score:
                best_score = acc
                best_vertex = v
            for c in graph[v]:
                if not explored[c]:
                    unexplored.append((c, acc + hop_cost(v, c, w)))

        return ScoredExit(vertex=best_vertex, score=best_score)

    def reachable_vertices(self, start: int) -> Set[int]:
        graph = self.graph
        seen = {start}
        unexplored: Deque[int] = deque([start])
        while unexplored:
            v = unexplored.popleft()
            for c in graph[v]:
                if c not in seen:
                    seen.add(c)
                    unexplored.append(c)
        return seen

    def path_exists(self, start: int, goal: int) -> bool:
        # Stops at the goal instead of computing full reachability; the stuck
        # check calls this once per reachable tile.
        graph = self.graph
        seen = [False] * self.size
        seen[start] = True
        unexplored: Deque[int] = deque([start])
        while unexplored:
            v = unexplored.popleft()
            if v == goal:
                return True
            for c in graph[v]:
                if not seen[c]:
                    seen[c] = True
                    unexplored.append(c)
        return False

    def is_stuck(self, start: int, goal: int) -> bool:
        """True if some tile reachable from start cannot reach goal."""
        reachable = self.reachable_vertices(start)
        for i in sorted(reachable):
            if not self.path_exists(i, goal):
                logger.debug(
                    "stuck at (%d, %d)", i % self.width + 1, i // self.width + 1
                )
                return True
        return False
