import random

import pytest

from models import SPACE, WALL, GeneratorConfig


def make_layout(rows):
    """Flatten ASCII rows ('#' wall, anything else open) into a tile list."""
    return [WALL if ch == WALL else SPACE for row in rows for ch in row]


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def small_config():
    return GeneratorConfig(
        width=9,
        height=7,
        target_score=150.0,
        iteration_limit=400,
        pattern_iter_limit=64,
    )


@pytest.fixture
def boxed_rows():
    # Solid perimeter around an empty 5x3 interior
    return [
        "#######",
        "#-----#",
        "#-----#",
        "#-----#",
        "#######",
    ]
