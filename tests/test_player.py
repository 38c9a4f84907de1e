import pygame
import pytest

from level_loader import parse_level_string
from player import Player

LEVEL = (
    "#######"
    "#p----#"
    "#-----#"
    "#----e#"
    "#######"
)


@pytest.fixture
def player():
    return Player(parse_level_string(LEVEL, 7, 5))


def test_player_starts_on_spawn(player):
    assert player.tile_xy == (1, 1)
    assert player.moves == 0
    assert not player.reached_exit


def test_slide_stops_before_wall(player):
    assert player.slide(1, 0)
    assert player.tile_xy == (5, 1)
    assert player.moves == 1


def test_blocked_slide_does_not_count(player):
    assert not player.slide(-1, 0)
    assert not player.slide(0, -1)
    assert player.moves == 0


def test_keys_reach_exit(player):
    assert player.handle_key(pygame.K_DOWN)
    assert player.handle_key(pygame.K_d)
    assert player.reached_exit
    assert player.moves == 2
    # no moves after the exit
    assert not player.handle_key(pygame.K_UP)


def test_unknown_key_ignored(player):
    assert not player.handle_key(pygame.K_SPACE)


def test_reset(player):
    player.slide(0, 1)
    player.reset()
    assert player.tile_xy == (1, 1)
    assert player.moves == 0


def test_rect_is_inset(player):
    r = player.rect(40)
    assert r.x == 40 + 6
    assert r.w == 40 - 12
