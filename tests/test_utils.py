import pytest

from utils import as_color, clamp_int, deep_get, index_to_xy, offset_wrap, xy_to_index


@pytest.mark.parametrize(
    "num, offset, expected",
    [(0, -1, 4), (4, 1, 0), (2, 1, 3), (0, -6, 4)],
)
def test_offset_wrap_is_modulo(num, offset, expected):
    assert offset_wrap(num, offset, 0, 4) == expected


def test_index_round_trip():
    assert index_to_xy(20, 9) == (2, 2)
    assert xy_to_index(2, 2, 9) == 20


def test_helpers():
    assert clamp_int(300, 0, 255) == 255
    assert as_color([1, 2], (9, 9, 9)) == (9, 9, 9)
    assert deep_get({"a": {"b": 3}}, "a.b", None) == 3
    assert deep_get({"a": 1}, "a.b", "x") == "x"
