import math

import pytest

from raycube.render import (
    BORDER_MARGIN,
    PI2,
    Column,
    Player,
    View,
    cast_ray,
    cast_rays,
    draw_column,
    draw_walls,
    fill_ceil_floor,
    intersect_x,
    intersect_y,
)
from raycube.scene import Wall
from raycube.xpm import Image

CORRIDOR = ["11111", "10001", "11111"]
SHAFT = ["111", "101", "101", "101", "111"]
ROOM = ["1111111", "1000001", "1000001", "1000001", "1111111"]


def test_player_direction_follows_angle():
    player = Player(1.0, 2.0, math.pi / 3)
    assert player.dir_x == pytest.approx(math.cos(math.pi / 3))
    assert player.dir_y == pytest.approx(math.sin(math.pi / 3))


def test_clamp_low_side():
    player = Player(-1.0, -2.0, 7.0)
    player.clamp(5, 4)
    assert player.x == BORDER_MARGIN
    assert player.y == BORDER_MARGIN
    assert player.angle == pytest.approx(7.0 - PI2)


def test_clamp_high_side():
    player = Player(5.0, 9.0, -1.0)
    player.clamp(5, 4)
    assert player.x == pytest.approx(5 - BORDER_MARGIN)
    assert player.y == pytest.approx(4 - BORDER_MARGIN)
    assert player.angle == pytest.approx(PI2 - 1.0)


def test_clamp_keeps_inside_values():
    player = Player(2.5, 1.5, 1.0)
    player.clamp(5, 4)
    assert (player.x, player.y, player.angle) == (2.5, 1.5, 1.0)


def test_view_default_fov_for_reference_aspect():
    view = View(177, 100)
    assert view.fov == pytest.approx(math.pi / 2)
    assert view.col_center == 177 / 2
    assert view.col_scale * view.col_step == pytest.approx(1.0)


def test_view_narrow_aspect_gives_smaller_fov():
    assert View(100, 100).fov < math.pi / 2 < View(300, 100).fov


def test_set_fov_rejects_out_of_range_value():
    view = View(177, 100)
    before = view.fov
    view.set_fov(10.0, False)
    assert view.fov == before
    view.set_fov(1.0, False)
    assert view.fov == 1.0


def test_set_fov_returns_real_fov():
    view = View(177, 100)
    assert view.set_fov(1.2, False) == view.real_fov


def test_view_too_narrow():
    with pytest.raises(ValueError):
        View(1, 10)


def test_intersect_x_both_directions():
    player = Player(2.5, 1.5, 0.0)
    right_wall = len(CORRIDOR[0]) - 1
    assert intersect_x(CORRIDOR, player, 1, 0.0) == (right_wall, 1.5)
    hit_x, hit_y = intersect_x(CORRIDOR, player, -1, 0.0)
    assert hit_x == 1.0 and hit_y == 1.5


def test_intersect_y_both_directions():
    player = Player(1.5, 2.5, 0.0)
    bottom_wall = len(SHAFT) - 1
    assert intersect_y(SHAFT, player, 0.0, 1) == (1.5, bottom_wall)
    hit_x, hit_y = intersect_y(SHAFT, player, 0.0, -1)
    assert hit_x == 1.5 and hit_y == 1.0


def test_cast_ray_east_and_west_are_symmetric():
    view = View(20, 10)
    east = cast_ray(CORRIDOR, Player(2.5, 1.5, 0.0), view, 0.0)
    west = cast_ray(CORRIDOR, Player(2.5, 1.5, math.pi), view, math.pi)
    assert east.side == "E"
    assert west.side == "W"
    assert east.height == west.height
    assert east.texture_pos == pytest.approx(0.5)
    assert west.texture_pos == pytest.approx(0.5)


def test_cast_ray_north_and_south_are_symmetric():
    view = View(20, 10)
    north = cast_ray(SHAFT, Player(1.5, 2.5, 3 * math.pi / 2), view, 3 * math.pi / 2)
    south = cast_ray(SHAFT, Player(1.5, 2.5, math.pi / 2), view, math.pi / 2)
    assert north.side == "N"
    assert south.side == "S"
    assert north.height == south.height


def test_closer_wall_is_taller():
    view = View(20, 10)
    near = cast_ray(ROOM, Player(4.5, 2.5, 0.0), view, 0.0)
    far = cast_ray(ROOM, Player(1.5, 2.5, 0.0), view, 0.0)
    assert near.height > far.height


def test_cast_rays_invariants():
    view = View(30, 10)
    columns = cast_rays(ROOM, Player(3.5, 2.5, 0.4), view)
    assert len(columns) == view.width
    assert all(column.height % 2 == 0 for column in columns)
    assert all(column.side in "NSWE" for column in columns)
    assert all(0.0 <= column.texture_pos <= 1.0 for column in columns)


def test_fill_ceil_floor_even():
    buffer = [0] * 12
    fill_ceil_floor(buffer, 4, 3, 7, 9)
    assert buffer == [7] * 6 + [9] * 6


def test_fill_ceil_floor_odd():
    buffer = [0] * 9
    fill_ceil_floor(buffer, 3, 3, 7, 9)
    assert buffer == [7] * 4 + [9] * 5


def _column(buffer, width, height, x):
    return [buffer[width * y + x] for y in range(height)]


TEXTURE = Image(2, 2, [11, 22, 33, 44])


def test_draw_column_full_height():
    buffer = [0] * 12
    draw_column(buffer, 3, 4, TEXTURE, Column(4, 0.0, "N"), 1)
    assert _column(buffer, 3, 4, 1) == [11, 11, 33, 33]
    assert _column(buffer, 3, 4, 0) == [0] * 4
    assert _column(buffer, 3, 4, 2) == [0] * 4


def test_draw_column_uses_texture_offset():
    buffer = [0] * 12
    draw_column(buffer, 3, 4, TEXTURE, Column(4, 0.75, "N"), 0)
    assert _column(buffer, 3, 4, 0) == [22, 22, 44, 44]


def test_draw_column_short_wall_is_centred():
    buffer = [0] * 6
    draw_column(buffer, 1, 6, TEXTURE, Column(2, 0.0, "N"), 0)
    assert buffer == [0, 0, 11, 33, 0, 0]


def test_draw_column_tall_wall_is_cropped():
    buffer = [0] * 4
    draw_column(buffer, 1, 4, TEXTURE, Column(8, 0.0, "N"), 0)
    assert buffer == [11, 11, 33, 33]


def test_draw_column_zero_height_draws_nothing():
    buffer = [5] * 4
    draw_column(buffer, 1, 4, TEXTURE, Column(0, 0.0, "N"), 0)
    assert buffer == [5] * 4


def test_draw_walls_picks_texture_by_side():
    textures = {
        Wall.NORTH: Image(1, 1, [1]),
        Wall.SOUTH: Image(1, 1, [2]),
        Wall.WEST: Image(1, 1, [3]),
        Wall.EAST: Image(1, 1, [4]),
    }
    columns = [Column(2, 0.5, side) for side in "NSWE"]
    buffer = [0] * 8
    draw_walls(buffer, 4, 2, textures, columns)
    assert buffer == [1, 2, 3, 4, 1, 2, 3, 4]