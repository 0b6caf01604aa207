import math

import pytest

from raycube.game import PLAYER_SPEED, Game, Key, main
from raycube.render import BORDER_MARGIN, PI2
from raycube.scene import Scene, Wall
from raycube.xpm import Image

ROOM = ["1111111", "1000001", "1000001", "1000001", "1111111"]
CEIL = 0x112233
FLOOR = 0x445566
WALL_COLORS = {Wall.NORTH: 0x0000AA, Wall.SOUTH: 0x00AA00, Wall.WEST: 0xAA0000, Wall.EAST: 0xAAAAAA}


def make_game(position=(3.5, 2.5), angle=0.0, width=20, height=10):
    textures = {wall: Image(1, 1, [color]) for wall, color in WALL_COLORS.items()}
    scene = Scene(list(ROOM), CEIL, FLOOR, textures, position, angle)
    return Game(scene, width, height)


def test_move_forward():
    game = make_game()
    assert game.press(Key.MOVE_FORWARD) is True
    game.update()
    assert game.player.x == pytest.approx(3.5 + PLAYER_SPEED)
    assert game.player.y == pytest.approx(2.5)


def test_move_back():
    game = make_game()
    game.press(Key.MOVE_BACK)
    game.update()
    assert game.player.x == pytest.approx(3.5 - PLAYER_SPEED)


def test_strafe_left_and_right():
    game = make_game()
    game.press(Key.MOVE_LEFT)
    game.update()
    assert game.player.y == pytest.approx(2.5 - PLAYER_SPEED)
    game.release(Key.MOVE_LEFT)
    game.press(Key.MOVE_RIGHT)
    game.update()
    assert game.player.y == pytest.approx(2.5)


def test_turn_left_wraps_angle():
    game = make_game()
    game.press(Key.TURN_LEFT)
    game.update()
    assert game.player.angle == pytest.approx(PI2 - PLAYER_SPEED / 2)
    assert game.player.dir_x == pytest.approx(math.cos(game.player.angle))
    assert game.player.dir_y == pytest.approx(math.sin(game.player.angle))


def test_release_stops_movement():
    game = make_game()
    game.press(Key.MOVE_FORWARD)
    game.release(Key.MOVE_FORWARD)
    game.update()
    assert (game.player.x, game.player.y) == (3.5, 2.5)


def test_exit_key_stops_game():
    game = make_game()
    assert game.running is True
    assert game.press(Key.EXIT) is True
    assert game.running is False


def test_out_of_range_key_is_refused():
    game = make_game()
    assert game.press(600) is False
    assert game.release(-300) is False
    assert game.pressed == set()


def test_update_clamps_to_map():
    game = make_game(position=(0.02, 2.5))
    game.press(Key.MOVE_BACK)
    game.update()
    assert game.player.x == BORDER_MARGIN


def test_fov_change_and_reset(capsys):
    game = make_game(width=177, height=100)
    start = game.view.fov
    game.press(Key.FOV_MINUS)
    game.update()
    assert game.view.fov == pytest.approx(start * 1.03)
    game.release(Key.FOV_MINUS)
    game.press(Key.FOV_RESET)
    game.update()
    assert game.view.fov == pytest.approx(start)
    assert "Real FOV:" in capsys.readouterr().out


def test_render_buffer_contents():
    game = make_game()
    buffer = game.render()
    assert len(buffer) == game.width * game.height
    assert set(buffer) <= {CEIL, FLOOR, *WALL_COLORS.values()}
    centre = game.width // 2
    assert buffer[(game.height // 2) * game.width + centre] == WALL_COLORS[Wall.EAST]
    assert buffer[centre] == CEIL
    assert buffer[(game.height - 1) * game.width + centre] == FLOOR
    assert len(game.columns) == game.width


def test_main_without_arguments(capsys):
    assert main([]) == 2
    assert "Please specify scene filename" in capsys.readouterr().err


def test_main_too_many_arguments(capsys):
    assert main(["a.cub", "b.cub"]) == 2
    assert "Too many arguments" in capsys.readouterr().err


def test_main_wrong_extension(capsys):
    assert main(["scene.txt"]) == 2
    assert "Wrong scene filename" in capsys.readouterr().err


def test_main_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "missing.cub")]) == 2
    assert capsys.readouterr().err.startswith("Error")


def test_main_bad_scene(tmp_path, capsys):
    path = tmp_path / "bad.cub"
    path.write_text("111\n")
    assert main([str(path)]) == 3
    assert "Floor color not found" in capsys.readouterr().err