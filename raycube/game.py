"""Game state, keyboard control and the interactive window."""

from __future__ import annotations

import math
import sys
from array import array
from collections.abc import Sequence
from enum import IntEnum

from raycube.render import Column, Player, View, cast_rays, draw_walls, fill_ceil_floor
from raycube.scene import ErrorKind, Scene, SceneError, load_scene

TITLE = "cube 3D"
PLAYER_SPEED = 0.05
FOV_FACTOR = 1.03
KEY_RANGE = range(-256, 512)


class Key(IntEnum):
    """Key codes the game reacts to."""

    EXIT = 53
    MOVE_FORWARD = 13
    MOVE_LEFT = 0
    MOVE_BACK = 1
    MOVE_RIGHT = 2
    TURN_LEFT = 123
    TURN_RIGHT = 124
    FOV_RESET = 67
    FOV_PLUS = 69
    FOV_MINUS = 78


class Game:
    """A running scene: the player, the view and the frame buffer."""

    def __init__(self, scene: Scene, width: int, height: int) -> None:
        self.scene = scene
        self.width = width
        self.height = height
        x, y = scene.position
        self.player = Player(x, y, scene.angle)
        self.view = View(width, height)
        self.buffer: list[int] = [0] * (width * height)
        self.columns: list[Column] = []
        self.pressed: set[int] = set()
        self.running = True
        _report_fov(self.view.real_fov)

    def press(self, key: int) -> bool:
        """Mark ``key`` as held; return False for codes out of range."""
        code = int(key)
        if code not in KEY_RANGE:
            return False
        if code == Key.EXIT:
            self.running = False
            return True
        self.pressed.add(code)
        return True

    def release(self, key: int) -> bool:
        """Mark ``key`` as released; return False for codes out of range."""
        code = int(key)
        if code not in KEY_RANGE:
            return False
        self.pressed.discard(code)
        return True

    def _set_fov(self, fov: float, reset: bool) -> None:
        _report_fov(self.view.set_fov(fov, reset))

    def update(self) -> None:
        """Apply one frame of movement, turning and field-of-view changes."""
        held = self.pressed
        player = self.player
        if Key.TURN_LEFT in held:
            player.angle -= PLAYER_SPEED / 2
        if Key.TURN_RIGHT in held:
            player.angle += PLAYER_SPEED / 2
        if Key.MOVE_FORWARD in held:
            player.x += PLAYER_SPEED * player.dir_x
            player.y += PLAYER_SPEED * player.dir_y
        if Key.MOVE_BACK in held:
            player.x -= PLAYER_SPEED * player.dir_x
            player.y -= PLAYER_SPEED * player.dir_y
        if Key.MOVE_LEFT in held:
            player.x += PLAYER_SPEED * player.dir_y
            player.y -= PLAYER_SPEED * player.dir_x
        if Key.MOVE_RIGHT in held:
            player.x -= PLAYER_SPEED * player.dir_y
            player.y += PLAYER_SPEED * player.dir_x
        if Key.FOV_MINUS in held:
            self._set_fov(self.view.fov * FOV_FACTOR, False)
        if Key.FOV_PLUS in held:
            self._set_fov(self.view.fov / FOV_FACTOR, False)
        if Key.FOV_RESET in held:
            self._set_fov(0.0, True)
        player.clamp(self.scene.width, self.scene.height)
        player.dir_x = math.cos(player.angle)
        player.dir_y = math.sin(player.angle)

    def render(self) -> list[int]:
        """Draw the current frame and return the 0xRRGGBB pixel buffer."""
        self.columns = cast_rays(self.scene.grid, self.player, self.view)
        fill_ceil_floor(self.buffer, self.width, self.height, self.scene.ceil, self.scene.floor)
        draw_walls(self.buffer, self.width, self.height, self.scene.textures, self.columns)
        return self.buffer


def _report_fov(real_fov: float) -> None:
    print(f"Real FOV: {real_fov:.0f}")


def _key_map(pygame) -> dict[int, Key]:
    return {
        pygame.K_ESCAPE: Key.EXIT,
        pygame.K_w: Key.MOVE_FORWARD,
        pygame.K_a: Key.MOVE_LEFT,
        pygame.K_s: Key.MOVE_BACK,
        pygame.K_d: Key.MOVE_RIGHT,
        pygame.K_LEFT: Key.TURN_LEFT,
        pygame.K_RIGHT: Key.TURN_RIGHT,
        pygame.K_KP_MULTIPLY: Key.FOV_RESET,
        pygame.K_KP_PLUS: Key.FOV_PLUS,
        pygame.K_KP_MINUS: Key.FOV_MINUS,
    }


def _run(scene: Scene) -> int:
    import pygame

    pygame.init()
    try:
        try:
            info = pygame.display.Info()
            width, height = info.current_w, info.current_h
            screen = pygame.display.set_mode((width, height))
            pygame.display.set_caption(TITLE)
        except pygame.error as exc:
            raise SceneError(ErrorKind.MLX, str(exc)) from exc
        game = Game(scene, width, height)
        frame = pygame.Surface((width, height), 0, 32, (0xFF0000, 0xFF00, 0xFF, 0))
        keys = _key_map(pygame)
        while game.running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    game.running = False
                elif event.type == pygame.KEYDOWN and event.key in keys:
                    game.press(keys[event.key])
                elif event.type == pygame.KEYUP and event.key in keys:
                    game.release(keys[event.key])
            if not game.running:
                break
            game.update()
            pixels = array("I", game.render())
            frame.get_buffer().write(pixels.tobytes(), 0)
            screen.blit(frame, (0, 0))
            pygame.display.flip()
    finally:
        pygame.quit()
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Load the scene named on the command line and run the game."""
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        if not args:
            raise SceneError(ErrorKind.ARGS, "Please specify scene filename")
        if len(args) > 1:
            raise SceneError(ErrorKind.ARGS, "Too many arguments")
        scene = load_scene(args[0])
        return _run(scene)
    except SceneError as exc:
        print(exc.report(), file=sys.stderr)
        return exc.exit_code