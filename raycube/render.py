"""Ray casting against the map grid and drawing of textured wall columns."""

from __future__ import annotations

import math
from collections.abc import Mapping, MutableSequence, Sequence
from dataclasses import dataclass, field

from raycube.scene import Wall
from raycube.xpm import Image

PI2 = 6.28318530718
BORDER_MARGIN = 0.0001
_MAX_HEIGHT = 0xFFFFFFFF


@dataclass
class Player:
    """Position, facing angle and facing direction of the player."""

    x: float
    y: float
    angle: float = 0.0
    dir_x: float = field(init=False)
    dir_y: float = field(init=False)

    def __post_init__(self) -> None:
        self.dir_x = math.cos(self.angle)
        self.dir_y = math.sin(self.angle)

    def clamp(self, map_width: int, map_height: int) -> None:
        """Wrap the angle into one turn and keep the position inside the map."""
        if self.angle > PI2:
            self.angle -= PI2
        if self.angle < 0:
            self.angle += PI2
        if self.x < 0:
            self.x = BORDER_MARGIN
        if self.y < 0:
            self.y = BORDER_MARGIN
        if self.x >= map_width:
            self.x = map_width - BORDER_MARGIN
        if self.y >= map_height:
            self.y = map_height - BORDER_MARGIN


@dataclass
class View:
    """Screen geometry and the per-column projection derived from the field of view."""

    width: int
    height: int
    aspect: float = field(init=False)
    fov: float = field(init=False, default=0.0)
    col_step: float = field(init=False, default=0.0)
    col_center: float = field(init=False, default=0.0)
    col_scale: float = field(init=False, default=0.0)
    real_fov: float = field(init=False, default=0.0)

    def __post_init__(self) -> None:
        if self.width < 2 or self.height < 1:
            raise ValueError(f"view of {self.width}x{self.height} is too small")
        self.aspect = self.width / self.height
        self.set_fov(0.0, True)

    def set_fov(self, fov: float, reset: bool) -> float:
        """Recompute the projection for ``fov`` and return the shown field of view.

        With ``reset`` the default field of view for the aspect ratio is used.
        Otherwise ``fov`` is kept only when it lies between pi/16 and 2*pi,
        although the projection is recomputed either way.
        """
        if reset:
            sign = 1 if self.aspect >= 1.77 else -1
            fov = sign * math.sqrt(abs(math.pi / 4 * (self.aspect - 1.77) / 2)) + math.pi / 2
        self.col_step = math.tan(fov / (self.width - 1))
        self.col_center = self.width / 2
        self.col_scale = 1 / self.col_step if self.col_step else math.inf
        self.real_fov = 114 * math.atan(self.col_step * self.col_center)
        if reset or math.pi / 16 < fov < PI2:
            self.fov = fov
        return self.real_fov


@dataclass
class Column:
    """One rendered screen column: wall height, texture offset and wall side."""

    height: int
    texture_pos: float
    side: str


def _cell_index(value: float, size: int) -> int | None:
    if not math.isfinite(value):
        return None
    index = math.trunc(value)
    return index if 0 <= index < size else None


def _walk(
    grid: Sequence[str], x: float, y: float, step_x: float, step_y: float
) -> tuple[float, float]:
    height = len(grid)
    width = len(grid[0]) if grid else 0
    while True:
        row = _cell_index(y, height)
        col = _cell_index(x, width)
        if row is None or col is None or grid[row][col] == "1":
            return float(x), float(y)
        x += step_x
        y += step_y


def intersect_x(
    grid: Sequence[str], player: Player, step_x: float, step_y: float
) -> tuple[float, float]:
    """Follow a ray across vertical grid lines until it meets a wall or leaves the map."""
    cell = math.trunc(player.x)
    frac = player.x - cell
    x = cell + (step_x > 0) - (step_x < 0)
    if step_x > 0:
        y = player.y + step_y * (1 - frac)
    else:
        y = player.y + step_y * frac
    x, y = _walk(grid, x, y, step_x, step_y)
    return x + (step_x < 0), y


def intersect_y(
    grid: Sequence[str], player: Player, step_x: float, step_y: float
) -> tuple[float, float]:
    """Follow a ray across horizontal grid lines until it meets a wall or leaves the map."""
    cell = math.trunc(player.y)
    frac = player.y - cell
    y = cell + (step_y > 0) - (step_y < 0)
    if step_y > 0:
        x = player.x + step_x * (1 - frac)
    else:
        x = player.x + step_x * frac
    x, y = _walk(grid, x, y, step_x, step_y)
    return x, y + (step_y < 0)


def _divide(numerator: float, denominator: float) -> float:
    if denominator:
        return numerator / denominator
    return math.copysign(math.inf, numerator) * math.copysign(1.0, denominator)


def _column_height(scale: float, distance: float) -> int:
    try:
        value = scale / distance
    except ZeroDivisionError:
        value = math.inf
    if math.isnan(value) or value <= 0:
        return 0
    height = _MAX_HEIGHT if value >= _MAX_HEIGHT else int(value)
    return height & ~1


def _fraction(value: float) -> float:
    return value - math.trunc(value) if math.isfinite(value) else 0.0


def cast_ray(grid: Sequence[str], player: Player, view: View, angle: float) -> Column:
    """Cast one ray at ``angle`` and describe the wall column it sees."""
    step_x_sign = 1 if angle <= math.pi / 2 or angle > 3 * math.pi / 2 else -1
    step_y_sign = -1 if angle > math.pi else 1
    slope = math.tan(angle)
    hit_x = intersect_x(grid, player, step_x_sign, step_x_sign * slope)
    hit_y = intersect_y(grid, player, _divide(step_y_sign, slope), step_y_sign)
    dist_x = player.dir_x * (hit_x[0] - player.x) + player.dir_y * (hit_x[1] - player.y)
    dist_y = player.dir_x * (hit_y[0] - player.x) + player.dir_y * (hit_y[1] - player.y)
    if dist_x < dist_y:
        column = Column(
            _column_height(view.col_scale, dist_x),
            _fraction(hit_x[1]),
            "W" if hit_x[0] < player.x else "E",
        )
    else:
        column = Column(
            _column_height(view.col_scale, dist_y),
            _fraction(hit_y[0]),
            "N" if hit_y[1] < player.y else "S",
        )
    if column.side in ("W", "S"):
        column.texture_pos = 1.0 - column.texture_pos
    return column


def _wrap(angle: float) -> float:
    if angle < 0:
        return angle + PI2
    if angle > PI2:
        return angle - PI2
    return angle


def cast_rays(grid: Sequence[str], player: Player, view: View) -> list[Column]:
    """Cast one ray per screen column, left to right."""
    return [
        cast_ray(
            grid,
            player,
            view,
            _wrap(player.angle + math.atan(view.col_step * (ray - view.col_center))),
        )
        for ray in range(view.width)
    ]


def fill_ceil_floor(
    buffer: MutableSequence[int], width: int, height: int, ceil: int, floor: int
) -> None:
    """Paint the upper half of the screen with ``ceil`` and the rest with ``floor``."""
    full = width * height
    half = full // 2
    buffer[:half] = [ceil] * half
    buffer[half:full] = [floor] * (full - half)


def draw_column(
    buffer: MutableSequence[int],
    width: int,
    height: int,
    texture: Image,
    column: Column,
    x: int,
) -> None:
    """Draw one texture column scaled to ``column.height``, centred vertically."""
    wall = column.height
    tex_w, tex_h = texture.width, texture.height
    src_x = max(0, min(tex_w - 1, int(column.texture_pos * tex_w)))
    src_y = 0
    dst_y = max(0, (height - wall) // 2)
    max_y = dst_y + wall
    error = tex_h // 2
    if wall > height:
        error = (wall - height) * tex_h // 2
        src_y = error // wall
        error %= wall
        max_y = height
    pixels = texture.pixels
    while dst_y < max_y:
        while error >= wall:
            src_y += 1
            error -= wall
        buffer[width * dst_y + x] = pixels[min(src_y, tex_h - 1) * tex_w + src_x]
        dst_y += 1
        error += tex_h


def draw_walls(
    buffer: MutableSequence[int],
    width: int,
    height: int,
    textures: Mapping[Wall, Image],
    columns: Sequence[Column],
) -> None:
    """Draw every column with the texture of the wall side it shows."""
    for x, column in enumerate(columns):
        draw_column(buffer, width, height, textures[Wall(column.side)], column, x)