"""Reading of ``.cub`` scene files: colours, wall textures and the map."""

from __future__ import annotations

import math
import re
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from raycube.lines import read_lines
from raycube.xpm import Image, load_xpm

UINT_MAX = 0xFFFFFFFF
UCHAR_MAX = 0xFF

MAP_CHARACTERS = " 01NSWE"
PLAYER_DIRECTIONS = "ESWN"

_DIGITS = re.compile(r"\d+")

TextureLoader = Callable[[str], Any]


class ErrorKind(Enum):
    """Categories of fatal errors, valued by the process exit code."""

    MLX = 1
    ARGS = 2
    PARSE = 3
    MEM = 4
    BMP = 5

    @property
    def hint(self) -> str | None:
        """The advice line printed after the error message, if any."""
        return _HINTS.get(self)


_HINTS = {
    ErrorKind.MLX: "Graphics system crashed",
    ErrorKind.PARSE: "Please fix scene file",
    ErrorKind.ARGS: "Usage: raycube scene_name.cub",
    ErrorKind.BMP: "Unable to save screenshot",
}


class SceneError(Exception):
    """A fatal error while loading a scene."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message

    @property
    def exit_code(self) -> int:
        return self.kind.value

    def report(self) -> str:
        """The text shown to the user for this error."""
        parts = ["Error", self.message]
        if self.kind.hint:
            parts.append(self.kind.hint)
        return "\n".join(parts)


class Wall(Enum):
    """Wall faces, valued by the letter used for them in rendering."""

    NORTH = "N"
    SOUTH = "S"
    WEST = "W"
    EAST = "E"

    @property
    def identifier(self) -> str:
        """The two-letter scene-file key for this face's texture."""
        return _IDENTIFIERS[self]


_IDENTIFIERS = {
    Wall.NORTH: "NO",
    Wall.SOUTH: "SO",
    Wall.WEST: "WE",
    Wall.EAST: "EA",
}
_WALL_BY_IDENTIFIER = {ident: wall for wall, ident in _IDENTIFIERS.items()}


@dataclass
class Scene:
    """A fully loaded scene."""

    grid: list[str]
    ceil: int
    floor: int
    textures: dict[Wall, Any] = field(default_factory=dict)
    position: tuple[float, float] = (0.0, 0.0)
    angle: float = 0.0

    @property
    def width(self) -> int:
        return len(self.grid[0]) if self.grid else 0

    @property
    def height(self) -> int:
        return len(self.grid)


def _parse_error(message: str) -> SceneError:
    return SceneError(ErrorKind.PARSE, message)


def atoi_limited(text: str, limit: int = UINT_MAX) -> tuple[int, str]:
    """Read an unsigned decimal number surrounded by optional spaces.

    Returns the number and the text after it and its trailing spaces.
    Raises ValueError when no digit is found or, unless ``limit`` is
    UINT_MAX, when the number exceeds ``limit``. Numbers beyond UINT_MAX
    are clamped to it.
    """
    rest = text.lstrip(" ")
    match = _DIGITS.match(rest)
    if match is None:
        raise ValueError(f"no number at {text!r}")
    number = int(match.group())
    if limit != UINT_MAX and number > limit:
        raise ValueError(f"number {match.group()} exceeds {limit}")
    return min(UINT_MAX, number), rest[match.end():].lstrip(" ")


def parse_color(line: str) -> int:
    """Parse an ``F R,G,B`` or ``C R,G,B`` line into 0xRRGGBB."""
    rest = line[1:]
    if not rest.startswith(" "):
        raise _parse_error("Add space after F/C identifier")
    channels = []
    for position, name in enumerate(("Red", "Green", "Blue")):
        try:
            value, rest = atoi_limited(rest, UCHAR_MAX)
        except ValueError:
            raise _parse_error(f"F/C color {name} is wrong (range: 0-255)") from None
        channels.append(value)
        if position < 2:
            if not rest.startswith(","):
                raise _parse_error("F/C color format: 'F R,G,B'/'C R,G,B'")
            rest = rest[1:]
    if rest:
        raise _parse_error("F/C color line redundant symbols")
    red, green, blue = channels
    return (red << 16) | (green << 8) | blue


def _wall_of(line: str) -> Wall:
    wall = _WALL_BY_IDENTIFIER.get(line[:2])
    if wall is None:
        raise _parse_error("Wrong texture setting. Valid: NO/SO/WE/EA")
    return wall


def parse_texture_setting(line: str) -> tuple[Wall, str]:
    """Parse a ``NO ./path.xpm`` style line into its wall and texture path."""
    wall = _wall_of(line)
    if line[2:3] != " ":
        raise _parse_error("Add space after texture identifier")
    path = line[2:].lstrip(" ")
    if len(path) < 5 or not path.endswith((".xpm", ".png")):
        raise SceneError(ErrorKind.ARGS, "Can't identify texture format (.xpm/.png)")
    return wall, path


def _load_texture(path: str) -> Image:
    if path.endswith(".xpm"):
        return load_xpm(path)
    import pygame

    surface = pygame.image.load(path)
    width, height = surface.get_size()
    raw = iter(pygame.image.tostring(surface, "RGB"))
    pixels = [(r << 16) | (g << 8) | b for r, g, b in zip(raw, raw, raw)]
    return Image(width, height, pixels)


def _import_texture(loader: TextureLoader, path: str) -> Any:
    try:
        texture = loader(path)
    except (OSError, ValueError, RuntimeError):
        texture = None
    if texture is None:
        raise _parse_error("Can't load texture file")
    return texture


def build_grid(rows: list[str]) -> tuple[list[str], tuple[float, float], float]:
    """Validate map rows and locate the player.

    Rows are padded with spaces to the widest one. Returns the padded grid
    with the player cell replaced by ``0``, the player's position at the
    centre of its cell, and its facing angle.
    """
    if not rows:
        raise _parse_error("There is no map in scene file")
    width = max(len(row) for row in rows)
    height = len(rows)
    grid = [list(row.ljust(width)) for row in rows]
    player: tuple[tuple[float, float], float] | None = None
    for y, row in enumerate(grid):
        for x, cell in enumerate(row):
            if cell not in MAP_CHARACTERS:
                raise _parse_error("Wrong map character. Allowed: 01NSWE")
            if cell in " 1":
                continue
            if x == 0 or x == width - 1 or y == 0 or y == height - 1:
                raise _parse_error("Map must be closed/surrounded by walls")
            neighbours = (grid[y - 1][x], grid[y + 1][x], row[x - 1], row[x + 1])
            if " " in neighbours:
                raise _parse_error("Map must be closed/surrounded by walls")
            if cell == "0":
                continue
            if player is not None:
                raise _parse_error("Duplicated map player character")
            angle = math.pi / 2 * PLAYER_DIRECTIONS.index(cell)
            player = ((x + 0.5, y + 0.5), angle)
            row[x] = "0"
    if player is None:
        raise _parse_error("Map player character 'NSWE' not found")
    position, angle = player
    return ["".join(row) for row in grid], position, angle


def _flag_last(lines: Iterable[str]) -> Iterator[tuple[str, bool]]:
    iterator = iter(lines)
    try:
        current = next(iterator)
    except StopIteration:
        return
    for following in iterator:
        yield current, False
        current = following
    yield current, True


def _validate_settings(
    floor: int | None, ceil: int | None, textures: dict[Wall, Any]
) -> None:
    if floor is None:
        raise _parse_error("Floor color not found. Format: F R,G,B")
    if ceil is None:
        raise _parse_error("Ceil color not found. Format: C R,G,B")
    names = {Wall.NORTH: "North", Wall.SOUTH: "South", Wall.WEST: "West", Wall.EAST: "East"}
    for wall in Wall:
        if wall not in textures:
            raise _parse_error(
                f"{names[wall]} wall texture doesn't set. "
                f"Format: '{wall.identifier} ./path.xpm'"
            )


def parse_scene(
    lines: Iterable[str], texture_loader: TextureLoader | None = None
) -> Scene:
    """Build a scene from the lines of a scene file.

    ``texture_loader`` turns a texture path into an image; by default XPM
    and PNG files are read. The last item of ``lines`` is taken as the text
    after the final newline, as :func:`raycube.lines.read_lines` yields it.
    """
    loader = texture_loader or _load_texture
    ceil: int | None = None
    floor: int | None = None
    textures: dict[Wall, Any] = {}
    rows = _flag_last(lines)
    first_row: str | None = None
    first_is_last = False
    for line, is_last in rows:
        head = line[:1]
        if head in ("C", "F"):
            if (ceil if head == "C" else floor) is not None:
                raise _parse_error("Duplicated F/C color identifier")
            color = parse_color(line)
            if head == "C":
                ceil = color
            else:
                floor = color
        elif head in ("N", "S", "W", "E"):
            if _wall_of(line) in textures:
                raise _parse_error("Duplicated texture identifier")
            wall, path = parse_texture_setting(line)
            textures[wall] = _import_texture(loader, path)
        elif head:
            first_row, first_is_last = line, is_last
            break
        if is_last:
            raise _parse_error("There is no map in scene file")
    if first_row is None:
        raise _parse_error("There is no map in scene file")
    _validate_settings(floor, ceil, textures)
    assert floor is not None and ceil is not None

    map_rows = [first_row]
    if not first_is_last:
        for line, is_last in rows:
            if not line:
                if not is_last:
                    raise _parse_error("Empty lines in map are not allowed")
                break
            map_rows.append(line)
    grid, position, angle = build_grid(map_rows)
    return Scene(grid, ceil, floor, textures, position, angle)


def load_scene(path: str | Path, texture_loader: TextureLoader | None = None) -> Scene:
    """Read the ``.cub`` scene file at ``path``."""
    name = str(path)
    if len(name) < 5 or not name.endswith(".cub"):
        raise SceneError(ErrorKind.ARGS, "Wrong scene filename")
    try:
        stream = open(name, "rb")
    except OSError as exc:
        raise SceneError(ErrorKind.ARGS, exc.strerror or str(exc)) from exc
    with stream:
        try:
            lines = list(read_lines(stream))
        except (OSError, UnicodeDecodeError) as exc:
            raise _parse_error("Can't load scene file") from exc
    return parse_scene(lines, texture_loader)