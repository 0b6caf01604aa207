# raycube

A first-person maze walker rendered by raycasting. A scene file describes the
wall textures, the floor and ceiling colours and the map. The game opens a
window the size of the screen and lets you walk around in it.

## Installing

    pip install .

This pulls in `pygame`, which draws the window and reads PNG textures.

## Running

    raycube path/to/scene.cub

The scene file name must end in `.cub`. Each time the field of view changes,
the game prints `Real FOV: <degrees>` on standard output.

## Scene files

Settings come first, one per line, in any order. Blank lines between them are
allowed. All six are required and none may appear twice.

    NO ./textures/north.xpm
    SO ./textures/south.xpm
    WE ./textures/west.xpm
    EA ./textures/east.xpm
    F 220,100,0
    C 225,30,0

- `NO`, `SO`, `WE`, `EA`: wall textures, as `.xpm` or `.png` files.
- `F` and `C`: floor and ceiling colours as `R,G,B`, each 0–255.

The map follows the settings:

    111111
    100101
    101001
    1100N1
    111111

- `1` is a wall, `0` is open floor, a space is outside the map. Shorter rows
  are padded with spaces.
- Exactly one of `N`, `S`, `E`, `W` marks where you start and which way
  you face.
- Every open cell must be closed in by walls, and the map may not contain
  blank lines (a single newline at the end of the file is fine).

A broken scene stops the program: it prints `Error`, a message that says what
to fix and, for most errors, a line of advice to standard error, and exits
with a non-zero status (2 for bad arguments or file names, 3 for a broken
scene).

## Controls

| Key            | Action               |
|----------------|----------------------|
| W / S          | move forward / back  |
| A / D          | step left / right    |
| ← / →          | turn                 |
| keypad + / −   | narrow / widen view  |
| keypad *       | reset field of view  |
| Esc            | quit                 |

## Using it as a library

    from raycube.scene import load_scene
    from raycube.xpm import load_xpm

    scene = load_scene("maze.cub", load_xpm)

- `raycube.scene`: `load_scene`, `parse_scene` (from a list of lines),
  `parse_color`, `build_grid`; failures raise `SceneError`, which carries an
  `ErrorKind` and an `exit_code`.
- `raycube.xpm`: `load_xpm` and `parse_xpm` decode XPM images into an `Image`
  of 32-bit pixels; `XpmError` is raised on malformed data.
- `raycube.colors`: `color_by_name` looks up XPM colour names.
- `raycube.lines`: `read_lines` yields the lines of a text or byte stream.
- `raycube.render`: the raycaster (`cast_rays`, `cast_ray`) and the drawing
  of the frame (`fill_ceil_floor`, `draw_walls`) over `Player`, `View` and
  `Column`.
- `raycube.game`: `Game(scene, width, height)` ties these together with
  keyboard state (`press`, `release`, `update`) and `render()`, which returns
  the frame as a list of 0xRRGGBB pixels; `main` is the `raycube` command.

## What it does not do

There is no mouse control, sound, minimap or screenshot saving; the only
output is the window and the messages described above.

## Tests

    pip install .[test]
    pytest