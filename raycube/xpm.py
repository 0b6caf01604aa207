"""Reading of XPM images into 0xAARRGGBB pixel arrays."""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

from raycube.colors import color_by_name

TRANSPARENT = 0xFF000000

_HEX_PREFIX = re.compile(r"[0-9a-fA-F]+")
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_WORD_SEPARATORS = re.compile(r"[ \t]+")


class XpmError(ValueError):
    """Raised when XPM data cannot be read or is malformed."""


@dataclass
class Image:
    """A decoded image: row-major pixels, one 32-bit value per pixel."""

    width: int
    height: int
    pixels: list[int] = field(default_factory=list)

    def pixel(self, x: int, y: int) -> int:
        """Return the pixel at column ``x`` and row ``y``."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) outside {self.width}x{self.height} image")
        return self.pixels[y * self.width + x]


def split_words(text: str) -> list[str]:
    """Split ``text`` on runs of spaces and tabs, dropping empty words."""
    return [word for word in _WORD_SEPARATORS.split(text) if word]


def find_unquoted(text: str, needle: str) -> int:
    """Return the first position of ``needle`` outside double quotes, or -1."""
    if not needle or len(needle) > len(text):
        return -1
    in_quotes = False
    last_start = len(text) - len(needle)
    for pos, char in enumerate(text):
        if pos > last_start:
            break
        if char == '"':
            in_quotes = not in_quotes
        if not in_quotes and text.startswith(needle, pos):
            return pos
    return -1


def _blank_comments(text: str, opener: str, closer: str, keep_closer: bool) -> str:
    while (start := find_unquoted(text, opener)) != -1:
        end = text.find(closer, start + len(opener))
        stop = len(text) if end == -1 else end + len(closer)
        if not keep_closer or end == -1:
            text = text[:start] + " " * (stop - start) + text[stop:]
        else:
            text = text[:start] + " " * (stop - start) + text[stop:]
    return text


def strip_comments(text: str) -> str:
    """Replace C-style comments outside strings with spaces, keeping the length."""
    text = _blank_comments(text, "/*", "*/", keep_closer=False)
    return _blank_comments(text, "//", "\n", keep_closer=False)


def extract_strings(text: str) -> Iterator[str]:
    """Yield the contents of each double-quoted string in ``text`` in order."""
    pos = 0
    while True:
        opening = text.find('"', pos)
        if opening == -1:
            return
        closing = text.find('"', opening + 1)
        if closing == -1:
            return
        yield text[opening + 1:closing]
        pos = closing + 1


def text_to_rgb(name: str, suffix: str | None = None) -> int:
    """Translate an XPM colour specification into 0xRRGGBB.

    ``#hex`` values are read as hexadecimal; otherwise ``name`` (joined with
    ``suffix`` by a space when given) is looked up as a colour name. Unknown
    names give 0 and "None" gives -1.
    """
    if name.startswith("#"):
        match = _HEX_PREFIX.match(name, 1)
        return int(match.group(), 16) if match else 0
    full_name = f"{name} {suffix}" if suffix else name
    try:
        return color_by_name(full_name)
    except KeyError:
        return 0


def _atoi(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def _next_line(lines: Iterator[str], what: str) -> str:
    line = next(lines, None)
    if line is None:
        raise XpmError(f"XPM data ends before {what}")
    return line


def _read_header(lines: Iterator[str]) -> tuple[int, int, int, int]:
    words = split_words(_next_line(lines, "the header"))
    if len(words) < 4:
        raise XpmError("XPM header needs width, height, colour count and chars per pixel")
    width, height, n_colors, cpp = (_atoi(word) for word in words[:4])
    if not (width and height and n_colors and cpp):
        raise XpmError("XPM header values must be non-zero")
    return width, height, n_colors, cpp


def _read_colors(lines: Iterator[str], n_colors: int, cpp: int) -> dict[str, int]:
    colors: dict[str, int] = {}
    for _ in range(n_colors):
        line = _next_line(lines, "the end of the colour table")
        words = split_words(line[cpp:])
        try:
            spec_at = words.index("c") + 1
        except ValueError:
            raise XpmError(f"colour line without a 'c' key: {line!r}") from None
        if spec_at >= len(words):
            raise XpmError(f"colour line without a colour: {line!r}")
        suffix = words[spec_at + 1] if spec_at + 1 < len(words) else None
        rgb = text_to_rgb(words[spec_at], suffix)
        key = line[:cpp]
        if cpp <= 2:
            colors[key] = rgb
        else:
            colors.setdefault(key, rgb)
    return colors


def parse_xpm(lines: Iterable[str]) -> Image:
    """Decode XPM data given as the sequence of its string contents."""
    rows = iter(lines)
    width, height, n_colors, cpp = _read_header(rows)
    colors = _read_colors(rows, n_colors, cpp)
    pixels: list[int] = []
    for _ in range(height):
        line = _next_line(rows, "the last pixel row")
        if len(line) < width * cpp:
            raise XpmError(f"pixel row too short: {line!r}")
        for start in range(0, width * cpp, cpp):
            color = colors.get(line[start:start + cpp], 0)
            if color == -1:
                color = TRANSPARENT
            pixels.append(color & 0xFFFFFFFF)
    return Image(width, height, pixels)


def load_xpm(path: str | Path) -> Image:
    """Read and decode the XPM file at ``path``."""
    try:
        text = Path(path).read_text(encoding="latin-1")
    except OSError as exc:
        raise XpmError(f"cannot read {path}: {exc.strerror or exc}") from exc
    return parse_xpm(extract_strings(strip_comments(text)))