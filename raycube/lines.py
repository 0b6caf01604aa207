"""Line-by-line reading of scene files."""

from __future__ import annotations

import codecs
from collections.abc import Iterator
from typing import IO, AnyStr

BUFFER_SIZE = 65536


def read_lines(stream: IO[AnyStr]) -> Iterator[str]:
    """Yield the lines of ``stream`` without their line endings.

    Lines end at ``\\n``; a ``\\r`` right before it is dropped too. Whatever
    follows the last newline is always yielded as the final line, so a stream
    that ends with a newline gives a trailing empty string. Byte streams are
    decoded as UTF-8.
    """
    pending = ""
    decoder = None
    while chunk := stream.read(BUFFER_SIZE):
        if isinstance(chunk, bytes):
            if decoder is None:
                decoder = codecs.getincrementaldecoder("utf-8")()
            chunk = decoder.decode(chunk)
        pending += chunk
        *complete, pending = pending.split("\n")
        for line in complete:
            yield line[:-1] if line.endswith("\r") else line
    if decoder is not None:
        pending += decoder.decode(b"", final=True)
    yield pending