import io

from raycube.lines import BUFFER_SIZE, read_lines


def test_trailing_newline_gives_empty_last_line():
    assert list(read_lines(io.StringIO("a\nb\n"))) == ["a", "b", ""]


def test_last_line_without_newline():
    assert list(read_lines(io.StringIO("a\r\nb"))) == ["a", "b"]


def test_empty_stream_yields_one_empty_line():
    assert list(read_lines(io.StringIO(""))) == [""]


def test_carriage_return_only_stripped_before_newline():
    assert list(read_lines(io.StringIO("a\r"))) == ["a\r"]


def test_empty_lines_kept():
    assert list(read_lines(io.StringIO("x\n\n\ny"))) == ["x", "", "", "y"]


def test_bytes_stream_is_decoded():
    data = "NO ./n.xpm\r\nF 1,2,3\n".encode()
    assert list(read_lines(io.BytesIO(data))) == ["NO ./n.xpm", "F 1,2,3", ""]


def test_multibyte_character_split_across_chunks():
    text = "a" * (BUFFER_SIZE - 1) + "é\nz"
    assert list(read_lines(io.BytesIO(text.encode()))) == ["a" * (BUFFER_SIZE - 1) + "é", "z"]


def test_line_longer_than_buffer():
    long_line = "1" * (BUFFER_SIZE * 3 + 7)
    lines = list(read_lines(io.StringIO(long_line + "\nend")))
    assert lines == [long_line, "end"]


def test_round_trip_join():
    text = "first\nsecond\n\nfourth"
    assert "\n".join(read_lines(io.StringIO(text))) == text


def test_is_lazy_generator():
    stream = io.StringIO("a\nb\n")
    lines = read_lines(stream)
    assert next(lines) == "a"
    assert next(lines) == "b"