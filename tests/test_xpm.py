import pytest

from raycube.colors import color_by_name
from raycube.xpm import (
    Image,
    XpmError,
    extract_strings,
    find_unquoted,
    load_xpm,
    parse_xpm,
    split_words,
    strip_comments,
    text_to_rgb,
)

SAMPLE = """/* XPM */
static char *t[] = {
/* comment "with quotes" */
"2 2 2 1",
"a c #FF0000",
"b c None",
// trailing remark
"ab",
"ba"
};
"""


def test_split_words_on_spaces_and_tabs():
    assert split_words("  a\tb  c ") == ["a", "b", "c"]


def test_split_words_empty():
    assert split_words(" \t ") == []


def test_find_unquoted_skips_quoted_text():
    text = '"/*" /*'
    assert find_unquoted(text, "/*") == text.rindex("/*")


def test_find_unquoted_missing():
    assert find_unquoted("abc", "x") == -1
    assert find_unquoted("a", "abc") == -1


def test_strip_comments_keeps_length_and_strings():
    text = '"a/*b" /* gone */ "c" // gone too\n"d"'
    stripped = strip_comments(text)
    assert len(stripped) == len(text)
    assert "gone" not in stripped
    assert list(extract_strings(stripped)) == ["a/*b", "c", "d"]


def test_extract_strings_ignores_unterminated():
    assert list(extract_strings('x "ab" y "cd" "e')) == ["ab", "cd"]


def test_text_to_rgb_hex():
    assert text_to_rgb("#00ff00", None) == 0x00FF00


def test_text_to_rgb_two_word_name():
    assert text_to_rgb("dark", "red") == color_by_name("dark red")


def test_text_to_rgb_name_is_case_insensitive():
    assert text_to_rgb("NAVY") == color_by_name("navy")


def test_text_to_rgb_unknown_is_zero():
    assert text_to_rgb("no-such-colour", None) == 0


def test_text_to_rgb_none_is_transparent_marker():
    assert text_to_rgb("None") == -1


def test_parse_sample_lines():
    image = parse_xpm(["2 2 2 1", "a c #FF0000", "b c None", "ab", "ba"])
    assert (image.width, image.height) == (2, 2)
    assert image.pixel(0, 0) == 0xFF0000
    assert image.pixel(1, 0) == 0xFF000000
    assert image.pixel(0, 1) == image.pixel(1, 0)
    assert image.pixel(1, 1) == image.pixel(0, 0)


def test_pixel_out_of_range():
    image = Image(1, 1, [0])
    with pytest.raises(IndexError):
        image.pixel(1, 0)


def test_unknown_pixel_key_is_zero():
    image = parse_xpm(["1 1 1 1", "a c #123456", "z"])
    assert image.pixels == [0]


def test_wide_keys_first_definition_wins():
    image = parse_xpm(["1 1 2 3", "abc c #111111", "abc c #222222", "abc"])
    assert image.pixels == [0x111111]


def test_narrow_keys_last_definition_wins():
    image = parse_xpm(["1 1 2 1", "a c #111111", "a c #222222", "a"])
    assert image.pixels == [0x222222]


@pytest.mark.parametrize(
    "lines",
    [
        [],
        ["2 2 1"],
        ["0 2 1 1", "a c #000000", "aa", "aa"],
        ["1 1 1 1", "a m #000000", "a"],
        ["1 1 1 1", "a c", "a"],
        ["2 2 1 1", "a c #000000", "aa"],
        ["2 1 1 1", "a c #000000", "a"],
    ],
)
def test_parse_errors(lines):
    with pytest.raises(XpmError):
        parse_xpm(lines)


def test_load_xpm_file(tmp_path):
    path = tmp_path / "wall.xpm"
    path.write_text(SAMPLE)
    image = load_xpm(path)
    assert image.pixels == [0xFF0000, 0xFF000000, 0xFF000000, 0xFF0000]


def test_load_xpm_missing_file(tmp_path):
    with pytest.raises(XpmError):
        load_xpm(tmp_path / "absent.xpm")