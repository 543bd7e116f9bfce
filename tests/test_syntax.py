from __future__ import annotations

import pytest
from markdown_editor.syntax import (
    find_unescaped_token,
    is_escaped,
    parse_image_source_and_title,
    unescape_markdown,
)


@pytest.mark.parametrize(
    ("text", "token", "start", "expected"),
    [
        ("hello **world**", "**", 0, 6),
        ("hello world", "**", 0, -1),
        ("hello \\** world **end", "**", 0, 16),
        ("\\\\**rest", "**", 0, 2),
        ("**hello** world", "**", 2, 7),
        ("hello", "", 0, -1),
        ("hi", "**", 10, -1),
        ("hello `code` end", "`", 0, 6),
        ("hello \\` real`", "`", 0, 13),
    ],
)
def test_find_unescaped_token(text: str, token: str, start: int, expected: int):
    assert find_unescaped_token(text, token, start) == expected


def test_find_unescaped_token_clamps_negative_start():
    assert find_unescaped_token("a*b", "*", -5) == 1


@pytest.mark.parametrize(
    ("text", "pos", "expected"),
    [
        ("hello", 2, False),
        ("\\*", 1, True),
        ("\\\\*", 2, False),
        ("\\\\\\*", 3, True),
        ("hello", 0, False),
    ],
)
def test_is_escaped(text: str, pos: int, expected: bool):
    assert is_escaped(text, pos) is expected


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("\\*hello\\*", "*hello*"),
        ("\\*\\*bold\\*\\*", "**bold**"),
        ("hello\\\\world", "hello\\world"),
        ("hello world", "hello world"),
        ("", ""),
        ("\\[link\\]", "[link]"),
        ("\\(url\\)", "(url)"),
        ("\\# not heading", "# not heading"),
        ("\\a stays", "\\a stays"),
    ],
)
def test_unescape_markdown(text: str, expected: str):
    assert unescape_markdown(text) == expected


def test_image_source_plain_url():
    assert parse_image_source_and_title("http://example.com/img.png") == (
        "http://example.com/img.png",
        None,
    )


def test_image_source_with_double_quoted_title():
    assert parse_image_source_and_title('img.png "My Title"') == ("img.png", "My Title")


def test_image_source_with_single_quoted_title():
    assert parse_image_source_and_title("img.png 'My Title'") == ("img.png", "My Title")


def test_image_source_is_trimmed():
    assert parse_image_source_and_title("  img.png  ") == ("img.png", None)


def test_image_source_is_unescaped_by_default():
    assert parse_image_source_and_title("img\\*special.png") == ("img*special.png", None)


def test_image_source_escapes_can_be_preserved():
    assert parse_image_source_and_title("img\\*special.png", unescape_src=False) == (
        "img\\*special.png",
        None,
    )


def test_image_source_with_empty_title():
    assert parse_image_source_and_title('img.png ""') == ("img.png", "")


def test_image_title_must_be_last_token():
    assert parse_image_source_and_title('img.png "title" trailing') == (
        'img.png "title" trailing',
        None,
    )
