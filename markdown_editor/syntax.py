"""Low-level helpers shared by the parser and the syntax highlighter.

These deal with escape sequences, token scanning, and image-source
extraction.
"""

from __future__ import annotations

from .constants import ESCAPED_MARKDOWN_PATTERN, IMAGE_TITLE_PATTERN


def is_escaped(text: str, pos: int) -> bool:
    """Tell whether the character at `pos` follows an odd run of backslashes.

    Examples:
        is_escaped("\\*", 1)  # True
        is_escaped("\\\\*", 2)  # False, the backslash itself is escaped
    """
    run_start = pos
    while run_start > 0 and text[run_start - 1] == "\\":
        run_start -= 1
    return (pos - run_start) % 2 == 1


def find_unescaped_token(text: str, token: str, start: int) -> int:
    """Find the first unescaped occurrence of `token` at or after `start`.

    Args:
        text: Text to scan.
        token: Literal token to look for.
        start: Index where scanning begins.

    Returns:
        int: Index of the token, or -1 when it is absent or `token` is empty.

    Examples:
        find_unescaped_token("hello **world**", "**", 0)  # 6
        find_unescaped_token("hello \\** world **end", "**", 0)  # 16
    """
    if not token:
        return -1

    index = text.find(token, max(start, 0))
    while index != -1:
        if not is_escaped(text, index):
            return index
        index = text.find(token, index + 1)
    return -1


def unescape_markdown(text: str) -> str:
    r"""Strip one backslash before each Markdown-special character.

    Examples:
        unescape_markdown("\\*hello\\*")  # "*hello*"
        unescape_markdown("hello\\\\world")  # "hello\\world"
    """
    return ESCAPED_MARKDOWN_PATTERN.sub(r"\1", text)


def parse_image_source_and_title(raw: str, unescape_src: bool = True) -> tuple[str, str | None]:
    """Split the raw content inside an image's parentheses.

    Supports ``url``, ``url "title"`` and ``url 'title'``; the title must be
    the final quoted token.

    Args:
        raw: Text between the parentheses of ``![alt](...)``.
        unescape_src: Resolve backslash escapes in the source. The highlighter
            passes False to keep the raw characters.

    Returns:
        tuple[str, str | None]: Source and title (None when absent).

    Examples:
        parse_image_source_and_title('img.png "My Title"')  # ("img.png", "My Title")
        parse_image_source_and_title("  img.png  ")  # ("img.png", None)
    """
    trimmed = raw.strip()
    title_match = IMAGE_TITLE_PATTERN.match(trimmed)

    if title_match:
        src = title_match.group(1).strip()
        title = title_match.group(2)
        if title is None:
            title = title_match.group(3)
    else:
        src = trimmed
        title = None

    if unescape_src:
        src = unescape_markdown(src)
    return src, title
