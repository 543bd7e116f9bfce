"""Toolbar actions as pure text and selection transforms.

Each action takes the current text, selection and open inline markers and
returns the new text, the selection to restore, and the markers still open.
Nothing here touches editor state, so results can be fed straight back into
`highlight_markdown`.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Sequence

from .constants import (
    CODE_FENCE,
    DIVIDER_LINE,
    HEADING_PREFIX_PATTERN,
    HORIZONTAL_RULE_PATTERN,
    IMAGE_TEMPLATE,
    IMAGE_TEMPLATE_CURSOR_OFFSET,
    INLINE_ACTION_MARKERS,
    INLINE_ACTIONS,
    ORDERED_LIST_PREFIX_PATTERN,
    QUOTE_PREFIX_PATTERN,
    UNORDERED_LIST_PREFIX_PATTERN,
)
from .exceptions import UnknownActionError
from .models import (
    HighlightSegment,
    ImageInfo,
    MarkdownFeature,
    SegmentType,
    Selection,
    ToolbarActionResult,
)

LineTransform = Callable[[list[str]], list[str]]


def _to_action(action: str | MarkdownFeature) -> MarkdownFeature:
    if isinstance(action, MarkdownFeature):
        return action
    try:
        return MarkdownFeature(action)
    except ValueError as error:
        raise UnknownActionError(action) from error


def _to_active_actions(
    active_inline_actions: Iterable[str | MarkdownFeature],
) -> list[MarkdownFeature]:
    active = [_to_action(action) for action in active_inline_actions]
    for action in active:
        if action not in INLINE_ACTIONS:
            raise UnknownActionError(action.value)
    return active


def clamp_selection(selection: Selection, length: int) -> Selection:
    """Order a selection and clamp both offsets into ``[0, length]``.

    Args:
        selection: Selection as reported by the editor; may be reversed or
            out of range.
        length: Length of the text the selection applies to.

    Returns:
        Selection: A selection with ``0 <= start <= end <= length``.

    Examples:
        clamp_selection(Selection(9, 2), 5)  # Selection(2, 5)
    """
    start, end = sorted((selection.start, selection.end))
    return Selection(max(0, min(start, length)), max(0, min(end, length)))


# Inline actions


def _apply_inline_action(
    action: MarkdownFeature,
    text: str,
    selection: Selection,
    active: list[MarkdownFeature],
) -> ToolbarActionResult:
    open_marker, close_marker = INLINE_ACTION_MARKERS[action]
    remaining = [value for value in active if value is not action]

    if not selection.is_caret:
        selected = text[selection.start : selection.end]
        new_text = (
            f"{text[: selection.start]}{open_marker}{selected}{close_marker}{text[selection.end :]}"
        )
        shift = len(open_marker)
        return ToolbarActionResult(
            new_text, Selection(selection.start + shift, selection.end + shift), remaining
        )

    cursor = selection.start
    is_active = action in active
    marker = close_marker if is_active else open_marker
    new_text = f"{text[:cursor]}{marker}{text[cursor:]}"
    caret = cursor + len(marker)
    next_active = remaining if is_active else [*active, action]
    return ToolbarActionResult(new_text, Selection(caret, caret), next_active)


# Block actions


def _toggle_prefix(
    lines: list[str], pattern: re.Pattern[str], prefix: Callable[[int], str]
) -> list[str]:
    """Strip `pattern` when every line has it, otherwise prepend `prefix`."""
    if all(pattern.match(line) for line in lines):
        return [pattern.sub("", line, count=1) for line in lines]
    return [f"{prefix(index)}{line}" for index, line in enumerate(lines)]


def _toggle_quote(lines: list[str]) -> list[str]:
    return _toggle_prefix(lines, QUOTE_PREFIX_PATTERN, lambda _: "> ")


def _toggle_unordered_list(lines: list[str]) -> list[str]:
    return _toggle_prefix(lines, UNORDERED_LIST_PREFIX_PATTERN, lambda _: "- ")


def _toggle_ordered_list(lines: list[str]) -> list[str]:
    return _toggle_prefix(lines, ORDERED_LIST_PREFIX_PATTERN, lambda index: f"{index + 1}. ")


def _toggle_heading(lines: list[str]) -> list[str]:
    # Lines that already carry another level are switched to level 1
    if all(HEADING_PREFIX_PATTERN.match(line) for line in lines):
        return [HEADING_PREFIX_PATTERN.sub("", line, count=1) for line in lines]
    return [f"# {HEADING_PREFIX_PATTERN.sub('', line, count=1)}" for line in lines]


def _set_heading_level(level: int) -> LineTransform:
    same_level = re.compile(rf"^#{{{level}}}\s+")
    prefix = "#" * level + " "

    def transform(lines: list[str]) -> list[str]:
        stripped = [HEADING_PREFIX_PATTERN.sub("", line, count=1) for line in lines]
        if all(same_level.match(line) for line in lines):
            return stripped
        return [f"{prefix}{line}" for line in stripped]

    return transform


def _toggle_divider(lines: list[str]) -> list[str]:
    if all(HORIZONTAL_RULE_PATTERN.match(line) for line in lines):
        return ["" for _ in lines]
    return [DIVIDER_LINE for _ in lines]


def _toggle_code_block(lines: list[str]) -> list[str]:
    if len(lines) >= 2 and lines[0].startswith(CODE_FENCE) and lines[-1].startswith(CODE_FENCE):
        return lines[1:-1]
    return [CODE_FENCE, *lines, CODE_FENCE]


_BLOCK_TRANSFORMS: dict[MarkdownFeature, LineTransform] = {
    MarkdownFeature.HEADING: _toggle_heading,
    MarkdownFeature.HEADING1: _set_heading_level(1),
    MarkdownFeature.HEADING2: _set_heading_level(2),
    MarkdownFeature.HEADING3: _set_heading_level(3),
    MarkdownFeature.HEADING4: _set_heading_level(4),
    MarkdownFeature.HEADING5: _set_heading_level(5),
    MarkdownFeature.HEADING6: _set_heading_level(6),
    MarkdownFeature.QUOTE: _toggle_quote,
    MarkdownFeature.UNORDERED_LIST: _toggle_unordered_list,
    MarkdownFeature.ORDERED_LIST: _toggle_ordered_list,
    MarkdownFeature.DIVIDER: _toggle_divider,
    MarkdownFeature.CODE_BLOCK: _toggle_code_block,
}


def selected_line_range(text: str, selection: Selection) -> tuple[int, int]:
    """Expand a selection to the full lines it touches.

    Args:
        text: Document text.
        selection: Ordered, in-range selection.

    Returns:
        tuple[int, int]: Start of the first line and end of the last line
            (exclusive, before its newline).

    Examples:
        selected_line_range("one\\ntwo\\nthree", Selection(5, 5))  # (4, 7)
    """
    range_start = text.rfind("\n", 0, selection.start) + 1
    range_end = text.find("\n", selection.end)
    if range_end == -1:
        range_end = len(text)
    return range_start, range_end


def _apply_block_action(
    action: MarkdownFeature,
    text: str,
    selection: Selection,
    active: list[MarkdownFeature],
) -> ToolbarActionResult:
    range_start, range_end = selected_line_range(text, selection)
    content = text[range_start:range_end]
    new_content = "\n".join(_BLOCK_TRANSFORMS[action](content.split("\n")))
    new_text = f"{text[:range_start]}{new_content}{text[range_end:]}"

    if selection.is_caret:
        offset = selection.start - range_start + len(new_content) - len(content)
        caret = range_start + max(0, min(len(new_content), offset))
        return ToolbarActionResult(new_text, Selection(caret, caret), active)

    return ToolbarActionResult(
        new_text, Selection(range_start, range_start + len(new_content)), active
    )


def _apply_image_action(
    text: str, selection: Selection, active: list[MarkdownFeature]
) -> ToolbarActionResult:
    cursor = selection.start
    new_text = f"{text[:cursor]}{IMAGE_TEMPLATE}{text[cursor:]}"
    caret = cursor + IMAGE_TEMPLATE_CURSOR_OFFSET
    return ToolbarActionResult(new_text, Selection(caret, caret), active)


def apply_toolbar_action(
    action: str | MarkdownFeature,
    text: str,
    selection: Selection,
    active_inline_actions: Sequence[str | MarkdownFeature] = (),
) -> ToolbarActionResult:
    """Apply a toolbar action to raw Markdown text.

    Inline actions (bold, italic, strikethrough, code) wrap a range
    selection, or insert an opening or closing marker at a caret depending on
    whether the action is already open. Block actions expand the selection
    to whole lines and toggle their prefix or fence. The image action inserts
    an empty image template with the caret inside the alt text.

    Args:
        action: Action name or `MarkdownFeature` member.
        text: Current text.
        selection: Current selection. Reversed selections are ordered and
            offsets outside the text are clamped.
        active_inline_actions: Inline markers opened at the caret and not yet
            closed, in the order they were opened.

    Returns:
        ToolbarActionResult: New text, selection, and open inline markers.

    Raises:
        UnknownActionError: If `action` is not a known action name, or an
            active action is not one of the inline actions.

    Examples:
        apply_toolbar_action("bold", "hello world", Selection(6, 11))
        # text "hello **world**", selection (8, 13)
        apply_toolbar_action("heading2", "title", Selection(0, 0))
        # text "## title", selection (3, 3)
    """
    action = _to_action(action)
    active = _to_active_actions(active_inline_actions)
    selection = clamp_selection(selection, len(text))

    if action is MarkdownFeature.IMAGE:
        return _apply_image_action(text, selection, active)

    if action in INLINE_ACTION_MARKERS:
        return _apply_inline_action(action, text, selection, active)

    return _apply_block_action(action, text, selection, active)


# Images


def find_active_image(
    segments: Sequence[HighlightSegment], selection: Selection
) -> ImageInfo | None:
    """Find the image the selection touches, for editing its source or alt text.

    Segment offsets are recovered by summing segment lengths, which is exact
    because highlight segments cover the text character for character. A
    caret counts only when it sits strictly inside the image, and images
    with an empty source are skipped.

    Args:
        segments: Output of `highlight_markdown` for the current text.
        selection: Current selection.

    Returns:
        ImageInfo | None: The first image overlapping the selection, or None.

    Examples:
        segments = highlight_markdown("see ![logo](logo.png)")
        find_active_image(segments, Selection(6, 6))  # ImageInfo(src="logo.png", ...)
    """
    start, end = sorted((selection.start, selection.end))
    offset = 0
    for segment in segments:
        segment_start = offset
        segment_end = offset + len(segment.text)
        offset = segment_end
        if segment.type is not SegmentType.IMAGE:
            continue

        meta = segment.meta or {}
        if start < segment_end and end > segment_start and meta.get("src"):
            return ImageInfo(
                src=meta.get("src", ""),
                alt=meta.get("alt", ""),
                title=meta.get("title"),
                start=segment_start,
                end=segment_end,
            )
    return None


def remove_image(
    text: str,
    image: ImageInfo,
    active_inline_actions: Sequence[str | MarkdownFeature] = (),
) -> ToolbarActionResult:
    """Delete an image from the text.

    One newline directly following the image is removed with it so that an
    image on its own line leaves no blank line behind.

    Args:
        text: Current text.
        image: Image located with `find_active_image`.
        active_inline_actions: Open inline markers, returned unchanged.

    Returns:
        ToolbarActionResult: Text without the image and a caret where it
            started.

    Examples:
        image = find_active_image(highlight_markdown("![a](b)\\nnext"), Selection(1, 1))
        remove_image("![a](b)\\nnext", image).text  # "next"
    """
    start = max(0, min(image.start, len(text)))
    end = max(start, min(image.end, len(text)))
    if text[end : end + 1] == "\n":
        end += 1

    return ToolbarActionResult(
        f"{text[:start]}{text[end:]}",
        Selection(start, start),
        _to_active_actions(active_inline_actions),
    )
