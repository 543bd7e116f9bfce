"""Syntax highlighting for live Markdown editing.

`highlight_markdown` turns raw text into flat `HighlightSegment` runs. Unlike
the parser, every delimiter stays visible: joining the segment texts gives
back the input exactly, so the segments can be rendered over an editable
surface without moving the cursor.
"""

from __future__ import annotations

from collections.abc import Iterable

from .constants import (
    BLOCKQUOTE_MARKER_PATTERN,
    CODE_FENCE,
    HEADING_MARKER_PATTERN,
    HORIZONTAL_RULE_PATTERN,
    LINE_CONTEXT_CODE_FENCE,
    LINE_CONTEXT_HEADING,
    LINE_CONTEXT_QUOTE,
    META_HEADING_LEVEL,
    META_LINE_CONTEXT,
    ORDERED_LIST_MARKER_PATTERN,
    UNORDERED_LIST_MARKER_PATTERN,
)
from .features import FeatureSet, is_feature_enabled, is_heading_level_enabled, resolve_features
from .inline import HighlightEmitter, tokenize_inline
from .models import (
    FragmentKind,
    HighlightSegment,
    InlineFragment,
    MarkdownFeature,
    ParserContext,
    ParserState,
    SegmentType,
)

_HIGHLIGHT_EMITTER = HighlightEmitter()

_FRAGMENT_SEGMENT_TYPES = {
    FragmentKind.DELIMITER: SegmentType.DELIMITER,
    FragmentKind.CODE: SegmentType.CODE,
    FragmentKind.LINK_LABEL: SegmentType.LINK,
    FragmentKind.LINK_URL: SegmentType.LINK_URL,
    FragmentKind.IMAGE: SegmentType.IMAGE,
}


def resolve_segment_type(fragment: InlineFragment, base_type: SegmentType) -> SegmentType:
    """Map an inline fragment to its public segment type.

    Structural kinds map directly. Plain text takes the strongest inherited
    emphasis (bold, then italic, then strikethrough) and otherwise the line's
    base type.

    Examples:
        resolve_segment_type(InlineFragment("x", FragmentKind.CODE), SegmentType.TEXT)  # CODE
    """
    segment_type = _FRAGMENT_SEGMENT_TYPES.get(fragment.kind)
    if segment_type is not None:
        return segment_type

    context = fragment.context
    if context.bold:
        return SegmentType.BOLD
    if context.italic:
        return SegmentType.ITALIC
    if context.strikethrough:
        return SegmentType.STRIKETHROUGH
    return base_type


def _append_segment(
    segments: list[HighlightSegment],
    text: str,
    segment_type: SegmentType,
    meta: dict[str, str] | None = None,
):
    if text:
        segments.append(HighlightSegment(text, segment_type, meta))


def _append_inline(
    segments: list[HighlightSegment],
    text: str,
    features: FeatureSet | None,
    base_type: SegmentType = SegmentType.TEXT,
    meta: dict[str, str] | None = None,
):
    """Tokenize `text` and append its fragments with line metadata merged in."""
    for fragment in tokenize_inline(text, _HIGHLIGHT_EMITTER, features):
        segment_meta = None
        if meta is not None or fragment.meta is not None:
            segment_meta = {**(meta or {}), **(fragment.meta or {})}
        _append_segment(
            segments, fragment.text, resolve_segment_type(fragment, base_type), segment_meta
        )


def _try_code_fence(
    ctx: ParserContext, segments: list[HighlightSegment], line: str, features: FeatureSet | None
) -> bool:
    """Emit a fence line as a delimiter and toggle the fenced-code state.

    Returns:
        bool: True when the line was a fence.
    """
    if not is_feature_enabled(features, MarkdownFeature.CODE_BLOCK):
        return False
    if not line.startswith(CODE_FENCE):
        return False

    _append_segment(
        segments, line, SegmentType.DELIMITER, {META_LINE_CONTEXT: LINE_CONTEXT_CODE_FENCE}
    )
    if ctx.state is ParserState.IN_FENCED_CODE:
        ctx.state = ParserState.NORMAL
    else:
        ctx.state = ParserState.IN_FENCED_CODE
    return True


def _try_fenced_content(
    ctx: ParserContext, segments: list[HighlightSegment], line: str
) -> bool:
    if ctx.state is not ParserState.IN_FENCED_CODE:
        return False

    _append_segment(segments, line, SegmentType.CODE_BLOCK)
    return True


def _try_heading(
    ctx: ParserContext, segments: list[HighlightSegment], line: str, features: FeatureSet | None
) -> bool:
    """Emit a heading line and remember its metadata for the trailing newline.

    The marker covers the hashes and all whitespace after them, so tabs and
    repeated spaces keep their exact width.
    """
    marker_match = HEADING_MARKER_PATTERN.match(line)
    if not marker_match:
        return False

    level = len(marker_match.group(1))
    if not is_heading_level_enabled(features, level):
        return False

    heading_meta = {META_LINE_CONTEXT: LINE_CONTEXT_HEADING, META_HEADING_LEVEL: str(level)}
    ctx.previous_line_meta = heading_meta
    _append_segment(segments, marker_match.group(0), SegmentType.DELIMITER, dict(heading_meta))
    _append_inline(
        segments, line[marker_match.end() :], features, SegmentType.HEADING, heading_meta
    )
    return True


def _try_horizontal_rule(
    segments: list[HighlightSegment], line: str, features: FeatureSet | None
) -> bool:
    if not is_feature_enabled(features, MarkdownFeature.DIVIDER):
        return False
    if not HORIZONTAL_RULE_PATTERN.match(line):
        return False

    _append_segment(segments, line, SegmentType.HORIZONTAL_RULE)
    return True


def _try_quote(segments: list[HighlightSegment], line: str, features: FeatureSet | None) -> bool:
    if not is_feature_enabled(features, MarkdownFeature.QUOTE):
        return False

    marker_match = BLOCKQUOTE_MARKER_PATTERN.match(line)
    if not marker_match:
        return False

    quote_meta = {META_LINE_CONTEXT: LINE_CONTEXT_QUOTE}
    _append_segment(segments, marker_match.group(0), SegmentType.QUOTE_MARKER, dict(quote_meta))
    _append_inline(segments, line[marker_match.end() :], features, SegmentType.QUOTE, quote_meta)
    return True


def _try_list_item(
    segments: list[HighlightSegment], line: str, features: FeatureSet | None
) -> bool:
    for feature, pattern in (
        (MarkdownFeature.UNORDERED_LIST, UNORDERED_LIST_MARKER_PATTERN),
        (MarkdownFeature.ORDERED_LIST, ORDERED_LIST_MARKER_PATTERN),
    ):
        if not is_feature_enabled(features, feature):
            continue
        marker_match = pattern.match(line)
        if marker_match:
            _append_segment(segments, marker_match.group(0), SegmentType.LIST_MARKER)
            _append_inline(segments, line[marker_match.end() :], features)
            return True
    return False


def _append_newline(ctx: ParserContext, segments: list[HighlightSegment]):
    """Emit the newline ending the previous line.

    After a heading the newline keeps the heading metadata so renderers size
    the line break like the heading.
    """
    previous_meta = ctx.previous_line_meta
    if previous_meta is not None and previous_meta.get(META_LINE_CONTEXT) == LINE_CONTEXT_HEADING:
        segments.append(HighlightSegment("\n", SegmentType.HEADING, dict(previous_meta)))
    else:
        segments.append(HighlightSegment("\n", SegmentType.TEXT))
    ctx.previous_line_meta = None


def highlight_markdown(
    text: str, features: Iterable[str | MarkdownFeature] | None = None
) -> list[HighlightSegment]:
    """Convert Markdown text into styled segments for live highlighting.

    Lines are split on ``\\n`` only; a ``\\r`` stays in the line content. Each
    line is classified (code fence, fenced content, heading, horizontal rule,
    quote, list item, plain text), its markers get their own segment types,
    and the remaining content goes through the inline tokenizer. Disabled
    syntax is highlighted as plain text.

    Args:
        text: Raw Markdown text.
        features: Enabled features, or None to enable everything.

    Returns:
        list[HighlightSegment]: Non-empty segments whose texts concatenate to
            `text` exactly.

    Examples:
        highlight_markdown("# Hello")
        # [HighlightSegment("# ", DELIMITER, {...}), HighlightSegment("Hello", HEADING, {...})]
        highlight_markdown("**bold**", ["italic"])  # no bold segment
    """
    resolved = resolve_features(features)
    segments: list[HighlightSegment] = []
    ctx = ParserContext()

    for line_number, line in enumerate(text.split("\n")):
        if line_number > 0:
            _append_newline(ctx, segments)

        if _try_code_fence(ctx, segments, line, resolved):
            continue

        if _try_fenced_content(ctx, segments, line):
            continue

        if _try_heading(ctx, segments, line, resolved):
            continue

        if _try_horizontal_rule(segments, line, resolved):
            continue

        if _try_quote(segments, line, resolved):
            continue

        if _try_list_item(segments, line, resolved):
            continue

        _append_inline(segments, line, resolved)

    return segments
