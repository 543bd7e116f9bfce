"""Inline tokenizer shared by the parser and the highlighter.

A single left-to-right scan recognizes escapes, inline code, emphasis,
images and links. What gets produced for each construct is delegated to an
emitter: `AstEmitter` builds inline nodes, `HighlightEmitter` builds flat
fragments that keep every delimiter so the original text can be rebuilt.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, TypeVar

from .constants import EMPHASIS_MARKERS
from .features import FeatureSet, is_feature_enabled
from .models import (
    PLAIN_CONTEXT,
    Bold,
    Code,
    FragmentKind,
    Image,
    Inline,
    InlineContext,
    InlineFragment,
    Italic,
    Link,
    MarkdownFeature,
    Strikethrough,
    Text,
)
from .syntax import find_unescaped_token, parse_image_source_and_title, unescape_markdown

T = TypeVar("T")


class InlineEmitter(Protocol[T]):
    """Builds output items for the constructs found by `tokenize_inline`."""

    def text(self, value: str, context: InlineContext) -> list[T]: ...

    def escape(self, char: str, context: InlineContext) -> list[T]: ...

    def code(self, content: str, context: InlineContext) -> list[T]: ...

    def emphasis(
        self, feature: MarkdownFeature, marker: str, children: list[T], context: InlineContext
    ) -> list[T]: ...

    def image(self, raw: str, alt: str, target: str, context: InlineContext) -> list[T]: ...

    def link(self, children: list[T], href: str, context: InlineContext) -> list[T]: ...

    def merge(self, items: list[T]) -> list[T]: ...


def _match_emphasis(
    content: str, cursor: int, features: FeatureSet | None
) -> tuple[MarkdownFeature, str, int] | None:
    for feature, markers in EMPHASIS_MARKERS:
        if not is_feature_enabled(features, feature):
            continue
        for marker in markers:
            if not content.startswith(marker, cursor):
                continue
            closing = find_unescaped_token(content, marker, cursor + len(marker))
            if closing != -1:
                return feature, marker, closing
    return None


def _match_brackets(content: str, open_index: int) -> tuple[int, int] | None:
    """Match ``[label](target)`` starting at the ``[`` at `open_index`.

    Returns:
        tuple[int, int] | None: Index of the closing ``]`` and of the closing
            ``)``, or None when the pattern is incomplete.
    """
    label_close = find_unescaped_token(content, "]", open_index + 1)
    if label_close == -1 or content[label_close + 1 : label_close + 2] != "(":
        return None
    target_close = find_unescaped_token(content, ")", label_close + 2)
    if target_close == -1:
        return None
    return label_close, target_close


def _scan_construct(
    content: str,
    cursor: int,
    emitter: InlineEmitter[T],
    features: FeatureSet | None,
    context: InlineContext,
) -> tuple[list[T] | None, int]:
    """Try every construct at `cursor` in priority order.

    Returns:
        tuple[list[T] | None, int]: Emitted items and the index after the
            construct, or None and the end of the literal run to keep.
    """
    char = content[cursor]

    if char == "\\" and cursor + 1 < len(content):
        return emitter.escape(content[cursor + 1], context), cursor + 2

    if char == "`" and is_feature_enabled(features, MarkdownFeature.CODE):
        closing = find_unescaped_token(content, "`", cursor + 1)
        if closing != -1:
            return emitter.code(content[cursor + 1 : closing], context), closing + 1

    emphasis = _match_emphasis(content, cursor, features)
    if emphasis is not None:
        feature, marker, closing = emphasis
        inner = content[cursor + len(marker) : closing]
        children = tokenize_inline(inner, emitter, features, context.enter(feature))
        return emitter.emphasis(feature, marker, children, context), closing + len(marker)

    if content.startswith("![", cursor):
        brackets = _match_brackets(content, cursor + 1)
        if not is_feature_enabled(features, MarkdownFeature.IMAGE):
            # Keep "[alt](src)" away from the link rule
            return None, brackets[1] + 1 if brackets is not None else cursor + 1
        if brackets is not None:
            alt_close, target_close = brackets
            raw = content[cursor : target_close + 1]
            alt = content[cursor + 2 : alt_close]
            target = content[alt_close + 2 : target_close]
            return emitter.image(raw, alt, target, context), target_close + 1

    if char == "[":
        brackets = _match_brackets(content, cursor)
        if brackets is not None:
            label_close, target_close = brackets
            label = content[cursor + 1 : label_close]
            children = tokenize_inline(label, emitter, features, context)
            href = content[label_close + 2 : target_close]
            return emitter.link(children, href, context), target_close + 1

    return None, cursor + 1


def tokenize_inline(
    content: str,
    emitter: InlineEmitter[T],
    features: FeatureSet | None = None,
    context: InlineContext = PLAIN_CONTEXT,
) -> list[T]:
    """Scan inline Markdown and return the emitter's merged items.

    Constructs are attempted in a fixed order at each position. A construct
    whose closer is missing, or whose feature is disabled, degrades to a
    literal character and the scan resumes at the next one, so any input
    terminates.

    Args:
        content: Inline text to scan.
        emitter: Strategy building the output items.
        features: Enabled features, or None for all.
        context: Emphasis inherited from enclosing constructs.

    Returns:
        list[T]: Items produced by the emitter, after its merge step.
    """
    items: list[T] = []
    cursor = literal_start = 0

    while cursor < len(content):
        emitted, next_cursor = _scan_construct(content, cursor, emitter, features, context)
        if emitted is None:
            cursor = next_cursor
            continue
        if literal_start < cursor:
            items.extend(emitter.text(content[literal_start:cursor], context))
        items.extend(emitted)
        cursor = literal_start = next_cursor

    if literal_start < len(content):
        items.extend(emitter.text(content[literal_start:], context))

    return emitter.merge(items)


_EMPHASIS_NODES = {
    MarkdownFeature.BOLD: Bold,
    MarkdownFeature.ITALIC: Italic,
    MarkdownFeature.STRIKETHROUGH: Strikethrough,
}


class AstEmitter:
    """Emit inline AST nodes; escapes are resolved and delimiters dropped."""

    def text(self, value: str, context: InlineContext) -> list[Inline]:
        return [Text(value)]

    def escape(self, char: str, context: InlineContext) -> list[Inline]:
        return [Text(char)]

    def code(self, content: str, context: InlineContext) -> list[Inline]:
        return [Code(unescape_markdown(content))]

    def emphasis(
        self,
        feature: MarkdownFeature,
        marker: str,
        children: list[Inline],
        context: InlineContext,
    ) -> list[Inline]:
        return [_EMPHASIS_NODES[feature](children)]

    def image(self, raw: str, alt: str, target: str, context: InlineContext) -> list[Inline]:
        src, title = parse_image_source_and_title(target)
        return [Image(src=src, alt=unescape_markdown(alt), title=title)]

    def link(self, children: list[Inline], href: str, context: InlineContext) -> list[Inline]:
        return [Link(href=unescape_markdown(href), children=children)]

    def merge(self, items: Sequence[Inline]) -> list[Inline]:
        merged: list[Inline] = []
        for node in items:
            previous = merged[-1] if merged else None
            if isinstance(node, Text) and isinstance(previous, Text):
                merged[-1] = Text(previous.content + node.content)
            else:
                merged.append(node)
        return merged


def _delimiter(text: str, context: InlineContext = PLAIN_CONTEXT) -> InlineFragment:
    return InlineFragment(text, FragmentKind.DELIMITER, context)


_UNMERGEABLE_KINDS = (FragmentKind.DELIMITER, FragmentKind.IMAGE)


class HighlightEmitter:
    """Emit flat fragments covering every input character exactly once."""

    def text(self, value: str, context: InlineContext) -> list[InlineFragment]:
        return [InlineFragment(value, FragmentKind.TEXT, context)]

    def escape(self, char: str, context: InlineContext) -> list[InlineFragment]:
        # The backslash stays visible so offsets match the input
        return [_delimiter("\\"), InlineFragment(char, FragmentKind.TEXT, context)]

    def code(self, content: str, context: InlineContext) -> list[InlineFragment]:
        return [_delimiter("`"), InlineFragment(content, FragmentKind.CODE), _delimiter("`")]

    def emphasis(
        self,
        feature: MarkdownFeature,
        marker: str,
        children: list[InlineFragment],
        context: InlineContext,
    ) -> list[InlineFragment]:
        return [_delimiter(marker), *children, _delimiter(marker)]

    def image(
        self, raw: str, alt: str, target: str, context: InlineContext
    ) -> list[InlineFragment]:
        src, title = parse_image_source_and_title(target, unescape_src=False)
        meta = {"src": src, "alt": alt}
        if title:
            meta["title"] = title
        return [InlineFragment(raw, FragmentKind.IMAGE, context, meta)]

    def link(
        self, children: list[InlineFragment], href: str, context: InlineContext
    ) -> list[InlineFragment]:
        label = [
            InlineFragment(child.text, FragmentKind.LINK_LABEL, child.context, child.meta)
            if child.kind is FragmentKind.TEXT
            else child
            for child in children
        ]
        return [
            _delimiter("[", context),
            *label,
            _delimiter("](", context),
            InlineFragment(href, FragmentKind.LINK_URL, context),
            _delimiter(")", context),
        ]

    def merge(self, items: Sequence[InlineFragment]) -> list[InlineFragment]:
        merged: list[InlineFragment] = []
        for fragment in items:
            if not fragment.text:
                continue
            previous = merged[-1] if merged else None
            if (
                previous is not None
                and fragment.kind not in _UNMERGEABLE_KINDS
                and previous.kind is fragment.kind
                and previous.context == fragment.context
            ):
                merged[-1] = InlineFragment(
                    previous.text + fragment.text, fragment.kind, fragment.context
                )
            else:
                merged.append(fragment)
        return merged
