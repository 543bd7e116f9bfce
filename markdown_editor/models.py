"""Data models for markdown-editor."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum, auto
from typing import ClassVar, Union


class MarkdownFeature(str, Enum):
    """Markdown syntax categories and toolbar actions.

    Feature lists gate what the parser and highlighter recognize; the same
    names identify toolbar actions.
    """

    BOLD = "bold"
    ITALIC = "italic"
    STRIKETHROUGH = "strikethrough"
    CODE = "code"
    CODE_BLOCK = "codeBlock"
    HEADING = "heading"
    HEADING1 = "heading1"
    HEADING2 = "heading2"
    HEADING3 = "heading3"
    HEADING4 = "heading4"
    HEADING5 = "heading5"
    HEADING6 = "heading6"
    QUOTE = "quote"
    UNORDERED_LIST = "unorderedList"
    ORDERED_LIST = "orderedList"
    DIVIDER = "divider"
    IMAGE = "image"


ToolbarAction = MarkdownFeature


class SegmentType(str, Enum):
    """Semantic type of a highlight segment."""

    TEXT = "text"
    DELIMITER = "delimiter"
    HEADING = "heading"
    BOLD = "bold"
    ITALIC = "italic"
    STRIKETHROUGH = "strikethrough"
    CODE = "code"
    CODE_BLOCK = "codeBlock"
    LINK = "link"
    LINK_URL = "linkUrl"
    IMAGE = "image"
    QUOTE = "quote"
    QUOTE_MARKER = "quoteMarker"
    LIST_MARKER = "listMarker"
    HORIZONTAL_RULE = "horizontalRule"


class FragmentKind(Enum):
    """Kinds of raw fragments produced by the inline highlighter.

    Attributes:
        TEXT: Plain text, styled from the inherited inline context.
        DELIMITER: Markdown syntax kept visible in the editor.
        CODE: Inline code content.
        LINK_LABEL: Text inside a link label.
        LINK_URL: Link target.
        IMAGE: A complete image expression.
    """

    TEXT = auto()
    DELIMITER = auto()
    CODE = auto()
    LINK_LABEL = auto()
    LINK_URL = auto()
    IMAGE = auto()


class ParserState(Enum):
    """Highlighter states while walking Markdown lines.

    Attributes:
        NORMAL: Default state for regular text.
        IN_FENCED_CODE: Inside a fenced code block.
    """

    NORMAL = auto()
    IN_FENCED_CODE = auto()


@dataclass
class ParserContext:
    """Line state carried by the highlighter from one line to the next.

    Attributes:
        state: Current parser state.
        previous_line_meta: Metadata of the previous line, used to style the
            newline that ends it. None unless the line was a heading.
    """

    state: ParserState = ParserState.NORMAL
    previous_line_meta: dict[str, str] | None = None


@dataclass(frozen=True)
class InlineContext:
    """Inline formatting inherited by nested content (bold inside italic, ...)."""

    bold: bool = False
    italic: bool = False
    strikethrough: bool = False

    def enter(self, feature: MarkdownFeature) -> InlineContext:
        """Return a context with the emphasis named by `feature` switched on."""
        if feature is MarkdownFeature.BOLD:
            return InlineContext(True, self.italic, self.strikethrough)
        if feature is MarkdownFeature.ITALIC:
            return InlineContext(self.bold, True, self.strikethrough)
        if feature is MarkdownFeature.STRIKETHROUGH:
            return InlineContext(self.bold, self.italic, True)
        return self


PLAIN_CONTEXT = InlineContext()


def _serialize(value: object) -> object:
    if isinstance(value, Node):
        return value.to_dict()
    if isinstance(value, list):
        return [_serialize(item) for item in value]
    return value


class Node:
    """Base class for AST nodes.

    Subclasses are frozen dataclasses; `type` is the node tag used when
    serializing.
    """

    type: ClassVar[str]

    def to_dict(self) -> dict[str, object]:
        """Serialize the node (and its children) into JSON-compatible data."""
        data: dict[str, object] = {"type": self.type}
        for node_field in fields(self):  # type: ignore[arg-type]
            value = getattr(self, node_field.name)
            if value is None:
                continue
            data[node_field.name] = _serialize(value)
        return data


# Inline nodes


@dataclass(frozen=True)
class Text(Node):
    content: str
    type: ClassVar[str] = "text"


@dataclass(frozen=True)
class Bold(Node):
    children: list[Inline] = field(default_factory=list)
    type: ClassVar[str] = "bold"


@dataclass(frozen=True)
class Italic(Node):
    children: list[Inline] = field(default_factory=list)
    type: ClassVar[str] = "italic"


@dataclass(frozen=True)
class Strikethrough(Node):
    children: list[Inline] = field(default_factory=list)
    type: ClassVar[str] = "strikethrough"


@dataclass(frozen=True)
class Code(Node):
    content: str
    type: ClassVar[str] = "code"


@dataclass(frozen=True)
class Link(Node):
    href: str
    children: list[Inline] = field(default_factory=list)
    type: ClassVar[str] = "link"


@dataclass(frozen=True)
class Image(Node):
    src: str
    alt: str
    title: str | None = None
    type: ClassVar[str] = "image"


Inline = Union[Text, Bold, Italic, Strikethrough, Code, Link, Image]


# Block nodes


@dataclass(frozen=True)
class Paragraph(Node):
    children: list[Inline] = field(default_factory=list)
    type: ClassVar[str] = "paragraph"


@dataclass(frozen=True)
class Heading(Node):
    level: int
    children: list[Inline] = field(default_factory=list)
    type: ClassVar[str] = "heading"


@dataclass(frozen=True)
class CodeBlock(Node):
    content: str
    language: str | None = None
    type: ClassVar[str] = "codeBlock"


@dataclass(frozen=True)
class Blockquote(Node):
    children: list[Inline] = field(default_factory=list)
    type: ClassVar[str] = "blockquote"


@dataclass(frozen=True)
class HorizontalRule(Node):
    type: ClassVar[str] = "horizontalRule"


@dataclass(frozen=True)
class Spacer(Node):
    type: ClassVar[str] = "spacer"


@dataclass(frozen=True)
class ListBlock(Node):
    ordered: bool
    items: list[list[Inline]] = field(default_factory=list)
    type: ClassVar[str] = "list"


Block = Union[Paragraph, Heading, CodeBlock, Blockquote, HorizontalRule, Spacer, ListBlock]


@dataclass(frozen=True)
class InlineFragment:
    """Intermediate highlight fragment produced by the inline tokenizer.

    Attributes:
        text: Raw characters covered by the fragment.
        kind: Semantic kind, later mapped to a `SegmentType`.
        context: Inline formatting inherited at this position.
        meta: Image metadata, if any.
    """

    text: str
    kind: FragmentKind
    context: InlineContext = PLAIN_CONTEXT
    meta: dict[str, str] | None = None


@dataclass(frozen=True)
class HighlightSegment:
    """Styled run of the original text.

    Attributes:
        text: Characters of the run, verbatim from the input.
        type: Semantic segment type.
        meta: Line context, heading level, or image details when relevant.
    """

    text: str
    type: SegmentType
    meta: dict[str, str] | None = None

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {"text": self.text, "type": self.type.value}
        if self.meta is not None:
            data["meta"] = dict(self.meta)
        return data


@dataclass(frozen=True)
class Selection:
    """Half-open character range; a caret when `start == end`."""

    start: int
    end: int

    @property
    def is_caret(self) -> bool:
        return self.start == self.end

    def to_dict(self) -> dict[str, int]:
        return {"start": self.start, "end": self.end}


@dataclass(frozen=True)
class ToolbarActionResult:
    """Outcome of applying a toolbar action.

    Attributes:
        text: Updated Markdown text.
        selection: Selection to restore in the editor.
        active_inline_actions: Inline markers left open at the caret.
    """

    text: str
    selection: Selection
    active_inline_actions: list[MarkdownFeature] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {
            "text": self.text,
            "selection": self.selection.to_dict(),
            "active_inline_actions": [action.value for action in self.active_inline_actions],
        }


@dataclass(frozen=True)
class ImageInfo:
    """Image found under the current selection.

    Attributes:
        src: Image source, with escapes preserved.
        alt: Alternative text.
        title: Optional title.
        start: Offset where the image Markdown starts.
        end: Offset where the image Markdown ends (exclusive).
    """

    src: str
    alt: str
    title: str | None
    start: int
    end: int

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {
            "src": self.src,
            "alt": self.alt,
            "start": self.start,
            "end": self.end,
        }
        if self.title is not None:
            data["title"] = self.title
        return data
