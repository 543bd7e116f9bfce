"""
markdown-editor: parsing, live highlighting, and toolbar edits for Markdown.

This package can be used both as a CLI tool and as a library.

CLI Usage:
    markdown-editor highlight notes.md
    markdown-editor apply bold notes.md --start 6 --end 11 --write

Library Usage:
    from markdown_editor import Selection, apply_toolbar_action, highlight_markdown

    result = apply_toolbar_action("bold", "hello world", Selection(6, 11))
    segments = highlight_markdown(result.text)
    assert "".join(segment.text for segment in segments) == result.text
"""

from .constants import DEFAULT_FEATURES
from .exceptions import DocumentError, MarkdownEditorError, UnknownActionError, UnknownFeatureError
from .features import (
    is_feature_enabled,
    is_heading_level_enabled,
    normalize_features,
    resolve_features,
)
from .highlight import highlight_markdown
from .models import (
    Block,
    Blockquote,
    Bold,
    Code,
    CodeBlock,
    Heading,
    HighlightSegment,
    HorizontalRule,
    Image,
    ImageInfo,
    Inline,
    Italic,
    Link,
    ListBlock,
    MarkdownFeature,
    Paragraph,
    SegmentType,
    Selection,
    Spacer,
    Strikethrough,
    Text,
    ToolbarAction,
    ToolbarActionResult,
)
from .parser import parse_file, parse_markdown, parse_markdown_inline
from .syntax import find_unescaped_token, is_escaped, parse_image_source_and_title, unescape_markdown
from .toolbar import apply_toolbar_action, clamp_selection, find_active_image, remove_image

__version__ = "0.1.0"

__all__ = [
    # Core functionality
    "parse_markdown",
    "parse_markdown_inline",
    "parse_file",
    "highlight_markdown",
    "apply_toolbar_action",
    "find_active_image",
    "remove_image",
    "clamp_selection",
    # Feature gating
    "DEFAULT_FEATURES",
    "MarkdownFeature",
    "ToolbarAction",
    "is_feature_enabled",
    "is_heading_level_enabled",
    "normalize_features",
    "resolve_features",
    # Syntax utilities
    "find_unescaped_token",
    "is_escaped",
    "parse_image_source_and_title",
    "unescape_markdown",
    # Data models
    "Block",
    "Blockquote",
    "Bold",
    "Code",
    "CodeBlock",
    "Heading",
    "HighlightSegment",
    "HorizontalRule",
    "Image",
    "ImageInfo",
    "Inline",
    "Italic",
    "Link",
    "ListBlock",
    "Paragraph",
    "SegmentType",
    "Selection",
    "Spacer",
    "Strikethrough",
    "Text",
    "ToolbarActionResult",
    # Exceptions
    "DocumentError",
    "MarkdownEditorError",
    "UnknownActionError",
    "UnknownFeatureError",
    # Version
    "__version__",
]
