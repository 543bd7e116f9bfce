"""Constants used across the markdown-editor package."""

from __future__ import annotations

import re

from .models import MarkdownFeature

# Block patterns used by the AST parser
LINE_BREAK_PATTERN = re.compile(r"\r\n?|\n")
FENCE_OPEN_PATTERN = re.compile(r"^```([\w-]+)?\s*$")
FENCE_CLOSE_PATTERN = re.compile(r"^```\s*$")
HEADING_PATTERN = re.compile(r"^(#{1,6})\s+(.+)$")
BLOCKQUOTE_PATTERN = re.compile(r"^>\s?(.*)$")
HORIZONTAL_RULE_PATTERN = re.compile(r"^ {0,3}([-*_])[ \t]*(?:\1[ \t]*){2,}$")
UNORDERED_LIST_PATTERN = re.compile(r"^\s*[-*+]\s+(.*)$")
ORDERED_LIST_PATTERN = re.compile(r"^\s*\d+\.\s+(.*)$")

# Marker patterns used by the highlighter; content is whatever follows the match
HEADING_MARKER_PATTERN = re.compile(r"^(#{1,6})\s+")
BLOCKQUOTE_MARKER_PATTERN = re.compile(r"^>\s?")
UNORDERED_LIST_MARKER_PATTERN = re.compile(r"^\s*[-*+]\s+")
ORDERED_LIST_MARKER_PATTERN = re.compile(r"^\s*\d+\.\s+")
CODE_FENCE = "```"

# Prefix patterns used by toolbar line transforms
HEADING_PREFIX_PATTERN = re.compile(r"^#{1,6}\s+")
QUOTE_PREFIX_PATTERN = re.compile(r"^>\s?")
UNORDERED_LIST_PREFIX_PATTERN = re.compile(r"^[-*+]\s+")
ORDERED_LIST_PREFIX_PATTERN = re.compile(r"^\d+\.\s+")

ESCAPED_MARKDOWN_PATTERN = re.compile(r"\\([\\`*_~\[\]()#+.!>{}-])")
IMAGE_TITLE_PATTERN = re.compile(r"^(.+?)\s+(?:\"([^\"]*)\"|'([^']*)')$")

# Emphasis markers in the order they are attempted; two-character markers first
EMPHASIS_MARKERS: tuple[tuple[MarkdownFeature, tuple[str, ...]], ...] = (
    (MarkdownFeature.BOLD, ("**", "__")),
    (MarkdownFeature.STRIKETHROUGH, ("~~",)),
    (MarkdownFeature.ITALIC, ("*", "_")),
)

HEADING_FEATURES = (
    MarkdownFeature.HEADING,
    MarkdownFeature.HEADING1,
    MarkdownFeature.HEADING2,
    MarkdownFeature.HEADING3,
    MarkdownFeature.HEADING4,
    MarkdownFeature.HEADING5,
    MarkdownFeature.HEADING6,
)

INLINE_ACTIONS = (
    MarkdownFeature.BOLD,
    MarkdownFeature.ITALIC,
    MarkdownFeature.STRIKETHROUGH,
    MarkdownFeature.CODE,
)

# Toolbar markers: (open, close)
INLINE_ACTION_MARKERS = {
    MarkdownFeature.BOLD: ("**", "**"),
    MarkdownFeature.ITALIC: ("_", "_"),
    MarkdownFeature.STRIKETHROUGH: ("~~", "~~"),
    MarkdownFeature.CODE: ("`", "`"),
}

IMAGE_TEMPLATE = "![](url)"
IMAGE_TEMPLATE_CURSOR_OFFSET = 2
DIVIDER_LINE = "---"

DEFAULT_FEATURES: tuple[MarkdownFeature, ...] = (
    MarkdownFeature.BOLD,
    MarkdownFeature.ITALIC,
    MarkdownFeature.STRIKETHROUGH,
    MarkdownFeature.CODE,
    MarkdownFeature.CODE_BLOCK,
    MarkdownFeature.HEADING1,
    MarkdownFeature.HEADING2,
    MarkdownFeature.HEADING3,
    MarkdownFeature.HEADING4,
    MarkdownFeature.HEADING5,
    MarkdownFeature.HEADING6,
    MarkdownFeature.QUOTE,
    MarkdownFeature.UNORDERED_LIST,
    MarkdownFeature.ORDERED_LIST,
    MarkdownFeature.DIVIDER,
    MarkdownFeature.IMAGE,
)

# Highlight metadata keys and values
META_LINE_CONTEXT = "line_context"
META_HEADING_LEVEL = "heading_level"
LINE_CONTEXT_HEADING = "heading"
LINE_CONTEXT_QUOTE = "quote"
LINE_CONTEXT_CODE_FENCE = "codeFence"

# Document limits
MARKDOWN_EXTENSIONS = (".md", ".markdown", ".mdown", ".mkd", ".mkdn", ".mdtext", ".txt")
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024
DEFAULT_JSON_INDENT = 2
