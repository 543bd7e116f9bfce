"""Markdown parsing into block and inline nodes."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from .constants import (
    BLOCKQUOTE_PATTERN,
    FENCE_CLOSE_PATTERN,
    FENCE_OPEN_PATTERN,
    HEADING_PATTERN,
    HORIZONTAL_RULE_PATTERN,
    LINE_BREAK_PATTERN,
    ORDERED_LIST_PATTERN,
    UNORDERED_LIST_PATTERN,
)
from .exceptions import DocumentError
from .features import FeatureSet, is_feature_enabled, is_heading_level_enabled, resolve_features
from .filesystem import read_document
from .inline import AstEmitter, tokenize_inline
from .models import (
    Block,
    Blockquote,
    CodeBlock,
    Heading,
    HorizontalRule,
    Inline,
    ListBlock,
    MarkdownFeature,
    Paragraph,
    Spacer,
)

_AST_EMITTER = AstEmitter()

ScanResult = tuple[Block, int]


def _is_blank(line: str) -> bool:
    return not line.strip()


def _find_closing_fence(lines: list[str], start: int) -> int:
    """Return the index of the first bare fence line at or after `start`, or -1."""
    for index in range(start, len(lines)):
        if FENCE_CLOSE_PATTERN.match(lines[index]):
            return index
    return -1


def _match_heading(line: str, features: FeatureSet | None):
    heading_match = HEADING_PATTERN.match(line)
    if heading_match and is_heading_level_enabled(features, len(heading_match.group(1))):
        return heading_match
    return None


def _is_horizontal_rule(line: str, features: FeatureSet | None) -> bool:
    return is_feature_enabled(features, MarkdownFeature.DIVIDER) and bool(
        HORIZONTAL_RULE_PATTERN.match(line)
    )


def _is_quote(line: str, features: FeatureSet | None) -> bool:
    return is_feature_enabled(features, MarkdownFeature.QUOTE) and bool(
        BLOCKQUOTE_PATTERN.match(line)
    )


def _list_pattern(line: str, features: FeatureSet | None):
    """Return the list item pattern `line` starts, or None when it is not a list item."""
    if is_feature_enabled(features, MarkdownFeature.UNORDERED_LIST) and UNORDERED_LIST_PATTERN.match(
        line
    ):
        return UNORDERED_LIST_PATTERN
    if is_feature_enabled(features, MarkdownFeature.ORDERED_LIST) and ORDERED_LIST_PATTERN.match(
        line
    ):
        return ORDERED_LIST_PATTERN
    return None


def is_block_start(lines: list[str], index: int, features: FeatureSet | None = None) -> bool:
    """Check whether the line at `index` opens a block other than a paragraph.

    Paragraph collection stops at such lines. Feature gates are applied the
    same way as when the block itself is scanned; an opening fence only counts
    when a closing fence follows it.

    Args:
        lines: Document lines without line terminators.
        index: Index of the line to inspect.
        features: Enabled features, or None for all.

    Returns:
        bool: True when the line starts a heading, rule, quote, list or
            closed fenced code block.
    """
    line = lines[index]
    if _is_blank(line):
        return False
    if _match_heading(line, features):
        return True
    if _is_horizontal_rule(line, features) or _is_quote(line, features):
        return True
    if _list_pattern(line, features) is not None:
        return True
    if is_feature_enabled(features, MarkdownFeature.CODE_BLOCK) and FENCE_OPEN_PATTERN.match(line):
        return _find_closing_fence(lines, index + 1) != -1
    return False


def _scan_code_block(
    lines: list[str], cursor: int, features: FeatureSet | None
) -> ScanResult | None:
    if not is_feature_enabled(features, MarkdownFeature.CODE_BLOCK):
        return None

    fence_match = FENCE_OPEN_PATTERN.match(lines[cursor])
    if not fence_match:
        return None

    closing = _find_closing_fence(lines, cursor + 1)
    if closing == -1:
        return None

    block = CodeBlock(content="\n".join(lines[cursor + 1 : closing]), language=fence_match.group(1))
    return block, closing + 1


def _scan_heading(lines: list[str], cursor: int, features: FeatureSet | None) -> ScanResult | None:
    heading_match = _match_heading(lines[cursor], features)
    if heading_match is None:
        return None

    children = tokenize_inline(heading_match.group(2), _AST_EMITTER, features)
    return Heading(level=len(heading_match.group(1)), children=children), cursor + 1


def _scan_horizontal_rule(
    lines: list[str], cursor: int, features: FeatureSet | None
) -> ScanResult | None:
    if not _is_horizontal_rule(lines[cursor], features):
        return None
    return HorizontalRule(), cursor + 1


def _scan_blockquote(
    lines: list[str], cursor: int, features: FeatureSet | None
) -> ScanResult | None:
    if not _is_quote(lines[cursor], features):
        return None

    quoted_lines: list[str] = []
    while cursor < len(lines):
        quote_match = BLOCKQUOTE_PATTERN.match(lines[cursor])
        if not quote_match:
            break
        quoted_lines.append(quote_match.group(1))
        cursor += 1

    children = tokenize_inline("\n".join(quoted_lines), _AST_EMITTER, features)
    return Blockquote(children=children), cursor


def _scan_list(lines: list[str], cursor: int, features: FeatureSet | None) -> ScanResult | None:
    item_pattern = _list_pattern(lines[cursor], features)
    if item_pattern is None:
        return None

    items: list[list[Inline]] = []
    while cursor < len(lines):
        item_match = item_pattern.match(lines[cursor])
        if not item_match:
            break
        items.append(tokenize_inline(item_match.group(1), _AST_EMITTER, features))
        cursor += 1

    return ListBlock(ordered=item_pattern is ORDERED_LIST_PATTERN, items=items), cursor


def _scan_paragraph(lines: list[str], cursor: int, features: FeatureSet | None) -> ScanResult:
    # The first line always belongs to the paragraph; no earlier rule claimed it
    paragraph_lines = [lines[cursor]]
    cursor += 1
    while cursor < len(lines):
        line = lines[cursor]
        if _is_blank(line) or is_block_start(lines, cursor, features):
            break
        paragraph_lines.append(line)
        cursor += 1

    children = tokenize_inline("\n".join(paragraph_lines), _AST_EMITTER, features)
    return Paragraph(children=children), cursor


# Priority order; a line no scanner claims starts a paragraph
_BLOCK_SCANNERS = (
    _scan_code_block,
    _scan_heading,
    _scan_horizontal_rule,
    _scan_blockquote,
    _scan_list,
)


def parse_markdown(
    text: str, features: Iterable[str | MarkdownFeature] | None = None
) -> list[Block]:
    """Parse Markdown text into a list of block nodes.

    Parsing is line-oriented: each line is tested against the block rules in
    priority order (blank line, fenced code, heading, horizontal rule,
    blockquote, list, paragraph) and the text of each block is handed to the
    inline tokenizer. Syntax that is disabled or malformed becomes paragraph
    text, so every input parses.

    Args:
        text: Markdown source. ``\\r\\n``, ``\\r`` and ``\\n`` all end a line.
        features: Enabled features, or None to enable everything.

    Returns:
        list[Block]: Block nodes in document order. Each blank line yields a
            `Spacer`, so an empty document parses to ``[Spacer()]``.

    Examples:
        parse_markdown("# Title\\n\\nSome **bold** text")
        parse_markdown("## Skipped", ["heading1"])  # [Paragraph(...)]
    """
    resolved = resolve_features(features)
    lines = LINE_BREAK_PATTERN.split(text)
    blocks: list[Block] = []
    cursor = 0

    while cursor < len(lines):
        line = lines[cursor]

        if _is_blank(line):
            blocks.append(Spacer())
            cursor += 1
            continue

        for scan in _BLOCK_SCANNERS:
            scanned = scan(lines, cursor, resolved)
            if scanned is not None:
                break
        else:
            scanned = _scan_paragraph(lines, cursor, resolved)

        block, cursor = scanned
        blocks.append(block)

    return blocks


def parse_markdown_inline(
    text: str, features: Iterable[str | MarkdownFeature] | None = None
) -> list[Inline]:
    """Parse inline Markdown (emphasis, code, links, images) into inline nodes.

    Args:
        text: Inline Markdown; line breaks are kept inside text nodes.
        features: Enabled features, or None to enable everything.

    Returns:
        list[Inline]: Inline nodes with adjacent text merged.

    Examples:
        parse_markdown_inline("hello **world**")  # [Text("hello "), Bold([Text("world")])]
        parse_markdown_inline("\\\\*not italic\\\\*")  # [Text("*not italic*")]
    """
    return tokenize_inline(text, _AST_EMITTER, resolve_features(features))


def parse_file(
    filepath: Path, features: Iterable[str | MarkdownFeature] | None = None
) -> list[Block]:
    """Read a Markdown document and parse it into block nodes.

    Args:
        filepath: Path to a UTF-8 Markdown document.
        features: Enabled features, or None to enable everything.

    Returns:
        list[Block]: Parsed blocks.

    Raises:
        DocumentError: If the file cannot be read, decoded, or exceeds the
            size limit.

    Examples:
        blocks = parse_file(Path("README.md"), ["bold", "heading"])
    """
    try:
        text = read_document(filepath)
    except UnicodeDecodeError as error:
        error_message = f"Invalid UTF-8 sequence in {filepath}: {error}"
        raise DocumentError(error_message) from error
    except OSError as error:
        raise DocumentError(str(error)) from error

    return parse_markdown(text, features)
