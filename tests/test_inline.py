from __future__ import annotations

from markdown_editor.inline import AstEmitter, HighlightEmitter, tokenize_inline
from markdown_editor.models import (
    Bold,
    FragmentKind,
    InlineContext,
    InlineFragment,
    Italic,
    MarkdownFeature,
    Text,
)


class CountingEmitter:
    """Records which constructs were recognized, by name."""

    def text(self, value, context):
        return [("text", value)]

    def escape(self, char, context):
        return [("escape", char)]

    def code(self, content, context):
        return [("code", content)]

    def emphasis(self, feature, marker, children, context):
        return [(feature.value, marker), *children]

    def image(self, raw, alt, target, context):
        return [("image", target)]

    def link(self, children, href, context):
        return [("link", href), *children]

    def merge(self, items):
        return list(items)


def test_custom_emitter_receives_every_construct():
    items = tokenize_inline("a \\* `c` **b** ![i](s) [l](h)", CountingEmitter())
    assert items == [
        ("text", "a "),
        ("escape", "*"),
        ("text", " "),
        ("code", "c"),
        ("text", " "),
        ("bold", "**"),
        ("text", "b"),
        ("text", " "),
        ("image", "s"),
        ("text", " "),
        ("link", "h"),
        ("text", "l"),
    ]


def test_literal_runs_are_emitted_once():
    assert tokenize_inline("plain *text", CountingEmitter()) == [("text", "plain *text")]


def test_trailing_backslash_is_literal():
    assert tokenize_inline("end\\", AstEmitter()) == [Text("end\\")]


def test_escaped_closer_does_not_close():
    assert tokenize_inline("*a\\*b*", AstEmitter()) == [Italic([Text("a*b")])]


def test_double_backslash_before_marker_does_not_escape():
    assert tokenize_inline("\\\\*a*", AstEmitter()) == [Text("\\"), Italic([Text("a")])]


def test_bold_tried_before_italic():
    assert tokenize_inline("**a**", AstEmitter()) == [Bold([Text("a")])]


def test_features_gate_emphasis():
    features = frozenset({MarkdownFeature.ITALIC.value})
    assert tokenize_inline("__a__", AstEmitter(), features) == [
        Italic([]),
        Text("a"),
        Italic([]),
    ]


def test_highlight_fragments_carry_context():
    fragments = tokenize_inline("~~a **b**~~", HighlightEmitter())
    strike = InlineContext(strikethrough=True)
    both = InlineContext(bold=True, strikethrough=True)
    assert fragments == [
        InlineFragment("~~", FragmentKind.DELIMITER),
        InlineFragment("a ", FragmentKind.TEXT, strike),
        InlineFragment("**", FragmentKind.DELIMITER),
        InlineFragment("b", FragmentKind.TEXT, both),
        InlineFragment("**", FragmentKind.DELIMITER),
        InlineFragment("~~", FragmentKind.DELIMITER),
    ]


def test_highlight_merge_keeps_adjacent_delimiters_apart():
    fragments = tokenize_inline("``", HighlightEmitter())
    assert fragments == [
        InlineFragment("`", FragmentKind.DELIMITER),
        InlineFragment("`", FragmentKind.DELIMITER),
    ]


def test_highlight_image_meta_omits_empty_title():
    fragments = tokenize_inline("![a](b '')", HighlightEmitter())
    assert fragments[0].meta == {"src": "b", "alt": "a"}


def test_disabled_image_skips_link_rule_in_highlight():
    fragments = tokenize_inline("![a](b)", HighlightEmitter(), frozenset({"bold"}))
    assert fragments == [InlineFragment("![a](b)", FragmentKind.TEXT)]


def test_inline_context_enter_returns_new_context():
    plain = InlineContext()
    bold = plain.enter(MarkdownFeature.BOLD)

    assert plain == InlineContext()
    assert bold == InlineContext(bold=True)
    assert bold.enter(MarkdownFeature.ITALIC) == InlineContext(bold=True, italic=True)
    assert bold.enter(MarkdownFeature.STRIKETHROUGH).strikethrough is True
    assert bold.enter(MarkdownFeature.CODE) is bold
