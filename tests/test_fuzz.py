from __future__ import annotations

import os

import pytest
from markdown_editor.highlight import highlight_markdown
from markdown_editor.models import MarkdownFeature, Selection
from markdown_editor.parser import parse_markdown
from markdown_editor.toolbar import apply_toolbar_action

atheris = pytest.importorskip("atheris")

FEATURES = list(MarkdownFeature)


def test_highlight_and_parse_with_fuzzed_input():
    data = os.urandom(4096)
    provider = atheris.FuzzedDataProvider(data)
    checked = 0

    for _ in range(128):
        if provider.remaining_bytes() == 0:
            break
        text = provider.ConsumeUnicodeNoSurrogates(64)
        features = [feature for feature in FEATURES if provider.ConsumeBool()]

        segments = highlight_markdown(text, features)
        assert "".join(segment.text for segment in segments) == text
        assert parse_markdown(text, features)
        checked += 1

    assert checked  # ensure we exercised the loop


def test_toolbar_actions_with_fuzzed_input():
    data = os.urandom(4096)
    provider = atheris.FuzzedDataProvider(data)

    while provider.remaining_bytes() > 0:
        text = provider.ConsumeUnicodeNoSurrogates(32)
        action = FEATURES[provider.ConsumeIntInRange(0, len(FEATURES) - 1)]
        start = provider.ConsumeIntInRange(-4, 40)
        end = provider.ConsumeIntInRange(-4, 40)

        result = apply_toolbar_action(action, text, Selection(start, end))
        assert 0 <= result.selection.start <= result.selection.end <= len(result.text)
