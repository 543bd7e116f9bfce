from __future__ import annotations

import json
import textwrap
from pathlib import Path

from markdown_editor.cli import cli


def _write_pyproject(base: Path, body: str) -> Path:
    path = base / "pyproject.toml"
    path.write_text(textwrap.dedent(body).lstrip(), encoding="utf-8")
    return path


def _json(result) -> object:
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)


def test_cli_parses_document(cli_runner, write_markdown):
    write_markdown("# Title\n\nSome **bold** text")

    data = _json(cli_runner.invoke(cli, ["parse", "doc.md"]))

    assert data == [
        {"type": "heading", "level": 1, "children": [{"type": "text", "content": "Title"}]},
        {"type": "spacer"},
        {
            "type": "paragraph",
            "children": [
                {"type": "text", "content": "Some "},
                {"type": "bold", "children": [{"type": "text", "content": "bold"}]},
                {"type": "text", "content": " text"},
            ],
        },
    ]


def test_cli_parses_inline(cli_runner, write_markdown):
    write_markdown("# not a *heading*")

    data = _json(cli_runner.invoke(cli, ["parse", "doc.md", "--inline"]))

    assert data == [
        {"type": "text", "content": "# not a "},
        {"type": "italic", "children": [{"type": "text", "content": "heading"}]},
    ]


def test_cli_feature_option_limits_syntax(cli_runner, write_markdown):
    write_markdown("# Title **bold**")

    data = _json(cli_runner.invoke(cli, ["parse", "doc.md", "--feature", "bold"]))

    assert data[0]["type"] == "paragraph"
    assert data[0]["children"][1]["type"] == "bold"


def test_cli_rejects_unknown_feature(cli_runner, write_markdown):
    write_markdown("text")

    result = cli_runner.invoke(cli, ["parse", "doc.md", "--feature", "sparkles"])

    assert result.exit_code == 2
    assert "sparkles" in result.output


def test_cli_highlights_document(cli_runner, write_markdown):
    write_markdown("# **Hi**\nok")

    data = _json(cli_runner.invoke(cli, ["highlight", "doc.md"]))

    meta = {"line_context": "heading", "heading_level": "1"}
    assert data == [
        {"text": "# ", "type": "delimiter", "meta": meta},
        {"text": "**", "type": "delimiter", "meta": meta},
        {"text": "Hi", "type": "bold", "meta": meta},
        {"text": "**", "type": "delimiter", "meta": meta},
        {"text": "\n", "type": "heading", "meta": meta},
        {"text": "ok", "type": "text"},
    ]


def test_cli_uses_config_features(cli_runner, write_markdown, tmp_path):
    _write_pyproject(
        tmp_path,
        """
        [tool.markdown-editor]
        features = ["bold"]
        """,
    )
    write_markdown("# Title")

    data = _json(cli_runner.invoke(cli, ["parse", "doc.md"]))

    assert data == [{"type": "paragraph", "children": [{"type": "text", "content": "# Title"}]}]


def test_cli_feature_option_overrides_config(cli_runner, write_markdown, tmp_path):
    _write_pyproject(
        tmp_path,
        """
        [tool.markdown-editor]
        features = ["bold"]
        """,
    )
    write_markdown("# Title")

    data = _json(cli_runner.invoke(cli, ["parse", "doc.md", "--feature", "heading"]))

    assert data[0]["type"] == "heading"


def test_cli_json_indent_from_config(cli_runner, write_markdown, tmp_path):
    _write_pyproject(
        tmp_path,
        """
        [tool.markdown-editor]
        json-indent = 0
        """,
    )
    write_markdown("x")

    result = cli_runner.invoke(cli, ["highlight", "doc.md"])

    assert result.exit_code == 0
    assert result.stdout == '[\n{\n"text": "x",\n"type": "text"\n}\n]\n'


def test_cli_reports_invalid_config(cli_runner, write_markdown, tmp_path):
    _write_pyproject(
        tmp_path,
        """
        [tool.markdown-editor]
        features = ["sparkles"]
        """,
    )
    write_markdown("x")

    result = cli_runner.invoke(cli, ["parse", "doc.md"])

    assert result.exit_code == 2
    assert "unknown feature" in result.output


def test_cli_apply_prints_result_without_writing(cli_runner, write_markdown):
    target = write_markdown("hello world")

    data = _json(cli_runner.invoke(cli, ["apply", "bold", "doc.md", "--start", "6", "--end", "11"]))

    assert data == {
        "text": "hello **world**",
        "selection": {"start": 8, "end": 13},
        "active_inline_actions": [],
    }
    assert target.read_text(encoding="utf-8") == "hello world"


def test_cli_apply_writes_result(cli_runner, write_markdown):
    target = write_markdown("a\r\nb", dedent=False)

    result = cli_runner.invoke(
        cli, ["apply", "bold", "doc.md", "--start", "0", "--end", "1", "--write"]
    )

    assert result.exit_code == 0
    assert target.read_bytes() == b"**a**\r\nb"


def test_cli_apply_with_active_marker(cli_runner, write_markdown):
    write_markdown("**hi")

    data = _json(
        cli_runner.invoke(cli, ["apply", "bold", "doc.md", "--start", "4", "--active", "bold"])
    )

    assert data["text"] == "**hi**"
    assert data["active_inline_actions"] == []


def test_cli_apply_block_action(cli_runner, write_markdown):
    write_markdown("one\ntwo")

    data = _json(cli_runner.invoke(cli, ["apply", "heading2", "doc.md", "--start", "5"]))

    assert data["text"] == "one\n## two"
    assert data["selection"] == {"start": 8, "end": 8}


def test_cli_apply_rejects_unknown_action(cli_runner, write_markdown):
    write_markdown("text")

    result = cli_runner.invoke(cli, ["apply", "underline", "doc.md"])

    assert result.exit_code == 2


def test_cli_image_reports_selected_image(cli_runner, write_markdown):
    write_markdown("see ![logo](logo.png)")

    data = _json(cli_runner.invoke(cli, ["image", "doc.md", "--start", "6"]))

    assert data == {"src": "logo.png", "alt": "logo", "start": 4, "end": 21}


def test_cli_image_reports_null_without_image(cli_runner, write_markdown):
    write_markdown("no images here")

    assert _json(cli_runner.invoke(cli, ["image", "doc.md", "--start", "3"])) is None


def test_cli_image_delete(cli_runner, write_markdown):
    target = write_markdown("![a](b.png)\nnext")

    data = _json(cli_runner.invoke(cli, ["image", "doc.md", "--start", "1", "--delete"]))

    assert data["text"] == "next"
    assert target.read_text(encoding="utf-8") == "next"


def test_cli_image_delete_without_image_fails(cli_runner, write_markdown):
    target = write_markdown("plain")

    result = cli_runner.invoke(cli, ["image", "doc.md", "--delete"])

    assert result.exit_code == 1
    assert "No image at the given selection" in result.output
    assert target.read_text(encoding="utf-8") == "plain"


def test_cli_missing_file(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    result = cli_runner.invoke(cli, ["parse", "missing.md"])

    assert result.exit_code == 2
    assert "does not exist" in result.output
