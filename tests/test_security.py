from __future__ import annotations

import os
import stat
import time
from unittest import mock

import pytest

import markdown_editor.cli as cli_module
from markdown_editor.filesystem import MAX_FILE_SIZE_ENV_VAR


def _error_text(result) -> str:
    """Return combined output and exception text for assertions."""
    return f"{result.output}{result.exception}"


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="Symlink support is required")
def test_symlink_rejected(cli_runner, write_markdown, tmp_path):
    source = write_markdown("# Heading", filename="source.md")
    link = tmp_path / "alias.md"
    try:
        os.symlink(source, link, target_is_directory=False)
    except OSError as error:  # pragma: no cover - platform dependent
        pytest.skip(f"Unable to create symlink: {error}")

    result = cli_runner.invoke(cli_module.cli, ["parse", "alias.md"])
    assert result.exit_code != 0
    assert "Symlinked paths are refused" in result.output


def test_path_traversal_prevented(cli_runner, tmp_path, monkeypatch):
    (tmp_path / "outside.md").write_text("# Secret", encoding="utf-8")
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)

    result = cli_runner.invoke(cli_module.cli, ["parse", "../outside.md"])
    assert result.exit_code != 0
    assert "is not under the working directory" in result.output


def test_non_markdown_extension_rejected(cli_runner, write_markdown):
    write_markdown("# Heading", filename="notes.rst")

    result = cli_runner.invoke(cli_module.cli, ["parse", "notes.rst"])
    assert result.exit_code != 0
    assert "does not look like a Markdown document" in result.output


def test_file_size_limit_enforced(cli_runner, write_markdown, monkeypatch):
    write_markdown("# A heading long enough to exceed the limit")
    monkeypatch.setenv(MAX_FILE_SIZE_ENV_VAR, "16")

    result = cli_runner.invoke(cli_module.cli, ["highlight", "doc.md"])
    assert result.exit_code == 1
    assert "above the 16-byte limit" in result.output


def test_file_size_limit_from_config(cli_runner, write_markdown, tmp_path):
    (tmp_path / ".markdown-editor.toml").write_text(
        "[markdown-editor]\nmax-file-size = 4\n", encoding="utf-8"
    )
    write_markdown("# Too big")

    result = cli_runner.invoke(cli_module.cli, ["parse", "doc.md"])
    assert result.exit_code == 1
    assert "above the 4-byte limit" in result.output


def test_environment_overrides_config_size_limit(cli_runner, write_markdown, tmp_path, monkeypatch):
    (tmp_path / ".markdown-editor.toml").write_text(
        "[markdown-editor]\nmax-file-size = 4\n", encoding="utf-8"
    )
    write_markdown("# Fits")
    monkeypatch.setenv(MAX_FILE_SIZE_ENV_VAR, "1024")

    result = cli_runner.invoke(cli_module.cli, ["parse", "doc.md"])
    assert result.exit_code == 0


@pytest.mark.parametrize("value", ["abc", "0", "-5"])
def test_invalid_size_environment_rejected(cli_runner, write_markdown, monkeypatch, value: str):
    write_markdown("# Heading")
    monkeypatch.setenv(MAX_FILE_SIZE_ENV_VAR, value)

    result = cli_runner.invoke(cli_module.cli, ["parse", "doc.md"])
    assert result.exit_code == 1
    assert MAX_FILE_SIZE_ENV_VAR in result.output


def test_invalid_utf8_reported(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "broken.md").write_bytes(b"# Title\n\xff\xfe\n")

    result = cli_runner.invoke(cli_module.cli, ["parse", "broken.md"])
    assert result.exit_code == 1
    assert "Invalid UTF-8" in result.output


def test_permissions_preserved_on_write(cli_runner, write_markdown):
    target = write_markdown("hello world")
    desired_mode = 0o640
    os.chmod(target, desired_mode)

    result = cli_runner.invoke(
        cli_module.cli, ["apply", "bold", "doc.md", "--start", "0", "--end", "5", "--write"]
    )
    assert result.exit_code == 0
    assert stat.S_IMODE(target.stat().st_mode) == desired_mode


def test_atime_preserved_mtime_updated(cli_runner, write_markdown):
    """Verify atime is preserved but mtime reflects the actual modification."""
    target = write_markdown("hello")

    specific_atime = time.time() - 86400
    specific_mtime = time.time() - 3600
    os.utime(target, times=(specific_atime, specific_mtime))

    original_stat = target.stat()

    result = cli_runner.invoke(cli_module.cli, ["apply", "quote", "doc.md", "--write"])
    assert result.exit_code == 0

    updated_stat = target.stat()
    assert updated_stat.st_atime_ns == original_stat.st_atime_ns
    assert updated_stat.st_mtime_ns > original_stat.st_mtime_ns


@pytest.mark.skipif(not hasattr(os, "chown"), reason="Requires os.chown support")
def test_ownership_fails_gracefully_when_unprivileged(cli_runner, write_markdown):
    target = write_markdown("hello")

    def mock_chown(*args, **kwargs):
        raise PermissionError("Operation not permitted")

    with mock.patch("os.chown", side_effect=mock_chown):
        result = cli_runner.invoke(cli_module.cli, ["apply", "quote", "doc.md", "--write"])

    assert result.exit_code == 0, _error_text(result)
    assert "ownership of doc.md could not be kept" in result.output
    assert target.read_text(encoding="utf-8") == "> hello"


def test_write_refused_when_file_changed(cli_runner, write_markdown):
    target = write_markdown("hello")
    original_load = cli_module._load_document

    def load_then_modify(*args, **kwargs):
        document = original_load(*args, **kwargs)
        target.write_text("changed underneath", encoding="utf-8")
        return document

    with mock.patch.object(cli_module, "_load_document", side_effect=load_then_modify):
        result = cli_runner.invoke(cli_module.cli, ["apply", "quote", "doc.md", "--write"])

    assert result.exit_code == 1
    assert "modified by another process" in result.output
    assert target.read_text(encoding="utf-8") == "changed underneath"
