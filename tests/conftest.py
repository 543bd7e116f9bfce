from __future__ import annotations

import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest
from click.testing import CliRunner


@pytest.fixture()
def cli_runner() -> CliRunner:
    """Provides a reusable Click CLI runner."""
    return CliRunner()


@pytest.fixture()
def write_markdown(tmp_path: Path, monkeypatch) -> Callable[..., Path]:
    """Writes a Markdown document under a working directory set to `tmp_path`."""
    monkeypatch.chdir(tmp_path)

    def _write(content: str, filename: str = "doc.md", dedent: bool = True) -> Path:
        path = tmp_path / filename
        if dedent:
            content = textwrap.dedent(content).lstrip()
        path.write_bytes(content.encode("utf-8"))
        return path

    return _write
