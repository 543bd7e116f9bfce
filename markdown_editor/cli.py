"""
Command line access to the markdown-editor engine.
Parses, highlights, and applies toolbar actions to Markdown documents,
printing the results as JSON.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

import click
from .config import ConfigError, EditorConfig, build_config
from .constants import INLINE_ACTIONS
from .exceptions import MarkdownEditorError
from .filesystem import (
    ensure_file_unchanged,
    get_max_file_size,
    read_document,
    resolve_document_path,
    stat_document,
    write_document,
)
from .highlight import highlight_markdown
from .models import MarkdownFeature, Selection
from .parser import parse_markdown, parse_markdown_inline
from .toolbar import apply_toolbar_action, find_active_image, remove_image

__all__ = ["cli"]

FEATURE_NAMES = [feature.value for feature in MarkdownFeature]
INLINE_ACTION_NAMES = [action.value for action in INLINE_ACTIONS]


@dataclass
class Document:
    """A Markdown document loaded for one command.

    Attributes:
        path: Validated absolute path.
        config: Configuration resolved for the document's directory.
        text: Document text with line endings preserved.
        stat: File stat taken before reading, used to detect concurrent edits.
    """

    path: Path
    config: EditorConfig
    text: str
    stat: os.stat_result


def _load_document(filepath: str, features: tuple[str, ...] = ()) -> Document:
    base_dir = Path.cwd().resolve()
    try:
        path = resolve_document_path(filepath, base_dir)
    except ValueError as error:
        raise click.BadParameter(str(error)) from error

    try:
        config = build_config(path.parent, features=list(features) or None)
    except ConfigError as error:
        raise click.BadParameter(str(error)) from error

    try:
        max_file_size = get_max_file_size(default=config.max_file_size)
    except ValueError as error:
        raise click.ClickException(str(error)) from error

    try:
        initial_stat = stat_document(path)
        text = read_document(path, max_file_size)
        ensure_file_unchanged(initial_stat, stat_document(path), path)
    except UnicodeDecodeError as error:
        raise click.ClickException(f"Invalid UTF-8 sequence in {path}: {error}") from error
    except IOError as error:
        raise click.ClickException(str(error)) from error

    return Document(path=path, config=config, text=text, stat=initial_stat)


def _echo_json(data: object, config: EditorConfig):
    click.echo(json.dumps(data, indent=config.json_indent, ensure_ascii=False))


def _warn(message: str):
    click.echo(message, err=True)


def _save(document: Document, text: str):
    try:
        write_document(document.path, text, document.stat, warn=_warn)
    except IOError as error:
        raise click.ClickException(str(error)) from error


def _selection(start: int, end: int | None) -> Selection:
    return Selection(start, start if end is None else end)


feature_option = click.option(
    "--feature",
    "features",
    multiple=True,
    type=click.Choice(FEATURE_NAMES),
    help="Enable a syntax feature (repeatable). Defaults to the configuration, or all.",
)
start_option = click.option("--start", type=int, default=0, show_default=True, help="Selection start")
end_option = click.option("--end", type=int, help="Selection end (defaults to --start)")


@click.group()
@click.version_option(package_name="markdown-editor-core")
def cli():
    """
    Parse, highlight, and edit Markdown documents for a live editor.

    Every command reads a Markdown file under the current directory and
    prints JSON to stdout.

    Examples:
        markdown-editor parse notes.md --feature bold --feature heading
        markdown-editor apply bold notes.md --start 6 --end 11 --write
    """


@cli.command()
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False))
@click.option("--inline", is_flag=True, help="Parse the whole document as inline content.")
@feature_option
def parse(filepath: str, inline: bool, features: tuple[str, ...]):
    """
    Print the document's syntax tree.

    Raises:
        click.BadParameter: If the path or the configuration is invalid.
        click.ClickException: If the document cannot be read.

    Examples:
        markdown-editor parse README.md --inline
    """
    document = _load_document(filepath, features)
    parser = parse_markdown_inline if inline else parse_markdown
    nodes = parser(document.text, document.config.features)
    _echo_json([node.to_dict() for node in nodes], document.config)


@cli.command()
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False))
@feature_option
def highlight(filepath: str, features: tuple[str, ...]):
    """
    Print the document's highlight segments.

    Examples:
        markdown-editor highlight README.md
    """
    document = _load_document(filepath, features)
    segments = highlight_markdown(document.text, document.config.features)
    _echo_json([segment.to_dict() for segment in segments], document.config)


@cli.command()
@click.argument("action", type=click.Choice(FEATURE_NAMES))
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False))
@start_option
@end_option
@click.option(
    "--active",
    multiple=True,
    type=click.Choice(INLINE_ACTION_NAMES),
    help="Inline marker already open at the caret (repeatable).",
)
@click.option("--write", is_flag=True, help="Rewrite the file with the result.")
def apply(
    action: str,
    filepath: str,
    start: int,
    end: int | None,
    active: tuple[str, ...],
    write: bool,
):
    """
    Apply a toolbar action and print the resulting text and selection.

    Raises:
        click.BadParameter: If the path, configuration, or action is invalid.
        click.ClickException: If the document cannot be read or rewritten.

    Examples:
        markdown-editor apply heading2 notes.md --start 0
        markdown-editor apply bold notes.md --start 6 --end 11 --write
    """
    document = _load_document(filepath)
    try:
        result = apply_toolbar_action(
            action, document.text, _selection(start, end), active
        )
    except MarkdownEditorError as error:
        raise click.BadParameter(str(error)) from error

    if write:
        _save(document, result.text)
    _echo_json(result.to_dict(), document.config)


@cli.command()
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False))
@start_option
@end_option
@click.option("--delete", is_flag=True, help="Remove the image and rewrite the file.")
def image(filepath: str, start: int, end: int | None, delete: bool):
    """
    Print the image under the selection, or null when there is none.

    Raises:
        click.ClickException: If `--delete` is given and no image is selected,
            or the document cannot be read or rewritten.

    Examples:
        markdown-editor image notes.md --start 12
        markdown-editor image notes.md --start 12 --delete
    """
    document = _load_document(filepath)
    segments = highlight_markdown(document.text, document.config.features)
    info = find_active_image(segments, _selection(start, end))

    if not delete:
        _echo_json(info.to_dict() if info is not None else None, document.config)
        return

    if info is None:
        raise click.ClickException("No image at the given selection.")

    result = remove_image(document.text, info)
    _save(document, result.text)
    _echo_json(result.to_dict(), document.config)


if __name__ == "__main__":
    cli()
