"""Reading and atomically rewriting Markdown documents on disk.

Offsets produced by the editor engine index into the document text, so
documents are read and written without newline translation.
"""

from __future__ import annotations

import os
import stat
import tempfile
from collections.abc import Callable
from pathlib import Path

from .constants import DEFAULT_MAX_FILE_SIZE, MARKDOWN_EXTENSIONS

MAX_FILE_SIZE_ENV_VAR = "MARKDOWN_EDITOR_MAX_FILE_SIZE"

Warn = Callable[[str], None]


def get_max_file_size(default: int = DEFAULT_MAX_FILE_SIZE) -> int:
    """Return the document size limit, honouring `MARKDOWN_EDITOR_MAX_FILE_SIZE`.

    Args:
        default: Limit in bytes used when the environment variable is unset.

    Returns:
        int: Maximum document size in bytes.

    Raises:
        ValueError: If the environment value is not a positive integer.

    Examples:
        os.environ["MARKDOWN_EDITOR_MAX_FILE_SIZE"] = "204800"
        get_max_file_size(default=102400)  # 204800
    """
    raw_value = os.environ.get(MAX_FILE_SIZE_ENV_VAR)
    if raw_value is None:
        return default

    try:
        limit = int(raw_value)
    except ValueError as error:
        raise ValueError(
            f"{MAX_FILE_SIZE_ENV_VAR} must be a positive integer, got {raw_value!r}."
        ) from error

    if limit <= 0:
        raise ValueError(f"{MAX_FILE_SIZE_ENV_VAR} must be a positive integer, got {limit}.")
    return limit


def _is_symlink(path: Path) -> bool:
    try:
        return path.is_symlink()
    except OSError:
        return False


def contains_symlink(path: Path) -> bool:
    """Tell whether `path` or any of its parents is a symbolic link."""
    return any(_is_symlink(candidate) for candidate in (path, *path.parents))


def resolve_document_path(raw_path: str, base_dir: Path) -> Path:
    """Turn a user-supplied path into the absolute path of an editable document.

    The document must be a regular file with a Markdown extension, reached
    without symlinks, somewhere under `base_dir`.

    Args:
        raw_path: Path as typed by the user, absolute or relative.
        base_dir: Resolved working directory the document must live in.

    Returns:
        Path: Resolved absolute path.

    Raises:
        ValueError: Describing the first check the path fails.

    Examples:
        resolve_document_path("notes/today.md", Path.cwd().resolve())
    """
    path = Path(raw_path).expanduser()
    if contains_symlink(path):
        raise ValueError(f"Symlinked paths are refused: {path}")

    try:
        resolved = path.resolve(strict=True)
    except FileNotFoundError as error:
        raise ValueError(f"{path} does not exist.") from error
    except OSError as error:
        raise ValueError(f"Cannot resolve {path}: {error}") from error

    if not resolved.is_file():
        raise ValueError(f"{resolved} is not a regular file.")

    if not resolved.is_relative_to(base_dir):
        raise ValueError(f"{resolved} is not under the working directory {base_dir}.")

    if resolved.suffix.lower() not in MARKDOWN_EXTENSIONS:
        raise ValueError(
            f"{resolved} does not look like a Markdown document "
            f"(expected one of: {', '.join(MARKDOWN_EXTENSIONS)})."
        )

    return resolved


def stat_document(filepath: Path) -> os.stat_result:
    """Stat a document without following symlinks.

    Raises:
        IOError: If the path cannot be accessed or is not a regular file.
    """
    try:
        stat_result = os.lstat(filepath)
    except OSError as error:
        raise IOError(f"Cannot access {filepath}: {error}") from error

    if stat.S_ISLNK(stat_result.st_mode):
        raise IOError(f"Symlinked paths are refused: {filepath}")
    if not stat.S_ISREG(stat_result.st_mode):
        raise IOError(f"{filepath} is not a regular file.")
    return stat_result


def check_document_size(stat_result: os.stat_result, max_size: int, filepath: Path):
    """Raise IOError when the document is larger than `max_size` bytes."""
    if stat_result.st_size > max_size:
        raise IOError(
            f"{filepath} is {stat_result.st_size} bytes, above the {max_size}-byte limit."
        )


def _fingerprint(stat_result: os.stat_result) -> tuple[object, ...]:
    return (
        getattr(stat_result, "st_ino", None),
        getattr(stat_result, "st_dev", None),
        stat_result.st_size,
        stat_result.st_mtime_ns,
    )


def ensure_file_unchanged(
    expected_stat: os.stat_result, current_stat: os.stat_result, filepath: Path
):
    """Refuse to go on when a document was replaced or edited since it was read.

    Inode, device, size and modification time are compared.

    Raises:
        IOError: If any of them differ.
    """
    if _fingerprint(expected_stat) != _fingerprint(current_stat):
        raise IOError(f"{filepath} was modified by another process; not writing.")


def read_document(filepath: Path, max_size: int | None = None) -> str:
    """Read a whole Markdown document after checking its type and size.

    Args:
        filepath: Path to the document.
        max_size: Size limit in bytes; defaults to `get_max_file_size()`.

    Returns:
        str: Document text with line endings preserved.

    Raises:
        IOError: If the file is not a regular file, is too large, or cannot
            be opened.
        UnicodeDecodeError: If the file is not valid UTF-8.

    Examples:
        text = read_document(Path("notes.md"), max_size=1024 * 1024)
    """
    limit = get_max_file_size() if max_size is None else max_size
    check_document_size(stat_document(filepath), limit, filepath)

    try:
        handle = open(filepath, "r", encoding="UTF-8", newline="")
    except OSError as error:
        raise IOError(f"Cannot access {filepath}: {error}") from error
    with handle:
        return handle.read()


def _copy_ownership(target: str, source_stat: os.stat_result, filepath: Path, warn: Warn | None):
    uid = getattr(source_stat, "st_uid", None)
    gid = getattr(source_stat, "st_gid", None)
    if uid is None or gid is None or not hasattr(os, "chown"):
        return

    try:
        os.chown(target, uid, gid)
    except PermissionError:
        # Only privileged users can hand a file to another owner
        if warn is not None:
            warn(
                f"Warning: ownership of {filepath.name} could not be kept "
                "(requires elevated privileges)"
            )


def write_document(
    filepath: Path,
    text: str,
    expected_stat: os.stat_result,
    warn: Warn | None = None,
):
    """Replace a document with `text` in a single atomic rename.

    The new content goes to a temporary file next to the document, which
    receives the original mode and, when permitted, owner before it is
    renamed over the document. The access time read from `expected_stat` is
    restored afterwards; the modification time is left to show the rewrite.

    Args:
        filepath: Document to replace.
        text: New content, written verbatim.
        expected_stat: Stat taken before the document was read.
        warn: Receives non-fatal warnings, such as ownership not being kept.

    Raises:
        IOError: If the document changed since `expected_stat` or cannot be
            replaced.

    Examples:
        before = stat_document(path)
        write_document(path, new_text, before, warn=print)
    """
    ensure_file_unchanged(expected_stat, stat_document(filepath), filepath)

    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="UTF-8",
            newline="",
            delete=False,
            dir=filepath.parent,
            prefix=f".{filepath.name}.",
        ) as tmp_file:
            temp_path = Path(tmp_file.name)
            tmp_file.write(text)
            tmp_file.flush()
            os.fsync(tmp_file.fileno())
            os.chmod(tmp_file.name, stat.S_IMODE(expected_stat.st_mode))
            _copy_ownership(tmp_file.name, expected_stat, filepath, warn)

        os.replace(temp_path, filepath)
        os.utime(filepath, ns=(expected_stat.st_atime_ns, filepath.stat().st_mtime_ns))
    finally:
        if temp_path is not None:
            try:
                temp_path.unlink(missing_ok=True)
            except OSError:
                pass
