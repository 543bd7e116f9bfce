"""Settings for the markdown-editor command line, read from TOML files."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
import tomllib

from .constants import DEFAULT_FEATURES, DEFAULT_JSON_INDENT, DEFAULT_MAX_FILE_SIZE
from .exceptions import UnknownFeatureError
from .features import normalize_features

CONFIG_TABLE = "markdown-editor"
DOTFILE_NAME = ".markdown-editor.toml"

FEATURES_ALL = "all"
FEATURES_DEFAULT = "default"

# Files looked at in each directory, in order, with the tables they may hold
CONFIG_SOURCES: tuple[tuple[str, tuple[tuple[str, ...], ...]], ...] = (
    ("pyproject.toml", (("tool", CONFIG_TABLE),)),
    (DOTFILE_NAME, ((CONFIG_TABLE,), ("tool", CONFIG_TABLE))),
)


@dataclass
class EditorConfig:
    """Settings shared by every markdown-editor command.

    Attributes:
        features: Syntax features to recognize. None or ``"all"`` means every
            feature, ``"default"`` the standard toolbar set; otherwise a list
            of feature names.
        max_file_size: Largest document, in bytes, the commands will open.
        json_indent: Indent width of the printed JSON.

    Examples:
        EditorConfig(features=["bold", "italic", "heading"], json_indent=4)
    """

    features: list[str] | str | None = None
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    json_indent: int = DEFAULT_JSON_INDENT


class ConfigError(ValueError):
    """Raised for malformed or out-of-range settings."""


def load_config(search_path: Path) -> EditorConfig:
    """Find and read the settings that apply to `search_path`.

    Each directory from `search_path` up to the filesystem root is checked for
    `pyproject.toml` (``[tool.markdown-editor]``) and then `.markdown-editor.toml`
    (``[markdown-editor]`` or ``[tool.markdown-editor]``). The first table found
    wins. Unreadable or malformed TOML files are ignored.

    Args:
        search_path: Directory the search starts from.

    Returns:
        EditorConfig: Settings from the first table found, or the defaults.

    Raises:
        ConfigError: If the table found is not a table, holds unknown keys, or
            names unknown features.

    Examples:
        load_config(Path("docs"))
    """
    start = search_path.resolve()
    for directory in (start, *start.parents):
        for filename, table_paths in CONFIG_SOURCES:
            config = _read_config_file(directory / filename, table_paths)
            if config is not None:
                return normalize_config(config)
    return EditorConfig()


def _read_toml(config_file: Path) -> dict | None:
    if not config_file.is_file():
        return None
    try:
        with open(config_file, "rb") as stream:
            return tomllib.load(stream)
    except (OSError, tomllib.TOMLDecodeError):
        return None


def _lookup(data: dict, table_path: tuple[str, ...]) -> tuple[bool, object]:
    node: object = data
    for key in table_path:
        if not isinstance(node, dict) or key not in node:
            return False, None
        node = node[key]
    return True, node


def _read_config_file(
    config_file: Path, table_paths: tuple[tuple[str, ...], ...]
) -> EditorConfig | None:
    data = _read_toml(config_file)
    if data is None:
        return None

    for table_path in table_paths:
        found, table = _lookup(data, table_path)
        if found:
            return _config_from_table(table, f"[{'.'.join(table_path)}] in {config_file}")
    return None


def _config_from_table(table: object, origin: str) -> EditorConfig:
    if not isinstance(table, dict):
        raise ConfigError(f"Invalid settings: {origin} is not a table")

    # Accept both `max-file-size` and `max_file_size`
    settings = {key.replace("-", "_"): value for key, value in table.items()}
    try:
        return EditorConfig(**settings)
    except TypeError as error:
        raise ConfigError(f"Invalid settings in {origin}: {error}") from error


def normalize_config(config: EditorConfig) -> EditorConfig:
    """Resolve feature aliases and check feature names.

    ``"all"`` becomes None and ``"default"`` becomes the standard toolbar
    set. Feature lists are deduplicated and kept as plain strings.

    Raises:
        ConfigError: If `features` has the wrong type or names an unknown
            feature.

    Examples:
        normalize_config(EditorConfig(features="default")).features[:2]  # ["bold", "italic"]
    """
    features = config.features
    if features is None or features == FEATURES_ALL:
        return replace(config, features=None)
    if features == FEATURES_DEFAULT:
        return replace(config, features=[feature.value for feature in DEFAULT_FEATURES])

    names = [features] if isinstance(features, str) else features
    if not isinstance(names, (list, tuple)) or any(not isinstance(name, str) for name in names):
        raise ConfigError("`features` must be a list of feature names, 'all' or 'default'")

    try:
        resolved = normalize_features(names) or []
    except UnknownFeatureError as error:
        raise ConfigError(f"`features` contains an unknown feature: {error.name!r}") from error
    return replace(config, features=[feature.value for feature in resolved])


def _check_count(name: str, value: object, minimum: int):
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"`{name}` must be an integer, got {value!r}")
    if value < minimum:
        qualifier = "a positive integer" if minimum > 0 else f">= {minimum}"
        raise ConfigError(f"`{name}` must be {qualifier}, got {value}")


def validate_config(config: EditorConfig) -> None:
    """Check every setting of `config`.

    Raises:
        ConfigError: On unknown features, a `max_file_size` that is not a
            positive integer, or a negative `json_indent`.
    """
    normalize_config(config)
    _check_count("max_file_size", config.max_file_size, minimum=1)
    _check_count("json_indent", config.json_indent, minimum=0)


def apply_overrides(config: EditorConfig, **overrides: object) -> EditorConfig:
    """Return `config` with the given settings replaced.

    Overrides set to None are skipped, so unset command line options leave
    file settings alone. `config` itself is returned when nothing changes.

    Raises:
        TypeError: If an override is not an `EditorConfig` field.

    Examples:
        apply_overrides(config, features=["bold"], json_indent=None)
    """
    changes = {name: value for name, value in overrides.items() if value is not None}
    return replace(config, **changes) if changes else config


def build_config(search_path: Path, **overrides: object) -> EditorConfig:
    """Settings for documents in `search_path`, with command line overrides.

    Examples:
        config = build_config(Path.cwd(), features=["bold", "italic"])
    """
    config = normalize_config(apply_overrides(load_config(search_path), **overrides))
    validate_config(config)
    return config
