"""Package-specific exception types."""

from __future__ import annotations


class MarkdownEditorError(ValueError):
    """Base class for invalid input reaching the markdown-editor API.

    Parsing and highlighting never raise; these errors cover names and values
    supplied by callers.
    """


class UnknownFeatureError(MarkdownEditorError):
    """Raised when a feature name is not part of `MarkdownFeature`.

    Args:
        name: The rejected feature name.
    """

    def __init__(self, name: object):
        self.name = name
        super().__init__(f"Unknown markdown feature: {name!r}")


class UnknownActionError(MarkdownEditorError):
    """Raised when a toolbar action name is not recognized.

    Args:
        name: The rejected action name.
    """

    def __init__(self, name: object):
        self.name = name
        super().__init__(f"Unknown toolbar action: {name!r}")


class DocumentError(Exception):
    """Raised when a Markdown document cannot be read or written."""
