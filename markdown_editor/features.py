"""Feature gating shared by the parser, the highlighter and the toolbar."""

from __future__ import annotations

from collections.abc import Collection, Iterable

from .constants import HEADING_FEATURES
from .exceptions import UnknownFeatureError
from .models import MarkdownFeature

FeatureSet = Collection[str]


def _feature_value(feature: str | MarkdownFeature) -> str:
    return feature.value if isinstance(feature, MarkdownFeature) else str(feature)


def _as_names(features: Iterable[str | MarkdownFeature]) -> Iterable[str | MarkdownFeature]:
    # A lone name is one feature, not a sequence of characters
    return [features] if isinstance(features, str) else features


def _as_values(features: FeatureSet) -> Collection[str]:
    if isinstance(features, frozenset):
        return features
    return {_feature_value(item) for item in _as_names(features)}


def resolve_features(
    features: Iterable[str | MarkdownFeature] | None,
) -> frozenset[str] | None:
    """Normalize a caller-supplied feature list for repeated gate lookups.

    Unknown names are kept; they simply never enable anything.

    Args:
        features: Enabled features, or None to enable everything.

    Returns:
        frozenset[str] | None: Feature values, or None when all are enabled.

    Examples:
        resolve_features(["bold", MarkdownFeature.ITALIC])  # frozenset({"bold", "italic"})
        resolve_features("bold")  # frozenset({"bold"})
        resolve_features(None)  # None
    """
    if features is None:
        return None
    return frozenset(_feature_value(feature) for feature in _as_names(features))


def is_feature_enabled(features: FeatureSet | None, feature: str | MarkdownFeature) -> bool:
    """Check whether a syntax category is enabled.

    `None` enables everything. Heading features are grouped: any of
    ``heading`` or ``heading1``..``heading6`` enables ``heading``.

    Examples:
        is_feature_enabled(None, "bold")  # True
        is_feature_enabled(["heading3"], "heading")  # True
        is_feature_enabled(["bold"], "italic")  # False
    """
    if features is None:
        return True

    value = _feature_value(feature)
    values = _as_values(features)
    if value == MarkdownFeature.HEADING.value:
        return any(heading.value in values for heading in HEADING_FEATURES)
    return value in values


def is_heading_level_enabled(features: FeatureSet | None, level: int) -> bool:
    """Check whether a specific heading level is enabled.

    All levels are enabled when `features` is None or contains the generic
    ``heading``; otherwise only the listed ``headingN`` levels are.

    Examples:
        is_heading_level_enabled(["heading2"], 3)  # False
        is_heading_level_enabled(["heading"], 3)  # True
    """
    if features is None:
        return True

    values = _as_values(features)
    if MarkdownFeature.HEADING.value in values:
        return True
    return f"heading{level}" in values


def normalize_features(
    names: Iterable[str | MarkdownFeature] | None,
) -> list[MarkdownFeature] | None:
    """Convert feature names into `MarkdownFeature` members, keeping order.

    Duplicates are dropped. Used for configuration and command-line input,
    where a misspelt name should be reported rather than ignored.

    Raises:
        UnknownFeatureError: If a name is not a known feature.

    Examples:
        normalize_features(["bold", "heading2"])
    """
    if names is None:
        return None

    normalized: list[MarkdownFeature] = []
    for name in _as_names(names):
        try:
            feature = MarkdownFeature(_feature_value(name))
        except ValueError as error:
            raise UnknownFeatureError(name) from error
        if feature not in normalized:
            normalized.append(feature)
    return normalized
