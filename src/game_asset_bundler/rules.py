"""Collection rule evaluation.

Decides whether an asset path participates in a build and which bundle
label it belongs to. Evaluation is a pure function of the path and the
configured CollectSettings.
"""

import posixpath
from dataclasses import dataclass
from typing import Callable

from .core.paths import is_under, normalize_asset_path
from .settings import CollectionRule, CollectRule, CollectSettings, NamingPolicy


@dataclass(frozen=True)
class Classification:
    """Outcome of classifying one asset path.

    Attributes:
        path: Canonical asset path that was classified
        included: Whether the asset is collected
        label: Bundle label (without platform postfix) when included
        rule: The rule that matched, if any
        reason: Why the asset was excluded
    """

    path: str
    included: bool
    label: str = ""
    rule: CollectionRule | None = None
    reason: str = ""

    @classmethod
    def excluded(cls, path: str, reason: str, rule: CollectionRule | None = None) -> "Classification":
        return cls(path=path, included=False, rule=rule, reason=reason)


def _no_folders(path: str) -> bool:
    return path.endswith("/")


def derive_label(path: str, naming: NamingPolicy, const_name: str = "") -> str:
    """Derive a lowercase bundle label for an asset path.

    Example:
        ("Assets/Art/UI/icon.png", BY_FOLDER_PATH) -> "assets/art/ui"
        ("Assets/Art/UI/icon.png", BY_FILE_PATH) -> "assets/art/ui/icon"
    """
    if naming is NamingPolicy.BY_CONST_NAME:
        return const_name.lower()
    if naming is NamingPolicy.BY_FOLDER_PATH:
        return posixpath.dirname(path).lower()
    stem, _ = posixpath.splitext(path)
    return stem.lower()


class CollectionRuleEvaluator:
    """Classifies asset paths against the configured collection rules."""

    def __init__(
        self,
        settings: CollectSettings,
        is_folder: Callable[[str], bool] | None = None,
    ):
        """Initialize the evaluator.

        Args:
            settings: Collection settings for the build
            is_folder: Predicate telling whether a path denotes a folder.
                Defaults to treating paths with a trailing slash as folders.
        """
        self.settings = settings
        self.is_folder = is_folder or _no_folders

    def eligibility_failure(self, path: str) -> str | None:
        """Check the rule-independent filters for a canonical path.

        Returns:
            A reason string if the path can never be bundled, else None
        """
        if not is_under(path, self.settings.asset_root) or path == self.settings.asset_root:
            return f"outside asset root {self.settings.asset_root}"
        if is_under(path, self.settings.info_folder):
            return "generated build info"
        if self.is_folder(path):
            return "folder"
        file_name = posixpath.basename(path)
        _, postfix = posixpath.splitext(file_name)
        if postfix and self.settings.blacklist.is_black_postfix(postfix):
            return f"blacklisted postfix {postfix}"
        if self.settings.blacklist.is_black_file_name(file_name):
            return f"blacklisted file name {file_name}"
        return None

    def match_rule(self, path: str) -> CollectionRule | None:
        """Return the first configured rule covering the path."""
        for rule in self.settings.rules:
            if is_under(path, rule.path):
                return rule
        return None

    def classify(self, asset_path: str) -> Classification:
        """Classify an asset path.

        Args:
            asset_path: Project-relative asset path (any separator style)

        Returns:
            Classification with the bundle label when included
        """
        path = normalize_asset_path(asset_path)

        reason = self.eligibility_failure(path)
        if reason is not None:
            return Classification.excluded(path, reason)

        rule = self.match_rule(path)
        if rule is None:
            return Classification.excluded(path, "no matching collection rule")
        if rule.collect_rule is CollectRule.IGNORE:
            return Classification.excluded(path, f"ignored by rule {rule.path}", rule)

        return Classification(
            path=path,
            included=True,
            label=derive_label(path, rule.naming, rule.const_name),
            rule=rule,
        )

    def dependency_label(self, asset_path: str) -> str:
        """Label for an asset that is only reached as a dependency."""
        path = normalize_asset_path(asset_path)
        return derive_label(path, self.settings.dependency_naming)

    def is_media(self, asset_path: str) -> bool:
        """Whether the asset is media that must be stored uncompressed."""
        _, postfix = posixpath.splitext(asset_path)
        return postfix.lower() in self.settings.media_postfixes
