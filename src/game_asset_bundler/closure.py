"""Asset dependency closure expansion.

Each collected root is expanded into its full transitive dependency set,
and every eligible member is folded into the assembler's dedup arena.
"""

import logging
from dataclasses import dataclass

from .core.paths import normalize_asset_path
from .core.records import AssetRecord
from .errors import DependencyQueryError
from .planner import BuildPlanAssembler
from .rules import CollectionRuleEvaluator
from .sources.base import AssetGraph

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Diagnostic:
    """A recoverable problem recorded during a build pass."""

    asset_path: str
    message: str
    severity: str = "warning"

    def __str__(self) -> str:
        return f"[{self.severity}] {self.asset_path}: {self.message}"


class DependencyClosure:
    """Expands root assets against an asset graph.

    Assets matched by a collection rule go to their rule's bundle. Assets
    that no rule matches but that pass the eligibility filters are still
    included when reached from a collected root, under the settings'
    dependency naming policy.
    """

    def __init__(
        self,
        graph: AssetGraph,
        evaluator: CollectionRuleEvaluator,
        assembler: BuildPlanAssembler,
        strict: bool = False,
    ):
        """Initialize the closure expander.

        Args:
            graph: Asset graph answering dependency queries
            evaluator: Rule evaluator for classification
            assembler: Assembler owning the dedup arena
            strict: Raise on dependency query failure instead of skipping
        """
        self.graph = graph
        self.evaluator = evaluator
        self.assembler = assembler
        self.strict = strict
        self.diagnostics: list[Diagnostic] = []

    def _record(self, asset_path: str, message: str, severity: str = "warning") -> None:
        diagnostic = Diagnostic(asset_path, message, severity)
        self.diagnostics.append(diagnostic)
        logger.warning("%s", diagnostic)

    def expand(self, root_path: str) -> list[AssetRecord]:
        """Expand one root asset.

        Args:
            root_path: Project-relative path of the root asset

        Returns:
            Records of every member registered for this root, root first

        Raises:
            DependencyQueryError: If the query fails and strict mode is on
        """
        root = normalize_asset_path(root_path)
        root_class = self.evaluator.classify(root)
        if not root_class.included:
            logger.debug("Root %s not collected: %s", root, root_class.reason)
            return []

        try:
            members = self.graph.dependencies_of(root)
        except DependencyQueryError as e:
            if self.strict:
                raise
            self._record(root, f"skipped, {e}")
            return []

        records: list[AssetRecord] = []
        for member in members:
            path = normalize_asset_path(member)
            classification = self.evaluator.classify(path)
            if classification.included:
                label = classification.label
                collected = True
            elif (
                path != root
                and classification.rule is None
                and self.evaluator.eligibility_failure(path) is None
            ):
                label = self.evaluator.dependency_label(path)
                collected = False
            else:
                logger.debug("Dependency %s of %s excluded: %s", path, root, classification.reason)
                continue

            record = self.assembler.register(
                path,
                label,
                collected=collected,
                media=self.evaluator.is_media(path),
            )
            if path != root:
                self.assembler.arena.record_reach(root, record)
            records.append(record)
        return records

    def expand_all(self, roots: list[str]) -> int:
        """Expand every root in order.

        Returns:
            Number of roots that contributed at least one record
        """
        expanded = 0
        for root in roots:
            if self.expand(root):
                expanded += 1
        return expanded
