"""Manifest and ledger emission after a successful, validated compile."""

from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from .compilers.base import CompileResult
from .core.records import BundleBuildUnit
from .ledger import DEFAULT_HASH_ALGORITHM, write_ledger
from .manifest import write_readme
from .settings import BuildParameters, CollectSettings


class ManifestEmitter:
    """Writes the readable build manifest and the content ledger."""

    def __init__(
        self,
        settings: CollectSettings,
        parameters: BuildParameters,
        ledger_path: Path | None = None,
        hash_algorithm: str = DEFAULT_HASH_ALGORITHM,
    ):
        self.settings = settings
        self.parameters = parameters
        self.ledger_path = ledger_path
        self.hash_algorithm = hash_algorithm

    def emit(
        self,
        plan: Sequence[BundleBuildUnit],
        result: CompileResult,
        built_at: datetime | None = None,
    ) -> tuple[Path, Path]:
        """Emit both files for a build.

        Returns:
            (readable manifest path, ledger path)
        """
        output_dir = self.parameters.output_dir
        manifest_path = write_readme(
            output_dir, plan, result, self.settings, self.parameters, built_at
        )
        ledger_path = write_ledger(
            output_dir,
            self.ledger_path,
            workers=self.parameters.hash_workers,
            algorithm=self.hash_algorithm,
        )
        return manifest_path, ledger_path
