"""Base abstractions for bundle compiler backends.

The build pipeline hands a finished build plan to a BundleCompiler and
consumes only its CompileResult. Neither the assembler nor the cycle
validator knows which backend produced the result.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field

from ..core.records import BundleBuildUnit
from ..settings import BuildParameters


@dataclass
class CompileResult:
    """Outcome of one compiler invocation.

    Attributes:
        success: Whether every bundle was produced
        bundle_dependencies: Bundle name to the bundle names it directly depends on
        output_files: Bundle name to its output path, relative to the output directory
        reused_bundles: Bundles whose previous output was reused from the build cache
        message: Failure description, empty on success
    """

    success: bool
    bundle_dependencies: dict[str, list[str]] = field(default_factory=dict)
    output_files: dict[str, str] = field(default_factory=dict)
    reused_bundles: list[str] = field(default_factory=list)
    message: str = ""

    @classmethod
    def failure(cls, message: str) -> "CompileResult":
        return cls(success=False, message=message)


class BundleCompiler(ABC):
    """Abstract base class for bundle compilers.

    Implementations turn build units into bundle files under the
    parameters' output directory and report per-bundle dependencies.
    """

    name: str = ""

    @abstractmethod
    def compile(
        self,
        units: Sequence[BundleBuildUnit],
        parameters: BuildParameters,
    ) -> CompileResult:
        """Compile the build plan.

        Args:
            units: Build plan entries, metadata bundle included
            parameters: Global build parameters, passed through verbatim

        Returns:
            CompileResult; failures are reported, not raised
        """
        pass
