"""Exception types raised by a bundle build pass.

Every fatal condition aborts the pass before the manifest and ledger are
written, so an existing manifest/ledger always belongs to a successful build.
"""


class BuildError(Exception):
    """Base class for all bundle build errors."""


class ConfigurationError(BuildError, ValueError):
    """Raised when the build is misconfigured before any work begins.

    Examples: no target platform selected, empty output path,
    zero collection rules, or a settings file that fails schema validation.
    """


class DuplicateRegistrationError(BuildError):
    """Raised when an asset path or bundle key is registered twice.

    This indicates a deduplication defect, never a user error.
    """

    def __init__(self, kind: str, key: object):
        self.kind = kind
        self.key = key
        super().__init__(f"Duplicate {kind} registration: {key!r}")


class CompileFailure(BuildError):
    """Raised when the external bundle compiler reports failure."""


class CycleDetectedError(BuildError):
    """Raised when the compiled bundle dependency graph contains a cycle.

    Attributes:
        cycle: Bundles forming the loop, in traversal order
        stack: Full traversal stack at the point of detection
    """

    def __init__(self, cycle: list[str], stack: list[str] | None = None):
        self.cycle = list(cycle)
        self.stack = list(stack if stack is not None else cycle)
        super().__init__(f"Found cycle assetbundle: {' -> '.join(self.cycle + self.cycle[:1])}")


class DependencyQueryError(BuildError):
    """Raised by an asset graph when dependencies of a path cannot be resolved."""

    def __init__(self, asset_path: str, reason: str = ""):
        self.asset_path = asset_path
        self.reason = reason
        message = f"Dependency query failed for {asset_path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
