"""Cycle detection over the compiled bundle dependency graph.

A cyclic bundle dependency leaves the load order undefined, so any cycle
fails the build. Every validation run keeps its own traversal state.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from .errors import CycleDetectedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CycleReport:
    """A detected cycle.

    Attributes:
        cycle: Bundles on the loop, starting at the bundle that closes it
        stack: Depth-first stack at the moment of detection
    """

    cycle: list[str]
    stack: list[str]


def find_cycle(dependencies: Mapping[str, Iterable[str]]) -> CycleReport | None:
    """Depth-first search for a cycle in a bundle dependency graph.

    Args:
        dependencies: Bundle name to its direct dependency bundle names.
            Bundles that only appear as dependencies are treated as leaves.

    Returns:
        The first cycle found, or None if the graph is acyclic
    """
    visited: set[str] = set()

    for start in dependencies:
        if start in visited:
            continue

        visited.add(start)
        stack = [start]
        on_stack = {start}
        pending = [iter(dependencies.get(start, ()))]

        while pending:
            descended = False
            for dep in pending[-1]:
                if dep in on_stack:
                    index = stack.index(dep)
                    return CycleReport(cycle=stack[index:], stack=list(stack))
                if dep not in visited:
                    visited.add(dep)
                    stack.append(dep)
                    on_stack.add(dep)
                    pending.append(iter(dependencies.get(dep, ())))
                    descended = True
                    break
            if not descended:
                pending.pop()
                on_stack.discard(stack.pop())

    return None


def validate_bundle_dependencies(dependencies: Mapping[str, Iterable[str]]) -> None:
    """Fail if the bundle dependency graph has a cycle.

    Raises:
        CycleDetectedError: With the cycle and the traversal stack
    """
    report = find_cycle(dependencies)
    if report is None:
        return
    for bundle in report.stack:
        logger.warning("cycle stack: %s", bundle)
    raise CycleDetectedError(report.cycle, report.stack)
