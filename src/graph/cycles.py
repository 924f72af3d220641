"""Cycle detection over hard (requires) dependency edges.

Cycles formed purely from recommends or blocks edges are not structural
errors and are ignored. Self-loops are ignored too; they are reported as
self references by the validator.
"""

from collections.abc import Iterator

import structlog

from src.catalog.models import Dependency
from src.graph.dependency_graph import ModuleGraph

logger = structlog.get_logger(__name__)


class CycleDetector:
    """DFS cycle detector with complete path reporting.

    Runs a depth-first search with a recursion-stack set from every unvisited
    module, so disconnected components are covered. An explicit frame stack
    replaces Python recursion, keeping deep prerequisite chains safe.
    """

    def __init__(self, graph: ModuleGraph):
        """Initialize the detector.

        Args:
            graph: The module graph to inspect
        """
        self._graph = graph

    def _edges_from(self, module_id: str) -> Iterator[Dependency]:
        for dep in self._graph.requires_of(module_id):
            if dep.is_self_reference or not self._graph.has_module(dep.depends_on_module_id):
                continue
            yield dep

    def detect(self) -> list[list[str]]:
        """Detect every distinct cycle among requires edges.

        Each back edge found by the search yields the suffix of the active path
        starting at the edge's target. Rotations of the same cycle are reported
        once. The search carries on after a cycle so that independent cycles
        are all found.

        Returns:
            List of cycles, each a list of module IDs in dependency order
            (each module requires the next; the last requires the first)
        """
        visited: set[str] = set()
        cycles: list[list[str]] = []
        seen: set[tuple[str, ...]] = set()

        for root in self._graph.modules:
            if root in visited:
                continue

            visited.add(root)
            on_stack = {root}
            path = [root]
            frames = [self._edges_from(root)]

            while frames:
                dep = next(frames[-1], None)
                if dep is None:
                    frames.pop()
                    on_stack.discard(path.pop())
                    continue

                target = dep.depends_on_module_id
                if target in on_stack:
                    cycle = path[path.index(target):]
                    key = _canonical(cycle)
                    if key not in seen:
                        seen.add(key)
                        cycles.append(cycle)
                        logger.debug("cycle_found", cycle=cycle)
                elif target not in visited:
                    visited.add(target)
                    on_stack.add(target)
                    path.append(target)
                    frames.append(self._edges_from(target))

        if cycles:
            logger.info("cycles_detected", cycle_count=len(cycles))

        return cycles


def _canonical(cycle: list[str]) -> tuple[str, ...]:
    """Rotate a cycle so it starts at its smallest ID."""
    start = cycle.index(min(cycle))
    return tuple(cycle[start:] + cycle[:start])


def close_cycle(cycle: list[str]) -> list[str]:
    """Append the first module so the closing edge is explicit."""
    return [*cycle, cycle[0]] if cycle else []
