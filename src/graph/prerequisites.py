"""Transitive prerequisite checking.

A module's prerequisites are met when every module reachable through its
requires edges is either completed in the project or has a satisfying status
(approved or locked). The walk always continues into a satisfied
prerequisite's own prerequisites, so an approved module sitting on top of an
unfinished chain does not unlock its dependents.
"""

from collections.abc import Iterator, Set
from dataclasses import dataclass

import structlog

from src.catalog.models import Dependency
from src.graph.cycles import close_cycle
from src.graph.dependency_graph import ModuleGraph
from src.graph.issues import DependencyError, ErrorType

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PrerequisiteCheck:
    """Outcome of a prerequisite walk for one module.

    Attributes:
        module_id: The module that was checked
        met: Whether all transitive prerequisites are satisfied
        blocking_module_id: First unsatisfied (or missing) ancestor, if any
        cycle: Module IDs of a cycle met during the walk, if any
        error: Structural error found during the walk, if any
    """

    module_id: str
    met: bool
    blocking_module_id: str | None = None
    cycle: list[str] | None = None
    error: DependencyError | None = None

    @property
    def is_structural_failure(self) -> bool:
        """Whether the walk failed because the graph itself is malformed."""
        return self.error is not None


class PrerequisiteChecker:
    """Walks requires edges with an explicit worklist.

    Each ancestor is evaluated at most once per call and the walk tracks the
    modules on the current branch, so it terminates on any input, including
    cyclic graphs that were never passed through cycle detection.
    """

    def __init__(self, graph: ModuleGraph):
        """Initialize the checker.

        Args:
            graph: The module graph to walk
        """
        self._graph = graph

    def _requires(self, module_id: str) -> Iterator[Dependency]:
        return iter(self._graph.requires_of(module_id))

    def check(self, module_id: str, completed: Set[str] = frozenset()) -> PrerequisiteCheck:
        """Check whether a module's transitive prerequisites are satisfied.

        Args:
            module_id: The module to check
            completed: IDs of modules completed in the project

        Returns:
            PrerequisiteCheck describing the outcome. A cycle or a requires edge
            to an unknown module is returned as a structural error.
        """
        done: set[str] = set()
        path = [module_id]
        on_path = {module_id}
        frames = [self._requires(module_id)]

        while frames:
            dep = next(frames[-1], None)
            if dep is None:
                frames.pop()
                finished = path.pop()
                on_path.discard(finished)
                done.add(finished)
                continue

            prereq_id = dep.depends_on_module_id

            if prereq_id in on_path:
                cycle = path[path.index(prereq_id):]
                closed = close_cycle(cycle)
                logger.error(
                    "prerequisite_walk_hit_cycle",
                    module_id=module_id,
                    cycle=closed,
                )
                return PrerequisiteCheck(
                    module_id=module_id,
                    met=False,
                    blocking_module_id=prereq_id,
                    cycle=cycle,
                    error=DependencyError(
                        type=ErrorType.CIRCULAR_DEPENDENCY,
                        message="Circular dependency detected while checking prerequisites: "
                        + " → ".join(self._graph.display_name(mid) for mid in closed),
                        module_ids=cycle,
                    ),
                )

            if prereq_id in done:
                continue

            prerequisite = self._graph.get_module(prereq_id)
            if prerequisite is None:
                logger.debug(
                    "prerequisite_missing",
                    module_id=module_id,
                    dependent_id=dep.module_id,
                    prerequisite_id=prereq_id,
                )
                return PrerequisiteCheck(
                    module_id=module_id,
                    met=False,
                    blocking_module_id=prereq_id,
                    error=DependencyError(
                        type=ErrorType.MISSING_PREREQUISITE,
                        message=f'Module "{self._graph.display_name(dep.module_id)}" '
                        f'depends on non-existent module "{prereq_id}"',
                        module_ids=[dep.module_id, prereq_id],
                    ),
                )

            if prereq_id not in completed and not prerequisite.is_satisfied_by_status:
                return PrerequisiteCheck(
                    module_id=module_id,
                    met=False,
                    blocking_module_id=prereq_id,
                )

            path.append(prereq_id)
            on_path.add(prereq_id)
            frames.append(self._requires(prereq_id))

        return PrerequisiteCheck(module_id=module_id, met=True)

    def prerequisites_met(self, module_id: str, completed: Set[str] = frozenset()) -> bool:
        """Return True when every transitive requires-ancestor is satisfied.

        Args:
            module_id: The module to check
            completed: IDs of modules completed in the project

        Returns:
            True if the module can be started as far as prerequisites go
        """
        return self.check(module_id, completed).met
