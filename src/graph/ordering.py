"""Topological ordering of modules over requires edges.

Modules are ordered prerequisite-first: every module appears after all of
the modules it requires. Ordering is refused outright for graphs with
structural errors; a partial order is never returned.
"""

from collections import deque
from dataclasses import dataclass, field

import structlog

from src.catalog.models import Module
from src.graph.dependency_graph import ModuleGraph
from src.graph.issues import DependencyError, DependencySuggestion, DependencyWarning
from src.graph.tree import DependencyTree, DependencyTreeBuilder

logger = structlog.get_logger(__name__)


@dataclass
class OrderingResult:
    """Outcome of a topological ordering request.

    Attributes:
        ordered_modules: Every module, prerequisites first; empty when refused
        errors: Structural errors that caused a refusal
        warnings: Reserved for ordering warnings (currently always empty)
        suggestions: Reserved for ordering suggestions (currently always empty)
        dependency_tree: Dependency tree; empty when refused
    """

    ordered_modules: list[Module] = field(default_factory=list)
    errors: list[DependencyError] = field(default_factory=list)
    warnings: list[DependencyWarning] = field(default_factory=list)
    suggestions: list[DependencySuggestion] = field(default_factory=list)
    dependency_tree: DependencyTree = field(default_factory=DependencyTree)

    @property
    def is_ordered(self) -> bool:
        return not self.errors

    @property
    def ordered_ids(self) -> list[str]:
        return [module.id for module in self.ordered_modules]


class TopologicalOrderer:
    """Kahn's algorithm over requires edges.

    The in-degree of a module is the number of distinct known modules it
    requires. Modules with no prerequisites seed a FIFO queue in input order;
    placing a module decrements the in-degree of each module that requires it.
    """

    def __init__(self, graph: ModuleGraph):
        """Initialize the orderer.

        Args:
            graph: The module graph
        """
        self._graph = graph

    def order(self) -> list[Module]:
        """Compute the prerequisite-first order.

        Callers must have ruled out structural errors; on a cyclic graph the
        modules the queue never reaches are appended in input order.

        Returns:
            Every module exactly once
        """
        in_degree: dict[str, int] = {}
        dependents: dict[str, list[str]] = {module_id: [] for module_id in self._graph.modules}

        for module_id in self._graph.modules:
            prerequisites = {
                dep.depends_on_module_id
                for dep in self._graph.requires_of(module_id)
                if not dep.is_self_reference and self._graph.has_module(dep.depends_on_module_id)
            }
            in_degree[module_id] = len(prerequisites)
            for prereq_id in prerequisites:
                dependents[prereq_id].append(module_id)

        queue = deque(module_id for module_id, degree in in_degree.items() if degree == 0)
        ordered_ids: list[str] = []
        placed: set[str] = set()

        while queue:
            module_id = queue.popleft()
            ordered_ids.append(module_id)
            placed.add(module_id)

            for dependent_id in dependents[module_id]:
                in_degree[dependent_id] -= 1
                if in_degree[dependent_id] == 0:
                    queue.append(dependent_id)

        leftovers = [module_id for module_id in self._graph.modules if module_id not in placed]
        if leftovers:
            logger.warning("modules_left_unordered", module_ids=leftovers)
            ordered_ids.extend(leftovers)

        return [self._graph.modules[module_id] for module_id in ordered_ids]

    def get_topological_order(
        self,
        structural_errors: list[DependencyError],
        tree_builder: DependencyTreeBuilder | None = None,
    ) -> OrderingResult:
        """Order the modules, or refuse when the graph is structurally broken.

        Args:
            structural_errors: Errors found by validation; any error refuses ordering
            tree_builder: Builder for the accompanying dependency tree

        Returns:
            OrderingResult with the order and tree, or the errors and nothing else
        """
        if structural_errors:
            logger.warning(
                "topological_order_refused",
                error_count=len(structural_errors),
                error_types=sorted({error.type.value for error in structural_errors}),
            )
            return OrderingResult(errors=list(structural_errors))

        ordered = self.order()
        builder = tree_builder or DependencyTreeBuilder(self._graph)

        logger.info("topological_order_computed", module_count=len(ordered))

        return OrderingResult(ordered_modules=ordered, dependency_tree=builder.build())
