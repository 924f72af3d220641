"""Which modules can be started now, and which to start next."""

from collections.abc import Set

import structlog

from src.catalog.models import Module
from src.graph.dependency_graph import ModuleGraph
from src.graph.prerequisites import PrerequisiteChecker

logger = structlog.get_logger(__name__)


class AvailabilityEngine:
    """Computes available modules and next-module suggestions.

    A module is available when it is active, not already completed, and its
    transitive prerequisites are met.
    """

    def __init__(self, graph: ModuleGraph, checker: PrerequisiteChecker | None = None):
        """Initialize the engine.

        Args:
            graph: The module graph
            checker: Prerequisite checker to reuse (built from graph if omitted)
        """
        self._graph = graph
        self._checker = checker or PrerequisiteChecker(graph)

    def is_module_available(self, module_id: str, completed: Set[str] = frozenset()) -> bool:
        """Check if a module is active, not completed and its prerequisites are met.

        Args:
            module_id: The module to check
            completed: IDs of completed modules

        Returns:
            False for unknown, inactive or completed modules
        """
        module = self._graph.get_module(module_id)
        if module is None or not module.is_active or module_id in completed:
            return False
        return self._checker.prerequisites_met(module_id, completed)

    def get_available_modules(self, completed: Set[str] = frozenset()) -> list[Module]:
        """Get modules that can be started given the completed set.

        Args:
            completed: IDs of completed modules

        Returns:
            Available modules sorted by sort_order (ties keep input order)
        """
        available = [
            module
            for module_id, module in self._graph.modules.items()
            if module.is_active
            and module_id not in completed
            and self._checker.prerequisites_met(module_id, completed)
        ]
        available.sort(key=lambda module: module.sort_order)

        logger.debug(
            "available_modules_computed",
            completed_count=len(completed),
            available_count=len(available),
        )

        return available

    def suggest_next_modules(
        self,
        completed: Set[str] = frozenset(),
        in_progress: Set[str] = frozenset(),
        max_suggestions: int = 3,
    ) -> list[Module]:
        """Suggest the next modules to work on.

        This is a positional cutoff over the available modules in sort order,
        skipping those already in progress. It does not rank by fan-out or
        business priority.

        Args:
            completed: IDs of completed modules
            in_progress: IDs of modules already being worked on
            max_suggestions: Maximum number of modules to return

        Returns:
            Up to max_suggestions modules

        Raises:
            ValueError: If max_suggestions is negative
        """
        if max_suggestions < 0:
            msg = f"max_suggestions must be non-negative, got {max_suggestions}"
            raise ValueError(msg)

        candidates = [
            module
            for module in self.get_available_modules(completed)
            if module.id not in in_progress
        ]
        suggestions = candidates[:max_suggestions]

        logger.debug(
            "next_modules_suggested",
            candidate_count=len(candidates),
            suggestion_ids=[module.id for module in suggestions],
        )

        return suggestions
