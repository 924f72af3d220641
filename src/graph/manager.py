"""Facade over the dependency engine for one strategy snapshot.

ModuleDependencyManager builds a ModuleGraph once and answers every query
from it. All queries are read-only, so they may run in any order (or in
parallel) against one manager. Edits to the catalog require a new manager.
"""

from collections.abc import Iterable, Set

import structlog

from src.catalog.models import Dependency, DependencyType, Module
from src.config import AppConfig
from src.graph.availability import AvailabilityEngine
from src.graph.dependency_graph import ModuleGraph
from src.graph.issues import ValidationResult
from src.graph.ordering import OrderingResult, TopologicalOrderer
from src.graph.prerequisites import PrerequisiteCheck, PrerequisiteChecker
from src.graph.tree import DependencyTree, DependencyTreeBuilder
from src.graph.validator import DependencyValidator, validate_dependency_addition

logger = structlog.get_logger(__name__)


def _id_set(module_ids: Iterable[str], name: str) -> frozenset[str]:
    """Collect module IDs, refusing a bare string (which would iterate as characters)."""
    if isinstance(module_ids, str):
        msg = f"{name} must be a collection of module IDs, not a string: {module_ids!r}"
        raise TypeError(msg)
    return frozenset(module_ids)


class ModuleDependencyManager:
    """Validates, orders and schedules the modules of one strategy.

    Example:
        >>> manager = ModuleDependencyManager(modules, dependencies)
        >>> manager.validate_dependencies().is_valid
        True
        >>> [m.id for m in manager.get_available_modules({"m1"})]
        ['m2']
    """

    def __init__(
        self,
        modules: Iterable[Module],
        dependencies: Iterable[Dependency],
        config: AppConfig | None = None,
    ):
        """Index the snapshot and wire up the engine components.

        Args:
            modules: Module catalog
            dependencies: Dependency edges
            config: Application configuration (defaults apply when omitted)
        """
        self.config = config or AppConfig()
        self.graph = ModuleGraph(modules, dependencies)
        self.checker = PrerequisiteChecker(self.graph)
        self.availability = AvailabilityEngine(self.graph, self.checker)
        self.validator = DependencyValidator(self.graph)
        self.orderer = TopologicalOrderer(self.graph)
        self.tree_builder = DependencyTreeBuilder(self.graph, self.checker)

        logger.debug("dependency_manager_initialized", **self.graph.get_stats())

    def validate_dependencies(self) -> ValidationResult:
        """Run every validation check."""
        return self.validator.validate()

    def get_topological_order(self) -> OrderingResult:
        """Order modules prerequisite-first, refusing on structural errors."""
        return self.orderer.get_topological_order(
            self.validator.structural_errors(),
            self.tree_builder,
        )

    def build_dependency_tree(self, completed: Set[str] = frozenset()) -> DependencyTree:
        """Build the dependency tree, flagging availability for ``completed``."""
        return self.tree_builder.build(completed)

    def check_prerequisites(
        self,
        module_id: str,
        completed: Set[str] = frozenset(),
    ) -> PrerequisiteCheck:
        """Check prerequisites and report why they are unmet."""
        return self.checker.check(module_id, completed)

    def prerequisites_met(self, module_id: str, completed: Set[str] = frozenset()) -> bool:
        return self.checker.prerequisites_met(module_id, completed)

    def is_module_available(self, module_id: str, completed: Set[str] = frozenset()) -> bool:
        return self.availability.is_module_available(module_id, completed)

    def get_available_modules(self, completed: Iterable[str] = ()) -> list[Module]:
        return self.availability.get_available_modules(_id_set(completed, "completed"))

    def suggest_next_modules(
        self,
        completed: Iterable[str] = (),
        in_progress: Iterable[str] = (),
        max_suggestions: int | None = None,
    ) -> list[Module]:
        """Suggest what to work on next.

        Args:
            completed: IDs of completed modules
            in_progress: IDs of modules already in progress
            max_suggestions: Cutoff; defaults to ``engine.max_suggestions`` from config

        Returns:
            Up to max_suggestions available modules, in sort order

        Raises:
            TypeError: If completed or in_progress is a bare string
            ValueError: If max_suggestions is negative
        """
        if max_suggestions is None:
            max_suggestions = self.config.engine.max_suggestions
        return self.availability.suggest_next_modules(
            _id_set(completed, "completed"),
            _id_set(in_progress, "in_progress"),
            max_suggestions,
        )

    def validate_dependency_addition(
        self,
        module_id: str,
        depends_on_module_id: str,
        dependency_type: DependencyType = DependencyType.REQUIRES,
    ) -> ValidationResult:
        """Validate the snapshot as it would be with one more edge."""
        return validate_dependency_addition(
            self.graph,
            module_id,
            depends_on_module_id,
            dependency_type,
        )

    def generate_visualization(self, output_format: str | None = None) -> str:
        """Render the graph as Mermaid or DOT (default from config)."""
        return self.validator.generate_visualization(
            output_format or self.config.report.visualization_format,
        )


def create_dependency_manager(
    modules: Iterable[Module],
    dependencies: Iterable[Dependency],
    config: AppConfig | None = None,
) -> ModuleDependencyManager:
    """Create a new dependency manager instance."""
    return ModuleDependencyManager(modules, dependencies, config)


def get_module_path(
    modules: Iterable[Module],
    dependencies: Iterable[Dependency],
    module_id: str,
) -> list[str]:
    """Return the root-to-module path for ``module_id``.

    Args:
        modules: Module catalog
        dependencies: Dependency edges
        module_id: Target module

    Returns:
        Module IDs from a root to the target, or [] if unknown or unreachable
    """
    manager = ModuleDependencyManager(modules, dependencies)
    return manager.build_dependency_tree().path_to(module_id)
