"""Immutable module graph with forward and reverse dependency indexes.

This module provides the ModuleGraph class, the in-memory snapshot every
engine component works from. It is built once from flat module and
dependency lists and never mutated; edits are applied by building a new graph.
"""

from collections.abc import Iterable, Mapping
from types import MappingProxyType

import structlog

from src.catalog.models import Dependency, Module

logger = structlog.get_logger(__name__)


class ModuleGraph:
    """Indexed snapshot of one strategy's modules and dependency edges.

    The index holds two maps keyed by module ID:

    - ``outgoing``: edges where the module is the dependent (its prerequisites)
    - ``incoming``: edges where the module is the prerequisite (its dependents)

    Edges naming unknown modules are indexed as-is so that validation can
    report every defect together. Nothing is raised here for malformed input.

    Thread-safety:
        Instances are read-only after construction, so concurrent queries
        against one graph need no locking.

    Example:
        >>> graph = ModuleGraph(modules, dependencies)
        >>> [dep.depends_on_module_id for dep in graph.requires_of("m3")]
        ['m2']
    """

    def __init__(self, modules: Iterable[Module], dependencies: Iterable[Dependency]):
        """Build the indexes.

        Args:
            modules: Module catalog for one strategy
            dependencies: Dependency edges between those modules
        """
        module_map: dict[str, Module] = {}
        for module in modules:
            if module.id in module_map:
                logger.warning("duplicate_module_id", module_id=module.id)
            module_map[module.id] = module

        edge_list = tuple(dependencies)
        outgoing: dict[str, list[Dependency]] = {}
        incoming: dict[str, list[Dependency]] = {}
        for dep in edge_list:
            outgoing.setdefault(dep.module_id, []).append(dep)
            incoming.setdefault(dep.depends_on_module_id, []).append(dep)

        self._modules: Mapping[str, Module] = MappingProxyType(module_map)
        self._dependencies: tuple[Dependency, ...] = edge_list
        self._outgoing: Mapping[str, tuple[Dependency, ...]] = MappingProxyType(
            {key: tuple(deps) for key, deps in outgoing.items()},
        )
        self._incoming: Mapping[str, tuple[Dependency, ...]] = MappingProxyType(
            {key: tuple(deps) for key, deps in incoming.items()},
        )

        logger.debug(
            "module_graph_indexed",
            module_count=len(module_map),
            dependency_count=len(edge_list),
        )

    @property
    def modules(self) -> Mapping[str, Module]:
        """Read-only mapping of module ID to module, in input order."""
        return self._modules

    @property
    def dependencies(self) -> tuple[Dependency, ...]:
        """All dependency edges, in input order."""
        return self._dependencies

    @property
    def outgoing(self) -> Mapping[str, tuple[Dependency, ...]]:
        """Module ID to the edges where it is the dependent."""
        return self._outgoing

    @property
    def incoming(self) -> Mapping[str, tuple[Dependency, ...]]:
        """Module ID to the edges where it is the prerequisite."""
        return self._incoming

    def has_module(self, module_id: str) -> bool:
        return module_id in self._modules

    def get_module(self, module_id: str) -> Module | None:
        return self._modules.get(module_id)

    def display_name(self, module_id: str) -> str:
        """Module name for messages, or the raw ID when the module is unknown."""
        module = self._modules.get(module_id)
        return module.display_name if module is not None else module_id

    def requires_of(self, module_id: str) -> tuple[Dependency, ...]:
        """Outgoing ``requires`` edges of a module (its hard prerequisites)."""
        return tuple(dep for dep in self._outgoing.get(module_id, ()) if dep.is_hard)

    def dependents_of(self, module_id: str) -> tuple[Dependency, ...]:
        """Incoming ``requires`` edges of a module (modules that require it)."""
        return tuple(dep for dep in self._incoming.get(module_id, ()) if dep.is_hard)

    def with_dependency(self, dependency: Dependency) -> "ModuleGraph":
        """Return a new graph with one extra edge.

        The receiver is left untouched; the new graph is indexed from scratch.

        Args:
            dependency: The edge to add

        Returns:
            A freshly indexed ModuleGraph
        """
        return ModuleGraph(self._modules.values(), (*self._dependencies, dependency))

    def get_stats(self) -> dict[str, int]:
        """Get statistics about the graph.

        Returns:
            Dictionary with graph statistics including:
                - total_modules: Number of modules
                - active_modules: Number of active modules
                - total_dependencies: Number of edges of any type
                - requires_dependencies: Number of requires edges
        """
        stats = {
            "total_modules": len(self._modules),
            "active_modules": sum(1 for module in self._modules.values() if module.is_active),
            "total_dependencies": len(self._dependencies),
            "requires_dependencies": sum(1 for dep in self._dependencies if dep.is_hard),
        }

        logger.debug("graph_stats_retrieved", **stats)

        return stats

    def __len__(self) -> int:
        return len(self._modules)

    def __contains__(self, module_id: object) -> bool:
        return module_id in self._modules
