"""Dependency tree construction for display and debugging.

The tree is stored as a flat arena of nodes keyed by module ID. Nodes refer
to their prerequisites and dependents by ID only; relationships are resolved
against the arena when read, so the structure never forms an object cycle.

Depth policy: a node's depth is its minimum distance (in requires edges)
from any root, where roots are modules with no requires prerequisites. The
recorded path is the first shortest path discovered by a breadth-first search
that starts from all roots at once and expands nodes in input order. Nodes
that no root reaches (modules on or behind a cycle) have no depth and an
empty path.
"""

from collections import deque
from collections.abc import Iterator, Set
from dataclasses import dataclass, field

import structlog

from src.catalog.models import Module
from src.graph.dependency_graph import ModuleGraph
from src.graph.prerequisites import PrerequisiteChecker

logger = structlog.get_logger(__name__)


@dataclass
class TreeNode:
    """One module's position in the dependency tree.

    Attributes:
        module: The module itself
        dependency_ids: IDs of its requires prerequisites
        dependent_ids: IDs of modules that require it
        depth: Minimum number of requires edges from a root, or None when unreachable
        path: Module IDs from a root down to this module (inclusive)
        is_available: Active, not completed and prerequisites met for the tree's completed set
        prerequisites_met: Prerequisites met for the tree's completed set
    """

    module: Module
    dependency_ids: tuple[str, ...] = ()
    dependent_ids: tuple[str, ...] = ()
    depth: int | None = None
    path: tuple[str, ...] = ()
    is_available: bool = False
    prerequisites_met: bool = False

    @property
    def module_id(self) -> str:
        return self.module.id

    @property
    def is_root(self) -> bool:
        return not self.dependency_ids

    @property
    def is_reachable(self) -> bool:
        return self.depth is not None


@dataclass
class DependencyTree:
    """Arena of tree nodes plus the IDs of its roots.

    Iterating a tree yields its root nodes, so an empty tree behaves like an
    empty list.
    """

    nodes: dict[str, TreeNode] = field(default_factory=dict)
    root_ids: tuple[str, ...] = ()

    @property
    def roots(self) -> list[TreeNode]:
        return [self.nodes[root_id] for root_id in self.root_ids]

    def node(self, module_id: str) -> TreeNode | None:
        return self.nodes.get(module_id)

    def dependencies_of(self, node: TreeNode) -> list[TreeNode]:
        """Resolve a node's prerequisites against the arena."""
        return [self.nodes[dep_id] for dep_id in node.dependency_ids]

    def dependents_of(self, node: TreeNode) -> list[TreeNode]:
        """Resolve a node's dependents against the arena."""
        return [self.nodes[dep_id] for dep_id in node.dependent_ids]

    def path_to(self, module_id: str) -> list[str]:
        """Root-to-module path, or an empty list for unknown/unreachable modules."""
        node = self.nodes.get(module_id)
        return list(node.path) if node is not None else []

    def __iter__(self) -> Iterator[TreeNode]:
        return iter(self.roots)

    def __len__(self) -> int:
        return len(self.root_ids)


class DependencyTreeBuilder:
    """Builds a DependencyTree from a module graph."""

    def __init__(
        self,
        graph: ModuleGraph,
        checker: PrerequisiteChecker | None = None,
    ):
        """Initialize the builder.

        Args:
            graph: The module graph
            checker: Prerequisite checker to reuse (built from graph if omitted)
        """
        self._graph = graph
        self._checker = checker or PrerequisiteChecker(graph)

    def _linked_ids(self, module_id: str, *, forward: bool) -> tuple[str, ...]:
        edges = self._graph.requires_of(module_id) if forward else self._graph.dependents_of(module_id)
        linked: list[str] = []
        for dep in edges:
            if dep.is_self_reference:
                continue
            other = dep.depends_on_module_id if forward else dep.module_id
            if self._graph.has_module(other) and other not in linked:
                linked.append(other)
        return tuple(linked)

    def build(self, completed: Set[str] = frozenset()) -> DependencyTree:
        """Build the tree.

        Args:
            completed: IDs of completed modules, used for the availability flags

        Returns:
            DependencyTree over every module in the graph
        """
        nodes: dict[str, TreeNode] = {}
        for module_id, module in self._graph.modules.items():
            check = self._checker.check(module_id, completed)
            nodes[module_id] = TreeNode(
                module=module,
                dependency_ids=self._linked_ids(module_id, forward=True),
                dependent_ids=self._linked_ids(module_id, forward=False),
                prerequisites_met=check.met,
                is_available=module.is_active and module_id not in completed and check.met,
            )

        root_ids = tuple(module_id for module_id, node in nodes.items() if node.is_root)

        queue: deque[str] = deque()
        for root_id in root_ids:
            nodes[root_id].depth = 0
            nodes[root_id].path = (root_id,)
            queue.append(root_id)

        while queue:
            current = nodes[queue.popleft()]
            for dependent_id in current.dependent_ids:
                dependent = nodes[dependent_id]
                if dependent.depth is not None:
                    continue
                dependent.depth = current.depth + 1
                dependent.path = (*current.path, dependent_id)
                queue.append(dependent_id)

        unreachable = [module_id for module_id, node in nodes.items() if node.depth is None]
        if unreachable:
            logger.warning("tree_nodes_unreachable_from_roots", module_ids=unreachable)

        logger.debug(
            "dependency_tree_built",
            node_count=len(nodes),
            root_count=len(root_ids),
        )

        return DependencyTree(nodes=nodes, root_ids=root_ids)


def format_dependency_tree(tree: DependencyTree, indent: str = "  ") -> str:
    """Render a tree as indented text, roots first, dependents nested below.

    A module required by several parents appears under each of them. A
    branch stops when it would revisit a module already on that branch.

    Args:
        tree: The tree to render
        indent: Indentation unit per level

    Returns:
        The rendering, one module per line
    """
    lines: list[str] = []
    stack: list[tuple[TreeNode, int, frozenset[str]]] = [
        (root, 0, frozenset()) for root in reversed(tree.roots)
    ]

    while stack:
        node, level, ancestors = stack.pop()
        status = "✅" if node.is_available else "❌"
        prerequisites = "✓" if node.prerequisites_met else "✗"
        code = f" ({node.module.code})" if node.module.code else ""
        lines.append(
            f"{indent * level}{status} {node.module.display_name}{code} [prereq: {prerequisites}]",
        )

        branch = ancestors | {node.module_id}
        children = [child for child in tree.dependents_of(node) if child.module_id not in branch]
        stack.extend((child, level + 1, branch) for child in reversed(children))

    return "\n".join(lines) + ("\n" if lines else "")
