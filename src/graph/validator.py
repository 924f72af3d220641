"""Graph validation with detailed cycle detection and reporting.

This module aggregates every check over a module graph into one
ValidationResult: structural errors (cycles, missing prerequisites, self
references, unknown dependents), ordering warnings and advisory suggestions.
It also renders the graph as Mermaid or Graphviz DOT for diagnostics.
"""

from typing import ClassVar

import structlog

from src.catalog.models import Dependency, DependencyType
from src.graph.cycles import CycleDetector, close_cycle
from src.graph.dependency_graph import ModuleGraph
from src.graph.issues import (
    DependencyError,
    DependencySuggestion,
    DependencyWarning,
    ErrorType,
    Priority,
    SuggestionType,
    ValidationResult,
    WarningType,
)
from src.graph.ordering import TopologicalOrderer

logger = structlog.get_logger(__name__)


class DependencyValidator:
    """Validator for module graphs with detailed error reporting.

    Every check runs on every call, even when earlier checks fail, so the
    caller sees all defects at once. Nothing here raises for malformed graphs.
    """

    UNIMPLEMENTED_CHECKS: ClassVar[list[str]] = [
        f"{SuggestionType.REMOVE_DEPENDENCY.value}: unused dependency detection is not implemented",
    ]

    def __init__(self, graph: ModuleGraph):
        """Initialize the validator.

        Args:
            graph: The module graph to validate
        """
        self._graph = graph

    def validate(self) -> ValidationResult:
        """Validate the graph and generate a detailed result.

        Returns:
            ValidationResult containing all findings
        """
        logger.info(
            "starting_graph_validation",
            module_count=len(self._graph.modules),
            dependency_count=len(self._graph.dependencies),
        )

        result = ValidationResult()

        for error in self.structural_errors(result):
            result.add_error(error)

        for warning in self._detect_ordering_issues():
            result.add_warning(warning)

        for suggestion in self._generate_suggestions(result.errors):
            result.add_suggestion(suggestion)

        result.unimplemented_checks = list(self.UNIMPLEMENTED_CHECKS)

        logger.info(
            "graph_validation_complete",
            is_valid=result.is_valid,
            error_count=len(result.errors),
            warning_count=len(result.warnings),
            suggestion_count=len(result.suggestions),
        )

        return result

    def structural_errors(self, result: ValidationResult | None = None) -> list[DependencyError]:
        """Collect every structural error in the graph.

        Args:
            result: When given, detected cycles are also recorded on it

        Returns:
            Cycle errors, then missing prerequisites, self references and
            unknown dependents
        """
        cycles = CycleDetector(self._graph).detect()
        if result is not None:
            result.cycles = [close_cycle(cycle) for cycle in cycles]

        errors = [self._cycle_error(cycle) for cycle in cycles]
        errors.extend(self._detect_missing_prerequisites())
        errors.extend(self._detect_self_references())
        errors.extend(self._detect_unknown_dependents())
        return errors

    def _cycle_error(self, cycle: list[str]) -> DependencyError:
        names = " → ".join(self._graph.display_name(module_id) for module_id in close_cycle(cycle))
        return DependencyError(
            type=ErrorType.CIRCULAR_DEPENDENCY,
            message=f"Circular dependency detected: {names}",
            module_ids=list(cycle),
        )

    def _detect_missing_prerequisites(self) -> list[DependencyError]:
        """Find edges whose prerequisite is not in the module set (any type)."""
        errors = []
        for dep in self._graph.dependencies:
            if self._graph.has_module(dep.depends_on_module_id):
                continue
            errors.append(
                DependencyError(
                    type=ErrorType.MISSING_PREREQUISITE,
                    message=f'Module "{self._graph.display_name(dep.module_id)}" depends on '
                    f'non-existent module "{dep.depends_on_module_id}"',
                    module_ids=[dep.module_id, dep.depends_on_module_id],
                ),
            )

        if errors:
            logger.debug("missing_prerequisites_found", count=len(errors))

        return errors

    def _detect_self_references(self) -> list[DependencyError]:
        """Find edges that point a module at itself (any type)."""
        return [
            DependencyError(
                type=ErrorType.SELF_REFERENCE,
                message=f'Module "{self._graph.display_name(dep.module_id)}" cannot depend on itself',
                module_ids=[dep.module_id],
            )
            for dep in self._graph.dependencies
            if dep.is_self_reference
        ]

    def _detect_unknown_dependents(self) -> list[DependencyError]:
        """Find edges whose dependent module is not in the module set."""
        return [
            DependencyError(
                type=ErrorType.INVALID_DEPENDENCY,
                message=f'Dependency "{dep.id}" belongs to non-existent module "{dep.module_id}"',
                module_ids=[dep.module_id, dep.depends_on_module_id],
            )
            for dep in self._graph.dependencies
            if not self._graph.has_module(dep.module_id)
        ]

    def _detect_ordering_issues(self) -> list[DependencyWarning]:
        """Find modules whose sort_order places them before something they depend on."""
        warnings = []
        for dep in self._graph.dependencies:
            module = self._graph.get_module(dep.module_id)
            prerequisite = self._graph.get_module(dep.depends_on_module_id)
            if module is None or prerequisite is None or dep.is_self_reference:
                continue
            if prerequisite.sort_order > module.sort_order:
                warnings.append(
                    DependencyWarning(
                        type=WarningType.SUBOPTIMAL_ORDER,
                        message=f'Module "{module.display_name}" (order {module.sort_order}) '
                        f'depends on "{prerequisite.display_name}" '
                        f"(order {prerequisite.sort_order}) which comes later",
                        module_ids=[module.id, prerequisite.id],
                        suggestion=f'Move "{prerequisite.display_name}" before '
                        f'"{module.display_name}" in the ordering',
                    ),
                )
        return warnings

    def _generate_suggestions(self, errors: list[DependencyError]) -> list[DependencySuggestion]:
        """Suggest adopting the topological order when sort_order contradicts it."""
        if errors or not self._graph.modules or self._is_order_optimal():
            return []

        ordered = TopologicalOrderer(self._graph).order()
        return [
            DependencySuggestion(
                type=SuggestionType.REORDER,
                message="Consider reordering modules to follow dependency relationships more closely",
                module_ids=[module.id for module in ordered],
                action="Apply suggested topological ordering",
                priority=Priority.MEDIUM,
            ),
        ]

    def _is_order_optimal(self) -> bool:
        """Whether the catalog order already places every prerequisite before its dependents.

        The catalog order is the stable sort by sort_order, so equal values fall
        back to input order.
        """
        catalog_order = sorted(self._graph.modules.values(), key=lambda module: module.sort_order)
        position = {module.id: index for index, module in enumerate(catalog_order)}
        for dep in self._graph.dependencies:
            if not dep.is_hard:
                continue
            module_pos = position.get(dep.module_id)
            prerequisite_pos = position.get(dep.depends_on_module_id)
            if module_pos is not None and prerequisite_pos is not None and (
                prerequisite_pos > module_pos
            ):
                return False
        return True

    def generate_visualization(self, output_format: str = "mermaid") -> str:
        """Generate a visual representation of the module graph.

        Args:
            output_format: Output format ('mermaid' or 'dot')

        Returns:
            String representation of the graph in the requested format

        Raises:
            ValueError: If an unsupported format is requested
        """
        output_format = output_format.lower().strip()

        if output_format == "mermaid":
            return self._generate_mermaid()
        if output_format == "dot":
            return self._generate_graphviz()
        error_msg = f"Unsupported format: {output_format}. Use 'mermaid' or 'dot'."
        raise ValueError(error_msg)

    def _generate_mermaid(self) -> str:
        """Generate a Mermaid flowchart; arrows point from prerequisite to dependent.

        Node IDs are positional (``n0``, ``n1``, ...) so that module IDs which
        differ only in punctuation stay distinct; labels carry the names.
        """
        lines = ["graph TD"]

        if not self._graph.modules:
            lines.append("    Empty[Empty Graph]")
            return "\n".join(lines)

        node_ids: dict[str, str] = {}
        labels: dict[str, str] = {}
        for module_id, module in self._graph.modules.items():
            node_ids[module_id] = f"n{len(node_ids)}"
            labels[module_id] = module.display_name
        # unknown modules named by edges still get a node of their own
        for dep in self._graph.dependencies:
            for module_id in (dep.depends_on_module_id, dep.module_id):
                if module_id not in node_ids:
                    node_ids[module_id] = f"n{len(node_ids)}"
                    labels[module_id] = module_id

        for module_id, node_id in node_ids.items():
            label = labels[module_id].replace('"', "'")
            lines.append(f'    {node_id}["{label}"]')

        arrows = {
            DependencyType.REQUIRES: "-->",
            DependencyType.RECOMMENDS: "-.->",
            DependencyType.BLOCKS: "--x",
        }
        for dep in self._graph.dependencies:
            lines.append(
                f"    {node_ids[dep.depends_on_module_id]} {arrows[dep.dependency_type]} "
                f"{node_ids[dep.module_id]}",
            )

        return "\n".join(lines)

    def _generate_graphviz(self) -> str:
        """Generate a Graphviz DOT representation."""

        def escape_dot_string(s: str) -> str:
            """Escape backslashes, then double quotes, for DOT format."""
            return s.replace("\\", "\\\\").replace('"', '\\"')

        styles = {
            DependencyType.REQUIRES: "",
            DependencyType.RECOMMENDS: " [style=dashed]",
            DependencyType.BLOCKS: ' [color=red, label="blocks"]',
        }

        lines = ["digraph ModuleDependencies {"]
        lines.append("    rankdir=LR;")
        lines.append("    node [shape=box, style=rounded];")

        if not self._graph.modules:
            lines.append('    Empty [label="Empty Graph"];')
        else:
            lines.extend(
                f'    "{escape_dot_string(module_id)}" '
                f'[label="{escape_dot_string(module.display_name)}"];'
                for module_id, module in self._graph.modules.items()
            )
            lines.extend(
                f'    "{escape_dot_string(dep.depends_on_module_id)}" -> '
                f'"{escape_dot_string(dep.module_id)}"{styles[dep.dependency_type]};'
                for dep in self._graph.dependencies
            )

        lines.append("}")
        return "\n".join(lines)


def validate_dependency_addition(
    graph: ModuleGraph,
    module_id: str,
    depends_on_module_id: str,
    dependency_type: DependencyType = DependencyType.REQUIRES,
    notes: str | None = None,
) -> ValidationResult:
    """Validate the graph as it would be with one more edge.

    Args:
        graph: The current graph (left untouched)
        module_id: Dependent module of the candidate edge
        depends_on_module_id: Prerequisite module of the candidate edge
        dependency_type: Type of the candidate edge
        notes: Optional notes for the candidate edge

    Returns:
        ValidationResult for the extended graph
    """
    dependency_type = DependencyType(dependency_type)
    candidate = Dependency(
        id="temp-validation-id",
        module_id=module_id,
        depends_on_module_id=depends_on_module_id,
        dependency_type=dependency_type,
        notes=notes,
    )
    logger.debug(
        "validating_dependency_addition",
        module_id=module_id,
        depends_on_module_id=depends_on_module_id,
        dependency_type=dependency_type.value,
    )
    return DependencyValidator(graph.with_dependency(candidate)).validate()
