"""Human-readable dependency report.

The report is rendered deterministically from the same structures the
engine returns; it is a view, not a separate data source.
"""

from collections.abc import Set

from src.graph.manager import ModuleDependencyManager
from src.graph.tree import format_dependency_tree

RULE_WIDTH = 60


def _section(title: str) -> list[str]:
    return [title, "-" * len(title)]


def generate_dependency_report(
    manager: ModuleDependencyManager,
    completed: Set[str] = frozenset(),
    in_progress: Set[str] = frozenset(),
    title: str = "MODULE DEPENDENCY REPORT",
) -> str:
    """Build a full text report for one snapshot.

    Args:
        manager: Manager over the snapshot
        completed: IDs of completed modules
        in_progress: IDs of modules in progress
        title: Report heading

    Returns:
        Multi-line report text
    """
    validation = manager.validate_dependencies()
    ordering = manager.get_topological_order()
    tree = manager.build_dependency_tree(completed)
    available = manager.get_available_modules(completed)
    suggested = manager.suggest_next_modules(completed, in_progress)

    lines = ["=" * RULE_WIDTH, title.center(RULE_WIDTH).rstrip(), "=" * RULE_WIDTH, ""]

    lines.extend(_section("VALIDATION SUMMARY"))
    lines.append(f"Status: {'✅ Valid' if validation.is_valid else '❌ Invalid'}")
    lines.append(f"Errors: {len(validation.errors)}")
    lines.append(f"Warnings: {len(validation.warnings)}")
    lines.append(f"Suggestions: {len(validation.suggestions)}")
    lines.append("")

    if validation.errors:
        lines.extend(_section("ERRORS"))
        lines.extend(f"• {error.message}" for error in validation.errors)
        lines.append("")

    if validation.warnings:
        lines.extend(_section("WARNINGS"))
        for warning in validation.warnings:
            lines.append(f"• {warning.message}")
            if warning.suggestion:
                lines.append(f"  → {warning.suggestion}")
        lines.append("")

    if validation.suggestions:
        lines.extend(_section("SUGGESTIONS"))
        for suggestion in validation.suggestions:
            lines.append(f"• {suggestion.message}")
            lines.append(f"  Action: {suggestion.action} (priority: {suggestion.priority.value})")
        lines.append("")

    lines.extend(_section("RECOMMENDED EXECUTION ORDER"))
    if ordering.ordered_modules:
        for index, module in enumerate(ordering.ordered_modules, 1):
            lines.append(f"{index:>2}. {module.display_name} ({module.code})")
    else:
        lines.append("No order available (fix structural errors first)")
    lines.append("")

    lines.extend(_section("DEPENDENCY TREE"))
    rendered = format_dependency_tree(tree).rstrip("\n")
    lines.append(rendered or "(empty)")
    lines.append("")

    lines.extend(_section("READY TO START"))
    if available:
        lines.extend(f"• {module.display_name} - {module.category}" for module in available)
    else:
        lines.append("No modules available (check dependencies)")
    lines.append("")

    lines.extend(_section("SUGGESTED NEXT"))
    if suggested:
        lines.extend(f"• {module.display_name}" for module in suggested)
    else:
        lines.append("Nothing to suggest")

    return "\n".join(lines) + "\n"
