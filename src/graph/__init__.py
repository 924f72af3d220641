"""Module dependency graph engine.

This package validates a strategy's module dependency graph, orders modules
prerequisite-first, determines which modules are unlocked for a set of
completed modules, and builds a dependency tree for display.
"""

from src.graph.availability import AvailabilityEngine
from src.graph.cycles import CycleDetector
from src.graph.dependency_graph import ModuleGraph
from src.graph.issues import (
    DependencyError,
    DependencySuggestion,
    DependencyWarning,
    ErrorType,
    SuggestionType,
    ValidationResult,
    WarningType,
)
from src.graph.manager import ModuleDependencyManager, create_dependency_manager, get_module_path
from src.graph.ordering import OrderingResult, TopologicalOrderer
from src.graph.prerequisites import PrerequisiteCheck, PrerequisiteChecker
from src.graph.report import generate_dependency_report
from src.graph.tree import DependencyTree, DependencyTreeBuilder, TreeNode, format_dependency_tree
from src.graph.validator import DependencyValidator, validate_dependency_addition

__all__ = [
    "AvailabilityEngine",
    "CycleDetector",
    "DependencyError",
    "DependencySuggestion",
    "DependencyTree",
    "DependencyTreeBuilder",
    "DependencyValidator",
    "DependencyWarning",
    "ErrorType",
    "ModuleDependencyManager",
    "ModuleGraph",
    "OrderingResult",
    "PrerequisiteCheck",
    "PrerequisiteChecker",
    "SuggestionType",
    "TopologicalOrderer",
    "TreeNode",
    "ValidationResult",
    "WarningType",
    "create_dependency_manager",
    "format_dependency_tree",
    "generate_dependency_report",
    "get_module_path",
    "validate_dependency_addition",
]
