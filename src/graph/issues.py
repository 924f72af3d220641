"""Structured errors, warnings and suggestions produced by the engine.

Graph defects are never raised as exceptions. They are collected into a
ValidationResult that the caller inspects to decide policy (for example,
refusing to activate a strategy whose graph is invalid).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import structlog

logger = structlog.get_logger(__name__)


class ErrorType(str, Enum):
    """Structural defects; any one of them makes a graph invalid."""

    CIRCULAR_DEPENDENCY = "circular_dependency"
    MISSING_PREREQUISITE = "missing_prerequisite"
    SELF_REFERENCE = "self_reference"
    INVALID_DEPENDENCY = "invalid_dependency"


class WarningType(str, Enum):
    """Non-fatal advisory findings."""

    SUBOPTIMAL_ORDER = "suboptimal_order"


class SuggestionType(str, Enum):
    """Advisory improvements.

    REMOVE_DEPENDENCY is a recognised category whose detection is not
    implemented; it is listed in ValidationResult.unimplemented_checks and
    never emitted.
    """

    REORDER = "reorder"
    REMOVE_DEPENDENCY = "remove_dependency"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class DependencyError:
    """A structural defect in the dependency graph.

    Attributes:
        type: Kind of defect
        message: Human-readable description
        module_ids: Modules involved, in a type-specific order (cycle order for
            cycles; dependent then prerequisite for missing prerequisites)
        severity: Always ERROR for structural defects
    """

    type: ErrorType
    message: str
    module_ids: list[str]
    severity: Severity = Severity.ERROR

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "message": self.message,
            "module_ids": list(self.module_ids),
            "severity": self.severity.value,
        }


@dataclass(frozen=True)
class DependencyWarning:
    """A non-fatal finding, with an optional remedy."""

    type: WarningType
    message: str
    module_ids: list[str]
    suggestion: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "message": self.message,
            "module_ids": list(self.module_ids),
            "suggestion": self.suggestion,
        }


@dataclass(frozen=True)
class DependencySuggestion:
    """An advisory improvement the caller may choose to apply."""

    type: SuggestionType
    message: str
    module_ids: list[str]
    action: str
    priority: Priority = Priority.MEDIUM

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "message": self.message,
            "module_ids": list(self.module_ids),
            "action": self.action,
            "priority": self.priority.value,
        }


@dataclass
class ValidationResult:
    """Aggregate validation outcome for one graph snapshot.

    Attributes:
        is_valid: False as soon as any structural error is recorded
        errors: Structural defects
        warnings: Advisory findings
        suggestions: Advisory improvements
        cycles: Detected cycles, each closed back onto its first module
        unimplemented_checks: Suggestion categories that are recognised but
            not computed
    """

    is_valid: bool = True
    errors: list[DependencyError] = field(default_factory=list)
    warnings: list[DependencyWarning] = field(default_factory=list)
    suggestions: list[DependencySuggestion] = field(default_factory=list)
    cycles: list[list[str]] = field(default_factory=list)
    unimplemented_checks: list[str] = field(default_factory=list)

    def add_error(self, error: DependencyError) -> None:
        """Add an error and mark validation as failed."""
        self.errors.append(error)
        self.is_valid = False
        logger.error(
            "validation_error",
            error_type=error.type.value,
            module_ids=error.module_ids,
            message=error.message,
        )

    def add_warning(self, warning: DependencyWarning) -> None:
        """Add a warning without failing validation."""
        self.warnings.append(warning)
        logger.warning(
            "validation_warning",
            warning_type=warning.type.value,
            module_ids=warning.module_ids,
        )

    def add_suggestion(self, suggestion: DependencySuggestion) -> None:
        """Add an advisory suggestion."""
        self.suggestions.append(suggestion)
        logger.debug("validation_suggestion", suggestion_type=suggestion.type.value)

    def errors_of_type(self, error_type: ErrorType) -> list[DependencyError]:
        """Return the recorded errors of one type."""
        return [error for error in self.errors if error.type is error_type]

    def summary(self) -> str:
        """Generate a human-readable summary of the validation result."""
        lines = []
        lines.append(f"Validation Status: {'PASS' if self.is_valid else 'FAIL'}")
        lines.append(f"Errors: {len(self.errors)}")
        lines.append(f"Warnings: {len(self.warnings)}")
        lines.append(f"Suggestions: {len(self.suggestions)}")
        lines.append(f"Cycles: {len(self.cycles)}")

        if self.errors:
            lines.append("\nErrors:")
            lines.extend(f"  - [{error.type.value}] {error.message}" for error in self.errors)

        if self.warnings:
            lines.append("\nWarnings:")
            for warning in self.warnings:
                lines.append(f"  - [{warning.type.value}] {warning.message}")
                if warning.suggestion:
                    lines.append(f"    -> {warning.suggestion}")

        if self.suggestions:
            lines.append("\nSuggestions:")
            for suggestion in self.suggestions:
                lines.append(
                    f"  - [{suggestion.type.value}, {suggestion.priority.value}] "
                    f"{suggestion.message}",
                )
                lines.append(f"    Action: {suggestion.action}")

        if self.cycles:
            lines.append("\nCycles Detected:")
            for i, cycle in enumerate(self.cycles, 1):
                lines.append(f"  {i}. {' -> '.join(cycle)}")

        if self.unimplemented_checks:
            lines.append("\nNot Implemented:")
            lines.extend(f"  - {check}" for check in self.unimplemented_checks)

        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the result to plain JSON-compatible data."""
        return {
            "is_valid": self.is_valid,
            "errors": [error.to_dict() for error in self.errors],
            "warnings": [warning.to_dict() for warning in self.warnings],
            "suggestions": [suggestion.to_dict() for suggestion in self.suggestions],
            "cycles": [list(cycle) for cycle in self.cycles],
            "unimplemented_checks": list(self.unimplemented_checks),
        }
