"""Catalog data contracts for modules and dependency edges.

The catalog (modules, dependencies, completion status) is owned by an external
storage service. This package defines the shapes the engine consumes and a
loader for file-based snapshots of one strategy's catalog.
"""

from src.catalog.models import (
    SATISFYING_STATUSES,
    Dependency,
    DependencyType,
    Module,
    ModuleStatus,
)
from src.catalog.snapshot import CatalogSnapshot

__all__ = [
    "SATISFYING_STATUSES",
    "CatalogSnapshot",
    "Dependency",
    "DependencyType",
    "Module",
    "ModuleStatus",
]
