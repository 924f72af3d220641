"""File-based snapshots of one strategy's module catalog.

The storage service normally hands the engine lists of modules and
dependencies plus per-project completion records. A snapshot bundles the same
data into a YAML or JSON document so the engine can be exercised offline:

    modules:
      - {id: m1, code: M1-FOUNDATION, name: Brand Foundation, sort_order: 1}
      - {id: m2, code: M2-RESEARCH, name: Market Research, sort_order: 2}
    dependencies:
      - {id: d1, module_id: m2, depends_on_module_id: m1, dependency_type: requires}
    completed_module_ids: [m1]
    in_progress_module_ids: []
"""

import json
from pathlib import Path

import structlog
import yaml
from pydantic import BaseModel, Field

from src.catalog.models import Dependency, Module

logger = structlog.get_logger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")
JSON_SUFFIXES = (".json",)


class CatalogSnapshot(BaseModel):
    """One tenant's catalog plus the completion state of a project.

    Attributes:
        modules: Module catalog
        dependencies: Dependency edges between modules
        completed_module_ids: Modules completed in the project
        in_progress_module_ids: Modules currently being worked on
    """

    modules: list[Module] = Field(default_factory=list)
    dependencies: list[Dependency] = Field(default_factory=list)
    completed_module_ids: list[str] = Field(default_factory=list)
    in_progress_module_ids: list[str] = Field(default_factory=list)

    @property
    def completed(self) -> set[str]:
        """Completed module IDs as a set."""
        return set(self.completed_module_ids)

    @property
    def in_progress(self) -> set[str]:
        """In-progress module IDs as a set."""
        return set(self.in_progress_module_ids)

    @classmethod
    def from_file(cls, path: str | Path) -> "CatalogSnapshot":
        """Load a snapshot from a YAML or JSON file.

        Args:
            path: Path to the snapshot file

        Returns:
            Parsed and validated CatalogSnapshot

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the file is empty, malformed or has an unknown suffix
            pydantic.ValidationError: If records don't match the catalog models
        """
        snapshot_path = Path(path)

        if not snapshot_path.exists():
            msg = f"Snapshot file not found: {snapshot_path}"
            raise FileNotFoundError(msg)

        suffix = snapshot_path.suffix.lower()
        if suffix not in YAML_SUFFIXES + JSON_SUFFIXES:
            msg = f"Unsupported snapshot format: {suffix or '(none)'}. Use .yaml, .yml or .json"
            raise ValueError(msg)

        logger.info("loading_snapshot", path=str(snapshot_path))

        try:
            with snapshot_path.open() as f:
                if suffix in JSON_SUFFIXES:
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            logger.exception("snapshot_parse_error", error=str(e), path=str(snapshot_path))
            msg = f"Invalid snapshot file {snapshot_path}: {e}"
            raise ValueError(msg) from e

        if not data:
            msg = f"Snapshot file is empty: {snapshot_path}"
            raise ValueError(msg)

        if not isinstance(data, dict):
            msg = "Snapshot file must contain a mapping with 'modules' and 'dependencies'"
            raise ValueError(msg)

        snapshot = cls(**data)

        logger.info(
            "snapshot_loaded",
            module_count=len(snapshot.modules),
            dependency_count=len(snapshot.dependencies),
            completed_count=len(snapshot.completed_module_ids),
        )

        return snapshot
