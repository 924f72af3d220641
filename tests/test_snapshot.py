"""Unit tests for catalog models and snapshot loading."""

import json
from pathlib import Path
from typing import Any

import pytest
import yaml
from pydantic import ValidationError

from src.catalog import CatalogSnapshot, Dependency, DependencyType, Module, ModuleStatus


@pytest.fixture
def snapshot_dict() -> dict[str, Any]:
    """Fixture providing a small snapshot document."""
    return {
        "modules": [
            {"id": "m1", "code": "M1-FOUNDATION", "name": "Brand Foundation", "sort_order": 1},
            {"id": "m2", "code": "M2-RESEARCH", "name": "Market Research", "sort_order": 2,
             "status": "approved"},
        ],
        "dependencies": [
            {"id": "d1", "module_id": "m2", "depends_on_module_id": "m1",
             "dependency_type": "requires", "notes": "foundation first"},
        ],
        "completed_module_ids": ["m1"],
        "in_progress_module_ids": ["m2"],
    }


def _write_yaml(path: Path, data: Any) -> Path:
    with path.open("w") as f:
        yaml.dump(data, f)
    return path


class TestModels:
    """Tests for Module and Dependency."""

    def test_module_defaults(self):
        """Test that only the ID is required."""
        module = Module(id="m1")

        assert module.status is ModuleStatus.NOT_STARTED
        assert module.is_active
        assert module.sort_order == 0
        assert module.display_name == "m1"

    def test_module_requires_id(self):
        with pytest.raises(ValidationError):
            Module(id="")

    def test_module_is_frozen(self):
        module = Module(id="m1")

        with pytest.raises(ValidationError):
            module.name = "changed"

    @pytest.mark.parametrize(
        ("status", "expected"),
        [
            (ModuleStatus.APPROVED, True),
            (ModuleStatus.LOCKED, True),
            (ModuleStatus.NEEDS_REVIEW, False),
            (ModuleStatus.IN_PROGRESS, False),
        ],
    )
    def test_status_satisfaction(self, status, expected):
        assert Module(id="m1", status=status).is_satisfied_by_status is expected

    def test_dependency_type_from_string(self):
        """Test that dependency types parse from their wire values."""
        dep = Dependency(id="d1", module_id="m2", depends_on_module_id="m1", dependency_type="blocks")

        assert dep.dependency_type is DependencyType.BLOCKS
        assert not dep.is_hard
        assert not dep.is_self_reference

    def test_self_reference_is_constructible(self):
        """Test that graph-level defects are not rejected by the model."""
        dep = Dependency(id="d1", module_id="m1", depends_on_module_id="m1", dependency_type="requires")

        assert dep.is_self_reference
        assert dep.is_hard

    def test_unknown_dependency_type(self):
        with pytest.raises(ValidationError):
            Dependency(id="d1", module_id="m2", depends_on_module_id="m1", dependency_type="conflicts")


class TestCatalogSnapshot:
    """Tests for CatalogSnapshot.from_file."""

    def test_load_yaml(self, tmp_path, snapshot_dict):
        """Test loading a YAML snapshot."""
        snapshot = CatalogSnapshot.from_file(_write_yaml(tmp_path / "catalog.yaml", snapshot_dict))

        assert [module.id for module in snapshot.modules] == ["m1", "m2"]
        assert snapshot.modules[1].status is ModuleStatus.APPROVED
        assert snapshot.dependencies[0].notes == "foundation first"
        assert snapshot.completed == {"m1"}
        assert snapshot.in_progress == {"m2"}

    def test_load_json(self, tmp_path, snapshot_dict):
        """Test loading a JSON snapshot."""
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps(snapshot_dict))

        snapshot = CatalogSnapshot.from_file(path)

        assert len(snapshot.dependencies) == 1

    def test_optional_sections_default_empty(self, tmp_path):
        path = _write_yaml(tmp_path / "catalog.yml", {"modules": [{"id": "m1"}]})

        snapshot = CatalogSnapshot.from_file(path)

        assert snapshot.dependencies == []
        assert snapshot.completed == set()

    def test_file_not_found(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            CatalogSnapshot.from_file(tmp_path / "missing.yaml")

    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / "catalog.txt"
        path.write_text("modules: []")

        with pytest.raises(ValueError, match="Unsupported snapshot format"):
            CatalogSnapshot.from_file(path)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "catalog.yaml"
        path.write_text("modules: [")

        with pytest.raises(ValueError, match="Invalid snapshot file"):
            CatalogSnapshot.from_file(path)

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text('{"modules": oops}')

        with pytest.raises(ValueError, match="Invalid snapshot file"):
            CatalogSnapshot.from_file(path)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "catalog.yaml"
        path.write_text("")

        with pytest.raises(ValueError, match="empty"):
            CatalogSnapshot.from_file(path)

    def test_not_a_mapping(self, tmp_path):
        path = _write_yaml(tmp_path / "catalog.yaml", ["m1", "m2"])

        with pytest.raises(ValueError, match="mapping"):
            CatalogSnapshot.from_file(path)

    def test_invalid_records(self, tmp_path):
        """Test that malformed records raise a validation error."""
        path = _write_yaml(
            tmp_path / "catalog.yaml",
            {"modules": [{"id": "m1"}], "dependencies": [{"id": "d1", "module_id": "m1"}]},
        )

        with pytest.raises(ValidationError):
            CatalogSnapshot.from_file(path)
