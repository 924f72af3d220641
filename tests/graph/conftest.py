"""Shared fixtures for dependency engine tests."""

import itertools
from collections.abc import Callable

import pytest

from src.catalog.models import Dependency, DependencyType, Module, ModuleStatus

ModuleFactory = Callable[..., Module]
DependencyFactory = Callable[..., Dependency]


@pytest.fixture
def make_module() -> ModuleFactory:
    """Factory for modules; sort_order defaults to the creation sequence."""
    counter = itertools.count(1)

    def _make(
        module_id: str,
        sort_order: int | None = None,
        status: ModuleStatus = ModuleStatus.NOT_STARTED,
        is_active: bool = True,
        name: str | None = None,
        category: str = "foundation",
    ) -> Module:
        order = next(counter)
        return Module(
            id=module_id,
            code=module_id.upper(),
            name=name or f"Module {module_id}",
            category=category,
            sort_order=order if sort_order is None else sort_order,
            is_active=is_active,
            status=status,
        )

    return _make


@pytest.fixture
def make_dependency() -> DependencyFactory:
    """Factory for dependencies: ``make_dependency("m2", "m1")`` means m2 requires m1."""
    counter = itertools.count(1)

    def _make(
        module_id: str,
        depends_on_module_id: str,
        dependency_type: DependencyType = DependencyType.REQUIRES,
    ) -> Dependency:
        return Dependency(
            id=f"d{next(counter)}",
            module_id=module_id,
            depends_on_module_id=depends_on_module_id,
            dependency_type=dependency_type,
        )

    return _make


@pytest.fixture
def brand_modules(make_module: ModuleFactory) -> list[Module]:
    """Five-module brand strategy catalog."""
    return [
        make_module("m1", 1, name="Brand Foundation"),
        make_module("m2", 2, name="Market Research"),
        make_module("m3", 3, name="Target Audience", category="strategy"),
        make_module("m4", 4, name="Brand Positioning", category="strategy"),
        make_module("m5", 5, name="Visual Identity", category="visual"),
    ]


@pytest.fixture
def brand_dependencies(make_dependency: DependencyFactory) -> list[Dependency]:
    """m3 <- m2; m4 <- m1, m3; m5 <- m4; plus m5 recommends m1."""
    return [
        make_dependency("m3", "m2"),
        make_dependency("m4", "m1"),
        make_dependency("m4", "m3"),
        make_dependency("m5", "m4"),
        make_dependency("m5", "m1", DependencyType.RECOMMENDS),
    ]
