"""Unit tests for the dependency tree builder and its text rendering."""

import pytest

from src.catalog.models import DependencyType, ModuleStatus
from src.graph.dependency_graph import ModuleGraph
from src.graph.tree import DependencyTree, DependencyTreeBuilder, format_dependency_tree

EXPECTED_DEPTH_TWO = 2
EXPECTED_DEPTH_THREE = 3


@pytest.fixture
def tree(brand_modules, brand_dependencies) -> DependencyTree:
    """Tree over the brand catalog with nothing completed."""
    return DependencyTreeBuilder(ModuleGraph(brand_modules, brand_dependencies)).build()


@pytest.fixture
def tree_with_m1_done(brand_modules, brand_dependencies) -> DependencyTree:
    """Tree over the brand catalog with m1 completed."""
    return DependencyTreeBuilder(ModuleGraph(brand_modules, brand_dependencies)).build({"m1"})

class TestTreeStructure:
    """Test roots, relationships and the arena."""

    def test_roots_have_no_prerequisites(self, tree):
        """Test that roots are modules without requires edges."""
        assert [node.module_id for node in tree.roots] == ["m1", "m2"]
        for root in tree:
            assert root.dependency_ids == ()
            assert root.depth == 0

    def test_every_module_has_a_node(self, tree, brand_modules):
        """Test that the arena holds every module."""
        assert set(tree.nodes) == {module.id for module in brand_modules}

    def test_relationships_are_ids(self, tree):
        """Test that nodes refer to each other by ID."""
        m4 = tree.node("m4")

        assert m4.dependency_ids == ("m1", "m3")
        assert m4.dependent_ids == ("m5",)

    def test_relationships_resolve_against_arena(self, tree):
        """Test read-time resolution of relationships."""
        m4 = tree.node("m4")

        assert [node.module_id for node in tree.dependencies_of(m4)] == ["m1", "m3"]
        assert [node.module_id for node in tree.dependents_of(m4)] == ["m5"]

    def test_soft_edges_are_not_tree_edges(self, tree):
        """Test that recommends edges are left out of the tree."""
        assert "m1" not in tree.node("m5").dependency_ids


class TestDepthPolicy:
    """Test minimum-depth assignment."""

    def test_depths(self, tree):
        """Test BFS depths in the brand catalog."""
        assert tree.node("m1").depth == 0
        assert tree.node("m2").depth == 0
        assert tree.node("m3").depth == 1
        assert tree.node("m4").depth == 1
        assert tree.node("m5").depth == EXPECTED_DEPTH_TWO

    def test_minimum_depth_across_roots(self, tree):
        """Test that a module reachable at several depths gets the smallest."""
        # m4 is one edge from m1 and two edges from m2
        assert tree.node("m4").depth == 1
        assert tree.node("m4").path == ("m1", "m4")

    def test_paths_run_from_a_root(self, tree):
        """Test path contents."""
        assert tree.path_to("m1") == ["m1"]
        assert tree.path_to("m3") == ["m2", "m3"]
        assert tree.path_to("m5") == ["m1", "m4", "m5"]

    def test_linear_chain(self, make_module, make_dependency):
        """Test depths along a chain."""
        graph = ModuleGraph(
            [make_module(mid) for mid in ("a", "b", "c", "d")],
            [make_dependency("b", "a"), make_dependency("c", "b"), make_dependency("d", "c")],
        )

        tree = DependencyTreeBuilder(graph).build()

        assert tree.node("d").depth == EXPECTED_DEPTH_THREE
        assert tree.path_to("d") == ["a", "b", "c", "d"]

    def test_cycle_members_are_unreachable(self, make_module, make_dependency):
        """Test that modules on a cycle get no depth and no path."""
        graph = ModuleGraph(
            [make_module("m1"), make_module("m2"), make_module("m3")],
            [make_dependency("m1", "m2"), make_dependency("m2", "m1")],
        )

        tree = DependencyTreeBuilder(graph).build()

        assert [node.module_id for node in tree] == ["m3"]
        assert tree.node("m1").depth is None
        assert not tree.node("m1").is_reachable
        assert tree.path_to("m1") == []

    def test_unknown_module_path(self, tree):
        assert tree.path_to("ghost") == []


class TestFlags:
    """Test availability flags on nodes."""

    def test_flags_without_completion(self, tree):
        """Test flags with nothing completed."""
        assert tree.node("m1").is_available
        assert tree.node("m1").prerequisites_met
        assert not tree.node("m3").is_available
        assert not tree.node("m3").prerequisites_met

    def test_flags_with_completion(self, brand_modules, brand_dependencies):
        """Test that the completed set feeds the flags."""
        tree = DependencyTreeBuilder(ModuleGraph(brand_modules, brand_dependencies)).build({"m2"})

        assert tree.node("m3").is_available

    def test_inactive_module_is_not_available(self, make_module):
        """Test that inactive modules have prerequisites met but are unavailable."""
        graph = ModuleGraph([make_module("m1", is_active=False)], [])

        node = DependencyTreeBuilder(graph).build().node("m1")

        assert node.prerequisites_met
        assert not node.is_available

    def test_status_feeds_flags(self, make_module, make_dependency):
        """Test that an approved prerequisite sets the dependent's flags."""
        graph = ModuleGraph(
            [make_module("m1", status=ModuleStatus.LOCKED), make_module("m2")],
            [make_dependency("m2", "m1")],
        )

        assert DependencyTreeBuilder(graph).build().node("m2").is_available

    def test_completed_module_is_not_available(self, tree_with_m1_done):
        """Test that a completed module keeps prerequisites met but is no longer available."""
        node = tree_with_m1_done.node("m1")

        assert node.prerequisites_met
        assert not node.is_available

    def test_completed_module_renders_as_unavailable(self, tree_with_m1_done):
        lines = format_dependency_tree(tree_with_m1_done).splitlines()

        assert lines[0] == "❌ Brand Foundation (M1) [prereq: ✓]"


class TestFormatDependencyTree:
    """Test text rendering."""

    def test_renders_roots_and_dependents(self, tree):
        """Test the rendering of the brand catalog."""
        text = format_dependency_tree(tree)
        lines = text.splitlines()

        assert lines[0] == "✅ Brand Foundation (M1) [prereq: ✓]"
        assert "  ❌ Brand Positioning (M4) [prereq: ✗]" in lines
        assert "    ❌ Visual Identity (M5) [prereq: ✗]" in lines
        assert text.endswith("\n")

    def test_shared_dependents_render_under_each_parent(self, tree):
        """Test that m4 appears under both m1 and m3."""
        lines = format_dependency_tree(tree).splitlines()

        assert sum("Brand Positioning" in line for line in lines) == EXPECTED_DEPTH_TWO

    def test_rendering_is_deterministic(self, tree):
        assert format_dependency_tree(tree) == format_dependency_tree(tree)

    def test_empty_tree(self):
        assert format_dependency_tree(DependencyTree()) == ""

    def test_soft_only_links_render_flat(self, make_module, make_dependency):
        """Test that modules linked only by soft edges are all roots."""
        graph = ModuleGraph(
            [make_module("m1"), make_module("m2")],
            [make_dependency("m2", "m1", DependencyType.BLOCKS)],
        )

        lines = format_dependency_tree(DependencyTreeBuilder(graph).build()).splitlines()

        assert len(lines) == EXPECTED_DEPTH_TWO
        assert all(not line.startswith(" ") for line in lines)
