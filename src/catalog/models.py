"""Module and dependency models consumed by the dependency engine.

Models validate field shapes only. Graph-level defects such as self-loops,
dangling references and cycles are legal to construct; the engine detects
and reports them instead of refusing the input.
"""

from enum import Enum

from pydantic import BaseModel, Field


class ModuleStatus(str, Enum):
    """Lifecycle status of a module within a project.

    Approved and locked modules count as done for prerequisite purposes even
    when they are absent from a query's completed set.
    """

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    NEEDS_REVIEW = "needs_review"
    APPROVED = "approved"
    LOCKED = "locked"


SATISFYING_STATUSES = frozenset({ModuleStatus.APPROVED, ModuleStatus.LOCKED})


class DependencyType(str, Enum):
    """Kind of relationship between two modules.

    Only REQUIRES edges take part in ordering and prerequisite satisfaction.
    RECOMMENDS and BLOCKS edges are validated and reported but are advisory.
    """

    REQUIRES = "requires"
    RECOMMENDS = "recommends"
    BLOCKS = "blocks"


class Module(BaseModel):
    """A unit of strategic work in the catalog.

    Attributes:
        id: Unique module identifier
        code: Human-readable identifier (e.g. 'M1-FOUNDATION')
        name: Display name
        category: Free-form tag (e.g. 'foundation', 'visual')
        sort_order: Advisory ordering hint
        is_active: Inactive modules are never offered as available
        status: Current lifecycle status
    """

    model_config = {"frozen": True, "str_strip_whitespace": True}

    id: str = Field(min_length=1, description="Unique module identifier")
    code: str = Field(default="", description="Human-readable identifier")
    name: str = Field(default="", description="Display name")
    category: str = Field(default="", description="Free-form category tag")
    sort_order: int = Field(default=0, description="Advisory ordering hint")
    is_active: bool = Field(default=True, description="Whether the module is offered")
    status: ModuleStatus = Field(
        default=ModuleStatus.NOT_STARTED,
        description="Lifecycle status",
    )

    @property
    def display_name(self) -> str:
        """Name used in messages, falling back to the ID."""
        return self.name or self.id

    @property
    def is_satisfied_by_status(self) -> bool:
        """Whether the status alone satisfies a requires edge into this module."""
        return self.status in SATISFYING_STATUSES


class Dependency(BaseModel):
    """A directed edge: ``module_id`` depends on ``depends_on_module_id``.

    Attributes:
        id: Edge identifier
        module_id: The dependent module
        depends_on_module_id: The prerequisite module
        dependency_type: requires, recommends or blocks
        notes: Optional free text
    """

    model_config = {"frozen": True, "str_strip_whitespace": True}

    id: str = Field(min_length=1, description="Dependency identifier")
    module_id: str = Field(min_length=1, description="Dependent module ID")
    depends_on_module_id: str = Field(min_length=1, description="Prerequisite module ID")
    dependency_type: DependencyType = Field(description="Relationship type")
    notes: str | None = Field(default=None, description="Free-text notes")

    @property
    def is_hard(self) -> bool:
        """Whether this edge is a hard prerequisite (requires)."""
        return self.dependency_type is DependencyType.REQUIRES

    @property
    def is_self_reference(self) -> bool:
        """Whether the edge points a module at itself."""
        return self.module_id == self.depends_on_module_id
