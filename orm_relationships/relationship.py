"""
Recorded relationship configuration.

These Pydantic models are what the model builder accumulates during a
model-building pass. Selectors are stored exactly as the caller passed them;
the ``foreign_key_columns`` / ``principal_key_columns`` fields are filled in
when the model is finalized and the selectors are resolved against the
mapped tables.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from .base import Cardinality, DeleteBehavior, RelationshipKind


class NavigationConfiguration(BaseModel):
    """
    A navigation attribute on an entity type.

    Attributes:
        entity: Mapped class declaring the navigation
        name: Attribute name of the navigation
        target: Related mapped class, None when the navigation was only
            referenced through ``navigation()`` and is expected to be mapped already
        cardinality: Reference or collection, None when unknown
        auto_include: Whether every query against ``entity`` loads it eagerly
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, validate_assignment=True)

    entity: type
    name: str
    target: Optional[type] = None
    cardinality: Optional[Cardinality] = None
    auto_include: bool = False

    @property
    def label(self) -> str:
        return f"{self.entity.__name__}.{self.name}"


class RelationshipConfiguration(BaseModel):
    """
    One foreign key relationship between a principal and a dependent entity type.

    Attributes:
        kind: One-to-one, one-to-many or many-to-one; None until ``with_one()`` /
            ``with_many()`` is called
        principal: Entity type holding the referenced key
        dependent: Entity type holding the foreign key
        navigation_owner: Entity type the relationship was declared from
        navigation_target: Entity type the navigation points at
        navigation: Navigation attribute name, None for a relationship without one
        navigation_on_dependent: True when the navigation points from dependent to principal
        foreign_key: Foreign key selector on the dependent
        principal_key: Explicit principal key selector, None for the primary key
        is_required: Foreign key nullability override, None to keep the column as declared
        delete_behavior: Policy applied to dependents when the principal is deleted
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, validate_assignment=True)

    kind: Optional[RelationshipKind] = None
    principal: type
    dependent: type
    navigation_owner: type
    navigation_target: type
    navigation: Optional[str] = None
    navigation_on_dependent: bool = False
    foreign_key: Any = None
    principal_key: Any = None
    is_required: Optional[bool] = None
    delete_behavior: DeleteBehavior = DeleteBehavior.CLIENT_SET_NULL

    # Resolved at finalization
    principal_table: Optional[str] = None
    dependent_table: Optional[str] = None
    foreign_key_columns: list[str] = Field(default_factory=list)
    principal_key_columns: list[str] = Field(default_factory=list)
    uses_primary_key: Optional[bool] = None

    @property
    def uselist(self) -> bool:
        return self.kind == RelationshipKind.ONE_TO_MANY

    @property
    def label(self) -> str:
        name = self.navigation or "<no navigation>"
        return f"{self.navigation_owner.__name__}.{name}"

    def describe(self) -> str:
        """One-line summary, e.g. ``Author.books: one_to_many books(author_id) -> authors(id)``."""
        kind = self.kind.value if self.kind else "incomplete"
        fk = ", ".join(self.foreign_key_columns) or "?"
        pk = ", ".join(self.principal_key_columns) or "?"
        required = {True: "required", False: "optional", None: "nullability as declared"}[self.is_required]
        return (
            f"{self.label}: {kind} {self.dependent_table or self.dependent.__name__}({fk})"
            f" -> {self.principal_table or self.principal.__name__}({pk})"
            f" [{required}, on delete {self.delete_behavior.value}]"
        )


class FinalizedModel(BaseModel):
    """Everything a ``ModelBuilder`` applied, available for inspection after ``finalize()``."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    entity_types: list[type] = Field(default_factory=list)
    relationships: list[RelationshipConfiguration] = Field(default_factory=list)
    navigations: list[NavigationConfiguration] = Field(default_factory=list)

    def find_relationship(self, entity: type, navigation: str) -> Optional[RelationshipConfiguration]:
        """Get the relationship declared through ``entity.navigation``."""
        for relationship in self.relationships:
            if relationship.navigation_owner is entity and relationship.navigation == navigation:
                return relationship
        return None

    def relationships_between(self, principal: type, dependent: type) -> list[RelationshipConfiguration]:
        return [r for r in self.relationships if r.principal is principal and r.dependent is dependent]

    def auto_included(self, entity: type) -> list[str]:
        """Names of the navigations of ``entity`` that are loaded on every query."""
        return [nav.name for nav in self.navigations if nav.entity is entity and nav.auto_include]
