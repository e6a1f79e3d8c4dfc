"""
Model-building context interfaces.

These ABCs are the contract the single-call relationship helpers in
``orm_relationships.extensions`` are written against:

- **ModelBuildingContext**: resolves an entity type builder
- **EntityTypeBuilderInterface**: declares navigations on one entity type
- **Reference/CollectionNavigationBuilderInterface**: chooses the inverse cardinality
- **ReferenceReference/ReferenceCollectionBuilderInterface**: binds keys, delete behavior
  and the required flag of one relationship
- **NavigationBuilderInterface**: configures an existing navigation

``orm_relationships.builder.ModelBuilder`` is the SQLAlchemy implementation.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Optional

from . import extensions
from .base import DeleteBehavior

if TYPE_CHECKING:
    from .selectors import Selector


class RelationshipBuilderInterface(ABC):
    """Settings shared by every relationship shape."""

    @abstractmethod
    def on_delete(self, delete_behavior: DeleteBehavior) -> "RelationshipBuilderInterface":
        """Set the policy applied to dependents when their principal is deleted."""
        pass

    @abstractmethod
    def is_required(self, required: bool = True) -> "RelationshipBuilderInterface":
        """Mark the foreign key as required (non-nullable) or optional."""
        pass

    @abstractmethod
    def has_foreign_key(self, foreign_key: "Selector") -> "RelationshipBuilderInterface":
        """Bind the foreign key property (or properties) of the dependent."""
        pass

    @abstractmethod
    def has_principal_key(self, principal_key: "Selector") -> "RelationshipBuilderInterface":
        """Bind the referenced key of the principal, overriding its primary key."""
        pass


class ReferenceReferenceBuilderInterface(RelationshipBuilderInterface):
    """One-to-one relationship. Either side may own the foreign key."""

    @abstractmethod
    def has_foreign_key(self, foreign_key: "Selector", dependent: Optional[type] = None) -> "ReferenceReferenceBuilderInterface":
        pass

    @abstractmethod
    def has_principal_key(self, principal_key: "Selector", principal: Optional[type] = None) -> "ReferenceReferenceBuilderInterface":
        pass


class ReferenceCollectionBuilderInterface(RelationshipBuilderInterface):
    """One-to-many relationship, declared from either side."""

    pass


class ReferenceNavigationBuilderInterface(ABC):
    """A reference navigation whose inverse cardinality is not chosen yet."""

    @abstractmethod
    def with_one(self) -> ReferenceReferenceBuilderInterface:
        pass

    @abstractmethod
    def with_many(self) -> ReferenceCollectionBuilderInterface:
        pass


class CollectionNavigationBuilderInterface(ABC):
    """A collection navigation whose inverse is a single reference."""

    @abstractmethod
    def with_one(self) -> ReferenceCollectionBuilderInterface:
        pass


class NavigationBuilderInterface(ABC):
    @abstractmethod
    def auto_include(self, enabled: bool = True) -> "NavigationBuilderInterface":
        """Load the navigation on every query against its entity type."""
        pass


class EntityTypeBuilderInterface(ABC):
    """Configuration scope of one entity type."""

    @abstractmethod
    def has_one(self, target: type, navigation: Optional["Selector"] = None) -> ReferenceNavigationBuilderInterface:
        pass

    @abstractmethod
    def has_many(self, target: type, navigation: Optional["Selector"] = None) -> CollectionNavigationBuilderInterface:
        pass

    @abstractmethod
    def navigation(self, navigation: "Selector") -> NavigationBuilderInterface:
        pass


class ModelBuildingContext(ABC):
    """
    Accumulates schema configuration for a set of entity types.

    The ``apply_*`` methods are shortcuts for the functions in
    ``orm_relationships.extensions`` with this context as the first argument.
    """

    @abstractmethod
    def entity(self, entity_type: type) -> EntityTypeBuilderInterface:
        """Resolve (declaring on first use) the configuration scope of an entity type."""
        pass

    def apply_one_to_one(self, principal: type, dependent: type, navigation: "Selector", foreign_key: "Selector", **options: Any) -> None:
        extensions.apply_one_to_one(self, principal, dependent, navigation, foreign_key, **options)

    def apply_one_to_many(self, principal: type, dependent: type, navigation: "Selector", foreign_key: "Selector", **options: Any) -> None:
        extensions.apply_one_to_many(self, principal, dependent, navigation, foreign_key, **options)

    def apply_many_to_one(self, principal: type, dependent: type, navigation: "Selector", foreign_key: "Selector", **options: Any) -> None:
        extensions.apply_many_to_one(self, principal, dependent, navigation, foreign_key, **options)

    def apply_auto_include(self, entity_type: type, navigation: "Selector") -> None:
        extensions.apply_auto_include(self, entity_type, navigation)
