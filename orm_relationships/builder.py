"""
Fluent model builder for SQLAlchemy mapped classes.

``ModelBuilder`` records entity, navigation and relationship configuration
without touching the mapped classes. ``finalize()`` resolves every selector,
checks the recorded configuration and applies it through
``orm_relationships.mapper``.

Example:

    >>> builder = ModelBuilder()
    >>> (
    ...     builder.entity(Author)
    ...     .has_many(Book, "books")
    ...     .with_one()
    ...     .has_foreign_key(Book.author_id)
    ...     .on_delete(DeleteBehavior.CASCADE)
    ... )
    >>> builder.entity(Author).navigation("books").auto_include()
    >>> model = builder.finalize()
    >>> model.find_relationship(Author, "books").foreign_key_columns
    ['author_id']
"""

import logging
from typing import Optional

from .base import Cardinality, DeleteBehavior, RelationshipKind
from .errors import ModelConfigurationError, ModelFinalizedError
from .interfaces import (
    CollectionNavigationBuilderInterface,
    EntityTypeBuilderInterface,
    ModelBuildingContext,
    NavigationBuilderInterface,
    ReferenceCollectionBuilderInterface,
    ReferenceNavigationBuilderInterface,
    ReferenceReferenceBuilderInterface,
)
from .mapper import apply_model
from .relationship import FinalizedModel, NavigationConfiguration, RelationshipConfiguration
from .selectors import Selector, declaring_class, navigation_name

logger = logging.getLogger(__name__)


class ModelBuilder(ModelBuildingContext):
    """Model-building context for one model-building pass."""

    def __init__(self):
        self._entities: dict[type, EntityTypeBuilder] = {}
        self._relationships: list[RelationshipConfiguration] = []
        self._navigations: dict[tuple[type, str], NavigationConfiguration] = {}
        self._conflicts: list[str] = []
        self._model: Optional[FinalizedModel] = None

    def entity(self, entity_type: type) -> "EntityTypeBuilder":
        self._check_not_finalized()
        if entity_type not in self._entities:
            self._entities[entity_type] = EntityTypeBuilder(self, entity_type)
        return self._entities[entity_type]

    @property
    def entity_types(self) -> list[type]:
        return list(self._entities)

    @property
    def relationships(self) -> list[RelationshipConfiguration]:
        return list(self._relationships)

    @property
    def navigations(self) -> list[NavigationConfiguration]:
        return list(self._navigations.values())

    @property
    def finalized(self) -> bool:
        return self._model is not None

    @property
    def model(self) -> Optional[FinalizedModel]:
        """The finalized model, None before ``finalize()``."""
        return self._model

    def finalize(self) -> FinalizedModel:
        """
        Apply the recorded configuration to the mapped classes.

        Returns:
            The applied configuration with resolved key columns

        Raises:
            ModelConfigurationError: If the configuration conflicts with itself
                or cannot be resolved against the mapped classes
            ModelFinalizedError: If the builder was already finalized
        """
        self._check_not_finalized()
        if self._conflicts:
            raise ModelConfigurationError("Conflicting configuration: " + "; ".join(self._conflicts))

        entity_types = list(self._entities)
        for relationship in self._relationships:
            for entity_type in (relationship.principal, relationship.dependent):
                if entity_type not in entity_types:
                    entity_types.append(entity_type)

        model = FinalizedModel(
            entity_types=entity_types,
            relationships=self._relationships,
            navigations=list(self._navigations.values()),
        )
        apply_model(model)
        self._model = model
        logger.info(
            "Finalized model: %d entity type(s), %d relationship(s)",
            len(model.entity_types),
            len(model.relationships),
        )
        return model

    def _check_not_finalized(self) -> None:
        if self._model is not None:
            raise ModelFinalizedError("Model is already finalized; create a new ModelBuilder")

    def _conflict(self, message: str) -> None:
        logger.debug("Recorded conflict: %s", message)
        self._conflicts.append(message)

    def _navigation(self, entity_type: type, name: str, target: Optional[type] = None, cardinality: Optional[Cardinality] = None) -> NavigationConfiguration:
        key = (entity_type, name)
        navigation = self._navigations.get(key)
        if navigation is None:
            navigation = NavigationConfiguration(entity=entity_type, name=name)
            self._navigations[key] = navigation
        if target is None:
            return navigation

        if navigation.target is None:
            navigation.target = target
            navigation.cardinality = cardinality
        elif navigation.target is not target or navigation.cardinality != cardinality:
            self._conflict(
                f"{navigation.label} is configured as a {navigation.cardinality.value} navigation to "
                f"{navigation.target.__name__} and again as a {cardinality.value} navigation to {target.__name__}"
            )
        return navigation

    def _relationship(self, owner: type, target: type, navigation: Optional[str]) -> RelationshipConfiguration:
        if navigation is not None:
            for existing in self._relationships:
                if existing.navigation_owner is owner and existing.navigation == navigation:
                    return existing
        relationship = RelationshipConfiguration(
            principal=owner,
            dependent=target,
            navigation_owner=owner,
            navigation_target=target,
            navigation=navigation,
        )
        self._relationships.append(relationship)
        return relationship

    def _set_kind(self, relationship: RelationshipConfiguration, kind: RelationshipKind) -> None:
        if relationship.kind is not None and relationship.kind != kind:
            self._conflict(f"{relationship.label} is configured as {relationship.kind.value} and again as {kind.value}")
            return
        relationship.kind = kind
        if kind == RelationshipKind.MANY_TO_ONE:
            relationship.principal = relationship.navigation_target
            relationship.dependent = relationship.navigation_owner
            relationship.navigation_on_dependent = True
        elif kind == RelationshipKind.ONE_TO_MANY:
            relationship.principal = relationship.navigation_owner
            relationship.dependent = relationship.navigation_target
            relationship.navigation_on_dependent = False


class EntityTypeBuilder(EntityTypeBuilderInterface):
    def __init__(self, model: ModelBuilder, entity_type: type):
        self._model = model
        self.entity_type = entity_type

    def has_one(self, target: type, navigation: Optional[Selector] = None) -> "ReferenceNavigationBuilder":
        """Declare a reference navigation to ``target``."""
        self._model._check_not_finalized()
        name = self._declare(target, navigation, Cardinality.REFERENCE)
        return ReferenceNavigationBuilder(self._model, self._model._relationship(self.entity_type, target, name))

    def has_many(self, target: type, navigation: Optional[Selector] = None) -> "CollectionNavigationBuilder":
        """Declare a collection navigation to ``target``."""
        self._model._check_not_finalized()
        name = self._declare(target, navigation, Cardinality.COLLECTION)
        return CollectionNavigationBuilder(self._model, self._model._relationship(self.entity_type, target, name))

    def navigation(self, navigation: Selector) -> "NavigationBuilder":
        """Configure a navigation declared by a relationship or already mapped on the class."""
        self._model._check_not_finalized()
        return NavigationBuilder(self._model, self._model._navigation(self.entity_type, navigation_name(navigation)))

    def _declare(self, target: type, navigation: Optional[Selector], cardinality: Cardinality) -> Optional[str]:
        if navigation is None:
            return None
        name = navigation_name(navigation)
        self._model._navigation(self.entity_type, name, target, cardinality)
        return name


class ReferenceNavigationBuilder(ReferenceNavigationBuilderInterface):
    def __init__(self, model: ModelBuilder, relationship: RelationshipConfiguration):
        self._model = model
        self._relationship = relationship

    def with_one(self) -> "ReferenceReferenceBuilder":
        self._model._check_not_finalized()
        self._model._set_kind(self._relationship, RelationshipKind.ONE_TO_ONE)
        return ReferenceReferenceBuilder(self._model, self._relationship)

    def with_many(self) -> "ReferenceCollectionBuilder":
        self._model._check_not_finalized()
        self._model._set_kind(self._relationship, RelationshipKind.MANY_TO_ONE)
        return ReferenceCollectionBuilder(self._model, self._relationship)


class CollectionNavigationBuilder(CollectionNavigationBuilderInterface):
    def __init__(self, model: ModelBuilder, relationship: RelationshipConfiguration):
        self._model = model
        self._relationship = relationship

    def with_one(self) -> "ReferenceCollectionBuilder":
        self._model._check_not_finalized()
        self._model._set_kind(self._relationship, RelationshipKind.ONE_TO_MANY)
        return ReferenceCollectionBuilder(self._model, self._relationship)


class _RelationshipBuilder:
    def __init__(self, model: ModelBuilder, relationship: RelationshipConfiguration):
        self._model = model
        self.relationship = relationship

    def on_delete(self, delete_behavior: DeleteBehavior):
        self._model._check_not_finalized()
        self.relationship.delete_behavior = DeleteBehavior(delete_behavior)
        return self

    def is_required(self, required: bool = True):
        self._model._check_not_finalized()
        self.relationship.is_required = required
        return self


class ReferenceCollectionBuilder(_RelationshipBuilder, ReferenceCollectionBuilderInterface):
    """One-to-many relationship; the principal and dependent follow from how it was declared."""

    def has_foreign_key(self, foreign_key: Selector) -> "ReferenceCollectionBuilder":
        self._model._check_not_finalized()
        self.relationship.foreign_key = foreign_key
        return self

    def has_principal_key(self, principal_key: Selector) -> "ReferenceCollectionBuilder":
        self._model._check_not_finalized()
        self.relationship.principal_key = principal_key
        return self


class ReferenceReferenceBuilder(_RelationshipBuilder, ReferenceReferenceBuilderInterface):
    """
    One-to-one relationship.

    By default the declaring entity is the principal. Passing ``dependent`` to
    ``has_foreign_key`` (or using a mapped attribute of the declaring entity as
    the foreign key) makes the declaring entity the dependent instead.
    """

    def has_foreign_key(self, foreign_key: Selector, dependent: Optional[type] = None) -> "ReferenceReferenceBuilder":
        self._model._check_not_finalized()
        if dependent is None:
            dependent = declaring_class(foreign_key)
        if dependent is not None:
            self._orient(dependent=dependent)
        self.relationship.foreign_key = foreign_key
        return self

    def has_principal_key(self, principal_key: Selector, principal: Optional[type] = None) -> "ReferenceReferenceBuilder":
        self._model._check_not_finalized()
        if principal is None:
            principal = declaring_class(principal_key)
        if principal is not None:
            self._orient(principal=principal)
        self.relationship.principal_key = principal_key
        return self

    def _orient(self, dependent: Optional[type] = None, principal: Optional[type] = None) -> None:
        relationship = self.relationship
        owner, target = relationship.navigation_owner, relationship.navigation_target
        if owner is target:
            return

        if dependent is target or principal is owner:
            relationship.principal, relationship.dependent = owner, target
            relationship.navigation_on_dependent = False
        elif dependent is owner or principal is target:
            relationship.principal, relationship.dependent = target, owner
            relationship.navigation_on_dependent = True
        else:
            other = (dependent or principal).__name__
            self._model._conflict(f"{other} is not part of the one-to-one relationship {relationship.label}")


class NavigationBuilder(NavigationBuilderInterface):
    def __init__(self, model: ModelBuilder, navigation: NavigationConfiguration):
        self._model = model
        self.navigation = navigation

    def auto_include(self, enabled: bool = True) -> "NavigationBuilder":
        self._model._check_not_finalized()
        self.navigation.auto_include = enabled
        return self
