"""
Single-call relationship configuration.

Each function expresses one relationship intent, for example "an Order has one
Payment, linked by ``Payment.order_id``", and emits the equivalent chain of
builder calls on a model-building context:

    >>> builder = ModelBuilder()
    >>> apply_one_to_many(builder, Author, Book, "books", Book.author_id)
    >>> apply_auto_include(builder, Author, "books")
    >>> builder.finalize()

Nothing is validated here. Missing properties, incompatible keys and
conflicting configuration are reported by the context when the model is
finalized.
"""

from typing import TYPE_CHECKING, Optional

from .base import DeleteBehavior

if TYPE_CHECKING:
    from .interfaces import ModelBuildingContext, RelationshipBuilderInterface
    from .selectors import Selector


def apply_one_to_one(
    builder: "ModelBuildingContext",
    principal: type,
    dependent: type,
    navigation: "Selector",
    foreign_key: "Selector",
    principal_key: Optional["Selector"] = None,
    is_required: bool = True,
    delete_behavior: DeleteBehavior = DeleteBehavior.CLIENT_SET_NULL,
) -> None:
    """
    Configure a one-to-one relationship where ``principal`` owns the navigation.

    Args:
        builder: Model-building context
        principal: Entity type holding the referenced key
        dependent: Entity type holding the foreign key
        navigation: Reference navigation on the principal
        foreign_key: Foreign key property on the dependent
        principal_key: Referenced property on the principal, defaults to its primary key
        is_required: Whether the foreign key is required
        delete_behavior: Policy applied to the dependent when the principal is deleted

    No inverse navigation is declared on the dependent.
    """
    relationship = (
        builder.entity(principal)
        .has_one(dependent, navigation)
        .with_one()
        .has_foreign_key(foreign_key, dependent=dependent)
        .on_delete(delete_behavior)
        .is_required(is_required)
    )
    _apply_principal_key(relationship, principal_key)


def apply_one_to_many(
    builder: "ModelBuildingContext",
    principal: type,
    dependent: type,
    navigation: "Selector",
    foreign_key: "Selector",
    principal_key: Optional["Selector"] = None,
    is_required: bool = False,
    delete_behavior: DeleteBehavior = DeleteBehavior.CLIENT_SET_NULL,
) -> None:
    """
    Configure a one-to-many relationship from the collection navigation on ``principal``.

    Args:
        builder: Model-building context
        principal: Entity type holding the referenced key
        dependent: Entity type holding the foreign key
        navigation: Collection navigation on the principal
        foreign_key: Foreign key property on the dependent
        principal_key: Referenced property on the principal, defaults to its primary key
        is_required: Whether the foreign key is required
        delete_behavior: Policy applied to dependents when the principal is deleted
    """
    relationship = (
        builder.entity(principal)
        .has_many(dependent, navigation)
        .with_one()
        .has_foreign_key(foreign_key)
        .on_delete(delete_behavior)
        .is_required(is_required)
    )
    _apply_principal_key(relationship, principal_key)


def apply_many_to_one(
    builder: "ModelBuildingContext",
    principal: type,
    dependent: type,
    navigation: "Selector",
    foreign_key: "Selector",
    principal_key: Optional["Selector"] = None,
    is_required: bool = False,
    delete_behavior: DeleteBehavior = DeleteBehavior.CLIENT_SET_NULL,
) -> None:
    """
    Configure a many-to-one relationship from the reference navigation on ``dependent``.

    The resulting foreign key is the same as the one ``apply_one_to_many``
    produces; only the side carrying the navigation differs.

    Args:
        builder: Model-building context
        principal: Entity type holding the referenced key
        dependent: Entity type holding the foreign key
        navigation: Reference navigation on the dependent pointing at the principal
        foreign_key: Foreign key property on the dependent
        principal_key: Referenced property on the principal, defaults to its primary key
        is_required: Whether the foreign key is required
        delete_behavior: Policy applied to dependents when the principal is deleted
    """
    relationship = (
        builder.entity(dependent)
        .has_one(principal, navigation)
        .with_many()
        .has_foreign_key(foreign_key)
        .on_delete(delete_behavior)
        .is_required(is_required)
    )
    _apply_principal_key(relationship, principal_key)


def apply_auto_include(builder: "ModelBuildingContext", entity_type: type, navigation: "Selector") -> None:
    """Load ``navigation`` on every query against ``entity_type``."""
    builder.entity(entity_type).navigation(navigation).auto_include()


def _apply_principal_key(relationship: "RelationshipBuilderInterface", principal_key: Optional["Selector"]) -> None:
    # Without an explicit key the principal's primary key is resolved at finalization.
    if principal_key is not None:
        relationship.has_principal_key(principal_key)
