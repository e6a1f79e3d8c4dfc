"""
Apply finalized relationship configuration to SQLAlchemy mapped classes.

This module bridges the gap between:
- Recorded configuration (relationship.py) - what the caller asked for
- SQLAlchemy metadata - ``ForeignKeyConstraint`` / ``UniqueConstraint`` on the
  tables, column nullability, and ``relationship()`` properties on the mappers

A model is applied in two passes. The first resolves every selector and
checks every record, navigation and auto-include target without touching the
mapped classes; a ``ModelConfigurationError`` raised there leaves them as they
were. The second pass writes tables and mappers and configures the registries.
Errors SQLAlchemy reports while configuring the mappers propagate unchanged.

When no navigation on the principal side covers a foreign key (a
many-to-one, or a one-to-one declared from the dependent), the principal
mapper gets a private ``relationship()`` named
``_<dependent table>_<foreign key columns>_dependents``. It carries the
delete behavior so the session deletes or nulls loaded dependents; it is
never an inverse of the public navigation.
"""

import logging
from typing import NamedTuple, Optional

from sqlalchemy import Column, ForeignKeyConstraint, Table, UniqueConstraint, and_
from sqlalchemy.orm import Mapper, RelationshipProperty, relationship

from .base import AUTO_INCLUDE_LOADER, DeleteBehavior, RelationshipKind
from .errors import ModelConfigurationError
from .relationship import FinalizedModel, RelationshipConfiguration
from .selectors import mapper_for, resolve_columns

logger = logging.getLogger(__name__)

# Table.info key: foreign key column keys -> {navigation name: declared on the principal}
NAVIGATIONS_INFO_KEY = "orm_relationships.navigations"


class ResolvedRelationship(NamedTuple):
    """A relationship record with its selectors resolved against the mapped tables."""

    config: RelationshipConfiguration
    principal: Mapper
    dependent: Mapper
    foreign_key: list[Column]
    principal_key: list[Column]
    uses_primary_key: bool

    @property
    def foreign_key_id(self) -> tuple:
        return (self.dependent.local_table, tuple(column.key for column in self.foreign_key))


class NavigationPlan(NamedTuple):
    """A ``relationship()`` to add to ``owner`` once every record has been checked."""

    owner: Mapper
    name: str
    target: type
    uselist: bool
    lazy: str
    on_principal: bool
    resolved: ResolvedRelationship


def apply_model(model: FinalizedModel) -> None:
    """
    Apply every relationship and navigation of ``model``, then configure the
    registries of the entity types involved.

    Raises:
        ModelConfigurationError: Before any table or mapper is changed, if a
            record cannot be resolved or a navigation cannot be added
    """
    registries = []
    for entity_type in model.entity_types:
        registry = mapper_for(entity_type).registry
        if registry not in registries:
            registries.append(registry)

    auto_included = {(nav.entity, nav.name) for nav in model.navigations if nav.auto_include}
    declared = {(r.navigation_owner, r.navigation) for r in model.relationships if r.navigation}
    existing_auto_includes = [
        (nav.entity, nav.name) for nav in model.navigations if nav.auto_include and (nav.entity, nav.name) not in declared
    ]

    # Pass 1: resolve and check
    resolved = [resolve_relationship(config) for config in model.relationships]
    plans = plan_navigations(resolved, auto_included)
    for entity_type, name in existing_auto_includes:
        _existing_navigation(entity_type, name)

    # Pass 2: write
    for relationship_ in resolved:
        _write_keys(relationship_)
    for plan in plans:
        _add_navigation(plan)
    for entity_type, name in existing_auto_includes:
        enable_auto_include(entity_type, name)

    for registry in registries:
        registry.configure()
    for relationship_ in resolved:
        logger.debug("Applied %s", relationship_.config.describe())


def resolve_relationship(config: RelationshipConfiguration) -> ResolvedRelationship:
    """Resolve the key selectors of ``config`` and check it can be applied."""
    if config.kind is None:
        raise ModelConfigurationError(f"{config.label} was declared without with_one() or with_many()")
    if config.foreign_key is None:
        raise ModelConfigurationError(f"{config.label} has no foreign key")
    if config.delete_behavior == DeleteBehavior.SET_NULL and config.is_required:
        raise ModelConfigurationError(f"{config.label} is required and cannot use {DeleteBehavior.SET_NULL.value}")

    principal = mapper_for(config.principal)
    dependent = mapper_for(config.dependent)

    foreign_key = resolve_columns(config.dependent, config.foreign_key)
    primary_key = list(principal.primary_key)
    if config.principal_key is None:
        principal_key = primary_key
    else:
        principal_key = resolve_columns(config.principal, config.principal_key)

    if len(foreign_key) != len(principal_key):
        raise ModelConfigurationError(
            f"{config.label}: foreign key has {len(foreign_key)} column(s) "
            f"but the principal key of {config.principal.__name__} has {len(principal_key)}"
        )

    return ResolvedRelationship(
        config=config,
        principal=principal,
        dependent=dependent,
        foreign_key=foreign_key,
        principal_key=principal_key,
        uses_primary_key=set(principal_key) == set(primary_key),
    )


def plan_navigations(resolved: list[ResolvedRelationship], auto_included: set) -> list[NavigationPlan]:
    """
    Work out every ``relationship()`` the model adds, including the private
    principal-side ones that carry delete behavior.

    Raises:
        ModelConfigurationError: If a navigation name is already mapped on its owner
    """
    plans = []
    on_principal = set()
    by_foreign_key: dict[tuple, ResolvedRelationship] = {}

    for relationship_ in resolved:
        config = relationship_.config
        # the last record over a foreign key also sets its ON DELETE clause
        by_foreign_key[relationship_.foreign_key_id] = relationship_
        if config.navigation is None:
            continue
        if config.navigation_on_dependent:
            owner, target = relationship_.dependent, config.principal
        else:
            owner, target = relationship_.principal, config.dependent
            on_principal.add(relationship_.foreign_key_id)
        eager = (config.navigation_owner, config.navigation) in auto_included
        plans.append(
            NavigationPlan(
                owner=owner,
                name=config.navigation,
                target=target,
                uselist=config.uselist,
                lazy=AUTO_INCLUDE_LOADER if eager else "select",
                on_principal=not config.navigation_on_dependent,
                resolved=relationship_,
            )
        )

    for foreign_key_id, relationship_ in by_foreign_key.items():
        table, keys = foreign_key_id
        mapped = _mapped_navigations(table, keys)
        if foreign_key_id in on_principal or any(mapped.values()):
            continue
        name = f"_{table.name}_{'_'.join(keys)}_dependents"
        if name in mapped:
            continue
        plans.append(
            NavigationPlan(
                owner=relationship_.principal,
                name=name,
                target=relationship_.config.dependent,
                uselist=relationship_.config.kind != RelationshipKind.ONE_TO_ONE,
                lazy="select",
                on_principal=True,
                resolved=relationship_,
            )
        )

    seen = set()
    for plan in plans:
        label = f"{plan.owner.class_.__name__}.{plan.name}"
        if plan.owner.has_property(plan.name):
            existing = plan.owner.get_property(plan.name, _configure_mappers=False)
            kind = "navigation" if isinstance(existing, RelationshipProperty) else "property"
            raise ModelConfigurationError(f"{label} collides with an already mapped {kind}")
        if (plan.owner, plan.name) in seen:
            raise ModelConfigurationError(f"{label} is declared by more than one relationship")
        seen.add((plan.owner, plan.name))
    return plans


def enable_auto_include(entity_type: type, name: str) -> None:
    """Switch a relationship already mapped on ``entity_type`` to the auto-include loader."""
    prop = _existing_navigation(entity_type, name)
    prop.lazy = AUTO_INCLUDE_LOADER
    # The loader is looked up from strategy_key when the mapper is configured;
    # lazy is only turned into strategy_key by the constructor.
    prop.strategy_key = (("lazy", AUTO_INCLUDE_LOADER),)
    logger.debug("Auto-including %s.%s", entity_type.__name__, name)


def _existing_navigation(entity_type: type, name: str) -> RelationshipProperty:
    mapper = mapper_for(entity_type)
    if not mapper.has_property(name):
        raise ModelConfigurationError(f"{entity_type.__name__} has no navigation {name!r} to auto-include")
    prop = mapper.get_property(name, _configure_mappers=False)
    if not isinstance(prop, RelationshipProperty):
        raise ModelConfigurationError(f"{entity_type.__name__}.{name} is not a navigation")
    if mapper.configured:
        raise ModelConfigurationError(f"Mapper for {entity_type.__name__} is already configured; cannot change how {name!r} loads")
    return prop


def _write_keys(resolved: ResolvedRelationship) -> None:
    config = resolved.config
    if config.is_required is not None:
        for column in resolved.foreign_key:
            if not column.primary_key:
                column.nullable = not config.is_required

    _ensure_foreign_key(resolved.dependent.local_table, resolved.foreign_key, resolved.principal_key, config.delete_behavior.ondelete)
    if not resolved.uses_primary_key:
        _ensure_unique(resolved.principal.local_table, resolved.principal_key)
    if config.kind == RelationshipKind.ONE_TO_ONE:
        _ensure_unique(resolved.dependent.local_table, resolved.foreign_key)

    config.principal_table = resolved.principal.local_table.name
    config.dependent_table = resolved.dependent.local_table.name
    config.foreign_key_columns = [column.name for column in resolved.foreign_key]
    config.principal_key_columns = [column.name for column in resolved.principal_key]
    config.uses_primary_key = resolved.uses_primary_key


def _add_navigation(plan: NavigationPlan) -> None:
    resolved = plan.resolved
    config = resolved.config
    options = {
        "primaryjoin": and_(*[pk == fk for pk, fk in zip(resolved.principal_key, resolved.foreign_key)]),
        "foreign_keys": resolved.foreign_key,
        "uselist": plan.uselist,
        "lazy": plan.lazy,
    }
    if plan.on_principal:
        options.update(config.delete_behavior.relationship_options)
    if config.principal is config.dependent:
        options["remote_side"] = resolved.foreign_key if plan.on_principal else resolved.principal_key

    table, keys = resolved.foreign_key_id
    mapped = _mapped_navigations(table, keys)
    if mapped:
        options["overlaps"] = ",".join(mapped)

    plan.owner.add_property(plan.name, relationship(plan.target, **options))
    table.info.setdefault(NAVIGATIONS_INFO_KEY, {}).setdefault(keys, {})[plan.name] = plan.on_principal


def _mapped_navigations(table: Table, keys: tuple) -> dict[str, bool]:
    """Navigations this module already mapped over ``keys`` of ``table``."""
    return dict(table.info.get(NAVIGATIONS_INFO_KEY, {}).get(keys, {}))


def _ensure_foreign_key(table: Table, columns: list[Column], referred: list[Column], ondelete: Optional[str]) -> None:
    keys = [column.key for column in columns]
    targets = [f"{column.table.fullname}.{column.key}" for column in referred]
    for constraint in table.foreign_key_constraints:
        if list(constraint.column_keys) == keys and [e.target_fullname for e in constraint.elements] == targets:
            if ondelete is not None:
                constraint.ondelete = ondelete
            return
    table.append_constraint(ForeignKeyConstraint(keys, referred, ondelete=ondelete))


def _ensure_unique(table: Table, columns: list[Column]) -> None:
    wanted = {column.key for column in columns}
    if wanted == {column.key for column in table.primary_key.columns}:
        return
    for constraint in table.constraints:
        if isinstance(constraint, UniqueConstraint) and {column.key for column in constraint.columns} == wanted:
            return
    table.append_constraint(UniqueConstraint(*[column.key for column in columns]))
