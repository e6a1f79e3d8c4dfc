"""
Property selectors.

A selector names one or more properties of a mapped class:

- an attribute name: ``"order_id"``
- a mapped attribute: ``Payment.order_id``
- a table column: ``Payment.__table__.c.order_id``
- a tuple or list of the above for composite keys

Navigation selectors are a name or a mapped attribute. Selectors are kept as
given and resolved against the mapper only when the model is finalized.
"""

from typing import Any, Iterator, Sequence, Union

from sqlalchemy import Column, inspect
from sqlalchemy.orm import ColumnProperty, Mapper, QueryableAttribute

from .errors import ModelConfigurationError

Selector = Union[str, QueryableAttribute, Column, Sequence[Any]]


def navigation_name(selector: Selector) -> str:
    """Attribute name of a navigation selector."""
    if isinstance(selector, str):
        return selector
    key = getattr(selector, "key", None)
    if isinstance(key, str) and hasattr(selector, "class_"):
        return key
    raise ModelConfigurationError(f"Cannot use {selector!r} as a navigation; pass an attribute name or a mapped attribute")


def declaring_class(selector: Selector):
    """Class a mapped-attribute selector belongs to, or None if the selector does not say."""
    for item in _flatten(selector):
        owner = getattr(item, "class_", None)
        if isinstance(owner, type):
            return owner
    return None


def mapper_for(entity_type: type) -> Mapper:
    mapper = inspect(entity_type, raiseerr=False)
    if not isinstance(mapper, Mapper):
        raise ModelConfigurationError(f"{entity_type!r} is not a mapped class")
    return mapper


def resolve_columns(entity_type: type, selector: Selector) -> list[Column]:
    """
    Resolve a property selector to the table columns of ``entity_type``.

    Raises:
        ModelConfigurationError: If any part of the selector does not name a
            column-mapped property of ``entity_type``
    """
    mapper = mapper_for(entity_type)
    table = mapper.local_table
    columns = []
    for item in _flatten(selector):
        if isinstance(item, Column):
            if not table.c.contains_column(item):
                raise ModelConfigurationError(f"Column {item} does not belong to {entity_type.__name__}")
            columns.append(item)
            continue

        if isinstance(item, str):
            name = item
        else:
            owner = getattr(item, "class_", None)
            name = getattr(item, "key", None)
            if not isinstance(name, str) or not isinstance(owner, type):
                raise ModelConfigurationError(f"Cannot use {item!r} as a property selector")
            if not issubclass(entity_type, owner):
                raise ModelConfigurationError(f"{owner.__name__}.{name} is not a property of {entity_type.__name__}")

        columns.append(_column_for(mapper, entity_type, name))

    if not columns:
        raise ModelConfigurationError(f"Empty property selector for {entity_type.__name__}")
    return columns


def _column_for(mapper: Mapper, entity_type: type, name: str) -> Column:
    if mapper.has_property(name):
        prop = mapper.get_property(name, _configure_mappers=False)
        if not isinstance(prop, ColumnProperty):
            raise ModelConfigurationError(f"{entity_type.__name__}.{name} is not a column property")
        return prop.columns[0]
    column = mapper.local_table.c.get(name)
    if column is None:
        raise ModelConfigurationError(f"{entity_type.__name__} has no property {name!r}")
    return column


def _flatten(selector: Selector) -> Iterator[Any]:
    if isinstance(selector, (list, tuple)):
        for item in selector:
            yield from _flatten(item)
    else:
        yield selector
