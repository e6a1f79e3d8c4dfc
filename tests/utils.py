"""Helpers for inspecting table metadata in assertions."""

from sqlalchemy import UniqueConstraint


def foreign_keys(table):
    """Foreign key constraints of `table` as (columns, referred columns, ondelete) tuples."""
    return {
        (tuple(constraint.column_keys), tuple(element.target_fullname for element in constraint.elements), constraint.ondelete)
        for constraint in table.foreign_key_constraints
    }


def unique_column_sets(table):
    return {frozenset(column.key for column in constraint.columns) for constraint in table.constraints if isinstance(constraint, UniqueConstraint)}
