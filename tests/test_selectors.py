"""
Tests for property selector resolution.

Run with: pytest tests/test_selectors.py -v
"""

import pytest
from sqlalchemy import inspect

from orm_relationships import ModelConfigurationError
from orm_relationships.selectors import declaring_class, navigation_name, resolve_columns


def test_navigation_name(models):
    assert navigation_name("books") == "books"
    assert navigation_name(models.Customer.reviews) == "reviews"


def test_navigation_name_rejects_columns(models):
    with pytest.raises(ModelConfigurationError):
        navigation_name(models.Book.__table__.c.author_id)


def test_declaring_class(models):
    assert declaring_class(models.Book.author_id) is models.Book
    assert declaring_class((models.Book.author_id, models.Book.author_isbn)) is models.Book
    assert declaring_class("author_id") is None


def test_resolve_by_name_attribute_and_column(models):
    table = models.Book.__table__
    assert resolve_columns(models.Book, "author_id") == [table.c.author_id]
    assert resolve_columns(models.Book, models.Book.author_id) == [table.c.author_id]
    assert resolve_columns(models.Book, table.c.author_id) == [table.c.author_id]


def test_resolve_composite(models):
    table = models.Book.__table__
    columns = resolve_columns(models.Book, ["author_id", models.Book.author_isbn])
    assert [column.key for column in columns] == ["author_id", "author_isbn"]
    assert all(column.table is table for column in columns)


def test_resolve_does_not_configure_mappers(models):
    resolve_columns(models.Review, "customer_id")
    assert not inspect(models.Review).configured


@pytest.mark.parametrize(
    "selector, message",
    [
        ("reviews", "is not a column property"),
        ("nope", "has no property 'nope'"),
        ((), "Empty property selector"),
        (42, "Cannot use 42 as a property selector"),
    ],
)
def test_resolve_errors(models, selector, message):
    with pytest.raises(ModelConfigurationError, match=message):
        resolve_columns(models.Customer, selector)


def test_resolve_foreign_column(models):
    with pytest.raises(ModelConfigurationError, match="does not belong to Customer"):
        resolve_columns(models.Customer, models.Book.__table__.c.author_id)
