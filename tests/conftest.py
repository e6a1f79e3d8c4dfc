"""
Global fixtures for the test suite.

Every test that finalizes a model mutates the mapped classes it configures, so
the `models` fixture declares a fresh set of SQLAlchemy classes on a fresh
declarative base for each test:

- `Order` / `Payment`: one-to-one by primary key
- `Author` / `Book`: one-to-many by primary key (`Book.author_id`) or by the
  alternate key `Author.isbn` (`Book.author_isbn`)
- `Customer` / `Review`: `Customer.reviews` is already mapped with `relationship()`
- `Employee`: self-referencing through `Employee.manager_id`

Example:
    def test_something(models, builder):
        apply_one_to_many(builder, models.Author, models.Book, "books", models.Book.author_id)
        builder.finalize()

Run all tests with:
    pytest -v
"""

from types import SimpleNamespace
from typing import Optional

import pytest
from sqlalchemy import ForeignKey, String, create_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, relationship

from orm_relationships import ModelBuilder


@pytest.fixture
def models():
    """Fresh mapped classes on their own registry and metadata."""

    class Base(DeclarativeBase):
        pass

    class Order(Base):
        __tablename__ = "orders"

        id: Mapped[int] = mapped_column(primary_key=True)
        number: Mapped[str] = mapped_column(String(32))

    class Payment(Base):
        __tablename__ = "payments"

        id: Mapped[int] = mapped_column(primary_key=True)
        order_id: Mapped[Optional[int]] = mapped_column()
        amount: Mapped[float] = mapped_column(default=0.0)

    class Author(Base):
        __tablename__ = "authors"

        id: Mapped[int] = mapped_column(primary_key=True)
        isbn: Mapped[str] = mapped_column(String(20))
        name: Mapped[str] = mapped_column(String(100))

    class Book(Base):
        __tablename__ = "books"

        id: Mapped[int] = mapped_column(primary_key=True)
        title: Mapped[str] = mapped_column(String(200))
        author_id: Mapped[Optional[int]] = mapped_column()
        author_isbn: Mapped[Optional[str]] = mapped_column(String(20))

    class Customer(Base):
        __tablename__ = "customers"

        id: Mapped[int] = mapped_column(primary_key=True)
        name: Mapped[str] = mapped_column(String(100))
        reviews = relationship("Review")

    class Review(Base):
        __tablename__ = "reviews"

        id: Mapped[int] = mapped_column(primary_key=True)
        customer_id: Mapped[int] = mapped_column(ForeignKey("customers.id"))
        stars: Mapped[int] = mapped_column(default=5)

    class Employee(Base):
        __tablename__ = "employees"

        id: Mapped[int] = mapped_column(primary_key=True)
        name: Mapped[str] = mapped_column(String(100))
        manager_id: Mapped[Optional[int]] = mapped_column()

    return SimpleNamespace(
        Base=Base,
        Order=Order,
        Payment=Payment,
        Author=Author,
        Book=Book,
        Customer=Customer,
        Review=Review,
        Employee=Employee,
    )


@pytest.fixture
def builder():
    return ModelBuilder()


@pytest.fixture
def session_factory(models):
    """Call after finalizing: creates the tables in an in-memory SQLite database and returns a session maker."""
    engines = []

    def make_session() -> Session:
        engine = create_engine("sqlite:///:memory:", echo=False)
        models.Base.metadata.create_all(engine)
        engines.append(engine)
        return Session(engine)

    yield make_session

    for engine in engines:
        engine.dispose()