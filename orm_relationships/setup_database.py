"""
Database setup script for models configured with a ModelBuilder.

This script:
1. Imports a configuration function ``configure(builder)``
2. Runs it against a fresh ModelBuilder and finalizes the model
3. Prints the configured relationships
4. Creates all tables of the involved entity types (unless --dry-run)

Usage:
    orm-relationships-setup --database-url sqlite:///app.db --configure myapp.schema:configure
"""

import argparse
import importlib
import os
from typing import Callable, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from .builder import ModelBuilder
from .relationship import FinalizedModel
from .selectors import mapper_for

DEFAULT_DATABASE_URL = "sqlite:///:memory:"


def load_configure(target: str) -> Callable[[ModelBuilder], None]:
    """Import ``package.module:function``."""
    module_name, _, attribute = target.partition(":")
    if not module_name or not attribute:
        raise ValueError(f"Expected 'module:function', got {target!r}")
    module = importlib.import_module(module_name)
    configure = getattr(module, attribute, None)
    if not callable(configure):
        raise ValueError(f"{target!r} is not a callable")
    return configure


def build_model(configure: Callable[[ModelBuilder], None]) -> FinalizedModel:
    """Run ``configure`` against a new builder and finalize it."""
    builder = ModelBuilder()
    configure(builder)
    return builder.finalize()


def describe_model(model: FinalizedModel) -> list[str]:
    lines = [relationship.describe() for relationship in model.relationships]
    for navigation in model.navigations:
        if navigation.auto_include:
            lines.append(f"{navigation.label}: auto-included")
    return lines


def create_tables(engine: Engine, model: FinalizedModel) -> list[str]:
    """Create the tables of every entity type in ``model``; returns the table names."""
    tables = []
    metadatas = []
    for entity_type in model.entity_types:
        table = mapper_for(entity_type).local_table
        tables.append(table)
        if table.metadata not in metadatas:
            metadatas.append(table.metadata)
    for metadata in metadatas:
        metadata.create_all(engine, tables=[table for table in tables if table.metadata is metadata])
    return [table.name for table in tables]


def setup_database(database_url: str, configure: str, dry_run: bool = False) -> FinalizedModel:
    """Complete database setup."""
    print(f"Loading model configuration: {configure}")
    model = build_model(load_configure(configure))
    print(f"✓ Model finalized ({len(model.relationships)} relationship(s))")
    for line in describe_model(model):
        print(f"  {line}")

    if dry_run:
        print("Dry run, no tables created")
        return model

    print(f"Setting up database: {database_url}")
    engine = create_engine(database_url, echo=False)
    try:
        names = create_tables(engine, model)
    finally:
        engine.dispose()
    print(f"✓ Tables created: {', '.join(names)}")
    print("\n✅ Database setup complete!")
    return model


def main(argv: Optional[list[str]] = None):
    parser = argparse.ArgumentParser(description="Finalize a relationship model and create its tables")
    parser.add_argument("--database-url", default=os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL), help="SQLAlchemy database URL (default: $DATABASE_URL)")
    parser.add_argument("--configure", required=True, help="Configuration function as module:function, called with a ModelBuilder")
    parser.add_argument("--dry-run", action="store_true", help="Finalize and print the model without touching the database")

    args = parser.parse_args(argv)
    setup_database(args.database_url, args.configure, dry_run=args.dry_run)


if __name__ == "__main__":
    main()
