"""
Tests for the orm_relationships package.

This directory contains unit tests for:
- Single-call relationship helpers (extensions.py)
- The fluent model builder (builder.py) and its finalization (mapper.py)
- Selector resolution (selectors.py)
- SQLModel table models
- The setup script (setup_database.py)
"""
