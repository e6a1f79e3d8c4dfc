"""
Shared enumerations for relationship configuration.

``DeleteBehavior`` carries its own translation into SQLAlchemy terms: the
``ON DELETE`` clause of the foreign key constraint and the cascade options of
the principal-side ``relationship()``.
"""

from enum import Enum
from typing import Any, Optional


class Cardinality(str, Enum):
    """Shape of a navigation attribute."""

    REFERENCE = "reference"
    COLLECTION = "collection"


class RelationshipKind(str, Enum):
    ONE_TO_ONE = "one_to_one"
    ONE_TO_MANY = "one_to_many"
    MANY_TO_ONE = "many_to_one"


class DeleteBehavior(str, Enum):
    """
    What happens to dependents when their principal is deleted.

    The ``CLIENT_*`` behaviors are carried out by the ORM session only. The
    others are also written to the foreign key constraint as ``ON DELETE``.
    """

    CASCADE = "cascade"
    CLIENT_CASCADE = "client_cascade"
    SET_NULL = "set_null"
    CLIENT_SET_NULL = "client_set_null"
    RESTRICT = "restrict"
    NO_ACTION = "no_action"
    CLIENT_NO_ACTION = "client_no_action"

    @property
    def ondelete(self) -> Optional[str]:
        """``ON DELETE`` clause for the foreign key, or None when the database is left alone."""
        return _ONDELETE.get(self)

    @property
    def relationship_options(self) -> dict[str, Any]:
        """Keyword arguments for a ``relationship()`` declared on the principal."""
        return dict(_RELATIONSHIP_OPTIONS.get(self, {}))


_ONDELETE = {
    DeleteBehavior.CASCADE: "CASCADE",
    DeleteBehavior.SET_NULL: "SET NULL",
    DeleteBehavior.RESTRICT: "RESTRICT",
    DeleteBehavior.NO_ACTION: "NO ACTION",
}

# CLIENT_SET_NULL needs nothing: the session nulls the foreign key of loaded dependents by default.
_RELATIONSHIP_OPTIONS: dict[DeleteBehavior, dict[str, Any]] = {
    DeleteBehavior.CASCADE: {"cascade": "save-update, merge, delete", "passive_deletes": True},
    DeleteBehavior.CLIENT_CASCADE: {"cascade": "save-update, merge, delete"},
    DeleteBehavior.SET_NULL: {"passive_deletes": True},
    DeleteBehavior.RESTRICT: {"passive_deletes": "all"},
    DeleteBehavior.NO_ACTION: {"passive_deletes": "all"},
    DeleteBehavior.CLIENT_NO_ACTION: {"passive_deletes": "all"},
}

# Loader strategy used for auto-included navigations
AUTO_INCLUDE_LOADER = "selectin"
