"""Errors raised by the model-building context."""


class OrmRelationshipsError(Exception):
    """Base class for all errors raised by this package."""

    pass


class ModelConfigurationError(OrmRelationshipsError):
    """Raised when recorded configuration cannot be applied to the mapped classes."""

    pass


class ModelFinalizedError(OrmRelationshipsError):
    """Raised when a builder is used after ``finalize()``."""

    pass
