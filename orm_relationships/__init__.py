from .base import Cardinality, DeleteBehavior, RelationshipKind
from .builder import ModelBuilder
from .errors import ModelConfigurationError, ModelFinalizedError, OrmRelationshipsError
from .extensions import apply_auto_include, apply_many_to_one, apply_one_to_many, apply_one_to_one
from .interfaces import ModelBuildingContext
from .relationship import FinalizedModel, NavigationConfiguration, RelationshipConfiguration

__all__ = [
    "Cardinality",
    "DeleteBehavior",
    "RelationshipKind",
    "ModelBuilder",
    "ModelBuildingContext",
    "FinalizedModel",
    "NavigationConfiguration",
    "RelationshipConfiguration",
    "OrmRelationshipsError",
    "ModelConfigurationError",
    "ModelFinalizedError",
    "apply_one_to_one",
    "apply_one_to_many",
    "apply_many_to_one",
    "apply_auto_include",
]
