"""Semantic model of classes, methods and their dependencies."""

from designproof.semantics.builder import SemanticModelBuilder
from designproof.semantics.model import (
    AttributeInfo,
    DependencyEdge,
    MethodInfo,
    SemanticModel,
    TypeInfo,
)
from designproof.semantics.type_inference import (
    AnnotationTypeStrategy,
    TypeInferenceStrategy,
    UnknownTypeStrategy,
)

__all__ = [
    "AnnotationTypeStrategy",
    "AttributeInfo",
    "DependencyEdge",
    "MethodInfo",
    "SemanticModel",
    "SemanticModelBuilder",
    "TypeInferenceStrategy",
    "TypeInfo",
    "UnknownTypeStrategy",
]
