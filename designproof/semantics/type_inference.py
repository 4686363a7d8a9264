"""Pluggable return-type inference used for diagnostic annotation only."""

from typing import Protocol

from designproof.parsers.syntax import SyntaxNode

UNKNOWN_TYPE = "unknown"


class TypeInferenceStrategy(Protocol):
    def infer_type(self, node: SyntaxNode) -> str:
        ...


class UnknownTypeStrategy:
    """Default strategy: every method returns ``unknown``."""

    def infer_type(self, node: SyntaxNode) -> str:
        return UNKNOWN_TYPE


class AnnotationTypeStrategy:
    """Read the declared return annotation of a function definition."""

    def infer_type(self, node: SyntaxNode) -> str:
        return_type = node.child_by_field("return_type")
        if return_type is None:
            return UNKNOWN_TYPE
        text = " ".join(return_type.source_text().split())
        return text or UNKNOWN_TYPE
