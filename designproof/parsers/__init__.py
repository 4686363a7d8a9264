"""Parser boundary: source text in, generic syntax tree out."""

from designproof.parsers.python_parser import PythonParser
from designproof.parsers.syntax import ParseFailure, Span, SyntaxNode

__all__ = ["ParseFailure", "PythonParser", "Span", "SyntaxNode"]
