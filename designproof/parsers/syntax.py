"""Generic syntax tree consumed by the semantic model builder."""

from dataclasses import dataclass
from typing import Iterator, Optional


class ParseFailure(Exception):
    """Source text could not be turned into a syntax tree."""

    def __init__(self, message: str, line: int = 0, column: int = 0):
        super().__init__(f"{message} (line {line}, column {column})")
        self.message = message
        self.line = line
        self.column = column


@dataclass(frozen=True)
class Span:
    """Source span. Lines are 1-indexed, columns 0-indexed."""

    start_line: int
    start_column: int
    end_line: int
    end_column: int

    def contains_line(self, line: int) -> bool:
        return self.start_line <= line <= self.end_line

    def to_dict(self) -> dict[str, int]:
        return {
            "start_line": self.start_line,
            "start_column": self.start_column,
            "end_line": self.end_line,
            "end_column": self.end_column,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Span":
        return cls(
            start_line=int(data["start_line"]),
            start_column=int(data.get("start_column", 0)),
            end_line=int(data.get("end_line", data["start_line"])),
            end_column=int(data.get("end_column", 0)),
        )


@dataclass(frozen=True, eq=False)
class SyntaxNode:
    """A parser-neutral tree node.

    Nodes compare by identity so that models can hold weak references to
    them without the tree being copied.
    """

    kind: str
    span: Span
    children: tuple["SyntaxNode", ...] = ()
    field: Optional[str] = None
    text: Optional[str] = None
    is_error: bool = False

    def child_by_field(self, name: str) -> Optional["SyntaxNode"]:
        for child in self.children:
            if child.field == name:
                return child
        return None

    def children_by_field(self, name: str) -> list["SyntaxNode"]:
        return [child for child in self.children if child.field == name]

    def children_of_kind(self, *kinds: str) -> list["SyntaxNode"]:
        return [child for child in self.children if child.kind in kinds]

    def walk(self) -> Iterator["SyntaxNode"]:
        """Pre-order traversal of this node and all descendants."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def source_text(self) -> str:
        """Best-effort reconstruction of leaf text under this node."""
        parts: list[str] = []
        stack = [self]
        while stack:
            node = stack.pop()
            if node.text is not None:
                parts.append(node.text)
            else:
                stack.extend(reversed(node.children))
        return " ".join(parts)

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def __repr__(self) -> str:
        return f"SyntaxNode({self.kind!r}, line={self.span.start_line}, children={len(self.children)})"
