"""Python parser using tree-sitter.

Converts the tree-sitter concrete syntax tree into the generic
``SyntaxNode`` tree used by the rest of the pipeline:
- Named nodes and operator tokens are kept; punctuation and keywords are dropped
- Leaf nodes carry their source text
- Error and missing nodes are kept but flagged with ``is_error``
"""

import logging
from typing import Optional

import tree_sitter_python as tspython
from tree_sitter import Language, Node, Parser, TreeCursor

from designproof.parsers.syntax import ParseFailure, Span, SyntaxNode

logger = logging.getLogger(__name__)

# Short non-leaf nodes whose full text is useful downstream
_TEXT_KINDS = frozenset({"type", "decorator", "dotted_name"})

# Anonymous operator tokens are kept so that body shapes keep their operators
OPERATOR_FIELDS = frozenset({"operator", "operators"})


class PythonParser:
    """Parser for Python code using tree-sitter."""

    def __init__(self):
        """Initialize the parser with tree-sitter."""
        self._language = Language(tspython.language())
        self._parser = Parser(self._language)
        logger.debug("Initialized tree-sitter Python parser")

    def parse(self, code: str, strict: bool = False) -> SyntaxNode:
        """
        Parse Python source into a generic syntax tree.

        Args:
            code: Python source code
            strict: Raise on the first syntax error instead of returning
                a tree with error regions flagged

        Returns:
            Root ``module`` node

        Raises:
            ParseFailure: If ``strict`` and the source has syntax errors
        """
        source = code.encode("utf-8")
        tree = self._parser.parse(source)
        root = self._convert(tree.walk(), source)

        if strict:
            error = self.first_error(root)
            if error is not None:
                raise ParseFailure(
                    "Syntax error", error.span.start_line, error.span.start_column
                )

        return root

    def parse_bytes(self, data: bytes, strict: bool = False) -> SyntaxNode:
        """Decode UTF-8 source and parse it."""
        return self.parse(self.decode(data), strict=strict)

    @staticmethod
    def decode(data: bytes) -> str:
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            line = data[: e.start].count(b"\n") + 1
            raise ParseFailure(f"Source is not valid UTF-8: {e.reason}", line, 0) from e

    @staticmethod
    def first_error(root: SyntaxNode) -> Optional[SyntaxNode]:
        for node in root.walk():
            if node.is_error:
                return node
        return None

    def _convert(self, cursor: TreeCursor, source: bytes) -> SyntaxNode:
        """Convert the node under ``cursor`` and its kept descendants.

        Walks with an explicit stack of open nodes, so nesting depth is
        not bounded by the interpreter recursion limit.
        """
        frames: list[tuple[Node, Optional[str], list[SyntaxNode]]] = [
            (cursor.node, cursor.field_name, [])
        ]
        if not cursor.goto_first_child():
            return self._build(*frames.pop(), source, is_root=True)

        while True:
            if self._is_kept(cursor):
                frames.append((cursor.node, cursor.field_name, []))
                if cursor.goto_first_child():
                    continue
                node, field_name, children = frames.pop()
                frames[-1][2].append(self._build(node, field_name, children, source))

            while not cursor.goto_next_sibling():
                cursor.goto_parent()
                node, field_name, children = frames.pop()
                converted = self._build(node, field_name, children, source, is_root=not frames)
                if not frames:
                    return converted
                frames[-1][2].append(converted)

    @staticmethod
    def _is_kept(cursor: TreeCursor) -> bool:
        node = cursor.node
        return node.is_named or node.is_missing or cursor.field_name in OPERATOR_FIELDS

    def _build(
        self,
        node: Node,
        field_name: Optional[str],
        children: list[SyntaxNode],
        source: bytes,
        is_root: bool = False,
    ) -> SyntaxNode:
        text = None
        if not children or node.type in _TEXT_KINDS:
            text = self._get_node_text(node, source)

        # The unit covers the whole file, including leading blank lines and comments
        if is_root:
            start_line, start_column = 1, 0
        else:
            start_line, start_column = node.start_point[0] + 1, node.start_point[1]

        return SyntaxNode(
            kind=node.type,
            span=Span(
                start_line=start_line,
                start_column=start_column,
                end_line=node.end_point[0] + 1,
                end_column=node.end_point[1],
            ),
            children=tuple(children),
            field=field_name,
            text=text,
            is_error=node.is_error or node.is_missing,
        )

    def _get_node_text(self, node: Node, source: bytes) -> str:
        """Get the text content of a node."""
        return source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")
