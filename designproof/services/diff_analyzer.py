"""Service for parsing and classifying unified diff patches."""

import logging
import re
from typing import Optional

from designproof.models.diff import (
    ADDITION,
    CONTEXT,
    REMOVAL,
    ChangeAnalysis,
    DiffHunk,
    DiffLine,
    ParsedDiff,
)

logger = logging.getLogger(__name__)

HUNK_HEADER_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@(.*)$")

# Text-pattern heuristics: diff fragments are rarely parsable on their own
METHOD_RE = re.compile(r"\bdef\s+(\w+)")
CLASS_RE = re.compile(r"\bclass\s+([A-Za-z_]\w*)")
DEPENDENCY_RE = re.compile(r"^\s*(?:import\s+\w|from\s+[\w.]+\s+import\b)", re.MULTILINE)
CONDITIONAL_RE = re.compile(r"\b(?:if|elif|else|match|case)\b")
INSTANTIATION_RE = re.compile(r"\b[A-Z][a-z]\w*\s*\(")
COMPLEXITY_PATTERNS = {
    "conditionals": re.compile(r"\b(?:if|elif|else|match|case)\b"),
    "loops": re.compile(r"\b(?:for|while)\b"),
    "blocks": re.compile(r"\b(?:with|try|except|finally|lambda)\b"),
    "method_calls": re.compile(r"\.\w+\s*\("),
}


class DiffUnparsable(ValueError):
    """A patch is not a well-formed unified diff."""


class DiffAnalyzer:
    """Parses unified diffs and extracts what kinds of code changed."""

    def parse(self, patch: Optional[str], filename: Optional[str] = None) -> ParsedDiff:
        """Parse a unified diff patch.

        Malformed patches are logged and treated as empty diffs.

        Args:
            patch: Unified diff content, as returned per file by GitHub
            filename: Filename for reference

        Returns:
            ParsedDiff with one DiffHunk per ``@@`` header
        """
        if not patch:
            return ParsedDiff(filename=filename, hunks=())
        try:
            hunks = self._parse_hunks(patch)
        except DiffUnparsable as e:
            logger.warning(f"Unparsable diff for {filename or '<unknown>'}: {e}")
            return ParsedDiff(filename=filename, hunks=())
        return ParsedDiff(filename=filename, hunks=tuple(hunks))

    def _parse_hunks(self, patch: str) -> list[DiffHunk]:
        hunks: list[DiffHunk] = []
        header: Optional[re.Match] = None
        lines: list[DiffLine] = []
        old_line = 0
        new_line = 0

        # Only "\n" ends a diff line; form feeds and other separators are content
        raw_lines = patch.split("\n")
        if raw_lines[-1] == "":
            raw_lines.pop()

        for raw in raw_lines:
            raw = raw.removesuffix("\r")
            if raw.startswith("@@"):
                if header is not None:
                    hunks.append(self._build_hunk(header, lines))
                header = HUNK_HEADER_RE.match(raw)
                if header is None:
                    raise DiffUnparsable(f"Malformed hunk header: {raw[:80]!r}")
                old_line = int(header.group(1))
                new_line = int(header.group(3))
                lines = []
                continue

            # Lines before the first header (---/+++ file headers) are ignored
            if header is None or raw.startswith("\\"):
                continue

            marker, content = raw[:1], raw[1:]
            if marker == "+":
                lines.append(DiffLine(type=ADDITION, content=content, new_line_no=new_line))
                new_line += 1
            elif marker == "-":
                lines.append(DiffLine(type=REMOVAL, content=content, old_line_no=old_line))
                old_line += 1
            else:
                lines.append(
                    DiffLine(
                        type=CONTEXT,
                        content=content,
                        old_line_no=old_line,
                        new_line_no=new_line,
                    )
                )
                old_line += 1
                new_line += 1

        if header is not None:
            hunks.append(self._build_hunk(header, lines))
        return hunks

    @staticmethod
    def _build_hunk(header: re.Match, lines: list[DiffLine]) -> DiffHunk:
        old_count = header.group(2)
        new_count = header.group(4)
        section = header.group(5).strip() or None
        return DiffHunk(
            old_start=int(header.group(1)),
            old_count=int(old_count) if old_count is not None else 1,
            new_start=int(header.group(3)),
            new_count=int(new_count) if new_count is not None else 1,
            lines=tuple(lines),
            section=section,
        )

    def analyze_changes(self, parsed_diff: ParsedDiff) -> ChangeAnalysis:
        """Classify what the diff adds and removes from its text alone.

        Args:
            parsed_diff: Result of ``parse``

        Returns:
            ChangeAnalysis with added/removed names and change flags
        """
        added = parsed_diff.added_content
        removed = parsed_diff.removed_content

        return ChangeAnalysis(
            methods_added=tuple(METHOD_RE.findall(added)),
            methods_removed=tuple(METHOD_RE.findall(removed)),
            classes_added=tuple(CLASS_RE.findall(added)),
            classes_removed=tuple(CLASS_RE.findall(removed)),
            has_new_dependencies=bool(DEPENDENCY_RE.search(added)),
            has_new_conditionals=bool(CONDITIONAL_RE.search(added)),
            has_new_instantiations=bool(INSTANTIATION_RE.search(added)),
            complexity_indicators={
                name: len(pattern.findall(added)) for name, pattern in COMPLEXITY_PATTERNS.items()
            },
            total_changes=parsed_diff.total_additions + parsed_diff.total_deletions,
        )
