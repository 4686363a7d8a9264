"""Line-addressable model of a unified diff."""

from dataclasses import dataclass, field
from typing import Optional

CONTEXT = "context"
ADDITION = "addition"
REMOVAL = "removal"


@dataclass(frozen=True)
class DiffLine:
    """A single line of a hunk.

    Removals carry only the old line number, additions only the new one,
    context lines both.
    """

    type: str  # context, addition, removal
    content: str
    old_line_no: Optional[int] = None
    new_line_no: Optional[int] = None

    @property
    def is_addition(self) -> bool:
        return self.type == ADDITION

    @property
    def is_removal(self) -> bool:
        return self.type == REMOVAL

    @property
    def is_context(self) -> bool:
        return self.type == CONTEXT


@dataclass(frozen=True)
class DiffHunk:
    """A contiguous block of changes sharing one range header."""

    old_start: int
    old_count: int
    new_start: int
    new_count: int
    lines: tuple[DiffLine, ...] = ()
    # Text after the closing @@, usually the enclosing def/class
    section: Optional[str] = None

    @property
    def added_lines(self) -> list[DiffLine]:
        return [line for line in self.lines if line.is_addition]

    @property
    def removed_lines(self) -> list[DiffLine]:
        return [line for line in self.lines if line.is_removal]

    @property
    def modified_lines_count(self) -> int:
        return max(len(self.added_lines), len(self.removed_lines))


@dataclass(frozen=True)
class ParsedDiff:
    """Parsed patch for one file."""

    filename: Optional[str]
    hunks: tuple[DiffHunk, ...] = ()

    @property
    def total_additions(self) -> int:
        return sum(len(h.added_lines) for h in self.hunks)

    @property
    def total_deletions(self) -> int:
        return sum(len(h.removed_lines) for h in self.hunks)

    @property
    def changed_line_numbers(self) -> list[int]:
        """New-file line numbers of every added line."""
        return [
            line.new_line_no
            for hunk in self.hunks
            for line in hunk.added_lines
            if line.new_line_no is not None
        ]

    @property
    def added_content(self) -> str:
        return "\n".join(line.content for h in self.hunks for line in h.added_lines)

    @property
    def removed_content(self) -> str:
        return "\n".join(line.content for h in self.hunks for line in h.removed_lines)

    @property
    def is_empty(self) -> bool:
        return not self.hunks

    @property
    def summary(self) -> str:
        if not self.hunks:
            return "No changes"
        return (
            f"{self.total_additions} addition(s), {self.total_deletions} deletion(s) "
            f"in {len(self.hunks)} hunk(s)"
        )


@dataclass(frozen=True)
class ChangeAnalysis:
    """What kind of code a diff adds or removes, from its text alone."""

    methods_added: tuple[str, ...] = ()
    methods_removed: tuple[str, ...] = ()
    classes_added: tuple[str, ...] = ()
    classes_removed: tuple[str, ...] = ()
    has_new_dependencies: bool = False
    has_new_conditionals: bool = False
    has_new_instantiations: bool = False
    complexity_indicators: dict[str, int] = field(default_factory=dict)
    total_changes: int = 0
