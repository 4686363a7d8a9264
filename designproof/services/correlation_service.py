"""Service for correlating validated violations with diff changes."""

import logging
from typing import Optional

from designproof.models.diff import ChangeAnalysis, ParsedDiff
from designproof.models.violation import CorrelatedViolation, ValidatedViolation

logger = logging.getLogger(__name__)


class CorrelationService:
    """Places violations against the lines a pull request touched."""

    def __init__(self, tolerance: int = 10, report_only_changed: bool = True):
        self.tolerance = tolerance
        self.report_only_changed = report_only_changed

    def correlate(
        self,
        violations: list[ValidatedViolation],
        diff: ParsedDiff,
        changes: Optional[ChangeAnalysis] = None,
    ) -> list[CorrelatedViolation]:
        """Correlate violations with a file's diff.

        Args:
            violations: Validated violations found in the new file content
            diff: Parsed patch for the same file
            changes: Change classification for the diff

        Returns:
            Correlated violations, in input order. When ``report_only_changed``
            is set, violations unrelated to the change are dropped.
        """
        changes = changes or ChangeAnalysis()
        changed_lines = diff.changed_line_numbers
        added_names = set(changes.methods_added) | set(changes.classes_added)

        correlated = []
        for violation in violations:
            candidate = violation.candidate
            near = self.is_near(candidate.line, changed_lines)
            in_modified_method = bool(
                candidate.method_name and candidate.method_name in changes.methods_added
            )
            in_added_type = candidate.type_name.rsplit(".", 1)[-1] in added_names
            relevant = near or in_modified_method or in_added_type

            if self.report_only_changed and not relevant:
                continue

            correlated.append(
                CorrelatedViolation(
                    violation=violation,
                    in_changed_code=relevant,
                    near_changed_line=near,
                    in_modified_method=in_modified_method,
                    lines_added=diff.total_additions,
                    lines_removed=diff.total_deletions,
                    methods_added=changes.methods_added,
                    methods_removed=changes.methods_removed,
                )
            )

        dropped = len(violations) - len(correlated)
        if dropped:
            logger.debug(f"Dropped {dropped} violation(s) outside changed code in {diff.filename}")
        return correlated

    def is_near(self, line: int, changed_lines: list[int]) -> bool:
        return any(abs(line - changed) <= self.tolerance for changed in changed_lines)
