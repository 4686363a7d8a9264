"""Pull request, per-file and aggregate analysis records."""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from designproof.models.diff import ChangeAnalysis, ParsedDiff
from designproof.models.violation import CorrelatedViolation


class FileStatus(str, Enum):
    """Per-file status in a change set."""

    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"
    RENAMED = "renamed"
    ERROR = "error"

    @classmethod
    def from_github(cls, value: str) -> "FileStatus":
        # GitHub also reports copied/changed/unchanged; they carry content like modified
        try:
            return cls(value)
        except ValueError:
            return cls.MODIFIED


@dataclass(frozen=True)
class FileChange:
    """A file changed in a pull request."""

    filename: str
    status: FileStatus
    additions: int = 0
    deletions: int = 0
    patch: Optional[str] = None
    raw_url: Optional[str] = None
    blob_url: Optional[str] = None
    sha: Optional[str] = None

    @property
    def is_removed(self) -> bool:
        return self.status == FileStatus.REMOVED

    def has_extension(self, extensions: list[str]) -> bool:
        return any(self.filename.endswith(ext) for ext in extensions)


@dataclass(frozen=True)
class PullRequestInfo:
    """A pull request with its metadata and changed files."""

    repo: str
    number: int
    title: str = ""
    description: Optional[str] = None
    author: Optional[str] = None
    base_branch: Optional[str] = None
    head_branch: Optional[str] = None
    state: Optional[str] = None
    merged: bool = False
    url: Optional[str] = None
    file_changes: tuple[FileChange, ...] = ()

    def files_with_extensions(self, extensions: list[str]) -> list[FileChange]:
        return [f for f in self.file_changes if f.has_extension(extensions)]

    @property
    def python_files(self) -> list[FileChange]:
        return self.files_with_extensions([".py"])

    @property
    def removed_files(self) -> list[FileChange]:
        return [f for f in self.file_changes if f.is_removed]

    def to_dict(self) -> dict[str, Any]:
        return {
            "repo": self.repo,
            "number": self.number,
            "title": self.title,
            "author": self.author,
            "url": self.url,
            "state": self.state,
            "merged": self.merged,
        }


@dataclass(frozen=True)
class FileAnalysisResult:
    """Outcome of analyzing one changed file."""

    filename: str
    status: FileStatus
    diff: Optional[ParsedDiff] = None
    changes: Optional[ChangeAnalysis] = None
    violations: tuple[CorrelatedViolation, ...] = ()
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "filename": self.filename,
            "status": self.status.value,
            "diff_summary": self.diff.summary if self.diff else None,
            "changes_analysis": {
                "lines_added": self.diff.total_additions,
                "lines_deleted": self.diff.total_deletions,
            }
            if self.diff
            else None,
            "violations_count": len(self.violations),
            "violations": [v.to_dict() for v in self.violations],
            "error": self.error,
        }


@dataclass(frozen=True)
class AnalysisSummary:
    """Aggregate counts over every file of one analysis run."""

    files_analyzed: int = 0
    files_with_violations: int = 0
    total_violations: int = 0
    violations_by_kind: dict[str, int] = field(default_factory=dict)
    violations_in_changed_code: int = 0
    high_severity_count: int = 0
    unvalidated_count: int = 0
    files_errored: int = 0
    files_removed: int = 0
    report_mode: str = "changed_code_only"

    @classmethod
    def from_results(
        cls,
        results: list[FileAnalysisResult],
        report_mode: str = "changed_code_only",
        high_severity_confidence: float = 0.8,
    ) -> "AnalysisSummary":
        violations = [v for result in results for v in result.violations]
        by_kind = Counter(v.kind.value for v in violations)
        return cls(
            files_analyzed=len(results),
            files_with_violations=sum(1 for r in results if r.violations),
            total_violations=len(violations),
            violations_by_kind=dict(by_kind),
            violations_in_changed_code=sum(1 for v in violations if v.in_changed_code),
            high_severity_count=sum(
                1
                for v in violations
                if v.confidence is not None and v.confidence >= high_severity_confidence
            ),
            unvalidated_count=sum(1 for v in violations if v.confidence is None),
            files_errored=sum(1 for r in results if r.status == FileStatus.ERROR),
            files_removed=sum(1 for r in results if r.status == FileStatus.REMOVED),
            report_mode=report_mode,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "files_analyzed": self.files_analyzed,
            "files_with_violations": self.files_with_violations,
            "total_violations": self.total_violations,
            "violations_by_type": dict(self.violations_by_kind),
            "violations_in_changed_code": self.violations_in_changed_code,
            "high_severity_count": self.high_severity_count,
            "unvalidated_count": self.unvalidated_count,
            "files_errored": self.files_errored,
            "files_removed": self.files_removed,
            "report_mode": self.report_mode,
        }


@dataclass(frozen=True)
class PRAnalysisResult:
    """Everything produced for one pull request."""

    pr_info: PullRequestInfo
    file_results: tuple[FileAnalysisResult, ...]
    summary: AnalysisSummary
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def violations(self) -> list[CorrelatedViolation]:
        return [v for result in self.file_results for v in result.violations]

    def to_dict(self) -> dict[str, Any]:
        return {
            "pull_request": self.pr_info.to_dict(),
            "summary": self.summary.to_dict(),
            "files_analyzed": len(self.file_results),
            "total_violations": len(self.violations),
            "file_details": [r.to_dict() for r in self.file_results],
            "metadata": dict(self.metadata),
        }
