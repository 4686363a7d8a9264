"""Plain-data records passed between pipeline stages."""

from designproof.models.analysis import (
    AnalysisSummary,
    FileAnalysisResult,
    FileChange,
    FileStatus,
    PRAnalysisResult,
    PullRequestInfo,
)
from designproof.models.diff import ChangeAnalysis, DiffHunk, DiffLine, ParsedDiff
from designproof.models.violation import (
    CorrelatedViolation,
    ValidatedViolation,
    ViolationCandidate,
    ViolationKind,
)

__all__ = [
    "AnalysisSummary",
    "ChangeAnalysis",
    "CorrelatedViolation",
    "DiffHunk",
    "DiffLine",
    "FileAnalysisResult",
    "FileChange",
    "FileStatus",
    "PRAnalysisResult",
    "ParsedDiff",
    "PullRequestInfo",
    "ValidatedViolation",
    "ViolationCandidate",
    "ViolationKind",
]
