"""Tests for correlating violations with changed lines."""

import pytest

from designproof.models import (
    ChangeAnalysis,
    DiffHunk,
    DiffLine,
    ParsedDiff,
    ValidatedViolation,
    ViolationCandidate,
    ViolationKind,
)
from designproof.parsers.syntax import Span
from designproof.services.correlation_service import CorrelationService


def make_violation(line: int, type_name: str = "Service", method_name: str | None = None):
    candidate = ViolationCandidate(
        kind=ViolationKind.SRP,
        detector="srp",
        type_name=type_name,
        method_name=method_name,
        message="too big",
        span=Span(line, 0, line + 5, 0),
    )
    return ValidatedViolation(
        candidate=candidate, is_violation=True, confidence=0.9, justification="", strategy="heuristic"
    )


def diff_adding(*lines: int) -> ParsedDiff:
    hunk = DiffHunk(
        old_start=1,
        old_count=0,
        new_start=lines[0] if lines else 1,
        new_count=len(lines),
        lines=tuple(DiffLine(type="addition", content="x", new_line_no=n) for n in lines),
    )
    return ParsedDiff(filename="service.py", hunks=(hunk,) if lines else ())


class TestCorrelationService:
    """Test nearness and relevance."""

    @pytest.fixture
    def service(self):
        return CorrelationService(tolerance=10, report_only_changed=True)

    def test_tolerance_is_inclusive(self, service):
        """A violation exactly tolerance lines away is near; one more is not."""
        violations = [make_violation(60), make_violation(61)]

        correlated = service.correlate(violations, diff_adding(50), ChangeAnalysis())

        assert [c.violation.line for c in correlated] == [60]
        assert correlated[0].near_changed_line
        assert correlated[0].in_changed_code

    def test_added_method_is_relevant(self, service):
        """A violation in a newly added method is relevant even far away."""
        violation = make_violation(200, method_name="charge")
        changes = ChangeAnalysis(methods_added=("charge",))

        correlated = service.correlate([violation], diff_adding(5), changes)

        assert len(correlated) == 1
        assert correlated[0].in_modified_method
        assert not correlated[0].near_changed_line
        assert correlated[0].in_changed_code

    def test_added_class_is_relevant(self, service):
        """A violation on a newly added class is relevant."""
        violation = make_violation(300, type_name="PaymentGateway")
        changes = ChangeAnalysis(classes_added=("PaymentGateway",))

        correlated = service.correlate([violation], diff_adding(5), changes)

        assert len(correlated) == 1
        assert correlated[0].in_changed_code

    def test_empty_diff_drops_everything(self, service):
        """With no changed lines nothing is near."""
        correlated = service.correlate([make_violation(1)], diff_adding(), ChangeAnalysis())

        assert correlated == []

    def test_report_all(self):
        """With report_only_changed off, irrelevant violations are kept and flagged."""
        service = CorrelationService(tolerance=10, report_only_changed=False)

        correlated = service.correlate([make_violation(100)], diff_adding(1), ChangeAnalysis())

        assert len(correlated) == 1
        assert not correlated[0].in_changed_code
        assert not correlated[0].near_changed_line

    def test_diff_context(self, service):
        """Correlated violations carry the diff totals and method names."""
        changes = ChangeAnalysis(methods_added=("a",), methods_removed=("b",))

        correlated = service.correlate([make_violation(3)], diff_adding(3, 4), changes)

        data = correlated[0].to_dict()
        assert data["diff_context"] == {
            "lines_added": 2,
            "lines_deleted": 0,
            "methods_added": ["a"],
            "methods_removed": ["b"],
        }
        assert data["confidence"] == 0.9
        assert data["kind"] == "srp"
