"""Violation records: candidate -> validated -> correlated."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from designproof.parsers.syntax import Span


class ViolationKind(str, Enum):
    """Design principle a violation is raised against."""

    SRP = "srp"
    OCP = "ocp"
    LSP = "lsp"
    DIP = "dip"
    ISP = "isp"
    LAW_OF_DEMETER = "law_of_demeter"
    DRY = "dry"
    INFORMATION_EXPERT = "information_expert"
    ENCAPSULATION = "encapsulation"
    OVERUSE_CLASS_METHODS = "overuse_class_methods"

    @property
    def title(self) -> str:
        return KIND_TITLES[self]


KIND_TITLES = {
    ViolationKind.SRP: "Single Responsibility Principle",
    ViolationKind.OCP: "Open/Closed Principle",
    ViolationKind.LSP: "Liskov Substitution Principle",
    ViolationKind.DIP: "Dependency Inversion Principle",
    ViolationKind.ISP: "Interface Segregation Principle",
    ViolationKind.LAW_OF_DEMETER: "Law of Demeter",
    ViolationKind.DRY: "Don't Repeat Yourself",
    ViolationKind.INFORMATION_EXPERT: "Information Expert",
    ViolationKind.ENCAPSULATION: "Encapsulation",
    ViolationKind.OVERUSE_CLASS_METHODS: "Overuse of Class Methods",
}


@dataclass(frozen=True)
class ViolationCandidate:
    """An unvalidated suspicion raised by exactly one detector."""

    kind: ViolationKind
    detector: str
    type_name: str
    message: str
    span: Span
    method_name: Optional[str] = None
    file_path: Optional[str] = None
    # Observed values and the thresholds they were compared with
    metrics: dict[str, Any] = field(default_factory=dict)
    # Other locations taking part in the same violation (DRY groups)
    related: tuple[dict[str, Any], ...] = ()

    @property
    def line(self) -> int:
        return self.span.start_line

    @property
    def subject(self) -> str:
        if self.method_name:
            return f"{self.type_name}#{self.method_name}"
        return self.type_name

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "detector": self.detector,
            "type_name": self.type_name,
            "method_name": self.method_name,
            "file_path": self.file_path,
            "message": self.message,
            "span": self.span.to_dict(),
            "metrics": dict(self.metrics),
            "related": [dict(r) for r in self.related],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ViolationCandidate":
        return cls(
            kind=ViolationKind(data["kind"]),
            detector=data["detector"],
            type_name=data["type_name"],
            method_name=data.get("method_name"),
            file_path=data.get("file_path"),
            message=data["message"],
            span=Span.from_dict(data["span"]),
            metrics=dict(data.get("metrics") or {}),
            related=tuple(data.get("related") or ()),
        )


@dataclass(frozen=True)
class ValidatedViolation:
    """A candidate with a verdict.

    ``confidence`` is None only when validation could not run; such
    violations are kept for audit but never count as high confidence.
    """

    candidate: ViolationCandidate
    is_violation: bool
    confidence: Optional[float]
    justification: str
    suggested_refactor: Optional[str] = None
    strategy: str = "passthrough"

    @property
    def is_validated(self) -> bool:
        return self.confidence is not None

    @property
    def kind(self) -> ViolationKind:
        return self.candidate.kind

    @property
    def line(self) -> int:
        return self.candidate.line

    def to_dict(self) -> dict[str, Any]:
        data = self.candidate.to_dict()
        data.update(
            {
                "is_violation": self.is_violation,
                "confidence": self.confidence,
                "justification": self.justification,
                "suggested_refactor": self.suggested_refactor,
                "strategy": self.strategy,
            }
        )
        return data


@dataclass(frozen=True)
class CorrelatedViolation:
    """A validated violation placed against the lines a change touched."""

    violation: ValidatedViolation
    in_changed_code: bool
    near_changed_line: bool
    in_modified_method: bool = False
    lines_added: int = 0
    lines_removed: int = 0
    methods_added: tuple[str, ...] = ()
    methods_removed: tuple[str, ...] = ()

    @property
    def kind(self) -> ViolationKind:
        return self.violation.kind

    @property
    def confidence(self) -> Optional[float]:
        return self.violation.confidence

    def to_dict(self) -> dict[str, Any]:
        data = self.violation.to_dict()
        data.update(
            {
                "in_changed_code": self.in_changed_code,
                "near_changed_line": self.near_changed_line,
                "in_modified_method": self.in_modified_method,
                "diff_context": {
                    "lines_added": self.lines_added,
                    "lines_deleted": self.lines_removed,
                    "methods_added": list(self.methods_added),
                    "methods_removed": list(self.methods_removed),
                },
            }
        )
        return data
