"""Base detector interface for design principle checks."""

from typing import Any, Optional

from designproof.config import DetectorConfig
from designproof.models.violation import ViolationCandidate, ViolationKind
from designproof.semantics.model import MethodInfo, SemanticModel, TypeInfo


class Detector:
    """Base class for detectors.

    A detector inspects a semantic model and emits one candidate per
    match. Detectors never share state, so any subset can run in any order.
    """

    name: str = "base"
    kind: ViolationKind
    config_class: type[DetectorConfig] = DetectorConfig

    def __init__(self, config: Optional[DetectorConfig] = None) -> None:
        self.config = config if config is not None else self.config_class()

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    def detect(self, model: SemanticModel) -> list[ViolationCandidate]:
        raise NotImplementedError

    def candidate(
        self,
        type_info: TypeInfo,
        message: str,
        method: Optional[MethodInfo] = None,
        metrics: Optional[dict[str, Any]] = None,
        related: tuple[dict[str, Any], ...] = (),
    ) -> ViolationCandidate:
        return ViolationCandidate(
            kind=self.kind,
            detector=self.name,
            type_name=type_info.qualified_name,
            method_name=method.name if method is not None else None,
            message=message,
            span=method.span if method is not None else type_info.span,
            metrics=metrics or {},
            related=related,
        )
