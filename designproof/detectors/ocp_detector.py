"""Open/closed detector for classes that branch on type or state."""

from designproof.config import OCPConfig
from designproof.detectors.base import Detector
from designproof.models.violation import ViolationCandidate, ViolationKind
from designproof.semantics.model import SemanticModel


class OCPDetector(Detector):
    name = "ocp"
    kind = ViolationKind.OCP
    config_class = OCPConfig

    def detect(self, model: SemanticModel) -> list[ViolationCandidate]:
        candidates: list[ViolationCandidate] = []
        for type_info in model.classes():
            conditionals = type_info.conditional_count
            if conditionals <= self.config.max_conditionals:
                continue
            busiest = max(type_info.methods, key=lambda m: m.conditional_count)
            candidates.append(
                self.candidate(
                    type_info,
                    f"Class `{type_info.qualified_name}` has {conditionals} conditional branches "
                    f"(max {self.config.max_conditionals}); `{busiest.name}` alone has "
                    f"{busiest.conditional_count}. New cases require editing existing code.",
                    metrics={
                        "observed": conditionals,
                        "threshold": self.config.max_conditionals,
                        "busiest_method": busiest.name,
                    },
                )
            )
        return candidates
