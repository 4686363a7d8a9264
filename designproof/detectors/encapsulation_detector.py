"""Encapsulation detector for classes that expose their state."""

from designproof.config import EncapsulationConfig
from designproof.detectors.base import Detector
from designproof.models.violation import ViolationCandidate, ViolationKind
from designproof.semantics.model import SemanticModel


class EncapsulationDetector(Detector):
    name = "encapsulation"
    kind = ViolationKind.ENCAPSULATION
    config_class = EncapsulationConfig

    def detect(self, model: SemanticModel) -> list[ViolationCandidate]:
        candidates: list[ViolationCandidate] = []
        for type_info in model.classes():
            accessors = type_info.public_attributes
            ratio = type_info.visibility_ratio
            if not (
                len(accessors) > self.config.max_attr_accessors
                and ratio > self.config.max_public_ratio
                and type_info.method_count >= self.config.min_methods
            ):
                continue
            candidates.append(
                self.candidate(
                    type_info,
                    f"Class `{type_info.qualified_name}` exposes {len(accessors)} public attributes "
                    f"(max {self.config.max_attr_accessors}) and {ratio:.0%} of its members are "
                    f"public (max {self.config.max_public_ratio:.0%}).",
                    metrics={
                        "observed": len(accessors),
                        "threshold": self.config.max_attr_accessors,
                        "public_ratio": round(ratio, 3),
                        "attributes": [a.name for a in accessors],
                    },
                )
            )
        return candidates
