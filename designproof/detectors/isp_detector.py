"""Interface segregation detector for classes with wide public surfaces."""

from designproof.config import ISPConfig
from designproof.detectors.base import Detector
from designproof.models.violation import ViolationCandidate, ViolationKind
from designproof.semantics.model import SemanticModel


class ISPDetector(Detector):
    name = "isp"
    kind = ViolationKind.ISP
    config_class = ISPConfig

    def detect(self, model: SemanticModel) -> list[ViolationCandidate]:
        candidates: list[ViolationCandidate] = []
        for type_info in model.classes():
            public = type_info.public_methods
            if len(public) <= self.config.max_interface_methods:
                continue
            candidates.append(
                self.candidate(
                    type_info,
                    f"Class `{type_info.qualified_name}` exposes {len(public)} public methods "
                    f"(max {self.config.max_interface_methods}); clients depend on more than they use.",
                    metrics={
                        "observed": len(public),
                        "threshold": self.config.max_interface_methods,
                        "public_methods": [m.name for m in public],
                    },
                )
            )
        return candidates
