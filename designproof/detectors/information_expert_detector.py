"""Information expert detector for methods that work on other objects' data."""

from designproof.config import InformationExpertConfig
from designproof.detectors.base import Detector
from designproof.models.violation import ViolationCandidate, ViolationKind
from designproof.semantics.model import SemanticModel


class InformationExpertDetector(Detector):
    name = "information_expert"
    kind = ViolationKind.INFORMATION_EXPERT
    config_class = InformationExpertConfig

    def detect(self, model: SemanticModel) -> list[ViolationCandidate]:
        candidates: list[ViolationCandidate] = []
        limit = self.config.min_external_calls + self.config.tolerance
        for type_info, method in model.methods():
            if method.external_call_count <= limit:
                continue
            candidates.append(
                self.candidate(
                    type_info,
                    f"`{method.name}` makes {method.external_call_count} calls on other objects "
                    f"(max {limit}) against {method.self_access_count} uses of its own state; "
                    "the behavior may belong with the data it uses.",
                    method=method,
                    metrics={
                        "observed": method.external_call_count,
                        "threshold": limit,
                        "self_access_count": method.self_access_count,
                    },
                )
            )
        return candidates
