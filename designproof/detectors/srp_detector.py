"""Single responsibility detector for classes that do too much."""

from designproof.config import SRPConfig
from designproof.detectors.base import Detector
from designproof.models.violation import ViolationCandidate, ViolationKind
from designproof.semantics.model import INSTANTIATED, SemanticModel


class SRPDetector(Detector):
    name = "srp"
    kind = ViolationKind.SRP
    config_class = SRPConfig

    def detect(self, model: SemanticModel) -> list[ViolationCandidate]:
        candidates: list[ViolationCandidate] = []
        for type_info in model.classes():
            method_count = type_info.method_count
            instantiations = sorted(type_info.dependency_targets(INSTANTIATED))

            reasons = []
            metrics: dict = {
                "method_count": method_count,
                "instantiation_count": len(instantiations),
            }
            if method_count > self.config.max_methods:
                reasons.append(f"{method_count} methods (max {self.config.max_methods})")
                metrics.update(observed=method_count, threshold=self.config.max_methods)
            if len(instantiations) > self.config.max_instantiations:
                reasons.append(
                    f"instantiates {len(instantiations)} distinct types "
                    f"(max {self.config.max_instantiations}): {', '.join(instantiations)}"
                )
                if "observed" not in metrics:
                    metrics.update(
                        observed=len(instantiations), threshold=self.config.max_instantiations
                    )
            if not reasons:
                continue

            candidates.append(
                self.candidate(
                    type_info,
                    f"Class `{type_info.qualified_name}` may have more than one responsibility: "
                    + "; ".join(reasons),
                    metrics=metrics,
                )
            )
        return candidates
