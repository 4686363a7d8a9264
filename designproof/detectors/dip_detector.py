"""Dependency inversion detector for classes wired to concrete types."""

from designproof.config import DIPConfig
from designproof.detectors.base import Detector
from designproof.models.violation import ViolationCandidate, ViolationKind
from designproof.semantics.builder import ABSTRACT_BASES
from designproof.semantics.model import EXTENDED, INSTANTIATED, SemanticModel


class DIPDetector(Detector):
    name = "dip"
    kind = ViolationKind.DIP
    config_class = DIPConfig

    def detect(self, model: SemanticModel) -> list[ViolationCandidate]:
        candidates: list[ViolationCandidate] = []
        for type_info in model.classes():
            targets = type_info.dependency_targets(INSTANTIATED) | type_info.dependency_targets(
                EXTENDED
            )
            concretions = sorted(t for t in targets if self._is_concrete(model, t))
            if len(concretions) <= self.config.max_concretions:
                continue
            candidates.append(
                self.candidate(
                    type_info,
                    f"Class `{type_info.qualified_name}` depends on {len(concretions)} concrete "
                    f"types (max {self.config.max_concretions}): {', '.join(concretions)}. "
                    "Depend on abstractions and inject them instead.",
                    metrics={
                        "observed": len(concretions),
                        "threshold": self.config.max_concretions,
                        "concretions": concretions,
                    },
                )
            )
        return candidates

    @staticmethod
    def _is_concrete(model: SemanticModel, target: str) -> bool:
        if target.rsplit(".", 1)[-1] in ABSTRACT_BASES:
            return False
        known = model.resolve(target)
        return known is None or not known.is_abstract
