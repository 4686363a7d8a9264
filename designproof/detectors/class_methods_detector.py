"""Detector for classes used as bags of static/class methods."""

from designproof.config import OveruseClassMethodsConfig
from designproof.detectors.base import Detector
from designproof.models.violation import ViolationCandidate, ViolationKind
from designproof.semantics.model import SemanticModel


class OveruseClassMethodsDetector(Detector):
    name = "overuse_class_methods"
    kind = ViolationKind.OVERUSE_CLASS_METHODS
    config_class = OveruseClassMethodsConfig

    def detect(self, model: SemanticModel) -> list[ViolationCandidate]:
        candidates: list[ViolationCandidate] = []
        for type_info in model.classes():
            class_level = type_info.class_level_methods
            instance = type_info.instance_methods
            if not (
                len(class_level) >= self.config.min_class_methods
                and len(instance) <= self.config.max_instance_methods
            ):
                continue
            candidates.append(
                self.candidate(
                    type_info,
                    f"Class `{type_info.qualified_name}` has {len(class_level)} static/class methods "
                    f"and only {len(instance)} instance method(s); it behaves like a procedural module.",
                    metrics={
                        "observed": len(class_level),
                        "threshold": self.config.min_class_methods,
                        "instance_method_count": len(instance),
                    },
                )
            )
        return candidates
