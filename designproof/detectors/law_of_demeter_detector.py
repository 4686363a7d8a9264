"""Law of Demeter detector for long call chains."""

from designproof.config import LawOfDemeterConfig
from designproof.detectors.base import Detector
from designproof.models.violation import ViolationCandidate, ViolationKind
from designproof.semantics.model import SemanticModel


class LawOfDemeterDetector(Detector):
    name = "law_of_demeter"
    kind = ViolationKind.LAW_OF_DEMETER
    config_class = LawOfDemeterConfig

    def detect(self, model: SemanticModel) -> list[ViolationCandidate]:
        candidates: list[ViolationCandidate] = []
        for type_info, method in model.methods():
            if method.max_chain_depth <= self.config.max_chain:
                continue
            candidates.append(
                self.candidate(
                    type_info,
                    f"`{method.name}` reaches through a chain of {method.max_chain_depth} calls "
                    f"(max {self.config.max_chain}); talk to immediate collaborators only.",
                    method=method,
                    metrics={"observed": method.max_chain_depth, "threshold": self.config.max_chain},
                )
            )
        return candidates
