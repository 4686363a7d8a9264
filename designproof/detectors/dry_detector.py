"""DRY detector for structurally duplicated method bodies.

Bodies are compared by their normalized signature, in which identifiers
and literal values are abstracted away, so copies that were renamed or
had constants tweaked still match.
"""

from collections import defaultdict

from designproof.config import DRYConfig
from designproof.detectors.base import Detector
from designproof.models.violation import ViolationCandidate, ViolationKind
from designproof.semantics.model import MethodInfo, SemanticModel, TypeInfo


class DRYDetector(Detector):
    name = "dry"
    kind = ViolationKind.DRY
    config_class = DRYConfig

    def detect(self, model: SemanticModel) -> list[ViolationCandidate]:
        groups: dict[str, list[tuple[TypeInfo, MethodInfo]]] = defaultdict(list)
        for type_info, method in model.methods():
            if not method.body_signature or method.body_size < self.config.min_body_size:
                continue
            groups[method.body_signature].append((type_info, method))

        duplicates = [
            sorted(group, key=lambda pair: pair[1].span.start_line)
            for group in groups.values()
            if len(group) >= self.config.min_duplicates
        ]
        # Largest groups first, then by position for a stable order
        duplicates.sort(key=lambda group: (-len(group), group[0][1].span.start_line))

        candidates: list[ViolationCandidate] = []
        for group in duplicates[: self.config.max_reports]:
            first_type, first_method = group[0]
            others = group[1:]
            copies = ", ".join(f"{t.qualified_name}.{m.name}" for t, m in others)
            candidates.append(
                self.candidate(
                    first_type,
                    f"`{first_type.qualified_name}.{first_method.name}` has {len(others)} "
                    f"structurally identical copies: {copies}",
                    method=first_method,
                    metrics={
                        "observed": len(group),
                        "threshold": self.config.min_duplicates,
                        "body_size": first_method.body_size,
                    },
                    related=tuple(
                        {
                            "type_name": t.qualified_name,
                            "method_name": m.name,
                            "line": m.span.start_line,
                        }
                        for t, m in others
                    ),
                )
            )
        return candidates
