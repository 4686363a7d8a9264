"""Liskov substitution detector for overrides that break the base contract."""

from typing import Optional

from designproof.config import LSPConfig
from designproof.detectors.base import Detector
from designproof.models.violation import ViolationCandidate, ViolationKind
from designproof.semantics.model import MethodInfo, SemanticModel, TypeInfo

# Constructors legitimately change their signatures in subclasses
EXEMPT_METHODS = frozenset({"__init__", "__new__", "__init_subclass__", "__post_init__"})


class LSPDetector(Detector):
    name = "lsp"
    kind = ViolationKind.LSP
    config_class = LSPConfig

    def detect(self, model: SemanticModel) -> list[ViolationCandidate]:
        candidates: list[ViolationCandidate] = []
        for type_info in model.classes():
            if not type_info.bases:
                continue
            for method in type_info.methods:
                if method.name in EXEMPT_METHODS:
                    continue
                found = self._find_base_method(model, type_info, method.name)
                if found is None:
                    continue
                base_type, base_method = found
                reason = self._incompatibility(method, base_method)
                if reason is None:
                    continue
                candidates.append(
                    self.candidate(
                        type_info,
                        f"`{type_info.qualified_name}.{method.name}` overrides "
                        f"`{base_type.qualified_name}.{method.name}` but {reason}; "
                        f"instances cannot stand in for `{base_type.name}`.",
                        method=method,
                        metrics={
                            "base_type": base_type.qualified_name,
                            "param_count": method.param_count,
                            "base_param_count": base_method.param_count,
                            "raises_unconditionally": method.raises_unconditionally,
                        },
                    )
                )
        return candidates

    def _incompatibility(self, method: MethodInfo, base_method: MethodInfo) -> Optional[str]:
        if not method.is_variadic and method.param_count < base_method.param_count:
            return (
                f"accepts {method.param_count} parameter(s) where the base accepts "
                f"{base_method.param_count}"
            )
        if (
            method.raises_unconditionally
            and not base_method.raises_unconditionally
            and not base_method.is_abstract
        ):
            return "unconditionally raises where the base implements the behavior"
        return None

    def _find_base_method(
        self, model: SemanticModel, type_info: TypeInfo, name: str
    ) -> Optional[tuple[TypeInfo, MethodInfo]]:
        """Nearest ancestor defined in this unit that declares ``name``."""
        seen = {type_info.qualified_name}
        queue = list(type_info.bases)
        while queue:
            base = model.resolve(queue.pop(0))
            if base is None or base.qualified_name in seen or not base.is_class:
                continue
            seen.add(base.qualified_name)
            method = base.get_method(name)
            if method is not None:
                return base, method
            queue.extend(base.bases)
        return None
