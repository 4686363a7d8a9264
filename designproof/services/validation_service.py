"""Validation of violation candidates before they are reported."""

import json
import logging
import re
from typing import Any, Optional, Protocol

from designproof.config import Settings
from designproof.models.violation import ValidatedViolation, ViolationCandidate, ViolationKind

logger = logging.getLogger(__name__)


class ValidationUnavailable(Exception):
    """The judgment service could not produce a verdict."""


class JudgmentService(Protocol):
    async def generate(self, prompt: str) -> str: ...


class ValidationStrategy(Protocol):
    name: str

    async def validate(self, candidate: ViolationCandidate) -> ValidatedViolation: ...


class PassThroughStrategy:
    """Accepts every candidate without a confidence."""

    name = "passthrough"

    async def validate(self, candidate: ViolationCandidate) -> ValidatedViolation:
        return ValidatedViolation(
            candidate=candidate,
            is_violation=True,
            confidence=None,
            justification="Not validated",
            strategy=self.name,
        )


class HeuristicStrategy:
    """Scores a candidate by how far its metric overshoots the threshold."""

    name = "heuristic"

    BASE_CONFIDENCE = {
        ViolationKind.SRP: 0.65,
        ViolationKind.OCP: 0.6,
        ViolationKind.LSP: 0.75,
        ViolationKind.DIP: 0.6,
        ViolationKind.ISP: 0.6,
        ViolationKind.LAW_OF_DEMETER: 0.55,
        ViolationKind.DRY: 0.7,
        ViolationKind.INFORMATION_EXPERT: 0.55,
        ViolationKind.ENCAPSULATION: 0.6,
        ViolationKind.OVERUSE_CLASS_METHODS: 0.6,
    }
    MIN_CONFIDENCE = 0.5
    MAX_CONFIDENCE = 0.95

    async def validate(self, candidate: ViolationCandidate) -> ValidatedViolation:
        confidence = self.score(candidate)
        return ValidatedViolation(
            candidate=candidate,
            is_violation=True,
            confidence=confidence,
            justification=self._justify(candidate),
            strategy=self.name,
        )

    def score(self, candidate: ViolationCandidate) -> float:
        base = self.BASE_CONFIDENCE.get(candidate.kind, 0.6)
        observed = candidate.metrics.get("observed")
        threshold = candidate.metrics.get("threshold")
        if isinstance(observed, (int, float)) and isinstance(threshold, (int, float)) and threshold > 0:
            base += 0.3 * (observed - threshold) / threshold
        return round(min(max(base, self.MIN_CONFIDENCE), self.MAX_CONFIDENCE), 3)

    @staticmethod
    def _justify(candidate: ViolationCandidate) -> str:
        observed = candidate.metrics.get("observed")
        threshold = candidate.metrics.get("threshold")
        if observed is None or threshold is None:
            return candidate.message
        return f"{candidate.message} (observed {observed}, threshold {threshold})"


class JudgmentStrategy:
    """Asks a judgment service whether a candidate is a real violation."""

    name = "judgment"

    PROMPT = """You are reviewing a possible {title} violation found by static analysis of Python code.

Finding: {message}
Type: {type_name}
Method: {method_name}
Lines: {start_line}-{end_line}
Metrics: {metrics}

{guidance}

Respond with JSON only:
{{"is_violation": true or false, "confidence": 0.0 to 1.0, "justification": "one or two sentences", "suggested_refactor": "one sentence or null"}}"""

    GUIDANCE = {
        ViolationKind.SRP: "Judge whether the type mixes unrelated responsibilities, not merely whether it is large.",
        ViolationKind.OCP: "Judge whether the branching switches on types or kinds that would be better served by polymorphism.",
        ViolationKind.LSP: "Judge whether the override breaks what callers of the base type may rely on.",
        ViolationKind.DIP: "Judge whether the type builds concrete collaborators that should be injected behind abstractions.",
        ViolationKind.ISP: "Judge whether clients are likely to depend on only a subset of this interface.",
        ViolationKind.LAW_OF_DEMETER: "Judge whether the method reaches through collaborators instead of asking them.",
        ViolationKind.DRY: "Judge whether the duplicated bodies encode the same knowledge rather than coincidental similarity.",
        ViolationKind.INFORMATION_EXPERT: "Judge whether the behavior belongs on the object whose data it mostly uses.",
        ViolationKind.ENCAPSULATION: "Judge whether the accessors expose internal state that callers should not manipulate.",
        ViolationKind.OVERUSE_CLASS_METHODS: "Judge whether the class is a procedural namespace that should hold state or be a module.",
    }

    def __init__(self, judge: JudgmentService):
        self.judge = judge

    async def validate(self, candidate: ViolationCandidate) -> ValidatedViolation:
        prompt = self.build_prompt(candidate)
        try:
            reply = await self.judge.generate(prompt)
        except Exception as e:
            raise ValidationUnavailable(f"Judgment failed for {candidate.subject}: {e}") from e

        verdict = self._parse_reply(reply)
        if verdict is None:
            logger.warning(f"Unparsable judgment for {candidate.subject}")
            return ValidatedViolation(
                candidate=candidate,
                is_violation=True,
                confidence=None,
                justification=reply.strip(),
                strategy=self.name,
            )

        return ValidatedViolation(
            candidate=candidate,
            is_violation=self._is_violation(verdict.get("is_violation")),
            confidence=self._confidence(verdict.get("confidence")),
            justification=str(verdict.get("justification") or ""),
            suggested_refactor=verdict.get("suggested_refactor") or None,
            strategy=self.name,
        )

    def build_prompt(self, candidate: ViolationCandidate) -> str:
        return self.PROMPT.format(
            title=candidate.kind.title,
            message=candidate.message,
            type_name=candidate.type_name,
            method_name=candidate.method_name or "-",
            start_line=candidate.span.start_line,
            end_line=candidate.span.end_line,
            metrics=json.dumps(candidate.metrics, default=str),
            guidance=self.GUIDANCE.get(candidate.kind, ""),
        )

    @staticmethod
    def _parse_reply(reply: str) -> Optional[dict[str, Any]]:
        """Parse the LLM JSON reply, tolerating surrounding prose."""
        json_match = re.search(r"\{[\s\S]*\}", reply or "")
        if not json_match:
            return None
        try:
            parsed = json.loads(json_match.group())
        except json.JSONDecodeError:
            return None
        return parsed if isinstance(parsed, dict) else None

    @staticmethod
    def _is_violation(value: Any) -> bool:
        """Read the verdict flag; anything other than a clear "no" keeps the candidate."""
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.strip().lower() not in ("false", "no", "0")
        if isinstance(value, (int, float)):
            return value != 0
        return True

    @staticmethod
    def _confidence(value: Any) -> Optional[float]:
        try:
            confidence = float(value)
        except (TypeError, ValueError):
            return None
        return min(max(confidence, 0.0), 1.0)


class ValidationService:
    """Dispatches each candidate to the strategy registered for its kind."""

    def __init__(
        self,
        strategies: Optional[dict[ViolationKind, ValidationStrategy]] = None,
        default: Optional[ValidationStrategy] = None,
    ):
        self.strategies = dict(strategies or {})
        self.default = default or PassThroughStrategy()

    def strategy_for(self, kind: ViolationKind) -> ValidationStrategy:
        return self.strategies.get(kind, self.default)

    async def validate(self, candidates: list[ViolationCandidate]) -> list[ValidatedViolation]:
        """Validate candidates in order.

        A candidate whose strategy cannot reach a verdict is kept as
        unvalidated rather than dropped.
        """
        results = []
        for candidate in candidates:
            strategy = self.strategy_for(candidate.kind)
            try:
                results.append(await strategy.validate(candidate))
            except ValidationUnavailable as e:
                logger.warning(f"Validation unavailable, keeping unvalidated: {e}")
                results.append(
                    ValidatedViolation(
                        candidate=candidate,
                        is_violation=True,
                        confidence=None,
                        justification="Validation unavailable",
                        strategy=strategy.name,
                    )
                )
        return results


def build_validation_service(
    settings: Settings,
    judge: Optional[JudgmentService] = None,
) -> ValidationService:
    """Build the kind-to-strategy mapping from settings.

    Every kind is scored heuristically; with the LLM enabled and a judge
    available the judgment strategy replaces it.
    """
    if settings.llm_enabled and judge is not None:
        strategy: ValidationStrategy = JudgmentStrategy(judge)
    else:
        strategy = HeuristicStrategy()
    return ValidationService(strategies={kind: strategy for kind in ViolationKind})
