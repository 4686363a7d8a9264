"""Detector pipeline: run detectors over a model and persist the candidates."""

import json
import logging
import os
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from designproof.detectors.base import Detector
from designproof.models.violation import ViolationCandidate
from designproof.semantics.model import SemanticModel

logger = logging.getLogger(__name__)

CANDIDATES_FORMAT_VERSION = 1


class DetectorPipeline:
    """Runs a set of independent detectors against one semantic model."""

    def __init__(self, detectors: list[Detector], output_path: Optional[str | Path] = None):
        self.detectors = detectors
        self.output_path = Path(output_path) if output_path else None

    def run(
        self, model: SemanticModel, file_path: Optional[str] = None
    ) -> list[ViolationCandidate]:
        """
        Run every enabled detector and collect their candidates.

        A detector that fails is logged and contributes nothing; the
        others still run. The full list is written to ``output_path``
        before returning.

        Args:
            model: Semantic model of one source unit
            file_path: Source path stamped onto each candidate

        Returns:
            Candidates in detector order
        """
        candidates: list[ViolationCandidate] = []
        for detector in self.detectors:
            if not detector.enabled:
                continue
            try:
                found = detector.detect(model)
            except Exception as e:
                logger.error(f"Detector {detector.name} failed on {model.unit_name}: {e}")
                continue
            logger.debug(f"Detector {detector.name} raised {len(found)} candidate(s)")
            candidates.extend(found)

        if file_path is not None:
            candidates = [replace(c, file_path=file_path) for c in candidates]

        if self.output_path is not None:
            save_candidates(self.output_path, candidates, unit_name=model.unit_name)

        return candidates


def save_candidates(
    path: str | Path, candidates: list[ViolationCandidate], unit_name: Optional[str] = None
) -> Path:
    """Write candidates as a JSON document, one record per candidate."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    document = {
        "version": CANDIDATES_FORMAT_VERSION,
        "unit_name": unit_name,
        "created_at": datetime.now(timezone.utc).isoformat(),
        "candidates": [c.to_dict() for c in candidates],
    }
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with open(tmp_path, "w", encoding="utf-8") as f:
        json.dump(document, f, indent=2, default=str)
    os.replace(tmp_path, path)
    return path


def load_candidates(path: str | Path) -> list[ViolationCandidate]:
    """Read back candidates written by ``save_candidates``."""
    with open(path, "r", encoding="utf-8") as f:
        document = json.load(f)
    return [ViolationCandidate.from_dict(record) for record in document.get("candidates", [])]
