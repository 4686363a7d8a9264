"""Single-file analysis: parse, build, detect, validate."""

import hashlib
import logging
from pathlib import Path
from typing import Optional

from designproof.config import Settings
from designproof.detectors import DetectorPipeline, build_detectors, load_candidates
from designproof.models.violation import ValidatedViolation, ViolationCandidate
from designproof.parsers.python_parser import PythonParser
from designproof.semantics.builder import SemanticModelBuilder
from designproof.services.validation_service import ValidationService, build_validation_service

logger = logging.getLogger(__name__)


class AnalysisService:
    """Facade running the full detection pipeline over one source file."""

    def __init__(
        self,
        settings: Settings,
        validation_service: Optional[ValidationService] = None,
        parser: Optional[PythonParser] = None,
        builder: Optional[SemanticModelBuilder] = None,
    ):
        self.settings = settings
        self.validation_service = validation_service or build_validation_service(settings)
        self.parser = parser or PythonParser()
        self.builder = builder or SemanticModelBuilder()
        self.candidates_dir = Path(settings.candidates_dir)

    def candidates_path(self, text: str, filename: str = "<source>") -> Path:
        """Where the candidates of a source file are persisted.

        The key covers the filename and the detector configuration as well
        as the content, so a resumed run never reuses candidates produced
        for another file or under other thresholds.
        """
        key = hashlib.sha256()
        for part in (filename, self.settings.detectors.model_dump_json(), text):
            key.update(part.encode("utf-8"))
            key.update(b"\0")
        digest = key.hexdigest()
        return self.candidates_dir / f"{digest}.json"

    def detect(self, text: str, filename: str) -> list[ViolationCandidate]:
        """Run the detectors over source text, or reload a previous run.

        With ``resume`` enabled and candidates already persisted for the
        same file, content and detector configuration, parsing is skipped.
        """
        output_path = self.candidates_path(text, filename)
        if self.settings.resume and output_path.exists():
            logger.info(f"Resuming {filename} from {output_path}")
            return load_candidates(output_path)

        tree = self.parser.parse(text)
        model = self.builder.build(tree, unit_name=Path(filename).stem)
        pipeline = DetectorPipeline(
            build_detectors(self.settings.detectors), output_path=output_path
        )
        return pipeline.run(model, file_path=filename)

    async def analyze_source(self, text: str, filename: str = "<source>") -> list[ValidatedViolation]:
        """Analyze source text.

        Args:
            text: Python source
            filename: Name recorded on each violation

        Returns:
            Violations kept after validation, in detector order
        """
        candidates = self.detect(text, filename)
        validated = await self.validation_service.validate(candidates)
        kept = self.filter(validated)
        logger.info(
            f"Analyzed {filename}: {len(candidates)} candidate(s), {len(kept)} kept"
        )
        return kept

    async def analyze_path(
        self, path: str | Path, filename: Optional[str] = None
    ) -> list[ValidatedViolation]:
        """Analyze a file on disk, reporting it under ``filename`` if given."""
        path = Path(path)
        text = self.parser.decode(path.read_bytes())
        return await self.analyze_source(text, filename=filename or str(path))

    def filter(self, validated: list[ValidatedViolation]) -> list[ValidatedViolation]:
        """Drop rejected verdicts and validated ones under ``min_confidence``."""
        kept = []
        for violation in validated:
            if not violation.is_violation:
                continue
            if violation.is_validated and violation.confidence < self.settings.min_confidence:
                continue
            kept.append(violation)
        return kept
