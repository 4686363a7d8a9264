"""Detector registry."""

from designproof.config import DetectorsConfig
from designproof.detectors.base import Detector
from designproof.detectors.class_methods_detector import OveruseClassMethodsDetector
from designproof.detectors.dip_detector import DIPDetector
from designproof.detectors.dry_detector import DRYDetector
from designproof.detectors.encapsulation_detector import EncapsulationDetector
from designproof.detectors.information_expert_detector import InformationExpertDetector
from designproof.detectors.isp_detector import ISPDetector
from designproof.detectors.law_of_demeter_detector import LawOfDemeterDetector
from designproof.detectors.lsp_detector import LSPDetector
from designproof.detectors.ocp_detector import OCPDetector
from designproof.detectors.pipeline import DetectorPipeline, load_candidates, save_candidates
from designproof.detectors.srp_detector import SRPDetector

DETECTOR_CLASSES: dict[str, type[Detector]] = {
    cls.name: cls
    for cls in (
        SRPDetector,
        OCPDetector,
        LSPDetector,
        DIPDetector,
        ISPDetector,
        LawOfDemeterDetector,
        DRYDetector,
        InformationExpertDetector,
        EncapsulationDetector,
        OveruseClassMethodsDetector,
    )
}


def build_detectors(config: DetectorsConfig | None = None) -> list[Detector]:
    """Instantiate every enabled detector with its own config record."""
    config = config or DetectorsConfig()
    return [
        DETECTOR_CLASSES[name](getattr(config, name))
        for name in config.enabled_detectors()
        if name in DETECTOR_CLASSES
    ]


__all__ = [
    "DETECTOR_CLASSES",
    "DIPDetector",
    "DRYDetector",
    "Detector",
    "DetectorPipeline",
    "EncapsulationDetector",
    "ISPDetector",
    "InformationExpertDetector",
    "LSPDetector",
    "LawOfDemeterDetector",
    "OCPDetector",
    "OveruseClassMethodsDetector",
    "SRPDetector",
    "build_detectors",
    "load_candidates",
    "save_candidates",
]
