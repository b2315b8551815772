"""
Evidence-weighted document classification.
"""

from __future__ import annotations

from .detector import Detector, EvidenceCap, EvidenceFloor, InformalLanguagePenalty, ProfileDetector, Verdict
from .engine import ScoringEngine, create_engine
from .features import FeatureExtractor
from .models import (
    ClassificationResult,
    ConfidenceLevel,
    DocumentConfidenceScore,
    DocumentFeatures,
    DocumentLocation,
    DocumentMetadata,
    EvidenceTier,
    ScoringEvidence,
    ScoringProfile,
    StructuralFeature,
)
from .profiles import build_detectors

__all__ = [
    "ClassificationResult",
    "ConfidenceLevel",
    "Detector",
    "DocumentConfidenceScore",
    "DocumentFeatures",
    "DocumentLocation",
    "DocumentMetadata",
    "EvidenceCap",
    "EvidenceFloor",
    "EvidenceTier",
    "FeatureExtractor",
    "InformalLanguagePenalty",
    "ProfileDetector",
    "ScoringEngine",
    "ScoringEvidence",
    "ScoringProfile",
    "StructuralFeature",
    "Verdict",
    "build_detectors",
    "create_engine",
]
