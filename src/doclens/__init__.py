"""
DocLens - Evidence-weighted document classification and chunking for RAG ingestion.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .config import Config
from .scoring import ClassificationResult, DocumentMetadata, ScoringEngine, create_engine

__all__ = [
    "__version__",
    "Config",
    "ClassificationResult",
    "DocumentMetadata",
    "ScoringEngine",
    "create_engine",
]
