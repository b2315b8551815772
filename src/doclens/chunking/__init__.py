"""
HTML segmentation and chunking for retrieval ingestion.
"""

from __future__ import annotations

from .boilerplate import RegexBoilerplateFilter
from .models import ChunkPiece, ChunkRecord, ContentSection
from .orchestrator import HybridChunkingOrchestrator
from .protocols import BoilerplateFilter, ContentSegmenter, SemanticChunker, TextChunker, Tokenizer
from .segmenter import HtmlDomSegmenter
from .text_chunker import ParagraphChunker

__all__ = [
    "BoilerplateFilter",
    "ChunkPiece",
    "ChunkRecord",
    "ContentSection",
    "ContentSegmenter",
    "HtmlDomSegmenter",
    "HybridChunkingOrchestrator",
    "ParagraphChunker",
    "RegexBoilerplateFilter",
    "SemanticChunker",
    "TextChunker",
    "Tokenizer",
]
