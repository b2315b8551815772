"""
Protocols for the segmentation and chunking collaborators.
"""

from __future__ import annotations

from typing import Callable, List, Optional, Protocol, Sequence, runtime_checkable

from .models import ChunkPiece, ContentSection

ProgressCallback = Callable[[str], None]


@runtime_checkable
class Tokenizer(Protocol):
    """Deterministic token counter used for sizing decisions."""

    def count_tokens(self, text: str) -> int:
        ...


@runtime_checkable
class SemanticChunker(Protocol):
    """External service that splits large sections by meaning."""

    async def chunk(
        self,
        text: str,
        source_id: str,
        *,
        on_progress: Optional[ProgressCallback] = None,
    ) -> Sequence[ChunkPiece]:
        """Split text into ordered pieces.

        Args:
            text: Section text to split
            source_id: Identifier of the source document, for logging and tracing
            on_progress: Optional callback receiving progress messages

        Returns:
            Ordered pieces covering the section
        """
        ...


@runtime_checkable
class BoilerplateFilter(Protocol):
    def strip(self, html: str) -> str:
        ...


@runtime_checkable
class ContentSegmenter(Protocol):
    def segment(self, html: str, source_id: Optional[str] = None) -> List[ContentSection]:
        ...


@runtime_checkable
class TextChunker(Protocol):
    def chunk(self, text: str, target_tokens: int = 500, overlap_tokens: int = 80) -> List[str]:
        ...
