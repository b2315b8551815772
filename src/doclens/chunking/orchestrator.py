"""
Hybrid chunking: rule-based packing for small sections, a semantic service for large ones.
"""

from __future__ import annotations

import asyncio
from typing import List, Optional, Sequence

import structlog

from doclens.exceptions import SemanticChunkingError, TokenizerError
from doclens.observability.metrics import METRICS

from .models import ChunkRecord, ContentSection
from .protocols import ContentSegmenter, ProgressCallback, SemanticChunker, TextChunker

logger = structlog.get_logger(__name__)


class HybridChunkingOrchestrator:
    """Turns a document's sections into one globally indexed sequence of chunk records."""

    def __init__(
        self,
        segmenter: ContentSegmenter,
        chunker: TextChunker,
        semantic: Optional[SemanticChunker] = None,
        *,
        simple_threshold_tokens: int = 600,
        target_tokens: int = 500,
        overlap_tokens: int = 80,
        use_semantic_for_large_sections: bool = True,
    ):
        self.segmenter = segmenter
        self.chunker = chunker
        self.semantic = semantic
        self.simple_threshold_tokens = simple_threshold_tokens
        self.target_tokens = target_tokens
        self.overlap_tokens = overlap_tokens
        self.use_semantic_for_large_sections = use_semantic_for_large_sections
        self.logger = logger.bind(component="HybridChunkingOrchestrator")

    async def chunk_html(
        self,
        html: str,
        source_id: str,
        *,
        cancel_event: Optional[asyncio.Event] = None,
        on_progress: Optional[ProgressCallback] = None,
        use_semantic: Optional[bool] = None,
    ) -> List[ChunkRecord]:
        """Segment markup and chunk every section.

        Args:
            html: Raw page markup
            source_id: Document identifier stored on every record
            cancel_event: When set, processing stops before the next section
            on_progress: Forwarded to the semantic chunking service
            use_semantic: Overrides ``use_semantic_for_large_sections`` for this call

        Returns:
            Chunk records indexed from zero in section order

        Raises:
            SemanticChunkingError: The semantic service failed for a large section
            TokenizerError: Token counting failed while segmenting or packing sections
            asyncio.CancelledError: ``cancel_event`` was set between sections
        """
        try:
            sections = await asyncio.to_thread(self.segmenter.segment, html, source_id)
        except TokenizerError:
            raise
        except Exception as e:
            self.logger.error("Segmentation failed", source_id=source_id, error=str(e))
            raise TokenizerError(f"Token counting failed for '{source_id}': {e}") from e
        return await self.chunk_sections(
            sections, source_id, cancel_event=cancel_event, on_progress=on_progress, use_semantic=use_semantic
        )

    async def chunk_sections(
        self,
        sections: Sequence[ContentSection],
        source_id: str,
        *,
        cancel_event: Optional[asyncio.Event] = None,
        on_progress: Optional[ProgressCallback] = None,
        use_semantic: Optional[bool] = None,
    ) -> List[ChunkRecord]:
        if use_semantic is None:
            use_semantic = self.use_semantic_for_large_sections

        records: List[ChunkRecord] = []
        for position, section in enumerate(sections):
            if cancel_event is not None and cancel_event.is_set():
                self.logger.info("Chunking cancelled", source_id=source_id, completed_sections=position)
                raise asyncio.CancelledError(f"Chunking of '{source_id}' cancelled after {position} sections")
            for piece in await self._chunk_section(section, source_id, use_semantic, on_progress):
                records.append(ChunkRecord(document_path=source_id, index=len(records), content=piece))

        self.logger.debug("Document chunked", source_id=source_id, sections=len(sections), chunks=len(records))
        return records

    async def _chunk_section(
        self,
        section: ContentSection,
        source_id: str,
        use_semantic: bool,
        on_progress: Optional[ProgressCallback],
    ) -> List[str]:
        if section.token_count <= self.simple_threshold_tokens or not use_semantic or self.semantic is None:
            try:
                pieces = self.chunker.chunk(section.text, self.target_tokens, self.overlap_tokens)
            except TokenizerError:
                raise
            except Exception as e:
                raise TokenizerError(f"Token counting failed for '{source_id}': {e}") from e
            METRICS["chunks_produced"].labels(path="rule").inc(len(pieces))
            return pieces

        try:
            result = await self.semantic.chunk(section.text, source_id, on_progress=on_progress)
        except SemanticChunkingError:
            METRICS["semantic_chunking_failures"].inc()
            raise
        except (asyncio.CancelledError, KeyboardInterrupt):
            raise
        except Exception as e:
            METRICS["semantic_chunking_failures"].inc()
            raise SemanticChunkingError(source_id, str(e)) from e

        pieces = [piece.content for piece in result if piece.content.strip()]
        METRICS["chunks_produced"].labels(path="semantic").inc(len(pieces))
        return pieces
