"""
Glue between the scoring engine and the chunking pipeline.

``ScoringIntegration`` turns a classification into a routing decision and
``DocumentIngestor`` runs a page through both halves, falling back to
rule-based chunking when the semantic service is unavailable.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional

import structlog
from bs4 import BeautifulSoup

from doclens.chunking.boilerplate import RegexBoilerplateFilter
from doclens.chunking.models import ChunkRecord
from doclens.chunking.orchestrator import HybridChunkingOrchestrator
from doclens.chunking.protocols import BoilerplateFilter, ProgressCallback, SemanticChunker, Tokenizer
from doclens.chunking.segmenter import HtmlDomSegmenter
from doclens.chunking.text_chunker import ParagraphChunker
from doclens.exceptions import SemanticChunkingError, TokenizerError
from doclens.scoring.engine import ScoringEngine, create_engine
from doclens.scoring.models import (
    BOARD_DOCUMENTS,
    FINANCIAL,
    FORMS_TEMPLATES,
    POLICY_LEGAL,
    TECHNICAL,
    ClassificationResult,
    DocumentMetadata,
)

from .decision import DecisionKind, ScoringDecision
from .stats import ScoringStats

if TYPE_CHECKING:
    from doclens.config.config import Config

logger = structlog.get_logger(__name__)

MIN_CONTENT_CHARS = 200
DEFAULT_STRATEGY = "hybrid"

CHUNKING_STRATEGIES = {
    POLICY_LEGAL: "structure-preserve",
    TECHNICAL: "code-aware",
    FINANCIAL: "table-aware",
    FORMS_TEMPLATES: "form-preserve",
    BOARD_DOCUMENTS: "chronological",
}


def chunking_strategy_for(document_type: str) -> str:
    return CHUNKING_STRATEGIES.get(document_type, DEFAULT_STRATEGY)


def is_navigation_page(content: str, file_name: str = "", title: str = "") -> bool:
    """Index and listing pages carry no classifiable content of their own."""
    if title.startswith("Documents |"):
        return True
    lowered = file_name.lower()
    if "documents_" in lowered and "article" not in lowered:
        return True
    return len(content.strip()) < MIN_CONTENT_CHARS


def rejection_reason_for(result: ClassificationResult, file_name: str = "", title: str = "") -> str:
    lowered = file_name.lower()
    if "article_" in lowered:
        return "Article/News content"
    if "announcement" in lowered:
        return "Announcement"
    if "newsletter" in lowered:
        return "Newsletter"
    if title.startswith("Update"):
        return "Update/Notice"
    if "Election" in title or "Nomination" in title:
        return "Election/Nomination content"
    if "Back to School" in title:
        return "Informational content"
    if result.evidence:
        return f"Insufficient policy indicators (highest: {result.evidence[0].feature})"
    return "General content - no policy markers found"


class ScoringIntegration:
    """Classifies documents and decides whether AI verification is needed."""

    def __init__(
        self,
        engine: ScoringEngine,
        stats: Optional[ScoringStats] = None,
        *,
        threshold: Optional[float] = None,
    ):
        self.engine = engine
        self.stats = stats if stats is not None else ScoringStats()
        self.threshold = threshold
        self.logger = logger.bind(component="ScoringIntegration")

    def analyze(self, content: str, file_name: str = "", title: str = "") -> ScoringDecision:
        """Classify one document and record the decision in ``stats``.

        ``ScoringEngine`` reports every no-match with confidence 0, so with the
        built-in engine an unsuccessful result is always REJECTED. UNCLASSIFIED
        is reserved for engines that report a failed result with a partial score.
        """
        decision = self._decide(content, file_name, title)
        self.stats.record(decision)
        return decision

    async def analyze_async(self, content: str, file_name: str = "", title: str = "") -> ScoringDecision:
        return await asyncio.to_thread(self.analyze, content, file_name, title)

    def _decide(self, content: str, file_name: str, title: str) -> ScoringDecision:
        if is_navigation_page(content, file_name, title):
            self.logger.debug("Skipping navigation page", file_name=file_name, title=title)
            return ScoringDecision(kind=DecisionKind.NAVIGATION, method="Navigation")

        metadata = DocumentMetadata(file_name=file_name, title=title)
        try:
            result = self.engine.classify(content, metadata)
        except Exception as e:
            self.logger.error("Scoring failed", file_name=file_name, error=str(e), exc_info=True)
            return ScoringDecision(kind=DecisionKind.ERROR, method="Error", error=str(e))

        threshold = self.threshold if self.threshold is not None else result.threshold
        if result.success and result.confidence >= threshold:
            self.logger.info(
                "Deterministic classification",
                file_name=file_name,
                document_type=result.document_type,
                confidence=round(result.confidence, 1),
            )
            return ScoringDecision(
                kind=DecisionKind.DETERMINISTIC,
                document_type=result.document_type,
                confidence=result.confidence,
                method=result.method,
                chunking_strategy=chunking_strategy_for(result.document_type),
                result=result,
            )
        if result.success:
            return ScoringDecision(
                kind=DecisionKind.AI_REQUIRED,
                document_type=result.document_type,
                confidence=result.confidence,
                method=result.method,
                result=result,
            )
        if result.confidence == 0:
            reason = rejection_reason_for(result, file_name, title)
            self.logger.debug("Document rejected", file_name=file_name, reason=reason)
            return ScoringDecision(
                kind=DecisionKind.REJECTED,
                method=result.method,
                rejection_reason=reason,
                result=result,
            )
        return ScoringDecision(kind=DecisionKind.UNCLASSIFIED, method=result.method, result=result)


@dataclass(slots=True)
class IngestionResult:
    source_id: str
    decision: ScoringDecision
    chunks: List[ChunkRecord] = field(default_factory=list)
    strategy: str = DEFAULT_STRATEGY
    deferred: bool = False
    error: Optional[str] = None


class DocumentIngestor:
    """Analyzes and chunks HTML pages."""

    def __init__(
        self,
        integration: ScoringIntegration,
        orchestrator: HybridChunkingOrchestrator,
        *,
        boilerplate: Optional[BoilerplateFilter] = None,
        fallback_to_rules: bool = True,
        parser: str = "html.parser",
    ):
        self.integration = integration
        self.orchestrator = orchestrator
        self.boilerplate = boilerplate or RegexBoilerplateFilter()
        self.fallback_to_rules = fallback_to_rules
        self.parser = parser
        self.logger = logger.bind(component="DocumentIngestor")

    def visible_text(self, html: str) -> str:
        cleaned = self.boilerplate.strip(html)
        if not cleaned:
            return ""
        return BeautifulSoup(cleaned, self.parser).get_text("\n", strip=True)

    async def ingest_html(
        self,
        html: str,
        source_id: str,
        *,
        title: str = "",
        file_name: str = "",
        cancel_event: Optional[asyncio.Event] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> IngestionResult:
        text = await asyncio.to_thread(self.visible_text, html)
        decision = await self.integration.analyze_async(text, file_name or source_id, title)
        strategy = decision.chunking_strategy or DEFAULT_STRATEGY
        if decision.kind is DecisionKind.NAVIGATION:
            return IngestionResult(source_id=source_id, decision=decision, strategy=strategy)

        try:
            chunks = await self.orchestrator.chunk_html(
                html, source_id, cancel_event=cancel_event, on_progress=on_progress
            )
        except TokenizerError as e:
            self.logger.warning("Token counting failed, deferring document", source_id=source_id, error=str(e))
            return IngestionResult(source_id=source_id, decision=decision, strategy=strategy, deferred=True, error=str(e))
        except SemanticChunkingError as e:
            if not self.fallback_to_rules:
                self.logger.warning("Semantic chunking failed, deferring document", source_id=source_id, error=str(e))
                return IngestionResult(
                    source_id=source_id, decision=decision, strategy=strategy, deferred=True, error=str(e)
                )
            self.logger.warning("Semantic chunking failed, falling back to rules", source_id=source_id, error=str(e))
            try:
                chunks = await self.orchestrator.chunk_html(
                    html, source_id, cancel_event=cancel_event, use_semantic=False
                )
            except TokenizerError as fallback_error:
                self.logger.warning(
                    "Rule fallback failed, deferring document", source_id=source_id, error=str(fallback_error)
                )
                return IngestionResult(
                    source_id=source_id, decision=decision, strategy=strategy, deferred=True, error=str(fallback_error)
                )

        self.logger.info(
            "Document ingested",
            source_id=source_id,
            decision=decision.kind.value,
            document_type=decision.document_type,
            chunks=len(chunks),
        )
        return IngestionResult(source_id=source_id, decision=decision, chunks=chunks, strategy=strategy)


def build_ingestor(
    config: Optional[Config] = None,
    *,
    tokenizer: Optional[Tokenizer] = None,
    semantic: Optional[SemanticChunker] = None,
    stats: Optional[ScoringStats] = None,
) -> DocumentIngestor:
    """Wire an ingestor from configuration; loads the configured tokenizer when none is given."""
    if config is None:
        from doclens.config.config import Config

        config = Config()
    if tokenizer is None:
        from doclens.chunking.tokenizer import TransformersTokenizer

        tokenizer = TransformersTokenizer(config.chunking.tokenizer_name)

    boilerplate = RegexBoilerplateFilter()
    segmenter = HtmlDomSegmenter(
        tokenizer,
        boilerplate=boilerplate,
        min_tokens=config.segmentation.min_section_tokens,
        max_tokens=config.segmentation.max_section_tokens,
    )
    orchestrator = HybridChunkingOrchestrator(
        segmenter,
        ParagraphChunker(tokenizer),
        semantic,
        simple_threshold_tokens=config.chunking.simple_threshold_tokens,
        target_tokens=config.chunking.target_tokens,
        overlap_tokens=config.chunking.overlap_tokens,
        use_semantic_for_large_sections=config.chunking.use_semantic_for_large_sections,
    )
    integration = ScoringIntegration(create_engine(config.scoring), stats)
    return DocumentIngestor(
        integration,
        orchestrator,
        boilerplate=boilerplate,
        fallback_to_rules=config.chunking.fallback_to_rules,
    )
