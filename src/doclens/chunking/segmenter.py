"""
DOM-aware segmentation of HTML into hierarchical content sections.
"""

from __future__ import annotations

import asyncio
import re
from typing import List, Optional, Sequence

import structlog
from bs4 import BeautifulSoup
from bs4.element import Tag

from .boilerplate import RegexBoilerplateFilter
from .models import ContentSection
from .protocols import BoilerplateFilter, Tokenizer

logger = structlog.get_logger(__name__)

HEADING_LEVELS = {"h1": 1, "h2": 2, "h3": 3, "h4": 4, "h5": 5, "h6": 6}
BLOCK_TAGS = frozenset({"p", "ul", "ol", "table", "pre", "blockquote"})
WHITESPACE = re.compile(r"\s+")


def _normalize(text: str) -> str:
    return WHITESPACE.sub(" ", text).strip()


def _is_main_region(tag: Tag) -> bool:
    return tag.name == "main" or tag.get("role") == "main"


class HtmlDomSegmenter:
    """
    Splits HTML into sections guided by heading breadcrumbs and block elements.

    Chrome is stripped first, the walk is confined to the main region when the
    page declares one, and adjacent small blocks under the same breadcrumb are
    merged into sections of a useful size.
    """

    def __init__(
        self,
        tokenizer: Tokenizer,
        *,
        boilerplate: Optional[BoilerplateFilter] = None,
        min_tokens: int = 200,
        max_tokens: int = 1200,
        parser: str = "html.parser",
    ):
        if min_tokens > max_tokens:
            raise ValueError("min_tokens must not exceed max_tokens")
        self.tokenizer = tokenizer
        self.boilerplate = boilerplate or RegexBoilerplateFilter()
        self.min_tokens = min_tokens
        self.max_tokens = max_tokens
        self.parser = parser

    def segment(self, html: str, source_id: Optional[str] = None) -> List[ContentSection]:
        cleaned = self.boilerplate.strip(html)
        if not cleaned:
            return []

        soup = BeautifulSoup(cleaned, self.parser)
        region = soup.find(_is_main_region) or soup

        blocks: List[ContentSection] = []
        self._walk(region, [], blocks)
        sections = self.merge(blocks)
        logger.debug("Segmented document", source_id=source_id, blocks=len(blocks), sections=len(sections))
        return sections

    async def segment_async(self, html: str, source_id: Optional[str] = None) -> List[ContentSection]:
        return await asyncio.to_thread(self.segment, html, source_id)

    def _walk(self, node: Tag, breadcrumb: List[str], blocks: List[ContentSection]) -> None:
        for child in node.children:
            if not isinstance(child, Tag):
                continue
            name = child.name.lower()
            level = HEADING_LEVELS.get(name)
            if level is not None:
                del breadcrumb[level - 1 :]
                heading = _normalize(child.get_text(" "))
                if heading:
                    breadcrumb.append(heading)
            elif name in BLOCK_TAGS:
                # Blocks are atomic: nested paragraphs belong to their enclosing list or quote.
                text = _normalize(child.get_text(" "))
                if text:
                    blocks.append(ContentSection(text, tuple(breadcrumb), self.tokenizer.count_tokens(text)))
            else:
                self._walk(child, breadcrumb, blocks)

    def merge(self, sections: Sequence[ContentSection]) -> List[ContentSection]:
        """Merge consecutive sections sharing a breadcrumb, preserving order."""
        merged: List[ContentSection] = []
        buffer: List[ContentSection] = []
        total = 0

        def flush() -> None:
            nonlocal total
            if not buffer:
                return
            if len(buffer) == 1:
                merged.append(buffer[0])
            else:
                joined = "\n\n".join(section.text for section in buffer)
                merged.append(
                    ContentSection(joined, buffer[-1].breadcrumb, self.tokenizer.count_tokens(joined), buffer[-1].title)
                )
            buffer.clear()
            total = 0

        for section in sections:
            if not buffer:
                buffer.append(section)
                total = section.token_count
            elif section.breadcrumb == buffer[-1].breadcrumb and total + section.token_count <= self.max_tokens:
                buffer.append(section)
                total += section.token_count
                if total >= self.min_tokens:
                    flush()
            else:
                flush()
                buffer.append(section)
                total = section.token_count
        flush()
        return merged
