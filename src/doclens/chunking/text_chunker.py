"""
Rule-based paragraph packing.
"""

from __future__ import annotations

import re
from typing import List, Tuple

from .protocols import Tokenizer

PARAGRAPH_BREAK = re.compile(r"\n\s*\n")


class ParagraphChunker:
    """Greedily packs blank-line separated paragraphs into token-bounded chunks.

    Paragraphs are never split. After a flush, the last paragraph of the
    flushed chunk seeds the next one when it is no larger than the overlap
    budget.
    """

    def __init__(self, tokenizer: Tokenizer):
        self.tokenizer = tokenizer

    def split_paragraphs(self, text: str) -> List[str]:
        if not text:
            return []
        return [p.strip() for p in PARAGRAPH_BREAK.split(text.strip()) if p.strip()]

    def chunk(self, text: str, target_tokens: int = 500, overlap_tokens: int = 80) -> List[str]:
        if target_tokens <= 0:
            raise ValueError("target_tokens must be positive")
        if overlap_tokens < 0:
            raise ValueError("overlap_tokens must not be negative")

        chunks: List[str] = []
        buffer: List[Tuple[str, int]] = []
        total = 0
        for paragraph in self.split_paragraphs(text):
            tokens = self.tokenizer.count_tokens(paragraph)
            if buffer and total + tokens > target_tokens:
                chunks.append("\n\n".join(p for p, _ in buffer))
                last, last_tokens = buffer[-1]
                if last_tokens <= overlap_tokens:
                    buffer = [(last, last_tokens)]
                    total = last_tokens
                else:
                    buffer = []
                    total = 0
            buffer.append((paragraph, tokens))
            total += tokens

        if buffer:
            chunks.append("\n\n".join(p for p, _ in buffer))
        return chunks
