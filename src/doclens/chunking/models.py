"""
Data models for segmentation and chunking.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(slots=True, frozen=True)
class ContentSection:
    """A logical unit of a parsed document."""

    text: str
    breadcrumb: Tuple[str, ...] = ()
    token_count: int = 0
    title: Optional[str] = None

    def __post_init__(self) -> None:
        if self.token_count < 0:
            raise ValueError("token_count must not be negative")
        if self.title is None and self.breadcrumb:
            object.__setattr__(self, "title", self.breadcrumb[-1])


@dataclass(slots=True, frozen=True)
class ChunkPiece:
    """One piece returned by a semantic chunking service."""

    content: str


@dataclass(slots=True, frozen=True)
class ChunkRecord:
    """Final retrieval unit; the embedding is filled in by a downstream service."""

    document_path: str
    index: int
    content: str
    embedding: Tuple[float, ...] = field(default=())

    def __post_init__(self) -> None:
        if self.index < 0:
            raise ValueError("Chunk index must be zero or greater")
