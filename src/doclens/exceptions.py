"""
Exception hierarchy for DocLens.
"""
from __future__ import annotations


class DocLensError(Exception):
    """Base exception for all DocLens errors."""
    pass


class ConfigurationError(DocLensError):
    """Raised when configuration values are inconsistent."""
    pass


class DetectorError(DocLensError):
    """Raised when a detector fails while scoring a document."""

    def __init__(self, document_type: str, message: str):
        super().__init__(f"{document_type}: {message}")
        self.document_type = document_type


class CollaboratorError(DocLensError):
    """Base exception for failures of external collaborators."""
    pass


class TokenizerError(CollaboratorError):
    """Raised when the tokenizer cannot count tokens for a text."""
    pass


class SemanticChunkingError(CollaboratorError):
    """Raised when the semantic chunking service fails for a section."""

    def __init__(self, source_id: str, message: str):
        super().__init__(f"Semantic chunking failed for '{source_id}': {message}")
        self.source_id = source_id
