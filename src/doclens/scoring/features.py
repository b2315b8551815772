"""
Extracts structural and lexical features from document text.

Extraction is a pure function of the text: patterns are compiled once at import
time and the extractor holds no mutable state, so one instance can serve many
threads at once.
"""

from __future__ import annotations

import re
from collections import Counter
from typing import Dict, Iterable, List, Optional

from .models import DocumentFeatures, DocumentMetadata

NUMBERED_SECTION = re.compile(r"^\s*(\d+\.)+\s+\w+", re.MULTILINE)
POLICY_NUMBER = re.compile(r"(Policy\s*(Number|#|No\.?)|Document\s*(Number|#))\s*:?\s*[\w-]+", re.IGNORECASE)
EFFECTIVE_DATE = re.compile(r"Effective\s+Date\s*:?\s*[\d/\-\w\s]+", re.IGNORECASE)
NIST_CONTROL = re.compile(r"\b[A-Z]{2}-\d{1,2}\b")
ISO_CONTROL = re.compile(r"\bA\.\d{1,2}(?:\.\d{1,2})?\b")
API_ENDPOINT = re.compile(r"(GET|POST|PUT|DELETE|PATCH)\s+/[\w/{}]+")
CODE_BLOCK = re.compile(r"```[\s\S]*?```")
FILLABLE_FIELD = re.compile(r"_{3,}|\[_+\]|\(\s*\)")
SIGNATURE_BLOCK = re.compile(r"(Signature|Sign|Signed\s+by)\s*:?\s*_{3,}", re.IGNORECASE)
HTML_TAG = re.compile(r"<[a-zA-Z!][^>]*>")
PASSIVE_VOICE = re.compile(r"\b(is|are|was|were|been|being)\s+\w+ed\b", re.IGNORECASE)
SENTENCE_BREAK = re.compile(r"[.!?]+")
WORD_SPLIT = re.compile(r"\W+")

HEADER_KEYWORDS = (
    "introduction",
    "purpose",
    "scope",
    "background",
    "objectives",
    "definitions",
    "requirements",
    "responsibilities",
    "procedures",
    "references",
)

KEYWORD_GROUPS: Dict[str, tuple[str, ...]] = {
    "policy": ("policy", "procedure", "regulation", "guideline", "standard"),
    "technical": ("api", "endpoint", "database", "server", "client", "architecture"),
    "security": ("security", "access", "control", "authentication", "encryption"),
    "privacy": ("privacy", "personal", "data", "consent", "collect"),
    "financial": ("financial", "budget", "revenue", "expense", "audit"),
    "legal": ("shall", "must", "required", "mandatory", "prohibited"),
}

MAX_HEADER_LENGTH = 100


class FeatureExtractor:
    """Derives a DocumentFeatures snapshot from raw content."""

    def __init__(self, tracked_terms: Iterable[str] = ()):
        terms = {term.lower() for group in KEYWORD_GROUPS.values() for term in group}
        terms.update(term.lower() for term in tracked_terms)
        self._words = frozenset(term for term in terms if _is_plain_word(term))
        self._phrases = {
            term: re.compile(r"\b" + re.escape(term) + r"\b") for term in sorted(terms) if not _is_plain_word(term)
        }

    @property
    def tracked_terms(self) -> frozenset[str]:
        return self._words | frozenset(self._phrases)

    def extract(self, content: str, metadata: Optional[DocumentMetadata] = None) -> DocumentFeatures:
        if not content or not content.strip():
            return DocumentFeatures()

        headers: List[str] = []
        has_numbered = False
        for line in content.splitlines():
            stripped = line.strip()
            if NUMBERED_SECTION.match(line):
                has_numbered = True
                headers.append(stripped)
            elif len(stripped) <= MAX_HEADER_LENGTH and stripped.lower().startswith(HEADER_KEYWORDS):
                headers.append(stripped)

        policy_numbers = tuple(m.group(0).strip() for m in POLICY_NUMBER.finditer(content))
        has_metadata_block = bool(policy_numbers) or EFFECTIVE_DATE.search(content) is not None

        lowered = content.lower()
        frequencies = self._count_terms(lowered)
        groups = {name: sum(frequencies.get(term, 0) for term in terms) for name, terms in KEYWORD_GROUPS.items()}

        controls = [f"NIST:{m.group(0)}" for m in NIST_CONTROL.finditer(content)]
        controls.extend(f"ISO:{m.group(0)}" for m in ISO_CONTROL.finditer(content))

        return DocumentFeatures(
            keyword_frequencies=frequencies,
            keyword_groups=groups,
            section_headers=tuple(headers),
            control_identifiers=tuple(dict.fromkeys(controls)),
            policy_numbers=policy_numbers,
            has_numbered_sections=has_numbered,
            has_metadata_block=has_metadata_block,
            has_table_of_contents="table of contents" in lowered or ("contents" in lowered and has_numbered),
            has_code_blocks=CODE_BLOCK.search(content) is not None or API_ENDPOINT.search(content) is not None,
            has_tables="|" in content and "-" in content,
            has_fillable_fields=FILLABLE_FIELD.search(content) is not None,
            has_signature_block=SIGNATURE_BLOCK.search(content) is not None,
            has_html_tags=HTML_TAG.search(content) is not None,
            uses_prescriptive_language=frequencies.get("shall", 0) > 0 or frequencies.get("must", 0) > 0,
            passive_voice_ratio=self._passive_voice_ratio(content),
        )

    def _count_terms(self, lowered: str) -> Dict[str, int]:
        words = Counter(word for word in WORD_SPLIT.split(lowered) if len(word) > 2)
        frequencies = {term: words[term] for term in self._words if words[term]}
        for phrase, pattern in self._phrases.items():
            count = len(pattern.findall(lowered))
            if count:
                frequencies[phrase] = count
        return frequencies

    @staticmethod
    def _passive_voice_ratio(content: str) -> float:
        sentences = [s for s in SENTENCE_BREAK.split(content) if s.strip()]
        if not sentences:
            return 0.0
        return len(PASSIVE_VOICE.findall(content)) / len(sentences)


def _is_plain_word(term: str) -> bool:
    """Terms the word tokenizer can count directly."""
    return len(term) > 2 and re.fullmatch(r"\w+", term) is not None
