"""
Token counting backed by a HuggingFace tokenizer.
"""

from __future__ import annotations

import threading
from typing import Any, Dict

from transformers import AutoTokenizer

from doclens.exceptions import TokenizerError

_CACHE: Dict[str, Any] = {}
_CACHE_LOCK = threading.Lock()


def _load(tokenizer_name: str) -> Any:
    with _CACHE_LOCK:
        if tokenizer_name not in _CACHE:
            _CACHE[tokenizer_name] = AutoTokenizer.from_pretrained(tokenizer_name)
        return _CACHE[tokenizer_name]


class TransformersTokenizer:
    """Counts tokens with ``AutoTokenizer``; instances sharing a name share one model."""

    def __init__(self, tokenizer_name: str = "gpt2"):
        self.tokenizer_name = tokenizer_name
        try:
            self.tokenizer = _load(tokenizer_name)
        except (OSError, ValueError) as e:
            raise TokenizerError(f"Could not load tokenizer '{tokenizer_name}': {e}") from e

    def count_tokens(self, text: str) -> int:
        if not text:
            return 0
        try:
            return len(self.tokenizer.encode(text, add_special_tokens=False))
        except Exception as e:
            raise TokenizerError(f"Tokenizer '{self.tokenizer_name}' failed to encode text: {e}") from e
