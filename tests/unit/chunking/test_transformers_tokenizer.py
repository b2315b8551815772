"""Unit tests for the transformers-backed tokenizer."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from doclens.chunking.tokenizer import TransformersTokenizer
from doclens.exceptions import TokenizerError


class TestTransformersTokenizer:
    """Test token counting without downloading a model."""

    @patch("doclens.chunking.tokenizer.AutoTokenizer")
    def test_counts_encoded_tokens(self, mock_auto):
        model = MagicMock()
        model.encode.return_value = [11, 12, 13]
        mock_auto.from_pretrained.return_value = model

        tokenizer = TransformersTokenizer("unit-test-counting")

        assert tokenizer.count_tokens("three token text") == 3
        assert tokenizer.count_tokens("") == 0
        model.encode.assert_called_once_with("three token text", add_special_tokens=False)

    @patch("doclens.chunking.tokenizer.AutoTokenizer")
    def test_instances_share_a_loaded_model(self, mock_auto):
        TransformersTokenizer("unit-test-shared")
        TransformersTokenizer("unit-test-shared")

        mock_auto.from_pretrained.assert_called_once_with("unit-test-shared")

    @patch("doclens.chunking.tokenizer.AutoTokenizer")
    def test_load_failure_raises_tokenizer_error(self, mock_auto):
        mock_auto.from_pretrained.side_effect = OSError("not found")

        with pytest.raises(TokenizerError, match="unit-test-missing"):
            TransformersTokenizer("unit-test-missing")

    @patch("doclens.chunking.tokenizer.AutoTokenizer")
    def test_encode_failure_raises_tokenizer_error(self, mock_auto):
        model = MagicMock()
        model.encode.side_effect = RuntimeError("encoding service down")
        mock_auto.from_pretrained.return_value = model

        tokenizer = TransformersTokenizer("unit-test-encode-failure")

        with pytest.raises(TokenizerError, match="encoding service down") as exc_info:
            tokenizer.count_tokens("some text")
        assert isinstance(exc_info.value.__cause__, RuntimeError)
