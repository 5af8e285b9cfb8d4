"""Tokenization of raw text lines into training sentences."""

import re
from typing import List

from dist_word2vec.config import DataConfig


class Tokenizer:
    """Tokenizer with multiple strategies."""

    def __init__(self, config: DataConfig):
        """Initialize tokenizer with configuration.

        Args:
            config: Data configuration containing tokenizer settings
        """
        self.config = config

    def tokenize(self, text: str) -> List[str]:
        """Tokenize text based on configuration.

        Args:
            text: Input text to tokenize

        Returns:
            List of tokens
        """
        if not text:
            return []

        text = text.lower() if self.config.lowercase else text

        tokenizer_map = {
            "basic": self._basic_tokenize,
            "simple": self._simple_tokenize,
            "split": self._split_tokenize,
        }

        tokenize_fn = tokenizer_map.get(self.config.tokenizer, self._basic_tokenize)
        return self._filter_tokens_by_length(tokenize_fn(text))

    def tokenize_sentences(self, texts: List[str]) -> List[List[str]]:
        """Tokenize each text into its own sentence, skipping empty results.

        Args:
            texts: List of text lines

        Returns:
            One token list per non-empty line
        """
        sentences = []
        for text in texts:
            tokens = self.tokenize(text)
            if tokens:
                sentences.append(tokens)
        return sentences

    def _basic_tokenize(self, text: str) -> List[str]:
        """Basic tokenization - alphanumeric words only."""
        return re.findall(r"\b\w+\b", text)

    def _simple_tokenize(self, text: str) -> List[str]:
        """Simple tokenization preserving some punctuation."""
        return re.findall(r"\b\w+\b|[.,!?;]", text)

    def _split_tokenize(self, text: str) -> List[str]:
        """Simple whitespace splitting."""
        return text.split()

    def _filter_tokens_by_length(self, tokens: List[str]) -> List[str]:
        """Filter tokens by length constraints."""
        return [
            token
            for token in tokens
            if self.config.min_token_length
            <= len(token)
            <= self.config.max_token_length
        ]
