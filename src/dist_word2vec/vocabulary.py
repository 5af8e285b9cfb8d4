"""Vocabulary building utilities."""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence, Tuple

import numpy as np

from dist_word2vec.config import MAX_CODE_LENGTH
from dist_word2vec.exceptions import EmptyVocabularyError, NotFoundError

logger = logging.getLogger(__name__)


@dataclass
class VocabWord:
    """Entry in the vocabulary.

    ``code`` and ``point`` are empty until the Huffman tree assigns them.
    """

    word: str
    count: int
    code: List[int] = field(default_factory=list)
    point: List[int] = field(default_factory=list)
    code_len: int = 0


class Vocabulary:
    """Frequency-sorted vocabulary with a word -> index lookup."""

    def __init__(self, words: List[VocabWord]):
        """Initialize vocabulary.

        Args:
            words: Entries sorted by descending count; position is the index
        """
        self.vocab_words = words
        self.word_to_idx: Dict[str, int] = {
            entry.word: idx for idx, entry in enumerate(words)
        }
        self.train_words_count = sum(entry.count for entry in words)

    def __len__(self) -> int:
        return len(self.vocab_words)

    def __contains__(self, word: str) -> bool:
        return word in self.word_to_idx

    def __getitem__(self, idx: int) -> VocabWord:
        return self.vocab_words[idx]

    @property
    def words(self) -> List[str]:
        return [entry.word for entry in self.vocab_words]

    @property
    def counts(self) -> List[int]:
        return [entry.count for entry in self.vocab_words]

    def index(self, word: str) -> int:
        """Return the dense index of a word.

        Raises:
            NotFoundError: If the word is not in the vocabulary
        """
        try:
            return self.word_to_idx[word]
        except KeyError:
            raise NotFoundError(f"{word} not in vocabulary") from None

    def encode(self, tokens: Iterable[str]) -> List[int]:
        """Map tokens to indices, dropping out-of-vocabulary tokens."""
        lookup = self.word_to_idx
        return [lookup[token] for token in tokens if token in lookup]

    def code_arrays(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Pack Huffman codes into fixed-width arrays for broadcasting.

        Returns:
            Tuple of (codes, points, code_lens) where codes and points have
            shape (vocab_size, MAX_CODE_LENGTH)
        """
        vocab_size = len(self.vocab_words)
        codes = np.zeros((vocab_size, MAX_CODE_LENGTH), dtype=np.int8)
        points = np.zeros((vocab_size, MAX_CODE_LENGTH), dtype=np.int32)
        code_lens = np.zeros(vocab_size, dtype=np.int32)

        for idx, entry in enumerate(self.vocab_words):
            code_lens[idx] = entry.code_len
            codes[idx, : entry.code_len] = entry.code
            points[idx, : entry.code_len] = entry.point

        return codes, points, code_lens


class VocabularyBuilder:
    """Builder for a min-count filtered, frequency-sorted vocabulary."""

    def __init__(self, min_count: int):
        """Initialize vocabulary builder.

        Args:
            min_count: Tokens seen fewer times than this are dropped
        """
        self.min_count = min_count

    @staticmethod
    def count_tokens(sentences: Iterable[Sequence[str]]) -> Counter:
        """Count token occurrences over a collection of sentences."""
        counts = Counter()
        for sentence in sentences:
            counts.update(sentence)
        return counts

    def build_from_counts(self, word_counts: Counter) -> Vocabulary:
        """Build vocabulary from precomputed token counts.

        Args:
            word_counts: Token frequency counts

        Returns:
            Vocabulary sorted by descending count

        Raises:
            EmptyVocabularyError: If no token reaches min_count
        """
        # Stable sort: ties keep the order in which tokens were first counted
        surviving = [
            (word, count)
            for word, count in word_counts.items()
            if count >= self.min_count
        ]
        surviving.sort(key=lambda item: item[1], reverse=True)

        if not surviving:
            raise EmptyVocabularyError(
                "The vocabulary size should be > 0. You may need to check the "
                f"setting of min_count ({self.min_count}), which could be large "
                "enough to remove all your words in sentences."
            )

        vocab = Vocabulary([VocabWord(word, count) for word, count in surviving])
        logger.info(
            "vocab_size = %d, train_words_count = %d",
            len(vocab),
            vocab.train_words_count,
        )
        return vocab

    def build_vocabulary(self, sentences: Iterable[Sequence[str]]) -> Vocabulary:
        """Count tokens and build the vocabulary in one pass.

        Args:
            sentences: Tokenized sentences

        Returns:
            Vocabulary sorted by descending count
        """
        return self.build_from_counts(self.count_tokens(sentences))


def chunk_sentence(indices: List[int], max_length: int) -> List[List[int]]:
    """Split an encoded sentence into consecutive chunks of at most max_length."""
    return [
        indices[start : start + max_length]
        for start in range(0, len(indices), max_length)
    ]
