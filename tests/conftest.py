"""Common test fixtures and utilities for testing."""

import heapq
from typing import List, Sequence

import numpy as np
import pytest

from dist_word2vec.config import TrainConfig
from dist_word2vec.vocabulary import Vocabulary, VocabWord


@pytest.fixture
def small_word_counts():
    """Word counts for a small vocabulary, sorted by descending count."""
    return [
        ("apple", 100),
        ("banana", 80),
        ("cherry", 60),
        ("date", 40),
        ("elderberry", 20),
    ]


@pytest.fixture
def small_vocab(small_word_counts):
    """Small vocabulary without Huffman codes."""
    return Vocabulary([VocabWord(word, count) for word, count in small_word_counts])


@pytest.fixture
def tiny_corpus():
    """Corpus used for end-to-end checks."""
    return [["a", "b", "c"], ["a", "b"], ["b", "c", "d"]]


@pytest.fixture
def repetitive_corpus():
    """Corpus with two clearly separated topics."""
    rng = np.random.default_rng(7)
    animals = ["cat", "dog", "mouse", "horse"]
    colors = ["red", "green", "blue", "yellow"]
    sentences = []
    for _ in range(60):
        sentences.append([str(word) for word in rng.choice(animals, size=6)])
        sentences.append([str(word) for word in rng.choice(colors, size=6)])
    return sentences


@pytest.fixture
def fast_config():
    """Small, deterministic training configuration."""
    return TrainConfig(
        vector_size=10,
        learning_rate=0.025,
        num_partitions=1,
        num_iterations=1,
        seed=42,
        min_count=1,
        window=2,
    )


def reference_huffman_cost(counts: Sequence[int]) -> int:
    """Weighted path length of an optimal prefix code, via a priority queue."""
    if len(counts) <= 1:
        return 0
    heap = list(counts)
    heapq.heapify(heap)
    cost = 0
    while len(heap) > 1:
        merged = heapq.heappop(heap) + heapq.heappop(heap)
        cost += merged
        heapq.heappush(heap, merged)
    return cost


def fibonacci_counts(n: int) -> List[int]:
    """First n Fibonacci numbers in descending order (worst case tree depth)."""
    values = [1, 1]
    while len(values) < n:
        values.append(values[-1] + values[-2])
    return sorted(values[:n], reverse=True)
