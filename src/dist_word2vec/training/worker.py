"""Per-partition skip-gram training task."""

import logging
import random
from dataclasses import dataclass, field
from typing import List, Tuple

import numpy as np

from dist_word2vec.config import ALPHA_UPDATE_INTERVAL, MIN_ALPHA_FACTOR
from dist_word2vec.dataflow import Broadcast
from dist_word2vec.hierarchical_softmax import SigmoidTable, train_pair
from dist_word2vec.pairs import generate_skipgram_pairs

logger = logging.getLogger(__name__)

_MASK_64 = (1 << 64) - 1

# (row_id, delta) with output-vector rows offset by vocab_size
SparseUpdate = List[Tuple[int, np.ndarray]]


@dataclass(frozen=True)
class RoundSettings:
    """Scalar settings shared by every partition task in one round."""

    iteration: int
    seed: int
    vocab_size: int
    vector_size: int
    window: int
    learning_rate: float
    num_partitions: int
    words_in_previous_iterations: int
    total_words: int


@dataclass
class PartitionResult:
    """Output of one partition task."""

    partition: int
    updates: SparseUpdate = field(default_factory=list)
    word_count: int = 0
    pair_count: int = 0
    loss: float = 0.0
    alpha: float = 0.0


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value & 0x80000000 else value


def worker_seed(seed: int, partition: int, iteration: int) -> int:
    """Seed for a partition's RNG in a given round.

    Combines the base seed with 32-bit shifted partition and round numbers,
    so a run is reproducible for a fixed partition count.
    """
    mixed = seed ^ _to_int32((partition + 1) << 16) ^ _to_int32((-iteration - 1) << 8)
    return mixed & _MASK_64


def anneal_learning_rate(
    learning_rate: float,
    word_count: int,
    num_partitions: int,
    words_in_previous_iterations: int,
    total_words: int,
) -> float:
    """Linearly decayed learning rate with a floor of 0.01% of the start.

    Progress is estimated from this worker's own counter scaled by the number
    of partitions, not from a global counter.
    """
    alpha = learning_rate * (
        1 - (num_partitions * word_count + words_in_previous_iterations) / total_words
    )
    return max(alpha, learning_rate * MIN_ALPHA_FACTOR)


def train_partition(
    partition: int,
    sentences: List[List[int]],
    *,
    syn0: Broadcast,
    syn1: Broadcast,
    codes: Broadcast,
    sigmoid: Broadcast,
    settings: RoundSettings,
) -> PartitionResult:
    """Run skip-gram hierarchical softmax over one partition.

    The broadcast snapshots are copied before training so no other task sees
    this worker's changes.

    Args:
        partition: Partition index
        sentences: Encoded sentence chunks
        syn0: Flat input-vector snapshot
        syn1: Flat output-vector snapshot
        codes: Tuple of (codes, points, code_lens) arrays
        sigmoid: Sigmoid lookup table
        settings: Round settings

    Returns:
        Sparse deltas for every touched row plus counters
    """
    vocab_size = settings.vocab_size
    vector_size = settings.vector_size
    window = settings.window
    learning_rate = settings.learning_rate

    syn0_base = syn0.value.reshape(vocab_size, vector_size)
    syn1_base = syn1.value.reshape(vocab_size, vector_size)
    syn0_local = syn0_base.copy()
    syn1_local = syn1_base.copy()
    code_bits, points, code_lens = codes.value
    table: SigmoidTable = sigmoid.value

    syn0_modified = np.zeros(vocab_size, dtype=bool)
    syn1_modified = np.zeros(vocab_size, dtype=bool)

    rng = random.Random(worker_seed(settings.seed, partition, settings.iteration))
    alpha = learning_rate
    last_word_count = 0
    word_count = 0
    pair_count = 0
    loss = 0.0

    for sentence in sentences:
        if word_count - last_word_count > ALPHA_UPDATE_INTERVAL:
            last_word_count = word_count
            alpha = anneal_learning_rate(
                learning_rate,
                word_count,
                settings.num_partitions,
                settings.words_in_previous_iterations,
                settings.total_words,
            )
            logger.debug(
                "wordCount = %d, alpha = %f",
                word_count + settings.words_in_previous_iterations,
                alpha,
            )
        word_count += len(sentence)

        for word, last_word in generate_skipgram_pairs(sentence, window, rng):
            loss += train_pair(
                syn0_local,
                syn1_local,
                last_word,
                code_bits[word],
                points[word],
                int(code_lens[word]),
                alpha,
                table,
                syn1_modified,
            )
            syn0_modified[last_word] = True
            pair_count += 1

    # Only output modified vectors
    updates: SparseUpdate = [
        (int(index), syn0_local[index] - syn0_base[index])
        for index in np.flatnonzero(syn0_modified)
    ]
    updates.extend(
        (int(index) + vocab_size, syn1_local[index] - syn1_base[index])
        for index in np.flatnonzero(syn1_modified)
    )

    return PartitionResult(
        partition=partition,
        updates=updates,
        word_count=word_count,
        pair_count=pair_count,
        loss=loss,
        alpha=alpha,
    )
