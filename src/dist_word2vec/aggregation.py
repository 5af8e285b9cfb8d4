"""Parameter tables and merging of sparse per-worker updates."""

import functools
from typing import Dict, Iterable, Tuple

import numpy as np

from dist_word2vec.config import MAX_TABLE_SIZE
from dist_word2vec.exceptions import CapacityExceededError

# Summed deltas keyed by row id (output-vector rows offset by vocab_size)
MergedUpdate = Dict[int, np.ndarray]


def check_capacity(vocab_size: int, vector_size: int) -> None:
    """Fail before allocation if the flat tables cannot be indexed.

    Raises:
        CapacityExceededError: If vocab_size * vector_size >= 2**31 - 1
    """
    if vocab_size * vector_size >= MAX_TABLE_SIZE:
        raise CapacityExceededError(
            "Please increase min_count or decrease vector_size to avoid an OOM. "
            "vocab_size * vector_size should be less than "
            f"{MAX_TABLE_SIZE}, but is {vocab_size} * {vector_size} for now."
        )


class ParameterTables:
    """Flat input (syn0) and output (syn1) vector tables."""

    def __init__(self, syn0: np.ndarray, syn1: np.ndarray, vector_size: int):
        if syn0.shape != syn1.shape or syn0.ndim != 1:
            raise ValueError("syn0 and syn1 must be flat arrays of the same length")
        self.syn0 = syn0
        self.syn1 = syn1
        self.vector_size = vector_size
        self.vocab_size = syn0.shape[0] // vector_size

    @classmethod
    def initialize(cls, vocab_size: int, vector_size: int, seed: int) -> "ParameterTables":
        """Allocate tables following the original word2vec.c scheme.

        Input vectors are uniform in [-0.5, 0.5) / vector_size and output
        vectors start at zero.

        Raises:
            CapacityExceededError: If the tables would be too large
        """
        check_capacity(vocab_size, vector_size)
        rng = np.random.default_rng(seed & ((1 << 64) - 1))
        size = vocab_size * vector_size
        syn0 = (rng.random(size, dtype=np.float32) - np.float32(0.5)) / np.float32(vector_size)
        syn1 = np.zeros(size, dtype=np.float32)
        return cls(syn0, syn1, vector_size)

    def row(self, row_id: int) -> np.ndarray:
        """View of a row; ids >= vocab_size address syn1."""
        table, index = (
            (self.syn0, row_id) if row_id < self.vocab_size
            else (self.syn1, row_id - self.vocab_size)
        )
        start = index * self.vector_size
        return table[start : start + self.vector_size]


def merge_updates(left: MergedUpdate, right: MergedUpdate) -> MergedUpdate:
    """Sum two sparse updates key by key without modifying either input."""
    merged = dict(left)
    for row_id, delta in right.items():
        merged[row_id] = merged[row_id] + delta if row_id in merged else delta
    return merged


def to_merged(updates: Iterable[Tuple[int, np.ndarray]]) -> MergedUpdate:
    """Collapse a worker's (row_id, delta) pairs into a keyed update."""
    merged: MergedUpdate = {}
    for row_id, delta in updates:
        merged[row_id] = merged[row_id] + delta if row_id in merged else delta
    return merged


class ParameterAggregator:
    """Sole writer of the canonical parameter tables between rounds."""

    def __init__(self, tables: ParameterTables):
        self.tables = tables

    def snapshot(self) -> Tuple[np.ndarray, np.ndarray]:
        """Read-only copies of syn0 and syn1 for the next round."""
        syn0 = self.tables.syn0.copy()
        syn1 = self.tables.syn1.copy()
        syn0.flags.writeable = False
        syn1.flags.writeable = False
        return syn0, syn1

    @staticmethod
    def aggregate(partials: Iterable[Iterable[Tuple[int, np.ndarray]]]) -> MergedUpdate:
        """Reduce every worker's sparse updates into one summed update.

        Partials are folded in the order given, so the same inputs always
        produce bit-identical sums.
        """
        return functools.reduce(merge_updates, (to_merged(p) for p in partials), {})

    def apply(self, merged: MergedUpdate) -> int:
        """Add summed deltas onto the canonical rows.

        Returns:
            Number of rows written
        """
        for row_id, delta in merged.items():
            row = self.tables.row(row_id)
            row += delta
        return len(merged)

    def merge_round(self, partials: Iterable[Iterable[Tuple[int, np.ndarray]]]) -> int:
        """Aggregate one round's worker output and write it back."""
        return self.apply(self.aggregate(partials))
