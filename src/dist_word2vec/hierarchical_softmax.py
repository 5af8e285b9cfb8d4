"""Hierarchical Softmax implementation for Word2Vec."""

import math
import sys
from typing import List, Sequence, Tuple

import numpy as np

from dist_word2vec.config import EXP_TABLE_SIZE, MAX_CODE_LENGTH, MAX_EXP
from dist_word2vec.exceptions import ConfigurationError
from dist_word2vec.vocabulary import Vocabulary

# Weight of internal slots that have not been created yet
UNMERGED_WEIGHT = sys.maxsize


class HuffmanTree:
    """Huffman tree for building binary hierarchy of vocabulary words.

    Leaves must arrive sorted by descending count, which lets the tree be
    built in O(V) with two cursors instead of a priority queue:

    - one cursor walks the leaves from the rarest (index V-1) upwards
    - one cursor walks the internal nodes in creation order

    Both streams are already in ascending weight order, so the two smallest
    unmerged nodes are always at one of the two cursors. Nodes 0..V-1 are
    leaves and V..2V-2 are internal nodes; internal node ``n`` owns row
    ``n - V`` of the output parameter table.
    """

    def __init__(self, counts: Sequence[int]):
        """Initialize Huffman tree from word frequencies.

        Args:
            counts: Word counts sorted in descending order

        Raises:
            ConfigurationError: If a code would exceed MAX_CODE_LENGTH
        """
        self.vocab_size = len(counts)
        self.num_inner_nodes = max(self.vocab_size - 1, 0)
        self.word_codes, self.word_paths = self._build_tree(counts)

    def _build_tree(self, counts: Sequence[int]) -> Tuple[List[List[int]], List[List[int]]]:
        """Merge nodes and extract root-first codes and paths for each leaf.

        Returns:
            Tuple of (word_codes, word_paths) indexed by word index
        """
        vocab_size = self.vocab_size
        num_nodes = 2 * vocab_size - 1 if vocab_size else 0

        weight = list(counts) + [UNMERGED_WEIGHT] * (num_nodes - vocab_size)
        parent = [0] * num_nodes
        binary = [0] * num_nodes

        leaf_pos = vocab_size - 1
        inner_pos = vocab_size

        def pop_smallest() -> int:
            nonlocal leaf_pos, inner_pos
            # Ties go to the internal node
            if leaf_pos >= 0 and weight[leaf_pos] < weight[inner_pos]:
                leaf_pos -= 1
                return leaf_pos + 1
            inner_pos += 1
            return inner_pos - 1

        for merge in range(self.num_inner_nodes):
            first = pop_smallest()
            second = pop_smallest()
            node = vocab_size + merge
            weight[node] = weight[first] + weight[second]
            parent[first] = node
            parent[second] = node
            binary[second] = 1

        root = num_nodes - 1
        word_codes = []
        word_paths = []
        for leaf in range(vocab_size):
            code = []
            path = []
            node = leaf
            while node != root:
                code.append(binary[node])
                path.append(parent[node] - vocab_size)
                node = parent[node]

            if len(code) > MAX_CODE_LENGTH:
                raise ConfigurationError(
                    f"Huffman code of length {len(code)} for word {leaf} exceeds "
                    f"the maximum of {MAX_CODE_LENGTH}; increase min_count"
                )

            code.reverse()
            path.reverse()
            word_codes.append(code)
            word_paths.append(path)

        return word_codes, word_paths

    def assign_codes(self, vocab: Vocabulary) -> None:
        """Write codes and paths into the vocabulary entries in place."""
        if len(vocab) != self.vocab_size:
            raise ValueError(
                f"Tree has {self.vocab_size} leaves but vocabulary has {len(vocab)} words"
            )
        for idx, entry in enumerate(vocab.vocab_words):
            entry.code = self.word_codes[idx]
            entry.point = self.word_paths[idx]
            entry.code_len = len(self.word_codes[idx])


def create_binary_tree(vocab: Vocabulary) -> None:
    """Build the Huffman tree for a vocabulary and store the codes in it.

    The tree itself is discarded once the codes are extracted.
    """
    HuffmanTree(vocab.counts).assign_codes(vocab)


class SigmoidTable:
    """Precomputed logistic function over [-max_exp, max_exp)."""

    def __init__(self, size: int = EXP_TABLE_SIZE, max_exp: float = MAX_EXP):
        """Initialize sigmoid table.

        Args:
            size: Number of samples
            max_exp: Half-width of the sampled input range
        """
        self.size = size
        self.max_exp = max_exp
        self.scale = size / max_exp / 2.0

        values = np.empty(size, dtype=np.float32)
        for i in range(size):
            tmp = math.exp((2.0 * i / size - 1.0) * max_exp)
            values[i] = tmp / (tmp + 1.0)
        values.flags.writeable = False
        self.values = values

    def __len__(self) -> int:
        return self.size

    def index(self, x: float) -> int:
        """Nearest sample index for an input strictly inside the range."""
        return int((x + self.max_exp) * self.scale)

    def lookup(self, x: float) -> float:
        """Approximate sigmoid(x), saturating to 0 or 1 outside the range."""
        if x <= -self.max_exp:
            return 0.0
        if x >= self.max_exp:
            return 1.0
        return float(self.values[min(self.index(x), self.size - 1)])


def train_pair(
    syn0: np.ndarray,
    syn1: np.ndarray,
    context: int,
    code: np.ndarray,
    point: np.ndarray,
    code_len: int,
    alpha: float,
    sigmoid: SigmoidTable,
    syn1_modified: np.ndarray,
) -> float:
    """Apply one skip-gram hierarchical softmax update in place.

    Walks the center word's Huffman path, predicting each branch from the
    context word's input vector.

    Args:
        syn0: Input vectors, shape (vocab_size, vector_size)
        syn1: Output vectors for internal nodes, same shape as syn0
        context: Index of the context word
        code: Center word's code bits
        point: Center word's internal-node rows
        code_len: Number of valid entries in code and point
        alpha: Current learning rate
        sigmoid: Sigmoid lookup table
        syn1_modified: Boolean mask marking touched syn1 rows

    Returns:
        Negative log-likelihood of the center word's path
    """
    l1 = syn0[context]
    neu1e = np.zeros_like(l1)
    loss = 0.0

    for d in range(code_len):
        inner = point[d]
        l2 = syn1[inner]
        f = sigmoid.lookup(float(np.dot(l1, l2)))
        label = 1 - int(code[d])
        g = np.float32((label - f) * alpha)
        neu1e += g * l2
        l2 += g * l1
        syn1_modified[inner] = True

        prob = f if label else 1.0 - f
        loss -= math.log(max(prob, 1e-7))

    l1 += neu1e
    return loss
