"""Corpus loading for Word2Vec training."""

import random
from typing import List, Optional

from datasets import load_dataset


def load_texts_from_file(path: str) -> List[str]:
    """Load non-empty lines from a local text file.

    Args:
        path: Path to a text file with one sentence per line

    Returns:
        List of stripped lines
    """
    with open(path, "r", encoding="utf-8") as f:
        return [line.strip() for line in f if line.strip()]


def load_texts_from_hf(dataset: str, config: Optional[str], split: str) -> List[str]:
    """Load texts from Hugging Face datasets.

    Args:
        dataset: Dataset name
        config: Dataset configuration
        split: Dataset split

    Returns:
        List of text strings

    Raises:
        ValueError: If no suitable text column is found
    """
    ds = load_dataset(dataset, config, split=split)

    # Search for text column
    text_columns = ["text", "content", "sentence", "document", "raw"]
    text_col = next((col for col in text_columns if col in ds.column_names), None)

    if text_col is None:
        raise ValueError(
            f"Could not find a text column in dataset {dataset}. "
            f"Available columns: {ds.column_names}"
        )

    return [text for text in ds[text_col] if isinstance(text, str) and text.strip()]


def generate_synthetic_texts(
    n_sentences: int, vocab_size: int, rng: random.Random
) -> List[str]:
    """Generate synthetic texts for benchmarking.

    Words are drawn with Zipf-like weights so the Huffman tree is unbalanced
    the way it is on natural text.

    Args:
        n_sentences: Number of sentences to generate
        vocab_size: Size of vocabulary to use
        rng: Random number generator

    Returns:
        List of synthetic text strings
    """
    words = [f"tok{i}" for i in range(vocab_size)]
    weights = [1.0 / (i + 1) for i in range(vocab_size)]
    texts = []

    for _ in range(n_sentences):
        sentence_length = rng.randint(5, 20)
        sentence = " ".join(rng.choices(words, weights=weights, k=sentence_length))
        texts.append(sentence)

    return texts
