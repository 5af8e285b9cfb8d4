"""Model persistence utilities."""

import json
import os

import numpy as np

from dist_word2vec.exceptions import FormatError
from dist_word2vec.models import EmbeddingModel

MODEL_CLASS_NAME = "dist_word2vec.models.EmbeddingModel"
FORMAT_VERSION = "1.0"

METADATA_FILE = "metadata.json"
VOCAB_FILE = "vocab.json"
EMBEDDINGS_FILE = "embeddings.npy"

__all__ = [
    "MODEL_CLASS_NAME",
    "FORMAT_VERSION",
    "save_model",
    "load_model",
]


def save_model(model: EmbeddingModel, out_dir: str) -> None:
    """Export model vectors, vocabulary and metadata.

    Args:
        model: Trained embedding model
        out_dir: Output directory
    """
    os.makedirs(out_dir, exist_ok=True)

    metadata = {
        "class": MODEL_CLASS_NAME,
        "version": FORMAT_VERSION,
        "vectorSize": model.vector_size,
        "numWords": model.num_words,
    }
    with open(os.path.join(out_dir, METADATA_FILE), "w") as f:
        json.dump(metadata, f, indent=2)

    with open(os.path.join(out_dir, VOCAB_FILE), "w") as f:
        json.dump({"words": model.word_list}, f, indent=2)

    matrix = model.word_vectors.reshape(model.num_words, model.vector_size)
    np.save(os.path.join(out_dir, EMBEDDINGS_FILE), matrix)


def load_model(run_dir: str) -> EmbeddingModel:
    """Load a model saved with :func:`save_model`.

    Args:
        run_dir: Directory containing saved files

    Returns:
        Loaded embedding model

    Raises:
        FileNotFoundError: If required files are not found
        FormatError: If metadata is unrecognized or disagrees with the data
    """
    paths = {
        name: os.path.join(run_dir, name)
        for name in (METADATA_FILE, VOCAB_FILE, EMBEDDINGS_FILE)
    }
    for name, path in paths.items():
        if not os.path.exists(path):
            raise FileNotFoundError(f"Model file {name} not found: {path}")

    with open(paths[METADATA_FILE], "r") as f:
        metadata = json.load(f)

    loaded_class = metadata.get("class")
    loaded_version = metadata.get("version")
    if (loaded_class, loaded_version) != (MODEL_CLASS_NAME, FORMAT_VERSION):
        raise FormatError(
            "load_model did not recognize model with (className, format version): "
            f"({loaded_class}, {loaded_version}). Supported:\n"
            f"  ({MODEL_CLASS_NAME}, {FORMAT_VERSION})"
        )

    try:
        expected_vector_size = int(metadata["vectorSize"])
        expected_num_words = int(metadata["numWords"])
    except (KeyError, TypeError, ValueError) as e:
        raise FormatError(f"Invalid model metadata: {e}") from e

    with open(paths[VOCAB_FILE], "r") as f:
        words = json.load(f)["words"]
    embeddings = np.load(paths[EMBEDDINGS_FILE])

    if embeddings.ndim != 2 or len(words) != embeddings.shape[0]:
        raise FormatError(
            f"Vocabulary has {len(words)} words but embeddings have shape "
            f"{embeddings.shape}"
        )

    num_words, vector_size = embeddings.shape
    if expected_vector_size != vector_size:
        raise FormatError(
            "Model requires each word to be mapped to a vector of size "
            f"{expected_vector_size}, got vector of size {vector_size}"
        )
    if expected_num_words != num_words:
        raise FormatError(
            f"Model requires {expected_num_words} words, but got {num_words}"
        )

    word_index = {word: idx for idx, word in enumerate(words)}
    if len(word_index) != num_words:
        raise FormatError(
            f"Vocabulary lists {num_words} words but only {len(word_index)} are distinct"
        )
    return EmbeddingModel(word_index, embeddings.ravel(), vector_size)
