"""Trained Word2Vec embedding model."""

import heapq
from typing import Dict, List, Mapping, Optional, Tuple

import numpy as np

from dist_word2vec.exceptions import NotFoundError


class EmbeddingModel:
    """Word -> vector mapping with cosine-similarity neighbor queries.

    Vectors are stored as one flat float32 array; the vector for the word at
    index ``i`` is ``word_vectors[i * vector_size:(i + 1) * vector_size]``.
    """

    def __init__(
        self,
        word_index: Mapping[str, int],
        word_vectors: np.ndarray,
        vector_size: Optional[int] = None,
    ):
        """Initialize model.

        Args:
            word_index: Maps each word to its row in word_vectors
            word_vectors: Flat array of length num_words * vector_size
            vector_size: Vector dimension; inferred from word_vectors if omitted

        Raises:
            ValueError: If the indices are not 0..num_words-1 or the array
                length is not num_words * vector_size
        """
        if not word_index:
            raise ValueError("word_index should be non-empty")

        self.word_index: Dict[str, int] = dict(word_index)
        self.num_words = len(self.word_index)
        if sorted(self.word_index.values()) != list(range(self.num_words)):
            raise ValueError("word_index must map words to distinct rows 0..num_words-1")

        self.word_vectors = np.asarray(word_vectors, dtype=np.float32).ravel()
        if vector_size is None:
            vector_size = self.word_vectors.shape[0] // self.num_words
        if vector_size <= 0 or self.word_vectors.shape[0] != self.num_words * vector_size:
            raise ValueError(
                f"Expected {self.num_words} vectors of size {vector_size}, "
                f"got {self.word_vectors.shape[0]} values"
            )
        self.vector_size = vector_size

        self.word_list: List[str] = [
            word for word, _ in sorted(self.word_index.items(), key=lambda kv: kv[1])
        ]
        self._matrix = self.word_vectors.reshape(self.num_words, self.vector_size)
        self.word_vec_norms = np.linalg.norm(self._matrix, axis=1).astype(np.float32)

    @classmethod
    def from_vectors(cls, vectors: Mapping[str, np.ndarray]) -> "EmbeddingModel":
        """Build a model from a word -> vector mapping.

        The dimension is taken from the first vector.

        Raises:
            ValueError: If the mapping is empty or the vectors differ in length
        """
        if not vectors:
            raise ValueError("Word vector mapping should be non-empty")
        words = list(vectors)
        rows = [np.asarray(vectors[word], dtype=np.float32).ravel() for word in words]
        vector_size = rows[0].shape[0]
        for word, row in zip(words, rows):
            if row.shape[0] != vector_size:
                raise ValueError(
                    f"Vector for {word} has size {row.shape[0]}, expected {vector_size}"
                )
        return cls(
            {word: idx for idx, word in enumerate(words)},
            np.concatenate(rows),
            vector_size,
        )

    def __len__(self) -> int:
        return self.num_words

    def __contains__(self, word: str) -> bool:
        return word in self.word_index

    def transform(self, word: str) -> np.ndarray:
        """Return the vector representation of a word.

        Raises:
            NotFoundError: If the word is not in the vocabulary
        """
        idx = self.word_index.get(word)
        if idx is None:
            raise NotFoundError(f"{word} not in vocabulary")
        return self._matrix[idx].astype(np.float64)

    def find_synonyms(self, word: str, num: int) -> List[Tuple[str, float]]:
        """Find the ``num`` words closest to ``word``, excluding the word itself.

        Returns:
            List of (word, cosine_similarity) sorted by descending similarity
        """
        return self._find_synonyms(self.transform(word), num, word)

    def find_synonyms_by_vector(self, vector: np.ndarray, num: int) -> List[Tuple[str, float]]:
        """Find the ``num`` words closest to a raw vector.

        Words whose vector equals the query are not excluded.
        """
        return self._find_synonyms(vector, num, None)

    def _find_synonyms(
        self, vector: np.ndarray, num: int, exclude: Optional[str]
    ) -> List[Tuple[str, float]]:
        if num <= 0:
            raise ValueError("Number of similar words should > 0")

        query = np.asarray(vector, dtype=np.float32).ravel()
        if query.shape[0] != self.vector_size:
            raise ValueError(
                f"Expected a vector of size {self.vector_size}, got {query.shape[0]}"
            )

        # Normalize before the product to avoid overflow
        norm = np.linalg.norm(query)
        if norm != 0.0:
            query = query / norm

        cosine = self._matrix @ query
        nonzero = self.word_vec_norms != 0.0
        cosine = np.where(
            nonzero, cosine / np.where(nonzero, self.word_vec_norms, 1.0), 0.0
        )
        # float32 rounding can push exact matches just past 1
        cosine = np.clip(cosine, -1.0, 1.0)

        top = heapq.nlargest(
            num + 1,
            zip(self.word_list, cosine.tolist()),
            key=lambda item: item[1],
        )
        return [(w, float(score)) for w, score in top if w != exclude][:num]

    def get_vectors(self) -> Dict[str, np.ndarray]:
        """Return a copy of every word's vector."""
        return {word: self._matrix[idx].copy() for word, idx in self.word_index.items()}

    def save(self, path: str) -> None:
        """Save the model to a directory."""
        from dist_word2vec.utils import save_model

        save_model(self, path)

    @classmethod
    def load(cls, path: str) -> "EmbeddingModel":
        """Load a model saved with :meth:`save`."""
        from dist_word2vec.utils import load_model

        return load_model(path)
