"""Tests for corpus loading."""

import random
from unittest.mock import MagicMock, patch

import pytest

from dist_word2vec.data import (
    generate_synthetic_texts,
    load_texts_from_file,
    load_texts_from_hf,
)


class TestLoadTexts:
    """Test cases for corpus loaders."""

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "corpus.txt"
        path.write_text("first line\n\n   \n  second line  \n", encoding="utf-8")

        assert load_texts_from_file(str(path)) == ["first line", "second line"]

    def test_load_from_hf(self):
        """Test text column detection on a Hugging Face dataset."""
        dataset = MagicMock()
        dataset.column_names = ["id", "sentence"]
        dataset.__getitem__.return_value = ["a b", "", None, "c d"]

        with patch("dist_word2vec.data.load_dataset", return_value=dataset) as load:
            texts = load_texts_from_hf("some/dataset", None, "train")

        load.assert_called_once_with("some/dataset", None, split="train")
        dataset.__getitem__.assert_called_once_with("sentence")
        assert texts == ["a b", "c d"]

    def test_load_from_hf_without_text_column(self):
        dataset = MagicMock()
        dataset.column_names = ["label"]

        with patch("dist_word2vec.data.load_dataset", return_value=dataset):
            with pytest.raises(ValueError, match="text column"):
                load_texts_from_hf("some/dataset", None, "train")


class TestSyntheticTexts:
    """Test cases for generate_synthetic_texts."""

    def test_shape(self):
        texts = generate_synthetic_texts(20, 50, random.Random(0))

        assert len(texts) == 20
        for text in texts:
            tokens = text.split()
            assert 5 <= len(tokens) <= 20
            assert all(token.startswith("tok") for token in tokens)
            assert all(int(token[3:]) < 50 for token in tokens)

    def test_deterministic(self):
        first = generate_synthetic_texts(5, 10, random.Random(1))
        second = generate_synthetic_texts(5, 10, random.Random(1))

        assert first == second
