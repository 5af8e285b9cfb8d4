"""Tests for the distributed trainer."""

import dataclasses
import logging
import os
import subprocess
import sys
from unittest.mock import patch

import numpy as np
import pytest

import dist_word2vec
from dist_word2vec.aggregation import ParameterTables
from dist_word2vec.config import TrainConfig
from dist_word2vec.dataflow import DataflowContext
from dist_word2vec.exceptions import (
    CapacityExceededError,
    ConfigurationError,
    EmptyVocabularyError,
)
from dist_word2vec.training import Trainer


class RecordingContext(DataflowContext):
    """Context that remembers every broadcast it creates."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.broadcasts = []

    def broadcast(self, value):
        bc = super().broadcast(value)
        self.broadcasts.append(bc)
        return bc


def cosine(a, b):
    return float(np.dot(a, b) / (np.linalg.norm(a) * np.linalg.norm(b)))


class TestTrainer:
    """Test cases for Trainer."""

    def test_end_to_end(self, tiny_corpus, fast_config):
        """Test training on a tiny corpus."""
        model = Trainer(fast_config).fit(tiny_corpus)

        assert set(model.word_index) == {"a", "b", "c", "d"}
        assert model.transform("a").shape == (10,)
        synonyms = model.find_synonyms("a", 2)
        assert len(synonyms) == 2
        assert all(word != "a" for word, _ in synonyms)

    def test_learn_vocab(self, tiny_corpus, fast_config):
        """Test that counts from all partitions are combined."""
        trainer = Trainer(fast_config)
        data = trainer.context.parallelize(tiny_corpus, 2)

        vocab = trainer.learn_vocab(data)

        assert vocab.words == ["b", "a", "c", "d"]
        assert vocab.counts == [3, 2, 2, 1]
        assert all(entry.code_len > 0 for entry in vocab.vocab_words)

    def test_deterministic(self, tiny_corpus):
        """Test that a fixed seed gives bit-identical vectors."""
        config = TrainConfig(
            vector_size=8, min_count=1, window=2, seed=123,
            num_partitions=2, num_iterations=3,
        )

        first = Trainer(config).fit(tiny_corpus)
        second = Trainer(config).fit(tiny_corpus)

        assert np.array_equal(first.word_vectors, second.word_vectors)

    def test_seed_changes_result(self, tiny_corpus, fast_config):
        first = Trainer(fast_config).fit(tiny_corpus)
        second = Trainer(dataclasses.replace(fast_config, seed=43)).fit(tiny_corpus)

        assert not np.array_equal(first.word_vectors, second.word_vectors)

    def test_zero_iterations_returns_initial_vectors(self, tiny_corpus, fast_config):
        config = dataclasses.replace(fast_config, num_iterations=0)

        model = Trainer(config).fit(tiny_corpus)

        initial = ParameterTables.initialize(4, config.vector_size, config.seed)
        assert np.array_equal(model.word_vectors, initial.syn0)

    def test_training_moves_vectors(self, tiny_corpus, fast_config):
        model = Trainer(dataclasses.replace(fast_config, num_iterations=2)).fit(tiny_corpus)

        initial = ParameterTables.initialize(4, fast_config.vector_size, fast_config.seed)
        assert not np.array_equal(model.word_vectors, initial.syn0)

    def test_long_sentences_are_chunked(self, tiny_corpus, fast_config):
        """Test that chunks of one word give no training pairs."""
        trainer = Trainer(dataclasses.replace(fast_config, max_sentence_length=1))

        model = trainer.fit(tiny_corpus)

        stats = trainer.training_stats()
        assert stats["words"] == 8
        assert stats["pairs"] == 0
        initial = ParameterTables.initialize(4, fast_config.vector_size, fast_config.seed)
        assert np.array_equal(model.word_vectors, initial.syn0)

    def test_history(self, tiny_corpus, fast_config):
        """Test per-round metrics."""
        trainer = Trainer(
            dataclasses.replace(fast_config, num_iterations=3, num_partitions=2)
        )

        trainer.fit(tiny_corpus)

        assert [round_metrics["iteration"] for round_metrics in trainer.history] == [1, 2, 3]
        for round_metrics in trainer.history:
            assert round_metrics["words"] == 8
            assert round_metrics["pairs"] > 0
            assert round_metrics["avg_loss"] > 0
            assert round_metrics["rows_updated"] > 0
        stats = trainer.training_stats()
        assert stats["iterations"] == 3
        assert stats["words"] == 24
        assert stats["final_alpha"] == pytest.approx(fast_config.learning_rate)

    def test_more_partitions_than_sentences(self, tiny_corpus, fast_config):
        trainer = Trainer(dataclasses.replace(fast_config, num_partitions=5))

        model = trainer.fit(tiny_corpus)

        assert len(model) == 4
        assert trainer.history[0]["words"] == 8

    def test_broadcasts_released(self, tiny_corpus, fast_config):
        """Test that every broadcast is destroyed once training ends."""
        context = RecordingContext()

        Trainer(dataclasses.replace(fast_config, num_iterations=2), context).fit(tiny_corpus)

        assert context.broadcasts
        assert all(bc.destroyed for bc in context.broadcasts)

    def test_broadcasts_released_on_error(self, tiny_corpus, fast_config):
        context = RecordingContext()
        config = dataclasses.replace(fast_config, vector_size=2**31)

        with pytest.raises(CapacityExceededError):
            Trainer(config, context).fit(tiny_corpus)

        assert all(bc.destroyed for bc in context.broadcasts)

    def test_empty_vocabulary(self, tiny_corpus):
        config = TrainConfig(min_count=1000, seed=1)

        with pytest.raises(EmptyVocabularyError):
            Trainer(config).fit(tiny_corpus)

    def test_invalid_vector_size_fails_before_training(self):
        with pytest.raises(ConfigurationError):
            TrainConfig(vector_size=0)

    def test_capacity_exceeded(self, tiny_corpus, fast_config):
        config = dataclasses.replace(fast_config, vector_size=2**30)

        with pytest.raises(CapacityExceededError):
            Trainer(config).fit(tiny_corpus)

    def test_tensorboard_logging(self, tiny_corpus, fast_config, tmp_path):
        """Test that round metrics reach the TensorBoard logger."""
        config = dataclasses.replace(
            fast_config, num_iterations=2, tensorboard=True, tensorboard_dir=str(tmp_path)
        )

        with patch("dist_word2vec.utils.tensorboard_logger.TensorBoardLogger") as logger_cls:
            trainer = Trainer(config)
            trainer.fit(tiny_corpus)

        tb_logger = logger_cls.return_value
        assert tb_logger.log_round_metrics.call_count == 2
        assert tb_logger.log_weight_stats.call_count == 4
        tb_logger.log_hyperparameters.assert_called_once()
        hparams = tb_logger.log_hyperparameters.call_args[0][0]
        assert "tensorboard_dir" not in hparams
        tb_logger.close.assert_called_once()
        assert trainer.tb_logger is None

    def test_tensorboard_unavailable(self, tiny_corpus, fast_config, caplog):
        """Test that training continues without TensorBoard when it cannot be imported."""
        config = dataclasses.replace(fast_config, tensorboard=True)

        with patch.dict(sys.modules, {"dist_word2vec.utils.tensorboard_logger": None}):
            trainer = Trainer(config)
            with caplog.at_level(logging.WARNING, logger="dist_word2vec.training"):
                model = trainer.fit(tiny_corpus)

        assert len(model) == 4
        assert trainer.tb_logger is None
        assert "Skipping TensorBoard logging" in caplog.text

    def test_package_import_skips_tensorboard(self):
        """Test that importing the package does not load TensorBoard."""
        src_dir = os.path.dirname(os.path.dirname(dist_word2vec.__file__))
        env = {**os.environ, "PYTHONPATH": src_dir}
        result = subprocess.run(
            [
                sys.executable,
                "-c",
                "import sys, dist_word2vec; "
                "print('torch.utils.tensorboard' in sys.modules)",
            ],
            capture_output=True,
            text=True,
            env=env,
            check=True,
        )

        assert result.stdout.strip() == "False"

    @pytest.mark.slow
    def test_worker_processes_match_inline(self, tiny_corpus, fast_config):
        """Test that worker processes do not change the result."""
        config = dataclasses.replace(fast_config, num_partitions=3, num_iterations=2)

        inline = Trainer(config).fit(tiny_corpus)
        parallel = Trainer(dataclasses.replace(config, num_workers=2)).fit(tiny_corpus)

        assert np.array_equal(inline.word_vectors, parallel.word_vectors)

    @pytest.mark.slow
    def test_related_words_cluster(self, repetitive_corpus):
        """Test that words sharing contexts end up closer together."""
        config = TrainConfig(
            vector_size=20, learning_rate=0.05, min_count=1, window=3,
            num_partitions=2, num_iterations=5, seed=2024,
        )

        model = Trainer(config).fit(repetitive_corpus)

        animals = ["cat", "dog", "mouse", "horse"]
        colors = ["red", "green", "blue", "yellow"]
        within = [
            cosine(model.transform(a), model.transform(b))
            for group in (animals, colors)
            for i, a in enumerate(group)
            for b in group[i + 1 :]
        ]
        across = [
            cosine(model.transform(a), model.transform(c))
            for a in animals
            for c in colors
        ]
        assert np.mean(within) > np.mean(across)
