"""Distributed skip-gram trainer."""

import functools
import logging
import time
from collections import Counter
from dataclasses import asdict, dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from tqdm import tqdm

from dist_word2vec.aggregation import ParameterAggregator, ParameterTables
from dist_word2vec.config import TrainConfig
from dist_word2vec.dataflow import Broadcast, DataflowContext, PartitionedData
from dist_word2vec.hierarchical_softmax import SigmoidTable, create_binary_tree
from dist_word2vec.models import EmbeddingModel
from dist_word2vec.training.worker import (
    PartitionResult,
    RoundSettings,
    train_partition,
)
from dist_word2vec.vocabulary import Vocabulary, VocabularyBuilder, chunk_sentence

logger = logging.getLogger(__name__)


@dataclass
class TrainingSession:
    """Mutable state of one training run.

    Created fresh by every :meth:`Trainer.fit` call so nothing leaks between
    independent runs.
    """

    vocab: Vocabulary
    tables: ParameterTables
    sigmoid: SigmoidTable
    sentences: PartitionedData
    history: List[Dict[str, float]] = field(default_factory=list)

    @property
    def vocab_size(self) -> int:
        return len(self.vocab)


def _count_partition(idx: int, sentences: List[Sequence[str]]) -> List[Counter]:
    return [VocabularyBuilder.count_tokens(sentences)]


def _encode_partition(
    idx: int,
    sentences: List[Sequence[str]],
    *,
    vocab_hash: Broadcast,
    max_sentence_length: int,
) -> List[List[int]]:
    lookup = vocab_hash.value
    chunks = []
    for sentence in sentences:
        indices = [lookup[token] for token in sentence if token in lookup]
        chunks.extend(chunk_sentence(indices, max_sentence_length))
    return chunks


class Trainer:
    """Trainer for skip-gram Word2Vec with hierarchical softmax.

    Each round broadcasts a read-only snapshot of the parameters, trains every
    partition independently against it, and merges the sparse per-partition
    updates by summation.
    """

    def __init__(self, config: TrainConfig, context: Optional[DataflowContext] = None):
        """Initialize trainer.

        Args:
            config: Training configuration
            context: Dataflow context; defaults to one with config.num_workers
        """
        self.config = config
        self.context = context or DataflowContext(num_workers=config.num_workers)
        self.history: List[Dict[str, float]] = []
        self.tb_logger = None

    def learn_vocab(self, data: PartitionedData) -> Vocabulary:
        """Count tokens per partition and build the Huffman-coded vocabulary."""
        partial_counts = data.map_partitions_with_index(_count_partition).collect()
        counts = Counter()
        for partial in partial_counts:
            counts.update(partial)

        vocab = VocabularyBuilder(self.config.min_count).build_from_counts(counts)
        create_binary_tree(vocab)
        return vocab

    def fit(self, sentences: Iterable[Sequence[str]]) -> EmbeddingModel:
        """Learn vectors for every vocabulary word.

        Args:
            sentences: Tokenized sentences

        Returns:
            Trained embedding model

        Raises:
            EmptyVocabularyError: If no token reaches min_count
            CapacityExceededError: If the parameter tables are too large
        """
        config = self.config
        data = self.context.parallelize(sentences, config.num_partitions)
        vocab = self.learn_vocab(data)

        vocab_hash = self.context.broadcast(vocab.word_to_idx)
        codes = self.context.broadcast(vocab.code_arrays())
        sigmoid = SigmoidTable()
        bc_sigmoid = self.context.broadcast(sigmoid)
        try:
            encoded = data.map_partitions_with_index(
                functools.partial(
                    _encode_partition,
                    vocab_hash=vocab_hash,
                    max_sentence_length=config.max_sentence_length,
                )
            ).repartition(config.num_partitions)

            session = TrainingSession(
                vocab=vocab,
                tables=ParameterTables.initialize(len(vocab), config.vector_size, config.seed),
                sigmoid=sigmoid,
                sentences=encoded,
            )
            self._train(session, codes, bc_sigmoid)
        finally:
            vocab_hash.destroy()
            codes.destroy()
            bc_sigmoid.destroy()

        return EmbeddingModel(vocab.word_to_idx, session.tables.syn0, config.vector_size)

    def _train(self, session: TrainingSession, codes: Broadcast, bc_sigmoid: Broadcast) -> None:
        config = self.config
        aggregator = ParameterAggregator(session.tables)
        train_words_count = session.vocab.train_words_count
        total_words = config.num_iterations * train_words_count + 1

        self.history = session.history
        self._open_tensorboard()
        start_time = time.perf_counter()

        partitions = session.sentences.glom()
        pbar = tqdm(range(1, config.num_iterations + 1), desc="Iteration")
        try:
            for k in pbar:
                syn0_snapshot, syn1_snapshot = aggregator.snapshot()
                bc_syn0 = self.context.broadcast(syn0_snapshot)
                bc_syn1 = self.context.broadcast(syn1_snapshot)
                settings = RoundSettings(
                    iteration=k,
                    seed=config.seed,
                    vocab_size=session.vocab_size,
                    vector_size=config.vector_size,
                    window=config.window,
                    learning_rate=config.learning_rate,
                    num_partitions=config.num_partitions,
                    words_in_previous_iterations=(k - 1) * train_words_count,
                    total_words=total_words,
                )
                try:
                    results: List[PartitionResult] = self.context.run(
                        partitions,
                        functools.partial(
                            train_partition,
                            syn0=bc_syn0,
                            syn1=bc_syn1,
                            codes=codes,
                            sigmoid=bc_sigmoid,
                            settings=settings,
                        ),
                    )
                finally:
                    bc_syn0.destroy()
                    bc_syn1.destroy()

                rows_updated = aggregator.merge_round(result.updates for result in results)
                metrics = self._round_metrics(k, results, rows_updated)
                session.history.append(metrics)
                self._log_round(k, metrics, session)

                pbar.set_postfix(
                    {"loss": f"{metrics['avg_loss']:.4f}", "alpha": f"{metrics['alpha']:.6f}"}
                )
        finally:
            self._close_tensorboard(session, time.perf_counter() - start_time)

    @staticmethod
    def _round_metrics(
        iteration: int, results: List[PartitionResult], rows_updated: int
    ) -> Dict[str, float]:
        words = sum(result.word_count for result in results)
        pairs = sum(result.pair_count for result in results)
        loss = sum(result.loss for result in results)
        return {
            "iteration": iteration,
            "words": words,
            "pairs": pairs,
            "avg_loss": loss / max(1, pairs),
            "alpha": min((result.alpha for result in results), default=0.0),
            "rows_updated": rows_updated,
        }

    def _log_round(self, k: int, metrics: Dict[str, float], session: TrainingSession) -> None:
        logger.info(
            "iteration %d: words = %d, pairs = %d, avg_loss = %.4f, rows_updated = %d",
            k,
            metrics["words"],
            metrics["pairs"],
            metrics["avg_loss"],
            metrics["rows_updated"],
        )
        if self.tb_logger is not None:
            self.tb_logger.log_round_metrics(k, metrics)
            self.tb_logger.log_weight_stats("syn0", session.tables.syn0, k)
            self.tb_logger.log_weight_stats("syn1", session.tables.syn1, k)
            self.tb_logger.log_system_stats(k)

    def _open_tensorboard(self) -> None:
        self.tb_logger = None
        if not self.config.tensorboard:
            return
        try:
            from dist_word2vec.utils.tensorboard_logger import TensorBoardLogger

            config = self.config
            experiment_name = (
                f"skipgram_hs_dim{config.vector_size}_lr{config.learning_rate}"
                f"_p{config.num_partitions}"
            )
            self.tb_logger = TensorBoardLogger(
                log_dir=config.tensorboard_dir,
                log_system_stats=config.log_system_stats,
                experiment_name=experiment_name,
            )
        except ImportError:
            logger.warning("TensorBoard dependencies not available. Skipping TensorBoard logging.")

    def _close_tensorboard(self, session: TrainingSession, total_time: float) -> None:
        if self.tb_logger is None:
            return
        hparams = {
            key: value
            for key, value in asdict(self.config).items()
            if key not in ("tensorboard", "tensorboard_dir", "log_system_stats")
        }
        final_loss = session.history[-1]["avg_loss"] if session.history else 0.0
        self.tb_logger.log_hyperparameters(
            hparams, {"final_loss": final_loss, "time_sec": total_time}
        )
        vocab_size = session.vocab_size
        self.tb_logger.log_embedding_analysis(
            session.tables.syn0.reshape(vocab_size, self.config.vector_size),
            len(session.history),
        )
        self.tb_logger.close()
        self.tb_logger = None

    def training_stats(self) -> Dict[str, float]:
        """Summary of the last fit, in the shape printed by the CLI."""
        words = sum(round_metrics["words"] for round_metrics in self.history)
        pairs = sum(round_metrics["pairs"] for round_metrics in self.history)
        return {
            "iterations": len(self.history),
            "words": words,
            "pairs": pairs,
            "final_loss": self.history[-1]["avg_loss"] if self.history else 0.0,
            "final_alpha": self.history[-1]["alpha"] if self.history else 0.0,
        }
