"""Command line argument parsing utilities."""

import argparse
from typing import List, Optional

from dist_word2vec.config import (
    DEFAULT_LEARNING_RATE,
    DEFAULT_MAX_SENTENCE_LENGTH,
    DEFAULT_MIN_COUNT,
    DEFAULT_NUM_ITERATIONS,
    DEFAULT_NUM_PARTITIONS,
    DEFAULT_VECTOR_SIZE,
    DEFAULT_WINDOW,
)


class ArgumentParser:
    """Centralized argument parser for Word2Vec CLI tools."""

    @staticmethod
    def create_train_parser() -> argparse.ArgumentParser:
        """Create argument parser for training CLI.

        Returns:
            Configured argument parser
        """
        parser = argparse.ArgumentParser(
            description="Train distributed skip-gram Word2Vec with hierarchical softmax"
        )

        ArgumentParser._add_data_args(parser)
        ArgumentParser._add_model_args(parser)
        ArgumentParser._add_training_args(parser)
        ArgumentParser._add_output_args(parser)
        ArgumentParser._add_system_args(parser)

        return parser

    @staticmethod
    def create_query_parser() -> argparse.ArgumentParser:
        """Create argument parser for query CLI.

        Returns:
            Configured argument parser
        """
        parser = argparse.ArgumentParser(
            description="Query saved Word2Vec embeddings for nearest neighbors"
        )

        parser.add_argument(
            "--run-dir",
            type=str,
            required=True,
            help="Path to directory containing a saved model",
        )
        parser.add_argument("--word", type=str, required=True, help="Query word")
        parser.add_argument(
            "--topn", type=int, default=10, help="Number of similar words to return"
        )

        return parser

    @staticmethod
    def _add_data_args(parser: argparse.ArgumentParser) -> None:
        """Add data-related arguments."""
        data_group = parser.add_argument_group("Data Options")

        data_group.add_argument(
            "--dataset",
            type=str,
            default="wikitext",
            help="HF dataset name (default: wikitext)",
        )
        data_group.add_argument(
            "--dataset-config",
            type=str,
            default="wikitext-2-raw-v1",
            help="HF dataset config",
        )
        data_group.add_argument(
            "--split", type=str, default="train[:20%]", help="HF dataset split slice"
        )
        data_group.add_argument(
            "--text-file",
            type=str,
            help="Optional path to a local text file, one sentence per line",
        )
        data_group.add_argument(
            "--synthetic-sentences",
            type=int,
            default=0,
            help="Generate N synthetic sentences for benchmarking",
        )
        data_group.add_argument(
            "--synthetic-vocab",
            type=int,
            default=1000,
            help="Synthetic vocab size",
        )
        data_group.add_argument(
            "--lower", action="store_true", dest="lowercase", help="Lowercase text"
        )
        data_group.add_argument(
            "--no-lower",
            action="store_false",
            dest="lowercase",
            help="Don't lowercase text",
        )
        parser.set_defaults(lowercase=True)
        data_group.add_argument(
            "--tokenizer",
            type=str,
            default="basic",
            choices=["basic", "simple", "split"],
            help="Tokenization strategy",
        )

    @staticmethod
    def _add_model_args(parser: argparse.ArgumentParser) -> None:
        """Add model-related arguments."""
        model_group = parser.add_argument_group("Model Configuration")

        model_group.add_argument(
            "--vector-size",
            type=int,
            default=DEFAULT_VECTOR_SIZE,
            help="Dimension of word vectors",
        )
        model_group.add_argument(
            "--window",
            type=int,
            default=DEFAULT_WINDOW,
            help="Maximum context window size",
        )
        model_group.add_argument(
            "--min-count",
            type=int,
            default=DEFAULT_MIN_COUNT,
            help="Minimum number of occurrences for a word to enter the vocabulary",
        )
        model_group.add_argument(
            "--max-sentence-length",
            type=int,
            default=DEFAULT_MAX_SENTENCE_LENGTH,
            help="Sentences longer than this are split into chunks",
        )

    @staticmethod
    def _add_training_args(parser: argparse.ArgumentParser) -> None:
        """Add training-related arguments."""
        train_group = parser.add_argument_group("Training Configuration")

        train_group.add_argument(
            "--lr",
            type=float,
            default=DEFAULT_LEARNING_RATE,
            help="Initial learning rate",
        )
        train_group.add_argument(
            "--num-partitions",
            type=int,
            default=DEFAULT_NUM_PARTITIONS,
            help="Number of data partitions trained in parallel",
        )
        train_group.add_argument(
            "--num-iterations",
            type=int,
            default=DEFAULT_NUM_ITERATIONS,
            help="Number of synchronized training rounds",
        )

        tensorboard_group = parser.add_argument_group("TensorBoard Logging")
        tensorboard_group.add_argument(
            "--tensorboard", action="store_true", help="Enable TensorBoard logging"
        )
        tensorboard_group.add_argument(
            "--tensorboard-dir",
            type=str,
            default="runs/tensorboard",
            help="TensorBoard log directory",
        )
        tensorboard_group.add_argument(
            "--log-system-stats",
            action="store_true",
            help="Log system statistics (CPU, memory) to TensorBoard",
        )

    @staticmethod
    def _add_system_args(parser: argparse.ArgumentParser) -> None:
        """Add system arguments."""
        system_group = parser.add_argument_group("System")

        system_group.add_argument(
            "--workers",
            type=int,
            default=0,
            help="Worker processes for running partitions (0 runs them inline)",
        )
        system_group.add_argument(
            "--seed",
            type=int,
            help="Random seed for reproducibility (default: random)",
        )

    @staticmethod
    def _add_output_args(parser: argparse.ArgumentParser) -> None:
        """Add output-related arguments."""
        output_group = parser.add_argument_group("Output Options")

        output_group.add_argument(
            "--out-dir",
            type=str,
            default="runs/latest",
            help="Output directory for saved files",
        )
        output_group.add_argument(
            "--save",
            action="store_true",
            help="Save the trained model after training",
        )


def parse_train_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse training command line arguments.

    Args:
        argv: Optional command line arguments

    Returns:
        Parsed arguments namespace
    """
    parser = ArgumentParser.create_train_parser()
    return parser.parse_args(argv)


def parse_query_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse query command line arguments.

    Args:
        argv: Optional command line arguments

    Returns:
        Parsed arguments namespace
    """
    parser = ArgumentParser.create_query_parser()
    return parser.parse_args(argv)
