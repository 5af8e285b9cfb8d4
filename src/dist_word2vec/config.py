"""Centralized configuration management for distributed Word2Vec."""

import random
from dataclasses import dataclass, field
from typing import Literal

from dist_word2vec.exceptions import ConfigurationError


# Constants
DEFAULT_VECTOR_SIZE = 100
DEFAULT_LEARNING_RATE = 0.025
DEFAULT_NUM_PARTITIONS = 1
DEFAULT_NUM_ITERATIONS = 1
DEFAULT_MIN_COUNT = 5
DEFAULT_WINDOW = 5
DEFAULT_MAX_SENTENCE_LENGTH = 1000

# Hierarchical softmax constants
EXP_TABLE_SIZE = 1000
MAX_EXP = 6
MAX_CODE_LENGTH = 40

# Learning rate is recomputed after this many words per worker
ALPHA_UPDATE_INTERVAL = 10000
MIN_ALPHA_FACTOR = 0.0001

# Largest flat parameter table that can be indexed with a signed 32-bit int
MAX_TABLE_SIZE = 2**31 - 1

MIN_TOKEN_LENGTH = 1
MAX_TOKEN_LENGTH = 50

# Type aliases
TokenizerType = Literal["basic", "simple", "split"]


def _random_seed() -> int:
    return random.getrandbits(63)


@dataclass
class DataConfig:
    """Configuration for turning raw text into token sentences."""

    lowercase: bool = True
    tokenizer: TokenizerType = "basic"
    min_token_length: int = MIN_TOKEN_LENGTH
    max_token_length: int = MAX_TOKEN_LENGTH


@dataclass
class TrainConfig:
    """Configuration for distributed skip-gram training.

    All numeric options are validated on construction so that a bad value
    fails before any corpus is scanned.
    """

    vector_size: int = DEFAULT_VECTOR_SIZE
    learning_rate: float = DEFAULT_LEARNING_RATE
    num_partitions: int = DEFAULT_NUM_PARTITIONS
    num_iterations: int = DEFAULT_NUM_ITERATIONS
    seed: int = field(default_factory=_random_seed)
    min_count: int = DEFAULT_MIN_COUNT
    window: int = DEFAULT_WINDOW
    max_sentence_length: int = DEFAULT_MAX_SENTENCE_LENGTH

    # Execution and logging
    num_workers: int = 0
    tensorboard: bool = False
    tensorboard_dir: str = "runs/tensorboard"
    log_system_stats: bool = False

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Check every option against its allowed range.

        Raises:
            ConfigurationError: If any option is out of range
        """
        if self.vector_size <= 0:
            raise ConfigurationError(
                f"vector size must be positive but got {self.vector_size}"
            )
        if not self.learning_rate > 0:
            raise ConfigurationError(
                f"Initial learning rate must be positive but got {self.learning_rate}"
            )
        if self.num_partitions <= 0:
            raise ConfigurationError(
                f"Number of partitions must be positive but got {self.num_partitions}"
            )
        if self.num_iterations < 0:
            raise ConfigurationError(
                f"Number of iterations must be nonnegative but got {self.num_iterations}"
            )
        if self.min_count < 0:
            raise ConfigurationError(
                f"Minimum number of times must be nonnegative but got {self.min_count}"
            )
        if self.window <= 0:
            raise ConfigurationError(
                f"Window of words must be positive but got {self.window}"
            )
        if self.max_sentence_length <= 0:
            raise ConfigurationError(
                "Maximum length of sentences must be positive but got "
                f"{self.max_sentence_length}"
            )
        if self.num_workers < 0:
            raise ConfigurationError(
                f"Number of workers must be nonnegative but got {self.num_workers}"
            )
