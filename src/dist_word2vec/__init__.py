"""Distributed skip-gram Word2Vec with hierarchical softmax."""

__version__ = "0.1.0"

# Configuration
from dist_word2vec.config import DataConfig, TrainConfig

# Errors
from dist_word2vec.exceptions import (
    CapacityExceededError,
    ConfigurationError,
    EmptyVocabularyError,
    FormatError,
    NotFoundError,
    Word2VecError,
)

# Data handling
from dist_word2vec.tokenization import Tokenizer
from dist_word2vec.vocabulary import Vocabulary, VocabularyBuilder, VocabWord
from dist_word2vec.pairs import generate_skipgram_pairs

# Hierarchical Softmax
from dist_word2vec.hierarchical_softmax import (
    HuffmanTree,
    SigmoidTable,
    create_binary_tree,
)

# Distributed execution
from dist_word2vec.dataflow import Broadcast, DataflowContext, PartitionedData
from dist_word2vec.aggregation import ParameterAggregator, ParameterTables, merge_updates

# Training and model
from dist_word2vec.training import Trainer
from dist_word2vec.models import EmbeddingModel

# Utilities
from dist_word2vec.utils import load_model, save_model

__all__ = [
    # Configuration
    "DataConfig",
    "TrainConfig",
    # Errors
    "Word2VecError",
    "ConfigurationError",
    "EmptyVocabularyError",
    "CapacityExceededError",
    "NotFoundError",
    "FormatError",
    # Data
    "Tokenizer",
    "Vocabulary",
    "VocabularyBuilder",
    "VocabWord",
    "generate_skipgram_pairs",
    # Hierarchical Softmax
    "HuffmanTree",
    "SigmoidTable",
    "create_binary_tree",
    # Distributed execution
    "Broadcast",
    "DataflowContext",
    "PartitionedData",
    "ParameterAggregator",
    "ParameterTables",
    "merge_updates",
    # Training and model
    "Trainer",
    "EmbeddingModel",
    # Utilities
    "save_model",
    "load_model",
]
