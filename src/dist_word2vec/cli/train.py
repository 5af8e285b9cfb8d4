"""Training CLI for distributed Word2Vec."""

import json
import logging
import os
import random
from dataclasses import asdict
from typing import List, Optional

from dist_word2vec.cli_args import parse_train_args
from dist_word2vec.config import DataConfig, TrainConfig
from dist_word2vec.data import (
    generate_synthetic_texts,
    load_texts_from_file,
    load_texts_from_hf,
)
from dist_word2vec.exceptions import Word2VecError
from dist_word2vec.models import EmbeddingModel
from dist_word2vec.tokenization import Tokenizer
from dist_word2vec.training import Trainer


def create_data_config(args) -> DataConfig:
    """Create data configuration from parsed arguments.

    Args:
        args: Parsed command line arguments

    Returns:
        Data configuration object
    """
    return DataConfig(lowercase=args.lowercase, tokenizer=args.tokenizer)


def create_train_config(args) -> TrainConfig:
    """Create training configuration from parsed arguments.

    Args:
        args: Parsed command line arguments

    Returns:
        Training configuration object

    Raises:
        ConfigurationError: If any option is out of range
    """
    options = dict(
        vector_size=args.vector_size,
        learning_rate=args.lr,
        num_partitions=args.num_partitions,
        num_iterations=args.num_iterations,
        min_count=args.min_count,
        window=args.window,
        max_sentence_length=args.max_sentence_length,
        num_workers=args.workers,
        tensorboard=args.tensorboard,
        tensorboard_dir=args.tensorboard_dir,
        log_system_stats=args.log_system_stats,
    )
    if args.seed is not None:
        options["seed"] = args.seed
    return TrainConfig(**options)


def load_training_texts(args) -> List[str]:
    """Load training texts based on arguments.

    Args:
        args: Parsed command line arguments

    Returns:
        List of training text strings
    """
    if args.synthetic_sentences > 0:
        rng = random.Random(args.seed)
        texts = generate_synthetic_texts(
            args.synthetic_sentences, args.synthetic_vocab, rng
        )
        print(f"Generated {len(texts)} synthetic sentences (vocab={args.synthetic_vocab}).")
        return texts

    if args.text_file:
        texts = load_texts_from_file(args.text_file)
        print(f"Loaded {len(texts)} lines from local file.")
        return texts

    print("Loading dataset from Hugging Face...")
    texts = load_texts_from_hf(args.dataset, args.dataset_config, args.split)
    print(f"Loaded {len(texts)} lines from HF dataset.")
    return texts


def save_training_artifacts(
    model: EmbeddingModel,
    data_config: DataConfig,
    train_config: TrainConfig,
    out_dir: str,
) -> None:
    """Save the model and the configuration it was trained with.

    Args:
        model: Trained model
        data_config: Data configuration
        train_config: Training configuration
        out_dir: Output directory
    """
    model.save(out_dir)

    config_data = {"data": asdict(data_config), "train": asdict(train_config)}

    config_path = os.path.join(out_dir, "config.json")
    with open(config_path, "w") as f:
        json.dump(config_data, f, indent=2)


def main(argv: Optional[List[str]] = None) -> int:
    """Main training function.

    Args:
        argv: Optional command line arguments

    Returns:
        Process exit code
    """
    logging.basicConfig(level=logging.INFO)

    args = parse_train_args(argv)
    try:
        data_config = create_data_config(args)
        train_config = create_train_config(args)
    except Word2VecError as e:
        print(json.dumps({"error": str(e)}))
        return 2

    raw_texts = load_training_texts(args)
    sentences = Tokenizer(data_config).tokenize_sentences(raw_texts)

    trainer = Trainer(train_config)
    print("Starting training...")
    try:
        model = trainer.fit(sentences)
    except Word2VecError as e:
        print(json.dumps({"error": str(e)}))
        return 1

    stats = trainer.training_stats()
    stats["vocab_size"] = model.num_words
    print(json.dumps(stats, indent=2))

    if args.save:
        save_training_artifacts(model, data_config, train_config, args.out_dir)
        print(f"Training artifacts saved to {args.out_dir}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
