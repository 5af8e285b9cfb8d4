"""Tests for the command line tools."""

import json
import os

import pytest

from dist_word2vec.cli import query_main, train_main
from dist_word2vec.cli.query import find_similar_words
from dist_word2vec.cli.train import create_train_config
from dist_word2vec.cli_args import parse_query_args, parse_train_args
from dist_word2vec.models import EmbeddingModel

CORPUS = [
    "the cat sat on the mat",
    "the dog sat on the log",
    "a cat and a dog played",
    "the mat and the log",
]


@pytest.fixture
def corpus_file(tmp_path):
    path = tmp_path / "corpus.txt"
    path.write_text("\n".join(CORPUS) + "\n", encoding="utf-8")
    return str(path)


def train_args(corpus_file, *extra):
    return [
        "--text-file", corpus_file,
        "--min-count", "1",
        "--vector-size", "8",
        "--window", "2",
        "--seed", "5",
        *extra,
    ]


class TestArgumentParsing:
    """Test cases for CLI argument parsing."""

    def test_train_defaults(self):
        args = parse_train_args([])

        assert args.vector_size == 100
        assert args.min_count == 5
        assert args.lowercase is True
        assert args.seed is None
        assert args.workers == 0
        assert args.save is False

    def test_create_train_config(self):
        args = parse_train_args(
            ["--vector-size", "16", "--lr", "0.05", "--num-partitions", "3", "--seed", "9"]
        )

        config = create_train_config(args)

        assert config.vector_size == 16
        assert config.learning_rate == 0.05
        assert config.num_partitions == 3
        assert config.seed == 9

    def test_query_args(self):
        args = parse_query_args(["--run-dir", "out", "--word", "cat"])

        assert args.run_dir == "out"
        assert args.word == "cat"
        assert args.topn == 10


class TestTrainCommand:
    """Test cases for the training command."""

    def test_train_and_save(self, corpus_file, tmp_path, capsys):
        out_dir = str(tmp_path / "run")

        code = train_main(train_args(corpus_file, "--save", "--out-dir", out_dir))

        assert code == 0
        for name in ("metadata.json", "vocab.json", "embeddings.npy", "config.json"):
            assert os.path.exists(os.path.join(out_dir, name))
        with open(os.path.join(out_dir, "config.json")) as f:
            saved = json.load(f)
        assert saved["train"]["vector_size"] == 8
        assert saved["train"]["seed"] == 5
        assert '"vocab_size"' in capsys.readouterr().out

    def test_invalid_option(self, corpus_file, capsys):
        code = train_main(train_args(corpus_file, "--num-partitions", "0"))

        assert code == 2
        assert "Number of partitions must be positive" in capsys.readouterr().out

    def test_empty_vocabulary(self, corpus_file, capsys):
        code = train_main(train_args(corpus_file, "--min-count", "1000"))

        assert code == 1
        assert '"error"' in capsys.readouterr().out

    def test_synthetic_corpus(self, capsys):
        code = train_main(
            [
                "--synthetic-sentences", "30",
                "--synthetic-vocab", "20",
                "--min-count", "1",
                "--vector-size", "4",
                "--seed", "1",
            ]
        )

        assert code == 0
        assert "Generated 30 synthetic sentences" in capsys.readouterr().out


class TestQueryCommand:
    """Test cases for the query command."""

    @pytest.fixture
    def run_dir(self, corpus_file, tmp_path, capsys):
        out_dir = str(tmp_path / "run")
        train_main(train_args(corpus_file, "--save", "--out-dir", out_dir))
        capsys.readouterr()
        return out_dir

    def test_query(self, run_dir, capsys):
        query_main(["--run-dir", run_dir, "--word", "cat", "--topn", "3"])

        result = json.loads(capsys.readouterr().out)
        assert result["word"] == "cat"
        assert len(result["neighbors"]) == 3
        assert all(word != "cat" for word, _ in result["neighbors"])

    def test_unknown_word(self, run_dir, capsys):
        query_main(["--run-dir", run_dir, "--word", "zebra"])

        result = json.loads(capsys.readouterr().out)
        assert result == {"error": "zebra not in vocabulary"}

    def test_missing_model(self, tmp_path, capsys):
        query_main(["--run-dir", str(tmp_path / "missing"), "--word", "cat"])

        assert "error" in json.loads(capsys.readouterr().out)

    def test_find_similar_words_invalid_count(self):
        model = EmbeddingModel.from_vectors({"x": [1.0, 0.0], "y": [0.0, 1.0]})

        assert "error" in find_similar_words(model, "x", 0)
