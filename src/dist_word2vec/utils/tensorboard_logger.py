"""TensorBoard logging utilities for distributed Word2Vec training."""

import os
import time
from typing import Any, Dict, Optional

import numpy as np
import psutil
import torch
from torch.utils.tensorboard import SummaryWriter


class TensorBoardLogger:
    """TensorBoard logger for per-round training metrics."""

    def __init__(
        self,
        log_dir: str,
        log_system_stats: bool = False,
        experiment_name: Optional[str] = None,
    ):
        """Initialize TensorBoard logger.

        Args:
            log_dir: Directory to save TensorBoard logs
            log_system_stats: Whether to log system statistics
            experiment_name: Optional experiment name for subdirectory
        """
        self.enable_system_logging = log_system_stats

        # Create experiment-specific directory
        if experiment_name:
            log_dir = os.path.join(log_dir, experiment_name)
        else:
            timestamp = time.strftime("%Y%m%d_%H%M%S")
            log_dir = os.path.join(log_dir, f"run_{timestamp}")

        self.writer = SummaryWriter(log_dir)
        self.log_dir = log_dir

        if self.enable_system_logging:
            self.process = psutil.Process()

        print(f"TensorBoard logging to: {log_dir}")
        print(f"  View with: tensorboard --logdir {log_dir}")

    def log_hyperparameters(self, hparams: Dict[str, Any], metrics: Dict[str, float]):
        """Log hyperparameters and metrics.

        Args:
            hparams: Dictionary of hyperparameters
            metrics: Dictionary of metrics
        """
        serializable_hparams = {
            key: value if isinstance(value, (int, float, str, bool)) else str(value)
            for key, value in hparams.items()
        }
        self.writer.add_hparams(serializable_hparams, metrics)

    def log_round_metrics(self, step: int, metrics: Dict[str, float]):
        """Log the scalar summary of one training round.

        Args:
            step: Round number
            metrics: Scalar metrics such as loss, alpha and word counts
        """
        for key, value in metrics.items():
            self.writer.add_scalar(f"train/{key}", value, step)

    def log_weight_stats(self, name: str, weights: np.ndarray, step: int):
        """Log statistics of a flat parameter table.

        Args:
            name: Table name, e.g. "syn0"
            weights: Parameter array
            step: Round number
        """
        tensor = torch.from_numpy(np.asarray(weights, dtype=np.float32))
        self.writer.add_scalar(f"weights/mean/{name}", tensor.mean(), step)
        self.writer.add_scalar(f"weights/std/{name}", tensor.std(), step)
        self.writer.add_scalar(f"weights/norm/{name}", tensor.norm(), step)
        self.writer.add_histogram(f"weights/{name}", tensor, step)

    def log_system_stats(self, step: int):
        """Log CPU and memory statistics.

        Args:
            step: Round number
        """
        if not self.enable_system_logging:
            return

        self.writer.add_scalar("system/cpu_percent", psutil.cpu_percent(interval=None), step)

        memory = psutil.virtual_memory()
        self.writer.add_scalar("system/memory_percent", memory.percent, step)
        self.writer.add_scalar("system/memory_used_gb", memory.used / 1e9, step)

        process_memory = self.process.memory_info()
        self.writer.add_scalar("system/process_memory_mb", process_memory.rss / 1e6, step)

    def log_embedding_analysis(self, embeddings: np.ndarray, step: int, prefix: str = "embeddings"):
        """Log norm and cosine similarity statistics of word vectors.

        Args:
            embeddings: Array of shape (vocab_size, vector_size)
            step: Round number
            prefix: Prefix for metric names
        """
        with torch.no_grad():
            vectors = torch.from_numpy(np.asarray(embeddings, dtype=np.float32))
            norms = vectors.norm(dim=1)
            self.writer.add_scalar(f"{prefix}/norm_mean", norms.mean(), step)

            if vectors.shape[0] < 2:
                return

            self.writer.add_scalar(f"{prefix}/norm_std", norms.std(), step)
            normalized = torch.nn.functional.normalize(vectors, p=2, dim=1)
            similarity = normalized @ normalized.t()
            mask = ~torch.eye(similarity.size(0), dtype=torch.bool)
            off_diagonal = similarity[mask]
            self.writer.add_scalar(f"{prefix}/cosine_sim_mean", off_diagonal.mean(), step)
            self.writer.add_scalar(f"{prefix}/cosine_sim_std", off_diagonal.std(), step)

    def close(self):
        """Close the TensorBoard writer."""
        self.writer.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
