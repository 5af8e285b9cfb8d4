"""Minimal partition-parallel dataflow layer.

Provides the handful of operations the trainer needs from a distributed
engine: slicing data into partitions, running a function over every
partition in parallel, collecting the results in partition order, and
broadcasting read-only values to the workers.

Partitions are executed through a :class:`torch.utils.data.DataLoader` whose
items are whole partitions. With ``num_workers=0`` every partition runs in
the calling process; otherwise each partition is handled by a DataLoader
worker process. Results are identical either way.
"""

from typing import Any, Callable, Generic, Iterable, List, Optional, Sequence, TypeVar

from torch.utils.data import DataLoader, Dataset

T = TypeVar("T")
R = TypeVar("R")


class Broadcast(Generic[T]):
    """Read-only value shared with every partition task."""

    def __init__(self, value: T):
        self._value = value
        self._destroyed = False

    @property
    def value(self) -> T:
        if self._destroyed:
            raise RuntimeError("Attempted to use a broadcast after it was destroyed")
        return self._value

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    def destroy(self) -> None:
        """Release the value; later access raises RuntimeError."""
        self._value = None
        self._destroyed = True


class _PartitionTasks(Dataset):
    """Dataset whose i-th item is ``fn(i, partitions[i])``."""

    def __init__(self, partitions: Sequence[List[Any]], fn: Callable[[int, List[Any]], Any]):
        self.partitions = partitions
        self.fn = fn

    def __len__(self) -> int:
        return len(self.partitions)

    def __getitem__(self, idx: int) -> Any:
        return self.fn(idx, self.partitions[idx])


def _keep_as_is(sample: Any) -> Any:
    """Collate function that returns partition results unconverted."""
    return sample


class DataflowContext:
    """Entry point for creating partitioned data and running tasks."""

    def __init__(self, num_workers: int = 0, multiprocessing_context: Optional[str] = None):
        """Initialize context.

        Args:
            num_workers: Worker processes used to run partitions (0 runs inline)
            multiprocessing_context: Optional start method for worker processes
        """
        if num_workers < 0:
            raise ValueError(f"num_workers must be nonnegative but got {num_workers}")
        self.num_workers = num_workers
        self.multiprocessing_context = multiprocessing_context

    def parallelize(self, data: Iterable[T], num_slices: int = 1) -> "PartitionedData[T]":
        """Split data into ``num_slices`` contiguous partitions."""
        if num_slices <= 0:
            raise ValueError(f"num_slices must be positive but got {num_slices}")
        items = list(data)
        bounds = [len(items) * i // num_slices for i in range(num_slices + 1)]
        partitions = [items[bounds[i] : bounds[i + 1]] for i in range(num_slices)]
        return PartitionedData(self, partitions)

    def broadcast(self, value: T) -> Broadcast[T]:
        """Wrap a value for read-only sharing with partition tasks."""
        return Broadcast(value)

    def run(
        self,
        partitions: Sequence[List[Any]],
        fn: Callable[[int, List[Any]], R],
    ) -> List[R]:
        """Run ``fn(index, partition)`` for every partition.

        Blocks until every partition is done. ``fn`` must be picklable when
        worker processes are used (a module-level function or a
        ``functools.partial`` of one).

        Returns:
            One result per partition, in partition order
        """
        if not partitions:
            return []

        num_workers = min(self.num_workers, len(partitions))
        loader = DataLoader(
            _PartitionTasks(partitions, fn),
            batch_size=None,
            shuffle=False,
            num_workers=num_workers,
            collate_fn=_keep_as_is,
            multiprocessing_context=(
                self.multiprocessing_context if num_workers > 0 else None
            ),
        )
        return list(loader)


class PartitionedData(Generic[T]):
    """Data split into partitions bound to a context."""

    def __init__(self, context: DataflowContext, partitions: List[List[T]]):
        self.context = context
        self.partitions = partitions

    @property
    def num_partitions(self) -> int:
        return len(self.partitions)

    def map_partitions_with_index(
        self, fn: Callable[[int, List[T]], List[R]]
    ) -> "PartitionedData[R]":
        """Transform every partition with ``fn(index, items)``."""
        return PartitionedData(self.context, self.context.run(self.partitions, fn))

    def repartition(self, num_partitions: int) -> "PartitionedData[T]":
        """Redistribute items round-robin over ``num_partitions`` partitions."""
        if num_partitions <= 0:
            raise ValueError(f"num_partitions must be positive but got {num_partitions}")
        partitions: List[List[T]] = [[] for _ in range(num_partitions)]
        for i, item in enumerate(self.collect()):
            partitions[i % num_partitions].append(item)
        return PartitionedData(self.context, partitions)

    def glom(self) -> List[List[T]]:
        """Return the partitions as lists."""
        return [list(partition) for partition in self.partitions]

    def collect(self) -> List[T]:
        """Return all items in partition order."""
        return [item for partition in self.partitions for item in partition]