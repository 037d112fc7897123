# Copyright (c) 2025 Soumyadip Sarkar.
# All rights reserved.
#
# This source code is licensed under the Apache-style license found in the
# LICENSE file in the root directory of this source tree.

"""
Partitioned, lazily computed datasets of :class:`~scitensor.record.SciTensor` records.

A :class:`SciDataset` stores only its lineage: the ordered source descriptors,
the variable to extract and the partition size. Records are produced on
demand, one partition at a time, and nothing is cached, so any partition can
be recomputed from scratch (after a worker failure, for instance) with
identical results. Partitions share no mutable state and may be computed
concurrently by an external execution engine.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from .config import get_default_partition_size
from .loaders import DatasetLoader, DefaultLoader, RandomSource
from .record import SciTensor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Partition:
    """An ordered group of source descriptors forming one unit of parallel work."""

    index: int
    sources: Tuple[Any, ...]

    def __len__(self) -> int:
        return len(self.sources)

    def __str__(self) -> str:
        return f"{{idx:{self.index}, sources:{len(self.sources)}}}"


def partition_sources(sources: Sequence[Any], size: int) -> Tuple[Partition, ...]:
    """Group ``sources`` into consecutive partitions of ``size`` in list order.

    The last partition holds the remainder when ``len(sources)`` is not a
    multiple of ``size``. The grouping depends only on its arguments.
    """

    if isinstance(size, bool) or not isinstance(size, int) or size < 1:
        raise ValueError(f"Partition size must be a positive integer, got {size!r}")

    sources = tuple(sources)
    return tuple(
        Partition(index, sources[start : start + size])
        for index, start in enumerate(range(0, len(sources), size))
    )


class SciDataset:
    """
    A distributed dataset of records, each extracted from one dataset source.

    Args:
        sources: Ordered source descriptors (file paths, in-memory mappings or
            :class:`~scitensor.loaders.RandomSource` objects with the default loader)
        variable_name: Variable extracted from every source
        partition_size: Number of sources per partition; defaults to the
            configured default partition size
        loader: Object implementing ``open`` and ``extract_variable``; defaults
            to :class:`~scitensor.loaders.DefaultLoader`

    Examples:
        >>> dataset = SciDataset(["a.h5", "b.h5"], "temp")
        >>> dataset.num_partitions
        2
        >>> first, second = dataset.collect()
        >>> total = first + second
    """

    def __init__(
        self,
        sources: Iterable[Any],
        variable_name: str,
        partition_size: Optional[int] = None,
        loader: Optional[DatasetLoader] = None,
    ):
        self.sources: Tuple[Any, ...] = tuple(sources)
        self.variable_name = variable_name
        self.partition_size = (
            get_default_partition_size() if partition_size is None else partition_size
        )
        self.loader = DefaultLoader() if loader is None else loader
        # Validate the grouping eagerly so a bad size fails at construction.
        partition_sources((), self.partition_size)

    @property
    def partitions(self) -> Tuple[Partition, ...]:
        """Partitions derived from the sources; identical on every access."""
        return partition_sources(self.sources, self.partition_size)

    @property
    def num_partitions(self) -> int:
        return -(-len(self.sources) // self.partition_size)

    def partition(self, index: int) -> Partition:
        """Return the partition at ``index``."""
        partitions = self.partitions
        if not 0 <= index < len(partitions):
            raise IndexError(
                f"Partition index {index} out of range for {len(partitions)} partitions"
            )
        return partitions[index]

    def __len__(self) -> int:
        return len(self.sources)

    def compute(self, partition: Union[Partition, int]) -> Iterator[SciTensor]:
        """Lazily produce the records of ``partition`` in source order.

        Each source is opened, its variable extracted and the handle closed
        before the next source is touched. Loader errors propagate to the
        caller unchanged. The returned iterator can be consumed only once;
        call ``compute`` again to recompute the partition.
        """
        if not isinstance(partition, Partition):
            partition = self.partition(partition)
        return self._produce(partition.index, partition.sources)

    def _produce(self, index: int, sources: Tuple[Any, ...]) -> Iterator[SciTensor]:
        for source in sources:
            logger.debug(
                "Partition %d: loading '%s' from %r", index, self.variable_name, source
            )
            with self.loader.open(source) as handle:
                tensor = self.loader.extract_variable(handle, self.variable_name)
            yield SciTensor(self.variable_name, tensor)

    def __iter__(self) -> Iterator[SciTensor]:
        """Iterate every record, partition by partition in index order."""
        for partition in self.partitions:
            yield from self.compute(partition)

    def collect(self) -> List[SciTensor]:
        """Materialize every record in partition order."""
        return list(self)

    def write(self, directory: Union[str, Path], prefix: str = "record") -> List[Path]:
        """Write each record to its own HDF5 file under ``directory``."""
        from .io import write_dataset

        return write_dataset(self, directory, prefix=prefix)

    def __repr__(self) -> str:
        return (
            f"SciDataset(variable_name={self.variable_name!r}, "
            f"sources={len(self.sources)}, partitions={self.num_partitions})"
        )


def random_dataset(
    num_sources: int,
    variable_name: str = "data",
    shape: Sequence[int] = (10, 10),
    partition_size: Optional[int] = None,
    variables: Optional[Sequence[str]] = None,
    seed: int = 0,
) -> SciDataset:
    """Build a dataset of ``num_sources`` seeded random records.

    Every source generates ``variables`` (default: just ``variable_name``);
    source ``i`` uses seed ``seed + i``.
    """

    if num_sources < 0:
        raise ValueError("num_sources must be non-negative")

    names = tuple(variables) if variables else (variable_name,)
    if variable_name not in names:
        raise ValueError(f"variable '{variable_name}' is not among {names}")

    sources = [
        RandomSource(seed=seed + offset, shape=tuple(shape), variables=names)
        for offset in range(num_sources)
    ]
    return SciDataset(sources, variable_name, partition_size=partition_size)


__all__ = ["Partition", "partition_sources", "SciDataset", "random_dataset"]
