# Copyright (c) 2025 Soumyadip Sarkar.
# All rights reserved.
#
# This source code is licensed under the Apache-style license found in the
# LICENSE file in the root directory of this source tree.

"""
Dataset source loaders.

A loader turns a source descriptor into an open :class:`DatasetHandle` and
extracts one named variable from it as a tensor. :class:`DefaultLoader`
understands three kinds of descriptors:

* a path (``str`` or ``os.PathLike``) to an HDF5 or netCDF-4 file,
* a mapping of variable name to array-like, for data already in memory,
* a :class:`RandomSource`, which generates seeded random variables.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Protocol, Tuple, runtime_checkable

import h5py
import numpy as np

from ._backend import as_tensor
from .capability import TensorCapability
from .errors import SourceLoadError, VariableNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RandomSource:
    """Descriptor of a synthetic dataset whose variables are seeded uniform noise.

    The same descriptor always produces the same values, so datasets built from
    random sources can be recomputed like any file-backed dataset.
    """

    seed: int
    shape: Tuple[int, ...] = (10, 10)
    variables: Tuple[str, ...] = ("data",)
    low: float = 0.0
    high: float = 1.0

    def generate(self) -> dict:
        arrays = {}
        for position, name in enumerate(self.variables):
            rng = np.random.default_rng((self.seed, position))
            arrays[name] = rng.uniform(self.low, self.high, size=self.shape)
        return arrays


class DatasetHandle:
    """An opened dataset whose variables can be read by name.

    Handles are context managers; leaving the ``with`` block releases the
    underlying file, if any.
    """

    def __init__(
        self,
        source: Any,
        variables: Mapping[str, Any],
        closer: Optional[Callable[[], None]] = None,
    ):
        self.source = source
        self._variables = variables
        self._closer = closer

    @property
    def variable_names(self) -> Tuple[str, ...]:
        return tuple(self._variables.keys())

    def __contains__(self, name: object) -> bool:
        return name in self._variables

    def read(self, name: str) -> np.ndarray:
        """Read variable ``name`` into a new float64 array."""
        if name not in self._variables:
            raise VariableNotFoundError(name, self.source)

        value = self._variables[name]
        if isinstance(value, h5py.Group):
            raise VariableNotFoundError(name, self.source)
        if isinstance(value, h5py.Dataset):
            value = value[()]

        try:
            return np.array(value, dtype=np.float64)
        except (TypeError, ValueError) as exc:
            raise SourceLoadError(
                self.source, f"variable '{name}' does not hold numeric data"
            ) from exc

    def close(self) -> None:
        if self._closer is not None:
            self._closer()
            self._closer = None

    def __enter__(self) -> "DatasetHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


@runtime_checkable
class DatasetLoader(Protocol):
    """Opens source descriptors and extracts variables from them as tensors."""

    def open(self, source: Any) -> DatasetHandle:
        ...

    def extract_variable(self, handle: DatasetHandle, name: str) -> TensorCapability:
        ...


class DefaultLoader:
    """Loader for file paths, in-memory mappings and :class:`RandomSource` descriptors.

    Args:
        backend: Name of the registered tensor backend used to wrap extracted
            arrays. ``None`` uses the configured default backend.
    """

    def __init__(self, backend: Optional[str] = None):
        self.backend = backend

    def open(self, source: Any) -> DatasetHandle:
        if isinstance(source, RandomSource):
            return DatasetHandle(source, source.generate())
        if isinstance(source, Mapping):
            return DatasetHandle(source, source)
        if isinstance(source, (str, os.PathLike)):
            return self._open_file(source)
        raise SourceLoadError(
            source, f"unsupported source descriptor of type {type(source).__name__}"
        )

    def _open_file(self, source: Any) -> DatasetHandle:
        path = os.fspath(source)
        logger.debug("Opening dataset file %s", path)
        try:
            h5_file = h5py.File(path, "r")
        except (OSError, ValueError) as exc:
            raise SourceLoadError(source, str(exc)) from exc
        return DatasetHandle(source, h5_file, closer=h5_file.close)

    def extract_variable(self, handle: DatasetHandle, name: str) -> TensorCapability:
        return as_tensor(handle.read(name), self.backend)

    def __repr__(self) -> str:
        return f"DefaultLoader(backend={self.backend!r})"


__all__ = ["RandomSource", "DatasetHandle", "DatasetLoader", "DefaultLoader"]
