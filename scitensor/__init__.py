# Copyright (c) 2025 Soumyadip Sarkar.
# All rights reserved.
#
# This source code is licensed under the Apache-style license found in the
# LICENSE file in the root directory of this source tree.

from __future__ import annotations

from . import config, errors, io, loaders
from ._backend import (
    as_tensor,
    available_backends,
    get_backend,
    register_backend,
    unregister_backend,
)
from .capability import TensorCapability
from .config import (
    default_backend,
    default_mask_value,
    default_partition_size,
    get_default_backend,
    get_default_mask_value,
    get_default_partition_size,
    set_default_backend,
    set_default_mask_value,
    set_default_partition_size,
)
from .dataset import Partition, SciDataset, partition_sources, random_dataset
from .errors import (
    BackendError,
    SciTensorError,
    ShapeError,
    SourceLoadError,
    VariableNotFoundError,
)
from .io import read_record, write_dataset, write_record
from .loaders import DatasetHandle, DatasetLoader, DefaultLoader, RandomSource
from .logging_config import setup_logging
from .record import SciTensor
from .tensor import NumpyTensor

__version__ = "0.1.0"


def tensor(data, mask_value: float | None = None) -> TensorCapability:
    """Create a tensor of the default backend from ``data``."""
    if mask_value is None:
        return as_tensor(data)
    return as_tensor(data).set_mask(mask_value)


__all__ = [
    "SciTensor",
    "SciDataset",
    "Partition",
    "partition_sources",
    "random_dataset",
    "TensorCapability",
    "NumpyTensor",
    "tensor",
    "DatasetHandle",
    "DatasetLoader",
    "DefaultLoader",
    "RandomSource",
    "read_record",
    "write_record",
    "write_dataset",
    "register_backend",
    "unregister_backend",
    "available_backends",
    "get_backend",
    "as_tensor",
    "set_default_partition_size",
    "get_default_partition_size",
    "default_partition_size",
    "set_default_mask_value",
    "get_default_mask_value",
    "default_mask_value",
    "set_default_backend",
    "get_default_backend",
    "default_backend",
    "setup_logging",
    "SciTensorError",
    "SourceLoadError",
    "VariableNotFoundError",
    "ShapeError",
    "BackendError",
    "config",
    "errors",
    "io",
    "loaders",
]
