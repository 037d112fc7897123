# Copyright (c) 2025 Soumyadip Sarkar.
# All rights reserved.
#
# This source code is licensed under the Apache-style license found in the
# LICENSE file in the root directory of this source tree.

"""Process-wide defaults used when callers do not pass explicit values."""

from __future__ import annotations

from contextlib import contextmanager
from numbers import Real
from typing import Iterator

_DEFAULT_PARTITION_SIZE = 1
_DEFAULT_MASK_VALUE = 0.0
_DEFAULT_BACKEND = "numpy"

# Files written by scitensor always store 32-bit floats.
OUTPUT_DTYPE = "float32"


# Global default partition size management


def set_default_partition_size(size: int) -> None:
    """Set the number of sources grouped into one partition by default."""
    global _DEFAULT_PARTITION_SIZE

    if isinstance(size, bool) or not isinstance(size, int) or size < 1:
        raise ValueError(f"Partition size must be a positive integer, got {size!r}")
    _DEFAULT_PARTITION_SIZE = size


def get_default_partition_size() -> int:
    """Get the number of sources grouped into one partition by default."""
    return _DEFAULT_PARTITION_SIZE


@contextmanager
def default_partition_size(size: int) -> Iterator[None]:
    """Temporarily change the default partition size."""
    previous = get_default_partition_size()
    set_default_partition_size(size)
    try:
        yield
    finally:
        set_default_partition_size(previous)


# Global default mask value management


def set_default_mask_value(value: float) -> None:
    """Set the value that masking replaces rejected elements with."""
    global _DEFAULT_MASK_VALUE

    if isinstance(value, bool) or not isinstance(value, Real):
        raise ValueError(f"Mask value must be a real number, got {value!r}")
    _DEFAULT_MASK_VALUE = float(value)


def get_default_mask_value() -> float:
    """Get the value that masking replaces rejected elements with."""
    return _DEFAULT_MASK_VALUE


@contextmanager
def default_mask_value(value: float) -> Iterator[None]:
    """Temporarily change the default mask value."""
    previous = get_default_mask_value()
    set_default_mask_value(value)
    try:
        yield
    finally:
        set_default_mask_value(previous)


# Global default backend management


def set_default_backend(name: str) -> None:
    """Select the registered backend used to build tensors from loaded arrays."""
    global _DEFAULT_BACKEND

    from ._backend import available_backends

    if name not in available_backends():
        raise ValueError(f"Unsupported backend '{name}'")
    _DEFAULT_BACKEND = name


def get_default_backend() -> str:
    """Get the name of the default tensor backend."""
    return _DEFAULT_BACKEND


@contextmanager
def default_backend(name: str) -> Iterator[None]:
    """Temporarily change the default tensor backend."""
    previous = get_default_backend()
    set_default_backend(name)
    try:
        yield
    finally:
        set_default_backend(previous)


__all__ = [
    "OUTPUT_DTYPE",
    "set_default_partition_size",
    "get_default_partition_size",
    "default_partition_size",
    "set_default_mask_value",
    "get_default_mask_value",
    "default_mask_value",
    "set_default_backend",
    "get_default_backend",
    "default_backend",
]
