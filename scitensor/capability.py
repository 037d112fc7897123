# Copyright (c) 2025 Soumyadip Sarkar.
# All rights reserved.
#
# This source code is licensed under the Apache-style license found in the
# LICENSE file in the root directory of this source tree.

"""
Structural interface every numeric tensor backend must satisfy.

``SciTensor`` only ever talks to its variables through this protocol, so any
dense array implementation providing these operations can be plugged in
through :func:`scitensor.register_backend`. Operations that logically produce
a new array must return a new instance; only the in-place operators
(``+=``, ``-=``, ``*=``, ``/=``) may mutate the receiver.

Shape problems (mismatched operands, invalid reshapes, bad axes) are the
backend's to detect and report as :class:`scitensor.errors.ShapeError`.
"""

from __future__ import annotations

from typing import Callable, Protocol, Sequence, Tuple, Union, runtime_checkable

import numpy as np

Scalar = Union[int, float]


@runtime_checkable
class TensorCapability(Protocol):
    """A dense n-dimensional array of doubles with a mask value."""

    @property
    def shape(self) -> Tuple[int, ...]:
        ...

    @property
    def data(self) -> np.ndarray:
        """Flat, row-major view of the values as float64."""
        ...

    @property
    def mask_value(self) -> float:
        ...

    # Elementwise algebra against another tensor or a scalar
    def __add__(self, other: Union["TensorCapability", Scalar]) -> "TensorCapability":
        ...

    def __sub__(self, other: Union["TensorCapability", Scalar]) -> "TensorCapability":
        ...

    def __mul__(self, other: Union["TensorCapability", Scalar]) -> "TensorCapability":
        ...

    def __truediv__(self, other: Union["TensorCapability", Scalar]) -> "TensorCapability":
        ...

    def __iadd__(self, other: Union["TensorCapability", Scalar]) -> "TensorCapability":
        ...

    def __isub__(self, other: Union["TensorCapability", Scalar]) -> "TensorCapability":
        ...

    def __imul__(self, other: Union["TensorCapability", Scalar]) -> "TensorCapability":
        ...

    def __itruediv__(self, other: Union["TensorCapability", Scalar]) -> "TensorCapability":
        ...

    def matmul(self, other: "TensorCapability") -> "TensorCapability":
        ...

    # Masking
    def mask(
        self, predicate: Callable[[np.ndarray], np.ndarray], mask_value: float | None = None
    ) -> "TensorCapability":
        ...

    def set_mask(self, value: float) -> "TensorCapability":
        ...

    def lt(self, value: Scalar) -> "TensorCapability":
        ...

    def le(self, value: Scalar) -> "TensorCapability":
        ...

    def gt(self, value: Scalar) -> "TensorCapability":
        ...

    def ge(self, value: Scalar) -> "TensorCapability":
        ...

    def eq(self, value: Scalar) -> "TensorCapability":
        ...

    def ne(self, value: Scalar) -> "TensorCapability":
        ...

    # Shape manipulation
    def reshape(self, shape: Sequence[int]) -> "TensorCapability":
        ...

    def broadcast(self, shape: Sequence[int]) -> "TensorCapability":
        ...

    def slice(self, *ranges: Tuple[int, int]) -> "TensorCapability":
        ...

    # Statistics
    def mean(self, *axes: int) -> "TensorCapability":
        ...

    def std(self, *axes: int) -> "TensorCapability":
        ...

    def skew(self, *axes: int) -> "TensorCapability":
        ...

    def detrend(self, axis: int) -> "TensorCapability":
        ...

    def reduce_resolution(self, block_size: int, invalid: float = ...) -> "TensorCapability":
        ...

    def reduce_rectangle_resolution(
        self, row_block: int, col_block: int, invalid: float = ...
    ) -> "TensorCapability":
        ...

    def copy(self) -> "TensorCapability":
        ...


__all__ = ["Scalar", "TensorCapability"]
