# Copyright (c) 2025 Soumyadip Sarkar.
# All rights reserved.
#
# This source code is licensed under the Apache-style license found in the
# LICENSE file in the root directory of this source tree.

"""
NumPy implementation of the tensor capability used by ``SciTensor`` records.
"""

from __future__ import annotations

from numbers import Real
from typing import Any, Callable, Optional, Sequence, Tuple, Union

import numpy as np

from .config import get_default_mask_value
from .errors import ShapeError

Operand = Union["NumpyTensor", float, int]


def _normalize_shape(shape: Tuple[Union[int, Sequence[int]], ...]) -> Tuple[int, ...]:
    """Accept both ``f(2, 3)`` and ``f((2, 3))`` call styles."""

    if len(shape) == 1 and isinstance(shape[0], (list, tuple)):
        return tuple(int(dim) for dim in shape[0])
    return tuple(int(dim) for dim in shape)


def _axes_or_none(axes: Tuple[int, ...]) -> Optional[Tuple[int, ...]]:
    if len(axes) == 1 and isinstance(axes[0], (list, tuple)):
        axes = tuple(axes[0])
    return tuple(axes) if axes else None


class NumpyTensor:
    """
    A dense float64 array with a mask value, backed by a NumPy ``ndarray``.

    Every operation that produces a new array returns a new ``NumpyTensor``
    that owns its storage. Only the in-place operators (``+=``, ``-=``,
    ``*=``, ``/=``) mutate the receiver. Elementwise operands must have
    exactly the same shape; there is no implicit broadcasting.
    """

    # Keep NumPy from claiming mixed operations such as ``ndarray + NumpyTensor``.
    __array_priority__ = 1000
    __hash__ = object.__hash__

    @classmethod
    def _wrap_array(cls, array: np.ndarray, mask_value: float) -> "NumpyTensor":
        """Instantiate a ``NumpyTensor`` that takes ownership of ``array``."""

        instance = cls.__new__(cls)
        instance._array = array
        instance._mask_value = mask_value
        return instance

    def __init__(self, data: Any, mask_value: Optional[float] = None):
        """
        Initialize a tensor.

        Args:
            data: Input data (nested lists, numpy array, scalar, or another tensor)
            mask_value: Value that masking operations substitute for rejected
                elements. Defaults to the configured default mask value.

        Examples:
            >>> t1 = NumpyTensor([[1, 2], [3, 4]])
            >>> t2 = NumpyTensor(np.zeros((4, 4)), mask_value=-9999.0)
        """
        if isinstance(data, NumpyTensor):
            # Copy constructor
            array = data._array.copy()
            if mask_value is None:
                mask_value = data._mask_value
        else:
            array = np.array(data, dtype=np.float64)

        self._array = array
        self._mask_value = (
            get_default_mask_value() if mask_value is None else float(mask_value)
        )

    # Core properties
    @property
    def shape(self) -> Tuple[int, ...]:
        """Get tensor shape as tuple."""
        return tuple(self._array.shape)

    @property
    def data(self) -> np.ndarray:
        """Read-only flat view of the values in row-major order."""
        flat = self._array.reshape(-1).view()
        flat.flags.writeable = False
        return flat

    @property
    def mask_value(self) -> float:
        return self._mask_value

    @property
    def ndim(self) -> int:
        """Number of dimensions."""
        return self._array.ndim

    # Data conversion methods
    def numpy(self) -> np.ndarray:
        """Return the underlying array without copying."""
        return self._array

    def __array__(self, dtype=None, copy=None) -> np.ndarray:
        """Support NumPy's array protocol."""
        if dtype is not None:
            return self._array.astype(dtype)
        return self._array.copy() if copy else self._array

    # Operand handling
    def _operand(self, other: Any) -> Any:
        if isinstance(other, NumpyTensor):
            array = other._array
        elif isinstance(other, Real) and not isinstance(other, bool):
            return float(other)
        elif hasattr(other, "shape") and hasattr(other, "data"):
            # Any other TensorCapability implementation
            array = np.asarray(other.data, dtype=np.float64).reshape(other.shape)
        else:
            return NotImplemented

        if array.shape != self._array.shape:
            raise ShapeError(
                f"Shape mismatch: {self.shape} is not compatible with {tuple(array.shape)}"
            )
        return array

    def _binary(self, other: Any, ufunc: np.ufunc) -> "NumpyTensor":
        operand = self._operand(other)
        if operand is NotImplemented:
            return NotImplemented
        with np.errstate(divide="ignore", invalid="ignore"):
            result = ufunc(self._array, operand)
        return self._wrap_array(result, self._mask_value)

    def _inplace(self, other: Any, ufunc: np.ufunc) -> "NumpyTensor":
        operand = self._operand(other)
        if operand is NotImplemented:
            return NotImplemented
        with np.errstate(divide="ignore", invalid="ignore"):
            ufunc(self._array, operand, out=self._array)
        return self

    # Arithmetic operations
    def __add__(self, other: Operand) -> "NumpyTensor":
        return self._binary(other, np.add)

    def __sub__(self, other: Operand) -> "NumpyTensor":
        return self._binary(other, np.subtract)

    def __mul__(self, other: Operand) -> "NumpyTensor":
        return self._binary(other, np.multiply)

    def __truediv__(self, other: Operand) -> "NumpyTensor":
        return self._binary(other, np.true_divide)

    def __iadd__(self, other: Operand) -> "NumpyTensor":
        return self._inplace(other, np.add)

    def __isub__(self, other: Operand) -> "NumpyTensor":
        return self._inplace(other, np.subtract)

    def __imul__(self, other: Operand) -> "NumpyTensor":
        return self._inplace(other, np.multiply)

    def __itruediv__(self, other: Operand) -> "NumpyTensor":
        return self._inplace(other, np.true_divide)

    def __matmul__(self, other: "NumpyTensor") -> "NumpyTensor":
        """Matrix multiplication operator (@)."""
        return self.matmul(other)

    def matmul(self, other: "NumpyTensor") -> "NumpyTensor":
        """Matrix multiplication."""
        if isinstance(other, NumpyTensor):
            operand = other._array
        elif hasattr(other, "shape") and hasattr(other, "data"):
            operand = np.asarray(other.data, dtype=np.float64).reshape(other.shape)
        else:
            raise TypeError("matmul requires another tensor")

        try:
            result = np.matmul(self._array, operand)
        except ValueError as exc:
            raise ShapeError(
                f"Cannot multiply matrices of shape {self.shape} and {tuple(operand.shape)}"
            ) from exc
        return self._wrap_array(result, self._mask_value)

    # Masking
    def mask(
        self,
        predicate: Callable[[np.ndarray], Any],
        mask_value: Optional[float] = None,
    ) -> "NumpyTensor":
        """Keep elements where ``predicate`` holds, replace the rest with the mask value.

        ``predicate`` receives the whole array and must return a boolean array of
        the same shape (any vectorised comparison does).
        """
        fill = self._mask_value if mask_value is None else float(mask_value)
        keep = np.asarray(predicate(self._array), dtype=bool)
        if keep.shape != self._array.shape:
            raise ShapeError(
                f"Mask of shape {keep.shape} does not match tensor shape {self.shape}"
            )
        return self._wrap_array(np.where(keep, self._array, fill), self._mask_value)

    def set_mask(self, value: float) -> "NumpyTensor":
        """Return a copy whose masking operations substitute ``value``."""
        return self._wrap_array(self._array.copy(), float(value))

    def lt(self, value: Real) -> "NumpyTensor":
        """Preserve elements less than ``value``."""
        return self.mask(lambda a: a < value)

    def le(self, value: Real) -> "NumpyTensor":
        """Preserve elements less than or equal to ``value``."""
        return self.mask(lambda a: a <= value)

    def gt(self, value: Real) -> "NumpyTensor":
        """Preserve elements greater than ``value``."""
        return self.mask(lambda a: a > value)

    def ge(self, value: Real) -> "NumpyTensor":
        """Preserve elements greater than or equal to ``value``."""
        return self.mask(lambda a: a >= value)

    def eq(self, value: Real) -> "NumpyTensor":
        """Preserve elements equal to ``value``."""
        return self.mask(lambda a: a == value)

    def ne(self, value: Real) -> "NumpyTensor":
        """Preserve elements not equal to ``value``."""
        return self.mask(lambda a: a != value)

    def __lt__(self, value: Real) -> "NumpyTensor":
        return self.lt(value)

    def __le__(self, value: Real) -> "NumpyTensor":
        return self.le(value)

    def __gt__(self, value: Real) -> "NumpyTensor":
        return self.gt(value)

    def __ge__(self, value: Real) -> "NumpyTensor":
        return self.ge(value)

    # ``==`` against a number masks; against another tensor it compares contents.
    def __eq__(self, other: object):
        if isinstance(other, Real) and not isinstance(other, bool):
            return self.eq(other)
        if isinstance(other, NumpyTensor):
            return self.array_equal(other)
        return NotImplemented

    def __ne__(self, other: object):
        if isinstance(other, Real) and not isinstance(other, bool):
            return self.ne(other)
        if isinstance(other, NumpyTensor):
            return not self.array_equal(other)
        return NotImplemented

    # Comparison with other tensors
    def array_equal(self, other: "NumpyTensor") -> bool:
        """Check if tensors have the same shape and values (NaNs compare equal)."""
        return bool(np.array_equal(self._array, other._array, equal_nan=True))

    # Tensor manipulation methods
    def reshape(self, *shape: Union[int, Sequence[int]]) -> "NumpyTensor":
        """Reshape tensor to new shape."""
        target = _normalize_shape(shape)
        try:
            reshaped = self._array.reshape(target)
        except ValueError as exc:
            raise ShapeError(
                f"Cannot reshape tensor of shape {self.shape} into {target}"
            ) from exc
        return self._wrap_array(reshaped.copy(), self._mask_value)

    def broadcast(self, *shape: Union[int, Sequence[int]]) -> "NumpyTensor":
        """Broadcast the tensor to ``shape``."""
        target = _normalize_shape(shape)
        try:
            expanded = np.broadcast_to(self._array, target)
        except ValueError as exc:
            raise ShapeError(
                f"Cannot broadcast tensor of shape {self.shape} to {target}"
            ) from exc
        return self._wrap_array(expanded.copy(), self._mask_value)

    def slice(self, *ranges: Tuple[int, int]) -> "NumpyTensor":
        """Slice with one ``(low_inclusive, high_exclusive)`` pair per leading dimension."""
        if len(ranges) > self.ndim:
            raise ShapeError(
                f"Got {len(ranges)} ranges for a tensor with {self.ndim} dimensions"
            )
        index = []
        for dim, (low, high) in zip(self.shape, ranges):
            if not 0 <= low <= high <= dim:
                raise ShapeError(f"Range ({low}, {high}) is outside dimension of size {dim}")
            index.append(slice(low, high))
        return self._wrap_array(self._array[tuple(index)].copy(), self._mask_value)

    def copy(self) -> "NumpyTensor":
        """Create a deep copy."""
        return self._wrap_array(self._array.copy(), self._mask_value)

    # Statistics
    def _reduce(self, func: Callable[..., Any], axes: Tuple[int, ...]) -> "NumpyTensor":
        try:
            with np.errstate(divide="ignore", invalid="ignore"):
                result = func(self._array, _axes_or_none(axes))
        except (ValueError, IndexError) as exc:
            raise ShapeError(
                f"Invalid axes {axes} for tensor of shape {self.shape}"
            ) from exc
        return self._wrap_array(np.asarray(result, dtype=np.float64), self._mask_value)

    def mean(self, *axes: int) -> "NumpyTensor":
        """Mean over ``axes`` (all axes when none are given)."""
        return self._reduce(lambda a, ax: np.mean(a, axis=ax), axes)

    def std(self, *axes: int) -> "NumpyTensor":
        """Population standard deviation over ``axes``."""
        return self._reduce(lambda a, ax: np.std(a, axis=ax), axes)

    def skew(self, *axes: int) -> "NumpyTensor":
        """Population skewness (third standardized moment) over ``axes``."""

        def _skew(a: np.ndarray, ax: Optional[Tuple[int, ...]]) -> np.ndarray:
            deviation = a - np.mean(a, axis=ax, keepdims=True)
            m2 = np.mean(deviation**2, axis=ax)
            m3 = np.mean(deviation**3, axis=ax)
            return m3 / m2**1.5

        return self._reduce(_skew, axes)

    def detrend(self, axis: int) -> "NumpyTensor":
        """Remove the least-squares linear trend along ``axis``."""
        try:
            moved = np.moveaxis(self._array, axis, -1)
        except (ValueError, IndexError) as exc:
            raise ShapeError(
                f"Invalid axis {axis} for tensor of shape {self.shape}"
            ) from exc

        steps = moved.shape[-1]
        if steps == 0:
            return self.copy()
        t = np.arange(steps, dtype=np.float64)
        t -= t.mean()
        denominator = float(np.sum(t * t))
        offset = moved.mean(axis=-1, keepdims=True)
        if denominator == 0.0:
            trend = offset
        else:
            slope = np.sum(moved * t, axis=-1, keepdims=True) / denominator
            trend = offset + slope * t
        result = np.moveaxis(moved - trend, -1, axis)
        return self._wrap_array(np.ascontiguousarray(result), self._mask_value)

    def reduce_resolution(self, block_size: int, invalid: float = float("nan")) -> "NumpyTensor":
        """Block-average the last two dimensions using square blocks."""
        return self.reduce_rectangle_resolution(block_size, block_size, invalid)

    def reduce_rectangle_resolution(
        self, row_block: int, col_block: int, invalid: float = float("nan")
    ) -> "NumpyTensor":
        """
        Block-average the last two dimensions using ``row_block x col_block`` blocks.

        Elements equal to ``invalid`` (and NaNs) are left out of each average; a
        block with no valid element becomes ``invalid``. Trailing rows and columns
        that do not fill a whole block are dropped.
        """
        if row_block < 1 or col_block < 1:
            raise ValueError("Block sizes must be positive integers")
        if self.ndim < 2:
            raise ShapeError(
                f"Resolution reduction needs at least 2 dimensions, got shape {self.shape}"
            )

        *leading, rows, cols = self.shape
        out_rows, out_cols = rows // row_block, cols // col_block
        cropped = self._array[..., : out_rows * row_block, : out_cols * col_block]
        blocks = cropped.reshape(tuple(leading) + (out_rows, row_block, out_cols, col_block))

        valid = ~np.isnan(blocks)
        if not np.isnan(invalid):
            valid &= blocks != invalid

        totals = np.where(valid, blocks, 0.0).sum(axis=(-3, -1))
        counts = valid.sum(axis=(-3, -1))
        with np.errstate(divide="ignore", invalid="ignore"):
            averaged = totals / counts
        averaged[counts == 0] = invalid
        return self._wrap_array(averaged, self._mask_value)

    # String representations
    def __repr__(self) -> str:
        return f"NumpyTensor(shape={self.shape}, mask_value={self._mask_value})"

    def __str__(self) -> str:
        return str(self._array)


__all__ = ["NumpyTensor"]
