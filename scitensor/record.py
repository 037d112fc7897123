# Copyright (c) 2025 Soumyadip Sarkar.
# All rights reserved.
#
# This source code is licensed under the Apache-style license found in the
# LICENSE file in the root directory of this source tree.

"""
SciTensor: a self-documenting record of named variable arrays.
"""

from __future__ import annotations

import logging
import operator
from numbers import Real
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from .capability import TensorCapability

logger = logging.getLogger(__name__)

Operand = Union["SciTensor", float, int]


def _tensors_equal(left: TensorCapability, right: TensorCapability) -> bool:
    if left is right:
        return True
    if tuple(left.shape) != tuple(right.shape):
        return False
    return bool(
        np.array_equal(np.asarray(left.data), np.asarray(right.data), equal_nan=True)
    )


class SciTensor:
    """
    A record holding one or more named variable arrays plus a metadata table.

    All algebra, masking and statistics act on the *variable in use* and
    return a new ``SciTensor`` that carries the same variable name and a copy
    of the metadata; the operands are left untouched. Two things are mutable
    as well:

    * the variable-in-use cursor, moved by :meth:`select_variable`, so that
      switching variables does not copy the variable table;
    * :meth:`reshape`, :meth:`insert_variable` and :meth:`insert_metadata`,
      which update the record in place for staged construction.

    The in-place operators (``+=`` and friends) mutate the cursor tensor
    itself and hand back a new record wrapping it.

    Equality compares the variable table and the metadata, not the cursor.
    """

    __hash__ = object.__hash__

    def __init__(
        self,
        variable_name: str,
        tensor: TensorCapability,
        metadata: Optional[Mapping[str, Any]] = None,
    ):
        """
        Initialize a record holding a single variable.

        Args:
            variable_name: Name of the variable, which also becomes the variable in use
            tensor: Array values for the variable
            metadata: Optional initial key/value metadata (values are stored as strings)
        """
        self.variables: Dict[str, TensorCapability] = {variable_name: tensor}
        self.metadata: Dict[str, str] = {}
        self._variable_in_use = variable_name
        if metadata:
            self.insert_metadata(*metadata.items())

    @classmethod
    def from_variables(
        cls,
        variables: Mapping[str, TensorCapability],
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> "SciTensor":
        """Build a record from several variables; the first one becomes the variable in use."""

        if not variables:
            raise ValueError("A SciTensor needs at least one variable")

        names = iter(variables)
        first = next(names)
        record = cls(first, variables[first], metadata)
        for name in names:
            record.insert_variable(name, variables[name])
        return record

    def _wrap(self, tensor: TensorCapability) -> "SciTensor":
        """Wrap an operation result under the current variable name and metadata."""
        return SciTensor(self._variable_in_use, tensor, self.metadata)

    # Variable table
    @property
    def variable_in_use(self) -> str:
        """Name of the variable that operations act on."""
        return self._variable_in_use

    @property
    def tensor(self) -> TensorCapability:
        """The array of the variable in use."""
        return self.variables[self._variable_in_use]

    @property
    def shape(self) -> Tuple[int, ...]:
        return tuple(self.tensor.shape)

    @property
    def data(self) -> np.ndarray:
        return self.tensor.data

    def __contains__(self, name: object) -> bool:
        return name in self.variables

    def insert_variable(self, name: str, tensor: TensorCapability) -> None:
        """Insert a variable, overwriting any existing variable with the same name."""
        self.variables[name] = tensor

    def insert_metadata(self, *pairs: Tuple[str, Any], **items: Any) -> None:
        """Record ``(key, value)`` pairs and keyword items in the metadata table."""
        for key, value in pairs:
            self.metadata[str(key)] = str(value)
        for key, value in items.items():
            self.metadata[key] = str(value)

    def select_variable(self, name: str) -> "SciTensor":
        """Point the variable-in-use cursor at ``name``.

        An unknown name is logged and ignored: the cursor stays where it was
        and the same record is returned either way.
        """
        if name in self.variables:
            self._variable_in_use = name
        else:
            logger.error(
                "Variable '%s' was NOT FOUND in the variable table %s",
                name,
                list(self.variables),
            )
        return self

    def __getitem__(self, name: str) -> "SciTensor":
        return self.select_variable(name)

    def reshape(self, shape: Sequence[int], target_name: Optional[str] = None) -> "SciTensor":
        """Reshape the variable in use and store it under ``target_name``.

        ``target_name`` defaults to the variable in use, which is then replaced.
        Unlike every other operation this updates the record itself and returns it.
        """
        reshaped = self.tensor.reshape(tuple(shape))
        self.insert_variable(
            self._variable_in_use if target_name is None else target_name, reshaped
        )
        return self

    # Arithmetic operations
    @staticmethod
    def _operand(other: Any) -> Any:
        if isinstance(other, SciTensor):
            return other.tensor
        if isinstance(other, Real) and not isinstance(other, bool):
            return float(other)
        return NotImplemented

    def _binary(self, other: Any, op: Callable[[Any, Any], Any]) -> "SciTensor":
        operand = self._operand(other)
        if operand is NotImplemented:
            return NotImplemented
        return self._wrap(op(self.tensor, operand))

    def __add__(self, other: Operand) -> "SciTensor":
        return self._binary(other, operator.add)

    def __sub__(self, other: Operand) -> "SciTensor":
        return self._binary(other, operator.sub)

    def __mul__(self, other: Operand) -> "SciTensor":
        return self._binary(other, operator.mul)

    def __truediv__(self, other: Operand) -> "SciTensor":
        return self._binary(other, operator.truediv)

    def __iadd__(self, other: Operand) -> "SciTensor":
        return self._binary(other, operator.iadd)

    def __isub__(self, other: Operand) -> "SciTensor":
        return self._binary(other, operator.isub)

    def __imul__(self, other: Operand) -> "SciTensor":
        return self._binary(other, operator.imul)

    def __itruediv__(self, other: Operand) -> "SciTensor":
        return self._binary(other, operator.itruediv)

    def __matmul__(self, other: "SciTensor") -> "SciTensor":
        """Matrix multiplication operator (@)."""
        if not isinstance(other, SciTensor):
            return NotImplemented
        return self.matmul(other)

    def matmul(self, other: "SciTensor") -> "SciTensor":
        """Matrix multiplication of the variables in use."""
        if not isinstance(other, SciTensor):
            raise TypeError("matmul requires another SciTensor")
        return self._wrap(self.tensor.matmul(other.tensor))

    # Masking
    def mask(
        self, predicate: Callable[[np.ndarray], Any], mask_value: Optional[float] = None
    ) -> "SciTensor":
        """Keep elements satisfying ``predicate``; replace the others with the mask value."""
        return self._wrap(self.tensor.mask(predicate, mask_value))

    def set_mask(self, value: float) -> "SciTensor":
        """Return a record whose masking operations substitute ``value``."""
        return self._wrap(self.tensor.set_mask(value))

    def lt(self, value: Real) -> "SciTensor":
        return self._wrap(self.tensor.lt(value))

    def le(self, value: Real) -> "SciTensor":
        return self._wrap(self.tensor.le(value))

    def gt(self, value: Real) -> "SciTensor":
        return self._wrap(self.tensor.gt(value))

    def ge(self, value: Real) -> "SciTensor":
        return self._wrap(self.tensor.ge(value))

    def eq(self, value: Real) -> "SciTensor":
        return self._wrap(self.tensor.eq(value))

    def ne(self, value: Real) -> "SciTensor":
        return self._wrap(self.tensor.ne(value))

    def __lt__(self, value: Real) -> "SciTensor":
        return self.lt(value)

    def __le__(self, value: Real) -> "SciTensor":
        return self.le(value)

    def __gt__(self, value: Real) -> "SciTensor":
        return self.gt(value)

    def __ge__(self, value: Real) -> "SciTensor":
        return self.ge(value)

    # ``==`` against a number masks; against another record it compares contents.
    def __eq__(self, other: object):
        if isinstance(other, Real) and not isinstance(other, bool):
            return self.eq(other)
        if isinstance(other, SciTensor):
            return self._same_contents(other)
        return NotImplemented

    def __ne__(self, other: object):
        if isinstance(other, Real) and not isinstance(other, bool):
            return self.ne(other)
        if isinstance(other, SciTensor):
            return not self._same_contents(other)
        return NotImplemented

    def _same_contents(self, other: "SciTensor") -> bool:
        if self.metadata != other.metadata:
            return False
        if self.variables.keys() != other.variables.keys():
            return False
        return all(
            _tensors_equal(tensor, other.variables[name])
            for name, tensor in self.variables.items()
        )

    # Shape manipulation
    def broadcast(self, shape: Sequence[int]) -> "SciTensor":
        """Broadcast the variable in use to ``shape``."""
        return self._wrap(self.tensor.broadcast(tuple(shape)))

    def slice(self, *ranges: Tuple[int, int]) -> "SciTensor":
        """Slice the variable in use with ``(low, high)`` ranges, one per dimension."""
        return self._wrap(self.tensor.slice(*ranges))

    def copy(self) -> "SciTensor":
        """
        Copy the record, deep-copying only the variable in use.

        The other variables are shared with this record and the metadata
        table is copied.
        """
        variables = dict(self.variables)
        variables[self._variable_in_use] = self.tensor.copy()
        duplicate = SciTensor.from_variables(variables, self.metadata)
        return duplicate.select_variable(self._variable_in_use)

    # Statistical operations
    def mean(self, *axes: int) -> "SciTensor":
        """Mean along ``axes`` of the variable in use."""
        return self._wrap(self.tensor.mean(*axes))

    def std(self, *axes: int) -> "SciTensor":
        return self._wrap(self.tensor.std(*axes))

    def skew(self, *axes: int) -> "SciTensor":
        return self._wrap(self.tensor.skew(*axes))

    def detrend(self, axis: int) -> "SciTensor":
        return self._wrap(self.tensor.detrend(axis))

    def reduce_resolution(self, block_size: int, invalid: float = float("nan")) -> "SciTensor":
        """Block-average the variable in use with square ``block_size`` blocks."""
        return self._wrap(self.tensor.reduce_resolution(block_size, invalid))

    def reduce_rectangle_resolution(
        self, row_block: int, col_block: int, invalid: float = float("nan")
    ) -> "SciTensor":
        """Block-average the variable in use with ``row_block x col_block`` blocks."""
        return self._wrap(self.tensor.reduce_rectangle_resolution(row_block, col_block, invalid))

    # I/O
    def serialize(self, path: Union[str, Path], fmt: str = "hdf5") -> Path:
        """Write every variable and the metadata table to a single file at ``path``."""
        from .io import write_record

        return write_record(self, path, fmt=fmt)

    # String representations
    def __repr__(self) -> str:
        return (
            f"SciTensor(variable_in_use={self._variable_in_use!r}, "
            f"variables={list(self.variables)!r}, metadata={self.metadata!r})"
        )

    def __str__(self) -> str:
        lines = [f"Variable in use = {self._variable_in_use}", str(list(self.variables))]
        lines.extend(f"{key}: {value}" for key, value in self.metadata.items())
        return "\n".join(lines)


__all__ = ["SciTensor"]
