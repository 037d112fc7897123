# Copyright (c) 2025 Soumyadip Sarkar.
# All rights reserved.
#
# This source code is licensed under the Apache-style license found in the
# LICENSE file in the root directory of this source tree.

"""Exception types raised by scitensor."""

from __future__ import annotations


class SciTensorError(Exception):
    """Base class for every error raised by scitensor."""


class SourceLoadError(SciTensorError, OSError):
    """A dataset source could not be opened (unreachable, missing or malformed)."""

    def __init__(self, source, reason: str = ""):
        self.source = source
        message = f"Could not load dataset source {source!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class VariableNotFoundError(SciTensorError, KeyError):
    """The requested variable is absent from a loaded dataset."""

    def __init__(self, name: str, source=None):
        self.name = name
        self.source = source
        super().__init__(name)

    def __str__(self) -> str:
        if self.source is None:
            return f"Variable '{self.name}' was not found"
        return f"Variable '{self.name}' was not found in {self.source!r}"


class ShapeError(SciTensorError, ValueError):
    """Operand shapes are incompatible with the requested operation."""


class BackendError(SciTensorError, LookupError):
    """No tensor backend is registered under the requested name."""


__all__ = [
    "SciTensorError",
    "SourceLoadError",
    "VariableNotFoundError",
    "ShapeError",
    "BackendError",
]
