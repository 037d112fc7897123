# Copyright (c) 2025 Soumyadip Sarkar.
# All rights reserved.
#
# This source code is licensed under the Apache-style license found in the
# LICENSE file in the root directory of this source tree.

from __future__ import annotations

import importlib
import logging
from threading import RLock
from typing import Any, Callable, Dict, Optional, Tuple, Union

from .capability import TensorCapability
from .config import get_default_backend
from .errors import BackendError

logger = logging.getLogger(__name__)

# A backend factory turns an array-like into a TensorCapability instance.
BackendFactory = Callable[[Any], TensorCapability]

# Built-in backends are given as "module:attribute" so they import on first use.
_BUILTIN_BACKENDS: Dict[str, str] = {
    "numpy": "scitensor.tensor:NumpyTensor",
}

# Registered factories, plus a cache of the ones already resolved.
_REGISTERED: Dict[str, Union[str, BackendFactory]] = dict(_BUILTIN_BACKENDS)
_RESOLVED: Dict[str, BackendFactory] = {}
_BACKEND_LOCK = RLock()


def _import_factory(target: str) -> BackendFactory:
    module_name, _, attribute = target.partition(":")
    module = importlib.import_module(module_name)
    factory = getattr(module, attribute, None)
    if factory is None:
        raise BackendError(f"Backend target '{target}' does not exist")
    return factory


def register_backend(name: str, factory: Union[str, BackendFactory]) -> None:
    """Register ``factory`` as the tensor backend called ``name``.

    ``factory`` is either a callable accepting an array-like and returning a
    :class:`~scitensor.capability.TensorCapability`, or a ``"module:attribute"``
    string resolved lazily on first use. Registering an existing name replaces
    the previous backend.
    """

    if not isinstance(name, str) or not name:
        raise ValueError("Backend name must be a non-empty string")
    if not (isinstance(factory, str) or callable(factory)):
        raise TypeError("Backend factory must be callable or a 'module:attribute' string")

    with _BACKEND_LOCK:
        _REGISTERED[name] = factory
        _RESOLVED.pop(name, None)
    logger.debug("Registered tensor backend '%s'", name)


def unregister_backend(name: str) -> None:
    """Remove a user registered backend. Built-in backends cannot be removed."""

    if name in _BUILTIN_BACKENDS:
        raise ValueError(f"Cannot unregister built-in backend '{name}'")
    if name == get_default_backend():
        raise ValueError(f"Backend '{name}' is the current default")

    with _BACKEND_LOCK:
        if name not in _REGISTERED:
            raise BackendError(f"Unknown backend '{name}'")
        del _REGISTERED[name]
        _RESOLVED.pop(name, None)


def available_backends() -> Tuple[str, ...]:
    """Return the names of every registered backend."""

    with _BACKEND_LOCK:
        return tuple(_REGISTERED)


def get_backend(name: Optional[str] = None) -> BackendFactory:
    """Resolve the factory registered under ``name`` (default backend when ``None``)."""

    if name is None:
        name = get_default_backend()

    with _BACKEND_LOCK:
        cached = _RESOLVED.get(name)
        if cached is not None:
            return cached

        target = _REGISTERED.get(name)
        if target is None:
            raise BackendError(f"Unknown backend '{name}'")

        factory = _import_factory(target) if isinstance(target, str) else target
        _RESOLVED[name] = factory
        return factory


def as_tensor(array: Any, backend: Optional[str] = None) -> TensorCapability:
    """Build a tensor of the selected backend from ``array``."""

    return get_backend(backend)(array)


__all__ = [
    "BackendFactory",
    "register_backend",
    "unregister_backend",
    "available_backends",
    "get_backend",
    "as_tensor",
]
