# Copyright (c) 2025 Soumyadip Sarkar.
# All rights reserved.
#
# This source code is licensed under the Apache-style license found in the
# LICENSE file in the root directory of this source tree.

"""
Reading and writing ``SciTensor`` records as HDF5 files.

Each variable becomes a root-level dataset of 32-bit floats with the
variable's own shape, and each metadata entry becomes a root attribute.
Files are written to a temporary name next to the target and moved into
place once complete.
"""

from __future__ import annotations

import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Union

import h5py
import numpy as np

from ._backend import as_tensor
from .config import OUTPUT_DTYPE
from .errors import SourceLoadError, VariableNotFoundError
from .record import SciTensor

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .dataset import SciDataset

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ("hdf5",)


def _check_format(fmt: str) -> None:
    if fmt.lower() not in SUPPORTED_FORMATS:
        raise ValueError(
            f"Unsupported format '{fmt}'; expected one of {', '.join(SUPPORTED_FORMATS)}"
        )


def _check_variable_names(names) -> None:
    # HDF5 treats "/" as a group separator.
    for name in names:
        if not name or "/" in name:
            raise ValueError(f"Variable name '{name}' cannot be stored as an HDF5 dataset")


def _output_mode(target: Path) -> int:
    """Permission bits for a written file: the existing target's, else 0o666 minus the umask."""
    try:
        return stat.S_IMODE(os.stat(target).st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def write_record(record: SciTensor, path: Union[str, Path], fmt: str = "hdf5") -> Path:
    """Write every variable and metadata entry of ``record`` to ``path``.

    Variable names must be non-empty and free of ``/``; otherwise ``ValueError``
    is raised before anything is written. A new file gets ``0o666`` minus the
    process umask, and an overwritten file keeps its permission bits.
    """

    _check_format(fmt)
    target = Path(path)
    _check_variable_names(record.variables)
    logger.info("Writing record with variables %s to: %s", list(record.variables), target)

    fd, temp_name = tempfile.mkstemp(
        prefix=f".{target.name}.", suffix=".tmp", dir=target.parent
    )
    os.close(fd)
    try:
        with h5py.File(temp_name, "w") as f:
            for name, tensor in record.variables.items():
                values = np.asarray(tensor.data, dtype=OUTPUT_DTYPE).reshape(tuple(tensor.shape))
                f.create_dataset(name, data=values)
            for key, value in record.metadata.items():
                f.attrs[key] = value
        os.chmod(temp_name, _output_mode(target))
        os.replace(temp_name, target)
    except Exception:
        logger.exception("Failed to write record to: %s", target)
        if os.path.exists(temp_name):
            os.remove(temp_name)
        raise

    logger.debug("Record written to: %s", target)
    return target


def read_record(
    path: Union[str, Path],
    variable_in_use: Optional[str] = None,
    backend: Optional[str] = None,
) -> SciTensor:
    """Read a file produced by :func:`write_record` back into a ``SciTensor``."""

    logger.info("Reading record from: %s", path)
    try:
        f = h5py.File(path, "r")
    except (OSError, ValueError) as exc:
        raise SourceLoadError(path, str(exc)) from exc

    with f:
        variables = {
            name: as_tensor(np.array(item[()], dtype=np.float64), backend)
            for name, item in f.items()
            if isinstance(item, h5py.Dataset)
        }
        metadata = {
            key: value.decode("utf-8") if isinstance(value, bytes) else str(value)
            for key, value in f.attrs.items()
        }

    if not variables:
        raise SourceLoadError(path, "file contains no variables")

    record = SciTensor.from_variables(variables, metadata)
    if variable_in_use is not None:
        if variable_in_use not in record:
            raise VariableNotFoundError(variable_in_use, path)
        record.select_variable(variable_in_use)
    return record


def write_dataset(
    dataset: "SciDataset",
    directory: Union[str, Path],
    prefix: str = "record",
    fmt: str = "hdf5",
) -> List[Path]:
    """Compute ``dataset`` and write each record to its own file in ``directory``.

    Files are named ``{prefix}_{partition}_{position}.h5`` so that a partition
    written twice (after a recomputation) overwrites its own files only.
    """

    _check_format(fmt)
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    written = []
    for partition in dataset.partitions:
        for position, record in enumerate(dataset.compute(partition)):
            target = directory / f"{prefix}_{partition.index:05d}_{position:05d}.h5"
            written.append(write_record(record, target, fmt=fmt))

    logger.info("Wrote %d records to: %s", len(written), directory)
    return written


__all__ = ["SUPPORTED_FORMATS", "write_record", "read_record", "write_dataset"]
