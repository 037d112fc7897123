# Copyright (c) 2025 Soumyadip Sarkar.
# All rights reserved.
#
# This source code is licensed under the Apache-style license found in the
# LICENSE file in the root directory of this source tree.

"""Quickstart for scitensor.

Writes two small HDF5 files holding a ``temp`` variable, builds a dataset
over them, and combines the records with record algebra: an elementwise
sum, a mask keeping cold cells and a block-averaged mean field.
"""

from __future__ import annotations

import tempfile
from pathlib import Path

import h5py
import numpy as np

import scitensor as st


def make_sources(directory: Path) -> list[Path]:
    """Create two 4x4 ``temp`` files in ``directory``."""

    paths = []
    for index in range(2):
        path = directory / f"temp_{index}.h5"
        with h5py.File(path, "w") as f:
            f.create_dataset("temp", data=np.arange(16, dtype=np.float64).reshape(4, 4) + 16 * index)
        paths.append(path)
    return paths


def run(directory: Path, verbose: bool = True):
    """Sum the records of a two-source dataset and summarise the result.

    Returns
    -------
    tuple[SciTensor, SciTensor, SciTensor]
        The sum, the masked sum and the 2x2 block-averaged sum.
    """

    dataset = st.SciDataset(make_sources(directory), "temp")
    first, second = dataset.collect()

    total = first + second
    total.insert_metadata(("units", "K"), ("sources", len(dataset)))
    cold = total <= 20.0
    coarse = total.reduce_resolution(2)

    if verbose:
        print(dataset)
        print(total)
        print("sum:\n", total.tensor)
        print("cold cells:\n", cold.tensor)
        print("2x2 block means:\n", coarse.tensor)
    return total, cold, coarse


def main():  # pragma: no cover - example script
    with tempfile.TemporaryDirectory() as tmp:
        run(Path(tmp))


if __name__ == "__main__":  # pragma: no cover - example script
    main()
