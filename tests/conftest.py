# Copyright (c) 2025 Soumyadip Sarkar.
# All rights reserved.
#
# This source code is licensed under the Apache-style license found in the
# LICENSE file in the root directory of this source tree.

import sys
from pathlib import Path

import h5py
import numpy as np
import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def write_h5(path, attrs=None, **variables):
    """Write ``variables`` as root datasets of an HDF5 file at ``path``."""
    with h5py.File(path, "w") as f:
        for name, values in variables.items():
            f.create_dataset(name, data=np.asarray(values, dtype=np.float64))
        for key, value in (attrs or {}).items():
            f.attrs[key] = value
    return path


@pytest.fixture
def temp_sources(tmp_path):
    """Two HDF5 files exposing ``temp`` as 2x2 arrays."""
    first = write_h5(tmp_path / "first.h5", temp=[[1.0, 2.0], [3.0, 4.0]])
    second = write_h5(tmp_path / "second.h5", temp=[[5.0, 6.0], [7.0, 8.0]])
    return [first, second]


@pytest.fixture
def h5_file():
    """Factory writing HDF5 files: ``h5_file(path, attrs=None, **variables)``."""
    return write_h5
