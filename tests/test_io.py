# Copyright (c) 2025 Soumyadip Sarkar.
# All rights reserved.
#
# This source code is licensed under the Apache-style license found in the
# LICENSE file in the root directory of this source tree.

import os
import stat

import h5py
import numpy as np
import pytest

import scitensor as st
from scitensor import NumpyTensor, SciTensor


def mixed_record():
    record = SciTensor.from_variables(
        {
            "temp": NumpyTensor([[1.5, 2.5], [3.5, 4.5]]),
            "profile": NumpyTensor(np.arange(3, dtype=np.float64)),
        }
    )
    record.insert_metadata(("units", "K"), ("model", "wrf"))
    return record


def test_serialize_writes_variables_and_attributes(tmp_path):
    path = tmp_path / "record.h5"
    assert mixed_record().serialize(path) == path

    with h5py.File(path, "r") as f:
        assert set(f.keys()) == {"temp", "profile"}
        assert f["temp"].shape == (2, 2)
        assert f["profile"].shape == (3,)
        assert f["temp"].dtype == np.float32
        assert f["profile"].dtype == np.float32
        np.testing.assert_array_equal(f["temp"][()], [[1.5, 2.5], [3.5, 4.5]])
        assert f.attrs["units"] == "K"
        assert f.attrs["model"] == "wrf"


def test_serialize_leaves_no_temporary_files(tmp_path):
    mixed_record().serialize(tmp_path / "record.h5")
    assert [p.name for p in tmp_path.iterdir()] == ["record.h5"]


def test_serialize_overwrites_existing_file(tmp_path):
    path = tmp_path / "record.h5"
    mixed_record().serialize(path)
    SciTensor("other", NumpyTensor([1.0])).serialize(path)
    with h5py.File(path, "r") as f:
        assert list(f.keys()) == ["other"]


def test_serialize_rejects_unknown_format(tmp_path):
    with pytest.raises(ValueError):
        mixed_record().serialize(tmp_path / "record.nc", fmt="grib")


def test_serialize_into_missing_directory_fails(tmp_path):
    with pytest.raises(OSError):
        mixed_record().serialize(tmp_path / "absent" / "record.h5")


def test_read_record_round_trip(tmp_path):
    path = tmp_path / "record.h5"
    original = mixed_record()
    original.serialize(path)

    loaded = st.read_record(path)
    assert loaded == original
    assert loaded.metadata == {"units": "K", "model": "wrf"}

    selected = st.read_record(path, variable_in_use="profile")
    assert selected.variable_in_use == "profile"
    with pytest.raises(st.VariableNotFoundError):
        st.read_record(path, variable_in_use="rain")


def test_read_record_errors(tmp_path):
    with pytest.raises(st.SourceLoadError):
        st.read_record(tmp_path / "missing.h5")

    empty = tmp_path / "empty.h5"
    with h5py.File(empty, "w"):
        pass
    with pytest.raises(st.SourceLoadError):
        st.read_record(empty)


def test_written_file_is_a_loadable_source(tmp_path):
    path = tmp_path / "record.h5"
    mixed_record().serialize(path)
    records = st.SciDataset([path], "profile").collect()
    np.testing.assert_array_equal(records[0].data, [0.0, 1.0, 2.0])


def test_write_dataset_one_file_per_record(tmp_path):
    dataset = st.random_dataset(5, "noise", shape=(2, 2), partition_size=2)
    written = dataset.write(tmp_path / "out")

    assert [p.name for p in written] == [
        "record_00000_00000.h5",
        "record_00000_00001.h5",
        "record_00001_00000.h5",
        "record_00001_00001.h5",
        "record_00002_00000.h5",
    ]
    reloaded = st.SciDataset(written, "noise").collect()
    for expected, actual in zip(dataset.collect(), reloaded):
        np.testing.assert_allclose(actual.data, expected.data, rtol=1e-6)


@pytest.mark.parametrize("name", ["air/temp", "/temp", ""])
def test_serialize_rejects_names_hdf5_cannot_store(tmp_path, name):
    record = SciTensor.from_variables(
        {"temp": NumpyTensor([1.0]), name: NumpyTensor([2.0])}
    )
    path = tmp_path / "record.h5"
    with pytest.raises(ValueError):
        record.serialize(path)
    assert list(tmp_path.iterdir()) == []


@pytest.fixture
def umask_022():
    previous = os.umask(0o022)
    yield
    os.umask(previous)


def test_serialized_file_follows_umask(tmp_path, umask_022):
    path = mixed_record().serialize(tmp_path / "record.h5")
    assert stat.S_IMODE(os.stat(path).st_mode) == 0o644

    written = st.random_dataset(1, "noise", shape=(2, 2)).write(tmp_path / "out")
    assert stat.S_IMODE(os.stat(written[0]).st_mode) == 0o644


def test_overwrite_keeps_existing_permissions(tmp_path, umask_022):
    path = tmp_path / "record.h5"
    mixed_record().serialize(path)
    os.chmod(path, 0o640)
    mixed_record().serialize(path)
    assert stat.S_IMODE(os.stat(path).st_mode) == 0o640
