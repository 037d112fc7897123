# Copyright (c) 2025 Soumyadip Sarkar.
# All rights reserved.
#
# This source code is licensed under the Apache-style license found in the
# LICENSE file in the root directory of this source tree.

import numpy as np
import pytest

import scitensor as st
from scitensor import NumpyTensor, SciTensor


def make_record(values, name="temp", **metadata):
    return SciTensor(name, NumpyTensor(values), metadata)


def test_addition_leaves_operands_unchanged():
    a = make_record([[1.0, 2.0], [3.0, 4.0]], units="K")
    b = make_record([[5.0, 6.0], [7.0, 8.0]], name="other")
    a_before = a.tensor.numpy().copy()
    b_before = b.tensor.numpy().copy()

    total = a + b

    np.testing.assert_array_equal(a.tensor.numpy(), a_before)
    np.testing.assert_array_equal(b.tensor.numpy(), b_before)
    np.testing.assert_array_equal(total.tensor.numpy(), (a.tensor + b.tensor).numpy())
    assert total is not a and total is not b


def test_result_carries_left_name_and_metadata():
    a = make_record([1.0, 2.0], name="temp", units="K")
    b = make_record([1.0, 1.0], name="bias", units="C")
    result = a - b
    assert result.variable_in_use == "temp"
    assert list(result.variables) == ["temp"]
    assert result.metadata == {"units": "K"}
    assert result.metadata is not a.metadata


def test_result_holds_only_the_computed_variable():
    a = SciTensor.from_variables(
        {"temp": NumpyTensor([1.0, 2.0]), "pressure": NumpyTensor([9.0, 9.0])}
    )
    result = a * 2
    assert list(result.variables) == ["temp"]
    np.testing.assert_array_equal(result.data, [2.0, 4.0])


@pytest.mark.parametrize("scalar", [0.5, 3, -7.25, 1e6])
def test_scalar_round_trip(scalar):
    r = make_record([[1.5, -2.0], [3.25, 4.0]])
    back = (r + scalar) - scalar
    np.testing.assert_allclose(back.tensor.numpy(), r.tensor.numpy(), rtol=1e-12, atol=1e-9)


def test_scalar_mul_div():
    r = make_record([2.0, 4.0])
    np.testing.assert_array_equal((r * 3).data, [6.0, 12.0])
    np.testing.assert_array_equal((r / 2).data, [1.0, 2.0])
    np.testing.assert_array_equal((r / make_record([2.0, 8.0])).data, [1.0, 0.5])


def test_operations_use_variable_in_use():
    r = SciTensor.from_variables(
        {"temp": NumpyTensor([1.0, 2.0]), "rain": NumpyTensor([10.0, 20.0])}
    )
    r.select_variable("rain")
    result = r + 1
    assert result.variable_in_use == "rain"
    np.testing.assert_array_equal(result.data, [11.0, 21.0])


def test_shape_mismatch_is_reported():
    a = make_record([[1.0, 2.0], [3.0, 4.0]])
    b = make_record([1.0, 2.0])
    with pytest.raises(st.ShapeError):
        _ = a + b


def test_unsupported_operand_raises_type_error():
    a = make_record([1.0, 2.0])
    with pytest.raises(TypeError):
        _ = a + "one"
    with pytest.raises(TypeError):
        _ = a + True


def test_inplace_ops_mutate_cursor_tensor_and_return_new_record():
    a = make_record([1.0, 2.0], units="K")
    original = a
    tensor = a.tensor

    a += 1.0
    assert a is not original
    assert a.tensor is tensor
    np.testing.assert_array_equal(original.data, [2.0, 3.0])
    assert a.metadata == {"units": "K"}

    a *= make_record([2.0, 2.0])
    a -= 1
    a /= make_record([1.0, 5.0])
    np.testing.assert_array_equal(original.data, [3.0, 1.0])


def test_matrix_multiply():
    a = make_record([[1.0, 2.0], [3.0, 4.0]])
    identity = make_record(np.eye(2), name="eye")
    np.testing.assert_array_equal((a @ identity).tensor.numpy(), a.tensor.numpy())
    assert a.matmul(identity).variable_in_use == "temp"
    with pytest.raises(st.ShapeError):
        a @ make_record([[1.0, 2.0, 3.0]])
    with pytest.raises(TypeError):
        a.matmul(2.0)


def test_masking_less_equal_uses_default_mask():
    r = make_record([[1.0, 2.0], [3.0, 4.0]])
    masked = r <= 2
    np.testing.assert_array_equal(masked.tensor.numpy(), [[1.0, 2.0], [0.0, 0.0]])
    np.testing.assert_array_equal(r.tensor.numpy(), [[1.0, 2.0], [3.0, 4.0]])


def test_masking_operators():
    r = make_record([1.0, 2.0, 3.0])
    np.testing.assert_array_equal((r < 2).data, [1.0, 0.0, 0.0])
    np.testing.assert_array_equal((r > 2).data, [0.0, 0.0, 3.0])
    np.testing.assert_array_equal((r >= 2).data, [0.0, 2.0, 3.0])
    np.testing.assert_array_equal((r == 2).data, [0.0, 2.0, 0.0])
    np.testing.assert_array_equal((r != 2).data, [1.0, 0.0, 3.0])
    np.testing.assert_array_equal(r.le(1).data, [1.0, 0.0, 0.0])


def test_set_mask_changes_fill_value():
    r = make_record([1.0, 2.0, 3.0])
    masked = r.set_mask(np.nan).gt(1)
    np.testing.assert_array_equal(masked.data, [np.nan, 2.0, 3.0])
    np.testing.assert_array_equal((r > 1).data, [0.0, 2.0, 3.0])


def test_generic_mask():
    r = make_record([1.0, 2.0, 3.0, 4.0])
    np.testing.assert_array_equal(
        r.mask(lambda values: values % 2 == 1, mask_value=-1).data, [1.0, -1.0, 3.0, -1.0]
    )


def test_statistics_wrap_results():
    values = np.array([[1.0, 2.0], [3.0, 6.0]])
    r = make_record(values, units="K")
    mean = r.mean(0)
    assert mean.variable_in_use == "temp"
    assert mean.metadata == {"units": "K"}
    np.testing.assert_allclose(mean.data, [2.0, 4.0])
    np.testing.assert_allclose(r.std(1).data, values.std(axis=1))
    np.testing.assert_allclose(make_record([1.0, 2.0, 3.0]).skew().data, [0.0], atol=1e-12)
    np.testing.assert_allclose(make_record([1.0, 3.0, 5.0]).detrend(0).data, [0.0, 0.0, 0.0], atol=1e-12)


def test_reduce_resolution_and_broadcast():
    r = make_record(np.arange(16, dtype=np.float64).reshape(4, 4))
    np.testing.assert_allclose(
        r.reduce_resolution(2).tensor.numpy(), [[2.5, 4.5], [10.5, 12.5]]
    )
    assert r.reduce_rectangle_resolution(4, 2, -1.0).shape == (1, 2)
    assert make_record([1.0, 2.0]).broadcast([3, 2]).shape == (3, 2)


def test_slice_returns_new_record():
    r = make_record(np.arange(9, dtype=np.float64).reshape(3, 3))
    part = r.slice((0, 2), (1, 3))
    np.testing.assert_array_equal(part.tensor.numpy(), [[1.0, 2.0], [4.0, 5.0]])
    assert r.shape == (3, 3)


def test_axis_errors_come_from_backend():
    with pytest.raises(st.ShapeError):
        make_record([1.0, 2.0]).mean(2)
