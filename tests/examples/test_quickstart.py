# Copyright (c) 2025 Soumyadip Sarkar.
# All rights reserved.
#
# This source code is licensed under the Apache-style license found in the
# LICENSE file in the root directory of this source tree.

import numpy as np

import examples.quickstart as qs


def test_quickstart_combines_records(tmp_path):
    total, cold, coarse = qs.run(tmp_path, verbose=False)
    expected = 2 * np.arange(16, dtype=np.float64).reshape(4, 4) + 16
    np.testing.assert_array_equal(total.tensor.numpy(), expected)
    np.testing.assert_array_equal(cold.tensor.numpy(), np.where(expected <= 20.0, expected, 0.0))
    np.testing.assert_allclose(coarse.tensor.numpy(), [[21.0, 25.0], [37.0, 41.0]])
    assert total.metadata == {"units": "K", "sources": "2"}
