from __future__ import annotations

import numpy as np
import pytest

from perturb_app.domain.errors import InvalidConfigurationError
from perturb_app.domain.services.numpy_atom_ops import NumpyAtomOps


def test_atol_zero_means_exact_equality() -> None:
    ops = NumpyAtomOps()
    assert ops.isapprox(np.array([1.0, 2.0]), np.array([1.0, 2.0]), atol=0.0)
    assert not ops.isapprox(np.array([1.0, 2.0]), np.array([1.0, 2.0 + 1e-12]), atol=0.0)


def test_norm_closeness_boundary_is_inclusive() -> None:
    ops = NumpyAtomOps("norm")
    assert ops.isapprox(np.array([0.0, 0.0]), np.array([3.0, 4.0]), atol=5.0)
    assert not ops.isapprox(np.array([0.0, 0.0]), np.array([3.0, 4.0]), atol=4.99)


def test_shape_mismatch_is_never_close() -> None:
    assert not NumpyAtomOps().isapprox(np.zeros(2), np.zeros(3), atol=1.0)


def test_linear_ops() -> None:
    ops = NumpyAtomOps()
    np.testing.assert_array_equal(ops.add(np.array([1.0, 2.0]), np.array([3.0, 4.0])), [4.0, 6.0])
    np.testing.assert_array_equal(ops.scale(np.array([1.0, -2.0]), 0.5), [0.5, -1.0])


def test_unknown_closeness_raises() -> None:
    with pytest.raises(InvalidConfigurationError):
        NumpyAtomOps("cosine")  # type: ignore[arg-type]
