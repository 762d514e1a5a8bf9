from __future__ import annotations

import numpy as np
import pytest

from perturb_app.domain.dto.distribution import FixedAtomsProbabilityDistribution
from perturb_app.domain.errors import EmptyDistributionError
from perturb_app.domain.services.expectation import compute_expectation


def test_weighted_mean_of_atoms() -> None:
    dist = FixedAtomsProbabilityDistribution(
        atoms=[np.array([1.0, 0.0]), np.array([0.0, 1.0]), np.array([-1.0, 0.0])],
        weights=[0.5, 0.25, 0.25],
    )
    np.testing.assert_allclose(compute_expectation(dist), [0.25, 0.25])


def test_single_atom_expectation_is_the_atom() -> None:
    atom = np.array([0.3, -0.7, 2.0])
    dist = FixedAtomsProbabilityDistribution(atoms=[atom], weights=[1.0])
    out = compute_expectation(dist)
    assert out.shape == (3,)
    np.testing.assert_array_equal(out, atom)


def test_unnormalized_weights_give_weighted_sum() -> None:
    # 正規化は呼び出し側の責務: 総和≠1 ならそのまま加重和
    dist = FixedAtomsProbabilityDistribution(
        atoms=[np.array([1.0, 1.0]), np.array([2.0, 0.0])], weights=[2.0, 3.0]
    )
    np.testing.assert_allclose(compute_expectation(dist), [8.0, 2.0])


def test_empty_distribution_raises() -> None:
    with pytest.raises(EmptyDistributionError):
        compute_expectation(FixedAtomsProbabilityDistribution())


def test_expectation_does_not_mutate_atoms() -> None:
    a = np.array([1.0, 2.0])
    dist = FixedAtomsProbabilityDistribution(atoms=[a, a.copy()], weights=[0.5, 0.5])
    compute_expectation(dist)
    np.testing.assert_array_equal(a, [1.0, 2.0])
