from __future__ import annotations

import math

import numpy as np
import pytest

from perturb_app.domain.dto.distribution import FixedAtomsProbabilityDistribution
from perturb_app.domain.errors import DegenerateInputError, InvalidConfigurationError
from perturb_app.domain.services.geometry import (
    get_angle,
    objective_direction,
    sort_atoms_by_angle,
)


@pytest.mark.parametrize(
    ("v", "expected"),
    [
        ((1.0, 0.0), 0.0),
        ((0.0, 2.0), math.pi / 2),
        ((-3.0, 0.0), math.pi),
        ((0.0, -1.0), 1.5 * math.pi),
        ((1.0, 1.0), math.pi / 4),
        ((1.0, -1.0), 1.75 * math.pi),
    ],
)
def test_get_angle_quadrants(v: tuple[float, float], expected: float) -> None:
    assert get_angle(np.array(v)) == pytest.approx(expected)


def test_get_angle_zero_vector_is_degenerate() -> None:
    with pytest.raises(DegenerateInputError):
        get_angle(np.zeros(2))


def test_get_angle_requires_2d() -> None:
    with pytest.raises(InvalidConfigurationError):
        get_angle(np.array([1.0, 0.0, 0.0]))


def test_sort_atoms_by_angle_keeps_pairs_and_store() -> None:
    atoms = [np.array([0.0, -1.0]), np.array([1.0, 0.0]), np.array([-1.0, 0.0])]
    dist = FixedAtomsProbabilityDistribution(atoms=atoms, weights=[0.2, 0.3, 0.5])

    sorted_atoms, sorted_weights = sort_atoms_by_angle(dist)

    assert [tuple(a) for a in sorted_atoms] == [(1.0, 0.0), (-1.0, 0.0), (0.0, -1.0)]
    assert sorted_weights == [0.3, 0.5, 0.2]
    # 元の分布は並べ替えない
    assert dist.weights == [0.2, 0.3, 0.5]


def test_objective_direction() -> None:
    np.testing.assert_allclose(objective_direction(math.pi / 2), [0.0, 0.5], atol=1e-15)
    np.testing.assert_allclose(objective_direction(0.0, radius=2.0), [2.0, 0.0])
