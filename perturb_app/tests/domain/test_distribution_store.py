from __future__ import annotations

import math

import numpy as np
import pytest

from perturb_app.domain.dto.distribution import FixedAtomsProbabilityDistribution
from perturb_app.domain.errors import InvalidConfigurationError


def test_uniform_assigns_one_over_n() -> None:
    atoms = [np.array([1.0, 0.0]), np.array([0.0, 1.0]), np.array([1.0, 0.0])]
    dist = FixedAtomsProbabilityDistribution.uniform(atoms)
    assert len(dist) == 3
    assert dist.weights == [1.0 / 3] * 3
    # 重複原子は構築時には許容
    assert dist.atoms[0] is atoms[0] and dist.atoms[2] is atoms[2]


def test_uniform_empty_is_allowed() -> None:
    dist = FixedAtomsProbabilityDistribution.uniform([])
    assert len(dist) == 0
    assert dist.total_weight == 0.0


def test_length_mismatch_raises() -> None:
    with pytest.raises(InvalidConfigurationError):
        FixedAtomsProbabilityDistribution(atoms=[np.zeros(2)], weights=[0.5, 0.5])


@pytest.mark.parametrize("bad", [-0.1, math.nan, math.inf])
def test_invalid_weight_raises(bad: float) -> None:
    with pytest.raises(InvalidConfigurationError):
        FixedAtomsProbabilityDistribution(atoms=[np.zeros(2), np.ones(2)], weights=[1.0, bad])


def test_total_weight_and_zero_weight_ok() -> None:
    dist = FixedAtomsProbabilityDistribution(
        atoms=[np.zeros(2), np.ones(2), np.full(2, 2.0)], weights=[0.25, 0.0, 0.75]
    )
    assert dist.total_weight == pytest.approx(1.0)


def test_invalid_configuration_is_value_error() -> None:
    # 呼び出し側は ValueError としても捕捉できる
    with pytest.raises(ValueError):
        FixedAtomsProbabilityDistribution(atoms=[], weights=[1.0])


@pytest.mark.parametrize("bad", ["heavy", None, [0.5]])
def test_non_numeric_weight_is_configuration_error(bad) -> None:
    with pytest.raises(InvalidConfigurationError):
        FixedAtomsProbabilityDistribution(atoms=[np.zeros(2), np.ones(2)], weights=[0.5, bad])
