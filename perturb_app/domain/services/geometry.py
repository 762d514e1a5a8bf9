from __future__ import annotations

import math

import numpy as np

from perturb_app.domain.dto.distribution import FixedAtomsProbabilityDistribution
from perturb_app.domain.errors import DegenerateInputError, InvalidConfigurationError


def get_angle(v: np.ndarray) -> float:
    """2次元ベクトルの偏角を [0, 2π] で返す。ノルム0は DegenerateInputError。"""
    v = np.asarray(v, dtype=float)
    if v.shape != (2,):
        raise InvalidConfigurationError(f"angle requires a 2-D vector, got shape {v.shape}")
    norm = float(np.linalg.norm(v))
    if math.isclose(norm, 0.0, abs_tol=1e-12):
        raise DegenerateInputError("cannot take the angle of a zero-norm vector")
    x, y = v / norm
    # acos の定義域外への丸め誤差を防ぐ
    x = min(max(float(x), -1.0), 1.0)
    if y >= 0:
        return math.acos(x)
    return math.pi + math.acos(-x)


def sort_atoms_by_angle(
    distribution: FixedAtomsProbabilityDistribution,
) -> tuple[list[np.ndarray], list[float]]:
    """偏角の昇順に並べた (atoms, weights) のコピーを返す（分布自体は変更しない）。"""
    order = sorted(range(len(distribution)), key=lambda i: get_angle(distribution.atoms[i]))
    return [distribution.atoms[i] for i in order], [distribution.weights[i] for i in order]


def objective_direction(alpha: float, radius: float = 0.5) -> np.ndarray:
    """θ = radius * (cos α, sin α)"""
    return radius * np.array([math.cos(alpha), math.sin(alpha)])
