from __future__ import annotations

from typing import ClassVar

import numpy as np

from perturb_app.domain.errors import InvalidConfigurationError
from perturb_app.domain.ports.noise import NoisePort


class AdditiveNoise(NoisePort):
    """θ + ε z"""

    name: ClassVar[str] = "additive"

    def apply(self, theta: np.ndarray, z: np.ndarray, epsilon: float) -> np.ndarray:
        return theta + epsilon * z


class MultiplicativeNoise(NoisePort):
    """θ ⊙ (1 + ε z)（成分ごとのスケール）"""

    name: ClassVar[str] = "multiplicative"

    def apply(self, theta: np.ndarray, z: np.ndarray, epsilon: float) -> np.ndarray:
        return theta * (1.0 + epsilon * z)


_NOISES: dict[str, type[NoisePort]] = {
    AdditiveNoise.name: AdditiveNoise,
    MultiplicativeNoise.name: MultiplicativeNoise,
}


def noise_for(kind: str) -> NoisePort:
    try:
        return _NOISES[kind]()
    except KeyError as e:
        raise InvalidConfigurationError(f"unknown perturbation kind: {kind!r}") from e
