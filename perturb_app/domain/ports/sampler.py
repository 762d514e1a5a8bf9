from __future__ import annotations

from typing import Any, Protocol

import numpy as np

from perturb_app.domain.dto.distribution import FixedAtomsProbabilityDistribution


class DistributionSamplerPort(Protocol):
    """摂動サンプラー（maximizerをn回叩いて経験分布を作る）"""

    __responsibility__ = "θ から原子/重みの経験分布を生成"

    def compute_probability_distribution(
        self, theta: np.ndarray, **aux: Any
    ) -> FixedAtomsProbabilityDistribution: ...
