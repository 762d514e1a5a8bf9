from __future__ import annotations

from typing import Protocol

import numpy as np


class NoisePort(Protocol):
    """θ に標準正規ノイズ z を作用させる戦略（加法/乗法を差し替え可能に）"""

    __responsibility__ = "摂動ベクトルの生成規則"

    name: str

    def apply(self, theta: np.ndarray, z: np.ndarray, epsilon: float) -> np.ndarray: ...
