from __future__ import annotations

from typing import Any, Protocol

import numpy as np

Atom = np.ndarray


class MaximizerPort(Protocol):
    """組合せmaximizerの抽象（裏はLP頂点オラクル/最短路ソルバ等どちらでも）"""

    __responsibility__ = "パラメータベクトル+補助データから解頂点を1つ返す"

    def __call__(self, theta: np.ndarray, **aux: Any) -> Atom:
        """
        純関数であること（同じ入力には同じ頂点、共有可変状態なし）。
        別スレッドから異なる θ で同時に呼ばれても安全であること。
        """
        ...
