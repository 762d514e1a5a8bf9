from __future__ import annotations

from typing import ClassVar, Literal

import numpy as np

from perturb_app.domain.errors import InvalidConfigurationError
from perturb_app.domain.ports.atom_ops import AtomOpsPort

Closeness = Literal["norm", "coordinate"]


class NumpyAtomOps(AtomOpsPort[np.ndarray]):
    """
    ndarray 原子の演算。
    - closeness="norm": ||a - b||_2 <= atol（既定）
    - closeness="coordinate": max_k |a_k - b_k| <= atol
    相対許容は持たない（atol=0 は完全一致のみ）。
    """

    __responsibility__: ClassVar[str] = "ndarray 原子の近似一致と線形結合"

    def __init__(self, closeness: Closeness = "norm") -> None:
        if closeness not in ("norm", "coordinate"):
            raise InvalidConfigurationError(f"unknown closeness: {closeness!r}")
        self.closeness = closeness

    def isapprox(self, a: np.ndarray, b: np.ndarray, *, atol: float) -> bool:
        a = np.asarray(a)
        b = np.asarray(b)
        if a.shape != b.shape:
            return False
        if atol == 0:
            return bool(np.array_equal(a, b))
        diff = np.abs(a - b)
        if self.closeness == "coordinate":
            return bool(diff.max(initial=0.0) <= atol)
        return bool(np.linalg.norm(diff) <= atol)

    def add(self, a: np.ndarray, b: np.ndarray) -> np.ndarray:
        return np.add(a, b)

    def scale(self, a: np.ndarray, w: float) -> np.ndarray:
        return np.multiply(a, float(w))


DEFAULT_ATOM_OPS = NumpyAtomOps()
