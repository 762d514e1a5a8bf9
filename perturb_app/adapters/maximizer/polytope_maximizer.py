from __future__ import annotations

from collections.abc import Sequence
from typing import Any, ClassVar

import numpy as np

from perturb_app.domain.errors import InvalidConfigurationError
from perturb_app.domain.ports.maximizer import MaximizerPort


def regular_polygon(n_vertices: int) -> np.ndarray:
    """単位円上の正N角形の頂点 (cos 2πk/N, sin 2πk/N), k=0..N-1 を (N, 2) で返す。"""
    if n_vertices < 3:
        raise InvalidConfigurationError(f"a polygon needs at least 3 vertices: {n_vertices}")
    k = np.arange(n_vertices)
    angles = 2.0 * np.pi * k / n_vertices
    return np.column_stack([np.cos(angles), np.sin(angles)])


def _as_vertices(vertices: Sequence[Sequence[float]] | np.ndarray) -> np.ndarray:
    arr = np.asarray(vertices, dtype=float)
    if arr.ndim != 2 or arr.shape[0] == 0:
        raise InvalidConfigurationError(f"vertices must be a non-empty (m, d) array, got {arr.shape}")
    return arr


class PolytopeVertexMaximizer(MaximizerPort):
    """
    線形オラクル: argmax_v <θ, v> の頂点を返す（同点は先頭の頂点）。
    - polytope= を補助データで渡すと保持している頂点の代わりに使う
    """

    __responsibility__: ClassVar[str] = "有限頂点集合上の線形最大化"

    def __init__(self, vertices: Sequence[Sequence[float]] | np.ndarray) -> None:
        self.vertices = _as_vertices(vertices)

    def __call__(self, theta: np.ndarray, **aux: Any) -> np.ndarray:
        polytope = aux.get("polytope")
        vertices = self.vertices if polytope is None else _as_vertices(polytope)
        theta = np.asarray(theta, dtype=float)
        if theta.shape != (vertices.shape[1],):
            raise ValueError(
                f"theta shape {theta.shape} does not match vertex dimension {vertices.shape[1]}"
            )
        return vertices[int(np.argmax(vertices @ theta))]
