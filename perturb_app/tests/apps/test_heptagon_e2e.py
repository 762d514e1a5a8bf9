"""
正7角形上の線形オラクルを摂動で平滑化する end-to-end シナリオ。
θ = (0, 0.5), ε = 0.2, n = 100, seed = 0
"""

from __future__ import annotations

import numpy as np
import pytest

from perturb_app.adapters.maximizer.polytope_maximizer import (
    PolytopeVertexMaximizer,
    regular_polygon,
)
from perturb_app.apps.perturbation.sampler import PerturbedAdditive
from perturb_app.domain.services.compaction import compress_distribution
from perturb_app.domain.services.expectation import compute_expectation
from perturb_app.domain.services.geometry import objective_direction

N = 7
VERTICES = regular_polygon(N)
THETA = objective_direction(0.5 * np.pi, 0.5)
TRUE_INDEX = 2  # 偏角 4π/7 の頂点が <θ, v> を最大化


def _vertex_index(atom: np.ndarray) -> int:
    hits = [k for k in range(N) if np.array_equal(VERTICES[k], atom)]
    assert len(hits) == 1
    return hits[0]


def _inside_hull(p: np.ndarray, tol: float = 1e-12) -> bool:
    # 反時計回りの各辺に対して左側（または辺上）
    for k in range(N):
        a, b = VERTICES[k], VERTICES[(k + 1) % N]
        cross = (b[0] - a[0]) * (p[1] - a[1]) - (b[1] - a[1]) * (p[0] - a[0])
        if cross < -tol:
            return False
    return True


@pytest.fixture(params=[None, 4], ids=["sequential", "threads"])
def layer(request) -> PerturbedAdditive:
    return PerturbedAdditive(
        PolytopeVertexMaximizer(VERTICES),
        epsilon=0.2,
        nb_samples=100,
        seed=0,
        max_workers=request.param,
    )


def test_unperturbed_oracle_picks_expected_vertex() -> None:
    y = PolytopeVertexMaximizer(VERTICES)(THETA)
    assert _vertex_index(y) == TRUE_INDEX


def test_heptagon_scenario(layer: PerturbedAdditive) -> None:
    dist = layer.compute_probability_distribution(THETA, polytope=VERTICES)
    assert len(dist) == 100
    assert all(w == 0.01 for w in dist.weights)
    raw_expectation = compute_expectation(dist)

    compress_distribution(dist, atol=0.0)

    # 同一頂点の繰り返しが潰れる
    assert 1 <= len(dist) < 100
    assert dist.total_weight == pytest.approx(1.0)
    indices = [_vertex_index(a) for a in dist.atoms]
    assert len(set(indices)) == len(indices)

    # 質量は真の maximizer 近傍の頂点に集中
    by_index = dict(zip(indices, dist.weights, strict=True))
    assert max(by_index, key=by_index.get) == TRUE_INDEX
    near = sum(by_index.get(k, 0.0) for k in (TRUE_INDEX - 1, TRUE_INDEX, TRUE_INDEX + 1))
    assert near >= 0.9

    expectation = compute_expectation(dist)
    np.testing.assert_allclose(expectation, raw_expectation, atol=1e-12)

    # 期待値は凸包内、かつ重心（原点）より真の頂点に近い
    assert _inside_hull(expectation)
    centroid = VERTICES.mean(axis=0)
    true_vertex = VERTICES[TRUE_INDEX]
    assert np.linalg.norm(expectation - true_vertex) < np.linalg.norm(centroid - true_vertex)


def test_threads_and_sequential_agree() -> None:
    kwargs = dict(epsilon=0.2, nb_samples=100, seed=0)
    seq = PerturbedAdditive(PolytopeVertexMaximizer(VERTICES), **kwargs)
    par = PerturbedAdditive(PolytopeVertexMaximizer(VERTICES), max_workers=8, **kwargs)
    np.testing.assert_array_equal(seq(THETA), par(THETA))
