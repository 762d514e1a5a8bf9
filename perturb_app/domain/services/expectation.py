from __future__ import annotations

from typing import Any

from perturb_app.domain.dto.distribution import FixedAtomsProbabilityDistribution
from perturb_app.domain.errors import EmptyDistributionError
from perturb_app.domain.ports.atom_ops import AtomOpsPort
from perturb_app.domain.services.numpy_atom_ops import DEFAULT_ATOM_OPS

__all__ = ["compute_expectation"]


def compute_expectation(
    distribution: FixedAtomsProbabilityDistribution,
    *,
    ops: AtomOpsPort | None = None,
) -> Any:
    """
    Σ_i weights[i] * atoms[i] を返す。
    重みの正規化（総和1）は呼び出し側の責務。総和≠1なら単なる加重和になる。
    """
    if len(distribution) == 0:
        raise EmptyDistributionError("expectation is undefined for an empty distribution")
    ops = ops or DEFAULT_ATOM_OPS
    pairs = iter(zip(distribution.atoms, distribution.weights, strict=True))
    a0, w0 = next(pairs)
    acc = ops.scale(a0, w0)
    for a, w in pairs:
        acc = ops.add(acc, ops.scale(a, w))
    return acc
