"""
経験分布の圧縮（近似重複原子の統合）。

- 末尾の原子から先頭へ走査し、各原子 i について j = 0..i-1 を昇順に比較
- 最初に近似一致した j へ weights[i] を加算し、i を削除対象にする（最近傍ではなく最小index優先）
- j の範囲は「まだ走査していない」原子を含む全ての j < i。後段で j 自身が更に前へ統合されれば
  質量は連鎖的に先頭側へ流れる
- 走査中は原子列を変更しない。統合先ごとの重みの内訳と keep マスクで判定し、最後に一括で詰め直す
- 統合後の重みは内訳を math.fsum で一度に合計する

同じ原子順・同じ atol なら結果は決定的。総質量は保存される。
"""

from __future__ import annotations

import math
from typing import Any

from perturb_app.domain.dto.distribution import FixedAtomsProbabilityDistribution
from perturb_app.domain.errors import InvalidConfigurationError
from perturb_app.domain.ports.atom_ops import AtomOpsPort
from perturb_app.domain.services.numpy_atom_ops import DEFAULT_ATOM_OPS
from perturb_app.shared.logging import get_logger

__all__ = ["compress_distribution", "surviving_indices"]

logger = get_logger(__name__)


def surviving_indices(
    atoms: list[Any],
    weights: list[float],
    *,
    atol: float,
    ops: AtomOpsPort,
) -> tuple[list[int], list[float]]:
    """統合後に残る index（昇順）と、統合済みの重み作業列を返す（入力は変更しない）。"""
    # 各 index に流れ込んだ重みの内訳。合計は最後に fsum で一度だけ取る
    groups: list[list[float]] = [[w] for w in weights]
    keep = [True] * len(atoms)
    for i in range(len(atoms) - 1, -1, -1):
        ai = atoms[i]
        for j in range(i):
            if ops.isapprox(ai, atoms[j], atol=atol):
                groups[j].extend(groups[i])
                keep[i] = False
                break
    merged = [math.fsum(g) if k else w for g, k, w in zip(groups, keep, weights, strict=True)]
    return [i for i, k in enumerate(keep) if k], merged


def compress_distribution(
    distribution: FixedAtomsProbabilityDistribution,
    atol: float = 0.0,
    *,
    ops: AtomOpsPort | None = None,
) -> FixedAtomsProbabilityDistribution:
    """近似重複を統合して distribution を in-place で縮約し、同じオブジェクトを返す。"""
    if not math.isfinite(atol) or atol < 0:
        raise InvalidConfigurationError(f"atol must be finite and >= 0: {atol}")
    n_before = len(distribution)
    if n_before <= 1:
        return distribution

    kept, merged = surviving_indices(
        distribution.atoms,
        distribution.weights,
        atol=float(atol),
        ops=ops or DEFAULT_ATOM_OPS,
    )
    # 同じ list オブジェクトへ書き戻す（呼び出し側の参照を保つ）
    distribution.atoms[:] = [distribution.atoms[i] for i in kept]
    distribution.weights[:] = [merged[i] for i in kept]

    logger.debug(
        "distribution_compressed",
        atoms_before=n_before,
        atoms_after=len(distribution),
        atol=atol,
    )
    return distribution
