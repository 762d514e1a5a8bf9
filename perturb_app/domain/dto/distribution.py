from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, ClassVar

from perturb_app.domain.errors import InvalidConfigurationError


@dataclass(slots=True, eq=False)
class FixedAtomsProbabilityDistribution:
    """
    有限個の原子（解）と重み（確率質量）の組。
    - atoms[i] と weights[i] が位置で対応する
    - 構築時に原子の一意性は要求しない（圧縮で統合する）
    - 総質量は圧縮の前後で不変（統合は質量の移動のみ）
    """

    __responsibility__: ClassVar[str] = "経験分布（原子/重み）の保持と最小限の検証"

    atoms: list[Any] = field(default_factory=list)
    weights: list[float] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.atoms = list(self.atoms)
        try:
            self.weights = [float(w) for w in self.weights]
        except (TypeError, ValueError) as e:
            raise InvalidConfigurationError(f"weights must be real numbers: {self.weights!r}") from e
        if len(self.atoms) != len(self.weights):
            raise InvalidConfigurationError(
                f"atoms and weights must have the same length: "
                f"{len(self.atoms)} != {len(self.weights)}"
            )
        for i, w in enumerate(self.weights):
            if not math.isfinite(w) or w < 0:
                raise InvalidConfigurationError(f"weight[{i}] must be finite and >= 0: {w}")

    @classmethod
    def uniform(cls, atoms: Sequence[Any]) -> FixedAtomsProbabilityDistribution:
        """各原子に 1/n を割り当てた分布（サンプラーの生出力の形）。"""
        n = len(atoms)
        return cls(atoms=list(atoms), weights=[1.0 / n] * n if n else [])

    def __len__(self) -> int:
        return len(self.atoms)

    @property
    def total_weight(self) -> float:
        return math.fsum(self.weights)
