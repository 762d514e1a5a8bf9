from __future__ import annotations

from typing import ClassVar

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from perturb_app.domain.dto.distribution import FixedAtomsProbabilityDistribution
from perturb_app.domain.value_objects.perturbation_config import PerturbationConfig


class DistributionReportDTO(BaseModel):
    """圧縮後の分布と期待値のシリアライズ可能なスナップショット（CLI/JSON出力用）"""

    __responsibility__: ClassVar[str] = "分布・期待値・設定の受け渡しDTO"
    model_config = ConfigDict(frozen=True)

    atoms: list[list[float]] = Field(...)
    weights: list[float] = Field(...)
    expectation: list[float] = Field(...)
    total_weight: float
    kind: str
    epsilon: float
    nb_samples: int
    seed: int
    atol: float

    @field_validator("weights")
    @classmethod
    def _v_weights(cls, v: list[float]) -> list[float]:
        if any(w < 0 for w in v):
            raise ValueError("weights must be >= 0")
        return v

    @model_validator(mode="after")
    def _v_lengths(self) -> DistributionReportDTO:
        if len(self.atoms) != len(self.weights):
            raise ValueError("atoms and weights must have the same length")
        return self

    @property
    def n_atoms(self) -> int:
        return len(self.atoms)

    @classmethod
    def from_distribution(
        cls,
        distribution: FixedAtomsProbabilityDistribution,
        expectation: np.ndarray,
        *,
        config: PerturbationConfig,
        atol: float,
    ) -> DistributionReportDTO:
        return cls(
            atoms=[np.asarray(a, dtype=float).tolist() for a in distribution.atoms],
            weights=list(distribution.weights),
            expectation=np.asarray(expectation, dtype=float).tolist(),
            total_weight=distribution.total_weight,
            kind=config.kind,
            epsilon=config.epsilon,
            nb_samples=config.nb_samples,
            seed=config.seed,
            atol=atol,
        )
