from __future__ import annotations

from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from perturb_app.config.defaults import (
    DEFAULT_ATOL,
    DEFAULT_EPSILON,
    DEFAULT_KIND,
    DEFAULT_NB_SAMPLES,
    DEFAULT_SEED,
)


class PerturbEnvSettings(BaseSettings):
    """環境変数から摂動設定を取得（.env対応）"""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="", extra="ignore")

    PERTURB__KIND: str = Field(default=DEFAULT_KIND)
    PERTURB__EPSILON: float = Field(default=DEFAULT_EPSILON)
    PERTURB__NB_SAMPLES: int = Field(default=DEFAULT_NB_SAMPLES)
    PERTURB__SEED: int = Field(default=DEFAULT_SEED)
    PERTURB__MAX_WORKERS: int | None = Field(default=None)
    PERTURB__ATOL: float = Field(default=DEFAULT_ATOL)

    def as_mapping(self) -> dict[str, Any]:
        """PerturbationConfig.from_mapping に渡せる形（atol は別扱い）"""
        return {
            "kind": self.PERTURB__KIND,
            "epsilon": self.PERTURB__EPSILON,
            "nb_samples": self.PERTURB__NB_SAMPLES,
            "seed": self.PERTURB__SEED,
            "max_workers": self.PERTURB__MAX_WORKERS,
        }
