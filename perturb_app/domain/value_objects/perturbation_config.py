from __future__ import annotations

import math
import numbers
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, ClassVar, Literal

from perturb_app.config.defaults import (
    DEFAULT_EPSILON,
    DEFAULT_KIND,
    DEFAULT_NB_SAMPLES,
    DEFAULT_SEED,
)
from perturb_app.domain.errors import InvalidConfigurationError

PerturbationKind = Literal["additive", "multiplicative"]
PERTURBATION_KINDS: tuple[str, ...] = ("additive", "multiplicative")


@dataclass(frozen=True, slots=True)
class PerturbationConfig:
    """
    摂動レイヤの設定VO：構築時に妥当性を検証し、サンプラー全体で使い回す。
    """

    __responsibility__: ClassVar[str] = "摂動の種類・大きさ・サンプル数・シードの保持と検証"

    kind: PerturbationKind = DEFAULT_KIND
    epsilon: float = DEFAULT_EPSILON
    nb_samples: int = DEFAULT_NB_SAMPLES
    seed: int = DEFAULT_SEED
    max_workers: int | None = None

    def __post_init__(self) -> None:
        if self.kind not in PERTURBATION_KINDS:
            raise InvalidConfigurationError(
                f"kind must be one of {PERTURBATION_KINDS}: {self.kind!r}"
            )
        if isinstance(self.epsilon, bool) or not isinstance(self.epsilon, numbers.Real):
            raise InvalidConfigurationError(f"epsilon must be a real number: {self.epsilon!r}")
        if not math.isfinite(self.epsilon) or self.epsilon <= 0:
            raise InvalidConfigurationError(f"epsilon must be > 0: {self.epsilon}")
        if not _is_integer(self.nb_samples):
            raise InvalidConfigurationError(f"nb_samples must be int: {self.nb_samples!r}")
        if self.nb_samples < 1:
            raise InvalidConfigurationError(f"nb_samples must be >= 1: {self.nb_samples}")
        if not _is_integer(self.seed):
            raise InvalidConfigurationError(f"seed must be int: {self.seed!r}")
        if self.max_workers is not None:
            if not _is_integer(self.max_workers):
                raise InvalidConfigurationError(f"max_workers must be int: {self.max_workers!r}")
            if self.max_workers < 1:
                raise InvalidConfigurationError(f"max_workers must be >= 1: {self.max_workers}")
            object.__setattr__(self, "max_workers", int(self.max_workers))
        # numpy のスカラーも受け付け、保持するのは組み込み型
        object.__setattr__(self, "epsilon", float(self.epsilon))
        object.__setattr__(self, "nb_samples", int(self.nb_samples))
        object.__setattr__(self, "seed", int(self.seed))

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> PerturbationConfig:
        """YAML/環境変数由来の dict から構築。未指定キーは既定値。"""
        known = {"kind", "epsilon", "nb_samples", "seed", "max_workers"}
        unknown = set(values) - known
        if unknown:
            raise InvalidConfigurationError(f"unknown perturbation keys: {sorted(unknown)}")
        kwargs: dict[str, Any] = {k: v for k, v in values.items() if v is not None}
        try:
            if "epsilon" in kwargs:
                kwargs["epsilon"] = float(kwargs["epsilon"])
            for k in ("nb_samples", "seed", "max_workers"):
                if k in kwargs:
                    kwargs[k] = _to_int(k, kwargs[k])
        except InvalidConfigurationError:
            raise
        except (TypeError, ValueError) as e:
            raise InvalidConfigurationError(f"Invalid perturbation config: {dict(values)}") from e
        return cls(**kwargs)


def _is_integer(value: Any) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


def _to_int(key: str, value: Any) -> int:
    # 2.7 → 2 のような黙った切り捨てはしない
    if isinstance(value, float) and not value.is_integer():
        raise InvalidConfigurationError(f"{key} must be an integer: {value!r}")
    return int(value)
