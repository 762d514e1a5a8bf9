"""
摂動サンプラー: maximizer を摂動した θ で n 回叩き、経験分布を作る。

- ノイズ Z (n×d, 標準正規) は seed から先に一括生成し、行 i をサンプル i に固定で対応させる
- 各呼び出しは独立。max_workers > 1 ならスレッドプールで並列実行（完了順は問わない）
- 結果は index i のスロットへ格納するので、並列でも逐次でも同じ分布になる
- maximizer の例外/不正な戻り値は MaximizerFailureError で即時中断（部分結果は返さない）
"""

from __future__ import annotations

from collections.abc import Mapping
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Any, ClassVar

import numpy as np

from perturb_app.apps.perturbation.noise import noise_for
from perturb_app.config.defaults import DEFAULT_EPSILON, DEFAULT_NB_SAMPLES, DEFAULT_SEED
from perturb_app.domain.dto.distribution import FixedAtomsProbabilityDistribution
from perturb_app.domain.errors import InvalidConfigurationError, MaximizerFailureError
from perturb_app.domain.ports.atom_ops import AtomOpsPort
from perturb_app.domain.ports.maximizer import MaximizerPort
from perturb_app.domain.ports.noise import NoisePort
from perturb_app.domain.ports.sampler import DistributionSamplerPort
from perturb_app.domain.services.expectation import compute_expectation
from perturb_app.domain.value_objects.perturbation_config import (
    PerturbationConfig,
    PerturbationKind,
)
from perturb_app.shared.logging import get_logger

__all__ = [
    "PerturbedAdditive",
    "PerturbedMultiplicative",
    "PerturbedSampler",
    "sample",
]

logger = get_logger(__name__)


def _as_theta(theta: Any) -> np.ndarray:
    try:
        arr = np.asarray(theta, dtype=float)
    except (TypeError, ValueError) as e:
        raise InvalidConfigurationError(f"theta must be a real vector: {theta!r}") from e
    if arr.ndim != 1 or arr.size == 0:
        raise InvalidConfigurationError(f"theta must be a non-empty 1-D vector, got shape {arr.shape}")
    if not np.all(np.isfinite(arr)):
        raise InvalidConfigurationError("theta must be finite")
    return arr


def _as_atom(result: Any, index: int) -> np.ndarray:
    """maximizer の戻り値を読み取り専用の1次元 float ベクトルへ。"""
    try:
        atom = np.array(result, dtype=float)
    except (TypeError, ValueError) as e:
        raise MaximizerFailureError(
            f"maximizer returned a non-numeric result for sample {index}: {result!r}",
            sample_index=index,
        ) from e
    if atom.ndim != 1 or atom.size == 0 or not np.all(np.isfinite(atom)):
        raise MaximizerFailureError(
            f"maximizer returned an invalid atom for sample {index}: shape={atom.shape}",
            sample_index=index,
        )
    atom.flags.writeable = False
    return atom


class PerturbedSampler(DistributionSamplerPort):
    """
    maximizer を包む摂動レイヤ。
    - compute_probability_distribution: n 原子・各重み 1/n の生分布
    - __call__: その分布の期待値（平滑化された maximizer の Monte Carlo 近似）
    """

    __responsibility__: ClassVar[str] = "摂動θでのmaximizer反復呼び出しと経験分布の組み立て"

    def __init__(
        self,
        maximizer: MaximizerPort,
        config: PerturbationConfig | None = None,
        *,
        noise: NoisePort | None = None,
        ops: AtomOpsPort | None = None,
    ) -> None:
        self.maximizer = maximizer
        self.config = config or PerturbationConfig()
        self.noise = noise or noise_for(self.config.kind)
        self.ops = ops

    def draw_noise(self, dim: int) -> np.ndarray:
        """seed から (nb_samples, dim) の標準正規行列を生成。行 i がサンプル i。"""
        rng = np.random.default_rng(self.config.seed)
        return rng.standard_normal((self.config.nb_samples, dim))

    def perturbed_inputs(self, theta: Any) -> np.ndarray:
        theta_arr = _as_theta(theta)
        z = self.draw_noise(theta_arr.size)
        return np.stack([self.noise.apply(theta_arr, z[i], self.config.epsilon) for i in range(len(z))])

    def _call_one(self, index: int, theta_i: np.ndarray, aux: Mapping[str, Any]) -> np.ndarray:
        try:
            result = self.maximizer(theta_i, **aux)
        except Exception as e:
            logger.error("maximizer_failed", sample_index=index, error=str(e))
            raise MaximizerFailureError(
                f"maximizer failed for sample {index}: {e}", sample_index=index
            ) from e
        return _as_atom(result, index)

    def _run_parallel(
        self, thetas: np.ndarray, aux: Mapping[str, Any], max_workers: int
    ) -> list[np.ndarray | None]:
        atoms: list[np.ndarray | None] = [None] * len(thetas)
        with ThreadPoolExecutor(max_workers=max_workers) as ex:
            futures: dict[Future[np.ndarray], int] = {
                ex.submit(self._call_one, i, thetas[i], aux): i for i in range(len(thetas))
            }
            try:
                for fut in as_completed(futures):
                    atoms[futures[fut]] = fut.result()
            except MaximizerFailureError:
                for fut in futures:
                    fut.cancel()
                raise
        return atoms

    def compute_probability_distribution(
        self, theta: Any, **aux: Any
    ) -> FixedAtomsProbabilityDistribution:
        thetas = self.perturbed_inputs(theta)
        n, d = thetas.shape
        workers = self.config.max_workers or 1
        logger.debug(
            "sampling_started", nb_samples=n, dim=d, kind=self.noise.name, max_workers=workers
        )

        if workers > 1 and n > 1:
            atoms = self._run_parallel(thetas, aux, workers)
        else:
            atoms = [self._call_one(i, thetas[i], aux) for i in range(n)]

        shapes = {a.shape for a in atoms if a is not None}
        if len(shapes) != 1:
            raise MaximizerFailureError(f"maximizer returned atoms of differing shapes: {sorted(shapes)}")

        logger.debug("sampling_finished", nb_samples=n, distinct_atoms=len({a.tobytes() for a in atoms}))
        return FixedAtomsProbabilityDistribution.uniform(atoms)

    def __call__(self, theta: Any, **aux: Any) -> np.ndarray:
        return compute_expectation(self.compute_probability_distribution(theta, **aux), ops=self.ops)


class PerturbedAdditive(PerturbedSampler):
    """θ + ε z で摂動するレイヤ"""

    def __init__(
        self,
        maximizer: MaximizerPort,
        *,
        epsilon: float = DEFAULT_EPSILON,
        nb_samples: int = DEFAULT_NB_SAMPLES,
        seed: int = DEFAULT_SEED,
        max_workers: int | None = None,
    ) -> None:
        config = PerturbationConfig(
            kind="additive",
            epsilon=epsilon,
            nb_samples=nb_samples,
            seed=seed,
            max_workers=max_workers,
        )
        super().__init__(maximizer, config)


class PerturbedMultiplicative(PerturbedSampler):
    """θ ⊙ (1 + ε z) で摂動するレイヤ"""

    def __init__(
        self,
        maximizer: MaximizerPort,
        *,
        epsilon: float = DEFAULT_EPSILON,
        nb_samples: int = DEFAULT_NB_SAMPLES,
        seed: int = DEFAULT_SEED,
        max_workers: int | None = None,
    ) -> None:
        config = PerturbationConfig(
            kind="multiplicative",
            epsilon=epsilon,
            nb_samples=nb_samples,
            seed=seed,
            max_workers=max_workers,
        )
        super().__init__(maximizer, config)


def sample(
    maximizer: MaximizerPort,
    theta: Any,
    aux: Mapping[str, Any] | None,
    epsilon: float,
    nb_samples: int,
    seed: int | None = None,
    *,
    kind: PerturbationKind = "additive",
    max_workers: int | None = None,
) -> FixedAtomsProbabilityDistribution:
    """関数形のエントリポイント。seed 未指定時は既定シード（再現性のため固定）。"""
    config = PerturbationConfig(
        kind=kind,
        epsilon=epsilon,
        nb_samples=nb_samples,
        seed=DEFAULT_SEED if seed is None else seed,
        max_workers=max_workers,
    )
    return PerturbedSampler(maximizer, config).compute_probability_distribution(theta, **(aux or {}))
