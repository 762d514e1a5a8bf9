from __future__ import annotations

import math
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import typer
from dotenv import load_dotenv
from pydantic import ValidationError

from perturb_app.adapters.maximizer.polytope_maximizer import (
    PolytopeVertexMaximizer,
    regular_polygon,
)
from perturb_app.adapters.yaml.config_loader_yaml import YamlConfigLoader
from perturb_app.apps.perturbation.sampler import PerturbedSampler
from perturb_app.apps.perturbation.table import distribution_table
from perturb_app.config.defaults import DEFAULT_ALPHA, DEFAULT_N_VERTICES, DEFAULT_RADIUS
from perturb_app.domain.dto.report import DistributionReportDTO
from perturb_app.domain.errors import InvalidConfigurationError, PerturbAppError
from perturb_app.domain.services.compaction import compress_distribution
from perturb_app.domain.services.expectation import compute_expectation
from perturb_app.domain.services.geometry import objective_direction
from perturb_app.domain.value_objects.perturbation_config import PerturbationConfig
from perturb_app.shared.logging import get_logger, setup_logging
from perturb_app.shared.settings import PerturbEnvSettings
from perturb_app.utils.timing import build_logger, time_phase

app = typer.Typer(help="摂動による組合せmaximizerの平滑化 CLI", no_args_is_help=True)


def resolve_config(
    config_path: Path | None,
    overrides: Mapping[str, Any],
    atol: float | None,
) -> tuple[PerturbationConfig, float]:
    """優先順位: CLIオプション > YAML > 環境変数(.env) > 既定値"""
    env = PerturbEnvSettings()
    values: dict[str, Any] = env.as_mapping()
    resolved_atol = env.PERTURB__ATOL
    if config_path is not None:
        from_file = dict(YamlConfigLoader().load(config_path))
        file_atol = from_file.pop("atol", None)
        if file_atol is not None:
            resolved_atol = float(file_atol)
        values.update(from_file)
    values.update({k: v for k, v in overrides.items() if v is not None})
    if atol is not None:
        resolved_atol = atol
    if not math.isfinite(resolved_atol) or resolved_atol < 0:
        raise InvalidConfigurationError(f"atol must be finite and >= 0: {resolved_atol}")
    return PerturbationConfig.from_mapping(values), float(resolved_atol)


def _fail(message: str, error: Exception) -> None:
    get_logger(__name__).error(message, error=str(error))
    typer.secho(f"❌ エラー: {error}", fg=typer.colors.RED, err=True)


@app.command("oracle")
def oracle(
    n_vertices: int = typer.Option(DEFAULT_N_VERTICES, "--n-vertices", help="正多角形の頂点数"),
    alpha: float = typer.Option(DEFAULT_ALPHA, "--alpha", help="θ の偏角（ラジアン）"),
    radius: float = typer.Option(DEFAULT_RADIUS, "--radius", help="θ のノルム"),
) -> None:
    """摂動なしの線形オラクル f(θ) を表示。"""
    setup_logging(reset_handlers=True, console_output=True, json_format=False)
    try:
        maximizer = PolytopeVertexMaximizer(regular_polygon(n_vertices))
        theta = objective_direction(alpha, radius)
        y = maximizer(theta)
    except PerturbAppError as e:
        _fail("oracle_error", e)
        raise typer.Exit(code=1) from None
    typer.echo(f"θ    = ({theta[0]:.6f}, {theta[1]:.6f})")
    typer.echo(f"f(θ) = ({y[0]:.6f}, {y[1]:.6f})")


@app.command("perturbed")
def perturbed(
    n_vertices: int = typer.Option(DEFAULT_N_VERTICES, "--n-vertices", help="正多角形の頂点数"),
    alpha: float = typer.Option(DEFAULT_ALPHA, "--alpha", help="θ の偏角（ラジアン）"),
    radius: float = typer.Option(DEFAULT_RADIUS, "--radius", help="θ のノルム"),
    kind: str | None = typer.Option(None, "--kind", help="additive | multiplicative"),
    epsilon: float | None = typer.Option(None, "--epsilon", help="摂動の大きさ ε (>0)"),
    nb_samples: int | None = typer.Option(None, "--nb-samples", help="サンプル数 n (>=1)"),
    seed: int | None = typer.Option(None, "--seed", help="乱数シード"),
    max_workers: int | None = typer.Option(None, "--max-workers", help="並列ワーカ数"),
    atol: float | None = typer.Option(None, "--atol", help="原子統合の許容誤差 (>=0)"),
    config: Path | None = typer.Option(None, "--config", help="YAML設定ファイル", exists=True),
    as_json: bool = typer.Option(False, "--json", help="JSONで出力"),
    out: Path | None = typer.Option(None, "--out", help="JSONレポートの保存先"),
) -> None:
    """摂動分布を生成→圧縮→期待値を表示。"""
    load_dotenv()
    setup_logging(reset_handlers=True, console_output=True, json_format=False)
    logger = get_logger(__name__)
    timings = build_logger()

    try:
        cfg, resolved_atol = resolve_config(
            config,
            {
                "kind": kind,
                "epsilon": epsilon,
                "nb_samples": nb_samples,
                "seed": seed,
                "max_workers": max_workers,
            },
            atol,
        )
        vertices = regular_polygon(n_vertices)
        theta = objective_direction(alpha, radius)
        layer = PerturbedSampler(PolytopeVertexMaximizer(vertices), cfg)

        logger.info("sampling", kind=cfg.kind, epsilon=cfg.epsilon, nb_samples=cfg.nb_samples)
        with time_phase(timings, "sample", kind=cfg.kind, nb_samples=cfg.nb_samples):
            dist = layer.compute_probability_distribution(theta, polytope=vertices)
        with time_phase(timings, "compress", kind=cfg.kind, nb_samples=cfg.nb_samples):
            compress_distribution(dist, resolved_atol)
        expectation = compute_expectation(dist)
        logger.info("distribution_ready", n_atoms=len(dist), total_weight=dist.total_weight)

        report = DistributionReportDTO.from_distribution(
            dist, expectation, config=cfg, atol=resolved_atol
        )
    except (PerturbAppError, ValidationError) as e:
        _fail("perturbation_error", e)
        raise typer.Exit(code=1) from None
    except Exception as e:
        logger.exception("unexpected_error", error=str(e))
        typer.secho(f"❌ 予期しないエラー: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from None

    if out is not None:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(report.model_dump_json(indent=2), encoding="utf-8")

    if as_json:
        typer.echo(report.model_dump_json(indent=2))
        return

    typer.echo(f"θ = ({theta[0]:.6f}, {theta[1]:.6f})  kind={cfg.kind} ε={cfg.epsilon} n={cfg.nb_samples}")
    typer.echo(distribution_table(dist).to_string(index=False))
    typer.echo(f"E[f(θ+εZ)] = ({expectation[0]:.6f}, {expectation[1]:.6f})")


if __name__ == "__main__":
    app()
