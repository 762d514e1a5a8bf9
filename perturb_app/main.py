from __future__ import annotations

import typer

from perturb_app.apps.cli import app as perturb_cli_app

"""
ルート集約Typer。
例: python -m perturb_app.main perturb perturbed --epsilon 0.2 --nb-samples 100
"""

app = typer.Typer(help="perturbed-maximizer root CLI", no_args_is_help=True)

# `perturb` サブコマンド配下に CLI をぶら下げる
app.add_typer(perturb_cli_app, name="perturb", help="Perturbation sampling commands")


if __name__ == "__main__":
    app()
