from __future__ import annotations

import numpy as np
import pandas as pd

from perturb_app.domain.dto.distribution import FixedAtomsProbabilityDistribution
from perturb_app.domain.services.geometry import get_angle, sort_atoms_by_angle


def distribution_table(distribution: FixedAtomsProbabilityDistribution) -> pd.DataFrame:
    """
    分布 -> DataFrame（原子1つにつき1行）。
    - 列: x0..x{d-1}, weight（2次元なら angle も付与し偏角順に並べる）
    - 空分布は空の DataFrame
    """
    if len(distribution) == 0:
        return pd.DataFrame(columns=["weight"])
    dim = np.asarray(distribution.atoms[0]).size
    if dim == 2:
        atoms, weights = sort_atoms_by_angle(distribution)
    else:
        atoms, weights = distribution.atoms, distribution.weights
    mat = np.vstack([np.asarray(a, dtype=float) for a in atoms])
    df = pd.DataFrame(mat, columns=[f"x{k}" for k in range(dim)])
    df["weight"] = weights
    if dim == 2:
        df["angle"] = [get_angle(a) for a in atoms]
    return df
