from __future__ import annotations

import math

# 摂動レイヤの既定（未指定時はここに集約）
DEFAULT_KIND = "additive"
DEFAULT_EPSILON = 0.2
DEFAULT_NB_SAMPLES = 100
DEFAULT_SEED = 0  # 再現性のため固定

# 圧縮の既定: 0 は完全一致のみ統合
DEFAULT_ATOL = 0.0

# デモ（正多角形上の線形オラクル）
DEFAULT_N_VERTICES = 7
DEFAULT_ALPHA = 0.5 * math.pi
DEFAULT_RADIUS = 0.5
