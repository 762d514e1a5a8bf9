from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol


class ConfigLoaderPort(Protocol):
    """摂動設定を外部ファイル（YAML等）から取得する抽象"""

    __responsibility__ = "設定ロードの抽象I/F"

    def load(self, path: Path) -> Mapping[str, Any]:
        """
        Returns:
          perturbation: Mapping（kind/epsilon/nb_samples/seed/max_workers/atol のうち指定分）
        """
        ...
