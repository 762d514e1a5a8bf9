from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from perturb_app.domain.errors import InvalidConfigurationError
from perturb_app.domain.ports.config_loader import ConfigLoaderPort


class YamlConfigLoader(ConfigLoaderPort):
    """YAMLから摂動設定を読み込む。トップレベル key: perturbation"""

    def load(self, path: Path) -> Mapping[str, Any]:
        with path.open("r", encoding="utf-8") as f:
            data: dict[str, Any] = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise InvalidConfigurationError("YAML top level must be a mapping")
        perturbation = data.get("perturbation", {}) or {}
        if not isinstance(perturbation, dict):
            raise InvalidConfigurationError("YAML structure must have mapping 'perturbation'")
        return perturbation
