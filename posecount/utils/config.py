from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple

import yaml


@dataclass
class RuntimeConfig:
    samples: Dict[str, Any]
    classifier: Dict[str, Any]
    smoothing: Dict[str, Any]
    repetition: Dict[str, Any]
    logging: Dict[str, Any]

    def rep_classes(self) -> Dict[str, Tuple[float, float]]:
        classes = self.repetition.get("classes", {}) or {}
        return {
            str(name): (float(thresholds.get("enter", 0.6)), float(thresholds.get("exit", 0.4)))
            for name, thresholds in classes.items()
        }


def load_runtime_config(path: str) -> RuntimeConfig:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return RuntimeConfig(
        samples=data.get("samples", {}),
        classifier=data.get("classifier", {}),
        smoothing=data.get("smoothing", {}),
        repetition=data.get("repetition", {}),
        logging=data.get("logging", {}),
    )
