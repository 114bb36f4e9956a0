from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

import numpy as np

from posecount.logic.geometry import PoseLandmark

LandmarkSet = Mapping[PoseLandmark, np.ndarray]


@dataclass(frozen=True, eq=False)
class PoseSample:
    label: str
    landmarks: LandmarkSet  # all 33 joints, read-only
    name: Optional[str] = None

    def __post_init__(self) -> None:
        missing = [joint.name for joint in PoseLandmark if joint not in self.landmarks]
        if missing:
            raise ValueError(f"Pose sample '{self.label}' is missing landmarks: {', '.join(missing)}")
        frozen: Dict[PoseLandmark, np.ndarray] = {}
        for joint in PoseLandmark:
            array = np.array(self.landmarks[joint], dtype=np.float64)
            if array.shape not in ((2,), (3,)) or not np.isfinite(array).all():
                raise ValueError(f"Pose sample '{self.label}' has an invalid {joint.name} point: {array.tolist()}")
            array.flags.writeable = False
            frozen[joint] = array
        object.__setattr__(self, "landmarks", MappingProxyType(frozen))

    @property
    def dims(self) -> int:
        return max((len(point) for point in self.landmarks.values()), default=0)


@dataclass
class ClassificationResult:
    """Per-class confidences for one frame, kept in insertion order."""

    confidences: Dict[str, float] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.confidences)

    def __bool__(self) -> bool:
        return bool(self.confidences)

    @property
    def classes(self) -> List[str]:
        return list(self.confidences)

    def get_confidence(self, class_name: str) -> float:
        return self.confidences.get(class_name, 0.0)

    def put_confidence(self, class_name: str, confidence: float) -> None:
        self.confidences[class_name] = float(confidence)

    def increment_confidence(self, class_name: str, amount: float = 1.0) -> None:
        self.confidences[class_name] = self.get_confidence(class_name) + amount

    def max_confidence_class(self) -> Optional[str]:
        best: Optional[str] = None
        for class_name, confidence in self.confidences.items():
            # strict comparison keeps the first-inserted class on ties
            if best is None or confidence > self.confidences[best]:
                best = class_name
        return best
