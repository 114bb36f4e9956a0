from __future__ import annotations

from typing import Dict, Tuple

import numpy as np
import pytest

from posecount.logic.classifier import PoseClassifier
from posecount.logic.geometry import PoseLandmark as P
from posecount.utils.structures import PoseSample

# Image coordinates (y grows downward), hip centre at the origin.
STANDING: Dict[P, Tuple[float, float, float]] = {
    P.NOSE: (0, -160, -5),
    P.LEFT_EYE_INNER: (3, -165, -5),
    P.LEFT_EYE: (5, -165, -5),
    P.LEFT_EYE_OUTER: (7, -165, -5),
    P.RIGHT_EYE_INNER: (-3, -165, -5),
    P.RIGHT_EYE: (-5, -165, -5),
    P.RIGHT_EYE_OUTER: (-7, -165, -5),
    P.LEFT_EAR: (10, -162, 0),
    P.RIGHT_EAR: (-10, -162, 0),
    P.MOUTH_LEFT: (4, -152, -4),
    P.MOUTH_RIGHT: (-4, -152, -4),
    P.LEFT_SHOULDER: (20, -120, 0),
    P.RIGHT_SHOULDER: (-20, -120, 0),
    P.LEFT_ELBOW: (25, -80, 0),
    P.RIGHT_ELBOW: (-25, -80, 0),
    P.LEFT_WRIST: (27, -40, 0),
    P.RIGHT_WRIST: (-27, -40, 0),
    P.LEFT_PINKY: (29, -32, 0),
    P.RIGHT_PINKY: (-29, -32, 0),
    P.LEFT_INDEX: (27, -30, 0),
    P.RIGHT_INDEX: (-27, -30, 0),
    P.LEFT_THUMB: (24, -33, 0),
    P.RIGHT_THUMB: (-24, -33, 0),
    P.LEFT_HIP: (12, 0, 0),
    P.RIGHT_HIP: (-12, 0, 0),
    P.LEFT_KNEE: (12, 50, 0),
    P.RIGHT_KNEE: (-12, 50, 0),
    P.LEFT_ANKLE: (12, 100, 0),
    P.RIGHT_ANKLE: (-12, 100, 0),
    P.LEFT_HEEL: (11, 104, 2),
    P.RIGHT_HEEL: (-11, 104, 2),
    P.LEFT_FOOT_INDEX: (16, 106, -6),
    P.RIGHT_FOOT_INDEX: (-16, 106, -6),
}

SQUAT: Dict[P, Tuple[float, float, float]] = {
    P.NOSE: (0, -140, -5),
    P.LEFT_EYE_INNER: (3, -145, -5),
    P.LEFT_EYE: (5, -145, -5),
    P.LEFT_EYE_OUTER: (7, -145, -5),
    P.RIGHT_EYE_INNER: (-3, -145, -5),
    P.RIGHT_EYE: (-5, -145, -5),
    P.RIGHT_EYE_OUTER: (-7, -145, -5),
    P.LEFT_EAR: (10, -142, 0),
    P.RIGHT_EAR: (-10, -142, 0),
    P.MOUTH_LEFT: (4, -132, -4),
    P.MOUTH_RIGHT: (-4, -132, -4),
    P.LEFT_SHOULDER: (20, -100, 0),
    P.RIGHT_SHOULDER: (-20, -100, 0),
    P.LEFT_ELBOW: (35, -70, -20),
    P.RIGHT_ELBOW: (-35, -70, -20),
    P.LEFT_WRIST: (45, -40, -40),
    P.RIGHT_WRIST: (-45, -40, -40),
    P.LEFT_PINKY: (47, -33, -42),
    P.RIGHT_PINKY: (-47, -33, -42),
    P.LEFT_INDEX: (45, -31, -42),
    P.RIGHT_INDEX: (-45, -31, -42),
    P.LEFT_THUMB: (42, -34, -42),
    P.RIGHT_THUMB: (-42, -34, -42),
    P.LEFT_HIP: (12, 0, 0),
    P.RIGHT_HIP: (-12, 0, 0),
    P.LEFT_KNEE: (30, 40, -30),
    P.RIGHT_KNEE: (-30, 40, -30),
    P.LEFT_ANKLE: (14, 90, 0),
    P.RIGHT_ANKLE: (-14, 90, 0),
    P.LEFT_HEEL: (13, 94, 2),
    P.RIGHT_HEEL: (-13, 94, 2),
    P.LEFT_FOOT_INDEX: (20, 96, -6),
    P.RIGHT_FOOT_INDEX: (-20, 96, -6),
}


def to_landmarks(points: Dict[P, Tuple[float, float, float]]) -> Dict[P, np.ndarray]:
    return {joint: np.array(point, dtype=np.float64) for joint, point in points.items()}


def frame_record(landmarks: Dict[P, np.ndarray], delimiter: str = ",") -> str:
    return delimiter.join(repr(float(v)) for joint in P for v in landmarks[joint])


@pytest.fixture
def standing_pose() -> Dict[P, np.ndarray]:
    return to_landmarks(STANDING)


@pytest.fixture
def squat_pose() -> Dict[P, np.ndarray]:
    return to_landmarks(SQUAT)


@pytest.fixture
def reference_samples(standing_pose, squat_pose):
    return [
        PoseSample(label="squats_up", landmarks=standing_pose, name="standing_0"),
        PoseSample(label="squats_down", landmarks=squat_pose, name="squat_0"),
    ]


@pytest.fixture
def classifier(reference_samples) -> PoseClassifier:
    return PoseClassifier(reference_samples, k=1)
