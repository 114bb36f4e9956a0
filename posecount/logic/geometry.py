from __future__ import annotations

import math
from enum import IntEnum
from typing import Dict, Optional, Sequence

import numpy as np


class PoseLandmark(IntEnum):
    NOSE = 0
    LEFT_EYE_INNER = 1
    LEFT_EYE = 2
    LEFT_EYE_OUTER = 3
    RIGHT_EYE_INNER = 4
    RIGHT_EYE = 5
    RIGHT_EYE_OUTER = 6
    LEFT_EAR = 7
    RIGHT_EAR = 8
    MOUTH_LEFT = 9
    MOUTH_RIGHT = 10
    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_ELBOW = 13
    RIGHT_ELBOW = 14
    LEFT_WRIST = 15
    RIGHT_WRIST = 16
    LEFT_PINKY = 17
    RIGHT_PINKY = 18
    LEFT_INDEX = 19
    RIGHT_INDEX = 20
    LEFT_THUMB = 21
    RIGHT_THUMB = 22
    LEFT_HIP = 23
    RIGHT_HIP = 24
    LEFT_KNEE = 25
    RIGHT_KNEE = 26
    LEFT_ANKLE = 27
    RIGHT_ANKLE = 28
    LEFT_HEEL = 29
    RIGHT_HEEL = 30
    LEFT_FOOT_INDEX = 31
    RIGHT_FOOT_INDEX = 32


NUM_LANDMARKS = len(PoseLandmark)


def angle(a: Sequence[float], b: Sequence[float], c: Sequence[float]) -> float:
    """Return angle ABC in degrees with B as vertex, in [0, 180]."""
    result = math.degrees(
        math.atan2(c[1] - b[1], c[0] - b[0]) - math.atan2(a[1] - b[1], a[0] - b[0])
    )
    result = abs(result)
    if result > 180:
        result = 360.0 - result
    return result


def landmark_angle(
    landmarks: Dict[PoseLandmark, np.ndarray],
    first: PoseLandmark,
    vertex: PoseLandmark,
    third: PoseLandmark,
) -> Optional[float]:
    if first not in landmarks or vertex not in landmarks or third not in landmarks:
        return None
    return angle(landmarks[first], landmarks[vertex], landmarks[third])


def get_landmarks_map(
    landmarks: np.ndarray, visibility_threshold: Optional[float] = None
) -> Dict[PoseLandmark, np.ndarray]:
    """Convert a (33, 3|4) estimator array into a landmark set.

    A fourth column is read as visibility. Joints with non-finite coordinates,
    or below ``visibility_threshold`` when one is given, are left out.
    """
    landmarks = np.asarray(landmarks, dtype=np.float64)
    if landmarks.size == 0:
        return {}
    if landmarks.ndim != 2 or landmarks.shape[0] != NUM_LANDMARKS or landmarks.shape[1] < 2:
        raise ValueError(f"Expected a ({NUM_LANDMARKS}, 2..4) landmark array, got {landmarks.shape}")
    coords = landmarks[:, :3]
    result: Dict[PoseLandmark, np.ndarray] = {}
    for joint in PoseLandmark:
        point = coords[joint]
        if not np.all(np.isfinite(point)):
            continue
        if (
            visibility_threshold is not None
            and landmarks.shape[1] > 3
            and landmarks[joint, 3] < visibility_threshold
        ):
            continue
        result[joint] = point.copy()
    return result
