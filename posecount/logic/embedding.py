from __future__ import annotations

from typing import Dict, List, Optional, Tuple, Union

import numpy as np

from posecount.logic.geometry import NUM_LANDMARKS, PoseLandmark as P
from posecount.utils.structures import LandmarkSet

# A feature end point is either a single joint or the centre of a joint pair.
Anchor = Union[P, Tuple[P, P]]

HIPS = (P.LEFT_HIP, P.RIGHT_HIP)
SHOULDERS = (P.LEFT_SHOULDER, P.RIGHT_SHOULDER)

EMBEDDING_PAIRS: List[Tuple[Anchor, Anchor]] = [
    # One joint.
    (HIPS, SHOULDERS),
    (P.LEFT_SHOULDER, P.LEFT_ELBOW),
    (P.RIGHT_SHOULDER, P.RIGHT_ELBOW),
    (P.LEFT_ELBOW, P.LEFT_WRIST),
    (P.RIGHT_ELBOW, P.RIGHT_WRIST),
    (P.LEFT_HIP, P.LEFT_KNEE),
    (P.RIGHT_HIP, P.RIGHT_KNEE),
    (P.LEFT_KNEE, P.LEFT_ANKLE),
    (P.RIGHT_KNEE, P.RIGHT_ANKLE),
    # Two joints.
    (P.LEFT_SHOULDER, P.LEFT_WRIST),
    (P.RIGHT_SHOULDER, P.RIGHT_WRIST),
    (P.LEFT_HIP, P.LEFT_ANKLE),
    (P.RIGHT_HIP, P.RIGHT_ANKLE),
    # Four joints.
    (P.LEFT_HIP, P.LEFT_WRIST),
    (P.RIGHT_HIP, P.RIGHT_WRIST),
    # Five joints. The hip to wrist pairs appear twice, doubling their weight.
    (P.LEFT_SHOULDER, P.LEFT_ANKLE),
    (P.RIGHT_SHOULDER, P.RIGHT_ANKLE),
    (P.LEFT_HIP, P.LEFT_WRIST),
    (P.RIGHT_HIP, P.RIGHT_WRIST),
    # Cross body.
    (P.LEFT_ELBOW, P.RIGHT_ELBOW),
    (P.LEFT_KNEE, P.RIGHT_KNEE),
    (P.LEFT_WRIST, P.RIGHT_WRIST),
    (P.LEFT_ANKLE, P.RIGHT_ANKLE),
]

EMBEDDING_SHAPE = (len(EMBEDDING_PAIRS), 3)


def to_array(landmarks: LandmarkSet) -> np.ndarray:
    """Dense (33, 3) array with NaN rows for missing joints and z=0 for 2D points."""
    points = np.full((NUM_LANDMARKS, 3), np.nan)
    for joint, point in landmarks.items():
        values = np.asarray(point, dtype=np.float64)[:3]
        points[joint] = 0.0
        points[joint, : values.shape[0]] = values
    return points


def mirror(landmarks: LandmarkSet) -> Dict[P, np.ndarray]:
    """Flip the pose horizontally; joint names are kept."""
    flipped: Dict[P, np.ndarray] = {}
    for joint, point in landmarks.items():
        values = np.array(point, dtype=np.float64)
        values[0] = -values[0]
        flipped[joint] = values
    return flipped


class PoseEmbedder:
    """Maps a landmark set to a translation and scale invariant feature array.

    The pose is centred on the hips and divided by the pose size, the larger of
    ``torso_size * torso_size_multiplier`` and the widest 2D reach from the hip
    centre. Features are the difference vectors in ``EMBEDDING_PAIRS``; a pair
    touching a missing joint yields a NaN row.
    """

    def __init__(self, torso_size_multiplier: float = 2.5, scale: float = 100.0) -> None:
        self.torso_size_multiplier = torso_size_multiplier
        self.scale = scale

    def embed(self, landmarks: LandmarkSet) -> np.ndarray:
        embedding = np.full(EMBEDDING_SHAPE, np.nan)
        points = self._normalize(to_array(landmarks))
        if points is None:
            return embedding
        for row, (start, end) in enumerate(EMBEDDING_PAIRS):
            embedding[row] = self._anchor(points, end) - self._anchor(points, start)
        return embedding

    def _normalize(self, points: np.ndarray) -> Optional[np.ndarray]:
        hips_center = self._anchor(points, HIPS)
        shoulders_center = self._anchor(points, SHOULDERS)
        if np.isnan(hips_center).any() or np.isnan(shoulders_center).any():
            return None
        points = points - hips_center
        # Size uses 2D only; z from estimators is too noisy.
        torso_size = float(np.linalg.norm(shoulders_center[:2] - hips_center[:2]))
        present = ~np.isnan(points).any(axis=1)
        max_distance = float(np.max(np.linalg.norm(points[present, :2], axis=1)))
        pose_size = max(torso_size * self.torso_size_multiplier, max_distance)
        if pose_size == 0:
            return None
        return points / pose_size * self.scale

    @staticmethod
    def _anchor(points: np.ndarray, anchor: Anchor) -> np.ndarray:
        if isinstance(anchor, tuple):
            return (points[anchor[0]] + points[anchor[1]]) * 0.5
        return points[anchor]
