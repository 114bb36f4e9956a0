from __future__ import annotations

from typing import Dict, Optional, Sequence, Tuple

import numpy as np
from loguru import logger

from posecount.logic.embedding import PoseEmbedder, mirror
from posecount.utils.structures import ClassificationResult, LandmarkSet, PoseSample


class PoseClassifier:
    """k-NN pose classifier over an immutable reference index.

    Samples are filtered in two stages: the ``max_distance_top_k`` nearest by
    maximum per-dimension distance (drops outliers with one badly placed
    joint), then the ``k`` nearest of those by mean distance. Confidence of a
    class is its share of the ``k`` votes. The reference arrays are read-only,
    so one instance can serve several sessions.
    """

    def __init__(
        self,
        samples: Sequence[PoseSample],
        embedder: Optional[PoseEmbedder] = None,
        k: int = 10,
        max_distance_top_k: int = 30,
        axes_weights: Tuple[float, float, float] = (1.0, 1.0, 0.2),
    ) -> None:
        if k < 1 or max_distance_top_k < 1:
            raise ValueError(f"k and max_distance_top_k must be positive, got {k} and {max_distance_top_k}")
        self.samples: Tuple[PoseSample, ...] = tuple(samples)
        self.embedder = embedder or PoseEmbedder()
        self.k = k
        self.max_distance_top_k = max_distance_top_k
        self.axes_weights = np.asarray(axes_weights, dtype=np.float64)
        self.axes_weights.flags.writeable = False

        self.class_names: Tuple[str, ...] = tuple(dict.fromkeys(s.label for s in self.samples))
        self._labels = np.array([s.label for s in self.samples], dtype=object)
        self._embeddings = np.array([self.embedder.embed(s.landmarks) for s in self.samples], dtype=np.float64)
        self._embeddings.flags.writeable = False
        self._labels.flags.writeable = False
        logger.info(
            "Pose classifier ready: {} samples, classes={}, k={}",
            len(self.samples),
            list(self.class_names),
            self.k,
        )

    def classify(self, landmarks: LandmarkSet) -> ClassificationResult:
        result = ClassificationResult()
        if not landmarks or not self.samples:
            return result
        embedding = self.embedder.embed(landmarks)
        valid = ~np.isnan(embedding)
        if not valid.any():
            return result
        flipped = self.embedder.embed(mirror(landmarks))

        max_distances, mean_distances = self._distances(embedding, valid)
        flipped_max, flipped_mean = self._distances(flipped, valid)
        max_distances = np.minimum(max_distances, flipped_max)
        mean_distances = np.minimum(mean_distances, flipped_mean)

        # Stable sorts keep ties in sample order.
        candidates = np.argsort(max_distances, kind="stable")[: self.max_distance_top_k]
        order = np.lexsort((candidates, mean_distances[candidates]))
        nearest = candidates[order][: self.k]

        votes: Dict[str, int] = {}
        for label in self._labels[nearest]:
            votes[label] = votes.get(label, 0) + 1
        for class_name in self.class_names:
            if class_name in votes:
                result.put_confidence(class_name, votes[class_name] / self.k)
        return result

    def _distances(self, embedding: np.ndarray, valid: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        diff = np.abs(self._embeddings - np.where(valid, embedding, 0.0)) * self.axes_weights
        # Undefined query dimensions are excluded, never filled in.
        diff = np.where(valid, diff, 0.0)
        flat = diff.reshape(len(self.samples), -1)
        max_distances = flat.max(axis=1)
        mean_distances = flat.sum(axis=1) / np.count_nonzero(valid)
        return max_distances, mean_distances
