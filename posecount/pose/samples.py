from __future__ import annotations

import math
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np
from loguru import logger

from posecount.logic.geometry import NUM_LANDMARKS, PoseLandmark
from posecount.utils.structures import LandmarkSet, PoseSample

SUPPORTED_DIMS = (3, 2)


def parse_landmark_values(values: Sequence[str], allow_missing: bool = False) -> Optional[LandmarkSet]:
    """Parse a flat coordinate list in PoseLandmark order.

    Accepts 2 or 3 values per joint. With ``allow_missing`` a joint whose
    tokens are all empty is left out of the result instead of failing.
    """
    dims = next((d for d in SUPPORTED_DIMS if len(values) == NUM_LANDMARKS * d), None)
    if dims is None:
        return None
    landmarks: Dict[PoseLandmark, np.ndarray] = {}
    for joint in PoseLandmark:
        tokens = [token.strip() for token in values[joint * dims:(joint + 1) * dims]]
        if allow_missing and not any(tokens):
            continue
        try:
            point = [float(token) for token in tokens]
        except ValueError:
            return None
        if not all(math.isfinite(v) for v in point):
            return None
        landmarks[joint] = np.array(point, dtype=np.float64)
    return landmarks


def parse_pose_sample(record: str, delimiter: str = ",") -> Optional[PoseSample]:
    """Parse one reference record, returning None when it is malformed.

    Layouts: ``label,coords...`` with 2 or 3 coordinates per joint, or
    ``name,label,coords...`` with 3 coordinates per joint.
    """
    tokens = [token.strip() for token in record.strip().split(delimiter)]
    name: Optional[str] = None
    if len(tokens) == NUM_LANDMARKS * 3 + 2:
        name, label, values = tokens[0], tokens[1], tokens[2:]
    else:
        label, values = tokens[0], tokens[1:]
    if not label:
        return None
    landmarks = parse_landmark_values(values)
    if landmarks is None:
        return None
    return PoseSample(label=label, landmarks=landmarks, name=name)


def parse_pose_samples(records: Iterable[str], delimiter: str = ",") -> Tuple[PoseSample, ...]:
    samples: List[PoseSample] = []
    skipped = 0
    for line_no, record in enumerate(records, start=1):
        if not record.strip():
            continue
        sample = parse_pose_sample(record, delimiter)
        if sample is None:
            skipped += 1
            logger.debug("Skipping malformed pose sample record at line {}", line_no)
            continue
        samples.append(sample)
    if skipped:
        logger.warning("Skipped {} malformed pose sample record(s)", skipped)
    return tuple(samples)


def to_record(sample: PoseSample, delimiter: str = ",") -> str:
    fields: List[str] = []
    if sample.name is not None:
        fields.append(sample.name)
    fields.append(sample.label)
    for joint in PoseLandmark:
        fields.extend(repr(float(v)) for v in sample.landmarks[joint])
    return delimiter.join(fields)


def load_pose_samples(path: str, delimiter: str = ",") -> Tuple[PoseSample, ...]:
    with open(path, "r", encoding="utf-8") as f:
        samples = parse_pose_samples(f, delimiter)
    logger.info("Loaded {} pose samples from {}", len(samples), path)
    return samples
