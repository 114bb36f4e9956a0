from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, List, Mapping, Optional

from posecount.logic.geometry import PoseLandmark as P, landmark_angle
from posecount.utils.structures import LandmarkSet

PUSHUPS_DOWN = "pushups_down"
PUSHUPS_UP = "pushups_up"
SQUATS_DOWN = "squats_down"
SQUATS_UP = "squats_up"

DISPLAY_NAMES: Dict[str, str] = {
    SQUATS_UP: "Standing",
    SQUATS_DOWN: "Squats Down",
    PUSHUPS_DOWN: "Pushup Down",
    PUSHUPS_UP: "Pushup",
}

ARMS = frozenset(
    {P.LEFT_SHOULDER, P.LEFT_ELBOW, P.LEFT_WRIST, P.RIGHT_SHOULDER, P.RIGHT_ELBOW, P.RIGHT_WRIST}
)
TORSO_AND_THIGHS = frozenset(
    {P.LEFT_SHOULDER, P.LEFT_HIP, P.LEFT_KNEE, P.RIGHT_SHOULDER, P.RIGHT_HIP, P.RIGHT_KNEE}
)
TREE_POSE_JOINTS = frozenset(
    {
        P.LEFT_SHOULDER, P.LEFT_ELBOW, P.LEFT_HIP, P.LEFT_KNEE, P.LEFT_HEEL,
        P.RIGHT_SHOULDER, P.RIGHT_ELBOW, P.RIGHT_HIP, P.RIGHT_KNEE, P.RIGHT_HEEL,
    }
)
JUMPING_JACK_JOINTS = frozenset(
    {
        P.LEFT_SHOULDER, P.LEFT_ELBOW, P.LEFT_HIP, P.LEFT_HEEL,
        P.RIGHT_SHOULDER, P.RIGHT_ELBOW, P.RIGHT_HIP, P.RIGHT_HEEL,
    }
)
LEFT_LEG = frozenset({P.LEFT_HIP, P.LEFT_KNEE, P.LEFT_HEEL})
RIGHT_LEG = frozenset({P.RIGHT_HIP, P.RIGHT_KNEE, P.RIGHT_HEEL})

KNEE_PUSHUP_MAX_ANGLE = 110
PLANK_MAX_ELBOW_ANGLE = 95
CURL_MAX_ELBOW_ANGLE = 30
LEG_RAISE_MAX_HIP_ANGLE = 95
ARM_RAISE_MIN_ANGLE = 90
BENT_KNEE_ANGLE = 90
JUMPING_JACK_MIN_STANCE_ANGLE = 10


def _below(value: Optional[float], limit: float) -> bool:
    return value is not None and value < limit


def _above(value: Optional[float], limit: float) -> bool:
    return value is not None and value > limit


def _elbow_angle(lm: LandmarkSet, side: str) -> Optional[float]:
    return landmark_angle(lm, P[f"{side}_SHOULDER"], P[f"{side}_ELBOW"], P[f"{side}_WRIST"])


def _knee_angle(lm: LandmarkSet, side: str) -> Optional[float]:
    return landmark_angle(lm, P[f"{side}_HIP"], P[f"{side}_KNEE"], P[f"{side}_HEEL"])


def _arm_raise_angle(lm: LandmarkSet, side: str) -> Optional[float]:
    return landmark_angle(lm, P[f"{side}_ELBOW"], P[f"{side}_SHOULDER"], P[f"{side}_HIP"])


def _hip_angle(lm: LandmarkSet, side: str) -> Optional[float]:
    return landmark_angle(lm, P[f"{side}_SHOULDER"], P[f"{side}_HIP"], P[f"{side}_KNEE"])


def arms_raised(lm: LandmarkSet) -> bool:
    return _above(_arm_raise_angle(lm, "LEFT"), ARM_RAISE_MIN_ANGLE) and _above(
        _arm_raise_angle(lm, "RIGHT"), ARM_RAISE_MIN_ANGLE
    )


def knee_bent(lm: LandmarkSet, side: str) -> bool:
    return _below(_knee_angle(lm, side), KNEE_PUSHUP_MAX_ANGLE)


def is_tree_pose(lm: LandmarkSet) -> bool:
    if not TREE_POSE_JOINTS.issubset(lm):
        return False
    left = _knee_angle(lm, "LEFT")
    right = _knee_angle(lm, "RIGHT")
    one_leg_bent = (left < BENT_KNEE_ANGLE and right > BENT_KNEE_ANGLE) or (
        left > BENT_KNEE_ANGLE and right < BENT_KNEE_ANGLE
    )
    return arms_raised(lm) and one_leg_bent


def is_leg_raise(lm: LandmarkSet) -> bool:
    return _below(_hip_angle(lm, "LEFT"), LEG_RAISE_MAX_HIP_ANGLE) and _below(
        _hip_angle(lm, "RIGHT"), LEG_RAISE_MAX_HIP_ANGLE
    )


def is_plank(lm: LandmarkSet) -> bool:
    # A bent knee or a tree pose claims the push-up label first.
    if is_tree_pose(lm) or knee_bent(lm, "LEFT") or knee_bent(lm, "RIGHT"):
        return False
    return _below(_elbow_angle(lm, "LEFT"), PLANK_MAX_ELBOW_ANGLE) or _below(
        _elbow_angle(lm, "RIGHT"), PLANK_MAX_ELBOW_ANGLE
    )


def is_bicep_curl(lm: LandmarkSet) -> bool:
    return _below(_elbow_angle(lm, "LEFT"), CURL_MAX_ELBOW_ANGLE) or _below(
        _elbow_angle(lm, "RIGHT"), CURL_MAX_ELBOW_ANGLE
    )


def is_jumping_jack(lm: LandmarkSet) -> bool:
    stance = landmark_angle(lm, P.LEFT_HEEL, P.LEFT_HIP, P.RIGHT_HEEL)
    return arms_raised(lm) and _above(stance, JUMPING_JACK_MIN_STANCE_ANGLE)


@dataclass(frozen=True)
class OverlayRule:
    """Replace the label when the required joints are present and the predicate holds."""

    replacement: str
    required: FrozenSet[P]
    predicate: Callable[[LandmarkSet], bool]
    labels: Optional[FrozenSet[str]] = None

    def matches(self, label: str, landmarks: LandmarkSet) -> bool:
        if self.labels is not None and label not in self.labels:
            return False
        if not self.required.issubset(landmarks):
            return False
        return self.predicate(landmarks)


OVERLAY_RULES: List[OverlayRule] = [
    OverlayRule("Leg Raise", TORSO_AND_THIGHS, is_leg_raise),
    OverlayRule("Planks", ARMS, is_plank, frozenset({PUSHUPS_DOWN})),
    OverlayRule("Bicep Curls", ARMS, is_bicep_curl),
    OverlayRule("Vrikshasana", TREE_POSE_JOINTS, is_tree_pose),
    OverlayRule("Jumping Jacks", JUMPING_JACK_JOINTS, is_jumping_jack, frozenset({SQUATS_UP})),
    OverlayRule("Knee Push Up", LEFT_LEG, lambda lm: knee_bent(lm, "LEFT"), frozenset({PUSHUPS_DOWN})),
    OverlayRule("Knee Push Up", RIGHT_LEG, lambda lm: knee_bent(lm, "RIGHT"), frozenset({PUSHUPS_DOWN})),
]


def refine(
    label: str,
    landmarks: LandmarkSet,
    rules: Optional[List[OverlayRule]] = None,
    display_names: Optional[Mapping[str, str]] = None,
) -> str:
    """Return the display label for ``label`` after the angle overrides.

    Rules are tried in order and the first match wins; otherwise the label is
    mapped through ``display_names`` (unknown labels pass through unchanged).
    """
    for rule in OVERLAY_RULES if rules is None else rules:
        if rule.matches(label, landmarks):
            return rule.replacement
    names = DISPLAY_NAMES if display_names is None else display_names
    return names.get(label, label)
